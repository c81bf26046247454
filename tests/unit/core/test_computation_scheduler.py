"""Unit tests for the stale-while-revalidate ComputationScheduler."""

import logging
import threading
from unittest.mock import MagicMock

import pytest

from bobble.core.scheduler import ComputationScheduler


@pytest.fixture
def scheduler(manual_executor):
    return ComputationScheduler(executor=manual_executor)


class TestRequest:
    def test_first_request_returns_placeholder(self, scheduler, manual_executor):
        current = scheduler.request("slot", "a", lambda: 1, placeholder="…")

        assert current.value == "…"
        assert current.is_fresh is False
        assert len(manual_executor.jobs) == 1

    def test_same_identity_is_scheduled_once(self, scheduler, manual_executor):
        scheduler.request("slot", "a", lambda: 1)
        scheduler.request("slot", "a", lambda: 1)
        assert len(manual_executor.jobs) == 1

    def test_adopted_value_is_fresh(self, scheduler, manual_executor):
        scheduler.request("slot", "a", lambda: 1)
        manual_executor.run_all()

        current = scheduler.request("slot", "a", lambda: 1)
        assert current.value == 1
        assert current.is_fresh is True
        assert len(manual_executor.jobs) == 1

    def test_new_identity_serves_stale_value(self, scheduler, manual_executor):
        scheduler.request("slot", "a", lambda: 1)
        manual_executor.run_all()

        current = scheduler.request("slot", "b", lambda: 2)
        assert current.value == 1
        assert current.is_fresh is False
        assert len(manual_executor.jobs) == 2

        manual_executor.run_all()
        current = scheduler.request("slot", "b", lambda: 2)
        assert current.value == 2
        assert current.is_fresh is True

    def test_slots_are_independent(self, scheduler, manual_executor):
        scheduler.request("x", "a", lambda: "x-value")
        scheduler.request("y", "a", lambda: "y-value")
        manual_executor.run_all()

        assert scheduler.peek("x").value == "x-value"
        assert scheduler.peek("y").value == "y-value"


class TestOutOfOrderCompletion:
    def test_older_result_finishing_last_is_discarded(self, scheduler, manual_executor):
        scheduler.request("slot", "first", lambda: "first")
        scheduler.request("slot", "second", lambda: "second")

        manual_executor.run(1)
        manual_executor.run(0)

        current = scheduler.request("slot", "second", lambda: "second")
        assert current.value == "second"
        assert current.is_fresh is True

    def test_older_result_finishing_first_is_discarded(self, scheduler, manual_executor):
        scheduler.request("slot", "first", lambda: "first")
        scheduler.request("slot", "second", lambda: "second")

        manual_executor.run(0)
        assert scheduler.peek("slot", placeholder=None).value is None

        manual_executor.run(1)
        assert scheduler.peek("slot").value == "second"

    def test_returning_to_adopted_identity_supersedes_in_flight_run(self, scheduler, manual_executor):
        scheduler.request("slot", "a", lambda: "a")
        manual_executor.run_all()

        scheduler.request("slot", "b", lambda: "b")
        current = scheduler.request("slot", "a", lambda: "a")
        assert current.value == "a"
        assert current.is_fresh is True

        manual_executor.run_all()
        current = scheduler.request("slot", "a", lambda: "a")
        assert current.value == "a"
        assert current.is_fresh is True

    def test_generation_increases_per_new_identity(self, scheduler):
        g1 = scheduler.request("slot", "a", lambda: 1).generation
        g2 = scheduler.request("slot", "b", lambda: 2).generation
        g3 = scheduler.request("slot", "b", lambda: 2).generation
        assert g1 < g2 == g3


class TestFailures:
    def test_failed_computation_is_not_adopted(self, scheduler, manual_executor, caplog):
        def explode():
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="bobble.core.scheduler"):
            scheduler.request("slot", "a", explode, placeholder="…")
            manual_executor.run_all()

        future = manual_executor.jobs[0][0]
        assert isinstance(future.exception(), RuntimeError)
        assert "failed" in caplog.text

        current = scheduler.request("slot", "a", explode, placeholder="…")
        assert current.value == "…"
        assert current.is_fresh is False
        assert len(manual_executor.jobs) == 1

    def test_failure_keeps_previous_value(self, scheduler, manual_executor):
        scheduler.request("slot", "a", lambda: 1)
        manual_executor.run_all()

        scheduler.request("slot", "b", lambda: 1 / 0)
        manual_executor.run_all()

        current = scheduler.peek("slot")
        assert current.value == 1
        assert current.is_fresh is False


class TestLifecycle:
    def test_clear_drops_values_and_in_flight_runs(self, scheduler, manual_executor):
        scheduler.request("done", "a", lambda: 1)
        manual_executor.run_all()
        scheduler.request("running", "a", lambda: 2)

        scheduler.clear()
        manual_executor.run_all()

        assert scheduler.peek("done").value is None
        assert scheduler.peek("running").value is None

    def test_listener_notified_on_adoption_only(self, scheduler, manual_executor):
        listener = MagicMock()
        unsubscribe = scheduler.subscribe(listener)

        scheduler.request("slot", "first", lambda: 1)
        scheduler.request("slot", "second", lambda: 2)
        manual_executor.run_all()

        listener.assert_called_once_with("slot")

        unsubscribe()
        scheduler.request("slot", "third", lambda: 3)
        manual_executor.run_all()
        listener.assert_called_once()

    def test_pending_count(self, scheduler, manual_executor):
        scheduler.request("x", "a", lambda: 1)
        scheduler.request("y", "a", lambda: 1)
        assert scheduler.pending_count == 2

        manual_executor.run(0)
        assert scheduler.pending_count == 1

    def test_join_times_out_when_work_never_runs(self, scheduler):
        scheduler.request("slot", "a", lambda: 1)
        assert scheduler.join(timeout=0.01) is False

    def test_default_thread_pool(self):
        scheduler = ComputationScheduler(max_workers=2)
        try:
            scheduler.request("slot", "a", lambda: sum(range(1000)))
            assert scheduler.join(timeout=5) is True

            current = scheduler.peek("slot")
            assert current.value == sum(range(1000))
            assert current.is_fresh is True
        finally:
            scheduler.shutdown()

    def test_shutdown_cancels_queued_runs(self, scheduler, manual_executor):
        scheduler.request("started", "a", lambda: 1)
        scheduler.request("queued", "a", lambda: 2)
        manual_executor.run(0)

        scheduler.shutdown(wait=False, cancel_futures=True)
        manual_executor.run_all()

        assert not manual_executor.jobs[0][0].cancelled()
        assert manual_executor.jobs[1][0].cancelled()
        assert scheduler.peek("queued").value is None
        assert scheduler.pending_count == 0

    def test_shutdown_keeps_queued_runs_by_default(self, scheduler, manual_executor):
        scheduler.request("slot", "a", lambda: 1)
        scheduler.shutdown(wait=False)
        manual_executor.run_all()
        assert scheduler.peek("slot").value == 1

    def test_owned_pool_drops_queued_runs_on_shutdown(self):
        release = threading.Event()
        scheduler = ComputationScheduler(max_workers=1)
        scheduler.request("blocker", "a", release.wait)
        for i in range(5):
            scheduler.request(("queued", i), "a", lambda: "ran")

        scheduler.shutdown(wait=False, cancel_futures=True)
        release.set()

        assert all(scheduler.peek(("queued", i)).value is None for i in range(5))

    def test_injected_executor_is_not_shut_down(self):
        executor = MagicMock()
        scheduler = ComputationScheduler(executor=executor)
        scheduler.shutdown()
        executor.shutdown.assert_not_called()
