"""
Deferred computation with stale-while-revalidate semantics.

Expensive pure computations (impact queries) run on an executor instead of
the interactive path. Each consumer owns a named slot. A request always
answers immediately with whatever the slot holds, tagged fresh or stale, and
schedules a new run when the computation's identity has changed.

Superseded runs are not cancelled; only ``shutdown(cancel_futures=True)``
drops runs that have not started. Each run carries the slot generation it was
scheduled under, and its result is adopted only if that generation is still
the latest one requested for the slot. Results of superseded runs are
dropped, whatever order the runs finish in.
"""

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional, Set

from .types import ScheduledValue

logger = logging.getLogger(__name__)

AdoptListener = Callable[[Hashable], None]

_UNSET = object()


@dataclass
class _Slot:
    generation: int = 0
    requested_identity: Any = _UNSET
    value: Any = None
    value_identity: Any = _UNSET

    @property
    def has_value(self) -> bool:
        return self.value_identity is not _UNSET


class ComputationScheduler:
    """
    Generation-gated scheduler for argument-free pure computations.

    Example:
        ```python
        scheduler = ComputationScheduler()
        current = scheduler.request("impact:42", (graph, 42, generation), calculate)
        if current.is_fresh:
            show(current.value)
        ```
    """

    def __init__(self, executor: Optional[Executor] = None, max_workers: int = 2):
        """
        Args:
            executor: Executor used to run computations. A thread pool with
                ``max_workers`` threads is created lazily if omitted.
            max_workers: Size of the default thread pool.
        """
        self._executor = executor
        self._owns_executor = executor is None
        self._max_workers = max_workers
        self._lock = threading.Lock()
        self._slots: Dict[Hashable, _Slot] = {}
        self._pending: Set[Future] = set()
        self._listeners: List[AdoptListener] = []

    def request(
        self,
        slot: Hashable,
        identity: Hashable,
        fn: Callable[[], Any],
        placeholder: Any = None,
    ) -> ScheduledValue:
        """
        Return the slot's current value and schedule ``fn`` if needed.

        Args:
            slot: Name of the consumer's slot.
            identity: Identity of the computation (its inputs). ``fn`` is only
                scheduled when this differs from the last requested identity.
            fn: Pure computation producing the value.
            placeholder: Returned as the value while nothing was adopted yet.

        Returns:
            ScheduledValue: ``is_fresh`` is True only when the adopted value
            was computed for ``identity``.
        """
        schedule = False
        with self._lock:
            state = self._slots.get(slot)
            if state is None:
                state = self._slots[slot] = _Slot()

            if state.has_value and state.value_identity == identity:
                if state.requested_identity != identity:
                    # Supersede whatever run was scheduled for another identity.
                    state.generation += 1
                    state.requested_identity = identity
                return ScheduledValue(state.value, True, state.generation)

            if state.requested_identity is _UNSET or state.requested_identity != identity:
                state.generation += 1
                state.requested_identity = identity
                schedule = True

            generation = state.generation
            current = ScheduledValue(state.value if state.has_value else placeholder, False, generation)

        if schedule:
            future = self._get_executor().submit(self._run, slot, state, generation, identity, fn)
            with self._lock:
                self._pending.add(future)
            logger.debug(f"Scheduled {slot!r} generation {generation}")
        return current

    def peek(self, slot: Hashable, placeholder: Any = None) -> ScheduledValue:
        """Current slot content without scheduling anything."""
        with self._lock:
            state = self._slots.get(slot)
            if state is None or not state.has_value:
                return ScheduledValue(placeholder, False, state.generation if state else 0)
            fresh = state.value_identity == state.requested_identity
            return ScheduledValue(state.value, fresh, state.generation)

    def subscribe(self, listener: AdoptListener) -> Callable[[], None]:
        """
        Register a callback run (on the worker thread) after each adoption.

        Returns:
            Callable: Call it to unsubscribe.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def pending_count(self) -> int:
        with self._lock:
            self._pending = {f for f in self._pending if not f.done()}
            return len(self._pending)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every in-flight computation, including ones scheduled while
        waiting.

        Returns:
            bool: True if nothing is left pending.
        """
        while True:
            with self._lock:
                self._pending = {f for f in self._pending if not f.done()}
                pending = set(self._pending)
            if not pending:
                return True
            _, not_done = wait(pending, timeout=timeout)
            if not_done:
                return False

    def clear(self) -> None:
        """
        Forget every slot. Runs still in flight finish but are never adopted.
        """
        with self._lock:
            self._slots.clear()

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """
        Stop the scheduler's executor.

        Args:
            wait: Block until running computations finish.
            cancel_futures: Cancel computations that have not started yet,
                whether or not the executor is owned by the scheduler.
        """
        with self._lock:
            executor, owned = self._executor, self._owns_executor
            if owned:
                self._executor = None
            pending = set(self._pending) if cancel_futures else set()

        cancelled = sum(1 for future in pending if future.cancel())
        if cancelled:
            logger.debug(f"Cancelled {cancelled} queued computations")
        if owned and executor is not None:
            executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def _get_executor(self) -> Executor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="bobble-compute",
                )
            return self._executor

    def _run(self, slot: Hashable, state: _Slot, generation: int, identity: Any, fn: Callable[[], Any]) -> Any:
        try:
            value = fn()
        except Exception:
            logger.exception(f"Computation for {slot!r} (generation {generation}) failed")
            raise

        with self._lock:
            if self._slots.get(slot) is not state or state.generation != generation:
                logger.debug(
                    f"Discarding stale result for {slot!r}: generation {generation}, "
                    f"latest {state.generation}"
                )
                return value
            state.value = value
            state.value_identity = identity

        logger.debug(f"Adopted {slot!r} generation {generation}")
        for listener in list(self._listeners):
            listener(slot)
        return value
