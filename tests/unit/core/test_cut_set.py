"""Unit tests for CutSet."""

from unittest.mock import MagicMock

from bobble.core.cuts import CutSet
from bobble.core.types import CutKey


class TestCutSet:
    def test_toggle(self):
        cuts = CutSet()
        key = CutKey.node(1)

        assert cuts.toggle(key) is True
        assert cuts.is_cut(key)
        assert key in cuts
        assert len(cuts) == 1

        assert cuts.toggle(key) is False
        assert not cuts.is_cut(key)
        assert len(cuts) == 0

    def test_every_mutation_bumps_generation(self):
        cuts = CutSet()
        cuts.toggle(CutKey.node(1))
        cuts.toggle(CutKey.edge(1, 2))
        cuts.toggle(CutKey.node(1))
        assert cuts.generation == 3

    def test_idempotent_add_and_discard_do_not_notify(self):
        cuts = CutSet()
        listener = MagicMock()
        cuts.subscribe(listener)

        cuts.add(CutKey.node(1))
        cuts.add(CutKey.node(1))
        cuts.discard(CutKey.node(2))
        cuts.discard(CutKey.node(1))
        cuts.clear()

        assert listener.call_count == 2
        assert cuts.generation == 2

    def test_listener_sees_new_state(self):
        cuts = CutSet()
        seen = []
        cuts.subscribe(lambda c: seen.append(set(c)))

        cuts.toggle(CutKey.node(1))
        cuts.toggle(CutKey.node(2))

        assert seen == [{CutKey.node(1)}, {CutKey.node(1), CutKey.node(2)}]

    def test_unsubscribe(self):
        cuts = CutSet()
        listener = MagicMock()
        unsubscribe = cuts.subscribe(listener)
        unsubscribe()
        unsubscribe()

        cuts.toggle(CutKey.node(1))
        listener.assert_not_called()

    def test_snapshot_is_stable_until_mutation(self):
        cuts = CutSet()
        cuts.toggle(CutKey.node(1))
        first = cuts.snapshot()

        assert cuts.snapshot() is first

        cuts.toggle(CutKey.node(2))
        assert first == frozenset({CutKey.node(1)})
        assert cuts.snapshot() == frozenset({CutKey.node(1), CutKey.node(2)})

    def test_clear(self):
        cuts = CutSet()
        cuts.toggle(CutKey.node(1))
        cuts.toggle(CutKey.edge(1, 2))
        cuts.clear()
        assert len(cuts) == 0
        assert cuts.snapshot() == frozenset()
