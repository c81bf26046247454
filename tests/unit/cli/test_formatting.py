"""Unit tests for text output helpers."""

import pytest

from bobble.cli.formatting import (
    TreeEntry,
    collect_visible,
    format_node_label,
    format_size,
    impact_hue,
    impact_style,
    render_tree,
)
from bobble.core.scheduler import ComputationScheduler
from bobble.core.session import AnalysisSession
from bobble.core.types import CutKey, ImpactResult, ScheduledValue


@pytest.fixture
def session(scenario_graph, manual_executor):
    return AnalysisSession(scenario_graph, ComputationScheduler(executor=manual_executor))


class TestFormatSize:
    @pytest.mark.parametrize("size,expected", [
        (0, "0B"),
        (512, "512B"),
        (1024, "1KB"),
        (1536, "1.5KB"),
        (1024 * 1024 * 2.25, "2.25MB"),
    ])
    def test_format_size(self, size, expected):
        assert format_size(size) == expected


class TestImpactColour:
    def test_hue_range(self):
        assert impact_hue(0, 100) == 120
        assert impact_hue(100, 100) == 0
        assert impact_hue(10, 0) == 120

    def test_hue_falls_steeply(self):
        # Half the bundle is already deep in the red
        assert impact_hue(50, 100) == 4

    def test_stale_values_are_dimmed(self):
        assert impact_style(10, 100, fresh=False).dim is True
        assert not impact_style(10, 100, fresh=True).dim


class TestCollectVisible:
    def test_every_path_is_a_row(self, session):
        entries = collect_visible(session, max_depth=3)
        assert [(e.depth, e.node_id, e.parent_id) for e in entries] == [
            (0, 1, None),
            (1, 2, 1),
            (2, 4, 2),
            (1, 3, 1),
            (2, 4, 3),
        ]

    def test_depth_and_row_limits(self, session):
        assert [e.node_id for e in collect_visible(session, max_depth=1)] == [1, 2, 3]
        assert [e.node_id for e in collect_visible(session, max_depth=3, max_rows=2)] == [1, 2]

    def test_cycles_are_shown_once(self, make_graph, manual_executor):
        graph = make_graph([("r", "a"), ("a", "b"), ("b", "a")], {"r": 1, "a": 1, "b": 1})
        session = AnalysisSession(graph, ComputationScheduler(executor=manual_executor))

        entries = collect_visible(session, max_depth=10)

        assert [e.node_id for e in entries] == ["r", "a", "b", "a"]
        assert [e.recursive for e in entries] == [False, False, False, True]


class TestLabels:
    def test_cut_module(self, session):
        session.toggle_cut(CutKey.node(2))
        label = format_node_label(session, TreeEntry(depth=1, node_id=2, parent_id=1))
        assert label.plain == "m2 [0]"

    def test_edge_cut_marks_only_that_row(self, session):
        session.toggle_cut(CutKey.edge(2, 4))
        via_cut = format_node_label(session, TreeEntry(depth=2, node_id=4, parent_id=2))
        via_other = format_node_label(session, TreeEntry(depth=2, node_id=4, parent_id=3))
        assert "strike" in str(via_cut.style)
        assert "strike" not in str(via_other.style)
        assert via_other.plain == "m4 [1]"

    def test_impact_placeholder_and_value(self, session):
        entry = TreeEntry(depth=0, node_id=1, parent_id=None)

        pending = format_node_label(session, entry, ScheduledValue(None, False))
        assert pending.plain == "m1 [1] …"

        done = format_node_label(session, entry, ScheduledValue(ImpactResult(1, 55, 0), True))
        assert done.plain == "m1 [1] +55B"

    def test_render_tree_nests_rows(self, session):
        entries = collect_visible(session, max_depth=3)
        tree = render_tree(session, entries, {}, "4 reachable")

        assert tree.label == "4 reachable"
        assert len(tree.children) == 1
        root = tree.children[0]
        assert [child.label.plain for child in root.children] == ["m2 [1]", "m3 [1]"]
        assert root.children[0].children[0].label.plain == "m4 [1]"


class TestDeepTrees:
    def test_deep_chain_does_not_recurse(self, make_graph, manual_executor):
        size = 3000
        graph = make_graph([(i, i + 1) for i in range(size - 1)], {i: 1 for i in range(size)})
        session = AnalysisSession(graph, ComputationScheduler(executor=manual_executor))

        entries = collect_visible(session, max_depth=size)

        assert len(entries) == size
        assert entries[-1].depth == size - 1
        assert [e.node_id for e in collect_visible(session, max_depth=size, max_rows=5)] == [0, 1, 2, 3, 4]
