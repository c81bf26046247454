"""
Impact Analysis.

Answers "how much smaller would the bundle be if this module were cut too?"
by running a full reachability pass with one extra hypothetical node cut.
Each query is a complete graph walk, so interactive callers route them
through the ComputationScheduler (see ``AnalysisSession.compute_impact``).
"""

from typing import Container, Iterable, List, Optional

from ..core.graph import ModuleGraph
from ..core.types import CutKey, ImpactResult, NodeId
from .reachability import compute_reachability


def compute_impact(
    graph: ModuleGraph,
    cuts: Container[CutKey],
    current_reachable_size: int,
    target: NodeId,
) -> ImpactResult:
    """
    Size saved by cutting ``target`` in addition to ``cuts``.

    Zero when the target is already unreachable or cut.
    """
    projected = compute_reachability(graph, cuts, lambda node_id: node_id == target)
    return ImpactResult(
        node_id=target,
        saved_size=current_reachable_size - projected.reachable_size,
        projected_size=projected.reachable_size,
    )


class ImpactCalculator:
    """
    Scores single-module counterfactuals against a fixed cut snapshot.
    """

    def __init__(
        self,
        graph: ModuleGraph,
        cuts: Container[CutKey],
        current_reachable_size: Optional[int] = None,
    ):
        self.graph = graph
        self.cuts = cuts
        if current_reachable_size is None:
            current_reachable_size = compute_reachability(graph, cuts).reachable_size
        self.current_reachable_size = current_reachable_size

    def calculate(self, target: NodeId) -> ImpactResult:
        return compute_impact(self.graph, self.cuts, self.current_reachable_size, target)

    def rank(self, node_ids: Iterable[NodeId], top_n: int = 10) -> List[ImpactResult]:
        """
        Score each candidate and return the ``top_n`` largest savings.

        Ties are broken by module name so the order is stable.
        """
        scored = [self.calculate(node_id) for node_id in node_ids]
        return sort_impacts(self.graph, scored)[:top_n]


def sort_impacts(graph: ModuleGraph, results: Iterable[ImpactResult]) -> List[ImpactResult]:
    """Largest saving first, then by module name."""
    return sorted(results, key=lambda r: (-r.saved_size, graph.node(r.node_id).name))
