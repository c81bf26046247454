"""
Reachability under cuts.

Walks the module graph breadth-first from its roots, skipping cut edges and
pruning cut modules. A module is reachable if at least one uncut path leads
to it from a root. The walk is linear in the size of the graph and is
re-run in full after every change to the cut set.
"""

from collections import deque
from typing import Callable, Container, List, Optional

from ..core.graph import ModuleGraph
from ..core.types import CutKey, NodeId, ReachabilityResult

CutPredicate = Callable[[NodeId], bool]


def compute_reachability(
    graph: ModuleGraph,
    cuts: Container[CutKey],
    extra_cut: Optional[CutPredicate] = None,
) -> ReachabilityResult:
    """
    Compute the modules reachable from the graph roots.

    Args:
        graph: The module graph.
        cuts: Cut keys in effect, normally a ``CutSet.snapshot()``.
        extra_cut: Additional hypothetical node cut, used for counterfactual
            queries without touching the real cut set.

    Returns:
        ReachabilityResult: Reachable ids and their total size.
    """
    visited = set(graph.roots)
    queue = deque(graph.roots)
    order: List[NodeId] = []
    size = 0

    while queue:
        node_id = queue.popleft()

        if (extra_cut is not None and extra_cut(node_id)) or CutKey.node(node_id) in cuts:
            continue

        node = graph.node(node_id)
        order.append(node_id)
        size += node.size

        for child_id in node.dependencies:
            if CutKey.edge(node_id, child_id) in cuts:
                continue
            if child_id not in visited:
                visited.add(child_id)
                queue.append(child_id)

    return ReachabilityResult(
        reachable=frozenset(order),
        reachable_size=size,
        order=tuple(order),
    )

