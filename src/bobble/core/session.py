"""
Analysis Session.

Owns the state of one exploration: the module graph, the user's cut set,
the current reachability result and the scheduler caches for impact
queries. Loading a new report means calling ``reset`` with the new graph,
which starts from an empty cut set and drops every cached impact.

The query surface is pull-based: callers read counts and sizes whenever they
like and use ``get_recomputed_count`` to tell whether anything changed.
"""

import logging
from typing import Optional

from ..analysis.impact import compute_impact
from ..analysis.reachability import compute_reachability
from .cuts import CutSet
from .graph import ModuleGraph
from .scheduler import ComputationScheduler
from .types import CutKey, ImpactResult, NodeId, ReachabilityResult, ScheduledValue

logger = logging.getLogger(__name__)


class AnalysisSession:
    """
    Session-scoped reachability and impact state.

    Example:
        ```python
        session = AnalysisSession(graph)
        session.toggle_cut(CutKey.node("./src/big-lib.js"))
        print(session.get_reachable_size())

        impact = session.compute_impact(node_id)
        if impact.is_fresh:
            print(impact.value.saved_size)
        ```
    """

    def __init__(
        self,
        graph: Optional[ModuleGraph] = None,
        scheduler: Optional[ComputationScheduler] = None,
    ):
        self.scheduler = scheduler or ComputationScheduler()
        self._graph: Optional[ModuleGraph] = None
        self._cuts = CutSet()
        self._unsubscribe = None
        self._reachability = ReachabilityResult(reachable=frozenset(), reachable_size=0)
        self._recomputed_count = 0
        if graph is not None:
            self.reset(graph)

    @property
    def graph(self) -> ModuleGraph:
        if self._graph is None:
            raise RuntimeError("No graph loaded in this session")
        return self._graph

    @property
    def cuts(self) -> CutSet:
        return self._cuts

    @property
    def reachability(self) -> ReachabilityResult:
        return self._reachability

    def reset(self, graph: ModuleGraph) -> None:
        """Start over on a new graph with no cuts and no cached impacts."""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._graph = graph
        self._cuts = CutSet()
        self._unsubscribe = self._cuts.subscribe(lambda _cuts: self._recompute())
        self.scheduler.clear()
        self._recompute()

    def toggle_cut(self, key: CutKey) -> bool:
        """Toggle a cut key. Reachability is up to date when this returns."""
        return self._cuts.toggle(key)

    def is_cut(self, key: CutKey) -> bool:
        return self._cuts.is_cut(key)

    def get_reachable_count(self, node_id: NodeId) -> int:
        return 1 if node_id in self._reachability else 0

    def get_reachable_module_count(self) -> int:
        return self._reachability.reachable_count

    def get_reachable_size(self) -> int:
        return self._reachability.reachable_size

    def get_recomputed_count(self) -> int:
        return self._recomputed_count

    def compute_impact(self, node_id: NodeId) -> ScheduledValue:
        """
        Impact of additionally cutting ``node_id``, stale-while-revalidate.

        The computation is pinned to the cut snapshot and reachable size at
        the time of the call; it is only adopted if no newer request for the
        same module arrived meanwhile.
        """
        graph = self.graph
        cuts = self._cuts.snapshot()
        current_size = self._reachability.reachable_size
        identity = (graph, node_id, self._recomputed_count)

        def calculate() -> ImpactResult:
            return compute_impact(graph, cuts, current_size, node_id)

        return self.scheduler.request(("impact", node_id), identity, calculate)

    def close(self) -> None:
        """Stop background work; impact runs that have not started are dropped."""
        self.scheduler.shutdown(wait=False, cancel_futures=True)

    def _recompute(self) -> None:
        self._reachability = compute_reachability(self.graph, self._cuts.snapshot())
        self._recomputed_count += 1
        logger.debug(
            f"Recomputed reachability #{self._recomputed_count}: "
            f"{self._reachability.reachable_count} modules, {self._reachability.reachable_size} bytes"
        )
