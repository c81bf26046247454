"""
bobble Core Module.

Core Types & Graph:
    - ModuleNode, CutKey: Graph and cut data structures
    - ModuleGraph, build_graph: Immutable module graph
    - CutSet: Observable set of user cuts
    - ComputationScheduler: Stale-while-revalidate background computations

The AnalysisSession lives in ``bobble.core.session``; it depends on
``bobble.analysis`` and is not re-exported here.
"""

from .cuts import CutSet
from .graph import ModuleGraph, build_graph
from .scheduler import ComputationScheduler
from .types import CutKey, ImpactResult, ModuleNode, NodeId, ReachabilityResult, ScheduledValue

__all__ = [
    "ComputationScheduler",
    "CutKey",
    "CutSet",
    "ImpactResult",
    "ModuleGraph",
    "ModuleNode",
    "NodeId",
    "ReachabilityResult",
    "ScheduledValue",
    "build_graph",
]
