"""
Module graph built from a build report.

The graph is immutable once built. It keeps:
- ModuleNode records keyed by their opaque id.
- The root set: modules with no reason inside the selected module set.
- A rustworkx mirror of the edges for structural queries (descendants,
  ancestors, cycle detection).

Reachability under cuts is not answered here; see
``bobble.analysis.reachability``.
"""

import logging
from collections import defaultdict
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

import rustworkx as rx

from .types import ModuleNode, NodeId

logger = logging.getLogger(__name__)

ParentsFn = Callable[[NodeId], Iterable[NodeId]]
NodeInfoFn = Callable[[NodeId], Mapping[str, Any]]


class ModuleGraph:
    """
    Read-only dependency graph of build modules.

    Safe for unsynchronized concurrent reads. Use ``build_graph`` to create
    one; the constructor expects already-linked nodes.
    """

    def __init__(self, nodes: Dict[NodeId, ModuleNode], roots: Tuple[NodeId, ...]):
        self._nodes: Dict[NodeId, ModuleNode] = dict(nodes)
        self._roots = tuple(roots)
        self._graph = rx.PyDiGraph()
        self._id_to_idx: Dict[NodeId, int] = {}
        self._idx_to_id: Dict[int, NodeId] = {}
        self._ids_by_text: Dict[str, NodeId] = {}
        self._ids_by_name: Dict[str, List[NodeId]] = defaultdict(list)
        self._edge_count = 0

        for node_id, node in self._nodes.items():
            idx = self._graph.add_node(node_id)
            self._id_to_idx[node_id] = idx
            self._idx_to_id[idx] = node_id
            self._ids_by_text.setdefault(str(node_id), node_id)
            self._ids_by_name[node.name].append(node_id)

        for node_id, node in self._nodes.items():
            u_idx = self._id_to_idx[node_id]
            for child_id in node.dependencies:
                self._graph.add_edge(u_idx, self._id_to_idx[child_id], None)
                self._edge_count += 1

        self._total_size = sum(node.size for node in self._nodes.values())

    @property
    def nodes(self) -> Mapping[NodeId, ModuleNode]:
        return MappingProxyType(self._nodes)

    @property
    def roots(self) -> Tuple[NodeId, ...]:
        return self._roots

    def node(self, node_id: NodeId) -> ModuleNode:
        """Retrieve a node, raising ``KeyError`` for unknown ids."""
        return self._nodes[node_id]

    def get_node(self, node_id: NodeId) -> Optional[ModuleNode]:
        """Retrieve a node by ID."""
        return self._nodes.get(node_id)

    def has_node(self, node_id: NodeId) -> bool:
        return node_id in self._nodes

    def has_edge(self, parent_id: NodeId, child_id: NodeId) -> bool:
        if parent_id not in self._id_to_idx or child_id not in self._id_to_idx:
            return False
        return self._graph.has_edge(self._id_to_idx[parent_id], self._id_to_idx[child_id])

    def dependencies(self, node_id: NodeId) -> Tuple[NodeId, ...]:
        return self._nodes[node_id].dependencies

    def reasons(self, node_id: NodeId) -> Tuple[NodeId, ...]:
        return self._nodes[node_id].reasons

    def iter_nodes(self) -> Iterator[ModuleNode]:
        return iter(self._nodes.values())

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return self._edge_count

    @property
    def total_size(self) -> int:
        return self._total_size

    def get_descendants(self, node_id: NodeId) -> Set[NodeId]:
        """All ids transitively enabled by node_id, ignoring cuts."""
        if node_id not in self._id_to_idx:
            return set()
        indices = rx.descendants(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in indices}

    def get_ancestors(self, node_id: NodeId) -> Set[NodeId]:
        """All ids that transitively cause node_id to be included."""
        if node_id not in self._id_to_idx:
            return set()
        indices = rx.ancestors(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in indices}

    def has_cycles(self) -> bool:
        return not rx.is_directed_acyclic_graph(self._graph)

    def resolve_node_id(self, text: str) -> Optional[NodeId]:
        """
        Map user input to a node id.

        Tries, in order: the textual form of an id, an exact module name,
        then the first module whose name contains the text.
        """
        if text in self._ids_by_text:
            return self._ids_by_text[text]

        named = self._ids_by_name.get(text)
        if named:
            return named[0]

        for node in self._nodes.values():
            if text in node.name:
                return node.id
        return None

    def get_stats(self) -> Dict[str, Any]:
        orphans = len([n for n in self._graph.node_indices()
                       if self._graph.in_degree(n) == 0 and self._graph.out_degree(n) == 0])
        return {
            "total_nodes": self.node_count,
            "total_edges": self.edge_count,
            "roots": len(self._roots),
            "total_size": self._total_size,
            "has_cycles": self.has_cycles(),
            "orphans": orphans,
            "backend": "rustworkx",
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roots": list(self._roots),
            "nodes": [node.model_dump(exclude={"payload"}) for node in self.iter_nodes()],
            "stats": self.get_stats(),
        }


def build_graph(
    node_ids: Iterable[NodeId],
    get_parents: ParentsFn,
    get_node_info: NodeInfoFn,
) -> ModuleGraph:
    """
    Build a ModuleGraph from the selected module ids.

    Parents outside ``node_ids`` are dropped; a module whose parents all lie
    outside the selection is a root. Cycles are kept as-is.

    Args:
        node_ids: Candidate module ids (e.g. all modules of the chosen chunks).
        get_parents: Returns the parent ids recorded for a module.
        get_node_info: Returns ``{"name", "size", ...}`` for a module. Extra
            keys are kept as the node payload.

    Returns:
        ModuleGraph: The immutable graph.
    """
    ids = list(dict.fromkeys(node_ids))
    selected = set(ids)
    roots: Dict[NodeId, None] = dict.fromkeys(ids)
    dependencies: Dict[NodeId, Dict[NodeId, None]] = {node_id: {} for node_id in ids}
    reasons: Dict[NodeId, Dict[NodeId, None]] = {node_id: {} for node_id in ids}

    for node_id in ids:
        for parent_id in get_parents(node_id):
            if parent_id not in selected:
                continue
            roots.pop(node_id, None)
            reasons[node_id][parent_id] = None
            dependencies[parent_id][node_id] = None

    nodes: Dict[NodeId, ModuleNode] = {}
    for node_id in ids:
        info = dict(get_node_info(node_id))
        name = info.pop("name")
        size = info.pop("size")
        nodes[node_id] = ModuleNode(
            id=node_id,
            name=str(name),
            size=size,
            dependencies=tuple(dependencies[node_id]),
            reasons=tuple(reasons[node_id]),
            payload=info,
        )

    graph = ModuleGraph(nodes, tuple(roots))
    logger.info(
        f"Built module graph: {graph.node_count} nodes, {graph.edge_count} edges, "
        f"{len(graph.roots)} roots"
    )
    return graph
