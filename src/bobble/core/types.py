"""
Core type definitions for bobble.

Modules of a webpack build are the nodes of the graph. Edges point from a
module to the modules it causes to be included (its dependencies); the
reverse direction is the module's reasons.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Generic, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import InvalidCutKeyError

NodeId = Union[int, str]

T = TypeVar("T")

EDGE_SEPARATOR = "=>"


class ModuleNode(BaseModel):
    """
    A size-accounted unit of code from the build report.
    """
    id: NodeId
    name: str
    size: int = Field(ge=0)
    dependencies: Tuple[NodeId, ...] = ()
    reasons: Tuple[NodeId, ...] = ()
    payload: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, ModuleNode):
            return self.id == other.id
        return False


@dataclass(frozen=True)
class CutKey:
    """
    A user-declared exclusion.

    A node key has no parent and removes the module itself. An edge key
    removes only the ``parent_id => node_id`` link.
    """
    node_id: NodeId
    parent_id: Optional[NodeId] = None

    @classmethod
    def node(cls, node_id: NodeId) -> "CutKey":
        return cls(node_id=node_id)

    @classmethod
    def edge(cls, parent_id: NodeId, child_id: NodeId) -> "CutKey":
        return cls(node_id=child_id, parent_id=parent_id)

    @classmethod
    def parse(cls, text: str) -> "CutKey":
        """
        Parse the textual form used on the command line.

        ``"12=>34"`` is an edge key, ``"34"`` a node key. Ids stay strings;
        callers resolve them against a graph.
        """
        raw = (text or "").strip()
        if not raw:
            raise InvalidCutKeyError(text)
        if EDGE_SEPARATOR in raw:
            parent, _, child = raw.partition(EDGE_SEPARATOR)
            parent, child = parent.strip(), child.strip()
            if not parent or not child or EDGE_SEPARATOR in child:
                raise InvalidCutKeyError(text)
            return cls.edge(parent, child)
        return cls.node(raw)

    @property
    def is_edge(self) -> bool:
        return self.parent_id is not None

    def __str__(self) -> str:
        if self.parent_id is None:
            return f"{self.node_id}"
        return f"{self.parent_id}{EDGE_SEPARATOR}{self.node_id}"


@dataclass(frozen=True)
class ReachabilityResult:
    """Reachable module ids and their aggregate size under a cut set."""
    reachable: FrozenSet[NodeId]
    reachable_size: int
    order: Tuple[NodeId, ...] = ()

    @property
    def reachable_count(self) -> int:
        return len(self.reachable)

    def is_reachable(self, node_id: NodeId) -> bool:
        return node_id in self.reachable

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.reachable


@dataclass(frozen=True)
class ImpactResult:
    """Size that would be saved by additionally cutting ``node_id``."""
    node_id: NodeId
    saved_size: int
    projected_size: int


@dataclass(frozen=True)
class ScheduledValue(Generic[T]):
    """
    What a scheduler slot currently holds.

    ``is_fresh`` is False while a newer computation is pending, in which case
    ``value`` is the last adopted result (or the caller's placeholder).
    """
    value: Optional[T]
    is_fresh: bool
    generation: int = 0
