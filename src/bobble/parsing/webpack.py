"""
Webpack stats reader.

Turns a webpack ``stats.json`` (as produced by ``webpack --json``) into the
inputs of ``build_graph``: the module ids contained in the selected named
chunk groups, each module's reasons, and its name and size.

Only the keys bobble needs are modelled; everything else in the report is
ignored.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import ChunkGroupNotFoundError
from ..core.graph import ModuleGraph, build_graph
from ..core.types import NodeId

logger = logging.getLogger(__name__)


class _StatsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ModuleReason(_StatsModel):
    module_id: Optional[NodeId] = Field(None, alias="moduleId")


class StatsModule(_StatsModel):
    id: NodeId
    name: str = ""
    size: int = 0
    reasons: List[ModuleReason] = Field(default_factory=list)


class ChunkModuleRef(_StatsModel):
    id: Optional[NodeId] = None


class StatsChunk(_StatsModel):
    id: NodeId
    names: List[str] = Field(default_factory=list)
    modules: List[ChunkModuleRef] = Field(default_factory=list)


class NamedChunkGroup(_StatsModel):
    chunks: List[NodeId] = Field(default_factory=list)


class WebpackStats(_StatsModel):
    built_at: Optional[int] = Field(None, alias="builtAt")
    named_chunk_groups: Dict[str, NamedChunkGroup] = Field(default_factory=dict, alias="namedChunkGroups")
    chunks: List[StatsChunk] = Field(default_factory=list)
    modules: List[StatsModule] = Field(default_factory=list)

    def modules_by_id(self) -> Dict[NodeId, StatsModule]:
        return {m.id: m for m in self.modules}


@dataclass(frozen=True)
class ChunkGroupSelection:
    """Modules contained in a set of named chunk groups."""
    group_names: Tuple[str, ...]
    chunk_ids: Tuple[NodeId, ...]
    module_ids: Tuple[NodeId, ...]
    total_size: int


def parse_stats(content: Union[str, bytes]) -> WebpackStats:
    """
    Parse stats JSON text.

    Raises:
        json.JSONDecodeError: If the content is not JSON.
        pydantic.ValidationError: If the JSON is not shaped like webpack stats.
    """
    return WebpackStats.model_validate(json.loads(content))


def load_stats(path: Path) -> WebpackStats:
    """Read and parse a stats file from disk."""
    return parse_stats(Path(path).read_bytes())


def select_chunk_groups(stats: WebpackStats, names: Iterable[str]) -> ChunkGroupSelection:
    """
    Collect the chunks and modules of the named chunk groups.

    Unknown names are skipped; if none of them exist the selection fails.

    Raises:
        ChunkGroupNotFoundError: If no requested group exists in the report.
    """
    wanted = list(dict.fromkeys(n for n in names if n))
    groups = [key for key in stats.named_chunk_groups if key in wanted]
    if not groups:
        raise ChunkGroupNotFoundError(wanted)

    chunk_ids: Dict[NodeId, None] = {}
    for key in groups:
        for chunk_id in stats.named_chunk_groups[key].chunks:
            chunk_ids[chunk_id] = None

    module_ids: Dict[NodeId, None] = {}
    for chunk in stats.chunks:
        if chunk.id in chunk_ids:
            for ref in chunk.modules:
                if ref.id is not None:
                    module_ids[ref.id] = None

    modules = stats.modules_by_id()
    total_size = sum(modules[module_id].size for module_id in module_ids)

    return ChunkGroupSelection(
        group_names=tuple(groups),
        chunk_ids=tuple(chunk_ids),
        module_ids=tuple(module_ids),
        total_size=total_size,
    )


def build_module_graph(stats: WebpackStats, selection: ChunkGroupSelection) -> ModuleGraph:
    """Build the module graph of a chunk group selection."""
    modules = stats.modules_by_id()

    def get_parents(module_id: NodeId) -> List[NodeId]:
        return [r.module_id for r in modules[module_id].reasons if r.module_id is not None]

    def get_node_info(module_id: NodeId) -> dict:
        module = modules[module_id]
        return {"name": module.name, "size": module.size, "stats": module}

    logger.info(
        f"Building graph for chunk groups {', '.join(selection.group_names)}: "
        f"{len(selection.module_ids)} modules"
    )
    return build_graph(selection.module_ids, get_parents, get_node_info)
