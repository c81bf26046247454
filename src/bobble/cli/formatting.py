"""
Human readable output: sizes, impact colours and the module tree.
"""

import colorsys
from dataclasses import dataclass
from typing import Dict, List, Optional

from rich.style import Style
from rich.text import Text
from rich.tree import Tree

from ..core.session import AnalysisSession
from ..core.types import CutKey, ImpactResult, NodeId, ScheduledValue

NO_DATA = "…"


def format_size(size: float) -> str:
    """
    Format a byte count the short way: ``512B``, ``1.5KB``, ``2.25MB``.
    """
    value = float(size)
    for unit in ["B", "KB", "MB", "GB"]:
        if abs(value) < 1024:
            break
        value /= 1024
    else:
        unit = "TB"
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text}{unit}"


def impact_hue(saved_size: int, total_size: int) -> int:
    """
    Hue for an impact figure: 120 (green) for negligible savings, falling
    steeply towards 0 (red) as the saving approaches the whole bundle.
    """
    if total_size <= 0:
        return 120
    ratio = min(max(saved_size / total_size, 0.0), 1.0)
    return round(120 * (1 - ratio) ** 5)


def impact_style(saved_size: int, total_size: int, fresh: bool) -> Style:
    red, green, blue = colorsys.hls_to_rgb(impact_hue(saved_size, total_size) / 360, 0.4, 0.8)
    return Style(color=f"rgb({round(red * 255)},{round(green * 255)},{round(blue * 255)})", dim=not fresh)


@dataclass(frozen=True)
class TreeEntry:
    """One visible row of the module tree."""
    depth: int
    node_id: NodeId
    parent_id: Optional[NodeId]
    recursive: bool = False


def collect_visible(
    session: AnalysisSession,
    max_depth: int,
    max_rows: Optional[int] = None,
) -> List[TreeEntry]:
    """
    Walk the graph from its roots the way the tree is displayed: every path
    is its own row, expanded up to ``max_depth`` levels below the roots. A
    module already on the current path is shown once more and not expanded.
    The walk stops after ``max_rows`` rows.
    """
    graph = session.graph
    entries: List[TreeEntry] = []
    stack = [(root_id, None, 0, frozenset()) for root_id in reversed(graph.roots)]

    while stack:
        if max_rows is not None and len(entries) >= max_rows:
            break
        node_id, parent_id, depth, path = stack.pop()
        recursive = node_id in path
        entries.append(TreeEntry(depth=depth, node_id=node_id, parent_id=parent_id, recursive=recursive))
        if recursive or depth >= max_depth:
            continue
        child_path = path | {node_id}
        for child_id in reversed(graph.dependencies(node_id)):
            stack.append((child_id, node_id, depth + 1, child_path))

    return entries


def is_entry_cut(session: AnalysisSession, entry: TreeEntry) -> bool:
    edge_cut = entry.parent_id is not None and session.is_cut(CutKey.edge(entry.parent_id, entry.node_id))
    return edge_cut or session.is_cut(CutKey.node(entry.node_id))


def format_node_label(
    session: AnalysisSession,
    entry: TreeEntry,
    impact: Optional[ScheduledValue] = None,
) -> Text:
    node = session.graph.node(entry.node_id)
    count = session.get_reachable_count(entry.node_id)
    cut = is_entry_cut(session, entry)

    name_style = "bold" if count > 0 else "dim"
    if cut:
        name_style = "strike red"
    label = Text(node.name, style=name_style)
    label.append(f" [{count}]")

    if entry.recursive:
        label.append(" ↻", style="dim")

    if impact is not None:
        result: Optional[ImpactResult] = impact.value
        if result is None:
            label.append(f" {NO_DATA}", style="dim")
        else:
            total = session.get_reachable_size()
            label.append(
                f" +{format_size(result.saved_size)}",
                style=impact_style(result.saved_size, total, impact.is_fresh),
            )
    return label


def render_tree(
    session: AnalysisSession,
    entries: List[TreeEntry],
    impacts: Dict[NodeId, ScheduledValue],
    title: str,
) -> Tree:
    """Build a rich Tree from visible rows, in their walk order."""
    tree = Tree(title)
    stack: List[Tree] = [tree]
    for entry in entries:
        del stack[entry.depth + 1:]
        branch = stack[-1].add(format_node_label(session, entry, impacts.get(entry.node_id)))
        stack.append(branch)
    return tree
