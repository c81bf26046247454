"""
CLI Utilities - Shared helper functions for command line operations.

This module provides common functionality used across the bobble commands:
formatted printing, report loading, and turning command line arguments
(chunk group names, cut keys, module references) into analysis objects.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import click

from ..config import BobbleConfig, load_config
from ..core.exceptions import NodeNotFoundError, ReportNotFoundError
from ..core.graph import ModuleGraph
from ..core.scheduler import ComputationScheduler
from ..core.session import AnalysisSession
from ..core.storage import SQLiteReportStore
from ..core.types import CutKey, NodeId, ScheduledValue
from ..parsing.webpack import (
    ChunkGroupSelection,
    WebpackStats,
    build_module_graph,
    load_stats,
    parse_stats,
    select_chunk_groups,
)

logger = logging.getLogger(__name__)


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """
    Print a warning message with a yellow alert symbol.

    Args:
        message (str): The warning message to display.
    """
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    """
    Print an informational message, dimmed.

    Args:
        message (str): The info message to display.
    """
    click.echo(click.style(f"   {message}", dim=True))


def get_config(ctx: Optional[click.Context]) -> BobbleConfig:
    """Configuration loaded by the command group, or the defaults on disk."""
    config = ctx.find_object(BobbleConfig) if ctx is not None else None
    return config or load_config()


def load_report(stats_path: Optional[str], db_path: str) -> WebpackStats:
    """
    Load webpack stats from an explicit file or from the report store.

    Args:
        stats_path (str | None): Stats file given on the command line.
        db_path (str): Report store used when no file is given.

    Raises:
        ReportNotFoundError: If nothing was given and nothing is stored.
    """
    if stats_path:
        return load_stats(Path(stats_path))

    if not Path(db_path).exists():
        raise ReportNotFoundError(db_path)

    report = SQLiteReportStore(Path(db_path)).load()
    if report is None:
        raise ReportNotFoundError(db_path)

    logger.info(f"Using stored report {report.name} (saved {report.saved_at.isoformat()})")
    return parse_stats(report.content)


def split_group_names(text: str) -> List[str]:
    """Split the comma separated chunk group argument."""
    return [name.strip() for name in text.split(",") if name.strip()]


def resolve_node(graph: ModuleGraph, text: str) -> NodeId:
    """
    Resolve a module reference typed by the user.

    Raises:
        NodeNotFoundError: If the text matches no module.
    """
    node_id = graph.resolve_node_id(text)
    if node_id is None:
        raise NodeNotFoundError(text)
    return node_id


def resolve_cut_key(graph: ModuleGraph, text: str) -> Tuple[CutKey, bool]:
    """
    Parse a cut key and map its ids onto the graph.

    Keys that match nothing are returned unchanged; cutting them has no
    effect on reachability.

    Returns:
        Tuple[CutKey, bool]: The key and whether it refers to a module or
        dependency present in the graph.
    """
    raw = CutKey.parse(text)
    node_id = graph.resolve_node_id(str(raw.node_id))

    if not raw.is_edge:
        if node_id is None:
            return raw, False
        return CutKey.node(node_id), True

    parent_id = graph.resolve_node_id(str(raw.parent_id))
    if node_id is None or parent_id is None or not graph.has_edge(parent_id, node_id):
        return raw, False
    return CutKey.edge(parent_id, node_id), True


def open_session(
    stats: WebpackStats,
    group_names: Sequence[str],
    cut_texts: Sequence[str],
    config: BobbleConfig,
) -> Tuple[ChunkGroupSelection, AnalysisSession, List[str]]:
    """
    Build the graph of the chosen chunk groups and apply the given cuts.

    Each cut is a toggle, so naming the same key twice restores it.

    Returns:
        Tuple: The chunk group selection, the session, and the cut texts
        that matched nothing in the graph.
    """
    selection = select_chunk_groups(stats, group_names)
    graph = build_module_graph(stats, selection)
    session = AnalysisSession(graph, ComputationScheduler(max_workers=config.impact.workers))

    unmatched: List[str] = []
    for text in cut_texts:
        key, matched = resolve_cut_key(graph, text)
        if not matched:
            logger.info(f"Cut '{text}' matches nothing in the selected chunk groups")
            unmatched.append(text)
        session.toggle_cut(key)

    return selection, session, unmatched


def gather_impacts(
    session: AnalysisSession,
    node_ids: Sequence[NodeId],
    wait_seconds: float,
) -> Dict[NodeId, ScheduledValue]:
    """
    Request impacts for ``node_ids`` and wait up to ``wait_seconds`` for them.

    Values still computing when the wait ends come back stale (or empty).
    """
    for node_id in node_ids:
        session.compute_impact(node_id)

    if not session.scheduler.join(timeout=wait_seconds):
        logger.warning(f"Impact computations still running after {wait_seconds}s; showing partial results")

    return {node_id: session.compute_impact(node_id) for node_id in node_ids}
