"""
Explore Command - Reachability and impact over chosen chunk groups.

Builds the module graph of the selected chunk groups, applies the cuts given
on the command line and prints the module tree with, for every visible
module, whether it is still reachable and how much cutting it would save.
"""

import logging
import sys
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

import click
from pydantic import BaseModel, Field
from rich.console import Console

from ...core.exceptions import BobbleError
from ..formatting import (
    collect_visible,
    format_size,
    is_entry_cut,
    render_tree,
)
from ..renderers import JsonRenderer
from ..utils import (
    echo_error,
    echo_warning,
    gather_impacts,
    get_config,
    load_report,
    open_session,
    split_group_names,
)

logger = logging.getLogger(__name__)

console = Console()


# --- API Models ---
class ApiTreeRow(BaseModel):
    depth: int
    node_id: Union[int, str]
    parent_id: Optional[Union[int, str]] = None
    name: str
    size: int
    reachable: bool
    cut: bool
    saved_size: Optional[int] = None
    fresh: bool = False


class ExploreResponse(BaseModel):
    groups: List[str]
    chunk_ids: List[Union[int, str]]
    module_count: int
    total_size: int
    built_at: Optional[int] = None
    cuts: List[str] = Field(default_factory=list)
    unmatched_cuts: List[str] = Field(default_factory=list)
    reachable_count: int
    reachable_size: int
    graph: Dict[str, Any] = Field(default_factory=dict)
    tree: List[ApiTreeRow] = Field(default_factory=list)


@click.command()
@click.argument("groups")
@click.option("-s", "--stats", "stats_path", type=click.Path(exists=True, dir_okay=False),
              help="Stats file to read instead of the stored report")
@click.option("-d", "--db", "db_path", default=None, help="Path to the report store")
@click.option("-c", "--cut", "cuts", multiple=True,
              help="Toggle a cut: 'MODULE' cuts a module, 'PARENT=>MODULE' a dependency. Repeatable.")
@click.option("--depth", type=click.IntRange(min=0), default=None, help="Tree levels to expand below the roots")
@click.option("--max-rows", type=click.IntRange(min=1), default=None, help="Stop the tree after this many rows")
@click.option("--impact/--no-impact", "with_impact", default=True, help="Show the size each module would save")
@click.option("--wait", "wait_seconds", type=float, default=None,
              help="Seconds to wait for impact computations")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def explore(
    ctx: click.Context,
    groups: str,
    stats_path: Optional[str],
    db_path: Optional[str],
    cuts: Tuple[str, ...],
    depth: Optional[int],
    max_rows: Optional[int],
    with_impact: bool,
    wait_seconds: Optional[float],
    as_json: bool,
) -> None:
    """
    Bobble chunk groups GROUPS (comma separated).

    \b
    Example:
      bobble explore main --cut ./src/charts.js --cut "./src/app.js=>./src/admin.js"
    """
    config = get_config(ctx)
    db_path = db_path or config.store.path
    depth = config.tree.depth if depth is None else depth
    max_rows = config.tree.max_rows if max_rows is None else max_rows
    wait_seconds = config.impact.wait_seconds if wait_seconds is None else wait_seconds

    renderer = JsonRenderer("explore")
    context_manager = renderer.capture() if as_json else nullcontext()

    error_to_report = None
    response_data = None
    tree = None
    session = None

    with context_manager:
        try:
            stats = load_report(stats_path, db_path)
            selection, session, unmatched = open_session(stats, split_group_names(groups), cuts, config)
            graph = session.graph

            entries = collect_visible(session, depth, max_rows)
            impacts = {}
            if with_impact:
                targets = list(dict.fromkeys(entry.node_id for entry in entries))[:config.impact.max_visible]
                impacts = gather_impacts(session, targets, wait_seconds)

            rows = []
            for entry in entries:
                node = graph.node(entry.node_id)
                impact = impacts.get(entry.node_id)
                result = impact.value if impact is not None else None
                rows.append(ApiTreeRow(
                    depth=entry.depth,
                    node_id=entry.node_id,
                    parent_id=entry.parent_id,
                    name=node.name,
                    size=node.size,
                    reachable=session.get_reachable_count(entry.node_id) > 0,
                    cut=is_entry_cut(session, entry),
                    saved_size=result.saved_size if result is not None else None,
                    fresh=bool(impact is not None and impact.is_fresh),
                ))

            response_data = ExploreResponse(
                groups=list(selection.group_names),
                chunk_ids=list(selection.chunk_ids),
                module_count=len(selection.module_ids),
                total_size=selection.total_size,
                built_at=stats.built_at,
                cuts=[str(key) for key in session.cuts],
                unmatched_cuts=unmatched,
                reachable_count=session.get_reachable_module_count(),
                reachable_size=session.get_reachable_size(),
                graph=graph.get_stats(),
                tree=rows,
            )

            if not as_json:
                title = (
                    f"{session.get_reachable_module_count()} reachable, "
                    f"size={format_size(session.get_reachable_size())}"
                )
                tree = render_tree(session, entries, impacts, title)
        except Exception as e:
            error_to_report = e
        finally:
            if session is not None:
                session.close()

    if as_json:
        if error_to_report:
            renderer.render_error(error_to_report)
            sys.exit(1)
        renderer.render_success(response_data)
        return

    if error_to_report:
        if not isinstance(error_to_report, BobbleError):
            raise error_to_report
        echo_error(str(error_to_report))
        sys.exit(1)

    _print_summary(response_data)
    console.print(tree)


def _print_summary(data: ExploreResponse) -> None:
    click.echo(click.style(f"Bobble chunk group {', '.join(data.groups)}", bold=True))
    click.echo(f"  IDs of chunks contained in this group: {', '.join(str(c) for c in data.chunk_ids)}")
    click.echo(f"  Number of modules: {data.module_count}")
    click.echo(f"  Total size: {format_size(data.total_size)}")
    if data.built_at:
        built = datetime.fromtimestamp(data.built_at / 1000, tz=timezone.utc)
        click.echo(f"  Built at: {built.isoformat()}")
    if data.cuts:
        click.echo(f"  Cuts: {', '.join(data.cuts)}")
    for text in data.unmatched_cuts:
        echo_warning(f"Cut '{text}' matches nothing in this graph")
    click.echo()
