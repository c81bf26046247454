"""
Impact Command - Rank modules by the size cutting them would save.

Every currently reachable module is scored with one counterfactual
reachability pass, run in the background scheduler.
"""

import sys
from contextlib import nullcontext
from typing import List, Optional, Tuple, Union

import click
from pydantic import BaseModel, Field

from ...analysis.impact import sort_impacts
from ...core.exceptions import BobbleError
from ..formatting import format_size
from ..renderers import JsonRenderer
from ..utils import echo_error, echo_warning, gather_impacts, get_config, load_report, open_session, split_group_names


# --- API Models ---
class ApiImpact(BaseModel):
    node_id: Union[int, str]
    name: str
    size: int
    saved_size: int
    projected_size: int


class ImpactResponse(BaseModel):
    groups: List[str]
    cuts: List[str] = Field(default_factory=list)
    reachable_count: int
    reachable_size: int
    scored: int
    pending: int
    impacts: List[ApiImpact] = Field(default_factory=list)


@click.command()
@click.argument("groups")
@click.option("-s", "--stats", "stats_path", type=click.Path(exists=True, dir_okay=False),
              help="Stats file to read instead of the stored report")
@click.option("-d", "--db", "db_path", default=None, help="Path to the report store")
@click.option("-c", "--cut", "cuts", multiple=True,
              help="Toggle a cut: 'MODULE' or 'PARENT=>MODULE'. Repeatable.")
@click.option("-n", "--top", "top_n", type=click.IntRange(min=1), default=10, show_default=True, help="Modules to list")
@click.option("--wait", "wait_seconds", type=float, default=None,
              help="Seconds to wait for impact computations")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def impact(
    ctx: click.Context,
    groups: str,
    stats_path: Optional[str],
    db_path: Optional[str],
    cuts: Tuple[str, ...],
    top_n: int,
    wait_seconds: Optional[float],
    as_json: bool,
) -> None:
    """
    Rank reachable modules of GROUPS by how much cutting each would save.
    """
    config = get_config(ctx)
    db_path = db_path or config.store.path
    wait_seconds = config.impact.wait_seconds if wait_seconds is None else wait_seconds

    renderer = JsonRenderer("impact")
    context_manager = renderer.capture() if as_json else nullcontext()

    error_to_report = None
    response_data = None
    session = None

    with context_manager:
        try:
            stats = load_report(stats_path, db_path)
            selection, session, _ = open_session(stats, split_group_names(groups), cuts, config)
            graph = session.graph

            candidates = list(session.reachability.order)
            values = gather_impacts(session, candidates, wait_seconds)
            fresh = [v.value for v in values.values() if v.is_fresh and v.value is not None]
            ranked = sort_impacts(graph, fresh)[:top_n]

            response_data = ImpactResponse(
                groups=list(selection.group_names),
                cuts=[str(key) for key in session.cuts],
                reachable_count=session.get_reachable_module_count(),
                reachable_size=session.get_reachable_size(),
                scored=len(fresh),
                pending=len(candidates) - len(fresh),
                impacts=[
                    ApiImpact(
                        node_id=r.node_id,
                        name=graph.node(r.node_id).name,
                        size=graph.node(r.node_id).size,
                        saved_size=r.saved_size,
                        projected_size=r.projected_size,
                    )
                    for r in ranked
                ],
            )
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

    data = response_data
    click.echo(f"{data.reachable_count} reachable, size={format_size(data.reachable_size)}")
    if data.pending:
        echo_warning(f"{data.pending} modules not scored yet (no data)")
    click.echo()
    for rank, item in enumerate(data.impacts, start=1):
        click.echo(f"{rank:>3}. +{format_size(item.saved_size):<10} {item.name}  [{item.node_id}]")
