"""
Groups Command - List the named chunk groups of the loaded report.
"""

import sys
from contextlib import nullcontext
from typing import List, Optional, Union

import click
from pydantic import BaseModel, Field

from ...core.exceptions import BobbleError
from ..formatting import format_size
from ..renderers import JsonRenderer
from ..utils import echo_error, get_config, load_report


# --- API Models ---
class ApiChunkGroup(BaseModel):
    name: str
    chunk_ids: List[Union[int, str]] = Field(default_factory=list)
    module_count: int
    total_size: int


class GroupsResponse(BaseModel):
    built_at: Optional[int] = None
    groups: List[ApiChunkGroup] = Field(default_factory=list)


@click.command()
@click.option("-s", "--stats", "stats_path", type=click.Path(exists=True, dir_okay=False),
              help="Stats file to read instead of the stored report")
@click.option("-d", "--db", "db_path", default=None, help="Path to the report store")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def groups(ctx: click.Context, stats_path: Optional[str], db_path: Optional[str], as_json: bool) -> None:
    """
    Which chunks to bobble? Lists named chunk groups with their sizes.
    """
    renderer = JsonRenderer("groups")
    db_path = db_path or get_config(ctx).store.path
    context_manager = renderer.capture() if as_json else nullcontext()

    error_to_report = None
    response_data = None

    with context_manager:
        try:
            stats = load_report(stats_path, db_path)
            modules = stats.modules_by_id()
            chunks = {chunk.id: chunk for chunk in stats.chunks}

            api_groups = []
            for name, group in stats.named_chunk_groups.items():
                module_ids = {
                    ref.id
                    for chunk_id in group.chunks if chunk_id in chunks
                    for ref in chunks[chunk_id].modules if ref.id is not None
                }
                api_groups.append(ApiChunkGroup(
                    name=name,
                    chunk_ids=list(group.chunks),
                    module_count=len(module_ids),
                    total_size=sum(modules[m].size for m in module_ids if m in modules),
                ))

            response_data = GroupsResponse(built_at=stats.built_at, groups=api_groups)
        except Exception as e:
            error_to_report = e

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

    if not response_data.groups:
        click.echo("No named chunk groups in this report")
        return

    click.echo("Which chunks to bobble?")
    for group in response_data.groups:
        chunk_ids = ", ".join(str(c) for c in group.chunk_ids)
        click.echo(
            f"  {click.style(group.name, bold=True)}  "
            f"chunks: {chunk_ids}  modules: {group.module_count}  size: {format_size(group.total_size)}"
        )
    click.echo()
    click.echo("Explore with: bobble explore <group>[,<group>...]")
