"""
Load Command - Store a webpack stats file for later exploration.
"""

import logging
import sys
from contextlib import nullcontext
from pathlib import Path
from typing import List, Optional

import click
from pydantic import BaseModel, Field

from ...core.storage import SQLiteReportStore
from ...parsing.webpack import parse_stats
from ..renderers import JsonRenderer
from ..utils import echo_error, echo_info, echo_success, get_config

logger = logging.getLogger(__name__)


# --- API Models ---
class LoadResponse(BaseModel):
    name: str
    size_bytes: int
    saved_at: str
    built_at: Optional[int] = None
    chunk_groups: List[str] = Field(default_factory=list)
    module_count: int
    db_path: str


@click.command()
@click.argument("stats_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-d", "--db", "db_path", default=None, help="Path to the report store (default: .bobble/bobble.db)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def load(ctx: click.Context, stats_file: str, db_path: Optional[str], as_json: bool) -> None:
    """
    Save a webpack stats JSON file to the report store.

    Generate one with `webpack --json > stats.json`.
    """
    renderer = JsonRenderer("load")
    db_path = db_path or get_config(ctx).store.path
    context_manager = renderer.capture() if as_json else nullcontext()

    error_to_report = None
    response_data = None

    with context_manager:
        try:
            path = Path(stats_file)
            content = path.read_bytes()
            # Validate before replacing whatever is stored
            stats = parse_stats(content)

            if not as_json:
                click.echo(f"💾 Saving file {path.name} to {db_path}")

            report = SQLiteReportStore(Path(db_path)).save(path.name, content)

            response_data = LoadResponse(
                name=report.name,
                size_bytes=report.size_bytes,
                saved_at=report.saved_at.isoformat(),
                built_at=stats.built_at,
                chunk_groups=list(stats.named_chunk_groups),
                module_count=len(stats.modules),
                db_path=str(db_path),
            )
        except Exception as e:
            error_to_report = e

    if as_json:
        if error_to_report:
            renderer.render_error(error_to_report)
            sys.exit(1)
        renderer.render_success(response_data)
        return

    if error_to_report:
        echo_error(f"Failed to load {stats_file}: {error_to_report}")
        sys.exit(1)

    echo_success("Saved file to the report store")
    echo_info(f"{response_data.module_count} modules, {len(response_data.chunk_groups)} chunk groups")
    click.echo("Run 'bobble groups' to pick chunk groups to bobble.")


@click.command()
@click.option("-d", "--db", "db_path", default=None, help="Path to the report store (default: .bobble/bobble.db)")
@click.pass_context
def clear(ctx: click.Context, db_path: Optional[str]) -> None:
    """Remove stored reports."""
    db_path = db_path or get_config(ctx).store.path
    if not Path(db_path).exists():
        echo_info("Nothing stored")
        return
    SQLiteReportStore(Path(db_path)).clear()
    echo_success("Report store cleared")
