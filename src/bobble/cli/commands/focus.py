"""
Focus Command - Details and available cuts for one module.
"""

import sys
from typing import Optional

import click

from ...core.exceptions import BobbleError, NodeNotFoundError
from ...core.types import CutKey
from ..formatting import format_size
from ..utils import echo_error, get_config, load_report, open_session, resolve_node, split_group_names


@click.command()
@click.argument("groups")
@click.argument("module")
@click.option("-p", "--parent", "parent", default=None, help="Module the focused one was reached from")
@click.option("-s", "--stats", "stats_path", type=click.Path(exists=True, dir_okay=False),
              help="Stats file to read instead of the stored report")
@click.option("-d", "--db", "db_path", default=None, help="Path to the report store")
@click.option("-c", "--cut", "cuts", multiple=True, help="Toggle a cut before focusing. Repeatable.")
@click.pass_context
def focus(
    ctx: click.Context,
    groups: str,
    module: str,
    parent: Optional[str],
    stats_path: Optional[str],
    db_path: Optional[str],
    cuts: tuple,
) -> None:
    """
    Show MODULE of GROUPS: why it is included and how to cut it.
    """
    config = get_config(ctx)
    db_path = db_path or config.store.path

    session = None
    try:
        stats = load_report(stats_path, db_path)
        _, session, _ = open_session(stats, split_group_names(groups), cuts, config)
        graph = session.graph

        try:
            node_id = resolve_node(graph, module)
        except NodeNotFoundError:
            click.echo(f"Focus module not found: {module}")
            return

        parent_id = graph.resolve_node_id(parent) if parent else None
        if parent_id is not None and parent_id not in graph.reasons(node_id):
            parent_id = None
        node = graph.node(node_id)

        if parent_id is not None:
            click.echo(click.style(f"{graph.node(parent_id).name} →", dim=True))
        click.echo(click.style(node.name, bold=True))
        click.echo(f"  id: {node.id}  size: {format_size(node.size)}")
        reachable = session.get_reachable_count(node_id) > 0
        click.echo(f"  reachable: {'yes' if reachable else 'no'}")
        click.echo(f"  transitive dependencies: {len(graph.get_descendants(node_id))}")

        click.echo()
        click.echo("Actions")
        if parent_id is not None:
            click.echo(f"  --cut \"{CutKey.edge(parent_id, node_id)}\"  Delete dependency")
        click.echo(f"  --cut \"{CutKey.node(node_id)}\"  Cut module out of the tree")

        click.echo()
        click.echo("Reasons")
        if not node.reasons:
            click.echo("  (entry point)")
        for reason_id in node.reasons:
            marker = "" if session.get_reachable_count(reason_id) else "  (pruned)"
            click.echo(f"  {graph.node(reason_id).name}{marker}")
    except BobbleError as e:
        echo_error(str(e))
        sys.exit(1)
    finally:
        if session is not None:
            session.close()
