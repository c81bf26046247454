"""
bobble CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import logging
from typing import Optional

import click

from ..config import load_config
from .commands import explore, focus, groups, impact, load


@click.group()
@click.version_option(package_name="bundle-bobble")
@click.option("-v", "--verbose", is_flag=True, help="Log what the engine is doing")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Config file (default: .bobble/config.yaml)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Optional[str]):
    """bobble: find an effective code-splitting point.

    Loads a webpack stats report, lets you cut modules or dependencies out
    of chosen chunk groups, and shows what stays reachable and how much each
    further cut would save.

    \b
    Quick Start:
      webpack --json > stats.json
      bobble load stats.json
      bobble groups
      bobble explore main --cut ./src/charts.js
      bobble impact main --top 20
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(message)s",
        datefmt="[%X]",
    )
    ctx.obj = load_config(config_path)


# Register commands
main.add_command(load.load)
main.add_command(load.clear)
main.add_command(groups.groups)
main.add_command(explore.explore)
main.add_command(impact.impact)
main.add_command(focus.focus)

if __name__ == "__main__":
    main()
