"""
Nexus Badges CLI.

The main Click group is defined here and every subcommand is
registered from its own module. Running the group without a
subcommand performs a sync.

Entry point: nexus_badges.cli:main
"""

from __future__ import annotations

from pathlib import Path

import click

from .. import BADGES_HOME, __version__
from ._common import CliState, setup_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="nexus-badges")
@click.option("--home", default=BADGES_HOME, type=click.Path(), help="Directory of the local documents.")
@click.option("--remote", is_flag=True, hidden=True, help="Read credentials from the environment.")
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
@click.pass_context
def main(ctx: click.Context, home: str, remote: bool, verbose: bool):
    """Nexus Badges -- download counters for your Nexus mods.

    Fetches download counts, publishes them to a private gist and
    renders shields.io badges that read the gist live. Run without a
    command to sync now.
    """
    setup_logging(verbose)
    ctx.obj = CliState(remote=remote, home=Path(home))
    if ctx.invoked_subcommand is None:
        from .sync_cmd import run_sync

        run_sync(ctx.obj)


# ---------------------------------------------------------------------------
# Register all commands from modular files
# ---------------------------------------------------------------------------

from .registry_cmd import register_registry_commands
from .setup_cmd import register_setup_commands
from .style_cmd import register_style_commands
from .sync_cmd import register_sync_commands

register_registry_commands(main)
register_setup_commands(main)
register_style_commands(main)
register_sync_commands(main)
