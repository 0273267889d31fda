"""Sync commands: the default sync run and the remote cache-key rotation."""

from __future__ import annotations

import click

from ..provisioner import update_cache_key
from ..reconciler import sync_remote, write_badges
from ._common import CliState, console, print_outcomes, reported_errors, run_with_clients


def run_sync(state: CliState) -> None:
    """Fetch counts, update the gist if they changed, write badges.

    Remote runs skip every local write; the gist is all they update.
    """
    with reported_errors():
        document = state.load_document()
        context = state.context_for(document)
        store = None if state.remote else state.store

        result = run_with_clients(
            context,
            lambda nexus, github: sync_remote(context, nexus, github, document.mods, store),
        )

        console.print(
            f"\n  Retrieved download counts for [cyan]{len(result.aggregate.entries)}[/] mod(s)"
        )
        if result.updated:
            console.print("  [green]Remote gist successfully updated[/]")
        else:
            console.print(
                "  [dim]Download counts for tracked mod(s) have not changed, "
                "remote gist was not modified[/]"
            )

        if not state.remote:
            path = write_badges(state.store, result.aggregate, result.universal_url)
            console.print(f"  Badges saved to: [cyan]{path}[/]")
        console.print()


def register_sync_commands(main: click.Group) -> None:
    """Register the sync commands."""

    @main.command("sync")
    @click.pass_obj
    def sync(state: CliState):
        """Sync download counts now (same as running without a command)."""
        run_sync(state)

    @main.command("update-cache-key", hidden=True)
    @click.option("--old", default=None, help="Cache key to be deleted.")
    @click.option("--new", required=True, help="Cache repository variable to be updated.")
    @click.pass_obj
    def update_cache_key_cmd(state: CliState, old, new):
        """Remove the previous cache and update the cache repository variable."""
        with reported_errors():
            state.require_remote("update-cache-key")
            context = state.context_for(state.load_document())
            outcomes = run_with_clients(
                context, lambda _nexus, github: update_cache_key(context, github, new, old)
            )
            print_outcomes(outcomes)
