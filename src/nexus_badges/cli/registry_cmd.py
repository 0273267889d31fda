"""Registry commands: add and remove tracked mods."""

from __future__ import annotations

import click

from ..models import Input, TrackedMod
from ..provisioner import push_registry
from ..registry import add_mod, remove_mod
from ._common import CliState, console, reported_errors, run_with_clients


def _mirror_registry(state: CliState, document: Input) -> None:
    """Push the registry to TRACKED_MODS when Actions are configured."""
    context = state.context_for(document)
    if not context.repo_configured:
        return
    try:
        outcome = run_with_clients(
            context, lambda _nexus, github: push_registry(context, github, document.mods)
        )
    except Exception:
        console.print(f"  [yellow]{state.store.input_path} updated locally only[/]")
        raise
    console.print(f"  Repository variable TRACKED_MODS {outcome}")


def register_registry_commands(main: click.Group) -> None:
    """Register the add and remove commands."""

    @main.command("add")
    @click.option("-d", "--domain", required=True, help="The name of the game the mod is made for.")
    @click.option("-m", "--mod-id", required=True, type=click.IntRange(min=0), help="The ID of the mod.")
    @click.pass_obj
    def add(state: CliState, domain, mod_id):
        """Add a mod to the tracked registry."""
        with reported_errors():
            state.require_local("add")
            document = add_mod(state.store.load_input(), TrackedMod(domain=domain, mod_id=mod_id))
            state.store.save_input(document)
            console.print("\n  [green]Mod registered![/]")
            _mirror_registry(state, document)
            console.print()

    @main.command("remove")
    @click.option("-d", "--domain", required=True, help="The name of the game the mod is made for.")
    @click.option("-m", "--mod-id", required=True, type=click.IntRange(min=0), help="The ID of the mod.")
    @click.pass_obj
    def remove(state: CliState, domain, mod_id):
        """Remove a mod from the tracked registry."""
        with reported_errors():
            state.require_local("remove")
            document = remove_mod(state.store.load_input(), TrackedMod(domain=domain, mod_id=mod_id))
            state.store.save_input(document)
            console.print("\n  [green]Mod removed![/]")
            _mirror_registry(state, document)
            console.print()
