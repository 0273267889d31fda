"""Setup commands: set, init, init-actions, automation."""

from __future__ import annotations

import logging

import click

from ..models import WorkflowState
from ..provisioner import init_actions, push_credential_changes, raise_for_failures, set_automation
from ..reconciler import init_remote, write_badges
from ..registry import CredentialChanges, apply_credentials
from ._common import CliState, console, print_outcomes, reported_errors, run_with_clients

logger = logging.getLogger("nexus_badges.cli.setup")


def register_setup_commands(main: click.Group) -> None:
    """Register credential, gist and automation setup commands."""

    @main.command("set")
    @click.option("--git", "--git-token", "git", default=None,
                  help="GitHub fine-grained token with read/write access to gists.")
    @click.option("--nexus", "--nexus-key", "nexus", default=None, help="Nexus private api key.")
    @click.option("--gist", "--gist-id", "gist", default=None, help="Identifier of the target gist.")
    @click.option("--owner", default=None, help="Your GitHub user name.")
    @click.option("--repo", default=None, help="Name of your fork of 'nexus_badges'.")
    @click.pass_obj
    def set_args(state: CliState, git, nexus, gist, owner, repo):
        """Configure credentials for the Nexus and GitHub APIs.

        When the repository is configured, changed credentials are also
        pushed to its Actions secrets and variables.
        """
        changes = CredentialChanges(
            git_token=git, nexus_key=nexus, gist_id=gist, owner=owner, repo=repo
        )
        if changes.is_empty():
            raise click.UsageError("Provide at least one of --git, --nexus, --gist, --owner, --repo")

        with reported_errors():
            state.require_local("set")
            document, replaced = apply_credentials(state.store.load_input(), changes)
            state.store.save_input(document)

            if replaced:
                logger.warning("Previously stored gist_id: %s, was replaced", replaced)
            console.print("\n  [green]Key(s) updated locally[/]")

            context = state.context_for(document)
            mirrored = git is not None or nexus is not None or gist is not None
            if context.repo_configured and mirrored:
                outcomes = run_with_clients(
                    context,
                    lambda _nexus, github: push_credential_changes(
                        context, github, git_token=git, nexus_key=nexus, gist_id=gist
                    ),
                )
                print_outcomes(outcomes)
                raise_for_failures(outcomes)
            console.print()

    main.add_command(set_args, name="set-arg")

    @main.command("init")
    @click.pass_obj
    def init(state: CliState):
        """Create the private gist used as the badges' json endpoint."""
        with reported_errors():
            state.require_local("init")
            document = state.store.load_input()
            context = state.context_for(document)

            result = run_with_clients(
                context,
                lambda nexus, github: init_remote(context, nexus, github, document, state.store),
            )

            console.print(f"\n  [green]New gist_id:[/] {result.gist_id}")
            if result.replaced_gist_id:
                console.print(
                    f"  [yellow]Previous gist_id: {result.replaced_gist_id}, was replaced[/]"
                )
            path = write_badges(state.store, result.aggregate, result.universal_url)
            console.print(f"  Badges saved to: [cyan]{path}[/]\n")

    @main.command("init-actions")
    @click.pass_obj
    def init_actions_cmd(state: CliState):
        """Upload secrets and variables, then enable the automation workflow."""
        with reported_errors():
            state.require_local("init-actions")
            document = state.store.load_input()
            context = state.context_for(document)

            console.print("\n  Provisioning GitHub Actions...")
            outcomes = run_with_clients(
                context, lambda _nexus, github: init_actions(context, github, document.mods)
            )
            print_outcomes(outcomes)
            console.print("  [green]GitHub automation workflow: enabled[/]\n")

    @main.command("automation")
    @click.argument("state_name", metavar="STATE", type=click.Choice(["enable", "disable"], case_sensitive=False))
    @click.pass_obj
    def automation(state: CliState, state_name):
        """Enable or disable download counter automation via GitHub Actions."""
        workflow_state = WorkflowState(state_name.lower())
        with reported_errors():
            state.require_local("automation")
            context = state.context_for(state.load_document())
            run_with_clients(
                context, lambda _nexus, github: set_automation(context, github, workflow_state)
            )
            console.print(f"\n  GitHub automation workflow: [cyan]{workflow_state.value}d[/]\n")
