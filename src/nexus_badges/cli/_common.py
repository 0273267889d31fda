"""Shared utilities for all CLI command modules.

Provides the Rich console instance, the per-invocation state object,
error reporting and the bridge from click callbacks into asyncio.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterator, Optional

from rich.console import Console
from rich.markup import escape

from ..context import RunContext, input_from_env
from ..errors import NexusBadgesError, ProvisioningError, UnsupportedCommand
from ..models import Input
from ..provisioner import StepOutcome
from ..services import GitHubClient, NexusClient, create_session
from ..storage import LocalStore

console = Console()
logger = logging.getLogger("nexus_badges.cli")


def setup_logging(verbose: bool) -> None:
    """Route library logging to stderr; warnings always, info on -v."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )


@dataclass
class CliState:
    """Options of the top-level group, shared with every subcommand."""

    remote: bool = False
    home: Optional[Path] = None
    _store: Optional[LocalStore] = field(default=None, repr=False)

    @property
    def store(self) -> LocalStore:
        if self._store is None:
            self._store = LocalStore(self.home)
        return self._store

    def load_document(self) -> Input:
        """Input document from the environment (remote) or input.json."""
        if self.remote:
            return input_from_env()
        return self.store.load_input()

    def context_for(self, document: Input) -> RunContext:
        return RunContext.from_input(document, remote=self.remote)

    def require_local(self, command: str) -> None:
        if self.remote:
            raise UnsupportedCommand(f"'{command}' is not supported when running remotely")

    def require_remote(self, command: str) -> None:
        if not self.remote:
            raise UnsupportedCommand(f"'{command}' is only supported when running remotely")


@contextmanager
def reported_errors() -> Iterator[None]:
    """Print engine failures and exit non-zero."""
    try:
        yield
    except ProvisioningError as exc:
        console.print(f"\n  [bold red]{escape(str(exc))}[/]")
        for name, error in exc.failures.items():
            console.print(f"    [red]{escape(name)}:[/] {escape(str(error))}")
        console.print()
        sys.exit(1)
    except NexusBadgesError as exc:
        console.print(f"\n  [bold red]{type(exc).__name__}:[/] {escape(str(exc))}\n")
        sys.exit(1)
    except OSError as exc:
        console.print(f"\n  [bold red]Local document I/O failed:[/] {escape(str(exc))}\n")
        sys.exit(1)


def run_with_clients(
    context: RunContext,
    operation: Callable[[NexusClient, GitHubClient], Awaitable[Any]],
) -> Any:
    """Run one async operation with clients sharing a single session."""

    async def runner() -> Any:
        async with create_session() as session:
            return await operation(
                NexusClient(context, session), GitHubClient(context, session)
            )

    return asyncio.run(runner())


def print_outcomes(outcomes: dict[str, StepOutcome]) -> None:
    for name, outcome in outcomes.items():
        if outcome.ok:
            detail = f" ({outcome.result})" if isinstance(outcome.result, str) else ""
            console.print(f"    [green]OK[/]     {escape(name)}{escape(detail)}")
        else:
            console.print(f"    [red]FAILED[/] {escape(name)}: {escape(str(outcome.error))}")
