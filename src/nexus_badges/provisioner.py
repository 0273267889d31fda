"""
Credential provisioning -- everything GitHub Actions needs to run unattended.

    secrets:    fetch repo public key once -> seal -> PUT each secret
    variables:  PATCH, fall back to POST when GitHub says 404
    workflow:   PUT enable / disable

Independent steps run concurrently and are all awaited. One failing
upsert never cancels another; every outcome is reported on its own.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Optional

from .context import (
    ENV_NAME_CACHE,
    ENV_NAME_GIST_ID,
    ENV_NAME_GIT,
    ENV_NAME_MODS,
    ENV_NAME_NEXUS,
    RunContext,
    mods_to_json,
)
from .errors import MissingConfig, ProvisioningError
from .models import TrackedMod, WorkflowState
from .services.github import GitHubClient

logger = logging.getLogger("nexus_badges.provisioner")

PUBLIC_KEY_STEP = "public-key"


@dataclass
class StepOutcome:
    """Result of one provisioning step."""

    name: str
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def join_all(steps: dict[str, Optional[Awaitable[Any]]]) -> dict[str, StepOutcome]:
    """Await a fixed set of optional steps without short-circuiting.

    Args:
        steps: Step name to awaitable; None entries are skipped.

    Returns:
        dict[str, StepOutcome]: One outcome per awaited step, in order.
    """
    active = {name: step for name, step in steps.items() if step is not None}
    results = await asyncio.gather(*active.values(), return_exceptions=True)

    outcomes = {}
    for name, result in zip(active, results):
        if isinstance(result, BaseException):
            logger.error("%s failed: %s", name, result)
            outcomes[name] = StepOutcome(name, error=result)
        else:
            outcomes[name] = StepOutcome(name, result=result)
    return outcomes


def raise_for_failures(outcomes: dict[str, StepOutcome]) -> None:
    failures = {name: o.error for name, o in outcomes.items() if not o.ok}
    if failures:
        raise ProvisioningError(failures)


async def provision(
    github: GitHubClient,
    secrets: dict[str, Optional[str]],
    variables: dict[str, Optional[str]],
) -> dict[str, StepOutcome]:
    """Upsert repository secrets and variables.

    The public key is fetched only when there is a secret to seal, and
    the variable upserts run alongside that fetch. If it fails the
    secrets are skipped but the variables still run.

    Args:
        github: GitHub client for the target repository.
        secrets: Secret name to plaintext; None values are skipped.
        variables: Variable name to value; None values are skipped.

    Returns:
        dict[str, StepOutcome]: Outcomes keyed ``secret:NAME``,
        ``variable:NAME`` and, on failure, ``public-key``.
    """
    secrets = {name: value for name, value in secrets.items() if value is not None}
    variables = {name: value for name, value in variables.items() if value is not None}

    async def upload_secrets() -> dict[str, StepOutcome]:
        if not secrets:
            return {}
        key_outcome = (await join_all({PUBLIC_KEY_STEP: github.get_public_key()}))[PUBLIC_KEY_STEP]
        if not key_outcome.ok:
            return {PUBLIC_KEY_STEP: key_outcome}
        return await join_all({
            f"secret:{name}": github.set_secret(name, value, key_outcome.result)
            for name, value in secrets.items()
        })

    # Variables do not wait on the public key
    variable_outcomes, secret_outcomes = await asyncio.gather(
        join_all({
            f"variable:{name}": github.set_variable(name, value)
            for name, value in variables.items()
        }),
        upload_secrets(),
    )
    return {**variable_outcomes, **secret_outcomes}


async def push_credential_changes(
    context: RunContext,
    github: GitHubClient,
    git_token: Optional[str] = None,
    nexus_key: Optional[str] = None,
    gist_id: Optional[str] = None,
) -> dict[str, StepOutcome]:
    """Mirror changed credentials to the repository's Actions settings."""
    context.verify_repo()
    return await provision(
        github,
        secrets={ENV_NAME_GIT: git_token, ENV_NAME_NEXUS: nexus_key},
        variables={ENV_NAME_GIST_ID: gist_id},
    )


async def push_registry(
    context: RunContext, github: GitHubClient, mods: list[TrackedMod]
) -> str:
    """Mirror the tracked mods to the TRACKED_MODS variable."""
    context.verify_repo()
    return await github.set_variable(ENV_NAME_MODS, mods_to_json(mods))


async def init_actions(
    context: RunContext, github: GitHubClient, mods: list[TrackedMod]
) -> dict[str, StepOutcome]:
    """Upload everything the automation needs, then switch it on.

    Raises:
        MissingConfig: If any value the workflow depends on is unset.
        ProvisioningError: If any upload failed; the workflow then
            stays in its current state.
    """
    context.verify_repo()
    context.verify_git()
    context.verify_gist()
    if not context.nexus_key:
        raise MissingConfig("Nexus api key missing. Use command 'set --nexus' to store private key")

    outcomes = await provision(
        github,
        secrets={ENV_NAME_GIT: context.git_token, ENV_NAME_NEXUS: context.nexus_key},
        variables={ENV_NAME_GIST_ID: context.gist_id, ENV_NAME_MODS: mods_to_json(mods)},
    )
    raise_for_failures(outcomes)

    await github.set_workflow_state(WorkflowState.ENABLE)
    return outcomes


async def set_automation(
    context: RunContext, github: GitHubClient, state: WorkflowState
) -> None:
    context.verify_repo()
    context.verify_git()
    await github.set_workflow_state(state)


async def update_cache_key(
    context: RunContext, github: GitHubClient, new: str, old: Optional[str] = None
) -> dict[str, StepOutcome]:
    """Drop the old cached binary and record the new cache key.

    Both steps run concurrently and both outcomes are reported, so a
    failed delete never hides the result of the variable write.
    """
    context.verify_repo()
    outcomes = await join_all({
        f"cache:{old}": github.delete_cache(old) if old else None,
        f"variable:{ENV_NAME_CACHE}": github.set_variable(ENV_NAME_CACHE, new),
    })
    raise_for_failures(outcomes)
    return outcomes
