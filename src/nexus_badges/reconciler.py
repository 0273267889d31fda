"""
Remote state reconciliation -- keep the gist in step with Nexus.

    sync:  (aggregate || fetch gist) -> compare -> PATCH only if changed
    init:  aggregate -> POST new private gist -> record its id

The gist's revision history is visible to the user, so an update is
only written when the serialized document actually differs from what
the gist already holds.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .aggregator import Aggregate, update_download_counts
from .badges import render_badges
from .context import RunContext
from .errors import BadResponse, NotSetup
from .models import GistResponse, Input, TrackedMod
from .services.github import NOT_FOUND, GitHubClient
from .services.nexus import NexusClient
from .storage import LocalStore

logger = logging.getLogger("nexus_badges.reconciler")


@dataclass
class SyncResult:
    """Outcome of a regular sync."""

    aggregate: Aggregate
    universal_url: str
    updated: bool


@dataclass
class InitResult:
    """Outcome of creating the remote gist."""

    aggregate: Aggregate
    gist_id: str
    universal_url: str
    replaced_gist_id: Optional[str] = None


async def fetch_remote(context: RunContext, github: GitHubClient) -> GistResponse:
    """Check a gist is configured, then fetch its current state."""
    context.verify_gist()
    try:
        return await github.get_gist()
    except BadResponse as exc:
        if exc.status == NOT_FOUND:
            raise NotSetup(
                f"Gist {context.gist_id} does not exist. Use command 'init' to create a new one"
            ) from exc
        raise


async def sync_remote(
    context: RunContext,
    nexus: NexusClient,
    github: GitHubClient,
    mods: list[TrackedMod],
    store: Optional[LocalStore] = None,
) -> SyncResult:
    """Fetch fresh counts and update the gist if they changed.

    The gist fetch runs alongside the aggregation instead of after it.
    If both fail, the gist error is the one reported.

    Args:
        context: Run context.
        nexus: Nexus client.
        github: GitHub client.
        mods: Tracked mods.
        store: Local store for the output snapshot, None to skip it.

    Returns:
        SyncResult: The aggregate, the universal URL and whether the
        gist was written.
    """
    aggregate_res, remote_res = await asyncio.gather(
        update_download_counts(context, nexus, mods, store),
        fetch_remote(context, github),
        return_exceptions=True,
    )
    if isinstance(remote_res, BaseException):
        raise remote_res
    if isinstance(aggregate_res, BaseException):
        raise aggregate_res

    new_content = aggregate_res.to_json()
    updated = remote_res.content() != new_content
    if updated:
        await github.update_gist(new_content)
    else:
        logger.info(
            "Download counts for tracked mod(s) have not changed, remote gist was not modified"
        )

    return SyncResult(
        aggregate=aggregate_res,
        universal_url=remote_res.universal_url(),
        updated=updated,
    )


async def init_remote(
    context: RunContext,
    nexus: NexusClient,
    github: GitHubClient,
    document: Input,
    store: LocalStore,
) -> InitResult:
    """Create the private gist, seeded with real counts.

    Args:
        context: Run context; must carry a git token.
        nexus: Nexus client.
        github: GitHub client.
        document: Current input document.
        store: Local store; the new gist id is written to input.json.

    Returns:
        InitResult: The new gist id, its universal URL and any
        previously recorded id that was replaced.
    """
    context.verify_git()
    aggregate = await update_download_counts(context, nexus, document.mods, store)
    remote = await github.create_gist(aggregate.to_json())

    replaced = document.gist_id if document.gist_id and document.gist_id != remote.id else None
    store.save_input(document.model_copy(update={"gist_id": remote.id}))
    if replaced:
        logger.warning("Previous gist_id: %s, was replaced", replaced)

    return InitResult(
        aggregate=aggregate,
        gist_id=remote.id,
        universal_url=remote.universal_url(),
        replaced_gist_id=replaced,
    )


def write_badges(store: LocalStore, aggregate: Aggregate, universal_url: str) -> Path:
    """Render badges with the stored preferences and save badges.md."""
    preferences = store.load_preferences()
    return store.write_badges(render_badges(aggregate.items(), universal_url, preferences))
