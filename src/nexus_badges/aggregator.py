"""
Metric aggregation -- one concurrent fetch per tracked mod.

    tracked mods -> fan out fetches -> collate as they finish -> + Totals

The aggregate is all or nothing. The first failed fetch, or the first
Nexus identity seen twice, cancels every fetch still in flight, waits
for all of them to wind down, and raises. No task outlives the call.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Iterator, Optional

from .context import RunContext, verify_added
from .errors import DuplicateIdentity
from .models import TOTALS_KEY, ModDetails, TrackedMod
from .services.nexus import NexusClient
from .storage import LocalStore

logger = logging.getLogger("nexus_badges.aggregator")


class Aggregate:
    """Download metrics keyed by Nexus identity, plus a Totals entry.

    Keys are ordered numerically with Totals last, so serializing the
    same metrics always yields the same bytes.
    """

    def __init__(self, entries: dict[int, ModDetails]):
        self.entries = {uid: entries[uid] for uid in sorted(entries)}
        self.totals = ModDetails(
            name=TOTALS_KEY,
            uid=0,
            mod_downloads=sum(e.mod_downloads for e in self.entries.values()),
            mod_unique_downloads=sum(e.mod_unique_downloads for e in self.entries.values()),
        )

    def __len__(self) -> int:
        return len(self.entries) + 1

    def items(self) -> Iterator[tuple[str, ModDetails]]:
        for uid, details in self.entries.items():
            yield str(uid), details
        yield TOTALS_KEY, self.totals

    def to_json(self) -> str:
        """Serialize to the document published in the gist."""
        document = {key: details.to_document() for key, details in self.items()}
        return json.dumps(document, indent=2, ensure_ascii=False)


async def _cancel_and_drain(tasks: list[asyncio.Task]) -> None:
    """Cancel unfinished tasks and wait until every task has settled."""
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def collect_download_counts(
    client: NexusClient, mods: list[TrackedMod]
) -> dict[int, ModDetails]:
    """Fetch every mod concurrently and key the results by identity.

    Args:
        client: Nexus client used for every fetch.
        mods: Tracked mods to fetch.

    Returns:
        dict[int, ModDetails]: Metrics keyed by Nexus identity.

    Raises:
        DuplicateIdentity: If two tracked mods are the same Nexus mod.
        NexusBadgesError: The first fetch failure, unchanged.
    """
    tasks = [asyncio.create_task(client.fetch_mod(mod)) for mod in mods]
    output: dict[int, ModDetails] = {}
    try:
        for next_done in asyncio.as_completed(tasks):
            details = await next_done
            if details.uid in output:
                raise DuplicateIdentity(
                    f"Duplicate tracked mod: {details.name} (uid {details.uid}). "
                    "Use command 'remove' to drop one of the entries"
                )
            output[details.uid] = details
    finally:
        await _cancel_and_drain(tasks)
    return output


async def update_download_counts(
    context: RunContext,
    client: NexusClient,
    mods: list[TrackedMod],
    store: Optional[LocalStore] = None,
) -> Aggregate:
    """Build the aggregate for the registry.

    Args:
        context: Run context; must carry a Nexus api key.
        client: Nexus client.
        mods: Tracked mods, must not be empty.
        store: When given, the aggregate is saved to output.json.

    Returns:
        Aggregate: Per-mod metrics plus the Totals entry.
    """
    context.verify_nexus()
    verify_added(mods)

    entries = await collect_download_counts(client, mods)
    aggregate = Aggregate(entries)

    if store is not None:
        store.save_output(aggregate.to_json())
        logger.info(
            "Retrieved and saved locally download counts for %d mod(s)", len(entries)
        )
    return aggregate
