"""Nexus Mods API client: per-mod download metrics."""

from __future__ import annotations

import logging

import aiohttp

from ..context import RunContext
from ..models import ModDetails, TrackedMod
from .http import ApiClient, decode

logger = logging.getLogger("nexus_badges.services.nexus")

NEXUS_INFO_OK = 200


class NexusClient(ApiClient):
    """Fetches mod info with the user's personal api key."""

    def __init__(self, context: RunContext, session: aiohttp.ClientSession):
        super().__init__(session)
        self.context = context

    def headers(self) -> dict[str, str]:
        return {
            "accept": "application/json",
            "apikey": self.context.nexus_key,
        }

    async def fetch_mod(self, mod: TrackedMod) -> ModDetails:
        """Fetch the metrics of one tracked mod and attach its page URL."""
        response = await self.request("GET", mod.info_endpoint, expect=(NEXUS_INFO_OK,))
        details = decode(ModDetails, response).with_url(mod)
        logger.debug("Fetched %s (uid %d)", details.name, details.uid)
        return details
