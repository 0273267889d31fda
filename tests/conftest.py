"""Shared test fixtures for nexus-badges."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import pytest

from nexus_badges.context import RunContext
from nexus_badges.models import GIST_NAME, GistResponse, ModDetails, TrackedMod
from nexus_badges.storage import LocalStore

RAW_URL = "https://gist.githubusercontent.com/octo/abc123/raw/deadbeef/nexus_badges.json"


class FakeNexus:
    """Stand-in for NexusClient keyed by mod id.

    Fetches can be delayed or made to fail, and every fetch that gets
    cancelled is recorded so tests can check nothing was left running.
    """

    def __init__(
        self,
        details: dict[int, ModDetails],
        errors: Optional[dict[int, Exception]] = None,
        delays: Optional[dict[int, float]] = None,
    ):
        self.details = details
        self.errors = errors or {}
        self.delays = delays or {}
        self.cancelled: list[int] = []
        self.finished: list[int] = []

    async def fetch_mod(self, mod: TrackedMod) -> ModDetails:
        try:
            await asyncio.sleep(self.delays.get(mod.mod_id, 0))
        except asyncio.CancelledError:
            self.cancelled.append(mod.mod_id)
            raise
        self.finished.append(mod.mod_id)
        if mod.mod_id in self.errors:
            raise self.errors[mod.mod_id]
        return self.details[mod.mod_id].with_url(mod)


@pytest.fixture
def store(tmp_path: Path) -> LocalStore:
    """Provide a local store rooted in a temporary directory."""
    return LocalStore(tmp_path / "io")


@pytest.fixture
def context() -> RunContext:
    """Provide a fully configured run context."""
    return RunContext(
        nexus_key="nexus-key",
        git_token="git-token",
        gist_id="abc123",
        owner="octo",
        repo="nexus_badges",
    )


@pytest.fixture
def cool_mod() -> ModDetails:
    """The metrics Nexus reports for skyrim/42."""
    return ModDetails(name="Cool Mod", uid=1001, mod_downloads=12345, mod_unique_downloads=6789)


@pytest.fixture
def fake_nexus():
    """Provide the FakeNexus class."""
    return FakeNexus


def gist_response(content: str = "", gist_id: str = "abc123", raw_url: str = RAW_URL) -> GistResponse:
    return GistResponse(id=gist_id, files={GIST_NAME: {"raw_url": raw_url, "content": content}})


def gist_body(content: str = "", gist_id: str = "abc123") -> str:
    return json.dumps({
        "id": gist_id,
        "description": "Private gist",
        "files": {GIST_NAME: {"filename": GIST_NAME, "raw_url": RAW_URL, "content": content}},
    })


@pytest.fixture
def make_gist():
    """Factory for GistResponse objects holding the badge document."""
    return gist_response


@pytest.fixture
def make_gist_body():
    """Factory for raw GitHub gist response bodies."""
    return gist_body
