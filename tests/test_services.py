"""
Tests for the remote API clients -- status handling, headers, decoding.

The wire is replaced by patching ApiClient._send, so no request
ever leaves the test process.
"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from nexus_badges.errors import BadResponse, DecodeError, TransportError
from nexus_badges.models import TrackedMod, WorkflowState
from nexus_badges.services.github import GitHubClient
from nexus_badges.services.http import ApiClient, ApiResponse
from nexus_badges.services.nexus import NexusClient

SKYRIM_42 = TrackedMod(domain="skyrim", mod_id=42)


class TestApiClient:
    """Tests for the shared transport wrapper."""

    @pytest.mark.asyncio
    async def test_unexpected_status_keeps_body(self):
        client = ApiClient(session=None)
        with patch.object(client, "_send", AsyncMock(return_value=ApiResponse(500, "boom"))):
            with pytest.raises(BadResponse) as excinfo:
                await client.request("GET", "https://example.com", (200,))

        assert excinfo.value.status == 500
        assert excinfo.value.body == "boom"

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self):
        session = MagicMock()
        session.request.side_effect = aiohttp.ClientConnectionError("refused")

        with pytest.raises(TransportError, match="refused"):
            await ApiClient(session).request("GET", "https://example.com", (200,))

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self):
        session = MagicMock()
        session.request.side_effect = asyncio.TimeoutError()

        with pytest.raises(TransportError, match="timed out"):
            await ApiClient(session).request("GET", "https://example.com", (200,))


class TestNexusClient:
    """Tests for the Nexus metrics client."""

    def test_headers(self, context):
        headers = NexusClient(context, session=None).headers()
        assert headers == {"accept": "application/json", "apikey": "nexus-key"}

    @pytest.mark.asyncio
    async def test_fetch_mod(self, context):
        client = NexusClient(context, session=None)
        body = json.dumps({
            "name": "Cool Mod",
            "uid": 1001,
            "mod_downloads": 12345,
            "mod_unique_downloads": 6789,
            "summary": "ignored",
        })
        send = AsyncMock(return_value=ApiResponse(200, body))

        with patch.object(client, "_send", send):
            details = await client.fetch_mod(SKYRIM_42)

        assert details.uid == 1001
        assert details.url == "https://www.nexusmods.com/skyrim/mods/42"
        method, url = send.await_args.args[:2]
        assert method == "GET"
        assert url == SKYRIM_42.info_endpoint

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            '{"name": "Cool Mod"}',
            '{"name": "Cool Mod", "mod_downloads": 3, "mod_unique_downloads": 2}',
            '{"name": "Cool Mod", "uid": 1001, "mod_unique_downloads": 2}',
        ],
    )
    async def test_missing_fields_are_decode_errors(self, context, body):
        """A body without the identity or a counter never becomes a zero entry."""
        client = NexusClient(context, session=None)
        with patch.object(client, "_send", AsyncMock(return_value=ApiResponse(200, body))):
            with pytest.raises(DecodeError):
                await client.fetch_mod(SKYRIM_42)

    @pytest.mark.asyncio
    async def test_forbidden(self, context):
        client = NexusClient(context, session=None)
        with patch.object(client, "_send", AsyncMock(return_value=ApiResponse(403, "no key"))):
            with pytest.raises(BadResponse, match="403"):
                await client.fetch_mod(SKYRIM_42)

    @pytest.mark.asyncio
    async def test_malformed_body(self, context):
        client = NexusClient(context, session=None)
        with patch.object(client, "_send", AsyncMock(return_value=ApiResponse(200, "<html>"))):
            with pytest.raises(DecodeError, match="ModDetails"):
                await client.fetch_mod(SKYRIM_42)


class TestGitHubClient:
    """Tests for the GitHub client."""

    def test_headers(self, context):
        headers = GitHubClient(context, session=None).headers()
        assert headers["User-Agent"] == "nexus_badges"
        assert headers["Authorization"] == "Bearer git-token"
        assert headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert headers["Accept"] == "application/vnd.github+json"

    @pytest.mark.asyncio
    async def test_create_gist_is_private(self, context, make_gist_body):
        client = GitHubClient(context, session=None)
        send = AsyncMock(return_value=ApiResponse(201, make_gist_body(gist_id="new-gist")))

        with patch.object(client, "_send", send):
            gist = await client.create_gist('{"Totals": {}}')

        assert gist.id == "new-gist"
        method, url, payload = send.await_args.args[:3]
        assert (method, url) == ("POST", "https://api.github.com/gists")
        assert payload["public"] is False
        assert payload["files"] == {"nexus_badges.json": {"content": '{"Totals": {}}'}}

    @pytest.mark.asyncio
    async def test_update_gist(self, context, make_gist_body):
        client = GitHubClient(context, session=None)
        send = AsyncMock(return_value=ApiResponse(200, make_gist_body()))

        with patch.object(client, "_send", send):
            await client.update_gist("{}")

        method, url = send.await_args.args[:2]
        assert (method, url) == ("PATCH", "https://api.github.com/gists/abc123")

    @pytest.mark.asyncio
    async def test_set_variable_updates_existing(self, context):
        client = GitHubClient(context, session=None)
        send = AsyncMock(return_value=ApiResponse(204, ""))

        with patch.object(client, "_send", send):
            assert await client.set_variable("GIST_ID", "abc123") == "updated"
        assert send.await_count == 1

    @pytest.mark.asyncio
    async def test_set_variable_creates_on_404(self, context):
        client = GitHubClient(context, session=None)
        send = AsyncMock(side_effect=[ApiResponse(404, "Not Found"), ApiResponse(201, "")])

        with patch.object(client, "_send", send):
            assert await client.set_variable("GIST_ID", "abc123") == "created"

        first, second = send.await_args_list
        assert first.args[:2] == (
            "PATCH", "https://api.github.com/repos/octo/nexus_badges/actions/variables/GIST_ID"
        )
        assert second.args[:2] == (
            "POST", "https://api.github.com/repos/octo/nexus_badges/actions/variables"
        )
        assert second.args[2] == {"name": "GIST_ID", "value": "abc123"}

    @pytest.mark.asyncio
    async def test_set_variable_other_status_fails(self, context):
        """Only a 404 falls back to creating the variable."""
        client = GitHubClient(context, session=None)
        send = AsyncMock(return_value=ApiResponse(403, "Forbidden"))

        with patch.object(client, "_send", send):
            with pytest.raises(BadResponse):
                await client.set_variable("GIST_ID", "abc123")
        assert send.await_count == 1

    @pytest.mark.asyncio
    async def test_workflow_state(self, context):
        client = GitHubClient(context, session=None)
        send = AsyncMock(return_value=ApiResponse(204, ""))

        with patch.object(client, "_send", send):
            await client.set_workflow_state(WorkflowState.DISABLE)

        method, url = send.await_args.args[:2]
        assert method == "PUT"
        assert url.endswith("/actions/workflows/automation.yml/disable")

    @pytest.mark.asyncio
    async def test_delete_cache_quotes_key(self, context):
        client = GitHubClient(context, session=None)
        send = AsyncMock(return_value=ApiResponse(200, "{}"))

        with patch.object(client, "_send", send):
            await client.delete_cache("Linux-bin/v1")

        assert send.await_args.args[1].endswith("/actions/caches?key=Linux-bin%2Fv1")
