"""
Thin aiohttp wrapper shared by the Nexus and GitHub clients.

Every request is a single attempt with a fixed total timeout. There
are no retries: a failed scheduled run is simply rerun by the next
schedule or by the operator.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, NamedTuple, Optional, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from ..errors import BadResponse, DecodeError, TransportError

logger = logging.getLogger("nexus_badges.services.http")

REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiResponse(NamedTuple):
    status: int
    body: str


def create_session() -> aiohttp.ClientSession:
    """Open the one session a run shares across all of its requests."""
    return aiohttp.ClientSession(timeout=REQUEST_TIMEOUT)


def decode(model: type[ModelT], response: ApiResponse) -> ModelT:
    """Parse a response body into a model, mapping failures to DecodeError."""
    try:
        return model.model_validate_json(response.body)
    except ValidationError as exc:
        raise DecodeError(f"Could not decode {model.__name__}: {exc}") from exc


class ApiClient:
    """Base class for the remote API clients."""

    def __init__(self, session: aiohttp.ClientSession):
        self.session = session

    def headers(self) -> dict[str, str]:
        return {}

    async def _send(
        self,
        method: str,
        url: str,
        payload: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        """Perform one HTTP exchange and read the whole body."""
        try:
            async with self.session.request(
                method, url, json=payload, headers=headers
            ) as response:
                body = await response.text()
                return ApiResponse(response.status, body)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"{method} {url} timed out") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    async def request(
        self,
        method: str,
        url: str,
        expect: tuple[int, ...],
        payload: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        """Send a request and require one of the expected statuses.

        Args:
            method: HTTP method.
            url: Absolute URL.
            expect: Statuses counted as success.
            payload: Optional JSON body.

        Returns:
            ApiResponse: Status and raw body.

        Raises:
            BadResponse: On any other status, carrying the raw body.
            TransportError: If the request never completed.
        """
        logger.debug("%s %s", method, url)
        response = await self._send(method, url, payload, self.headers())
        if response.status not in expect:
            raise BadResponse(response.body, response.status)
        return response
