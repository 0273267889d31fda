"""
GitHub REST client -- gists, Actions secrets, variables, workflows, caches.

All calls share the same header set: identifying user agent, the
GitHub JSON media type, the bearer token and a pinned API version.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import aiohttp

from ..context import RunContext
from ..models import GIST_NAME, GistResponse, RepositoryPublicKey, WorkflowState
from ..sealing import seal_secret
from .http import ApiClient, decode

logger = logging.getLogger("nexus_badges.services.github")

GIT_BASE_URL = "https://api.github.com"
GIT_API_VER = "2022-11-28"
USER_AGENT = "nexus_badges"

GIST_DESC = "Private gist to be used as a json endpoint for badge download counters"
WORKFLOW_NAME = "automation.yml"

OK = 200
CREATED = 201
# GitHub answers 'No Content' for updated values and flag changes
UPDATED = 204
NOT_FOUND = 404


class GitHubClient(ApiClient):
    """GitHub API calls scoped to the run's gist and repository."""

    def __init__(self, context: RunContext, session: aiohttp.ClientSession):
        super().__init__(session)
        self.context = context

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.context.git_token}",
            "X-GitHub-Api-Version": GIT_API_VER,
        }

    @property
    def gist_endpoint(self) -> str:
        return f"{GIT_BASE_URL}/gists/{self.context.gist_id}"

    @property
    def repo_endpoint(self) -> str:
        return f"{GIT_BASE_URL}/repos/{self.context.owner}/{self.context.repo}"

    # -- gists -----------------------------------------------------------

    async def create_gist(self, content: str) -> GistResponse:
        payload = {
            "description": GIST_DESC,
            "public": False,
            "files": {GIST_NAME: {"content": content}},
        }
        response = await self.request("POST", f"{GIT_BASE_URL}/gists", (CREATED,), payload)
        logger.info("New private gist created with name: %s", GIST_NAME)
        return decode(GistResponse, response)

    async def get_gist(self) -> GistResponse:
        response = await self.request("GET", self.gist_endpoint, (OK,))
        return decode(GistResponse, response)

    async def update_gist(self, content: str) -> GistResponse:
        payload = {"files": {GIST_NAME: {"content": content}}}
        response = await self.request("PATCH", self.gist_endpoint, (OK,), payload)
        logger.info("Remote gist successfully updated")
        return decode(GistResponse, response)

    # -- actions secrets and variables -----------------------------------

    async def get_public_key(self) -> RepositoryPublicKey:
        response = await self.request(
            "GET", f"{self.repo_endpoint}/actions/secrets/public-key", (OK,)
        )
        return decode(RepositoryPublicKey, response)

    async def set_secret(self, name: str, secret: str, public_key: RepositoryPublicKey) -> str:
        """Seal and upsert one repository secret.

        Returns:
            str: ``"created"`` or ``"updated"``.
        """
        payload = {
            "encrypted_value": seal_secret(secret, public_key.key),
            "key_id": public_key.key_id,
        }
        response = await self.request(
            "PUT", f"{self.repo_endpoint}/actions/secrets/{name}", (CREATED, UPDATED), payload
        )
        outcome = "created" if response.status == CREATED else "updated"
        logger.info("Repository secret: %s, %s", name, outcome)
        return outcome

    async def set_variable(self, name: str, value: str) -> str:
        """Upsert one repository variable.

        Update and create are separate endpoints, so try the update
        first and create only when GitHub says the variable is unknown.

        Returns:
            str: ``"created"`` or ``"updated"``.
        """
        payload = {"name": name, "value": value}
        variables = f"{self.repo_endpoint}/actions/variables"

        response = await self.request(
            "PATCH", f"{variables}/{name}", (UPDATED, NOT_FOUND), payload
        )
        if response.status == UPDATED:
            logger.info("Repository variable: %s, updated", name)
            return "updated"

        await self.request("POST", variables, (CREATED,), payload)
        logger.info("Repository variable: %s, created", name)
        return "created"

    # -- workflows and caches --------------------------------------------

    async def set_workflow_state(self, state: WorkflowState) -> None:
        await self.request(
            "PUT",
            f"{self.repo_endpoint}/actions/workflows/{WORKFLOW_NAME}/{state.value}",
            (UPDATED,),
        )
        logger.info("GitHub automation workflow: %sd", state.value)

    async def delete_cache(self, key: str) -> None:
        await self.request(
            "DELETE", f"{self.repo_endpoint}/actions/caches?key={quote(key, safe='')}", (OK,)
        )
        logger.info("Removed old cache with key: %s", key)
