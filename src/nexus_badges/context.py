"""
Run context -- the credentials and repository identity for one run.

Resolved exactly once at startup, either from the local input
document or, in remote mode, from the process environment. The two
sources are never merged. The resulting RunContext is frozen and is
passed by reference to every component.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from .errors import DecodeError, MissingConfig
from .models import Input, TrackedMod

logger = logging.getLogger("nexus_badges.context")

ENV_NAME_NEXUS = "NEXUS_KEY"
ENV_NAME_GIT = "GIT_TOKEN"
ENV_NAME_GIST_ID = "GIST_ID"
ENV_NAME_MODS = "TRACKED_MODS"
ENV_NAME_REPO = "REPO_FULL"
ENV_NAME_CACHE = "CACHED_BIN"

_MODS_ADAPTER = TypeAdapter(list[TrackedMod])


class RunContext(BaseModel):
    """Read-only settings shared by every task of a run."""

    model_config = ConfigDict(frozen=True)

    nexus_key: str = ""
    git_token: str = ""
    gist_id: str = ""
    owner: str = ""
    repo: str = ""
    remote: bool = False

    @classmethod
    def from_input(cls, document: Input, remote: bool = False) -> RunContext:
        return cls(
            nexus_key=document.nexus_key,
            git_token=document.git_token,
            gist_id=document.gist_id,
            owner=document.owner,
            repo=document.repo,
            remote=remote,
        )

    def verify_nexus(self) -> None:
        """Require a Nexus api key; a missing git token only warns."""
        if not self.nexus_key:
            raise MissingConfig(
                "Nexus api key missing. Use command 'set --nexus' to store private key"
            )
        if not self.git_token:
            logger.warning(
                "Git fine-grained token missing, use command 'set --git' to store "
                "private token. Output will be saved locally"
            )

    def verify_git(self) -> None:
        if not self.git_token:
            raise MissingConfig(
                "Git fine-grained token missing. Use command 'set --git' to store private token"
            )

    def verify_gist(self) -> None:
        if not self.gist_id:
            raise MissingConfig("Use command 'init' to initialize a new remote gist")

    def verify_repo(self) -> None:
        """Require the repository identity used for Actions setup."""
        if not self.repo:
            raise MissingConfig(
                "Use command 'set --repo' to input your forked 'nexus_badges' repository"
            )
        if not self.owner:
            raise MissingConfig("Use command 'set --owner' to input your GitHub username")

    @property
    def repo_configured(self) -> bool:
        return bool(self.repo and self.owner)


def verify_added(mods: list[TrackedMod]) -> None:
    if not mods:
        raise MissingConfig("No mods registered, use the command 'add' to register a mod")


def input_from_env(environ: Optional[Mapping[str, str]] = None) -> Input:
    """Build the input document from the environment of an Actions run.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Input: Document holding the credentials and tracked mods.

    Raises:
        DecodeError: If TRACKED_MODS is not a JSON list of mods.
        MissingConfig: If REPO_FULL is set but not ``owner/repo``.
    """
    env = os.environ if environ is None else environ

    mods: list[TrackedMod] = []
    raw_mods = env.get(ENV_NAME_MODS, "")
    if raw_mods:
        try:
            mods = _MODS_ADAPTER.validate_python(json.loads(raw_mods))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise DecodeError(f"{ENV_NAME_MODS} is not a valid list of mods: {exc}") from exc

    owner, repo = "", ""
    repo_full = env.get(ENV_NAME_REPO, "")
    if repo_full:
        owner, sep, repo = repo_full.partition("/")
        if not sep or not owner or not repo:
            raise MissingConfig(f"{ENV_NAME_REPO} must look like 'owner/repo', got: {repo_full}")

    return Input(
        nexus_key=env.get(ENV_NAME_NEXUS, ""),
        git_token=env.get(ENV_NAME_GIT, ""),
        gist_id=env.get(ENV_NAME_GIST_ID, ""),
        owner=owner,
        repo=repo,
        mods=mods,
    )


def mods_to_json(mods: list[TrackedMod]) -> str:
    """Serialize the registry the way the TRACKED_MODS variable stores it."""
    return _MODS_ADAPTER.dump_json(mods).decode("utf-8")
