"""
Mod registry and credential edits on the local input document.

Pure document transformations: each returns a new Input and leaves
writing it, and mirroring it to the repository, to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import RegistryError
from .models import Input, TrackedMod


def add_mod(document: Input, mod: TrackedMod) -> Input:
    """Register a mod; registering the same mod twice is an error."""
    if mod in document.mods:
        raise RegistryError(f"Mod already registered: {mod.domain}/{mod.mod_id}")
    return document.model_copy(update={"mods": [*document.mods, mod]})


def remove_mod(document: Input, mod: TrackedMod) -> Input:
    if mod not in document.mods:
        raise RegistryError(f"Mod is not registered: {mod.domain}/{mod.mod_id}")
    return document.model_copy(update={"mods": [m for m in document.mods if m != mod]})


@dataclass
class CredentialChanges:
    """Values passed to the 'set' command; None means unchanged."""

    git_token: Optional[str] = None
    nexus_key: Optional[str] = None
    gist_id: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.git_token, self.nexus_key, self.gist_id, self.owner, self.repo)
        )


def apply_credentials(document: Input, changes: CredentialChanges) -> tuple[Input, Optional[str]]:
    """Apply credential changes to the input document.

    Returns:
        tuple: The updated document, and the previously stored gist id
        when a different, non-empty one was replaced.
    """
    updates = {
        field: value
        for field, value in (
            ("git_token", changes.git_token),
            ("nexus_key", changes.nexus_key),
            ("gist_id", changes.gist_id),
            ("owner", changes.owner),
            ("repo", changes.repo),
        )
        if value is not None
    }
    replaced = None
    if changes.gist_id is not None and document.gist_id and document.gist_id != changes.gist_id:
        replaced = document.gist_id
    return document.model_copy(update=updates), replaced
