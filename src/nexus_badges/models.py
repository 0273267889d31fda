"""
Pydantic models for every document and wire payload.

Local documents (input.json, output.json) and the Nexus / GitHub
payloads are all parsed through these models, never as loose dicts.
"""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .errors import BadResponse

NEXUS_BASE_URL = "https://api.nexusmods.com"
NEXUS_SITE_URL = "https://www.nexusmods.com"

GIST_NAME = "nexus_badges.json"
RAW_SEGMENT = "/raw/"

TOTALS_KEY = "Totals"
COUNT_SUFFIXES = ("k", "M", "T")


def format_download_count(count: int) -> str:
    """Format a download counter the way it is published to the gist.

    Keeps at most three significant digits, truncating rather than
    rounding, and drops trailing zero decimals.

    Args:
        count: Raw download count.

    Returns:
        str: Compact count such as ``"9999"``, ``"10.1k"`` or ``"5.8e12"``.
    """
    if count < 10_000:
        return str(count)
    if count >= 1_000_000_000_000:
        mantissa, exponent = f"{count:.1e}".split("e")
        return f"{mantissa}e{int(exponent)}"

    delta = float(count)
    steps = 0
    while delta >= 1000.0:
        delta /= 1000.0
        steps += 1
    suffix = COUNT_SUFFIXES[steps - 1]

    precision = 2 - math.floor(math.log10(delta))
    while precision > 0 and int(abs(delta * 10**precision)) % 10 == 0:
        precision -= 1

    if precision == 0:
        return f"{math.trunc(delta)}{suffix}"

    multiplier = 10**precision
    truncated = math.trunc(delta * multiplier) / multiplier
    return f"{truncated:.{precision}f}{suffix}"


class TrackedMod(BaseModel):
    """One mod the user asked us to watch."""

    model_config = ConfigDict(frozen=True)

    domain: str
    mod_id: int = Field(ge=0)

    @property
    def info_endpoint(self) -> str:
        return f"{NEXUS_BASE_URL}/v1/games/{self.domain}/mods/{self.mod_id}.json"

    @property
    def url(self) -> str:
        return f"{NEXUS_SITE_URL}/{self.domain}/mods/{self.mod_id}"


class ModDetails(BaseModel):
    """Download metrics for a single mod as reported by Nexus.

    ``url`` is derived from the TrackedMod that was requested and
    ``uid`` is Nexus' own identity for the mod. Neither travels in
    the published document the same way it arrives on the wire.
    """

    name: str
    url: str = ""
    uid: int
    mod_downloads: int
    mod_unique_downloads: int

    def with_url(self, mod: TrackedMod) -> ModDetails:
        return self.model_copy(update={"url": mod.url})

    def to_document(self) -> dict[str, str]:
        """Published form of the entry, counters formatted."""
        doc = {"name": self.name}
        if self.url:
            doc["url"] = self.url
        doc["mod_downloads"] = format_download_count(self.mod_downloads)
        doc["mod_unique_downloads"] = format_download_count(self.mod_unique_downloads)
        return doc


class Input(BaseModel):
    """The local input document: credentials plus the mod registry."""

    git_token: str = ""
    nexus_key: str = ""
    gist_id: str = ""
    owner: str = ""
    repo: str = ""
    mods: list[TrackedMod] = Field(default_factory=list)


class FileDetails(BaseModel):
    raw_url: str
    content: str = ""


class GistResponse(BaseModel):
    """Current state of the remote gist."""

    id: str
    files: dict[str, FileDetails] = Field(default_factory=dict)

    def file_details(self) -> FileDetails:
        details = self.files.get(GIST_NAME)
        if details is None:
            raise BadResponse(
                f"Gist response did not contain details about any file with the name: {GIST_NAME}"
            )
        return details

    def content(self) -> str:
        return self.file_details().content

    def universal_url(self) -> str:
        """Raw URL of the gist file with the revision segment removed.

        ``.../raw/<sha>/nexus_badges.json`` becomes ``.../raw`` which
        always serves the latest revision.
        """
        raw_url = self.file_details().raw_url
        index = raw_url.find(RAW_SEGMENT)
        if index == -1:
            raise BadResponse(f"Gist raw url has no '{RAW_SEGMENT}' segment: {raw_url}")
        return raw_url[: index + len(RAW_SEGMENT) - 1]


class RepositoryPublicKey(BaseModel):
    """Sealed-box public key GitHub hands out for repository secrets."""

    key_id: str
    key: str


class WorkflowState(str, Enum):
    """Target state for the automation workflow."""

    ENABLE = "enable"
    DISABLE = "disable"
