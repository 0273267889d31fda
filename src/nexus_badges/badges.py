"""
Badge rendering -- shields.io dynamic JSON badges in several dialects.

Every badge reads its number live from the gist through a JSONPath
query. The renderer only has to build the URL and wrap it in the
syntax of the chosen markup dialect:

    markdown  [![Nexus Downloads](<badge>)](<mod page>)
    asciidoc  image:<badge>[Nexus Downloads]
    html      <img alt="Nexus Downloads" src="<badge>">
    rst       .. image:: <badge>
    url       <badge>

Output is a pure function of the aggregate and the preferences, so
identical inputs always produce byte-identical badge files.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional
from urllib.parse import quote

from pydantic import BaseModel, field_validator

from .models import ModDetails

logger = logging.getLogger("nexus_badges.badges")

SHIELDS_DYNAMIC_JSON = "https://img.shields.io/badge/dynamic/json"
IMAGE_ALT_TEXT = "Nexus Downloads"
DEFAULT_LABEL = "Nexus Downloads"
DEFAULT_COLOR = "default"

# Everything outside printable ASCII is always encoded on top of these.
RESERVED_CHARACTERS = ' "<>`#?{}/:;=@[\\]^|'
_SAFE_CHARACTERS = "".join(
    chr(c) for c in range(0x21, 0x7F) if chr(c) not in RESERVED_CHARACTERS
)
_HEX_COLOR = re.compile(r"^[0-9a-fA-F]{6}$")


def percent_encode(value: str) -> str:
    """Percent-encode a value with the fixed badge reserved set."""
    return quote(value, safe=_SAFE_CHARACTERS)


def _normalize_choice(value: str) -> str:
    return value.strip().lower().replace("-", "").replace("_", "")


class _ChoiceEnum(str, Enum):
    """String enum that accepts case, dash and underscore variants."""

    @classmethod
    def parse(cls, value: str):
        if isinstance(value, cls):
            return value
        wanted = _normalize_choice(str(value))
        for member in cls:
            if _normalize_choice(member.value) == wanted:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ValueError(f"'{value}' is not one of: {choices}")


class BadgeStyle(_ChoiceEnum):
    FLAT = "flat"
    FLAT_SQUARE = "flat-square"
    PLASTIC = "plastic"
    FOR_THE_BADGE = "for-the-badge"
    SOCIAL = "social"


class BadgeFormat(_ChoiceEnum):
    MARKDOWN = "markdown"
    URL = "url"
    RST = "rst"
    ASCII_DOC = "asciidoc"
    HTML = "html"


class DownloadCount(_ChoiceEnum):
    TOTAL = "total"
    UNIQUE = "unique"

    @property
    def field_name(self) -> str:
        """Key of the counter inside each gist entry."""
        if self is DownloadCount.UNIQUE:
            return "mod_unique_downloads"
        return "mod_downloads"

    @property
    def description(self) -> str:
        if self is DownloadCount.UNIQUE:
            return "Unique downloads"
        return "Total downloads"


def parse_color(value: str) -> Optional[str]:
    """Parse a user supplied badge color.

    Args:
        value: Six hex digits with or without ``#``, or ``"default"``.

    Returns:
        Optional[str]: Canonical ``#rrggbb``, or None for no override.

    Raises:
        ValueError: If the value is neither a hex color nor "default".
    """
    if value.strip().lower() == DEFAULT_COLOR:
        return None
    hex_digits = value.strip().lstrip("#")
    if len(hex_digits) != 6:
        raise ValueError("Color must be 6 hex digits")
    if not _HEX_COLOR.match(hex_digits):
        raise ValueError("Color must contain only hex digits")
    return f"#{hex_digits.lower()}"


class BadgePreferences(BaseModel):
    """How badges should look. Stored apart from the credentials."""

    style: BadgeStyle = BadgeStyle.FLAT
    format: BadgeFormat = BadgeFormat.MARKDOWN
    count: DownloadCount = DownloadCount.TOTAL
    label: str = DEFAULT_LABEL
    label_color: Optional[str] = None
    color: Optional[str] = None

    @field_validator("style", mode="before")
    @classmethod
    def _parse_style(cls, value):
        return BadgeStyle.parse(value)

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value):
        return BadgeFormat.parse(value)

    @field_validator("count", mode="before")
    @classmethod
    def _parse_count(cls, value):
        return DownloadCount.parse(value)

    @field_validator("label_color", "color", mode="before")
    @classmethod
    def _parse_color(cls, value):
        """Invalid colors degrade to the default with a warning."""
        if value is None:
            return None
        if not isinstance(value, str):
            logger.warning("Color %r is not a string. Using default color", value)
            return None
        try:
            return parse_color(value)
        except ValueError as exc:
            logger.warning("'%s' is not a valid hex color. Using default color. %s", value, exc)
            return None

    def encode_optionals(self) -> str:
        """Query parameters for every non-default style setting."""
        output = ""
        if self.style is not BadgeStyle.FLAT:
            output += f"&style={self.style.value}"
        if self.label_color:
            output += f"&labelColor={percent_encode(self.label_color)}"
        if self.color:
            output += f"&color={percent_encode(self.color)}"
        return output


@dataclass(frozen=True)
class EncodedFields:
    """Badge URL parts shared by every entry, already encoded."""

    json_url: str
    label: str
    option_fields: str

    @classmethod
    def build(cls, json_url: str, preferences: BadgePreferences) -> EncodedFields:
        return cls(
            json_url=percent_encode(json_url),
            label=percent_encode(preferences.label),
            option_fields=preferences.encode_optionals(),
        )


def dynamic_badge_url(fields: EncodedFields, query: str, link: str = "") -> str:
    url = (
        f"{SHIELDS_DYNAMIC_JSON}?url={fields.json_url}"
        f"&query={percent_encode(query)}"
        f"&label={fields.label}{fields.option_fields}"
    )
    if link:
        url += f"&link={percent_encode(link)}"
    return url


def _render_markdown(badge_url: str, link: str) -> str:
    if not link:
        return f"![{IMAGE_ALT_TEXT}]({badge_url})"
    return f"[![{IMAGE_ALT_TEXT}]({badge_url})]({link})"


def _render_asciidoc(badge_url: str, link: str) -> str:
    return f"image:{badge_url}[{IMAGE_ALT_TEXT}]"


def _render_html(badge_url: str, link: str) -> str:
    return f'<img alt="{IMAGE_ALT_TEXT}" src="{badge_url}">'


def _render_rst(badge_url: str, link: str) -> str:
    return f".. image:: {badge_url}\n  :alt: {IMAGE_ALT_TEXT}"


def _render_url(badge_url: str, link: str) -> str:
    return badge_url


_RENDERERS: dict[BadgeFormat, Callable[[str, str], str]] = {
    BadgeFormat.MARKDOWN: _render_markdown,
    BadgeFormat.ASCII_DOC: _render_asciidoc,
    BadgeFormat.HTML: _render_html,
    BadgeFormat.RST: _render_rst,
    BadgeFormat.URL: _render_url,
}


def render_badge(badge_format: BadgeFormat, fields: EncodedFields, query: str, link: str) -> str:
    """Render one fenced badge block.

    Markdown wraps the image in a link itself; every other dialect
    carries the mod page as the badge's ``link`` parameter instead.

    Args:
        badge_format: Output dialect.
        fields: Encoded fields shared across entries.
        query: JSONPath query for this entry's counter.
        link: Mod page URL, empty for the totals entry.

    Returns:
        str: The fenced block, newline terminated.
    """
    url_link = "" if badge_format is BadgeFormat.MARKDOWN else link
    badge_url = dynamic_badge_url(fields, query, url_link)
    body = _RENDERERS[badge_format](badge_url, link)
    return f"```{badge_format.value}\n{body}\n```\n"


def render_badges(
    entries: Iterable[tuple[str, ModDetails]],
    json_url: str,
    preferences: BadgePreferences,
) -> str:
    """Render the badge file for every aggregate entry, in order.

    Args:
        entries: ``(key, details)`` pairs, totals included.
        json_url: Universal URL of the gist file.
        preferences: Badge style preferences.

    Returns:
        str: Contents of badges.md.
    """
    fields = EncodedFields.build(json_url, preferences)
    blocks = []
    for key, entry in entries:
        query = f"$.{key}.{preferences.count.field_name}"
        block = render_badge(preferences.format, fields, query, entry.url)
        blocks.append(f"<!-- {entry.name} -->\n{block}\n")
    return "".join(blocks)
