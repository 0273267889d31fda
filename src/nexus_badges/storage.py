"""
Local documents -- whole-file JSON snapshots under the badges home.

    io/
    ├── input.json               # credentials + tracked mods
    ├── output.json              # last fetched download counts
    ├── badge_preferences.json   # badge style, kept apart from secrets
    └── badges.md                # rendered badge blocks

Documents are always read and written whole. A failed write is
raised to the caller, never swallowed: these files are the user's
only durable record of state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from . import BADGES_HOME
from .badges import BadgePreferences
from .errors import DecodeError
from .models import Input

logger = logging.getLogger("nexus_badges.storage")

INPUT_FILE = "input.json"
OUTPUT_FILE = "output.json"
PREFERENCES_FILE = "badge_preferences.json"
BADGES_FILE = "badges.md"

ModelT = TypeVar("ModelT", bound=BaseModel)


class LocalStore:
    """Reads and writes the local JSON documents."""

    def __init__(self, home: Optional[Path] = None):
        """Initialize the store, creating the home directory if needed.

        Args:
            home: Directory holding the documents. Defaults to BADGES_HOME.
        """
        self.home = Path(home or BADGES_HOME).expanduser()
        self.home.mkdir(parents=True, exist_ok=True)

    @property
    def input_path(self) -> Path:
        return self.home / INPUT_FILE

    @property
    def output_path(self) -> Path:
        return self.home / OUTPUT_FILE

    @property
    def preferences_path(self) -> Path:
        return self.home / PREFERENCES_FILE

    @property
    def badges_path(self) -> Path:
        return self.home / BADGES_FILE

    def _read_model(self, path: Path, model: type[ModelT]) -> Optional[ModelT]:
        if not path.exists():
            return None
        try:
            return model.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise DecodeError(f"Could not parse {path}: {exc}") from exc

    def _write_model(self, path: Path, document: BaseModel) -> None:
        path.write_text(document.model_dump_json(indent=2), encoding="utf-8")

    def load_input(self) -> Input:
        """Load the input document, falling back to defaults if absent."""
        document = self._read_model(self.input_path, Input)
        if document is None:
            logger.warning(
                "Could not find: %s. Continuing with default data structure",
                self.input_path,
            )
            return Input()
        return document

    def save_input(self, document: Input) -> None:
        self._write_model(self.input_path, document)

    def load_preferences(self) -> BadgePreferences:
        return self._read_model(self.preferences_path, BadgePreferences) or BadgePreferences()

    def save_preferences(self, preferences: BadgePreferences) -> None:
        self._write_model(self.preferences_path, preferences)

    def save_output(self, content: str) -> None:
        """Write the serialized aggregate snapshot."""
        self.output_path.write_text(content, encoding="utf-8")

    def write_badges(self, content: str) -> Path:
        self.badges_path.write_text(content, encoding="utf-8")
        return self.badges_path
