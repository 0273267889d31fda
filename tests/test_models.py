"""Tests for the document models and download-count formatting."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from nexus_badges.errors import BadResponse
from nexus_badges.models import (
    GistResponse,
    ModDetails,
    TrackedMod,
    format_download_count,
)


class TestFormatDownloadCount:
    """Tests for the compact counter format published to the gist."""

    @pytest.mark.parametrize(
        "count, expected",
        [
            (0, "0"),
            (9999, "9999"),
            (10_000, "10k"),
            (12_345, "12.3k"),
            (123_456, "123k"),
            (1_000_000, "1M"),
            (1_234_567, "1.23M"),
            (1_500_000_000, "1.5T"),
            (5_800_000_000_000, "5.8e12"),
        ],
    )
    def test_formats(self, count: int, expected: str):
        """Counts keep at most three significant digits, truncated."""
        assert format_download_count(count) == expected

    def test_truncates_instead_of_rounding(self):
        """19999 is 19.9k, never 20k."""
        assert format_download_count(19_999) == "19.9k"


class TestTrackedMod:
    """Tests for TrackedMod endpoints."""

    def test_info_endpoint(self):
        mod = TrackedMod(domain="skyrim", mod_id=42)
        assert mod.info_endpoint == "https://api.nexusmods.com/v1/games/skyrim/mods/42.json"

    def test_page_url(self):
        mod = TrackedMod(domain="skyrim", mod_id=42)
        assert mod.url == "https://www.nexusmods.com/skyrim/mods/42"

    def test_negative_id_rejected(self):
        with pytest.raises(ValidationError):
            TrackedMod(domain="skyrim", mod_id=-1)

    def test_equality_by_value(self):
        """Two mods with the same domain and id are the same registry entry."""
        assert TrackedMod(domain="skyrim", mod_id=42) == TrackedMod(domain="skyrim", mod_id=42)


class TestModDetails:
    """Tests for the published form of a mod entry."""

    def test_to_document_formats_counters(self, cool_mod: ModDetails):
        mod = TrackedMod(domain="skyrim", mod_id=42)
        doc = cool_mod.with_url(mod).to_document()

        assert doc == {
            "name": "Cool Mod",
            "url": "https://www.nexusmods.com/skyrim/mods/42",
            "mod_downloads": "12.3k",
            "mod_unique_downloads": "6789",
        }

    def test_to_document_omits_empty_url(self):
        doc = ModDetails(
            name="Totals", uid=0, mod_downloads=5, mod_unique_downloads=1
        ).to_document()
        assert "url" not in doc
        assert "uid" not in doc

    def test_ignores_extra_nexus_fields(self):
        """Nexus returns many more fields than we track."""
        details = ModDetails.model_validate_json(
            '{"name": "Cool Mod", "uid": 1001, "mod_downloads": 3, '
            '"mod_unique_downloads": 2, "summary": "x", "version": "1.0"}'
        )
        assert details.uid == 1001


class TestGistResponse:
    """Tests for reading the gist file back."""

    def test_universal_url_strips_revision(self, make_gist):
        gist = make_gist()
        assert gist.universal_url() == "https://gist.githubusercontent.com/octo/abc123/raw"

    def test_content(self, make_gist):
        assert make_gist(content='{"a": 1}').content() == '{"a": 1}'

    def test_missing_file_is_bad_response(self):
        gist = GistResponse(id="abc123", files={})
        with pytest.raises(BadResponse, match="nexus_badges.json"):
            gist.content()

    def test_raw_url_without_raw_segment(self, make_gist):
        gist = make_gist(raw_url="https://example.com/nexus_badges.json")
        with pytest.raises(BadResponse, match="/raw/"):
            gist.universal_url()
