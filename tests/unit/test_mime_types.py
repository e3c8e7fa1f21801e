"""
Unit tests for content type detection.
"""

import pytest

from previewserver.http.mime_types import CONTENT_TYPES, get_content_type


class TestGetContentType:
    """Tests for get_content_type()."""

    @pytest.mark.parametrize("name, expected", [
        ("notes.txt", "text/plain; charset=utf8"),
        ("index.html", "text/html; charset=utf8"),
        ("legacy.htm", "text/html; charset=utf8"),
        ("style.css", "text/css"),
        ("app.js", "text/javascript"),
        ("manual.pdf", "application/pdf"),
        ("bundle.zip", "application/zip"),
        ("photo.jpg", "image/jpeg"),
        ("photo.jpeg", "image/jpeg"),
        ("logo.png", "image/png"),
        ("icon.svg", "image/svg+xml"),
    ])
    def test_known_extensions(self, name: str, expected: str):
        assert get_content_type(name) == expected

    @pytest.mark.parametrize("name", ["report.PDF", "INDEX.HTML", "Logo.Png", "style.Css"])
    def test_lookup_is_case_sensitive(self, name: str):
        assert get_content_type(name) is None

    @pytest.mark.parametrize("name", ["Makefile", "data.json", "font.woff2", ".nojekyll", "archive.tar.gz"])
    def test_unknown_or_missing_extension(self, name: str):
        assert get_content_type(name) is None

    def test_uses_last_extension(self):
        assert get_content_type("bundle.min.js") == "text/javascript"
        assert get_content_type("backup.zip.txt") == "text/plain; charset=utf8"

    def test_accepts_paths(self, tmp_path):
        assert get_content_type(tmp_path / "docs" / "guide.html") == "text/html; charset=utf8"

    def test_directory_part_is_ignored(self):
        assert get_content_type("v1.2/README") is None

    def test_table_size(self):
        """Eleven extensions, nine distinct types."""
        assert len(CONTENT_TYPES) == 11
