"""Tests for the landing page and version manifest."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docmeta.core.errors import WriteError
from docmeta.core.redirect import MANIFEST_FILENAME, RedirectGenerator


class TestRedirectGenerator:
    def test_points_at_latest(self, tmp_path: Path):
        path = RedirectGenerator().generate("r1.1.0", tmp_path)
        html = path.read_text()
        assert path == tmp_path / "index.html"
        assert 'url=./r1.1.0/' in html
        assert 'href="./r1.1.0/"' in html

    def test_rerun_replaces_target(self, tmp_path: Path):
        generator = RedirectGenerator()
        generator.generate("v1", tmp_path)
        html = generator.generate("v2", tmp_path).read_text()
        assert "./v2/" in html
        assert "v1" not in html

    def test_no_temp_files_left(self, tmp_path: Path):
        RedirectGenerator().generate("v1", tmp_path)
        assert [p.name for p in tmp_path.iterdir()] == ["index.html"]

    def test_custom_filename(self, tmp_path: Path):
        path = RedirectGenerator("latest.html").generate("v1", tmp_path)
        assert path.name == "latest.html"

    def test_version_is_escaped(self, tmp_path: Path):
        html = RedirectGenerator.render('v1"<b>')
        assert "<b>" not in html

    def test_missing_output_root(self, tmp_path: Path):
        with pytest.raises(WriteError):
            RedirectGenerator().generate("v1", tmp_path / "missing")


class TestManifest:
    def test_manifest_contents(self, tmp_path: Path):
        path = RedirectGenerator.write_manifest(["v1", "v2"], "v2", tmp_path)
        assert path.name == MANIFEST_FILENAME
        assert json.loads(path.read_text()) == {"versions": ["v1", "v2"], "latest": "v2"}

    def test_manifest_missing_root(self, tmp_path: Path):
        with pytest.raises(WriteError):
            RedirectGenerator.write_manifest([], "v1", tmp_path / "missing")
