"""Tests for manifest dispatch and file writing."""

import os
import stat
from unittest.mock import patch

import pytest

from depup.errors import JsonParseError, ManifestReadError
from depup.manifests import ManifestWriter, parse_manifest, read_manifest, update_manifest, write_manifest
from depup.models import Language, ManifestUpdateResult, SkipKind, SkipReason, UpdateResult


class TestDispatch:
    """Test per-language dispatch."""

    def test_parse_by_language(self, sample_package_json, sample_cargo_toml):
        """Should route content to the parser of its language."""
        node = parse_manifest(Language.NODE, sample_package_json)
        rust = parse_manifest(Language.RUST, sample_cargo_toml)

        assert {dependency.language for dependency in node} == {Language.NODE}
        assert {dependency.language for dependency in rust} == {Language.RUST}

    def test_update_by_language(self, sample_cargo_toml):
        """Should route updates to the writer of its language."""
        updated = update_manifest(Language.RUST, sample_cargo_toml, "serde", "1.0.200")
        assert 'serde = "1.0.200"\n' in updated

    def test_malformed_document(self):
        """Should raise a parse error for malformed JSON."""
        with pytest.raises(JsonParseError):
            parse_manifest(Language.NODE, '{"dependencies": ')


class TestFileAccess:
    """Test reading and atomic writing."""

    def test_read_missing(self, tmp_path):
        """Should raise a read error naming the path."""
        with pytest.raises(ManifestReadError) as exc_info:
            read_manifest(tmp_path / "package.json")
        assert exc_info.value.path == tmp_path / "package.json"

    def test_write_replaces_content(self, tmp_path):
        """Should replace the file and leave no temporary file behind."""
        path = tmp_path / "Cargo.toml"
        path.write_text("old\n")

        write_manifest(path, "new\r\n")

        assert path.read_bytes() == b"new\r\n"
        assert [child.name for child in tmp_path.iterdir()] == ["Cargo.toml"]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_write_keeps_mode(self, tmp_path):
        """Should keep the permission bits of the original file."""
        path = tmp_path / "go.mod"
        path.write_text("module a\n")
        path.chmod(0o640)

        write_manifest(path, "module b\n")

        assert stat.S_IMODE(path.stat().st_mode) == 0o640


class TestManifestWriter:
    """Test applying a manifest's updates."""

    def _manifest(self, path, make_dependency, *updates):
        manifest = ManifestUpdateResult(path, Language.NODE)
        for name, raw, new_version in updates:
            manifest.add_result(UpdateResult.update(make_dependency(name, raw), new_version))
        return manifest

    def test_applies_updates(self, tmp_path, sample_package_json, make_dependency):
        """Should apply every update and write the file once."""
        path = tmp_path / "package.json"
        path.write_text(sample_package_json)
        manifest = self._manifest(
            path, make_dependency, ("express", "^4.18.0", "4.19.2"), ("lodash", "~4.17.21", "4.17.22")
        )

        result = ManifestWriter().apply_updates(manifest)

        assert result.updates_applied == 2
        assert result.updates_failed == 0
        assert result.file_modified
        content = path.read_text()
        assert '"express": "^4.19.2"' in content
        assert '"lodash": "~4.17.22"' in content
        assert '"express": "node server.js"' in content

    def test_dry_run_does_not_write(self, tmp_path, sample_package_json, make_dependency):
        """Should count updates without touching the file."""
        path = tmp_path / "package.json"
        path.write_text(sample_package_json)
        manifest = self._manifest(path, make_dependency, ("express", "^4.18.0", "4.19.2"))

        result = ManifestWriter(dry_run=True).apply_updates(manifest)

        assert result.updates_applied == 1
        assert not result.file_modified
        assert path.read_text() == sample_package_json

    def test_failed_update_counted(self, tmp_path, sample_package_json, make_dependency):
        """Should record a failed package and still apply the rest."""
        path = tmp_path / "package.json"
        path.write_text(sample_package_json)
        manifest = self._manifest(
            path, make_dependency, ("missing", "^1.0.0", "2.0.0"), ("lodash", "~4.17.21", "4.17.22")
        )

        result = ManifestWriter().apply_updates(manifest)

        assert result.updates_applied == 1
        assert result.updates_failed == 1
        assert result.errors[0].startswith("Failed to update missing:")
        assert '"lodash": "~4.17.22"' in path.read_text()

    def test_skips_ignored(self, tmp_path, sample_package_json, make_dependency):
        """Should not write when there is nothing to apply."""
        path = tmp_path / "package.json"
        path.write_text(sample_package_json)
        manifest = ManifestUpdateResult(path, Language.NODE)
        manifest.add_result(
            UpdateResult.skip(make_dependency("express", "^4.18.0"), SkipReason(SkipKind.ALREADY_LATEST))
        )

        result = ManifestWriter().apply_updates(manifest)

        assert result.updates_applied == 0
        assert not result.file_modified

    def test_unchanged_text_not_written(self, tmp_path, sample_package_json, make_dependency):
        """Should not rewrite the file when the updates leave its text as it was."""
        path = tmp_path / "package.json"
        path.write_text(sample_package_json)
        manifest = self._manifest(path, make_dependency, ("express", "^4.18.0", "4.18.0"))

        with patch("depup.manifests.write_manifest") as mock_write:
            result = ManifestWriter().apply_updates(manifest)

        assert not result.file_modified
        mock_write.assert_not_called()
        assert path.read_text() == sample_package_json
