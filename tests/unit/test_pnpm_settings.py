"""Tests for pnpm workspace settings."""

from datetime import timedelta

import pytest

from depup.errors import InvalidDuration
from depup.pnpm_settings import (
    PnpmSettings,
    has_pnpm_workspace,
    parse_age,
    parse_duration,
    parse_workspace_yaml,
    workspace_packages,
)


class TestDurations:
    """Test duration parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("10d", timedelta(days=10)),
            ("2w", timedelta(days=14)),
            ("1m", timedelta(days=30)),
            ("0d", timedelta(0)),
            (" 3d ", timedelta(days=3)),
        ],
    )
    def test_valid(self, value, expected):
        """Should parse days, weeks and 30-day months."""
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "10", "abc", "10x", "d", "-1d", "1.5w"])
    def test_invalid(self, value):
        """Should return None for anything else."""
        assert parse_duration(value) is None

    def test_parse_age_raises(self):
        """Should raise a config error naming the bad value."""
        with pytest.raises(InvalidDuration) as exc_info:
            parse_age("soon")
        assert "soon" in str(exc_info.value)

    def test_parse_age(self):
        """Should return the duration for a valid value."""
        assert parse_age("7d") == timedelta(days=7)


class TestWorkspaceYaml:
    """Test the pnpm-workspace.yaml reader."""

    def test_packages_and_scalars(self):
        """Should read lists and quoted or bare scalars."""
        text = (
            "# workspace\n"
            "packages:\n"
            "  - 'packages/*'\n"
            '  - "apps/web"\n'
            "  - tools  # cli\n"
            "\n"
            "minimumReleaseAge: 1440 # one day\n"
            "linkWorkspacePackages: 'true'\n"
        )

        data = parse_workspace_yaml(text)

        assert data["packages"] == ["packages/*", "apps/web", "tools"]
        assert data["minimumReleaseAge"] == "1440"
        assert data["linkWorkspacePackages"] == "true"

    def test_workspace_packages(self, tmp_path):
        """Should return the packages list from the workspace file."""
        (tmp_path / "pnpm-workspace.yaml").write_text("packages:\n  - 'libs/*'\n")
        assert workspace_packages(tmp_path) == ["libs/*"]

    def test_workspace_packages_missing(self, tmp_path):
        """Should return an empty list without a workspace file."""
        assert workspace_packages(tmp_path) == []

    def test_has_pnpm_workspace(self, tmp_path):
        """Should recognise a workspace file or a pnpm lock file."""
        assert not has_pnpm_workspace(tmp_path)
        (tmp_path / "pnpm-lock.yaml").write_text("lockfileVersion: '9.0'\n")
        assert has_pnpm_workspace(tmp_path)


class TestMinimumReleaseAge:
    """Test where the minimum release age is read from."""

    def test_none_configured(self, tmp_path):
        """Should be unset without configuration."""
        assert PnpmSettings.from_dir(tmp_path).minimum_release_age is None

    def test_npmrc(self, tmp_path):
        """Should read minimum-release-age from .npmrc."""
        (tmp_path / ".npmrc").write_text("# comment\nregistry=https://registry.npmjs.org/\nminimum-release-age=10d\n")
        assert PnpmSettings.from_dir(tmp_path).minimum_release_age == timedelta(days=10)

    def test_workspace_minutes(self, tmp_path):
        """Should read a bare number from the workspace file as minutes."""
        (tmp_path / "pnpm-workspace.yaml").write_text("minimumReleaseAge: 2880\n")
        assert PnpmSettings.from_dir(tmp_path).minimum_release_age == timedelta(days=2)

    def test_workspace_duration(self, tmp_path):
        """Should accept a duration string in the workspace file."""
        (tmp_path / "pnpm-workspace.yaml").write_text('minimumReleaseAge: "2w"\n')
        assert PnpmSettings.from_dir(tmp_path).minimum_release_age == timedelta(days=14)

    def test_package_json(self, tmp_path):
        """Should read pnpm.settings.minimumReleaseAge from package.json."""
        (tmp_path / "package.json").write_text('{"pnpm": {"settings": {"minimumReleaseAge": "1m"}}}')
        assert PnpmSettings.from_dir(tmp_path).minimum_release_age == timedelta(days=30)

    def test_npmrc_wins(self, tmp_path):
        """Should prefer .npmrc over the other sources."""
        (tmp_path / ".npmrc").write_text("minimum-release-age=3d\n")
        (tmp_path / "pnpm-workspace.yaml").write_text("minimumReleaseAge: 14400\n")
        (tmp_path / "package.json").write_text('{"pnpm": {"settings": {"minimumReleaseAge": "1m"}}}')

        assert PnpmSettings.from_dir(tmp_path).minimum_release_age == timedelta(days=3)

    def test_malformed_ignored(self, tmp_path):
        """Should ignore malformed values and files."""
        (tmp_path / ".npmrc").write_text("minimum-release-age=soon\n")
        (tmp_path / "package.json").write_text("{not json")
        assert PnpmSettings.from_dir(tmp_path).minimum_release_age is None
