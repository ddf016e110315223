"""Tests for CLI functionality."""

import json
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from apps.cli.main import app
from depup.config import VERSION
from depup.models import (
    Dependency,
    InstallResult,
    Language,
    ManifestUpdateResult,
    UpdateResult,
    UpdateSummary,
)
from depup.orchestrator import OrchestratorResult
from depup.specs import parse_version_spec


def make_result(updates=(), errors=(), dry_run=False):
    """Orchestrator result with one package.json holding ``updates``."""
    manifest = ManifestUpdateResult(Path("package.json"), Language.NODE)
    for name, raw, new_version in updates:
        dependency = Dependency(name, parse_version_spec(Language.NODE, raw), False, Language.NODE)
        manifest.add_result(UpdateResult.update(dependency, new_version))
    summary = UpdateSummary(dry_run=dry_run)
    summary.add_manifest(manifest)
    return OrchestratorResult(summary=summary, errors=list(errors))


class TestCLI:
    """Test CLI command interface."""

    def setup_method(self):
        """Setup test fixtures."""
        self.runner = CliRunner()

    def _invoke(self, args, result):
        with patch("apps.cli.main.Orchestrator") as mock_orchestrator_class:
            mock_orchestrator_class.return_value.run = AsyncMock(return_value=result)
            outcome = self.runner.invoke(app, args)
        return outcome, mock_orchestrator_class

    def test_help(self):
        """Should describe the tool and its options."""
        result = self.runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "depup" in result.output
        assert "--dry-run" in result.output

    def test_version(self):
        """Should print the version and exit."""
        result = self.runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"depup {VERSION}" in result.output

    def test_missing_directory(self, tmp_path):
        """Should exit with 1 for a directory that does not exist."""
        result = self.runner.invoke(app, [str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_age(self, tmp_path):
        """Should exit with 1 for a malformed --age."""
        result = self.runner.invoke(app, [str(tmp_path), "--age", "10x"])
        assert result.exit_code == 1
        assert "invalid duration format" in result.output

    def test_text_report(self, tmp_path):
        """Should print the text report and exit cleanly."""
        outcome, _ = self._invoke(
            [str(tmp_path), "--quiet"], make_result([("express", "^4.18.0", "4.19.2")])
        )
        assert outcome.exit_code == 0
        assert "1 updated" in outcome.output

    def test_options_reach_orchestrator(self, tmp_path):
        """Should pass language switches, filters and dry-run through."""
        outcome, mock_orchestrator_class = self._invoke(
            [
                str(tmp_path),
                "--rust",
                "--go",
                "--exclude",
                "serde",
                "--only",
                "tokio",
                "--age",
                "2w",
                "--dry-run",
                "--quiet",
            ],
            make_result(dry_run=True),
        )

        assert outcome.exit_code == 0
        args, kwargs = mock_orchestrator_class.call_args
        update_filter = args[1]
        assert update_filter.languages == frozenset({Language.RUST, Language.GO})
        assert update_filter.exclude == frozenset({"serde"})
        assert update_filter.only == frozenset({"tokio"})
        assert update_filter.min_age == timedelta(days=14)
        assert kwargs["dry_run"] is True
        assert kwargs["show_progress"] is False

    def test_json_report(self, tmp_path):
        """Should print JSON on stdout."""
        outcome, _ = self._invoke(
            [str(tmp_path), "--json"], make_result([("express", "^4.18.0", "4.19.2")])
        )

        assert outcome.exit_code == 0
        data = json.loads(outcome.stdout)
        assert data["summary"]["updates"] == 1
        assert data["manifests"][0]["updates"][0]["from"] == "4.18.0"

    def test_diff_report(self, tmp_path):
        """Should print a diff when asked."""
        outcome, _ = self._invoke(
            [str(tmp_path), "--diff"], make_result([("express", "^4.18.0", "4.19.2")])
        )
        assert outcome.exit_code == 0
        assert '+  "express": "^4.19.2"' in outcome.output

    def test_errors_exit_code(self, tmp_path):
        """Should exit with 2 when the run recorded errors."""
        outcome, _ = self._invoke(
            [str(tmp_path), "--quiet"], make_result(errors=["Failed to fetch left-pad: not found"])
        )
        assert outcome.exit_code == 2

    def test_install_failure(self, tmp_path):
        """Should exit with 1 when the package manager fails."""
        failed = InstallResult(Language.NODE, "npm install", success=False, stderr="ERESOLVE")
        with patch("apps.cli.main.run_installs", return_value=[failed]) as mock_installs:
            outcome, _ = self._invoke(
                [str(tmp_path), "--install", "--quiet"], make_result([("express", "^4.18.0", "4.19.2")])
            )

        assert outcome.exit_code == 1
        assert mock_installs.call_args.args[0] == [Language.NODE]
        assert "install failed: npm install" in outcome.output

    def test_install_skipped_on_dry_run(self, tmp_path):
        """Should not run package managers in dry-run mode."""
        with patch("apps.cli.main.run_installs") as mock_installs:
            outcome, _ = self._invoke(
                [str(tmp_path), "--install", "--dry-run", "--quiet"],
                make_result([("express", "^4.18.0", "4.19.2")], dry_run=True),
            )

        assert outcome.exit_code == 0
        mock_installs.assert_not_called()
