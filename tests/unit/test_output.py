"""Tests for report formatting."""

import json
from pathlib import Path

import pytest

from depup.models import Language, ManifestUpdateResult, SkipKind, SkipReason, UpdateResult, UpdateSummary
from depup.output import build_json_report, format_diff, format_json, format_text


@pytest.fixture
def summary(make_dependency):
    """One npm manifest with an update, a pinned skip and a failed fetch."""
    node = ManifestUpdateResult(Path("package.json"), Language.NODE)
    node.add_result(UpdateResult.update(make_dependency("express", "^4.18.0"), "4.19.2"))
    node.add_result(
        UpdateResult.skip(make_dependency("typescript", "5.3.3", is_dev=True), SkipReason(SkipKind.PINNED))
    )
    node.add_result(
        UpdateResult.skip(make_dependency("left-pad", "^1.3.0"), SkipReason.fetch_failed("not found"))
    )

    rust = ManifestUpdateResult(Path("Cargo.toml"), Language.RUST)
    rust.add_result(
        UpdateResult.skip(make_dependency("serde", "1.0.195", Language.RUST), SkipReason(SkipKind.ALREADY_LATEST))
    )

    result = UpdateSummary()
    result.add_manifest(node)
    result.add_manifest(rust)
    return result


class TestTextOutput:
    """Test the human readable report."""

    def test_default(self, summary):
        """Should list updates and totals without skips."""
        text = format_text(summary, [])

        assert text.splitlines() == [
            "package.json",
            "  express 4.18.0 -> 4.19.2",
            "Cargo.toml",
            "",
            "Summary:",
            "  1 package(s) updated",
            "  3 package(s) skipped",
        ]

    def test_verbose(self, summary):
        """Should add skip reasons and the per-language breakdown."""
        text = format_text(summary, [], verbose=True)

        assert "  typescript (skipped: pinned version)" in text
        assert "  left-pad (skipped: fetch failed: not found)" in text
        assert text.endswith("By language:\n  Node.js: 1 updated, 2 skipped\n  Rust: 0 updated, 1 skipped")

    def test_errors(self, summary):
        """Should list errors before the summary."""
        text = format_text(summary, ["Failed to fetch left-pad: not found"])
        assert "\nErrors:\n  - Failed to fetch left-pad: not found\n\nSummary:" in text

    def test_quiet(self, summary):
        """Should print a single line."""
        assert format_text(summary, [], quiet=True) == "1 updated"
        assert format_text(UpdateSummary(dry_run=True), [], quiet=True) == "(dry-run) No updates"

    def test_dry_run_prefix(self, summary):
        """Should prefix paths and the summary in dry-run mode."""
        summary.dry_run = True
        text = format_text(summary, [])

        assert text.startswith("(dry-run) package.json\n")
        assert "(dry-run) Summary:" in text


class TestJsonOutput:
    """Test the machine readable report."""

    def test_structure(self, summary):
        """Should emit updates with a from key and omit optional sections."""
        data = json.loads(format_json(summary, []))

        assert data["dry_run"] is False
        assert data["summary"] == {"updates": 1, "skips": 3}
        assert data["manifests"][0] == {
            "path": "package.json",
            "language": "Node.js",
            "updates": [{"name": "express", "from": "4.18.0", "to": "4.19.2", "dev": False}],
        }
        assert "errors" not in data

    def test_verbose_and_errors(self, summary):
        """Should include skips, language totals and errors when present."""
        data = json.loads(format_json(summary, ["boom"], verbose=True))

        assert data["manifests"][0]["skips"] == [
            {"name": "typescript", "version": "5.3.3", "reason": "pinned"},
            {"name": "left-pad", "version": "1.3.0", "reason": "fetch_failed: not found"},
        ]
        assert data["summary"]["by_language"][1] == {"language": "Rust", "updates": 0, "skips": 1}
        assert data["errors"] == ["boom"]

    def test_model(self, summary):
        """Should expose the report as a pydantic model."""
        report = build_json_report(summary, [])
        assert report.manifests[0].updates[0].from_ == "4.18.0"


class TestDiffOutput:
    """Test the diff style report."""

    def test_diff(self, summary):
        """Should show old and new constraints of modified manifests only."""
        text = format_diff(summary)

        assert text.splitlines() == [
            "--- a/package.json",
            "+++ b/package.json",
            "@@ express @@",
            '-  "express": "^4.18.0"',
            '+  "express": "^4.19.2"',
            "",
            "# 1 package(s) would be updated",
        ]
