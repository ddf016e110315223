"""Tests for go.mod parsing and rewriting."""

import pytest

from depup.errors import GoModParseError, InvalidVersionSpec
from depup.models import VersionSpecKind
from depup.parse_go import parse_go_mod, update_go_mod

GO_MOD = """module example.com/app

go 1.21

require github.com/critical/lib v1.0.0 // pinned

require (
\tgithub.com/gin-gonic/gin v1.9.1
\tgolang.org/x/text v0.14.0 // indirect
\tgithub.com/BurntSushi/toml v1.3.2
)

replace github.com/old/mod => github.com/new/mod v1.2.0

exclude (
\tgithub.com/bad/mod v0.1.0
)
"""


class TestGoModParser:
    """Test go.mod parsing."""

    def test_requirements(self):
        """Should read single and block requirements only."""
        names = [dependency.name for dependency in parse_go_mod(GO_MOD)]
        assert names == [
            "github.com/critical/lib",
            "github.com/gin-gonic/gin",
            "golang.org/x/text",
            "github.com/BurntSushi/toml",
        ]

    def test_pinned_annotation(self):
        """Should pin only requirements marked // pinned."""
        dependencies = {dependency.name: dependency for dependency in parse_go_mod(GO_MOD)}

        critical = dependencies["github.com/critical/lib"]
        assert critical.is_pinned()
        assert critical.spec.kind is VersionSpecKind.GO_PINNED
        assert not dependencies["github.com/gin-gonic/gin"].is_pinned()

    def test_indirect_is_dev(self):
        """Should report indirect requirements as dev."""
        dependencies = {dependency.name: dependency for dependency in parse_go_mod(GO_MOD)}
        assert dependencies["golang.org/x/text"].is_dev
        assert not dependencies["github.com/gin-gonic/gin"].is_dev

    def test_unterminated_block(self):
        """Should raise GoModParseError for an unclosed block."""
        with pytest.raises(GoModParseError):
            parse_go_mod("module a\n\nrequire (\n\tgithub.com/x/y v1.0.0\n")


class TestGoModWriter:
    """Test format-preserving go.mod updates."""

    def test_block_entry(self):
        """Should replace only the version, adding the v prefix."""
        updated = update_go_mod(GO_MOD, "github.com/gin-gonic/gin", "1.10.0")
        assert "\tgithub.com/gin-gonic/gin v1.10.0\n" in updated
        assert updated.count("\n") == GO_MOD.count("\n")

    def test_comment_preserved(self):
        """Should keep trailing comments."""
        updated = update_go_mod(GO_MOD, "golang.org/x/text", "v0.15.0")
        assert "\tgolang.org/x/text v0.15.0 // indirect\n" in updated

    def test_replace_directive_untouched(self):
        """Should not treat replace targets as requirements."""
        with pytest.raises(InvalidVersionSpec):
            update_go_mod(GO_MOD, "github.com/new/mod", "v1.3.0")
