"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest

from depup.models import Dependency, Language, VersionInfo
from depup.specs import parse_version_spec


@pytest.fixture
def now():
    """Fixed instant used for release-age comparisons."""
    return datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_dependency():
    """Build a dependency from a raw constraint, the way a manifest parser would."""

    def _make(name, raw, language=Language.NODE, is_dev=False, **kwargs):
        spec = parse_version_spec(language, raw)
        assert spec is not None, raw
        return Dependency(name, spec, is_dev, language, **kwargs)

    return _make


@pytest.fixture
def make_versions():
    """Build VersionInfo lists from ``(version, 'YYYY-MM-DD')`` pairs."""

    def _make(*pairs):
        return [
            VersionInfo(version, datetime.fromisoformat(day).replace(tzinfo=timezone.utc))
            for version, day in pairs
        ]

    return _make


@pytest.fixture
def sample_package_json():
    """Sample package.json content for testing."""
    return """{
  "name": "test-project",
  "version": "1.0.0",
  "scripts": {
    "express": "node server.js"
  },
  "dependencies": {
    "express": "^4.18.0",
    "lodash": "~4.17.21"
  },
  "devDependencies": {
    "typescript": "5.3.3",
    "local-lib": "workspace:*"
  }
}
"""


@pytest.fixture
def sample_pyproject():
    """Sample PEP 621 pyproject.toml content for testing."""
    return """[project]
name = "demo"
version = "0.1.0"
dependencies = [
    "fastapi[all]>=0.85.0",  # web
    "httpx~=0.27.0",
    "uvloop>=0.17.0; sys_platform != 'win32'",
    "attrs==23.1.0",
    "pkg @ https://example.com/pkg.tar.gz",
]

[project.optional-dependencies]
docs = ["mkdocs>=1.5"]

[dependency-groups]
dev = ["pytest>=8.0"]
"""


@pytest.fixture
def sample_cargo_toml():
    """Sample Cargo.toml content for testing."""
    return """[package]
name = "demo"
version = "0.1.0"

[dependencies]
serde = "1.0.190"
tokio = { version = "1.35", features = ["full"] }
local = { path = "../local" }

[dev-dependencies]
mockall = "0.13.0"
"""
