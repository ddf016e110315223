"""Core data models for depup."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path


class Language(Enum):
    """Ecosystems depup knows how to update."""

    NODE = "node"
    PYTHON = "python"
    RUST = "rust"
    GO = "go"
    RUBY = "ruby"
    PHP = "php"
    JAVA = "java"

    @property
    def manifest_filename(self) -> str:
        return _MANIFEST_FILENAMES[self]

    @property
    def lock_filenames(self) -> tuple[str, ...]:
        return _LOCK_FILENAMES[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def registry_name(self) -> str:
        return _REGISTRY_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


_MANIFEST_FILENAMES = {
    Language.NODE: "package.json",
    Language.PYTHON: "pyproject.toml",
    Language.RUST: "Cargo.toml",
    Language.GO: "go.mod",
    Language.RUBY: "Gemfile",
    Language.PHP: "composer.json",
    Language.JAVA: "build.gradle",
}

_LOCK_FILENAMES = {
    Language.NODE: ("package-lock.json", "pnpm-lock.yaml", "yarn.lock"),
    Language.PYTHON: ("uv.lock", "rye.lock", "poetry.lock"),
    Language.RUST: ("Cargo.lock",),
    Language.GO: ("go.sum",),
    Language.RUBY: ("Gemfile.lock",),
    Language.PHP: ("composer.lock",),
    Language.JAVA: ("gradle.lockfile",),
}

_DISPLAY_NAMES = {
    Language.NODE: "Node.js",
    Language.PYTHON: "Python",
    Language.RUST: "Rust",
    Language.GO: "Go",
    Language.RUBY: "Ruby",
    Language.PHP: "PHP",
    Language.JAVA: "Java",
}

_REGISTRY_NAMES = {
    Language.NODE: "npm",
    Language.PYTHON: "PyPI",
    Language.RUST: "crates.io",
    Language.GO: "Go Proxy",
    Language.RUBY: "RubyGems",
    Language.PHP: "Packagist",
    Language.JAVA: "Maven Central",
}


class VersionSpecKind(Enum):
    EXACT = "exact"
    CARET = "caret"
    TILDE = "tilde"
    GREATER = "greater"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS = "less"
    LESS_OR_EQUAL = "less_or_equal"
    WILDCARD = "wildcard"
    RANGE = "range"
    GO_PINNED = "go_pinned"
    ANY = "any"


@dataclass(frozen=True)
class VersionSpec:
    """A classified version constraint that can be re-emitted byte for byte.

    ``raw`` is the constraint as written in the manifest and ``version`` the
    numeric body pulled out of it. ``prefix`` and ``suffix`` are whatever
    surrounds the body, so ``format_updated(version) == raw`` for every
    simple shape.
    """

    kind: VersionSpecKind
    raw: str
    version: str
    prefix: str | None = None
    suffix: str | None = None

    def format_updated(self, new_version: str) -> str:
        """Render the constraint with ``new_version`` in place of the body."""
        return f"{self.prefix or ''}{new_version}{self.suffix or ''}"

    def is_pinned(self) -> bool:
        return self.kind in (VersionSpecKind.EXACT, VersionSpecKind.GO_PINNED)

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class Dependency:
    """A single dependency declared in a manifest file.

    Pinned-ness normally follows the constraint kind (``EXACT`` or
    ``GO_PINNED``). Manifests whose versions are exact by convention set
    ``pinned`` explicitly instead: go.mod pins only on a ``// pinned``
    comment and Gradle never pins, since a plain ``g:a:1.2.3`` is how every
    Gradle dependency is written.
    """

    name: str
    spec: VersionSpec
    is_dev: bool
    language: Language
    variable_name: str | None = None  # Gradle def/val/ext holding the version
    pinned: bool | None = None  # set by manifests that decide pinning themselves

    @property
    def version(self) -> str:
        return self.spec.version

    def is_pinned(self) -> bool:
        if self.pinned is not None:
            return self.pinned
        return self.spec.is_pinned()


@dataclass(frozen=True)
class VersionInfo:
    """A published version and when it was released (UTC)."""

    version: str
    released_at: datetime


class SkipKind(Enum):
    PINNED = "pinned"
    ALREADY_LATEST = "already_latest"
    EXCLUDED = "excluded"
    NOT_IN_ONLY_LIST = "not_in_only_list"
    FETCH_FAILED = "fetch_failed"
    NO_SUITABLE_VERSION = "no_suitable_version"
    PARSE_ERROR = "parse_error"
    LANGUAGE_FILTERED = "language_filtered"


_SKIP_DESCRIPTIONS = {
    SkipKind.PINNED: "pinned version",
    SkipKind.ALREADY_LATEST: "already latest",
    SkipKind.EXCLUDED: "excluded by filter",
    SkipKind.NOT_IN_ONLY_LIST: "not in --only list",
    SkipKind.FETCH_FAILED: "fetch failed",
    SkipKind.NO_SUITABLE_VERSION: "no suitable version",
    SkipKind.PARSE_ERROR: "parse error",
    SkipKind.LANGUAGE_FILTERED: "language filtered",
}


@dataclass(frozen=True)
class SkipReason:
    """Why a dependency was left alone.

    ``message`` is only set for ``FETCH_FAILED`` and ``PARSE_ERROR``.
    """

    kind: SkipKind
    message: str | None = None

    @classmethod
    def fetch_failed(cls, message: str) -> "SkipReason":
        return cls(SkipKind.FETCH_FAILED, message)

    @classmethod
    def parse_error(cls, message: str) -> "SkipReason":
        return cls(SkipKind.PARSE_ERROR, message)

    def describe(self) -> str:
        """Human readable form used by the text report."""
        text = _SKIP_DESCRIPTIONS[self.kind]
        if self.message is not None:
            return f"{text}: {self.message}"
        return text

    def code(self) -> str:
        """Machine readable form used by the JSON report."""
        if self.message is not None:
            return f"{self.kind.value}: {self.message}"
        return self.kind.value

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class UpdateResult:
    """Decision for one dependency: an update or a skip with its reason."""

    dependency: Dependency
    new_version: str | None = None
    released_at: datetime | None = None
    skip_reason: SkipReason | None = None

    @classmethod
    def update(
        cls, dependency: Dependency, new_version: str, released_at: datetime | None = None
    ) -> "UpdateResult":
        return cls(dependency=dependency, new_version=new_version, released_at=released_at)

    @classmethod
    def skip(cls, dependency: Dependency, reason: SkipReason) -> "UpdateResult":
        return cls(dependency=dependency, skip_reason=reason)

    @property
    def is_update(self) -> bool:
        return self.skip_reason is None

    @property
    def is_skip(self) -> bool:
        return self.skip_reason is not None


@dataclass
class ManifestUpdateResult:
    """All decisions for one manifest, in declaration order."""

    path: Path
    language: Language
    results: list[UpdateResult] = field(default_factory=list)

    def add_result(self, result: UpdateResult) -> None:
        self.results.append(result)

    @property
    def modified(self) -> bool:
        return any(result.is_update for result in self.results)

    def updates(self) -> list[UpdateResult]:
        return [result for result in self.results if result.is_update]

    def skips(self) -> list[UpdateResult]:
        return [result for result in self.results if result.is_skip]


@dataclass
class UpdateSummary:
    """Everything a run decided, grouped by manifest."""

    dry_run: bool = False
    manifests: list[ManifestUpdateResult] = field(default_factory=list)

    def add_manifest(self, manifest: ManifestUpdateResult) -> None:
        self.manifests.append(manifest)

    def total_updates(self) -> int:
        return sum(len(manifest.updates()) for manifest in self.manifests)

    def total_skips(self) -> int:
        return sum(len(manifest.skips()) for manifest in self.manifests)

    def by_language(self, language: Language) -> list[ManifestUpdateResult]:
        return [manifest for manifest in self.manifests if manifest.language == language]

    def updated_languages(self) -> list[Language]:
        """Languages with at least one update, in first-seen order."""
        languages: list[Language] = []
        for manifest in self.manifests:
            if manifest.modified and manifest.language not in languages:
                languages.append(manifest.language)
        return languages


@dataclass(frozen=True)
class UpdateFilter:
    """Which dependencies a run is allowed to touch.

    Empty ``languages`` or ``only`` mean no restriction.
    """

    languages: frozenset[Language] = frozenset()
    exclude: frozenset[str] = frozenset()
    only: frozenset[str] = frozenset()
    include_pinned: bool = False
    min_age: timedelta | None = None

    def should_process_language(self, language: Language) -> bool:
        return not self.languages or language in self.languages

    def should_process_package(self, name: str) -> bool:
        if self.only:
            return name in self.only
        return name not in self.exclude


@dataclass(frozen=True)
class ManifestInfo:
    """A manifest found on disk by the detector."""

    path: Path
    language: Language
    is_workspace_root: bool = False
    is_tauri_rust: bool = False


@dataclass
class WriteResult:
    """Outcome of applying one manifest's updates."""

    path: Path
    updates_applied: int = 0
    updates_failed: int = 0
    file_modified: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass
class InstallResult:
    """Outcome of one package manager invocation."""

    language: Language
    command: str
    success: bool
    stdout: str = ""
    stderr: str = ""
