"""Manifest dispatch, file access and update application."""

import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from .errors import ManifestError, ManifestReadError, ManifestWriteError
from .logging import get_logger
from .models import Dependency, Language, ManifestUpdateResult, WriteResult
from .parse_go import parse_go_mod, update_go_mod
from .parse_java import parse_gradle, update_gradle
from .parse_node import parse_package_json, update_package_json
from .parse_php import parse_composer_json, update_composer_json
from .parse_python import parse_pyproject, update_pyproject
from .parse_ruby import parse_gemfile, update_gemfile
from .parse_rust import parse_cargo_toml, update_cargo_toml

log = get_logger("depup.manifests")

ManifestParser = Callable[[str], list[Dependency]]
ManifestUpdater = Callable[[str, str, str], str]

_HANDLERS: dict[Language, tuple[ManifestParser, ManifestUpdater]] = {
    Language.NODE: (parse_package_json, update_package_json),
    Language.PYTHON: (parse_pyproject, update_pyproject),
    Language.RUST: (parse_cargo_toml, update_cargo_toml),
    Language.GO: (parse_go_mod, update_go_mod),
    Language.RUBY: (parse_gemfile, update_gemfile),
    Language.PHP: (parse_composer_json, update_composer_json),
    Language.JAVA: (parse_gradle, update_gradle),
}


def parse_manifest(language: Language, content: str) -> list[Dependency]:
    """Parse manifest content with the parser for ``language``.

    Raises:
        ManifestError: If the document itself is malformed
    """
    parse, _ = _HANDLERS[language]
    return parse(content)


def update_manifest(language: Language, content: str, package: str, new_version: str) -> str:
    """Return ``content`` with the constraint of ``package`` moved to ``new_version``.

    Raises:
        InvalidVersionSpec: If the package cannot be found or moved
    """
    _, update = _HANDLERS[language]
    return update(content, package, new_version)


def read_manifest(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(path, str(e)) from e


def write_manifest(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` without ever leaving it half written.

    The text goes to a temporary file next to the manifest which is then
    renamed over it.
    """
    try:
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise ManifestWriteError(path, str(e)) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        if path.exists():
            os.chmod(temp_name, path.stat().st_mode & 0o7777)
        os.replace(temp_name, path)
    except OSError as e:
        Path(temp_name).unlink(missing_ok=True)
        raise ManifestWriteError(path, str(e)) from e


class ManifestWriter:
    """Applies a manifest's updates one at a time on the evolving text."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def apply_updates(self, manifest: ManifestUpdateResult) -> WriteResult:
        """Apply every update of ``manifest`` and write the file unless dry-run.

        A package the writer cannot move counts as failed without stopping
        the others.

        Args:
            manifest: Decisions for one manifest

        Returns:
            Counts of applied and failed updates and whether the file changed

        Raises:
            ManifestReadError: If the manifest cannot be read
            ManifestWriteError: If the new text cannot be written
        """
        result = WriteResult(path=manifest.path)
        original = read_manifest(manifest.path)
        content = original

        for update in manifest.updates():
            name = update.dependency.name
            try:
                content = update_manifest(manifest.language, content, name, update.new_version)
            except ManifestError as e:
                result.updates_failed += 1
                result.errors.append(f"Failed to update {name}: {e}")
                continue
            result.updates_applied += 1

        if content != original and not self.dry_run:
            write_manifest(manifest.path, content)
            result.file_modified = True
            log.debug("manifest_written", path=str(manifest.path), updates=result.updates_applied)

        return result
