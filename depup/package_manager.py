"""Package manager detection and post-update installs."""

import subprocess
from pathlib import Path

from .logging import get_logger
from .models import InstallResult, Language

log = get_logger("depup.package_manager")

# Marker file -> install command, first match wins.
_NODE_MANAGERS = (
    ("pnpm-lock.yaml", ["pnpm", "install"]),
    ("yarn.lock", ["yarn", "install"]),
    ("bun.lockb", ["bun", "install"]),
    ("package-lock.json", ["npm", "install"]),
    ("package.json", ["npm", "install"]),
)

_PYTHON_MANAGERS = (
    ("uv.lock", ["uv", "sync"]),
    ("poetry.lock", ["poetry", "install"]),
    ("rye.lock", ["rye", "sync"]),
    ("Pipfile.lock", ["pipenv", "install"]),
    ("pyproject.toml", ["pip", "install", "-e", "."]),
    ("requirements.txt", ["pip", "install", "-e", "."]),
)

_SINGLE_MANAGERS = {
    Language.RUST: ("Cargo.toml", ["cargo", "build"]),
    Language.GO: ("go.mod", ["go", "mod", "download"]),
    Language.RUBY: ("Gemfile", ["bundle", "install"]),
    Language.PHP: ("composer.json", ["composer", "install"]),
}


def _first_match(directory: Path, candidates) -> list[str] | None:
    for marker, command in candidates:
        if (directory / marker).exists():
            return list(command)
    return None


def detect_package_manager(language: Language, directory: Path) -> list[str] | None:
    """Return the install command for ``language`` in ``directory``.

    Returns:
        The command as an argument list, or None if no manager applies
    """
    if language is Language.NODE:
        return _first_match(directory, _NODE_MANAGERS)
    if language is Language.PYTHON:
        return _first_match(directory, _PYTHON_MANAGERS)
    if language is Language.JAVA:
        if (directory / "gradlew").exists():
            return ["./gradlew", "build", "--refresh-dependencies"]
        if (directory / "build.gradle").exists() or (directory / "build.gradle.kts").exists():
            return ["gradle", "build", "--refresh-dependencies"]
        return None
    return _first_match(directory, [_SINGLE_MANAGERS[language]])


def run_install(language: Language, command: list[str], directory: Path) -> InstallResult:
    """Run one install command and capture its output.

    A missing executable is reported as a failed install.
    """
    display = " ".join(command)
    log.debug("install_started", language=language.value, command=display)
    try:
        completed = subprocess.run(command, cwd=directory, capture_output=True, text=True, check=False)
    except OSError as e:
        log.warning("install_failed", language=language.value, command=display, error=str(e))
        return InstallResult(language, display, success=False, stderr=str(e))

    success = completed.returncode == 0
    if not success:
        log.warning("install_failed", language=language.value, command=display, code=completed.returncode)
    return InstallResult(language, display, success, completed.stdout, completed.stderr)


def run_installs(languages: list[Language], directory: Path) -> list[InstallResult]:
    """Run the detected package manager for each language in turn."""
    results = []
    for language in languages:
        command = detect_package_manager(language, directory)
        if command is None:
            log.debug("no_package_manager", language=language.value)
            continue
        results.append(run_install(language, command, directory))
    return results
