"""Manifest detection for project directories."""

from pathlib import Path

from .models import Language, ManifestInfo
from .pnpm_settings import workspace_packages

_KOTLIN_GRADLE = "build.gradle.kts"


def identify(filename: str) -> Language | None:
    """Detect the ecosystem of a manifest from its filename.

    Args:
        filename: File name or path of the manifest

    Returns:
        The language, or None if the file is not a supported manifest
    """
    name = Path(filename).name
    if name == _KOTLIN_GRADLE:
        return Language.JAVA
    for language in Language:
        if name == language.manifest_filename:
            return language
    return None


def _root_manifest(root: Path, language: Language) -> Path | None:
    path = root / language.manifest_filename
    if path.is_file():
        return path
    if language is Language.JAVA and (root / _KOTLIN_GRADLE).is_file():
        return root / _KOTLIN_GRADLE
    return None


def _expand_member(root: Path, pattern: str) -> list[Path]:
    """Expand one pnpm member glob to package directories.

    ``dir/*`` and ``dir/**`` both mean the directories directly under
    ``dir``. Plain paths are taken as is and any other glob is ignored.
    """
    for suffix in ("/**", "/*"):
        if pattern.endswith(suffix):
            base = root / pattern[: -len(suffix)]
            if not base.is_dir():
                return []
            return sorted(child for child in base.iterdir() if child.is_dir())
    if "*" in pattern:
        return []
    return [root / pattern]


def workspace_members(root: Path) -> list[Path]:
    """Return the package.json of every pnpm workspace member under ``root``."""
    members: list[Path] = []
    root_manifest = root / Language.NODE.manifest_filename
    for pattern in workspace_packages(root):
        if pattern.startswith("!"):
            continue
        for directory in _expand_member(root, pattern.rstrip("/")):
            manifest = directory / Language.NODE.manifest_filename
            if manifest.is_file() and manifest != root_manifest and manifest not in members:
                members.append(manifest)
    return members


def detect_manifests(root: Path) -> list[ManifestInfo]:
    """Find the manifests of the project at ``root``.

    Only the root itself is scanned, plus pnpm workspace members when
    ``pnpm-workspace.yaml`` exists and ``src-tauri/Cargo.toml`` for Tauri
    apps.

    Args:
        root: Project directory

    Returns:
        Manifests in a stable order: root manifests by language, the Tauri
        crate, then workspace members
    """
    is_pnpm_workspace = (root / "pnpm-workspace.yaml").is_file()
    manifests = []

    for language in Language:
        path = _root_manifest(root, language)
        if path is None:
            continue
        manifests.append(
            ManifestInfo(
                path=path,
                language=language,
                is_workspace_root=language is Language.NODE and is_pnpm_workspace,
            )
        )

    tauri_cargo = root / "src-tauri" / Language.RUST.manifest_filename
    if tauri_cargo.is_file():
        manifests.append(ManifestInfo(path=tauri_cargo, language=Language.RUST, is_tauri_rust=True))

    if is_pnpm_workspace:
        for path in workspace_members(root):
            manifests.append(ManifestInfo(path=path, language=Language.NODE))

    return manifests
