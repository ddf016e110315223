"""pnpm workspace settings: member globs and minimum release age.

The minimum release age is read from the first of these that sets it:

1. ``.npmrc``: ``minimum-release-age=10d``
2. ``pnpm-workspace.yaml``: ``minimumReleaseAge: 14400`` (minutes) or a
   duration string
3. ``package.json``: ``pnpm.settings.minimumReleaseAge``
"""

import json
import re
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from .errors import InvalidDuration

_DURATION = re.compile(r"^(\d+)([dwm])$")
_UNIT_DAYS = {"d": 1, "w": 7, "m": 30}


def parse_duration(value: str) -> timedelta | None:
    """Parse ``<N>d``, ``<N>w`` or ``<N>m`` (30-day months).

    Returns:
        The duration, or None if ``value`` is not in that form
    """
    match = _DURATION.match(value.strip())
    if match is None:
        return None
    count, unit = match.groups()
    return timedelta(days=int(count) * _UNIT_DAYS[unit])


def parse_age(value: str) -> timedelta:
    """Parse the ``--age`` option.

    Raises:
        InvalidDuration: If ``value`` is not a duration
    """
    duration = parse_duration(value)
    if duration is None:
        raise InvalidDuration(value)
    return duration


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


def parse_workspace_yaml(text: str) -> dict[str, str | list[str]]:
    """Read the flat subset of YAML used by pnpm-workspace.yaml.

    Top-level ``key: value`` pairs become strings and ``key:`` followed by
    ``- item`` lines becomes a list. Nested mappings are not supported.
    """
    result: dict[str, str | list[str]] = {}
    current_key: str | None = None

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped.startswith("-"):
            items = result.get(current_key) if current_key else None
            if isinstance(items, list):
                items.append(_unquote(stripped[1:].split(" #", 1)[0]))
            continue

        key, sep, value = stripped.partition(":")
        if not sep:
            continue
        current_key = key.strip()
        value = value.split(" #", 1)[0].strip()
        result[current_key] = _unquote(value) if value else []

    return result


def workspace_packages(root: Path) -> list[str]:
    """Return the ``packages`` globs of ``root/pnpm-workspace.yaml``."""
    try:
        text = (root / "pnpm-workspace.yaml").read_text(encoding="utf-8")
    except OSError:
        return []
    packages = parse_workspace_yaml(text).get("packages", [])
    return packages if isinstance(packages, list) else []


def has_pnpm_workspace(root: Path) -> bool:
    return (root / "pnpm-workspace.yaml").exists() or (root / "pnpm-lock.yaml").exists()


def _npmrc_age(root: Path) -> timedelta | None:
    try:
        text = (root / ".npmrc").read_text(encoding="utf-8")
    except OSError:
        return None
    for line in text.splitlines():
        line = line.strip()
        if line.startswith(("#", ";")):
            continue
        if line.startswith("minimum-release-age="):
            return parse_duration(_unquote(line.split("=", 1)[1]))
    return None


def _workspace_yaml_age(root: Path) -> timedelta | None:
    try:
        text = (root / "pnpm-workspace.yaml").read_text(encoding="utf-8")
    except OSError:
        return None
    value = parse_workspace_yaml(text).get("minimumReleaseAge")
    if not isinstance(value, str) or not value:
        return None
    if value.isdigit():
        return timedelta(minutes=int(value))
    return parse_duration(value)


def _package_json_age(root: Path) -> timedelta | None:
    try:
        data = json.loads((root / "package.json").read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    try:
        value = data["pnpm"]["settings"]["minimumReleaseAge"]
    except (KeyError, TypeError):
        return None
    return parse_duration(value) if isinstance(value, str) else None


@dataclass
class PnpmSettings:
    minimum_release_age: timedelta | None = None

    @classmethod
    def from_dir(cls, root: Path) -> "PnpmSettings":
        """Read pnpm settings from ``root``; unreadable or malformed values are ignored."""
        for reader in (_npmrc_age, _workspace_yaml_age, _package_json_age):
            age = reader(root)
            if age is not None:
                return cls(minimum_release_age=age)
        return cls()
