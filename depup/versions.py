"""Version ordering and prerelease detection.

Registries disagree on version syntax, so ordering only looks at the numeric
segments of a version: ``v1.10.0-rc.1`` orders as ``[1, 10, 0, 1]``.
Prerelease handling is a separate filter in the update judge.
"""

import re
from functools import cmp_to_key

from .models import VersionInfo

_SEGMENT_SPLIT = re.compile(r"[.\-]")

_PRERELEASE_TAGS = ("alpha", "beta", "rc", "dev", "canary", "pre", "nightly", "snapshot")

# PEP 440 style tags glued to a number: 1.0a1, 2.0.0rc1, 1.0.dev3
_ATTACHED_PRERELEASE = re.compile(r"(?i)^v?\d+(?:\.\d+)*\.?(?:a|b|rc|alpha|beta|pre|dev)\d*(?:[.+].*)?$")


def numeric_segments(version: str) -> list[int]:
    """Return the integer segments of a version, ignoring everything else."""
    if version.startswith("v"):
        version = version[1:]
    return [int(part) for part in _SEGMENT_SPLIT.split(version) if part.isdigit()]


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        Negative if ``a < b``, zero if they are equal, positive if ``a > b``
    """
    left = numeric_segments(a)
    right = numeric_segments(b)
    # List comparison is lexicographic and a longer list wins on a shared prefix.
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


version_key = cmp_to_key(compare_versions)


def sort_versions(versions: list[VersionInfo]) -> list[VersionInfo]:
    """Sort version infos ascending by the numeric comparator."""
    return sorted(versions, key=lambda info: version_key(info.version))


def latest_version(versions: list[VersionInfo]) -> VersionInfo | None:
    if not versions:
        return None
    return max(versions, key=lambda info: version_key(info.version))


def is_prerelease(version: str) -> bool:
    """Check whether a version carries a prerelease tag.

    Tags follow a ``-`` (semver) or sit directly on a number (PEP 440).

    ``1.0.0-beta.2`` and ``19.3.0-canary-abc`` are prereleases, ``1.0.0`` and
    ``v0.0.0-20230101120000-abcdef123456`` (a Go pseudo-version) are not.
    """
    if _ATTACHED_PRERELEASE.match(version):
        return True
    _, sep, rest = version.partition("-")
    if not sep:
        return False
    for segment in _SEGMENT_SPLIT.split(rest):
        if segment.lower().startswith(_PRERELEASE_TAGS):
            return True
    return False
