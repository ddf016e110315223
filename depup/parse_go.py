"""Go go.mod parsing and rewriting.

go.mod is scanned line by line. Requirements come from single ``require``
statements and ``require ( ... )`` blocks. ``replace``, ``exclude`` and
``retract`` directives never name versions to update.

Two trailing annotations matter:

- ``// indirect`` marks a transitive requirement, reported as dev.
- ``// pinned`` marks a requirement the user wants left alone.

Go versions are exact by nature, so a plain requirement is explicitly not
pinned; only the annotation pins it.
"""

import re
from collections.abc import Iterator
from dataclasses import replace

from .errors import GoModParseError, InvalidVersionSpec
from .models import Dependency, Language, VersionSpecKind
from .specs import parse_go

_SINGLE_REQUIRE = re.compile(
    r"^(?P<indent>\s*)require\s+(?P<module>\S+)(?P<gap>\s+)(?P<version>v\d+\.\d+\.\d+\S*)\s*(?P<comment>//.*)?$"
)
_BLOCK_ENTRY = re.compile(
    r"^(?P<indent>\s*)(?P<module>\S+)(?P<gap>\s+)(?P<version>v\d+\.\d+\.\d+\S*)\s*(?P<comment>//.*)?$"
)
_BLOCK_START = re.compile(r"^\s*(?P<directive>require|replace|exclude|retract)\s*\(\s*(?://.*)?$")
_BLOCK_END = re.compile(r"^\s*\)\s*(?://.*)?$")
_PINNED = re.compile(r"//.*\bpinned\b")
_INDIRECT = re.compile(r"//.*\bindirect\b")


def _requirements(content: str) -> Iterator[tuple[int, re.Match[str]]]:
    """Yield ``(line_index, match)`` for every requirement line.

    Raises:
        GoModParseError: If a block is never closed
    """
    block: str | None = None
    block_start = 0
    for index, line in enumerate(content.splitlines()):
        if block is not None:
            if _BLOCK_END.match(line):
                block = None
                continue
            if block == "require":
                match = _BLOCK_ENTRY.match(line)
                if match:
                    yield index, match
            continue

        start = _BLOCK_START.match(line)
        if start:
            block = start.group("directive")
            block_start = index + 1
            continue

        match = _SINGLE_REQUIRE.match(line)
        if match:
            yield index, match

    if block is not None:
        raise GoModParseError("go.mod", block_start, f"unterminated {block} block")


def parse_go_mod(content: str) -> list[Dependency]:
    """Parse go.mod content into dependencies.

    Args:
        content: The go.mod file content

    Returns:
        One dependency per required module
    """
    dependencies = []
    for _, match in _requirements(content):
        spec = parse_go(match.group("version"))
        if spec is None:
            continue
        comment = match.group("comment") or ""
        pinned = bool(_PINNED.search(comment))
        if pinned:
            spec = replace(spec, kind=VersionSpecKind.GO_PINNED)
        dependencies.append(
            Dependency(
                name=match.group("module"),
                spec=spec,
                is_dev=bool(_INDIRECT.search(comment)),
                language=Language.GO,
                pinned=pinned,
            )
        )
    return dependencies


def update_go_mod(content: str, package: str, new_version: str) -> str:
    """Point ``package`` at ``new_version``, keeping indentation and comments."""
    if not new_version.startswith("v"):
        new_version = f"v{new_version}"

    lines = content.splitlines(keepends=True)
    for index, match in _requirements(content):
        if match.group("module") != package:
            continue
        line = lines[index]
        start, end = match.span("version")
        lines[index] = line[:start] + new_version + line[end:]
        return "".join(lines)

    raise InvalidVersionSpec(package, "package not found or version could not be updated")
