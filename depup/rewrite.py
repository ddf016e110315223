"""Span-level version replacement shared by the manifest writers.

Writers describe where a dependency's constraint lives with a regular
expression that has a named ``spec`` group. Only the bytes of that group
are replaced, so everything around it survives untouched.
"""

import re
from collections.abc import Callable, Iterable

from .models import VersionSpec
from .specs import rewrite_constraint

SpecParser = Callable[[str], VersionSpec | None]


def replace_spec(
    content: str,
    patterns: Iterable[re.Pattern[str]],
    parse: SpecParser,
    new_version: str,
    start: int = 0,
    end: int | None = None,
) -> str | None:
    """Rewrite the first recognizable constraint matched by ``patterns``.

    Patterns are tried in priority order and every match of a pattern is
    tried before moving to the next one, so a key that happens to share the
    package name but holds something else (a script entry, a path) is
    passed over.

    Args:
        content: Manifest text
        patterns: Compiled patterns, each with a ``spec`` group
        parse: Constraint parser for the manifest's ecosystem
        new_version: Version the constraint should move to
        start: Offset where the search starts
        end: Offset where the search stops

    Returns:
        The new text, or None if no match held a constraint that could move
    """
    if end is None:
        end = len(content)
    for pattern in patterns:
        for match in pattern.finditer(content, start, end):
            spec = parse(match.group("spec"))
            if spec is None:
                continue
            replacement = rewrite_constraint(spec, new_version)
            if replacement is None:
                continue
            return splice(content, match.start("spec"), match.end("spec"), replacement)
    return None


def splice(content: str, start: int, end: int, replacement: str) -> str:
    return content[:start] + replacement + content[end:]


def find_json_object(content: str, key: str) -> tuple[int, int] | None:
    """Locate the object value of the first ``"key": {...}`` member.

    Returns:
        ``(start, end)`` offsets spanning the braces, or None
    """
    match = re.search(r'"' + re.escape(key) + r'"\s*:\s*\{', content)
    if match is None:
        return None
    open_brace = match.end() - 1
    depth = 0
    in_string = False
    escaped = False
    for index in range(open_brace, len(content)):
        char = content[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return open_brace, index + 1
    return None
