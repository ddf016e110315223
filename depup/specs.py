"""Version constraint parsing for every supported ecosystem.

Each ``parse_<ecosystem>`` function classifies a raw constraint string into a
:class:`VersionSpec` or returns ``None`` when the shape is not recognized.
Parsers never raise.
"""

import re
from collections.abc import Callable

from .models import Language, VersionSpec, VersionSpecKind
from .versions import compare_versions

K = VersionSpecKind

# Operator -> kind, longest operators first so ">=" wins over ">".
_COMPARISONS = (
    (">=", K.GREATER_OR_EQUAL),
    ("<=", K.LESS_OR_EQUAL),
    (">", K.GREATER),
    ("<", K.LESS),
)

_FIRST_NUMBER = re.compile(r"\d+(?:\.\d+)*")


def _prefixed(raw: str, operators, body: str) -> VersionSpec | None:
    """Match ``<op><body>`` for each ``(op, kind)`` pair in order."""
    for operator, kind in operators:
        match = re.fullmatch(re.escape(operator) + r"(\s*)(" + body + ")", raw)
        if match:
            return VersionSpec(kind, raw, match.group(2), prefix=operator + match.group(1))
    return None


def _first_version(raw: str) -> str:
    match = _FIRST_NUMBER.search(raw)
    return match.group(0) if match else ""


# Node / npm

_NODE_BODY = r"\d+\.\d+\.\d+(?:-[\w.]+)?"
_NODE_RANGE = re.compile(
    r"^[<>=]+\d+\.\d+\.\d+\s+[<>=]+\d+\.\d+\.\d+$|^\d+\.\d+\.\d+\s*-\s*\d+\.\d+\.\d+$"
)
_NODE_WILDCARD = re.compile(r"^(\d+(?:\.\d+)?\.)?[xX*]$|^\*$")
_NODE_EXACT = re.compile(_NODE_BODY)


def parse_node(raw: str) -> VersionSpec | None:
    """Parse an npm semver range such as ``^1.2.3``, ``~1.2.3`` or ``1.x``."""
    raw = raw.strip()
    if not raw:
        return None

    spec = _prefixed(raw, (("^", K.CARET), ("~", K.TILDE), *_COMPARISONS), _NODE_BODY)
    if spec:
        return spec

    if _NODE_RANGE.match(raw):
        return VersionSpec(K.RANGE, raw, _first_version(raw))

    if _NODE_WILDCARD.match(raw):
        return VersionSpec(K.WILDCARD, raw, raw)

    if _NODE_EXACT.fullmatch(raw):
        return VersionSpec(K.EXACT, raw, raw)

    return None


# Python (PEP 440 and Poetry)

_PY_BODY = r"\d+(?:\.\d+)*(?:[a-zA-Z]+\d+)?(?:\.(?:post|dev)\d+)*"
_PY_RANGE = re.compile(r"^[<>=!~]+\s*\d+(?:\.\d+)*[\w.]*(?:\s*,\s*[<>=!~]+\s*\d+(?:\.\d+)*[\w.]*)+$")
_PY_WILDCARD = re.compile(r"^\*$|^\d+(?:\.\d+)*\.\*$")


def parse_python(raw: str) -> VersionSpec | None:
    """Parse a PEP 440 specifier or a Poetry constraint."""
    raw = raw.strip()
    if not raw:
        return None

    # "~=" must be tried before "~" and "==" before "=".
    operators = (
        ("==", K.EXACT),
        ("^", K.CARET),
        ("~=", K.TILDE),
        ("~", K.TILDE),
        *_COMPARISONS,
    )
    spec = _prefixed(raw, operators, _PY_BODY)
    if spec:
        return spec

    if _PY_RANGE.match(raw):
        return VersionSpec(K.RANGE, raw, _first_version(raw))

    if _PY_WILDCARD.match(raw):
        return VersionSpec(K.WILDCARD, raw, raw)

    # Poetry reads a bare version as "==".
    if re.fullmatch(_PY_BODY, raw):
        return VersionSpec(K.EXACT, raw, raw)

    return None


# Rust / Cargo

_RUST_BODY = r"\d+(?:\.\d+)*(?:-[\w.]+)?"
_RUST_RANGE = re.compile(
    r"^[<>=~^]+\s*\d+(?:\.\d+)*(?:-[\w.]+)?(?:\s*,\s*[<>=~^]+\s*\d+(?:\.\d+)*(?:-[\w.]+)?)+$"
)
_RUST_WILDCARD = re.compile(r"^\*$|^\d+(?:\.\d+)*\.\*$")


def parse_rust(raw: str) -> VersionSpec | None:
    """Parse a Cargo version requirement.

    A bare ``1.2.3`` means ``^1.2.3`` to Cargo, so it is classified as a
    caret requirement without a prefix.
    """
    raw = raw.strip()
    if not raw:
        return None

    operators = (("=", K.EXACT), ("^", K.CARET), ("~", K.TILDE), *_COMPARISONS)
    spec = _prefixed(raw, operators, _RUST_BODY)
    if spec:
        return spec

    if _RUST_RANGE.match(raw):
        return VersionSpec(K.RANGE, raw, _first_version(raw))

    if _RUST_WILDCARD.match(raw):
        return VersionSpec(K.WILDCARD, raw, raw)

    if re.fullmatch(_RUST_BODY, raw):
        return VersionSpec(K.CARET, raw, raw)

    return None


# Go modules

_GO_PSEUDO = re.compile(r"^v(\d+\.\d+\.\d+-(?:[0-9A-Za-z]+\.)*\d{14}-[a-f0-9]{12})$")
_GO_INCOMPATIBLE = re.compile(r"^v(\d+\.\d+\.\d+(?:-[\w.]+)?)\+incompatible$")
_GO_SEMVER = re.compile(r"^v(\d+\.\d+\.\d+(?:-[\w.]+)?)$")


def parse_go(raw: str) -> VersionSpec | None:
    """Parse a module version from ``go.mod``.

    Pseudo-versions (``v0.0.0-20230101120000-abcdef123456``) reference a
    single commit and are exact like any other Go version. Whether a
    requirement is pinned is decided by ``go.mod`` annotations, not here.
    """
    raw = raw.strip()
    if not raw:
        return None

    match = _GO_PSEUDO.match(raw)
    if match:
        return VersionSpec(K.EXACT, raw, match.group(1), prefix="v")

    match = _GO_INCOMPATIBLE.match(raw)
    if match:
        return VersionSpec(K.EXACT, raw, match.group(1), prefix="v", suffix="+incompatible")

    match = _GO_SEMVER.match(raw)
    if match:
        return VersionSpec(K.EXACT, raw, match.group(1), prefix="v")

    return None


# Ruby / Bundler

_RUBY_BODY = r"\d+(?:\.\d+)*(?:\.[A-Za-z]\w*)?"
_RUBY_RANGE = re.compile(
    r"^(?:~>|[<>=!]=?)\s*\d+(?:\.\d+)*[\w.]*(?:\s*,\s*(?:~>|[<>=!]=?)\s*\d+(?:\.\d+)*[\w.]*)+$"
)


def parse_ruby(raw: str) -> VersionSpec | None:
    """Parse a RubyGems requirement such as ``~> 1.2`` or ``>= 2.0``.

    The whitespace between operator and version is kept in the prefix so
    ``~> 1.2`` re-renders as ``~> 1.3`` and ``~>1.2`` as ``~>1.3``.
    """
    raw = raw.strip()
    if not raw:
        return None

    operators = (("~>", K.TILDE), *_COMPARISONS, ("=", K.EXACT))
    spec = _prefixed(raw, operators, _RUBY_BODY)
    if spec:
        return spec

    if _RUBY_RANGE.match(raw):
        return VersionSpec(K.RANGE, raw, _first_version(raw))

    if re.fullmatch(_RUBY_BODY, raw):
        return VersionSpec(K.EXACT, raw, raw)

    return None


# PHP / Composer

_PHP_BODY = r"\d+(?:\.\d+)*(?:-[\w.]+)?"
_PHP_WILDCARD = re.compile(r"^\*$|^\d+(?:\.\d+)*\.\*$")
_PHP_COMPOUND = re.compile(r"\|\||\||,|\s+")


def parse_php(raw: str) -> VersionSpec | None:
    """Parse a Composer constraint.

    Compound constraints (``>=1.0 <2.0``, ``^1.0 || ^2.0``) become a range
    represented by their first version.
    """
    raw = raw.strip()
    if not raw:
        return None

    spec = _prefixed(raw, (("^", K.CARET), ("~", K.TILDE), *_COMPARISONS), _PHP_BODY)
    if spec:
        return spec

    if _PHP_WILDCARD.match(raw):
        return VersionSpec(K.WILDCARD, raw, raw)

    if re.fullmatch(_PHP_BODY, raw):
        return VersionSpec(K.EXACT, raw, raw)

    parts = [part for part in _PHP_COMPOUND.split(raw) if part]
    if len(parts) > 1 and all(parse_php(part) for part in parts):
        return VersionSpec(K.RANGE, raw, _first_version(raw))

    return None


# Java / Gradle

_JAVA_EXACT = re.compile(r"^(\d+(?:\.\d+)*(?:[.-][A-Za-z0-9]+)*)$")
_JAVA_DYNAMIC = re.compile(r"^(?:\d+(?:\.\d+)*\.)?\+$|^latest\.(?:release|integration)$")
_JAVA_RANGE = re.compile(r"^[\[(]\s*([\w.\-]*)\s*,\s*([\w.\-]*)\s*[\])]$")


def parse_java(raw: str) -> VersionSpec | None:
    """Parse a Gradle or Maven version.

    Plain versions (``1.2.3``, ``5.3.20.RELEASE``) are exact. Dynamic
    versions (``1.2.+``, ``latest.release``) are wildcards and Maven ranges
    (``[1.0,2.0)``) are ranges. Variable references are resolved by the
    Gradle manifest parser before this is called.
    """
    raw = raw.strip()
    if not raw:
        return None

    if _JAVA_EXACT.match(raw):
        return VersionSpec(K.EXACT, raw, raw)

    if _JAVA_DYNAMIC.match(raw):
        return VersionSpec(K.WILDCARD, raw, raw)

    match = _JAVA_RANGE.match(raw)
    if match and (match.group(1) or match.group(2)):
        return VersionSpec(K.RANGE, raw, match.group(1) or match.group(2))

    return None


_PARSERS: dict[Language, Callable[[str], VersionSpec | None]] = {
    Language.NODE: parse_node,
    Language.PYTHON: parse_python,
    Language.RUST: parse_rust,
    Language.GO: parse_go,
    Language.RUBY: parse_ruby,
    Language.PHP: parse_php,
    Language.JAVA: parse_java,
}


def parse_version_spec(language: Language, raw: str) -> VersionSpec | None:
    """Classify ``raw`` with the parser for ``language``."""
    return _PARSERS[language](raw)


_WILDCARD_TAIL = re.compile(r"(?:\.(?:[xX*+]))+$|^[xX*+]$")


def rewrite_constraint(spec: VersionSpec, new_version: str) -> str | None:
    """Render ``spec`` as a constraint that admits ``new_version``.

    Simple shapes keep their prefix and suffix. A range moves its first
    bound, and only when every other bound still admits the new version.
    A wildcard keeps its precision, so ``1.x`` becomes ``2.x``. ``None``
    means the constraint cannot be moved safely.
    """
    if spec.kind is K.RANGE:
        start = spec.raw.find(spec.version)
        if start < 0:
            return None
        rest = spec.raw[start + len(spec.version):]
        for bound in _FIRST_NUMBER.findall(rest):
            if compare_versions(new_version, bound) >= 0:
                return None
        return spec.raw[:start] + new_version + rest

    if spec.kind is K.WILDCARD:
        tail = _WILDCARD_TAIL.search(spec.raw)
        if tail is None or tail.start() == 0:
            return spec.raw
        fixed = spec.raw[: tail.start()].count(".") + 1
        head = ".".join(new_version.split(".")[:fixed])
        return head + spec.raw[tail.start():]

    if spec.kind is K.ANY:
        return spec.raw

    return spec.format_updated(new_version)
