"""Ruby Gemfile parsing and rewriting."""

import re
from dataclasses import dataclass

from .errors import InvalidVersionSpec
from .models import Dependency, Language
from .specs import parse_ruby, rewrite_constraint

DEV_GROUPS = {"development", "test"}

_GEM = re.compile(r"""^\s*gem\s*\(?\s*(['"])(?P<name>[^'"]+)\1""")
_VERSION_ARG = re.compile(r"""\s*,\s*(['"])(?P<value>[^'"]*)\1""")
_GROUP_BLOCK = re.compile(r"^\s*group\s*\(?(?P<args>[^)]*?)\)?\s*do\b")
_INLINE_GROUP = re.compile(r"\bgroups?\s*(?::|=>)\s*(?P<args>\[[^\]]*\]|:\w+|['\"]\w+['\"])")
_BLOCK_OPEN = re.compile(r"\bdo\b\s*(\|[^|]*\|)?\s*$")
_KEYWORD_OPEN = re.compile(r"^\s*(?:if|unless|case|begin|while|until|def|class|module)\b")
_BLOCK_CLOSE = re.compile(r"^\s*end\b")
_GROUP_NAME = re.compile(r"""[:'"](\w+)""")


@dataclass
class GemDeclaration:
    """A ``gem`` line and the spans of its version literals."""

    line_index: int
    name: str
    versions: list[tuple[str, int, int]]  # (value, start, end) within the line
    in_dev_group: bool


def _names_dev_group(args: str) -> bool:
    return any(name in DEV_GROUPS for name in _GROUP_NAME.findall(args))


def _declarations(content: str) -> list[GemDeclaration]:
    declarations = []
    # One entry per open do/end block, True when it is a dev group.
    blocks: list[bool] = []
    for index, code in enumerate(content.splitlines()):
        if not code.strip() or code.lstrip().startswith("#"):
            continue

        if _BLOCK_CLOSE.match(code):
            if blocks:
                blocks.pop()
            continue

        in_dev = any(blocks)
        group = _GROUP_BLOCK.match(code)
        if group:
            blocks.append(in_dev or _names_dev_group(group.group("args")))
            continue

        gem = _GEM.match(code)
        if gem:
            versions = []
            position = gem.end()
            while True:
                arg = _VERSION_ARG.match(code, position)
                if arg is None or parse_ruby(arg.group("value")) is None:
                    break
                versions.append((arg.group("value"), arg.start("value"), arg.end("value")))
                position = arg.end()
            inline = _INLINE_GROUP.search(code, position)
            if inline and _names_dev_group(inline.group("args")):
                in_dev = True
            declarations.append(GemDeclaration(index, gem.group("name"), versions, in_dev))

        if _BLOCK_OPEN.search(code) or _KEYWORD_OPEN.match(code):
            blocks.append(in_dev)
    return declarations


def _declared_spec(declaration: GemDeclaration):
    values = [value for value, _, _ in declaration.versions]
    if len(values) == 1:
        return parse_ruby(values[0])
    return parse_ruby(", ".join(values))


def parse_gemfile(content: str) -> list[Dependency]:
    """Parse Gemfile content into dependencies.

    Only gems declared with at least one version requirement are returned.
    Several requirements (``'>= 6.0', '< 8'``) form a single range.
    """
    dependencies = []
    for declaration in _declarations(content):
        if not declaration.versions:
            continue
        spec = _declared_spec(declaration)
        if spec is None:
            continue
        dependencies.append(
            Dependency(declaration.name, spec, declaration.in_dev_group, Language.RUBY)
        )
    return dependencies


def update_gemfile(content: str, package: str, new_version: str) -> str:
    """Rewrite the first version requirement of ``package``."""
    lines = content.splitlines(keepends=True)
    for declaration in _declarations(content):
        if declaration.name != package or not declaration.versions:
            continue

        if len(declaration.versions) > 1:
            # The other requirements must still admit the new version.
            combined = _declared_spec(declaration)
            if combined is None or rewrite_constraint(combined, new_version) is None:
                break

        value, start, end = declaration.versions[0]
        spec = parse_ruby(value)
        replacement = rewrite_constraint(spec, new_version) if spec else None
        if replacement is None:
            break
        line = lines[declaration.line_index]
        lines[declaration.line_index] = line[:start] + replacement + line[end:]
        return "".join(lines)

    raise InvalidVersionSpec(package, "package not found or version could not be updated")
