"""Java build.gradle / build.gradle.kts parsing and rewriting."""

import re
from dataclasses import dataclass

from .errors import InvalidVersionSpec
from .models import Dependency, Language
from .specs import parse_java, rewrite_constraint

DEV_CONFIGURATIONS = {
    "testImplementation",
    "testCompileOnly",
    "testRuntimeOnly",
    "testApi",
    "androidTestImplementation",
    "debugImplementation",
}

_VALUE = r"(?P<q>['\"])(?P<value>[^'\"]+)(?P=q)"
_VAR_GROOVY = re.compile(r"^\s*def\s+(?P<name>\w+)\s*=\s*" + _VALUE)
_VAR_KOTLIN = re.compile(r"^\s*va[lr]\s+(?P<name>\w+)(?:\s*:\s*String)?\s*=\s*(?P<q>\")(?P<value>[^\"]+)\"")
_VAR_EXT_DOTTED = re.compile(r"^\s*(?:project\.)?ext\.(?P<name>\w+)\s*=\s*" + _VALUE)
_VAR_EXT_ENTRY = re.compile(r"\s*(?:set\(\s*\")?(?P<name>\w+)\"?\s*[=,]\s*" + _VALUE)
_EXT_SEPARATOR = re.compile(r"\s*[;,]?")
_EXT_BLOCK_START = re.compile(r"^\s*ext\s*\{")

_DEP_MAP = re.compile(
    r"^\s*(?P<config>\w+)\s*[(\s]+group\s*[:=]\s*['\"](?P<group>[^'\"]+)['\"]\s*,\s*"
    r"name\s*[:=]\s*['\"](?P<artifact>[^'\"]+)['\"]\s*,\s*"
    r"version\s*[:=]\s*(?P<q>['\"]?)(?P<version>[^'\",)\s]+)(?P=q)"
)
_DEP_STRING_VAR = re.compile(
    r"^\s*(?P<config>\w+)\s*[(\s]*\"(?P<group>[^:\"]+):(?P<artifact>[^:\"]+):"
    r"(?P<version>\$\{?(?P<var>\w+)\}?)\""
)
_DEP_STRING = re.compile(
    r"^\s*(?P<config>\w+)\s*[(\s]*(?P<q>['\"])(?P<group>[^:'\"$]+):(?P<artifact>[^:'\"$]+):"
    r"(?P<version>[^'\":@$]+)(?:[:@][^'\"]*)?(?P=q)"
)


def _ext_entries(line: str, position: int) -> list[re.Match[str]]:
    """Match ``name = 'value'`` entries of an ``ext`` block from ``position`` on.

    Java toolchain settings (``sourceCompatibility``, ``encoding``) are
    not dependency versions and are left out.
    """
    matches = []
    while True:
        match = _VAR_EXT_ENTRY.match(line, position)
        if match is None:
            return matches
        name = match.group("name")
        if not name.startswith(("source", "target")) and name != "encoding":
            matches.append(match)
        position = _EXT_SEPARATOR.match(line, match.end()).end()


@dataclass
class VariableDefinition:
    """A version held in a Gradle variable, with where its value sits."""

    name: str
    value: str
    line_index: int
    quote: str
    start: int
    end: int


@dataclass
class GradleDeclaration:
    dependency: Dependency
    line_index: int
    start: int  # span of the literal version, unused when a variable holds it
    end: int


class GradleParser:
    """Parser for Groovy and Kotlin DSL dependency declarations.

    Versions may be written inline (``'g:a:1.0'``) or held in a variable
    defined with ``def``, ``val`` or inside an ``ext { }`` block. A
    dependency that reads a variable records its name so updates rewrite
    the definition instead of the dependency line.
    """

    def __init__(self, content: str):
        self.content = content
        self.lines = content.splitlines()
        self.variables = self._extract_variables()

    def _extract_variables(self) -> dict[str, VariableDefinition]:
        variables: dict[str, VariableDefinition] = {}
        ext_depth = 0
        for index, line in enumerate(self.lines):
            stripped = line.strip()
            if not stripped or stripped.startswith("//"):
                continue

            block = _EXT_BLOCK_START.match(line) if ext_depth == 0 else None
            if block:
                # ext { springVersion = '6.1.2' } may hold entries on its opening line.
                matches = _ext_entries(line, block.end())
                ext_depth = line.count("{") - line.count("}")
            else:
                match = _VAR_GROOVY.match(line) or _VAR_KOTLIN.match(line) or _VAR_EXT_DOTTED.match(line)
                if match is None and ext_depth > 0:
                    matches = _ext_entries(line, 0)
                else:
                    matches = [match] if match else []
                if ext_depth > 0:
                    ext_depth += line.count("{") - line.count("}")

            for match in matches:
                variables[match.group("name")] = VariableDefinition(
                    name=match.group("name"),
                    value=match.group("value"),
                    line_index=index,
                    quote=match.group("q"),
                    start=match.start("value"),
                    end=match.end("value"),
                )
        return variables

    def _resolve(self, token: str, quoted: bool) -> tuple[str, str | None] | None:
        """Turn a version token into ``(version, variable_name)``."""
        if token.startswith("${") and token.endswith("}"):
            name = token[2:-1]
        elif token.startswith("$"):
            name = token[1:]
        elif not quoted and not token[:1].isdigit():
            name = token
        else:
            return token, None

        variable = self.variables.get(name)
        if variable is None:
            return None
        return variable.value, name

    def _declaration(self, index: int, line: str) -> GradleDeclaration | None:
        match = _DEP_MAP.match(line)
        quoted = bool(match and match.group("q"))
        if match is None:
            match = _DEP_STRING_VAR.match(line)
            quoted = True
        if match is None:
            match = _DEP_STRING.match(line)
            quoted = True
        if match is None:
            return None

        resolved = self._resolve(match.group("version"), quoted)
        if resolved is None:
            return None
        version, variable_name = resolved
        spec = parse_java(version)
        if spec is None:
            return None

        dependency = Dependency(
            name=f"{match.group('group')}:{match.group('artifact')}",
            spec=spec,
            is_dev=match.group("config") in DEV_CONFIGURATIONS,
            language=Language.JAVA,
            variable_name=variable_name,
            # A plain Gradle version is how every dependency is declared,
            # not a request to hold it back.
            pinned=False,
        )
        return GradleDeclaration(dependency, index, match.start("version"), match.end("version"))

    def declarations(self) -> list[GradleDeclaration]:
        declarations = []
        for index, line in enumerate(self.lines):
            if line.strip().startswith("//"):
                continue
            declaration = self._declaration(index, line)
            if declaration:
                declarations.append(declaration)
        return declarations

    def parse(self) -> list[Dependency]:
        return [declaration.dependency for declaration in self.declarations()]

    def update(self, package: str, new_version: str) -> str:
        lines = self.content.splitlines(keepends=True)
        for declaration in self.declarations():
            dependency = declaration.dependency
            if dependency.name != package:
                continue

            if dependency.variable_name is not None:
                variable = self.variables[dependency.variable_name]
                index, start, end = variable.line_index, variable.start, variable.end
            else:
                index, start, end = declaration.line_index, declaration.start, declaration.end

            replacement = rewrite_constraint(dependency.spec, new_version)
            if replacement is None:
                break
            line = lines[index]
            lines[index] = line[:start] + replacement + line[end:]
            return "".join(lines)

        raise InvalidVersionSpec(package, "package not found or version could not be updated")


def parse_gradle(content: str) -> list[Dependency]:
    """Parse build.gradle or build.gradle.kts content into dependencies.

    Args:
        content: The build script content

    Returns:
        Dependencies named ``group:artifact``
    """
    return GradleParser(content).parse()


def update_gradle(content: str, package: str, new_version: str) -> str:
    return GradleParser(content).update(package, new_version)
