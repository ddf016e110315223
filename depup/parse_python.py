"""Python pyproject.toml parsing and rewriting."""

import re

import tomlkit
import tomlkit.exceptions
from packaging.requirements import InvalidRequirement, Requirement

from .errors import InvalidVersionSpec, TomlParseError
from .models import Dependency, Language
from .rewrite import replace_spec
from .specs import parse_python

# Poetry groups whose members only matter during development
DEV_GROUPS = {"dev", "test"}

_NAME_PREFIX = re.compile(r"^\s*[A-Za-z0-9][A-Za-z0-9._-]*\s*(?:\[[^\]]*\])?\s*")


def load_toml(content: str, filename: str) -> dict:
    """Parse TOML into plain Python containers."""
    try:
        return tomlkit.parse(content).unwrap()
    except tomlkit.exceptions.TOMLKitError as e:
        raise TomlParseError(filename, str(e)) from e


class PyprojectParser:
    """Parser for PEP 621, PEP 735 and Poetry dependency tables."""

    def _parse_requirement(self, requirement: str, is_dev: bool) -> Dependency | None:
        """Parse a PEP 508 string such as ``fastapi[all]>=0.85; python_version>'3.8'``."""
        try:
            req = Requirement(requirement)
        except InvalidRequirement:
            return None
        if req.url:
            return None

        # Keep the constraint as written; str(req.specifier) reorders clauses.
        constraint = requirement.split(";", 1)[0]
        constraint = _NAME_PREFIX.sub("", constraint, count=1).strip()
        if constraint.startswith("(") and constraint.endswith(")"):
            constraint = constraint[1:-1].strip()
        spec = parse_python(constraint)
        if spec is None:
            return None
        return Dependency(req.name, spec, is_dev, Language.PYTHON)

    def _parse_poetry_entry(self, name: str, value, is_dev: bool) -> Dependency | None:
        if isinstance(value, dict):
            value = value.get("version")
        if not isinstance(value, str):
            return None
        spec = parse_python(value)
        if spec is None:
            return None
        return Dependency(name, spec, is_dev, Language.PYTHON)

    def _requirement_list(self, requirements, is_dev: bool) -> list[Dependency]:
        dependencies = []
        for requirement in requirements or []:
            if not isinstance(requirement, str):
                continue  # PEP 735 {include-group = "..."}
            dependency = self._parse_requirement(requirement, is_dev)
            if dependency:
                dependencies.append(dependency)
        return dependencies

    def _poetry_table(self, table, is_dev: bool) -> list[Dependency]:
        dependencies = []
        for name, value in (table or {}).items():
            if name.lower() == "python":
                continue
            dependency = self._parse_poetry_entry(name, value, is_dev)
            if dependency:
                dependencies.append(dependency)
        return dependencies

    def parse(self, content: str) -> list[Dependency]:
        data = load_toml(content, "pyproject.toml")
        dependencies: list[Dependency] = []

        project = data.get("project", {})
        dependencies += self._requirement_list(project.get("dependencies"), False)
        for requirements in project.get("optional-dependencies", {}).values():
            dependencies += self._requirement_list(requirements, False)

        for requirements in data.get("dependency-groups", {}).values():
            dependencies += self._requirement_list(requirements, True)

        poetry = data.get("tool", {}).get("poetry", {})
        dependencies += self._poetry_table(poetry.get("dependencies"), False)
        dependencies += self._poetry_table(poetry.get("dev-dependencies"), True)
        for group_name, group in poetry.get("group", {}).items():
            dependencies += self._poetry_table(group.get("dependencies"), group_name in DEV_GROUPS)

        return dependencies


def _patterns(package: str) -> list[re.Pattern[str]]:
    name = re.escape(package)
    return [
        # Poetry: requests = "^2.28"
        re.compile(
            r"(?m)^[ \t]*[\"']?" + name + r"[\"']?[ \t]*=[ \t]*([\"'])(?P<spec>[^\"'\n]+)\1"
        ),
        # Poetry: requests = { version = "^2.28", extras = ["socks"] }
        re.compile(
            r"(?m)^[ \t]*[\"']?" + name + r"[\"']?[ \t]*=[ \t]*\{[^}\n]*?(?<![\w-])version[ \t]*=[ \t]*"
            r"([\"'])(?P<spec>[^\"'\n]+)\1"
        ),
        # PEP 508: "requests[socks]>=2.28; python_version >= '3.8'"
        re.compile(
            r"([\"'])(?i:" + name + r")(?![A-Za-z0-9._-])(?:\s*\[[^\]]*\])?\s*"
            r"(?P<spec>[<>=!~^][^;\"'\n]*?)\s*(?:;(?:(?!\1).)*)?\1"
        ),
    ]


def parse_pyproject(content: str) -> list[Dependency]:
    """Parse pyproject.toml content into dependencies.

    Args:
        content: The pyproject.toml file content

    Returns:
        Dependencies from ``[project]``, ``[dependency-groups]`` and
        ``[tool.poetry]`` tables
    """
    parser = PyprojectParser()
    return parser.parse(content)


def update_pyproject(content: str, package: str, new_version: str) -> str:
    updated = replace_spec(content, _patterns(package), parse_python, new_version)
    if updated is None:
        raise InvalidVersionSpec(package, "package not found or version could not be updated")
    return updated
