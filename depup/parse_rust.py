"""Rust Cargo.toml parsing and rewriting."""

import re

from .errors import InvalidVersionSpec
from .models import Dependency, Language
from .parse_python import load_toml
from .rewrite import replace_spec
from .specs import parse_rust

# Table name -> is_dev
DEPENDENCY_TABLES = {
    "dependencies": False,
    "dev-dependencies": True,
    "build-dependencies": True,
}


def _table_dependencies(table, is_dev: bool) -> list[Dependency]:
    dependencies = []
    for name, value in (table or {}).items():
        if isinstance(value, dict):
            # git/path/workspace dependencies carry no version to bump
            value = value.get("version")
        if not isinstance(value, str):
            continue
        spec = parse_rust(value)
        if spec is None:
            continue
        dependencies.append(Dependency(name, spec, is_dev, Language.RUST))
    return dependencies


def parse_cargo_toml(content: str) -> list[Dependency]:
    """Parse Cargo.toml content into dependencies.

    Reads the top-level dependency tables, their ``[target.<cfg>.*]``
    variants and ``[workspace.dependencies]``.
    """
    data = load_toml(content, "Cargo.toml")
    dependencies: list[Dependency] = []

    for table_name, is_dev in DEPENDENCY_TABLES.items():
        dependencies += _table_dependencies(data.get(table_name), is_dev)

    for target in data.get("target", {}).values():
        if not isinstance(target, dict):
            continue
        for table_name, is_dev in DEPENDENCY_TABLES.items():
            dependencies += _table_dependencies(target.get(table_name), is_dev)

    workspace = data.get("workspace", {})
    dependencies += _table_dependencies(workspace.get("dependencies"), False)

    return dependencies


def _patterns(package: str) -> list[re.Pattern[str]]:
    name = r"[\"']?" + re.escape(package) + r"[\"']?"
    value = r"([\"'])(?P<spec>[^\"'\n]+)\1"
    return [
        # serde = "1.0"
        re.compile(r"(?m)^[ \t]*" + name + r"[ \t]*=[ \t]*" + value),
        # serde = { version = "1.0", features = ["derive"] }
        re.compile(
            r"(?m)^[ \t]*" + name + r"[ \t]*=[ \t]*\{[^}\n]*?(?<![\w-])version[ \t]*=[ \t]*" + value
        ),
        # serde.version = "1.0"
        re.compile(r"(?m)^[ \t]*" + name + r"\.version[ \t]*=[ \t]*" + value),
        # [dependencies.serde] followed by version = "1.0"
        re.compile(
            r"(?m)^[ \t]*\[(?:workspace\.|target\.[^\]\n]+\.)?"
            r"(?:dependencies|dev-dependencies|build-dependencies)\." + name + r"\][^\n]*\n"
            r"(?:(?![ \t]*\[)[^\n]*\n)*?[ \t]*version[ \t]*=[ \t]*" + value
        ),
    ]


def update_cargo_toml(content: str, package: str, new_version: str) -> str:
    updated = replace_spec(content, _patterns(package), parse_rust, new_version)
    if updated is None:
        raise InvalidVersionSpec(package, "package not found or version could not be updated")
    return updated
