"""Node.js package.json parsing and rewriting."""

import json
import re

from .errors import InvalidVersionSpec, JsonParseError
from .models import Dependency, Language
from .rewrite import SpecParser, find_json_object, replace_spec
from .specs import parse_node

# Section name -> is_dev
DEPENDENCY_SECTIONS = {
    "dependencies": False,
    "devDependencies": True,
    "peerDependencies": False,
    "optionalDependencies": False,
}


def load_json_object(content: str, filename: str) -> dict:
    """Decode a JSON manifest, insisting on an object at the top level."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise JsonParseError(filename, str(e)) from e
    if not isinstance(data, dict):
        raise JsonParseError(filename, "top-level value is not an object")
    return data


def collect_json_dependencies(
    data: dict,
    sections: dict[str, bool],
    parse: SpecParser,
    language: Language,
    skip=None,
) -> list[Dependency]:
    """Build dependencies from ``{"section": {"name": "constraint"}}`` maps.

    Entries whose constraint is not a string or is not recognized
    (``workspace:*``, git URLs, ``latest``) are ignored.
    """
    dependencies = []
    for section, is_dev in sections.items():
        entries = data.get(section)
        if not isinstance(entries, dict):
            continue
        for name, value in entries.items():
            if not isinstance(value, str):
                continue
            if skip is not None and skip(name):
                continue
            spec = parse(value)
            if spec is None:
                continue
            dependencies.append(Dependency(name, spec, is_dev, language))
    return dependencies


def update_json_version(
    content: str,
    sections: dict[str, bool],
    parse: SpecParser,
    package: str,
    new_version: str,
) -> str:
    """Rewrite one constraint string inside the first section declaring it.

    The edit is made on the document text, so its formatting is kept exactly.
    """
    pattern = re.compile(r'"' + re.escape(package) + r'"\s*:\s*"(?P<spec>[^"]+)"')
    for section in sections:
        span = find_json_object(content, section)
        if span is None:
            continue
        updated = replace_spec(content, [pattern], parse, new_version, *span)
        if updated is not None:
            return updated
    raise InvalidVersionSpec(package, "package not found or version could not be updated")


def parse_package_json(content: str) -> list[Dependency]:
    """Parse package.json content into dependencies.

    Args:
        content: The package.json file content

    Returns:
        Dependencies from every dependency section, in file order
    """
    data = load_json_object(content, "package.json")
    return collect_json_dependencies(data, DEPENDENCY_SECTIONS, parse_node, Language.NODE)


def update_package_json(content: str, package: str, new_version: str) -> str:
    return update_json_version(content, DEPENDENCY_SECTIONS, parse_node, package, new_version)
