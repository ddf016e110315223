"""PHP composer.json parsing and rewriting."""

from .models import Dependency, Language
from .parse_node import collect_json_dependencies, load_json_object, update_json_version
from .specs import parse_php

DEPENDENCY_SECTIONS = {
    "require": False,
    "require-dev": True,
}

_PLATFORM_PACKAGES = {"php", "composer", "composer-plugin-api", "composer-runtime-api"}
_PLATFORM_PREFIXES = ("php-", "ext-", "lib-")


def is_platform_package(name: str) -> bool:
    """Platform requirements (``php``, ``ext-json``) are not on Packagist."""
    lowered = name.lower()
    return lowered in _PLATFORM_PACKAGES or lowered.startswith(_PLATFORM_PREFIXES)


def parse_composer_json(content: str) -> list[Dependency]:
    data = load_json_object(content, "composer.json")
    return collect_json_dependencies(
        data, DEPENDENCY_SECTIONS, parse_php, Language.PHP, skip=is_platform_package
    )


def update_composer_json(content: str, package: str, new_version: str) -> str:
    return update_json_version(content, DEPENDENCY_SECTIONS, parse_php, package, new_version)
