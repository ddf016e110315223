"""Registry adapters: published versions and release times per ecosystem.

Each adapter turns a registry's metadata into a list of
:class:`~depup.models.VersionInfo` sorted ascending. Yanked releases and
entries without a readable timestamp are dropped.
"""

import asyncio
import time
from datetime import datetime, timezone
from urllib.parse import quote

from packaging.utils import canonicalize_name

from .client import HttpClient
from .config import (
    CRATES_IO_MIN_INTERVAL,
    CRATES_IO_URL,
    GO_PROXY_URL,
    MAVEN_CENTRAL_URL,
    NPM_REGISTRY_URL,
    PACKAGIST_URL,
    PYPI_URL,
    RUBYGEMS_URL,
)
from .errors import InvalidPackageName, InvalidResponse, RegistryError
from .logging import get_logger
from .models import Language, VersionInfo
from .versions import compare_versions, sort_versions

log = get_logger("depup.registries")


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 timestamp as an aware UTC datetime.

    Timestamps without an offset are taken to be UTC.
    """
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class RegistryAdapter:
    """Base class for registry adapters."""

    language: Language
    default_url: str

    def __init__(self, client: HttpClient, base_url: str | None = None):
        self.client = client
        self.base_url = (base_url or self.default_url).rstrip("/")

    @property
    def registry_name(self) -> str:
        return self.language.registry_name

    async def fetch_versions(self, package: str) -> list[VersionInfo]:
        """Return every published version of ``package``, oldest first.

        Raises:
            RegistryError: If the registry cannot be queried
        """
        raise NotImplementedError

    def _invalid(self, package: str, message: str) -> InvalidResponse:
        return InvalidResponse(package, self.registry_name, message)


class NpmAdapter(RegistryAdapter):
    """npm registry: ``GET /<name>``.

    Versions newer than ``dist-tags.latest`` are canary or integration
    builds published with inflated numbers, so they are dropped.
    """

    language = Language.NODE
    default_url = NPM_REGISTRY_URL

    async def fetch_versions(self, package: str) -> list[VersionInfo]:
        url = f"{self.base_url}/{quote(package, safe='@')}"
        data = await self.client.get_json(url, package, self.registry_name)
        if not isinstance(data, dict):
            raise self._invalid(package, "expected a JSON object")

        times = data.get("time") or {}
        latest = (data.get("dist-tags") or {}).get("latest")

        versions = []
        for version in data.get("versions") or {}:
            if latest and compare_versions(version, latest) > 0:
                continue
            released_at = parse_timestamp(times.get(version))
            if released_at is not None:
                versions.append(VersionInfo(version, released_at))
        return sort_versions(versions)


class PyPIAdapter(RegistryAdapter):
    """PyPI JSON API: ``GET /<name>/json``.

    A release's time is its earliest file upload. Releases whose files
    are all yanked are dropped.
    """

    language = Language.PYTHON
    default_url = PYPI_URL

    async def fetch_versions(self, package: str) -> list[VersionInfo]:
        url = f"{self.base_url}/{canonicalize_name(package)}/json"
        data = await self.client.get_json(url, package, self.registry_name)
        if not isinstance(data, dict):
            raise self._invalid(package, "expected a JSON object")

        versions = []
        for version, files in (data.get("releases") or {}).items():
            uploads = [
                parse_timestamp(file.get("upload_time_iso_8601"))
                for file in files or []
                if isinstance(file, dict) and not file.get("yanked", False)
            ]
            uploads = [upload for upload in uploads if upload is not None]
            if uploads:
                versions.append(VersionInfo(version, min(uploads)))
        return sort_versions(versions)


class CratesIoAdapter(RegistryAdapter):
    """crates.io API: ``GET /<name>``.

    crates.io asks clients to stay under one request per second, so
    requests through one adapter are spaced at least
    ``CRATES_IO_MIN_INTERVAL`` apart.
    """

    language = Language.RUST
    default_url = CRATES_IO_URL

    def __init__(
        self,
        client: HttpClient,
        base_url: str | None = None,
        min_interval: float = CRATES_IO_MIN_INTERVAL,
    ):
        super().__init__(client, base_url)
        self.min_interval = min_interval
        self._lock = asyncio.Lock()
        self._last_request: float | None = None

    async def _throttle(self) -> None:
        async with self._lock:
            if self._last_request is not None:
                wait = self.min_interval - (time.monotonic() - self._last_request)
                if wait > 0:
                    log.debug("crates_io_throttle", delay=round(wait, 3))
                    await asyncio.sleep(wait)
            self._last_request = time.monotonic()

    async def fetch_versions(self, package: str) -> list[VersionInfo]:
        await self._throttle()
        url = f"{self.base_url}/{quote(package)}"
        data = await self.client.get_json(url, package, self.registry_name)
        if not isinstance(data, dict) or not isinstance(data.get("versions"), list):
            raise self._invalid(package, "missing versions list")

        versions = []
        for entry in data["versions"]:
            if not isinstance(entry, dict) or entry.get("yanked"):
                continue
            released_at = parse_timestamp(entry.get("created_at"))
            if entry.get("num") and released_at is not None:
                versions.append(VersionInfo(entry["num"], released_at))
        return sort_versions(versions)


def encode_module_path(module: str) -> str:
    """Escape a module path for the Go proxy: uppercase ``X`` becomes ``!x``."""
    return "".join(f"!{char.lower()}" if char.isupper() else char for char in module)


class GoProxyAdapter(RegistryAdapter):
    """Go module proxy: ``/@v/list`` then ``/@v/<version>.info`` per version.

    A version whose info cannot be fetched is left out rather than
    failing the module.
    """

    language = Language.GO
    default_url = GO_PROXY_URL

    async def fetch_versions(self, package: str) -> list[VersionInfo]:
        module_url = f"{self.base_url}/{encode_module_path(package)}/@v"
        listing = await self.client.get_text(f"{module_url}/list", package, self.registry_name)

        versions = []
        for line in listing.splitlines():
            version = line.strip()
            if not version:
                continue
            try:
                info = await self.client.get_json(f"{module_url}/{version}.info", package, self.registry_name)
            except RegistryError as e:
                log.debug("go_version_info_failed", module=package, version=version, error=str(e))
                continue
            if not isinstance(info, dict):
                continue
            released_at = parse_timestamp(info.get("Time"))
            if released_at is not None:
                versions.append(VersionInfo(info.get("Version") or version, released_at))
        return sort_versions(versions)


class RubyGemsAdapter(RegistryAdapter):
    """RubyGems API: ``GET /<gem>.json``."""

    language = Language.RUBY
    default_url = RUBYGEMS_URL

    async def fetch_versions(self, package: str) -> list[VersionInfo]:
        url = f"{self.base_url}/{quote(package)}.json"
        data = await self.client.get_json(url, package, self.registry_name)
        if not isinstance(data, list):
            raise self._invalid(package, "expected a JSON array")

        versions = []
        for entry in data:
            if not isinstance(entry, dict) or entry.get("yanked"):
                continue
            released_at = parse_timestamp(entry.get("created_at"))
            if entry.get("number") and released_at is not None:
                versions.append(VersionInfo(entry["number"], released_at))
        return sort_versions(versions)


class PackagistAdapter(RegistryAdapter):
    """Packagist metadata: ``GET /p2/<vendor>/<package>.json``.

    Development branches (``dev-main``, ``1.x-dev``) are dropped and a
    leading ``v`` is stripped from tags.
    """

    language = Language.PHP
    default_url = PACKAGIST_URL

    async def fetch_versions(self, package: str) -> list[VersionInfo]:
        url = f"{self.base_url}/{package.lower()}.json"
        data = await self.client.get_json(url, package, self.registry_name)
        packages = data.get("packages") if isinstance(data, dict) else None
        if not isinstance(packages, dict):
            raise self._invalid(package, "missing packages map")

        entries = packages.get(package.lower()) or packages.get(package) or []
        versions = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            version = entry.get("version")
            if not isinstance(version, str) or "dev" in version.lower():
                continue
            released_at = parse_timestamp(entry.get("time"))
            if released_at is not None:
                versions.append(VersionInfo(version.removeprefix("v"), released_at))
        return sort_versions(versions)


class MavenCentralAdapter(RegistryAdapter):
    """Maven Central search: every ``g:a:v`` of an artifact.

    Package names must be ``group:artifact``.
    """

    language = Language.JAVA
    default_url = MAVEN_CENTRAL_URL

    async def fetch_versions(self, package: str) -> list[VersionInfo]:
        group, sep, artifact = package.partition(":")
        if not sep or not group or not artifact or ":" in artifact:
            raise InvalidPackageName(package, self.registry_name, "expected group:artifact")

        url = f"{self.base_url}?q=g:{quote(group)}+AND+a:{quote(artifact)}&core=gav&rows=100&wt=json"
        data = await self.client.get_json(url, package, self.registry_name)
        response = data.get("response") if isinstance(data, dict) else None
        if not isinstance(response, dict):
            raise self._invalid(package, "missing response object")

        versions = []
        for doc in response.get("docs") or []:
            if not isinstance(doc, dict):
                continue
            version, timestamp = doc.get("v"), doc.get("timestamp")
            if not isinstance(version, str) or not isinstance(timestamp, int | float):
                continue
            released_at = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
            versions.append(VersionInfo(version, released_at))
        return sort_versions(versions)


_ADAPTERS: dict[Language, type[RegistryAdapter]] = {
    Language.NODE: NpmAdapter,
    Language.PYTHON: PyPIAdapter,
    Language.RUST: CratesIoAdapter,
    Language.GO: GoProxyAdapter,
    Language.RUBY: RubyGemsAdapter,
    Language.PHP: PackagistAdapter,
    Language.JAVA: MavenCentralAdapter,
}


def get_adapter(language: Language, client: HttpClient) -> RegistryAdapter:
    """Create the adapter for ``language`` on a shared client."""
    return _ADAPTERS[language](client)
