"""Update workflow: detect, parse, fetch, judge, write."""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from .client import HttpClient
from .config import CRATES_IO_CONCURRENCY, DEFAULT_CONCURRENCY
from .detect import detect_manifests
from .errors import ManifestError, ManifestReadError, RegistryError
from .judge import UpdateJudge
from .logging import get_logger
from .manifests import ManifestWriter, parse_manifest, read_manifest
from .models import (
    Dependency,
    Language,
    ManifestInfo,
    ManifestUpdateResult,
    SkipReason,
    UpdateFilter,
    UpdateResult,
    UpdateSummary,
    WriteResult,
)
from .pnpm_settings import PnpmSettings, has_pnpm_workspace
from .progress import ProgressReporter
from .registries import RegistryAdapter, get_adapter

log = get_logger("depup.orchestrator")


def build_filter(
    root: Path,
    *,
    languages: Iterable[Language] = (),
    exclude: Iterable[str] = (),
    only: Iterable[str] = (),
    include_pinned: bool = False,
    min_age: timedelta | None = None,
) -> UpdateFilter:
    """Build the run's filter from command line choices.

    Without an explicit ``min_age``, a pnpm project's own
    ``minimumReleaseAge`` applies.
    """
    if min_age is None and has_pnpm_workspace(root):
        min_age = PnpmSettings.from_dir(root).minimum_release_age
        if min_age is not None:
            log.debug("pnpm_min_age", days=min_age.days)

    return UpdateFilter(
        languages=frozenset(languages),
        exclude=frozenset(exclude),
        only=frozenset(only),
        include_pinned=include_pinned,
        min_age=min_age,
    )


@dataclass
class OrchestratorResult:
    summary: UpdateSummary
    write_results: list[WriteResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class _ParsedManifest:
    info: ManifestInfo
    dependencies: list[Dependency]


class Orchestrator:
    """Runs one update pass over a project directory.

    Registry lookups run concurrently, at most ``DEFAULT_CONCURRENCY`` at a
    time and one at a time for crates.io. Everything else is sequential,
    and results come back in manifest and declaration order no matter
    which lookup finishes first. A failure in one manifest or package is
    recorded and the run carries on.
    """

    def __init__(
        self,
        path: Path,
        update_filter: UpdateFilter,
        *,
        dry_run: bool = False,
        show_progress: bool = True,
        client: HttpClient | None = None,
        now: datetime | None = None,
    ):
        self.path = path
        self.filter = update_filter
        self.dry_run = dry_run
        self.progress = ProgressReporter(enabled=show_progress)
        self.judge = UpdateJudge(update_filter, now=now)
        self._client = client
        self._general = asyncio.Semaphore(DEFAULT_CONCURRENCY)
        self._crates_io = asyncio.Semaphore(CRATES_IO_CONCURRENCY)
        self._adapters: dict[Language, RegistryAdapter] = {}

    async def run(self) -> OrchestratorResult:
        client = self._client or HttpClient()
        try:
            return await self._run(client)
        finally:
            self.progress.finish()
            if self._client is None:
                await client.aclose()

    async def _run(self, client: HttpClient) -> OrchestratorResult:
        result = OrchestratorResult(summary=UpdateSummary(dry_run=self.dry_run))

        self.progress.spinner("Detecting manifest files...")
        manifests = detect_manifests(self.path)
        log.debug("manifests_detected", count=len(manifests))

        self.progress.spinner("Parsing manifests...")
        parsed = self._parse_all(manifests, result.errors)

        total = sum(len(manifest.dependencies) for manifest in parsed)
        self.progress.start(total, "Checking dependencies")
        for manifest_result in await self._check_all(client, parsed, result.errors):
            result.summary.add_manifest(manifest_result)

        if not self.dry_run:
            self.progress.spinner("Writing updates...")
        result.write_results = self._write_all(result.summary, result.errors)
        self.progress.finish()

        return result

    def _parse_all(self, manifests: list[ManifestInfo], errors: list[str]) -> list[_ParsedManifest]:
        parsed = []
        for info in manifests:
            if not self.filter.should_process_language(info.language):
                continue
            try:
                content = read_manifest(info.path)
            except ManifestReadError as e:
                errors.append(f"Failed to read {info.path}: {e.reason}")
                log.debug("manifest_read_failed", path=str(info.path), error=e.reason)
                continue
            try:
                dependencies = parse_manifest(info.language, content)
            except ManifestError as e:
                errors.append(f"Failed to parse {info.path}: {e}")
                log.debug("manifest_parse_failed", path=str(info.path), error=str(e))
                continue
            parsed.append(_ParsedManifest(info, dependencies))
        return parsed

    def _adapter(self, client: HttpClient, language: Language) -> RegistryAdapter:
        # One adapter per language so the crates.io throttle is shared.
        if language not in self._adapters:
            self._adapters[language] = get_adapter(language, client)
        return self._adapters[language]

    async def _check_all(
        self, client: HttpClient, parsed: list[_ParsedManifest], errors: list[str]
    ) -> list[ManifestUpdateResult]:
        slots: list[tuple[ManifestUpdateResult, Dependency, SkipReason | None]] = []
        lookups = []
        manifest_results = []

        for manifest in parsed:
            manifest_result = ManifestUpdateResult(manifest.info.path, manifest.info.language)
            manifest_results.append(manifest_result)
            for dependency in manifest.dependencies:
                reason = self.judge.should_skip(dependency)
                slots.append((manifest_result, dependency, reason))
                if reason is None:
                    adapter = self._adapter(client, manifest.info.language)
                    lookups.append(self._check(adapter, dependency))
                else:
                    self.progress.advance()

        outcomes = iter(await asyncio.gather(*lookups))

        for manifest_result, dependency, reason in slots:
            if reason is not None:
                manifest_result.add_result(UpdateResult.skip(dependency, reason))
                continue
            update_result, error = next(outcomes)
            manifest_result.add_result(update_result)
            if error is not None:
                errors.append(error)

        return manifest_results

    async def _check(
        self, adapter: RegistryAdapter, dependency: Dependency
    ) -> tuple[UpdateResult, str | None]:
        semaphore = self._crates_io if adapter.language is Language.RUST else self._general
        try:
            async with semaphore:
                versions = await adapter.fetch_versions(dependency.name)
        except RegistryError as e:
            log.debug("fetch_failed", package=dependency.name, registry=adapter.registry_name, error=str(e))
            skip = UpdateResult.skip(dependency, SkipReason.fetch_failed(str(e)))
            return skip, f"Failed to fetch {dependency.name}: {e}"
        finally:
            self.progress.advance(f"Checking {dependency.name}")
        return self.judge.judge(dependency, versions), None

    def _write_all(self, summary: UpdateSummary, errors: list[str]) -> list[WriteResult]:
        writer = ManifestWriter(dry_run=self.dry_run)
        write_results = []
        for manifest in summary.manifests:
            if not manifest.modified:
                continue
            try:
                write_result = writer.apply_updates(manifest)
            except ManifestError as e:
                write_result = WriteResult(path=manifest.path, errors=[f"Failed to process manifest: {e}"])
            for error in write_result.errors:
                errors.append(f"Failed to write {manifest.path}: {error}")
            write_results.append(write_result)
        return write_results
