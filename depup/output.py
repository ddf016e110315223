"""Report formatters: text, JSON and diff."""

from pydantic import BaseModel, ConfigDict, Field

from .models import Language, ManifestUpdateResult, UpdateSummary
from .specs import rewrite_constraint


def _prefix(dry_run: bool) -> str:
    return "(dry-run) " if dry_run else ""


def _language_counts(summary: UpdateSummary) -> list[tuple[Language, int, int]]:
    counts = []
    for language in Language:
        manifests = summary.by_language(language)
        if manifests:
            updates = sum(len(manifest.updates()) for manifest in manifests)
            skips = sum(len(manifest.skips()) for manifest in manifests)
            counts.append((language, updates, skips))
    return counts


# Text


def _format_manifest(manifest: ManifestUpdateResult, prefix: str, verbose: bool) -> list[str]:
    lines = [f"{prefix}{manifest.path}"]
    for result in manifest.updates():
        dependency = result.dependency
        lines.append(f"  {dependency.name} {dependency.version} -> {result.new_version}")
    if verbose:
        for result in manifest.skips():
            lines.append(f"  {result.dependency.name} (skipped: {result.skip_reason.describe()})")
    return lines


def format_text(
    summary: UpdateSummary, errors: list[str], *, verbose: bool = False, quiet: bool = False
) -> str:
    """Human readable report.

    Quiet mode prints a single line. Verbose mode adds skipped packages
    and a per-language breakdown.
    """
    prefix = _prefix(summary.dry_run)
    updates = summary.total_updates()

    if quiet:
        return f"{prefix}{updates} updated" if updates else f"{prefix}No updates"

    lines: list[str] = []
    for manifest in summary.manifests:
        lines += _format_manifest(manifest, prefix, verbose)

    if errors:
        lines += ["", "Errors:"]
        lines += [f"  - {error}" for error in errors]

    lines += [
        "",
        f"{prefix}Summary:",
        f"  {updates} package(s) updated",
        f"  {summary.total_skips()} package(s) skipped",
    ]

    if verbose:
        lines += ["", "By language:"]
        for language, language_updates, language_skips in _language_counts(summary):
            lines.append(f"  {language}: {language_updates} updated, {language_skips} skipped")

    return "\n".join(lines)


# JSON


class JsonUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    from_: str = Field(alias="from")
    to: str
    dev: bool


class JsonSkip(BaseModel):
    name: str
    version: str
    reason: str


class JsonManifest(BaseModel):
    path: str
    language: str
    updates: list[JsonUpdate]
    skips: list[JsonSkip] | None = None


class JsonLanguageSummary(BaseModel):
    language: str
    updates: int
    skips: int


class JsonSummary(BaseModel):
    updates: int
    skips: int
    by_language: list[JsonLanguageSummary] | None = None


class JsonReport(BaseModel):
    """Machine readable report emitted by ``--json``.

    ``skips`` and ``by_language`` only appear in verbose mode and
    ``errors`` only when something failed.
    """

    dry_run: bool
    summary: JsonSummary
    manifests: list[JsonManifest]
    errors: list[str] | None = None


def build_json_report(summary: UpdateSummary, errors: list[str], *, verbose: bool = False) -> JsonReport:
    manifests = []
    for manifest in summary.manifests:
        updates = [
            JsonUpdate(
                name=result.dependency.name,
                from_=result.dependency.version,
                to=result.new_version,
                dev=result.dependency.is_dev,
            )
            for result in manifest.updates()
        ]
        skips = None
        if verbose and manifest.skips():
            skips = [
                JsonSkip(
                    name=result.dependency.name,
                    version=result.dependency.version,
                    reason=result.skip_reason.code(),
                )
                for result in manifest.skips()
            ]
        manifests.append(
            JsonManifest(
                path=str(manifest.path),
                language=manifest.language.display_name,
                updates=updates,
                skips=skips,
            )
        )

    by_language = None
    if verbose:
        by_language = [
            JsonLanguageSummary(language=language.display_name, updates=updates, skips=skips)
            for language, updates, skips in _language_counts(summary)
        ] or None

    return JsonReport(
        dry_run=summary.dry_run,
        summary=JsonSummary(
            updates=summary.total_updates(),
            skips=summary.total_skips(),
            by_language=by_language,
        ),
        manifests=manifests,
        errors=list(errors) or None,
    )


def format_json(summary: UpdateSummary, errors: list[str], *, verbose: bool = False) -> str:
    report = build_json_report(summary, errors, verbose=verbose)
    return report.model_dump_json(indent=2, by_alias=True, exclude_none=True)


# Diff


def format_diff(summary: UpdateSummary) -> str:
    """Unified-diff-style view of every constraint that changes."""
    prefix = _prefix(summary.dry_run)
    lines: list[str] = []
    for manifest in summary.manifests:
        if not manifest.modified:
            continue
        lines.append(f"{prefix}--- a/{manifest.path}")
        lines.append(f"{prefix}+++ b/{manifest.path}")
        for result in manifest.updates():
            dependency = result.dependency
            spec = dependency.spec
            updated = rewrite_constraint(spec, result.new_version) or spec.format_updated(result.new_version)
            lines.append(f"@@ {dependency.name} @@")
            lines.append(f'-  "{dependency.name}": "{spec.raw}"')
            lines.append(f'+  "{dependency.name}": "{updated}"')
        lines.append("")
    lines.append(f"{prefix}# {summary.total_updates()} package(s) would be updated")
    return "\n".join(lines)
