"""Update decisions for single dependencies."""

from datetime import datetime, timezone

from .models import Dependency, SkipKind, SkipReason, UpdateFilter, UpdateResult, VersionInfo
from .specs import rewrite_constraint
from .versions import compare_versions, is_prerelease, latest_version, sort_versions


class UpdateJudge:
    """Decides whether a dependency moves and to which version.

    ``now`` is captured once so every age comparison in a run uses the same
    instant; tests pass a fixed one.
    """

    def __init__(self, update_filter: UpdateFilter, now: datetime | None = None):
        self.filter = update_filter
        self.now = now or datetime.now(timezone.utc)

    def should_skip(self, dependency: Dependency) -> SkipReason | None:
        """Check the filter before any registry lookup.

        A non-empty ``--only`` list replaces ``--exclude`` entirely, so a
        package named by both is processed.
        """
        if not self.filter.should_process_language(dependency.language):
            return SkipReason(SkipKind.LANGUAGE_FILTERED)
        if not self.filter.should_process_package(dependency.name):
            if self.filter.only:
                return SkipReason(SkipKind.NOT_IN_ONLY_LIST)
            return SkipReason(SkipKind.EXCLUDED)
        if dependency.is_pinned() and not self.filter.include_pinned:
            return SkipReason(SkipKind.PINNED)
        return None

    def judge(self, dependency: Dependency, versions: list[VersionInfo]) -> UpdateResult:
        """Pick the newest eligible version for ``dependency``.

        Prereleases are only candidates when the current version is one.
        With a minimum age, versions released more recently are ignored.
        Nothing older than or equal to the current version is ever chosen.

        The chosen version must also be one the declared constraint can be
        rewritten to: a bounded range stops at the newest release below its
        upper bound, and a wildcard that already admits the newest release
        is left as it is.

        Args:
            dependency: The declared dependency
            versions: Versions published by the registry

        Returns:
            An update, or a skip saying why there is none
        """
        if not versions:
            return UpdateResult.skip(dependency, SkipReason.fetch_failed("no versions available"))

        candidates = versions
        if not is_prerelease(dependency.version):
            candidates = [info for info in candidates if not is_prerelease(info.version)]

        if self.filter.min_age is not None:
            cutoff = self.now - self.filter.min_age
            candidates = [info for info in candidates if info.released_at <= cutoff]

        latest = latest_version(candidates)
        if latest is None:
            return UpdateResult.skip(dependency, SkipReason(SkipKind.NO_SUITABLE_VERSION))

        if compare_versions(dependency.version, latest.version) >= 0:
            return UpdateResult.skip(dependency, SkipReason(SkipKind.ALREADY_LATEST))

        newer = [info for info in candidates if compare_versions(info.version, dependency.version) > 0]
        for info in reversed(sort_versions(newer)):
            rendered = rewrite_constraint(dependency.spec, info.version)
            if rendered is None:
                continue
            if rendered == dependency.spec.raw:
                return UpdateResult.skip(dependency, SkipReason(SkipKind.ALREADY_LATEST))
            return UpdateResult.update(dependency, info.version, info.released_at)

        return UpdateResult.skip(dependency, SkipReason(SkipKind.NO_SUITABLE_VERSION))
