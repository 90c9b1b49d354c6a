"""Build orchestrator: concurrent fan-out of per-version builds.

The orchestrator launches one build per version, waits for every build to
reach a terminal state, and collects the results in version-set order.  A
failing version never cancels or starves its siblings.  It also owns the
policy that picks the "latest" version for the landing page.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from docmeta.core.errors import LatestResolutionError
from docmeta.models.builds import BuildResult, RunOutcome, RunReport
from docmeta.models.versions import VersionSet

logger = logging.getLogger(__name__)


class Builder(Protocol):
    """Anything that can build one version, like ``VersionBuilder``."""

    async def build(self, version: str) -> BuildResult: ...


def resolve_latest(versions: VersionSet, override: str | None = None) -> str:
    """Pick the redirect target from *versions*.

    Policy, in order:

    1. An explicit *override*, which must belong to the set.
    2. The entry right before the development marker, i.e. the most
       recently listed non-ignored tag. This is positional: tags are not
       compared as semantic versions.
    3. The development marker itself when no tag survived filtering.

    For a set built without a development marker the last entry is used.

    Raises
    ------
    LatestResolutionError
        If *override* is not in the set, or the set is empty.
    """
    if override is not None:
        if override not in versions:
            raise LatestResolutionError(
                f"Requested latest version {override!r} is not among "
                f"the enumerated versions: {', '.join(versions.versions)}"
            )
        return override
    if not versions.versions:
        raise LatestResolutionError("Cannot resolve latest version of an empty set")
    if versions.tags:
        return versions.tags[-1]
    return versions.versions[-1]


class BuildOrchestrator:
    """Runs a ``Builder`` over every version of a ``VersionSet``.

    Parameters
    ----------
    builder:
        Per-version builder.
    max_parallel:
        Upper bound on concurrent builds; ``0`` launches them all at once.
    latest_override:
        Explicit latest version, passed to ``resolve_latest``.
    """

    def __init__(
        self,
        builder: Builder,
        *,
        max_parallel: int = 0,
        latest_override: str | None = None,
    ) -> None:
        self._builder = builder
        self.max_parallel = max_parallel
        self.latest_override = latest_override

    async def run(self, versions: VersionSet) -> RunReport:
        """Build every version concurrently and report the results.

        The latest version is resolved first so an invalid override fails
        the run before any build is launched.
        """
        latest = resolve_latest(versions, self.latest_override)
        limit = asyncio.Semaphore(self.max_parallel) if self.max_parallel > 0 else None

        async def _one(version: str) -> BuildResult:
            if limit is None:
                return await self._builder.build(version)
            async with limit:
                return await self._builder.build(version)

        logger.info(
            "Building %d version(s) (parallelism: %s)",
            len(versions),
            self.max_parallel or "unbounded",
        )
        outcomes = await asyncio.gather(
            *(_one(v) for v in versions.versions), return_exceptions=True
        )

        results: dict[str, BuildResult] = {}
        for version, outcome in zip(versions.versions, outcomes):
            if isinstance(outcome, BuildResult):
                results[version] = outcome
            elif isinstance(outcome, Exception):
                logger.exception(
                    "[%s] Unexpected build error", version, exc_info=outcome
                )
                results[version] = BuildResult.failure(version, outcome)
            else:
                # BaseException (cancellation, KeyboardInterrupt) ends the run.
                raise outcome

        report = RunReport(results=results, latest=latest)
        self._log_summary(report)
        return report

    @staticmethod
    def _log_summary(report: RunReport) -> None:
        for version in report.failed:
            result = report.results[version]
            step = result.failed_step.value if result.failed_step else "unknown step"
            logger.warning(
                "[%s] FAILED at %s (%s): %s",
                version,
                step,
                result.error_type,
                (result.error_message or "").split("\n", 1)[0],
            )
        logger.info(
            "Build outcome: %s (%d succeeded, %d failed)",
            report.outcome.value,
            len(report.succeeded),
            len(report.failed),
        )
        if report.outcome != RunOutcome.FAILED and report.latest in report.failed:
            logger.warning(
                "Latest version %s failed to build; the landing page will point "
                "at a missing directory",
                report.latest,
            )
