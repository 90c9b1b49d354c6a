"""Per-version build results and the aggregate run report."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class BuildStep(str, Enum):
    """Sequential steps of one version's build."""

    CHECKOUT = "checkout"
    INSTALL = "install"
    DOC_BUILD = "doc_build"
    RELOCATE = "relocate"


class BuildStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunOutcome(str, Enum):
    """Overall classification of a run's builds."""

    COMPLETE = "complete"  # every version built
    DEGRADED = "degraded"  # at least one version built
    FAILED = "failed"  # nothing built


class BuildResult(BaseModel):
    """Terminal outcome of one version's build.

    ``output_path`` is only set on success and points at the version's
    subtree inside the output tree.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    status: BuildStatus
    output_path: Path | None = None
    failed_step: BuildStep | None = None
    error_type: str | None = None
    error_message: str | None = None
    duration_seconds: float = 0.0

    @classmethod
    def success(
        cls, version: str, output_path: Path, duration_seconds: float = 0.0
    ) -> BuildResult:
        return cls(
            version=version,
            status=BuildStatus.SUCCEEDED,
            output_path=output_path,
            duration_seconds=duration_seconds,
        )

    @classmethod
    def failure(
        cls,
        version: str,
        error: BaseException,
        step: BuildStep | None = None,
        duration_seconds: float = 0.0,
    ) -> BuildResult:
        return cls(
            version=version,
            status=BuildStatus.FAILED,
            failed_step=step,
            error_type=type(error).__name__,
            error_message=str(error),
            duration_seconds=duration_seconds,
        )

    @property
    def ok(self) -> bool:
        return self.status == BuildStatus.SUCCEEDED


class RunReport(BaseModel):
    """Every version's build result (in version-set order) and the latest version."""

    model_config = ConfigDict(frozen=True)

    results: dict[str, BuildResult]
    latest: str

    @property
    def succeeded(self) -> list[str]:
        return [v for v, r in self.results.items() if r.ok]

    @property
    def failed(self) -> list[str]:
        return [v for v, r in self.results.items() if not r.ok]

    @property
    def has_output(self) -> bool:
        return bool(self.succeeded)

    @property
    def outcome(self) -> RunOutcome:
        if not self.succeeded:
            return RunOutcome.FAILED
        if self.failed:
            return RunOutcome.DEGRADED
        return RunOutcome.COMPLETE
