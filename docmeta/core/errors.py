"""Error taxonomy for documentation runs.

Per-version errors (``BuildStepError`` and ``StepTimeoutError`` raised while
building one version) are contained by the orchestrator and recorded in the
``RunReport``.  Enumeration, latest-resolution and redirect errors abort the
run.  Publication errors abort publication only; the built output tree stays
valid and can be published again.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docmeta.core.process import CommandResult
    from docmeta.models.builds import BuildStep


class DocmetaError(RuntimeError):
    """Base class for every error raised by docmeta."""


class RepositoryAccessError(DocmetaError):
    """Raised when the source repository's tags cannot be listed."""


class GitCommandError(DocmetaError):
    """Raised when a git invocation exits with a non-zero status."""

    def __init__(self, message: str, result: CommandResult) -> None:
        super().__init__(message)
        self.result = result


# ---------------------------------------------------------------------------
# Per-version build errors
# ---------------------------------------------------------------------------


class BuildStepError(DocmetaError):
    """A step of a single version's build failed.

    Carries the version name and the failing step for diagnostics.
    """

    def __init__(self, version: str, step: BuildStep, detail: str) -> None:
        super().__init__(f"[{version}] {step.value} failed: {detail}")
        self.version = version
        self.step = step
        self.detail = detail


class CheckoutError(BuildStepError):
    """The ref could not be cloned (unknown ref or network failure)."""


class InstallError(BuildStepError):
    """The dependency install command failed."""


class DocBuildError(BuildStepError):
    """The documentation build command failed."""


class OutputRelocationError(BuildStepError):
    """The built docs could not be moved into the output tree."""


class StepTimeoutError(DocmetaError):
    """An external operation exceeded its time bound.

    ``step`` is a ``BuildStep`` for per-version steps and a plain label
    (``"list-tags"``, ``"push"``...) for everything else.
    """

    def __init__(
        self,
        step: BuildStep | str,
        timeout: float,
        version: str | None = None,
    ) -> None:
        label = getattr(step, "value", step)
        prefix = f"[{version}] " if version else ""
        super().__init__(f"{prefix}{label} timed out after {timeout:g}s")
        self.step = step
        self.timeout = timeout
        self.version = version


# ---------------------------------------------------------------------------
# Run-level errors
# ---------------------------------------------------------------------------


class LatestResolutionError(DocmetaError):
    """The requested latest version is not part of the version set."""


class WriteError(DocmetaError):
    """The landing page or manifest could not be written."""


class CredentialError(DocmetaError):
    """The deploy key could not be decrypted or registered."""


# ---------------------------------------------------------------------------
# Publication errors
# ---------------------------------------------------------------------------


class PublishError(DocmetaError):
    """Base class for deployment failures; fatal to publication only."""


class PublishRefusedError(PublishError):
    """Publication was refused because there is nothing worth publishing."""


class CloneError(PublishError):
    """The deployment repository could not be cloned."""


class DeployStagingError(PublishError):
    """The deployment working tree could not be cleared or populated."""


class CommitError(PublishError):
    """The commit failed, including when there is nothing to commit."""


class PushError(PublishError):
    """The push was rejected (authentication, conflict, network)."""
