"""docmeta data models: all Pydantic v2, all frozen (immutable)."""

from docmeta.models.builds import (
    BuildResult,
    BuildStatus,
    BuildStep,
    RunOutcome,
    RunReport,
)
from docmeta.models.context import BuildContext, WorkspaceLayout
from docmeta.models.versions import (
    DEFAULT_DEVELOPMENT_MARKER,
    VersionSet,
    is_safe_segment,
)

__all__ = [
    # versions
    "DEFAULT_DEVELOPMENT_MARKER",
    "VersionSet",
    "is_safe_segment",
    # builds
    "BuildStep",
    "BuildStatus",
    "BuildResult",
    "RunOutcome",
    "RunReport",
    # context
    "BuildContext",
    "WorkspaceLayout",
]
