"""Version enumerator: which versions get documentation this run."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from docmeta.core.errors import GitCommandError, RepositoryAccessError, StepTimeoutError
from docmeta.core.git import VersionControl
from docmeta.models.versions import (
    DEFAULT_DEVELOPMENT_MARKER,
    VersionSet,
    is_safe_segment,
)

logger = logging.getLogger(__name__)


def filter_tags(
    tags: Iterable[str],
    ignore_tags: Iterable[str],
    development_marker: str | None = DEFAULT_DEVELOPMENT_MARKER,
) -> list[str]:
    """Drop ignored, duplicate and unusable tags, keeping source order."""
    ignored = set(ignore_tags)
    kept: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        if tag in ignored or tag in seen:
            continue
        if tag == development_marker:
            logger.warning("Skipping tag %r: it shadows the development branch", tag)
            continue
        if not is_safe_segment(tag):
            logger.warning("Skipping tag %r: not usable as a directory name", tag)
            continue
        seen.add(tag)
        kept.append(tag)
    return kept


class VersionEnumerator:
    """Lists the source repository's tags and builds the run's ``VersionSet``.

    Parameters
    ----------
    git:
        Version-control collaborator.
    source:
        Remote URL, or a ``Path`` to a local clone.
    ignore_tags:
        Tags that never get documentation.
    development_marker:
        Branch appended after the tags; ``None`` builds tags only.
    """

    def __init__(
        self,
        git: VersionControl,
        source: str | Path,
        ignore_tags: Iterable[str] = (),
        development_marker: str | None = DEFAULT_DEVELOPMENT_MARKER,
    ) -> None:
        self._git = git
        self.source = source
        self.ignore_tags = frozenset(ignore_tags)
        self.development_marker = development_marker

    async def enumerate(self) -> VersionSet:
        """Return the filtered tags, in listing order, plus the development marker.

        Raises
        ------
        RepositoryAccessError
            If the tag listing cannot be retrieved.
        """
        try:
            tags = await self._git.list_tags(self.source)
        except (GitCommandError, StepTimeoutError, OSError) as exc:
            raise RepositoryAccessError(
                f"Cannot list tags of {self.source}: {exc}"
            ) from exc

        kept = filter_tags(tags, self.ignore_tags, self.development_marker)
        version_set = VersionSet.from_tags(kept, self.development_marker)
        logger.info(
            "Enumerated %d version(s) from %d tag(s): %s",
            len(version_set),
            len(tags),
            ", ".join(version_set.versions),
        )
        return version_set
