"""Workspace manager: owns the temp, staging, output and deploy areas.

Layout (all siblings under the working directory by default)::

    docmeta_temp/<version>/          per-version checkouts
    .docs_out.staging/<version>/     built docs waiting to be moved in
    docs_out/<version>/              aggregate output tree
    docmeta_temp_deploy/             deployment repository clone

Directory roots are created once, before any build starts.  A version's
subtree only appears in the output tree through ``publish_version``, which
renames a fully staged copy into place.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path

from docmeta.models.context import WorkspaceLayout

logger = logging.getLogger(__name__)


class WorkspaceManager:
    """Creates, resets and populates the on-disk areas of a run.

    Parameters
    ----------
    layout:
        Absolute directory roots for this run.
    """

    def __init__(self, layout: WorkspaceLayout) -> None:
        self.layout = layout

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self, *, keep_output: bool = False) -> None:
        """Remove leftovers from earlier runs and recreate the roots.

        Safe to call repeatedly from a clean or dirty state.  With
        *keep_output* the aggregate output tree survives (redirect-only
        regeneration).
        """
        doomed = [self.layout.temp_dir, self.layout.staging_dir, self.layout.deploy_dir]
        if not keep_output:
            doomed.append(self.layout.output_dir)
        for path in doomed:
            self.discard(path)
        self.prepare()
        logger.info("Workspace reset (output kept: %s)", keep_output)

    def prepare(self) -> None:
        """Create the temp, staging and output roots if missing."""
        for path in (self.layout.temp_dir, self.layout.staging_dir, self.layout.output_dir):
            path.mkdir(parents=True, exist_ok=True)

    def clear_deploy(self) -> None:
        self.discard(self.layout.deploy_dir)

    @staticmethod
    def discard(path: Path) -> None:
        """Recursively remove *path*; absent paths are ignored."""
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.exists():
            shutil.rmtree(path)

    # ------------------------------------------------------------------
    # Output tree
    # ------------------------------------------------------------------

    def publish_version(self, version: str, staged: Path) -> Path:
        """Move a fully staged *version* into the output tree.

        The new subtree becomes visible through one ``os.replace``.  A
        subtree left by an earlier run is first renamed aside into the
        staging area, restored if the new one cannot be moved in, and deleted
        once the new one is in place.
        """
        target = self.layout.output_path(version)
        previous: Path | None = None
        if target.exists():
            previous = self.layout.staging_dir / f".old-{version}-{uuid.uuid4().hex[:8]}"
            os.replace(target, previous)
        try:
            os.replace(staged, target)
        except OSError:
            if previous is not None:
                os.replace(previous, target)
            raise
        if previous is not None:
            self.discard(previous)
        logger.debug("Published %s -> %s", staged, target)
        return target

    def built_versions(self) -> list[str]:
        """Names of the version subtrees currently in the output tree."""
        return self.version_dirs(self.layout.output_dir)

    @staticmethod
    def version_dirs(root: Path) -> list[str]:
        """Names of the non-hidden directories directly under *root*."""
        if not root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )
