"""Deployment publisher: pushes the output tree to the docs-site repository.

The deployment repository's working tree is replaced wholesale by the
output tree: everything but ``.git`` is removed, the output tree is copied
in, and the result is committed and pushed.  An empty or failed build is
never published.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from docmeta.core.errors import (
    CloneError,
    CommitError,
    DeployStagingError,
    GitCommandError,
    PublishRefusedError,
    PushError,
    StepTimeoutError,
)
from docmeta.core.git import VersionControl
from docmeta.core.workspace import WorkspaceManager
from docmeta.models.builds import RunOutcome, RunReport

logger = logging.getLogger(__name__)

_VCS_METADATA = ".git"


class DeploymentPublisher:
    """Commits and pushes a built output tree to a deployment repository.

    Parameters
    ----------
    git:
        Version-control collaborator.
    workspace:
        Owner of the deploy staging directory.
    commit_message:
        Message of the deployment commit.
    """

    def __init__(
        self,
        git: VersionControl,
        workspace: WorkspaceManager,
        commit_message: str = "Autoupdate docs",
    ) -> None:
        self._git = git
        self.workspace = workspace
        self.commit_message = commit_message

    def check_publishable(self, output_root: Path, report: RunReport | None = None) -> None:
        """Refuse publication of a failed run or an empty output tree.

        Raises
        ------
        PublishRefusedError
            If *report* says every build failed, or *output_root* holds no
            version directory.
        """
        if report is not None and report.outcome == RunOutcome.FAILED:
            raise PublishRefusedError(
                "Refusing to publish: every version failed to build"
            )
        if not output_root.is_dir():
            raise PublishRefusedError(
                f"Refusing to publish: output directory {output_root} does not exist"
            )
        if not WorkspaceManager.version_dirs(output_root):
            raise PublishRefusedError(
                f"Refusing to publish: {output_root} contains no built version"
            )

    async def publish(
        self,
        output_root: Path,
        deploy_repo_url: str,
        report: RunReport | None = None,
    ) -> None:
        """Replace the deployment repository's contents with *output_root* and push.

        Raises
        ------
        PublishRefusedError, CloneError, DeployStagingError, CommitError, PushError
            Fatal to publication only; the output tree is left untouched.
        """
        self.check_publishable(output_root, report)
        repo = self.workspace.layout.deploy_dir
        try:
            await asyncio.to_thread(self.workspace.clear_deploy)
        except OSError as exc:
            raise DeployStagingError(f"Cannot clear {repo}: {exc}") from exc

        logger.info("Cloning deployment repository %s", deploy_repo_url)
        try:
            await self._git.clone(deploy_repo_url, repo)
        except (GitCommandError, StepTimeoutError) as exc:
            raise CloneError(f"Cannot clone {deploy_repo_url}: {exc}") from exc

        try:
            await asyncio.to_thread(self._replace_contents, output_root, repo)
        except OSError as exc:
            raise DeployStagingError(f"Cannot stage {output_root} into {repo}: {exc}") from exc

        try:
            await self._git.add_all(repo)
            if not await self._git.has_changes(repo):
                raise CommitError("Nothing to commit: deployed docs are already up to date")
            await self._git.commit(repo, self.commit_message)
        except (GitCommandError, StepTimeoutError) as exc:
            raise CommitError(f"Cannot commit to {deploy_repo_url}: {exc}") from exc
        logger.info("Committed %r. Pushing", self.commit_message)

        try:
            await self._git.push(repo)
        except (GitCommandError, StepTimeoutError) as exc:
            raise PushError(f"Cannot push to {deploy_repo_url}: {exc}") from exc
        logger.info("Published documentation to %s", deploy_repo_url)

    @staticmethod
    def _replace_contents(output_root: Path, repo: Path) -> None:
        """Delete everything in *repo* except VCS metadata, then copy *output_root* in."""
        for entry in repo.iterdir():
            if entry.name == _VCS_METADATA:
                continue
            WorkspaceManager.discard(entry)
        shutil.copytree(output_root, repo, symlinks=True, dirs_exist_ok=True)
