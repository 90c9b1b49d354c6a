"""Git collaborator: tag listing, cloning, committing and pushing.

A thin asynchronous wrapper over the ``git`` executable.  Every call goes
through ``run_command`` with an explicit repository directory, so several
clones can be driven concurrently from one process.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from docmeta.core.errors import GitCommandError
from docmeta.core.process import CommandResult, CommandRunner, run_command
from docmeta.models.builds import BuildStep

logger = logging.getLogger(__name__)

_TAG_REF_PREFIX = "refs/tags/"

# Never block on a credential prompt in CI.
_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


@runtime_checkable
class VersionControl(Protocol):
    """Protocol for the version-control operations docmeta consumes."""

    async def list_tags(self, source: str | Path) -> list[str]: ...

    async def clone(
        self,
        url: str,
        dest: Path,
        *,
        branch: str | None = None,
        depth: int | None = None,
        single_branch: bool = False,
        version: str | None = None,
    ) -> None: ...

    async def add_all(self, repo: Path) -> None: ...

    async def has_changes(self, repo: Path) -> bool: ...

    async def commit(self, repo: Path, message: str) -> None: ...

    async def push(self, repo: Path) -> None: ...


def parse_ls_remote_tags(output: str) -> list[str]:
    """Extract tag names from ``git ls-remote --tags --refs`` output.

    Each line is ``<sha>\\trefs/tags/<name>``; order is preserved.
    """
    tags: list[str] = []
    for line in output.splitlines():
        _, _, ref = line.strip().partition("\t")
        if ref.startswith(_TAG_REF_PREFIX):
            tags.append(ref[len(_TAG_REF_PREFIX):])
    return tags


class GitClient:
    """``VersionControl`` implementation backed by the git executable.

    Parameters
    ----------
    timeout:
        Time bound applied to every git invocation.
    runner:
        Command runner; defaults to ``run_command``.
    executable:
        Name or path of the git binary.
    """

    def __init__(
        self,
        timeout: float | None = None,
        runner: CommandRunner | None = None,
        executable: str = "git",
    ) -> None:
        self.timeout = timeout
        self._run = runner or run_command
        self._git = executable

    async def _invoke(
        self,
        *args: str,
        cwd: Path | None = None,
        step: BuildStep | str,
        version: str | None = None,
    ) -> CommandResult:
        result = await self._run(
            [self._git, *args],
            cwd=cwd,
            timeout=self.timeout,
            step=step,
            version=version,
            env=_GIT_ENV,
        )
        if not result.ok:
            raise GitCommandError(
                f"git {args[0]} exited with {result.returncode}: {result.tail(5)}",
                result,
            )
        return result

    # ------------------------------------------------------------------
    # Source repository
    # ------------------------------------------------------------------

    async def list_tags(self, source: str | Path) -> list[str]:
        """List tags of a remote URL or a local repository directory."""
        if isinstance(source, Path):
            result = await self._invoke("tag", "--list", cwd=source, step="list-tags")
            return [line.strip() for line in result.output.splitlines() if line.strip()]
        result = await self._invoke(
            "ls-remote", "--tags", "--refs", source, step="list-tags"
        )
        return parse_ls_remote_tags(result.output)

    async def clone(
        self,
        url: str,
        dest: Path,
        *,
        branch: str | None = None,
        depth: int | None = None,
        single_branch: bool = False,
        version: str | None = None,
    ) -> None:
        """Clone *url* into *dest* (which must not exist yet)."""
        args = ["clone", "--quiet"]
        if branch is not None:
            args += ["--branch", branch]
        if depth is not None:
            args += ["--depth", str(depth)]
        if single_branch:
            args.append("--single-branch")
        args += ["--", url, str(dest)]
        step = BuildStep.CHECKOUT if version else "clone"
        await self._invoke(*args, step=step, version=version)

    # ------------------------------------------------------------------
    # Deployment repository
    # ------------------------------------------------------------------

    async def add_all(self, repo: Path) -> None:
        await self._invoke("add", "--all", ".", cwd=repo, step="add")

    async def has_changes(self, repo: Path) -> bool:
        result = await self._invoke(
            "status", "--porcelain", cwd=repo, step="status"
        )
        return bool(result.output.strip())

    async def commit(self, repo: Path, message: str) -> None:
        await self._invoke("commit", "--quiet", "-m", message, cwd=repo, step="commit")

    async def push(self, repo: Path) -> None:
        await self._invoke("push", "--quiet", cwd=repo, step="push")
