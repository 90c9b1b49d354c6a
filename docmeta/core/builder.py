"""Per-version builder: checkout, install, doc build, relocate.

Each ``build`` call works only inside directories keyed by its own version:
``temp_dir/<version>`` for the checkout and ``staging_dir/<version>`` for
the copied docs.  The output tree only ever sees a finished subtree, which
``WorkspaceManager.publish_version`` renames into place.  A failed build
leaves nothing under ``output_dir/<version>``.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from collections.abc import Sequence
from pathlib import Path

from docmeta.config import DocmetaSettings
from docmeta.core.errors import (
    BuildStepError,
    CheckoutError,
    DocBuildError,
    GitCommandError,
    InstallError,
    OutputRelocationError,
    StepTimeoutError,
)
from docmeta.core.git import VersionControl
from docmeta.core.process import CommandRunner, run_command
from docmeta.core.workspace import WorkspaceManager
from docmeta.models.builds import BuildResult, BuildStep
from docmeta.models.context import BuildContext

logger = logging.getLogger(__name__)


class VersionBuilder:
    """Builds the documentation of one version at a time, in isolation.

    Parameters
    ----------
    git:
        Version-control collaborator used for the shallow checkout.
    workspace:
        Owner of the directory roots and of the final rename.
    repo_url:
        Source repository to clone.
    install_command, build_command:
        Commands run inside the checkout, in that order.
    docs_output_subdir:
        Directory, relative to the checkout, where the doc build leaves
        its output.
    step_timeout:
        Time bound for each step, in seconds.
    keep_checkouts:
        Keep successful checkouts instead of deleting them.
    runner:
        Command runner; defaults to ``run_command``.
    """

    def __init__(
        self,
        git: VersionControl,
        workspace: WorkspaceManager,
        repo_url: str,
        *,
        install_command: Sequence[str] = ("npm", "install"),
        build_command: Sequence[str] = ("npm", "run", "docs"),
        docs_output_subdir: str = "docs-out",
        step_timeout: float = 900.0,
        keep_checkouts: bool = False,
        runner: CommandRunner | None = None,
    ) -> None:
        self._git = git
        self.workspace = workspace
        self.repo_url = repo_url
        self.install_command = tuple(install_command)
        self.build_command = tuple(build_command)
        self.docs_output_subdir = docs_output_subdir
        self.step_timeout = step_timeout
        self.keep_checkouts = keep_checkouts
        self._run = runner or run_command

    @classmethod
    def from_settings(
        cls,
        settings: DocmetaSettings,
        git: VersionControl,
        workspace: WorkspaceManager,
        runner: CommandRunner | None = None,
    ) -> VersionBuilder:
        return cls(
            git,
            workspace,
            settings.repo_url,
            install_command=settings.install_command,
            build_command=settings.build_command,
            docs_output_subdir=settings.docs_output_subdir,
            step_timeout=settings.step_timeout_seconds,
            keep_checkouts=settings.keep_checkouts,
            runner=runner,
        )

    def context_for(self, version: str) -> BuildContext:
        layout = self.workspace.layout
        return BuildContext(
            version=version,
            repo_url=self.repo_url,
            checkout_dir=layout.checkout_path(version),
            staging_dir=layout.staging_path(version),
            output_dir=layout.output_path(version),
            docs_output_subdir=self.docs_output_subdir,
            install_command=self.install_command,
            build_command=self.build_command,
            step_timeout=self.step_timeout,
        )

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    async def build(self, version: str) -> BuildResult:
        """Build *version* and return its result.

        Step failures and timeouts are captured in the returned
        ``BuildResult``; they are never raised.
        """
        ctx = self.context_for(version)
        started = time.monotonic()
        step = BuildStep.CHECKOUT
        logger.info("[%s] Building documentation", version)

        try:
            await self._checkout(ctx)
            step = BuildStep.INSTALL
            await self._run_step(ctx, ctx.install_command, step, InstallError)
            step = BuildStep.DOC_BUILD
            await self._run_step(ctx, ctx.build_command, step, DocBuildError)
            step = BuildStep.RELOCATE
            output = await self._relocate(ctx)
        except StepTimeoutError as exc:
            # A timed-out copy may still be writing into staging; leave it
            # for the next workspace reset.
            if step != BuildStep.RELOCATE:
                await asyncio.to_thread(self.workspace.discard, ctx.staging_dir)
            logger.error("[%s] %s", version, exc)
            return BuildResult.failure(version, exc, step, time.monotonic() - started)
        except BuildStepError as exc:
            await asyncio.to_thread(self.workspace.discard, ctx.staging_dir)
            logger.error("%s", exc)
            return BuildResult.failure(version, exc, exc.step, time.monotonic() - started)

        if not self.keep_checkouts:
            await asyncio.to_thread(self.workspace.discard, ctx.checkout_dir)

        elapsed = time.monotonic() - started
        logger.info("[%s] Done in %.1fs", version, elapsed)
        return BuildResult.success(version, output, elapsed)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _checkout(self, ctx: BuildContext) -> None:
        """Shallow, single-branch clone of the version's ref."""
        await asyncio.to_thread(self.workspace.discard, ctx.checkout_dir)
        logger.debug("[%s] Cloning %s", ctx.version, ctx.repo_url)
        try:
            await self._git.clone(
                ctx.repo_url,
                ctx.checkout_dir,
                branch=ctx.version,
                depth=1,
                single_branch=True,
                version=ctx.version,
            )
        except GitCommandError as exc:
            raise CheckoutError(ctx.version, BuildStep.CHECKOUT, str(exc)) from exc

    async def _run_step(
        self,
        ctx: BuildContext,
        command: Sequence[str],
        step: BuildStep,
        error_cls: type[BuildStepError],
    ) -> None:
        logger.debug("[%s] %s: %s", ctx.version, step.value, " ".join(command))
        result = await self._run(
            command,
            cwd=ctx.checkout_dir,
            timeout=ctx.step_timeout,
            step=step,
            version=ctx.version,
        )
        if not result.ok:
            raise error_cls(
                ctx.version,
                step,
                f"`{' '.join(command)}` exited with {result.returncode}\n{result.tail()}",
            )

    async def _relocate(self, ctx: BuildContext) -> Path:
        """Copy the built docs into staging, then rename them into the output tree."""
        source = ctx.docs_source
        if not source.is_dir():
            raise OutputRelocationError(
                ctx.version,
                BuildStep.RELOCATE,
                f"doc build produced no {ctx.docs_output_subdir}/ directory",
            )

        await asyncio.to_thread(self.workspace.discard, ctx.staging_dir)
        try:
            await asyncio.wait_for(
                asyncio.to_thread(shutil.copytree, source, ctx.staging_dir, symlinks=True),
                timeout=ctx.step_timeout,
            )
        except asyncio.TimeoutError:
            raise StepTimeoutError(
                BuildStep.RELOCATE, ctx.step_timeout, version=ctx.version
            ) from None
        except OSError as exc:
            raise OutputRelocationError(ctx.version, BuildStep.RELOCATE, str(exc)) from exc

        try:
            return await asyncio.to_thread(
                self.workspace.publish_version, ctx.version, ctx.staging_dir
            )
        except OSError as exc:
            raise OutputRelocationError(ctx.version, BuildStep.RELOCATE, str(exc)) from exc
