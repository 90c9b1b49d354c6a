"""End-to-end documentation run.

Wires the workspace manager, version enumerator, build orchestrator,
redirect generator and deployment publisher into one run:

    deploy key (optional) -> workspace reset -> enumeration
        -> concurrent builds -> latest resolution -> landing page
        -> publication (optional)

Only this module turns errors into exit codes; components raise.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from docmeta.config import DocmetaSettings
from docmeta.core.builder import VersionBuilder
from docmeta.core.credentials import DeployKeyInstaller
from docmeta.core.enumerator import VersionEnumerator
from docmeta.core.errors import DocmetaError, PublishError
from docmeta.core.git import GitClient, VersionControl
from docmeta.core.orchestrator import BuildOrchestrator, resolve_latest
from docmeta.core.process import CommandRunner
from docmeta.core.publisher import DeploymentPublisher
from docmeta.core.redirect import RedirectGenerator
from docmeta.core.workspace import WorkspaceManager
from docmeta.models.builds import RunOutcome, RunReport
from docmeta.models.versions import VersionSet

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_ALL_FAILED = 3
EXIT_PUBLISH_FAILED = 4


class PipelineOptions(BaseModel):
    """Switches of one run (the CLI flags)."""

    model_config = ConfigDict(frozen=True)

    deploy: bool = False
    skip_cleanup: bool = False
    skip_docs: bool = False
    install_deploy_key: bool = False


class PipelineResult(BaseModel):
    """What a run produced, and how it should exit."""

    model_config = ConfigDict(frozen=True)

    exit_code: int = EXIT_OK
    version_set: VersionSet | None = None
    report: RunReport | None = None
    latest: str | None = None
    redirect_path: Path | None = None
    published: bool = False
    publish_error: str | None = None
    error: str | None = None


class DocsPipeline:
    """Runs a complete multi-version documentation build.

    Parameters
    ----------
    settings:
        Run configuration.
    git:
        Version-control collaborator; a ``GitClient`` by default.
    runner:
        Command runner for install/build/credential commands.
    base_dir:
        Directory the workspace paths are relative to (default: cwd).
    """

    def __init__(
        self,
        settings: DocmetaSettings,
        *,
        git: VersionControl | None = None,
        runner: CommandRunner | None = None,
        base_dir: Path | None = None,
    ) -> None:
        self.settings = settings
        timeout = settings.step_timeout_seconds
        self.git = git or GitClient(timeout=timeout, runner=runner)
        self.workspace = WorkspaceManager(settings.layout(base_dir))
        self.enumerator = VersionEnumerator(
            self.git,
            settings.source_repo_path or settings.repo_url,
            settings.ignore_tags,
            settings.development_branch or None,
        )
        self.builder = VersionBuilder.from_settings(
            settings, self.git, self.workspace, runner=runner
        )
        self.orchestrator = BuildOrchestrator(
            self.builder,
            max_parallel=settings.max_parallel_builds,
            latest_override=settings.latest_version,
        )
        self.redirect = RedirectGenerator(settings.redirect_filename)
        self.publisher = DeploymentPublisher(
            self.git, self.workspace, settings.commit_message
        )
        self.key_installer = DeployKeyInstaller(
            settings.encrypted_key_path,
            settings.deploy_key_path,
            timeout=timeout,
            runner=runner,
        )

    async def run(self, options: PipelineOptions | None = None) -> PipelineResult:
        """Execute one run; never raises ``DocmetaError``."""
        options = options or PipelineOptions()
        output_dir = self.workspace.layout.output_dir
        version_set: VersionSet | None = None
        report: RunReport | None = None

        try:
            if options.install_deploy_key:
                await self.key_installer.install()

            if options.skip_cleanup:
                self.workspace.prepare()
            else:
                self.workspace.reset(keep_output=options.skip_docs)

            version_set = await self.enumerator.enumerate()

            if options.skip_docs:
                logger.info("Skipping documentation builds")
                latest = resolve_latest(version_set, self.settings.latest_version)
            else:
                report = await self.orchestrator.run(version_set)
                latest = report.latest

            redirect_path = self.redirect.generate(latest, output_dir)
            if self.settings.write_manifest:
                built = report.succeeded if report is not None else self.workspace.built_versions()
                self.redirect.write_manifest(built, latest, output_dir)
        except DocmetaError as exc:
            logger.error("Run aborted: %s", exc)
            return PipelineResult(
                exit_code=EXIT_FATAL,
                version_set=version_set,
                report=report,
                error=str(exc),
            )

        exit_code = EXIT_OK
        if report is not None and report.outcome == RunOutcome.FAILED:
            exit_code = EXIT_ALL_FAILED

        published = False
        publish_error: str | None = None
        if options.deploy:
            try:
                await self.publisher.publish(
                    output_dir, self.settings.deploy_repo_url, report
                )
                published = True
            except PublishError as exc:
                logger.error("Publication failed: %s", exc)
                publish_error = str(exc)
                if exit_code == EXIT_OK:
                    exit_code = EXIT_PUBLISH_FAILED

        return PipelineResult(
            exit_code=exit_code,
            version_set=version_set,
            report=report,
            latest=latest,
            redirect_path=redirect_path,
            published=published,
            publish_error=publish_error,
        )
