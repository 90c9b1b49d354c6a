"""``docmeta build``: build, aggregate, redirect and optionally deploy.

Runs the whole pipeline: workspace reset, tag enumeration, one concurrent
build per version, landing page, and (with ``--deploy``) publication to
the deployment repository.  Prints a summary of every version's outcome
and exits with the pipeline's exit code.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from docmeta.config import load_settings
from docmeta.core.pipeline import DocsPipeline, PipelineOptions
from docmeta.monitor.renderer import SummaryRenderer

console = Console()


def build_cmd(
    deploy: bool = typer.Option(
        False, "--deploy", help="Publish the output tree to the deployment repository."
    ),
    nocleanup: bool = typer.Option(
        False, "--nocleanup", help="Do not reset the workspace before building."
    ),
    nodocs: bool = typer.Option(
        False, "--nodocs", help="Skip per-version builds (redirect-only regeneration)."
    ),
    travis: bool = typer.Option(
        False,
        "--travis",
        "--ci-key",
        help="Decrypt and register the CI deploy key before building.",
    ),
    repo: str = typer.Option(
        None, "--repo", "-r", help="Source repository URL."
    ),
    deploy_repo: str = typer.Option(
        None, "--deploy-repo", help="Deployment repository URL."
    ),
    ignore_tag: list[str] = typer.Option(
        None, "--ignore-tag", "-i", help="Tag to skip (repeatable)."
    ),
    latest: str = typer.Option(
        None, "--latest", help="Version the landing page points at."
    ),
    timeout: float = typer.Option(
        None, "--timeout", help="Per-step time bound in seconds."
    ),
    jobs: int = typer.Option(
        None, "--jobs", "-j", help="Maximum concurrent builds (0 = unbounded)."
    ),
    output: Path = typer.Option(
        None, "--output", "-o", help="Aggregate output directory."
    ),
) -> None:
    """Build documentation for every released tag plus the development branch.

    Exit codes:
    - 0: every version built, or some versions built (degraded).
    - 1: fatal error (credentials, tag listing, landing page).
    - 3: every version failed to build.
    - 4: publication failed.
    """
    config = load_settings(
        repo_url=repo,
        deploy_repo_url=deploy_repo,
        latest_version=latest,
        step_timeout_seconds=timeout,
        max_parallel_builds=jobs,
        output_dir=output,
    )
    if ignore_tag:
        config = config.model_copy(
            update={"ignore_tags": [*config.ignore_tags, *ignore_tag]}
        )

    options = PipelineOptions(
        deploy=deploy,
        skip_cleanup=nocleanup,
        skip_docs=nodocs,
        install_deploy_key=travis,
    )
    pipeline = DocsPipeline(config)
    result = asyncio.run(pipeline.run(options))

    console.print()
    SummaryRenderer(console=console).print_result(result)

    if result.exit_code:
        raise typer.Exit(code=result.exit_code)
