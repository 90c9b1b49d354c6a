"""``docmeta versions``: show the version set and latest version, without building."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.markup import escape

from docmeta.config import load_settings
from docmeta.core.enumerator import VersionEnumerator
from docmeta.core.errors import DocmetaError
from docmeta.core.git import GitClient
from docmeta.core.orchestrator import resolve_latest
from docmeta.monitor.renderer import SummaryRenderer

console = Console()


def versions_cmd(
    repo: str = typer.Option(
        None, "--repo", "-r", help="Source repository URL."
    ),
    ignore_tag: list[str] = typer.Option(
        None, "--ignore-tag", "-i", help="Tag to skip (repeatable)."
    ),
    latest: str = typer.Option(
        None, "--latest", help="Version the landing page points at."
    ),
) -> None:
    """List the versions a build would produce, in build order."""
    config = load_settings(repo_url=repo, latest_version=latest)
    enumerator = VersionEnumerator(
        GitClient(timeout=config.step_timeout_seconds),
        config.source_repo_path or config.repo_url,
        [*config.ignore_tags, *(ignore_tag or [])],
        config.development_branch or None,
    )
    try:
        version_set = asyncio.run(enumerator.enumerate())
        resolved = resolve_latest(version_set, config.latest_version)
    except DocmetaError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    renderer = SummaryRenderer(console=console)
    console.print(renderer.render_versions(version_set, resolved))
