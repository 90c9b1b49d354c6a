"""``docmeta redirect VERSION``: rewrite the landing page only."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from docmeta.config import load_settings
from docmeta.core.errors import WriteError
from docmeta.core.redirect import RedirectGenerator
from docmeta.core.workspace import WorkspaceManager

console = Console()


def redirect_cmd(
    version: str = typer.Argument(..., help="Version the landing page points at."),
    output: Path = typer.Option(
        None, "--output", "-o", help="Aggregate output directory."
    ),
) -> None:
    """Point the landing page of an existing output tree at VERSION."""
    config = load_settings(output_dir=output)
    output_root = config.layout().output_dir
    if version not in WorkspaceManager.version_dirs(output_root):
        console.print(
            f"[yellow]Warning:[/yellow] {escape(str(output_root))} has no "
            f"{escape(version)}/ directory"
        )

    generator = RedirectGenerator(config.redirect_filename)
    try:
        path = generator.generate(version, output_root)
        if config.write_manifest:
            generator.write_manifest(
                WorkspaceManager.version_dirs(output_root), version, output_root
            )
    except WriteError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(f"[green]Landing page[/green] {escape(str(path))} -> {escape(version)}/")
