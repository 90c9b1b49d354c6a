"""Main Typer application: imports and registers all CLI commands.

Entry point: ``docmeta`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from docmeta.cli.commands.build import build_cmd
from docmeta.cli.commands.redirect import redirect_cmd
from docmeta.cli.commands.versions import versions_cmd
from docmeta.config import settings

app = typer.Typer(
    name="docmeta",
    help="docmeta: build versioned documentation sites from every released tag.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="build", help="Build docs for every version and write the landing page.")(build_cmd)
app.command(name="versions", help="List the versions a build would produce.")(versions_cmd)
app.command(name="redirect", help="Point the landing page at a version.")(redirect_cmd)


def configure_logging(level: str) -> None:
    """Route log records through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to DOCMETA_LOG_LEVEL or INFO).",
    ),
) -> None:
    """docmeta: versioned documentation builder."""
    configure_logging(log_level or settings.log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
