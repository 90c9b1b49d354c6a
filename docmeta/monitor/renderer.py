"""Rich terminal renderer for run summaries.

Turns a ``PipelineResult`` into a table of every version and its outcome,
followed by a one-line footer with the latest version and publication state.

Color scheme
------------
- green     : succeeded
- red       : failed
- cyan      : latest version
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from docmeta.models.builds import BuildResult, RunOutcome

if TYPE_CHECKING:
    from docmeta.core.pipeline import PipelineResult
    from docmeta.models.builds import RunReport
    from docmeta.models.versions import VersionSet


_OUTCOME_STYLES: dict[RunOutcome, str] = {
    RunOutcome.COMPLETE: "green",
    RunOutcome.DEGRADED: "yellow",
    RunOutcome.FAILED: "red",
}


def _status_cell(result: BuildResult) -> str:
    if result.ok:
        return "[green]OK[/green]"
    return "[bold red]FAILED[/bold red]"


def _detail_cell(result: BuildResult) -> str:
    if result.ok:
        return f"[dim]{escape(str(result.output_path))}[/dim]"
    step = result.failed_step.value if result.failed_step else "-"
    first_line = (result.error_message or "").split("\n", 1)[0]
    return f"{step}: {result.error_type}  [dim]{escape(first_line)}[/dim]"


class SummaryRenderer:
    """Renders run results as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def build_table(self, report: RunReport) -> Table:
        table = Table(show_header=True, header_style="bold", expand=True)
        table.add_column("Version", style="bold")
        table.add_column("Status", justify="center", width=8)
        table.add_column("Time", justify="right", width=8)
        table.add_column("Details", overflow="fold")

        for version, result in report.results.items():
            name = f"[cyan]{escape(version)}[/cyan] (latest)" if version == report.latest else escape(version)
            table.add_row(
                name,
                _status_cell(result),
                f"{result.duration_seconds:.1f}s",
                _detail_cell(result),
            )
        return table

    def render_versions(self, versions: VersionSet, latest: str) -> Table:
        """Table of an enumerated version set, without build results."""
        table = Table(show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Version")
        table.add_column("Kind")
        for i, version in enumerate(versions.versions, start=1):
            kind = "development" if version == versions.development_marker else "tag"
            name = f"[cyan]{escape(version)}[/cyan] (latest)" if version == latest else escape(version)
            table.add_row(str(i), name, kind)
        return table

    def render_result(self, result: PipelineResult) -> Panel:
        parts: list = []
        footer: list[str] = []
        border = "green"

        if result.report is not None:
            parts.append(self.build_table(result.report))
            outcome = result.report.outcome
            border = _OUTCOME_STYLES[outcome]
            footer.append(
                f"[bold]Outcome:[/bold] [{border}]{outcome.value}[/{border}] "
                f"({len(result.report.succeeded)}/{len(result.report.results)} built)"
            )
        if result.latest:
            footer.append(f"[bold]Latest:[/bold] {escape(result.latest)}")
        if result.published:
            footer.append("[bold]Deploy:[/bold] [green]pushed[/green]")
        elif result.publish_error:
            footer.append(f"[bold]Deploy:[/bold] [red]{escape(result.publish_error)}[/red]")
            border = "red"
        if result.error:
            footer.append(f"[bold red]Aborted:[/bold red] {escape(result.error)}")
            border = "red"

        if parts:
            parts.append(Text(""))
        parts.append(Text.from_markup("  |  ".join(footer) or "[dim]Nothing to report[/dim]"))
        return Panel(
            Group(*parts),
            title="[bold]docmeta[/bold]",
            border_style=border,
            padding=(1, 2),
        )

    def print_result(self, result: PipelineResult) -> None:
        self.console.print(self.render_result(result))
