"""Tests for SummaryRenderer: Rich output of run results."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from docmeta.core.errors import InstallError
from docmeta.core.pipeline import EXIT_FATAL, PipelineResult
from docmeta.models.builds import BuildResult, BuildStep, RunReport
from docmeta.models.versions import VersionSet
from docmeta.monitor.renderer import SummaryRenderer


def _console() -> Console:
    return Console(record=True, width=160, color_system=None)


def _report() -> RunReport:
    failure = InstallError("r2.0.0", BuildStep.INSTALL, "npm exited with 1")
    return RunReport(
        results={
            "r1.0.0": BuildResult.success("r1.0.0", Path("/out/r1.0.0"), 2.0),
            "r2.0.0": BuildResult.failure("r2.0.0", failure, BuildStep.INSTALL, 1.0),
        },
        latest="r2.0.0",
    )


class TestSummaryRenderer:
    def test_lists_every_version_and_outcome(self):
        console = _console()
        SummaryRenderer(console).print_result(
            PipelineResult(report=_report(), latest="r2.0.0")
        )
        text = console.export_text()
        assert "r1.0.0" in text
        assert "r2.0.0" in text
        assert "FAILED" in text
        assert "InstallError" in text
        assert "degraded" in text
        assert "(latest)" in text

    def test_error_messages_are_not_markup(self):
        # "[r2.0.0] install failed" must survive as literal text.
        console = _console()
        SummaryRenderer(console).print_result(PipelineResult(report=_report()))
        assert "[r2.0.0] install failed" in console.export_text()

    def test_aborted_run(self):
        console = _console()
        SummaryRenderer(console).print_result(
            PipelineResult(exit_code=EXIT_FATAL, error="Cannot list tags [boom]")
        )
        text = console.export_text()
        assert "Aborted" in text
        assert "Cannot list tags [boom]" in text

    def test_publish_error_shown(self):
        console = _console()
        SummaryRenderer(console).print_result(
            PipelineResult(report=_report(), publish_error="push rejected")
        )
        assert "push rejected" in console.export_text()

    def test_render_versions(self):
        console = _console()
        vs = VersionSet.from_tags(["r1.0.1", "r1.1.0"])
        console.print(SummaryRenderer(console).render_versions(vs, "r1.1.0"))
        text = console.export_text()
        assert "development" in text
        assert "r1.1.0 (latest)" in text
