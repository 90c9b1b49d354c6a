"""Terminal rendering of run results."""

from docmeta.monitor.renderer import SummaryRenderer

__all__ = ["SummaryRenderer"]
