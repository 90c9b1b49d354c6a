"""docmeta: versioned documentation sites from every released tag.

Checks out each released tag of a source repository (plus the development
branch), runs that version's own documentation build, aggregates the
outputs into one directory tree keyed by version, writes a landing page
that forwards to the latest version, and optionally pushes the result to a
deployment repository.

  - Concurrent per-version builds with a per-step timeout
  - Staged, atomic placement of each version's output
  - Partial-failure isolation: one broken version never sinks the others
  - Refuses to publish an empty or failed build
"""

__version__ = "0.2.0"
__description__ = "Multi-version documentation builder and publisher"

from docmeta.core.pipeline import DocsPipeline, PipelineOptions, PipelineResult
from docmeta.cli.app import app as cli

__all__ = ["DocsPipeline", "PipelineOptions", "PipelineResult", "cli", "__version__"]
