"""docmeta CLI: Typer-based command-line interface.

Provides the ``docmeta`` command with subcommands for building every
documented version, listing the versions a run would build, and rewriting
the landing page.

All output uses Rich for formatted terminal display.
"""
