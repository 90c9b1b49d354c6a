"""Workspace layout and the explicit per-build context.

Every builder step receives its directories through a ``BuildContext``
instead of changing the process working directory, so concurrent builds
never share ambient state.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class WorkspaceLayout(BaseModel):
    """Absolute roots of the areas owned by the workspace manager.

    ``staging_dir`` must live on the same filesystem as ``output_dir`` so a
    staged version can be renamed into place atomically.
    """

    model_config = ConfigDict(frozen=True)

    temp_dir: Path
    output_dir: Path
    staging_dir: Path
    deploy_dir: Path

    def checkout_path(self, version: str) -> Path:
        return self.temp_dir / version

    def staging_path(self, version: str) -> Path:
        return self.staging_dir / version

    def output_path(self, version: str) -> Path:
        return self.output_dir / version


class BuildContext(BaseModel):
    """Everything one version's build needs, threaded through each step."""

    model_config = ConfigDict(frozen=True)

    version: str
    repo_url: str
    checkout_dir: Path
    staging_dir: Path
    output_dir: Path
    docs_output_subdir: str = "docs-out"
    install_command: tuple[str, ...] = ("npm", "install")
    build_command: tuple[str, ...] = ("npm", "run", "docs")
    step_timeout: float = 900.0

    @property
    def docs_source(self) -> Path:
        """Where the doc-build command leaves its output inside the checkout."""
        return self.checkout_dir / self.docs_output_subdir
