"""Run configuration: env-driven.

Centralized settings using pydantic-settings. Reads from a .env file and
DOCMETA_* environment variables; CLI options override individual fields.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from docmeta.models.context import WorkspaceLayout


class DocmetaSettings(BaseSettings):
    """Settings for a multi-version documentation run.

    All settings can be overridden via DOCMETA_* environment variables
    or a .env file in the working directory. List-valued settings take
    JSON in the environment.

    Examples
    --------
    Override via environment::

        export DOCMETA_REPO_URL=https://github.com/OpherV/Incheon.git
        export DOCMETA_IGNORE_TAGS='["r0.1.0", "r0.2.0"]'
        export DOCMETA_STEP_TIMEOUT_SECONDS=600

    Or via .env file::

        DOCMETA_DEPLOY_REPO_URL=git@github.com:OpherV/incheon-docs-site.git
        DOCMETA_MAX_PARALLEL_BUILDS=4
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DOCMETA_",
        env_file_encoding="utf-8",
    )

    # Source repository
    repo_url: str = "https://github.com/OpherV/Incheon.git"
    source_repo_path: Path | None = None  # list tags from a local clone instead
    ignore_tags: list[str] = []
    development_branch: str = "develop"
    latest_version: str | None = None  # explicit redirect target

    # Per-version build commands, run inside each checkout
    install_command: list[str] = ["npm", "install"]
    build_command: list[str] = ["npm", "run", "docs"]
    docs_output_subdir: str = "docs-out"

    # Workspace directories, relative to the working directory
    output_dir: Path = Path("docs_out")
    temp_dir: Path = Path("docmeta_temp")
    deploy_dir: Path = Path("docmeta_temp_deploy")
    keep_checkouts: bool = False

    # Scheduling
    step_timeout_seconds: float = 900.0
    max_parallel_builds: int = 0  # 0 = one concurrent build per version

    # Landing page
    redirect_filename: str = "index.html"
    write_manifest: bool = True

    # Deployment
    deploy_repo_url: str = "https://github.com/OpherV/incheon-docs-site.git"
    commit_message: str = "Autoupdate docs"
    encrypted_key_path: Path = Path("deploy_key.enc")
    deploy_key_path: Path = Path("deploy_key")

    # Observability
    log_level: str = "INFO"

    def layout(self, base: Path | None = None) -> WorkspaceLayout:
        """Resolve the workspace directories against *base* (default: cwd).

        The staging area sits next to the output root so the final rename of
        a built version never crosses a filesystem boundary.
        """
        root = (base or Path.cwd()).resolve()
        output = (root / self.output_dir).resolve()
        return WorkspaceLayout(
            temp_dir=(root / self.temp_dir).resolve(),
            output_dir=output,
            staging_dir=output.parent / f".{output.name}.staging",
            deploy_dir=(root / self.deploy_dir).resolve(),
        )


# Module-level singleton, import as `from docmeta.config import settings`
settings = DocmetaSettings()


def load_settings(**overrides: object) -> DocmetaSettings:
    """Build settings from the environment, with non-``None`` *overrides* on top."""
    return DocmetaSettings(**{k: v for k, v in overrides.items() if v is not None})
