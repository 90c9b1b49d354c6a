"""Shared test fixtures for docmeta."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

import pytest

from docmeta.config import DocmetaSettings
from docmeta.core.errors import GitCommandError, StepTimeoutError
from docmeta.core.process import CommandResult
from docmeta.core.workspace import WorkspaceManager
from docmeta.models.builds import BuildStep
from docmeta.models.context import WorkspaceLayout


def _label(step: BuildStep | str) -> str:
    return getattr(step, "value", step)


# ---------------------------------------------------------------------------
# Fakes for the external collaborators
# ---------------------------------------------------------------------------


class FakeGit:
    """In-process stand-in for ``GitClient``.

    Source clones create a checkout with a ``package.json``; deployment
    clones (no branch) create a ``.git`` directory and a stale page.
    """

    def __init__(
        self,
        tags: Iterable[str] = (),
        *,
        missing_refs: Iterable[str] = (),
        list_error: Exception | None = None,
        push_error: Exception | None = None,
        has_changes: bool = True,
    ) -> None:
        self.tags = list(tags)
        self.missing_refs = set(missing_refs)
        self.list_error = list_error
        self.push_error = push_error
        self.changes = has_changes
        self.clones: list[tuple[str, Path, str | None]] = []
        self.commits: list[tuple[Path, str]] = []
        self.pushes: list[Path] = []
        self.listed: list[str | Path] = []

    async def list_tags(self, source: str | Path) -> list[str]:
        self.listed.append(source)
        if self.list_error is not None:
            raise self.list_error
        return list(self.tags)

    async def clone(
        self,
        url: str,
        dest: Path,
        *,
        branch: str | None = None,
        depth: int | None = None,
        single_branch: bool = False,
        version: str | None = None,
    ) -> None:
        if branch in self.missing_refs:
            raise GitCommandError(
                f"git clone exited with 128: Remote branch {branch} not found",
                CommandResult(args=("git", "clone"), returncode=128),
            )
        self.clones.append((url, dest, branch))
        dest.mkdir(parents=True)
        if branch is None:
            (dest / ".git").mkdir()
            (dest / ".git" / "HEAD").write_text("ref: refs/heads/gh-pages\n")
            (dest / ".gitignore").write_text("node_modules\n")
            (dest / "stale.html").write_text("old")
        else:
            (dest / "package.json").write_text(f'{{"version": "{branch}"}}')

    async def add_all(self, repo: Path) -> None:
        pass

    async def has_changes(self, repo: Path) -> bool:
        return self.changes

    async def commit(self, repo: Path, message: str) -> None:
        self.commits.append((repo, message))

    async def push(self, repo: Path) -> None:
        if self.push_error is not None:
            raise self.push_error
        self.pushes.append(repo)


class FakeRunner:
    """In-process stand-in for ``run_command``.

    The doc-build step writes ``docs-out/index.html`` into the checkout.
    ``fail`` and ``hang`` hold ``(version, step)`` pairs that exit non-zero
    or time out.
    """

    def __init__(
        self,
        *,
        fail: Iterable[tuple[str, str]] = (),
        hang: Iterable[tuple[str, str]] = (),
        produce_docs: bool = True,
    ) -> None:
        self.fail = set(fail)
        self.hang = set(hang)
        self.produce_docs = produce_docs
        self.calls: list[tuple[str | None, str, tuple[str, ...], Path | None]] = []

    async def __call__(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        step: BuildStep | str = "command",
        version: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        label = _label(step)
        self.calls.append((version, label, tuple(args), cwd))
        if (version, label) in self.hang:
            raise StepTimeoutError(step, timeout or 0.0, version=version)
        if (version, label) in self.fail:
            return CommandResult(args=tuple(args), returncode=1, output="npm ERR! boom")
        if label == BuildStep.DOC_BUILD.value and self.produce_docs and cwd is not None:
            out = cwd / "docs-out"
            out.mkdir()
            (out / "index.html").write_text(f"docs for {version}")
        return CommandResult(args=tuple(args), returncode=0, output="ok")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep DOCMETA_* variables and .env files out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("DOCMETA_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path: Path) -> DocmetaSettings:
    """Settings with every directory under the test's temp directory."""
    return DocmetaSettings(
        _env_file=None,
        repo_url="https://example.invalid/project.git",
        deploy_repo_url="https://example.invalid/project-docs.git",
        output_dir=tmp_path / "docs_out",
        temp_dir=tmp_path / "docmeta_temp",
        deploy_dir=tmp_path / "docmeta_temp_deploy",
        step_timeout_seconds=5.0,
    )


@pytest.fixture
def layout(settings: DocmetaSettings, tmp_path: Path) -> WorkspaceLayout:
    return settings.layout(tmp_path)


@pytest.fixture
def workspace(layout: WorkspaceLayout) -> WorkspaceManager:
    """A workspace whose roots already exist."""
    manager = WorkspaceManager(layout)
    manager.reset()
    return manager


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit(tags=["r1.0.0", "r1.0.1", "r1.1.0"])


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_git() -> type[FakeGit]:
    """Factory fixture: build a FakeGit with custom tags or failures."""
    return FakeGit


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    """Factory fixture: build a FakeRunner with failing or hanging steps."""
    return FakeRunner
