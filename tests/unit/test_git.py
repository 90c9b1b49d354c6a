"""Tests for GitClient: command lines and tag parsing, with a recording runner."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from docmeta.core.errors import GitCommandError
from docmeta.core.git import GitClient, VersionControl, parse_ls_remote_tags
from docmeta.core.process import CommandResult
from docmeta.models.builds import BuildStep


class ScriptedRunner:
    def __init__(self, output: str = "", returncode: int = 0) -> None:
        self.output = output
        self.returncode = returncode
        self.calls: list[dict] = []

    async def __call__(self, args, **kwargs) -> CommandResult:
        self.calls.append({"args": tuple(args), **kwargs})
        return CommandResult(args=tuple(args), returncode=self.returncode, output=self.output)


LS_REMOTE = (
    "1111111111111111111111111111111111111111\trefs/tags/r1.0.0\n"
    "2222222222222222222222222222222222222222\trefs/tags/r1.0.1\n"
    "3333333333333333333333333333333333333333\trefs/tags/r1.1.0\n"
)


class TestParseTags:
    def test_parse(self):
        assert parse_ls_remote_tags(LS_REMOTE) == ["r1.0.0", "r1.0.1", "r1.1.0"]

    def test_ignores_non_tag_refs(self):
        assert parse_ls_remote_tags("abc\trefs/heads/main\n\n") == []


class TestGitClient:
    def test_satisfies_protocol(self):
        assert isinstance(GitClient(), VersionControl)

    def test_list_remote_tags(self):
        runner = ScriptedRunner(LS_REMOTE)
        tags = asyncio.run(GitClient(runner=runner).list_tags("https://x/p.git"))
        assert tags == ["r1.0.0", "r1.0.1", "r1.1.0"]
        assert runner.calls[0]["args"] == (
            "git", "ls-remote", "--tags", "--refs", "https://x/p.git"
        )
        assert runner.calls[0]["env"] == {"GIT_TERMINAL_PROMPT": "0"}

    def test_list_local_tags(self, tmp_path: Path):
        runner = ScriptedRunner("v1\nv2\n")
        tags = asyncio.run(GitClient(runner=runner).list_tags(tmp_path))
        assert tags == ["v1", "v2"]
        assert runner.calls[0]["cwd"] == tmp_path

    def test_shallow_clone_arguments(self, tmp_path: Path):
        runner = ScriptedRunner()
        dest = tmp_path / "v1"
        asyncio.run(
            GitClient(timeout=7, runner=runner).clone(
                "https://x/p.git", dest, branch="v1", depth=1, single_branch=True, version="v1"
            )
        )
        call = runner.calls[0]
        assert call["args"] == (
            "git", "clone", "--quiet", "--branch", "v1", "--depth", "1",
            "--single-branch", "--", "https://x/p.git", str(dest),
        )
        assert call["timeout"] == 7
        assert call["step"] == BuildStep.CHECKOUT
        assert call["version"] == "v1"

    def test_failure_raises(self):
        runner = ScriptedRunner("fatal: not found", returncode=128)
        with pytest.raises(GitCommandError) as info:
            asyncio.run(GitClient(runner=runner).list_tags("https://x/p.git"))
        assert info.value.result.returncode == 128

    def test_has_changes(self, tmp_path: Path):
        assert asyncio.run(GitClient(runner=ScriptedRunner(" M a\n")).has_changes(tmp_path))
        assert not asyncio.run(GitClient(runner=ScriptedRunner("")).has_changes(tmp_path))

    def test_commit_and_push(self, tmp_path: Path):
        runner = ScriptedRunner()
        client = GitClient(runner=runner)
        asyncio.run(client.commit(tmp_path, "Autoupdate docs"))
        asyncio.run(client.push(tmp_path))
        assert runner.calls[0]["args"] == ("git", "commit", "--quiet", "-m", "Autoupdate docs")
        assert runner.calls[1]["args"] == ("git", "push", "--quiet")
        assert all(c["cwd"] == tmp_path for c in runner.calls)
