"""Tests for VersionEnumerator: filtering, ordering and the development marker."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from docmeta.core.enumerator import VersionEnumerator, filter_tags
from docmeta.core.errors import GitCommandError, RepositoryAccessError, StepTimeoutError
from docmeta.core.process import CommandResult


def _enumerate(git, ignore=(), marker="develop", source="https://example.invalid/p.git"):
    enumerator = VersionEnumerator(git, source, ignore, marker)
    return asyncio.run(enumerator.enumerate())


class TestEnumerate:
    def test_ignored_tag_removed_and_marker_appended(self, make_git):
        git = make_git(tags=["r1.0.0", "r1.0.1", "r1.1.0"])
        vs = _enumerate(git, ignore=["r1.0.0"])
        assert vs.versions == ("r1.0.1", "r1.1.0", "develop")

    def test_source_order_preserved(self, make_git):
        # Not semver-sorted: the collaborator's order wins.
        git = make_git(tags=["v10.0", "v2.0", "v9.1"])
        vs = _enumerate(git)
        assert vs.versions == ("v10.0", "v2.0", "v9.1", "develop")

    @pytest.mark.parametrize(
        "tags,ignore",
        [
            ([], []),
            (["a"], ["a"]),
            (["a", "b", "c"], ["b", "zzz"]),
            (["a", "b", "c"], ["a", "b", "c"]),
        ],
    )
    def test_result_is_tags_minus_ignored_plus_marker(self, make_git, tags, ignore):
        vs = _enumerate(make_git(tags=tags), ignore=ignore)
        expected = tuple(t for t in tags if t not in ignore) + ("develop",)
        assert vs.versions == expected
        assert vs.versions.count("develop") == 1

    def test_tag_named_like_marker_skipped(self, make_git):
        vs = _enumerate(make_git(tags=["v1", "develop"]))
        assert vs.versions == ("v1", "develop")

    def test_unsafe_tag_skipped(self, make_git):
        vs = _enumerate(make_git(tags=["release/1.0", "v1"]))
        assert vs.versions == ("v1", "develop")

    def test_custom_marker(self, make_git):
        vs = _enumerate(make_git(tags=["v1"]), marker="main")
        assert vs.versions == ("v1", "main")

    def test_no_marker(self, make_git):
        vs = _enumerate(make_git(tags=["v1"]), marker=None)
        assert vs.versions == ("v1",)

    def test_local_source_passed_through(self, make_git, tmp_path: Path):
        git = make_git(tags=["v1"])
        _enumerate(git, source=tmp_path)
        assert git.listed == [tmp_path]


class TestEnumerateErrors:
    def test_git_failure_is_repository_access_error(self, make_git):
        error = GitCommandError("boom", CommandResult(args=("git",), returncode=128))
        with pytest.raises(RepositoryAccessError):
            _enumerate(make_git(list_error=error))

    def test_timeout_is_repository_access_error(self, make_git):
        with pytest.raises(RepositoryAccessError):
            _enumerate(make_git(list_error=StepTimeoutError("list-tags", 1.0)))


class TestFilterTags:
    def test_duplicates_dropped(self):
        assert filter_tags(["a", "b", "a"], []) == ["a", "b"]
