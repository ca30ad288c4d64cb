"""Tests for GitRepository against real repositories."""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from semrel.core.version import Version
from semrel.exceptions import DirtyRepositoryError, GitError, NotARepositoryError
from semrel.vcs.git import GitRepository
from tests.conftest import git

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class TestDiscover:
    """Tests for GitRepository.discover()."""

    def test_discover_from_subdirectory(self, temp_git_repo: Path):
        subdir = temp_git_repo / "src" / "pkg"
        subdir.mkdir(parents=True)

        repo = GitRepository.discover(subdir)
        assert repo.path == temp_git_repo.resolve()

    def test_not_a_repository(self, tmp_path: Path):
        with pytest.raises(NotARepositoryError):
            GitRepository.discover(tmp_path)

    def test_constructor_requires_git_dir(self, tmp_path: Path):
        with pytest.raises(NotARepositoryError):
            GitRepository(tmp_path)


class TestStatus:
    """Tests for dirty checks."""

    def test_clean_after_commit(self, temp_git_repo_with_pyproject: Path):
        assert not GitRepository(temp_git_repo_with_pyproject).is_dirty()

    def test_untracked_file_is_dirty(self, temp_git_repo_with_pyproject: Path):
        (temp_git_repo_with_pyproject / "new.txt").write_text("x")
        assert GitRepository(temp_git_repo_with_pyproject).is_dirty()

    def test_ensure_clean_raises_when_dirty(self, temp_git_repo_with_pyproject: Path):
        (temp_git_repo_with_pyproject / "new.txt").write_text("x")

        with pytest.raises(DirtyRepositoryError, match="is dirty"):
            GitRepository(temp_git_repo_with_pyproject).ensure_clean()

    def test_ensure_clean_passes_when_clean(self, temp_git_repo_with_pyproject: Path):
        GitRepository(temp_git_repo_with_pyproject).ensure_clean()


class TestCommits:
    """Tests for reading commits."""

    def test_empty_repository_has_no_commits(self, temp_git_repo: Path):
        assert GitRepository(temp_git_repo).get_commits_since_tag(None) == []

    def test_commits_newest_first(self, make_git_commit: Callable[[str], str], temp_git_repo_with_pyproject: Path):
        first = make_git_commit("feat: first")
        second = make_git_commit("fix(core): second\n\nBREAKING CHANGE: body text")

        commits = GitRepository(temp_git_repo_with_pyproject).get_commits_since_tag(None)

        assert [c.sha for c in commits[:2]] == [second, first]
        assert commits[0].message == "fix(core): second\n\nBREAKING CHANGE: body text"
        assert commits[0].author_email == "test@test.com"
        assert commits[-1].message == "chore: initial commit"

    def test_log_arguments_contain_no_control_characters(
        self, make_git_commit: Callable[[str], str], temp_git_repo_with_pyproject: Path
    ):
        """Field separators are produced by git, not passed on the command line."""
        make_git_commit("feat: first")
        repo = GitRepository(temp_git_repo_with_pyproject)

        with patch("subprocess.run", wraps=subprocess.run) as run:
            commits = repo.get_commits_since_tag(None)

        for call in run.call_args_list:
            assert not any("\x00" in arg or "\x1e" in arg for arg in call.args[0])
        assert [c.message for c in commits] == ["feat: first", "chore: initial commit"]

    def test_commits_since_tag(self, make_git_commit: Callable[[str], str], temp_git_repo_with_pyproject: Path):
        git(temp_git_repo_with_pyproject, "tag", "-a", "v1.0.0", "-m", "1.0.0")
        sha = make_git_commit("feat: after tag")

        commits = GitRepository(temp_git_repo_with_pyproject).get_commits_since_tag("v1.0.0")

        assert [c.sha for c in commits] == [sha]

    def test_commits_between_tags(self, make_git_commit: Callable[[str], str], temp_git_repo_with_pyproject: Path):
        repo = GitRepository(temp_git_repo_with_pyproject)
        repo.create_tag("v1.0.0", "1.0.0")
        sha = make_git_commit("fix: between")
        repo.create_tag("v1.0.1", "1.0.1")
        make_git_commit("feat: later")

        assert [c.sha for c in repo.get_commits_between("v1.0.0", "v1.0.1")] == [sha]


class TestTags:
    """Tests for version tags."""

    def test_latest_tag_by_version(self, temp_git_repo_with_pyproject: Path):
        repo = GitRepository(temp_git_repo_with_pyproject)
        for name in ["v1.2.0", "v1.10.0", "v1.9.0", "other", "vnext"]:
            git(temp_git_repo_with_pyproject, "tag", name)

        assert repo.get_latest_tag("v") == "v1.10.0"
        assert [v for _, v in repo.get_version_tags("v")] == [
            Version(1, 2, 0),
            Version(1, 9, 0),
            Version(1, 10, 0),
        ]
        assert repo.tag_exists("other")

    def test_no_tags(self, temp_git_repo_with_pyproject: Path):
        assert GitRepository(temp_git_repo_with_pyproject).get_latest_tag("v") is None


class TestWrites:
    """Tests for staging, committing and tagging."""

    def test_stage_commit_and_tag(self, temp_git_repo_with_pyproject: Path):
        repo = GitRepository(temp_git_repo_with_pyproject)
        (temp_git_repo_with_pyproject / "CHANGELOG.md").write_text("# Change Log\n")

        repo.stage(temp_git_repo_with_pyproject / "CHANGELOG.md")
        sha = repo.commit("chore(release): 1.0.0")
        repo.create_tag("v1.0.0", "1.0.0")

        assert git(temp_git_repo_with_pyproject, "log", "-1", "--format=%s") == "chore(release): 1.0.0"
        assert git(temp_git_repo_with_pyproject, "rev-list", "-n", "1", "v1.0.0") == sha
        assert not repo.is_dirty()

    def test_commit_without_changes_raises(self, temp_git_repo_with_pyproject: Path):
        with pytest.raises(GitError) as exc_info:
            GitRepository(temp_git_repo_with_pyproject).commit("empty")
        assert exc_info.value.stderr is not None

    def test_remote_url(self, temp_git_repo_with_pyproject: Path):
        repo = GitRepository(temp_git_repo_with_pyproject)
        assert repo.get_remote_url() is None

        git(temp_git_repo_with_pyproject, "remote", "add", "origin", "git@github.com:owner/repo.git")
        assert repo.get_remote_url() == "git@github.com:owner/repo.git"

    def test_git_not_installed(self, temp_git_repo: Path):
        repo = GitRepository(temp_git_repo)
        with patch("subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(GitError, match="not found"):
                repo.is_dirty()
