"""Shared fixtures for semrel tests."""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from semrel.vcs.git import Commit

if TYPE_CHECKING:
    from collections.abc import Callable


def _commit(sha: str, message: str) -> Commit:
    return Commit(
        sha=sha,
        message=message,
        author_name="Test",
        author_email="test@test.com",
        date=datetime.now(),
    )


@pytest.fixture
def feat_commit() -> Commit:
    return _commit("feat1234567890", "feat: add user authentication")


@pytest.fixture
def fix_commit() -> Commit:
    return _commit("fix1234567890", "fix(core): handle empty config")


@pytest.fixture
def breaking_commit() -> Commit:
    return _commit("break1234567890", "feat(api)!: drop v1 endpoints")


@pytest.fixture
def sample_commits() -> list[Commit]:
    return [
        _commit("a" * 40, "feat(api): add search endpoint"),
        _commit("b" * 40, "fix(core): handle empty config"),
        _commit("c" * 40, "docs: update readme"),
        _commit("d" * 40, "chore: bump dependencies"),
        _commit("e" * 40, "refactor!: rename settings module"),
    ]


def git(path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Path:
    """An empty git repository with a local identity."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q", "-b", "main")
    git(repo, "config", "user.name", "Test")
    git(repo, "config", "user.email", "test@test.com")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "tag.gpgsign", "false")
    return repo


@pytest.fixture
def temp_git_repo_with_pyproject(temp_git_repo: Path) -> Path:
    """A git repository with a committed pyproject.toml at version 1.0.0."""
    (temp_git_repo / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.semrel]
tag_prefix = "v"
"""
    )
    git(temp_git_repo, "add", "pyproject.toml")
    git(temp_git_repo, "commit", "-q", "-m", "chore: initial commit")
    return temp_git_repo


@pytest.fixture
def make_git_commit(temp_git_repo_with_pyproject: Path) -> Callable[[str], str]:
    """Commit a change with the given message and return its sha."""
    repo = temp_git_repo_with_pyproject
    counter = {"n": 0}

    def make(message: str) -> str:
        counter["n"] += 1
        (repo / f"file{counter['n']}.txt").write_text(message)
        git(repo, "add", ".")
        git(repo, "commit", "-q", "-m", message)
        return git(repo, "rev-parse", "HEAD")

    return make
