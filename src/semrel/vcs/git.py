"""Git repository access.

Thin wrapper around the git command line. Every command runs in the
repository root and failures are raised as GitError with git's stderr.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from semrel.core.version import Version
from semrel.exceptions import DirtyRepositoryError, GitError, NotARepositoryError

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x00"
_RECORD_SEP = "\x1e"
# git expands %x00 and %x1e; argv may not contain NUL bytes
_LOG_FORMAT = "%H%x00%an%x00%ae%x00%aI%x00%B%x1e"


@dataclass(frozen=True)
class Commit:
    """A raw git commit."""

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime


class GitRepository:
    """A git working copy."""

    def __init__(self, path: Path) -> None:
        self.path = path.resolve()
        if not (self.path / ".git").exists():
            raise NotARepositoryError(f"{self.path} is not a git working copy")

    @classmethod
    def discover(cls, start: Path) -> GitRepository:
        """Find the working copy containing ``start``.

        Raises:
            NotARepositoryError: If neither start nor a parent contains .git
        """
        current = start.resolve()
        for directory in (current, *current.parents):
            if (directory / ".git").exists():
                return cls(directory)

        raise NotARepositoryError(
            f"Directory {start} or any parent directory do not contain a git working copy"
        )

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        cmd = ["git", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                cwd=self.path,
                capture_output=True,
                text=True,
                check=check,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"git {args[0]} failed with exit code {e.returncode}", stderr=e.stderr) from e

    def is_dirty(self) -> bool:
        """True if there are staged, unstaged or untracked changes."""
        return bool(self._run("status", "--porcelain").stdout.strip())

    def ensure_clean(self) -> None:
        """Fail if the working copy has uncommitted changes.

        Raises:
            DirtyRepositoryError: If the working copy is dirty
        """
        if self.is_dirty():
            raise DirtyRepositoryError(f"Repository {self.path} is dirty. Please commit your changes.")

    def has_commits(self) -> bool:
        return self._run("rev-parse", "--verify", "--quiet", "HEAD", check=False).returncode == 0

    def get_tags(self) -> list[str]:
        output = self._run("tag", "--list").stdout
        return [line.strip() for line in output.splitlines() if line.strip()]

    def tag_exists(self, name: str) -> bool:
        return name in self.get_tags()

    def get_version_tags(self, prefix: str) -> list[tuple[str, Version]]:
        """Tags of the form ``<prefix><semver>``, oldest version first."""
        tags = []
        for tag in self.get_tags():
            if not tag.startswith(prefix):
                continue
            version = Version.try_parse(tag[len(prefix) :])
            if version is not None:
                tags.append((tag, version))
        return sorted(tags, key=lambda item: item[1])

    def get_latest_tag(self, prefix: str) -> str | None:
        """Tag of the highest version with the given prefix."""
        tags = self.get_version_tags(prefix)
        return tags[-1][0] if tags else None

    def _log(self, revision_range: str | None) -> list[Commit]:
        if not self.has_commits():
            return []

        args = ["log", f"--format={_LOG_FORMAT}"]
        if revision_range:
            args.append(revision_range)
        output = self._run(*args).stdout

        commits = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record:
                continue
            sha, author_name, author_email, date, message = record.split(_FIELD_SEP, 4)
            commits.append(
                Commit(
                    sha=sha,
                    message=message.strip(),
                    author_name=author_name,
                    author_email=author_email,
                    date=datetime.fromisoformat(date),
                )
            )
        return commits

    def get_commits_since_tag(self, tag: str | None) -> list[Commit]:
        """Commits reachable from HEAD but not from ``tag``, newest first.

        All commits of HEAD if tag is None.
        """
        return self._log(f"{tag}..HEAD" if tag else None)

    def get_commits_between(self, since: str | None, until: str) -> list[Commit]:
        """Commits reachable from ``until`` but not from ``since``, newest first."""
        return self._log(f"{since}..{until}" if since else until)

    def stage(self, *paths: Path | str) -> None:
        self._run("add", "--", *(str(p) for p in paths))

    def commit(self, message: str) -> str:
        """Commit the staged changes and return the new commit's sha."""
        self._run("commit", "-m", message)
        return self._run("rev-parse", "HEAD").stdout.strip()

    def create_tag(self, name: str, message: str, ref: str = "HEAD") -> None:
        """Create an annotated tag."""
        self._run("tag", "-a", name, "-m", message, ref)

    def get_remote_url(self, remote: str = "origin") -> str | None:
        result = self._run("remote", "get-url", remote, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None
