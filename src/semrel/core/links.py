"""Hyperlinks for changelog entries.

The changelog composer asks a link builder for a link to the version tag
and to each commit. An empty string means "no link".
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from semrel.core.commits import ParsedCommit
    from semrel.core.version import Version

logger = logging.getLogger(__name__)

# https://host/owner/repo(.git), ssh://git@host/owner/repo(.git), git@host:owner/repo(.git)
_REMOTE_PATTERNS = (
    re.compile(r"^https?://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<path>.+?)(?:\.git)?/?$"),
    re.compile(r"^ssh://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<path>.+?)(?:\.git)?/?$"),
    re.compile(r"^(?:[^@/]+@)?(?P<host>[^/:]+):(?P<path>.+?)(?:\.git)?/?$"),
)


class LinkBuilder(Protocol):
    """Builds links for the changelog."""

    def build_version_tag_link(self, version: Version) -> str: ...

    def build_commit_link(self, commit: ParsedCommit) -> str: ...


class PlainLinkBuilder:
    """Link builder that never produces links."""

    def build_version_tag_link(self, version: Version) -> str:
        return ""

    def build_commit_link(self, commit: ParsedCommit) -> str:
        return ""


@dataclass(frozen=True)
class GitHubLinkBuilder:
    """Links into a GitHub repository."""

    owner: str
    repo: str
    tag_prefix: str = "v"
    host: str = "github.com"

    @property
    def base_url(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.repo}"

    def build_version_tag_link(self, version: Version) -> str:
        return f"{self.base_url}/releases/tag/{self.tag_prefix}{version}"

    def build_commit_link(self, commit: ParsedCommit) -> str:
        return f"{self.base_url}/commit/{commit.sha}"


@dataclass(frozen=True)
class GitLabLinkBuilder:
    """Links into a GitLab project (groups may be nested)."""

    project_path: str
    tag_prefix: str = "v"
    host: str = "gitlab.com"

    @property
    def base_url(self) -> str:
        return f"https://{self.host}/{self.project_path}"

    def build_version_tag_link(self, version: Version) -> str:
        return f"{self.base_url}/-/tags/{self.tag_prefix}{version}"

    def build_commit_link(self, commit: ParsedCommit) -> str:
        return f"{self.base_url}/-/commit/{commit.sha}"


def parse_remote_url(url: str) -> tuple[str, str] | None:
    """Split a git remote URL into (host, path).

    Returns:
        Tuple of host and repository path without ".git", or None if the
        URL is not recognized
    """
    url = url.strip()
    for pattern in _REMOTE_PATTERNS:
        match = pattern.match(url)
        if match:
            return match.group("host").lower(), match.group("path")
    return None


def create_link_builder(
    remote_url: str | None,
    *,
    enabled: bool = True,
    tag_prefix: str = "v",
) -> LinkBuilder:
    """Pick a link builder for a remote.

    Args:
        remote_url: URL of the origin remote, if any
        enabled: False to always produce plain entries
        tag_prefix: Prefix of version tags

    Returns:
        GitHub or GitLab link builder for known hosts, otherwise a
        PlainLinkBuilder
    """
    if not enabled or not remote_url:
        return PlainLinkBuilder()

    parsed = parse_remote_url(remote_url)
    if parsed is None:
        logger.debug("Unrecognized remote URL %s, changelog links disabled", remote_url)
        return PlainLinkBuilder()

    host, path = parsed
    if "github" in host:
        parts = path.split("/")
        if len(parts) == 2:
            return GitHubLinkBuilder(owner=parts[0], repo=parts[1], tag_prefix=tag_prefix, host=host)
    elif "gitlab" in host:
        return GitLabLinkBuilder(project_path=path, tag_prefix=tag_prefix, host=host)

    logger.debug("No link builder for host %s", host)
    return PlainLinkBuilder()
