"""Core business logic for semrel.

This module contains the fundamental building blocks:
- Semantic version parsing, ordering and bumping
- Conventional commit parsing and bump calculation
- Changelog rendering and merging
- Changelog link builders
"""

from __future__ import annotations

from semrel.core.changelog import (
    MergeResult,
    Rejected,
    Written,
    merge_changelog,
    prepare_changelog,
    render_release,
    update_changelog,
    write_changelog,
)
from semrel.core.commits import (
    CommitKind,
    ParsedCommit,
    calculate_bump,
    parse_commit,
    parse_commits,
)
from semrel.core.links import (
    GitHubLinkBuilder,
    GitLabLinkBuilder,
    LinkBuilder,
    PlainLinkBuilder,
    create_link_builder,
)
from semrel.core.version import BumpType, Version, next_version, parse_version

__all__ = [
    # Version
    "BumpType",
    # Commits
    "CommitKind",
    # Links
    "GitHubLinkBuilder",
    "GitLabLinkBuilder",
    "LinkBuilder",
    # Changelog
    "MergeResult",
    "ParsedCommit",
    "PlainLinkBuilder",
    "Rejected",
    "Version",
    "Written",
    "calculate_bump",
    "create_link_builder",
    "merge_changelog",
    "next_version",
    "parse_commit",
    "parse_commits",
    "parse_version",
    "prepare_changelog",
    "render_release",
    "update_changelog",
    "write_changelog",
]
