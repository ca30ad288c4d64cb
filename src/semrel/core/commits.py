"""Conventional commit parsing and bump calculation.

Parses commit messages following the Conventional Commits
specification (https://www.conventionalcommits.org/):

    <type>[optional scope][!]: <description>

    [optional body]

    [optional footer(s)]

Parsing never fails: a header that does not follow the format is
classified as type "other" with the whole header as its subject.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from semrel.core.version import BumpType

if TYPE_CHECKING:
    from semrel.config.models import CommitsConfig
    from semrel.vcs.git import Commit

logger = logging.getLogger(__name__)

OTHER_TYPE = "other"

DEFAULT_BREAKING_KEYWORDS: tuple[str, ...] = ("BREAKING CHANGE", "BREAKING-CHANGE")

# type(scope)!: subject
HEADER_PATTERN = re.compile(
    r"^(?P<type>\w*)"
    r"(?:\((?P<scope>[^()]*)\))?"
    r"(?P<breaking>!)?"
    r": (?P<subject>.+)$"
)


class CommitKind(StrEnum):
    """Changelog-relevant classification of a commit type."""

    FEATURE = "feat"
    FIX = "fix"
    OTHER = "other"

    @classmethod
    def from_type(cls, commit_type: str) -> CommitKind:
        try:
            return cls(commit_type)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class ParsedCommit:
    """A commit classified according to Conventional Commits.

    Attributes:
        sha: Full commit hash
        commit_type: Lowercase type token, "other" if the header is malformed
        scope: Scope in parentheses, empty string when absent
        subject: Header text after the prefix (whole header if malformed)
        is_breaking: Header carries "!" or the body has a breaking footer
        breaking_notes: Texts of the breaking change footers
    """

    sha: str
    commit_type: str
    scope: str
    subject: str
    is_breaking: bool = False
    breaking_notes: tuple[str, ...] = field(default=())

    @property
    def kind(self) -> CommitKind:
        return CommitKind.from_type(self.commit_type)

    @property
    def is_fix(self) -> bool:
        return self.commit_type == CommitKind.FIX

    @property
    def is_feature(self) -> bool:
        return self.commit_type == CommitKind.FEATURE

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @classmethod
    def from_commit(
        cls,
        commit: Commit,
        breaking_keywords: Sequence[str] = DEFAULT_BREAKING_KEYWORDS,
    ) -> ParsedCommit:
        """Parse a git commit into a ParsedCommit."""
        return parse_commit(commit.message, commit.sha, breaking_keywords)


def _breaking_footer_pattern(keywords: Sequence[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(rf"^(?:{alternatives}):\s*(?P<note>.*)$", re.IGNORECASE)


def parse_commit(
    message: str,
    sha: str,
    breaking_keywords: Sequence[str] = DEFAULT_BREAKING_KEYWORDS,
) -> ParsedCommit:
    """Classify a single commit message.

    Args:
        message: Full commit message (header, body and footers)
        sha: Commit hash
        breaking_keywords: Footer keywords that mark a breaking change

    Returns:
        ParsedCommit for the message
    """
    lines = message.strip().splitlines() or [""]
    header = lines[0].strip()

    footer_pattern = _breaking_footer_pattern(breaking_keywords)
    notes = []
    for line in lines[1:]:
        footer = footer_pattern.match(line.strip())
        if footer:
            notes.append(footer.group("note").strip())

    match = HEADER_PATTERN.match(header)
    if not match:
        return ParsedCommit(
            sha=sha,
            commit_type=OTHER_TYPE,
            scope="",
            subject=header,
            is_breaking=bool(notes),
            breaking_notes=tuple(notes),
        )

    commit_type = match.group("type").lower() or OTHER_TYPE
    return ParsedCommit(
        sha=sha,
        commit_type=commit_type,
        scope=match.group("scope") or "",
        subject=match.group("subject"),
        is_breaking=match.group("breaking") is not None or bool(notes),
        breaking_notes=tuple(notes),
    )


def parse_commits(
    commits: Iterable[Commit],
    config: CommitsConfig | None = None,
) -> list[ParsedCommit]:
    """Parse commits, preserving their order.

    Args:
        commits: Raw commits, newest first
        config: Commit parsing configuration

    Returns:
        One ParsedCommit per input commit, in input order
    """
    keywords = tuple(config.breaking_keywords) if config else DEFAULT_BREAKING_KEYWORDS
    parsed = [ParsedCommit.from_commit(commit, keywords) for commit in commits]
    logger.debug("Parsed %d commits", len(parsed))
    return parsed


def calculate_bump(commits: Iterable[ParsedCommit]) -> BumpType:
    """Decide the version bump for a set of commits.

    Breaking changes win over features, features over fixes. Anything
    else does not affect the version.
    """
    commits = list(commits)

    if any(pc.is_breaking for pc in commits):
        bump = BumpType.MAJOR
    elif any(pc.is_feature for pc in commits):
        bump = BumpType.MINOR
    elif any(pc.is_fix for pc in commits):
        bump = BumpType.PATCH
    else:
        bump = BumpType.NONE

    logger.debug("Bump for %d commits: %s", len(commits), bump)
    return bump
