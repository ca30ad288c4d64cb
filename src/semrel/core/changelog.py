"""Changelog rendering and merging.

A release is rendered as a markdown block keyed by an anchor built from
its version. Blocks are merged into the changelog newest first, directly
after the preamble. Existing blocks are never re-parsed or reordered.

A merge is rejected when the newest block already documents a version
greater than or equal to the one being written, so re-running a release
never adds a duplicate entry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from semrel.core.version import Version
from semrel.exceptions import ChangelogError

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from semrel.core.commits import ParsedCommit
    from semrel.core.links import LinkBuilder

logger = logging.getLogger(__name__)

PREAMBLE = (
    "# Change Log\n"
    "\n"
    "All notable changes to this project will be documented in this file. "
    "See [Conventional Commits](https://www.conventionalcommits.org) for commit guidelines.\n"
)

ANCHOR_PATTERN = re.compile(r'<a name="(?P<id>[^"]*)"></a>')

# Section order is part of the changelog format
SECTIONS: tuple[tuple[str, Callable[[ParsedCommit], bool]], ...] = (
    ("Bug Fixes", lambda pc: pc.is_fix),
    ("Features", lambda pc: pc.is_feature),
    ("Breaking Changes", lambda pc: pc.is_breaking),
)
OTHER_SECTION = "Other"


@dataclass(frozen=True)
class Written:
    """Merge succeeded; ``content`` is the full new changelog."""

    content: str


@dataclass(frozen=True)
class Rejected:
    """Merge refused because the changelog already covers the version."""

    reason: str
    latest_version: Version


MergeResult = Written | Rejected


def version_id(version: Version) -> str:
    """Anchor id of a version: "1.2.0-rc.1" -> "1_2_0-rc_1"."""
    return str(version).replace(".", "_")


def _is_other(pc: ParsedCommit) -> bool:
    return not (pc.is_fix or pc.is_feature or pc.is_breaking)


def render_commit(commit: ParsedCommit, link_builder: LinkBuilder) -> str:
    """Render one commit as a markdown bullet."""
    line = "* "
    if commit.scope.strip():
        line += f"**{commit.scope}:** "
    line += commit.subject

    commit_link = link_builder.build_commit_link(commit)
    if commit_link.strip():
        line += f" ([{commit.short_sha}]({commit_link}))"

    return line


def render_section(
    header: str,
    link_builder: LinkBuilder,
    commits: Iterable[ParsedCommit],
    release_id: str,
) -> str | None:
    """Render a changelog section, or None if it has no commits."""
    ordered = sorted(commits, key=lambda pc: (pc.scope, pc.subject))
    if not ordered:
        return None

    lines = [f'### <a id="{release_id}-{header.replace(" ", "_")}"></a> {header}', ""]
    lines.extend(render_commit(pc, link_builder) for pc in ordered)
    return "\n".join(lines) + "\n"


def render_release(
    version: Version,
    timestamp: datetime,
    link_builder: LinkBuilder,
    commits: Sequence[ParsedCommit],
    *,
    include_all: bool = False,
) -> str:
    """Render the changelog block for a release.

    Args:
        version: Version being released
        timestamp: Release time, only its date is shown
        link_builder: Provides tag and commit links
        commits: Parsed commits of the release
        include_all: Also list commits that are not fixes, features or
            breaking changes

    Returns:
        Markdown block starting with the version anchor
    """
    release_id = version_id(version)

    tag_link = link_builder.build_version_tag_link(version)
    title = f"[{version}]({tag_link})" if tag_link.strip() else str(version)
    date = f"{timestamp.year}-{timestamp.month}-{timestamp.day}"

    markdown = f'<a name="{release_id}"></a>\n'
    markdown += f'## <a id="{release_id}"></a> {title} ({date})\n\n'

    sections = list(SECTIONS)
    if include_all:
        sections.append((OTHER_SECTION, _is_other))

    for header, predicate in sections:
        section = render_section(
            header, link_builder, [pc for pc in commits if predicate(pc)], release_id
        )
        if section:
            markdown += section + "\n"

    return markdown


def find_latest_version(document: str) -> tuple[int, Version | None] | None:
    """Locate the newest release block of a changelog.

    Returns:
        Tuple of the first anchor's offset and the version it encodes
        (None if the id is not a version), or None if there is no anchor
    """
    match = ANCHOR_PATTERN.search(document)
    if not match:
        return None
    return match.start(), Version.try_parse(match.group("id").replace("_", "."))


def merge_changelog(existing: str | None, block: str, version: Version) -> MergeResult:
    """Merge a release block into a changelog document.

    Args:
        existing: Current changelog text, None if there is no changelog yet.
            Blank text is treated like a missing changelog
        block: Block rendered by render_release()
        version: Version of the block

    Returns:
        Written with the new document, or Rejected if the changelog
        already documents ``version`` or a newer one
    """
    if existing is None or not existing.strip():
        return Written(PREAMBLE + "\n" + block)

    latest = find_latest_version(existing)
    if latest is None:
        return Written(existing.rstrip("\n") + "\n\n" + block)

    position, latest_version = latest
    if latest_version is not None and latest_version >= version:
        reason = (
            f"Could not append changelog for version {version}. The most recent "
            f"version found is {latest_version} which is larger or equal to {version}."
        )
        logger.debug(reason)
        return Rejected(reason=reason, latest_version=latest_version)

    return Written(existing[:position] + block + existing[position:])


def prepare_changelog(
    path: Path,
    version: Version,
    timestamp: datetime,
    link_builder: LinkBuilder,
    commits: Sequence[ParsedCommit],
    *,
    include_all: bool = False,
) -> MergeResult:
    """Render a release and merge it with the changelog file in memory.

    Raises:
        ChangelogError: If the file exists but cannot be read
    """
    block = render_release(version, timestamp, link_builder, commits, include_all=include_all)

    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else None
    except OSError as e:
        raise ChangelogError(f"Could not read {path}: {e}") from e

    return merge_changelog(existing, block, version)


def write_changelog(path: Path, result: Written) -> None:
    """Persist a successful merge.

    Raises:
        ChangelogError: If the file cannot be written
    """
    try:
        path.write_text(result.content, encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"Could not write {path}: {e}") from e
    logger.debug("Wrote %s", path)


def update_changelog(
    path: Path,
    version: Version,
    timestamp: datetime,
    link_builder: LinkBuilder,
    commits: Sequence[ParsedCommit],
    *,
    include_all: bool = False,
) -> MergeResult:
    """Render a release and merge it into the changelog file.

    The file is only written when the merge succeeds.

    Raises:
        ChangelogError: If the file cannot be read or written
    """
    result = prepare_changelog(
        path, version, timestamp, link_builder, commits, include_all=include_all
    )
    if isinstance(result, Written):
        write_changelog(path, result)
    return result
