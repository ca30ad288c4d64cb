"""Implementation of the 'changelog' command.

Writes the changelog entry of a release that is already tagged, using
the commits between the previous version tag and the release tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from semrel.cli.app import EXIT_FAILURE
from semrel.cli.commands._common import (
    ensure_clean,
    fail,
    load_project_config,
    open_repository,
    resolve_project_path,
)
from semrel.core.changelog import Rejected, prepare_changelog, render_release, write_changelog
from semrel.core.commits import parse_commits
from semrel.core.links import create_link_builder
from semrel.exceptions import SemrelError

if TYPE_CHECKING:
    from rich.console import Console

    from semrel.core.version import Version


@dataclass(frozen=True)
class ChangelogOptions:
    """Command line switches of the changelog command."""

    dry_run: bool = False
    skip_dirty: bool = False
    skip_commit: bool = False
    since: str | None = None
    until: str | None = None
    changelog_file: str | None = None
    links: bool = True
    include_all_commits: bool = False
    commit_suffix: str | None = None
    tag_prefix: str | None = None


def _find_tag(tags: list[tuple[str, Version]], name: str) -> tuple[str, Version] | None:
    for tag, version in tags:
        if tag == name:
            return tag, version
    return None


def run_changelog(
    path: str | None,
    options: ChangelogOptions,
    console: Console,
    err_console: Console,
) -> Version | None:
    """Run the changelog command.

    Returns:
        The documented version, or None if there was nothing to do
    """
    project_path = resolve_project_path(path, err_console)
    repo = open_repository(project_path, err_console)
    config = load_project_config(project_path, err_console)

    prefix = options.tag_prefix if options.tag_prefix is not None else config.tag_prefix

    ensure_clean(repo, options.skip_dirty or config.allow_dirty, err_console)

    try:
        tags = repo.get_version_tags(prefix)
    except SemrelError as e:
        raise fail(err_console, "Error reading tags", e) from e

    until = _find_tag(tags, f"{prefix}{options.until}") if options.until else (tags[-1] if tags else None)
    if until is None:
        console.print("[yellow]Could not find any versioned tags in repo.[/]")
        return None
    until_tag, until_version = until
    console.print(f"Until version tag is [cyan]{until_tag}[/]")

    if options.since:
        since = _find_tag(tags, f"{prefix}{options.since}")
        if since is None:
            err_console.print(f"[red]Error:[/] Tag {prefix}{options.since} does not exist.")
            raise SystemExit(EXIT_FAILURE)
    else:
        older = [item for item in tags if item[1] < until_version]
        since = older[-1] if older else None

    since_tag = None
    if since is not None:
        since_tag, since_version = since
        if until_version <= since_version:
            console.print(
                f"[yellow]Since version {since_version} is greater or equal to "
                f"until version {until_version}.[/]"
            )
            return None
        console.print(f"Since version tag is [cyan]{since_tag}[/]")
    else:
        console.print("Since version tag not found, using all commits.")

    try:
        commits = repo.get_commits_between(since_tag, until_tag)
    except SemrelError as e:
        raise fail(err_console, "Error reading commits", e) from e

    parsed = parse_commits(commits, config.commits)
    timestamp = commits[0].date if commits else datetime.now().astimezone()
    link_builder = create_link_builder(
        repo.get_remote_url(),
        enabled=options.links and config.changelog.links,
        tag_prefix=prefix,
    )
    include_all = options.include_all_commits or config.changelog.include_all_commits

    if options.changelog_file:
        changelog_path = Path(options.changelog_file)
        if not changelog_path.is_absolute():
            changelog_path = project_path / changelog_path
    else:
        changelog_path = project_path / config.changelog_path

    try:
        result = prepare_changelog(
            changelog_path, until_version, timestamp, link_builder, parsed, include_all=include_all
        )
    except SemrelError as e:
        raise fail(err_console, "Error generating changelog", e) from e

    if isinstance(result, Rejected):
        console.print(f"[yellow]{result.reason}[/]\n[dim]Nothing to do.[/]")
        return None

    if options.dry_run:
        block = render_release(until_version, timestamp, link_builder, parsed, include_all=include_all)
        console.print(block, markup=False, highlight=False)
        return until_version

    try:
        write_changelog(changelog_path, result)
    except SemrelError as e:
        raise fail(err_console, "Error writing changelog", e) from e
    console.print(f"  [green]✓[/] updated {changelog_path.name}")

    if options.skip_commit or not config.git.commit:
        console.print("\n[dim]Commit of changelog was skipped.[/]")
        return until_version

    if not changelog_path.resolve().is_relative_to(repo.path):
        console.print(f"\n[dim]{changelog_path} is outside of {repo.path}, commit skipped.[/]")
        return until_version

    suffix = options.commit_suffix if options.commit_suffix is not None else config.git.commit_suffix
    try:
        repo.stage(changelog_path)
        repo.commit(f"docs: New Changelog for version {until_version} {suffix}".rstrip())
    except SemrelError as e:
        raise fail(err_console, "Error committing changelog", e) from e

    console.print("  [green]✓[/] committed changes in changelog")
    return until_version
