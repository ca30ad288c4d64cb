"""Implementation of the 'release' command.

The release command bumps the project version, updates the changelog,
and commits and tags the release.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from rich.panel import Panel

from semrel.cli.app import EXIT_FAILURE
from semrel.cli.commands._common import (
    ensure_clean,
    fail,
    load_project_config,
    open_repository,
    resolve_project_path,
)
from semrel.core.changelog import Rejected, prepare_changelog, write_changelog
from semrel.core.commits import calculate_bump, parse_commits
from semrel.core.links import create_link_builder
from semrel.core.version import Version, next_version, parse_version
from semrel.exceptions import NoSignificantChangesError, SemrelError
from semrel.project.pyproject import get_pyproject_version, write_project_version

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from semrel.config import SemrelConfig
    from semrel.vcs import GitRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseOptions:
    """Command line switches of the release command."""

    dry_run: bool = False
    skip_dirty: bool = False
    skip_commit: bool = False
    skip_tag: bool = False
    skip_changelog: bool = False
    skip_project_version: bool = False
    version_from_tag: bool = False
    release_as: str | None = None
    ignore_insignificant: bool = False
    include_all_commits: bool = False
    commit_suffix: str | None = None
    tag_prefix: str | None = None


def _current_version(
    repo: GitRepository,
    project_path: Path,
    config: SemrelConfig,
    from_tag: bool,
) -> tuple[Version, str | None]:
    """Current version and the tag of its release (None if untagged)."""
    if from_tag:
        latest_tag = repo.get_latest_tag(config.tag_prefix)
        if latest_tag is None:
            return Version.parse(config.version.initial_version), None
        return Version.parse(latest_tag[len(config.tag_prefix) :]), latest_tag

    current = Version.parse(get_pyproject_version(project_path))
    tag = config.tag_name(current)
    return current, tag if repo.tag_exists(tag) else None


def run_release(
    path: str | None,
    options: ReleaseOptions,
    console: Console,
    err_console: Console,
) -> Version | None:
    """Run the release command.

    Args:
        path: Optional path to project directory
        options: Command line switches
        console: Console for standard output
        err_console: Console for error output

    Returns:
        The released version, or None if there was nothing to do
    """
    project_path = resolve_project_path(path, err_console)
    repo = open_repository(project_path, err_console)
    config = load_project_config(project_path, err_console)

    if options.tag_prefix is not None:
        config = config.model_copy(update={"tag_prefix": options.tag_prefix})

    ensure_clean(repo, options.skip_dirty or config.allow_dirty, err_console)

    release_as = None
    if options.release_as:
        try:
            release_as = parse_version(options.release_as)
        except SemrelError as e:
            raise fail(err_console, "Invalid release version", e) from e

    from_tag = options.version_from_tag or config.version.from_tag
    try:
        current_version, current_tag = _current_version(repo, project_path, config, from_tag)
    except SemrelError as e:
        raise fail(err_console, "Error getting version", e) from e

    is_first_release = current_tag is None

    try:
        commits = repo.get_commits_since_tag(current_tag)
    except SemrelError as e:
        raise fail(err_console, "Error reading commits", e) from e

    parsed = parse_commits(commits, config.commits)
    bump_type = calculate_bump(parsed)
    logger.debug("%d commits since %s, bump: %s", len(parsed), current_tag or "start", bump_type)

    ignore_insignificant = options.ignore_insignificant or config.version.ignore_insignificant

    if release_as is not None:
        new_version = release_as
    elif is_first_release:
        new_version = current_version
    else:
        try:
            new_version = next_version(
                current_version,
                bump_type,
                ignore_insignificant,
                fallback=config.version.fallback_bump,
            )
        except NoSignificantChangesError as e:
            err_console.print(
                f"[red]Error:[/] {e}\n[dim]Use [cyan]--release-as[/] to release a specific version.[/]"
            )
            raise SystemExit(EXIT_FAILURE) from e

        if ignore_insignificant and new_version == current_version:
            console.print(
                f"[yellow]Version was not affected by commits since last release ({current_version}). "
                "Insignificant changes are ignored, no action will be performed.[/]"
            )
            return None

    tag_name = config.tag_name(new_version)
    create_tag = not options.skip_commit and not options.skip_tag and config.git.tag
    if create_tag and repo.tag_exists(tag_name):
        err_console.print(f"[red]Error:[/] Tag [cyan]{tag_name}[/] already exists.")
        raise SystemExit(EXIT_FAILURE)

    mode_str = "[yellow]DRY-RUN[/]" if options.dry_run else "[green]EXECUTING[/]"
    if is_first_release and release_as is None:
        console.print(f"\n{mode_str} - First release! Releasing [green]{new_version}[/]\n")
    else:
        console.print(
            f"\n{mode_str} - Bumping version from [cyan]{current_version}[/] "
            f"to [green]{new_version}[/] ({bump_type})\n"
        )

    write_version = (
        not options.skip_project_version
        and config.version.write_project_version
        and new_version != current_version
    )
    write_log = not options.skip_changelog and config.changelog.enabled
    changelog_path = project_path / config.changelog_path

    # Merge the changelog first so a rejected entry leaves every file untouched
    merged = None
    if write_log:
        link_builder = create_link_builder(
            repo.get_remote_url(),
            enabled=config.changelog.links,
            tag_prefix=config.tag_prefix,
        )
        try:
            merged = prepare_changelog(
                changelog_path,
                new_version,
                datetime.now().astimezone(),
                link_builder,
                parsed,
                include_all=options.include_all_commits or config.changelog.include_all_commits,
            )
        except SemrelError as e:
            raise fail(err_console, "Error generating changelog", e) from e

        if isinstance(merged, Rejected):
            console.print(f"[yellow]{merged.reason}[/]\n[dim]Nothing to do.[/]")
            return None

    if options.dry_run:
        planned = []
        if write_version:
            planned.append("  • Update version in [cyan]pyproject.toml[/]")
        if write_log:
            planned.append(f"  • Add {new_version} to [cyan]{config.changelog_path}[/]")
        if not options.skip_commit:
            planned.append(f"  • Commit and tag the release as [cyan]{tag_name}[/]")
        console.print(
            Panel(
                "[bold]Would make the following changes:[/]\n\n" + "\n".join(planned),
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        return new_version

    staged: list[Path] = []

    if write_version:
        try:
            staged.extend(
                write_project_version(project_path, str(new_version), config.version.version_files)
            )
        except SemrelError as e:
            raise fail(err_console, "Error updating project version", e) from e
        console.print(f"  [green]✓[/] bumped version from {current_version} to {new_version}")

    if merged is not None:
        try:
            write_changelog(changelog_path, merged)
        except SemrelError as e:
            raise fail(err_console, "Error writing changelog", e) from e
        staged.append(changelog_path)
        console.print(f"  [green]✓[/] updated {config.changelog_path}")

    if options.skip_commit or not config.git.commit:
        console.print(
            f"\n[dim]Commit and tagging of release was skipped. Tag this release as "
            f"[cyan]{tag_name}[/] so the next release can find it.[/]"
        )
        return new_version

    try:
        if staged:
            repo.stage(*staged)
            suffix = options.commit_suffix if options.commit_suffix is not None else config.git.commit_suffix
            repo.commit(f"chore(release): {new_version} {suffix}".rstrip())
            console.print("  [green]✓[/] committed release changes")
        if create_tag:
            repo.create_tag(tag_name, str(new_version))
            console.print(f"  [green]✓[/] tagged release as {tag_name}")
    except SemrelError as e:
        raise fail(err_console, "Error committing release", e) from e

    console.print(
        Panel(
            f"[green]Released version {new_version}![/]\n\n"
            "Push all changes including tags:\n"
            "  [cyan]git push --follow-tags origin[/]",
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )
    return new_version
