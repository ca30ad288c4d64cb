"""Command line interface for semrel.

Exit codes:
    0: success, or nothing to do
    1: release failed
    2: directory does not exist
    3: directory is not inside a git working copy
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import click
from rich.console import Console
from rich.logging import RichHandler

from semrel import __version__

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_NO_DIRECTORY = 2
EXIT_NO_REPOSITORY = 3


@dataclass
class CliContext:
    """Consoles shared by all commands."""

    console: Console
    err_console: Console


def _configure_logging(verbose: bool, silent: bool, console: Console) -> None:
    if silent:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


path_option = click.option(
    "-w",
    "--path",
    "path",
    type=click.Path(file_okay=False),
    default=None,
    help="Project directory (defaults to the current directory).",
)
dry_run_option = click.option(
    "-d", "--dry-run", is_flag=True, help="Show what would change without writing anything."
)
skip_dirty_option = click.option(
    "--skip-dirty", is_flag=True, help="Skip the check for uncommitted changes."
)
skip_commit_option = click.option(
    "--skip-commit", is_flag=True, help="Do not commit (or tag) the release changes."
)
changelog_all_option = click.option(
    "--changelog-all",
    is_flag=True,
    help="Include all commits in the changelog, not only fixes, features and breaking changes.",
)
commit_suffix_option = click.option(
    "--commit-suffix", default=None, help="Suffix for the release commit message (e.g. [skip ci])."
)
tag_prefix_option = click.option(
    "--version-tag-prefix", "tag_prefix", default=None, help="Prefix of version tags."
)


@click.group()
@click.version_option(__version__, "-v", "--version", prog_name="semrel")
@click.option("--verbose", is_flag=True, help="Show debug output.")
@click.option("--silent", is_flag=True, help="Suppress console output.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, silent: bool) -> None:
    """Automatic versioning and CHANGELOG generation from conventional commits."""
    console = Console(quiet=silent)
    err_console = Console(stderr=True)
    _configure_logging(verbose, silent, err_console)
    ctx.obj = CliContext(console=console, err_console=err_console)


@cli.command()
@path_option
@dry_run_option
@skip_dirty_option
@skip_commit_option
@click.option("--skip-tag", is_flag=True, help="Do not create the version tag.")
@click.option("--skip-changelog", is_flag=True, help="Do not update the changelog.")
@click.option(
    "--skip-project-version", is_flag=True, help="Do not write the version into project files."
)
@click.option(
    "--version-from-tag", is_flag=True, help="Read the current version from the latest tag."
)
@click.option("-r", "--release-as", default=None, help="Release this version instead of bumping.")
@click.option(
    "-i",
    "--ignore-insignificant-commits",
    "ignore_insignificant",
    is_flag=True,
    help="Do not bump the version if no fix, feat or breaking commit is found.",
)
@changelog_all_option
@commit_suffix_option
@tag_prefix_option
@click.pass_obj
def release(
    obj: CliContext,
    path: str | None,
    dry_run: bool,
    skip_dirty: bool,
    skip_commit: bool,
    skip_tag: bool,
    skip_changelog: bool,
    skip_project_version: bool,
    version_from_tag: bool,
    release_as: str | None,
    ignore_insignificant: bool,
    changelog_all: bool,
    commit_suffix: str | None,
    tag_prefix: str | None,
) -> None:
    """Bump the version, update the changelog, commit and tag."""
    from semrel.cli.commands.release import ReleaseOptions, run_release

    options = ReleaseOptions(
        dry_run=dry_run,
        skip_dirty=skip_dirty,
        skip_commit=skip_commit,
        skip_tag=skip_tag,
        skip_changelog=skip_changelog,
        skip_project_version=skip_project_version,
        version_from_tag=version_from_tag,
        release_as=release_as,
        ignore_insignificant=ignore_insignificant,
        include_all_commits=changelog_all,
        commit_suffix=commit_suffix,
        tag_prefix=tag_prefix,
    )
    run_release(path, options, obj.console, obj.err_console)


@cli.command()
@path_option
@dry_run_option
@skip_dirty_option
@skip_commit_option
@click.option("--since", default=None, help="Version of the previous release tag.")
@click.option("--until", default=None, help="Version of the release tag to document.")
@click.option(
    "-f", "--changelog-file", type=click.Path(dir_okay=False), default=None, help="Changelog file."
)
@click.option("--no-links", is_flag=True, help="Do not link tags and commits.")
@changelog_all_option
@commit_suffix_option
@tag_prefix_option
@click.pass_obj
def changelog(
    obj: CliContext,
    path: str | None,
    dry_run: bool,
    skip_dirty: bool,
    skip_commit: bool,
    since: str | None,
    until: str | None,
    changelog_file: str | None,
    no_links: bool,
    changelog_all: bool,
    commit_suffix: str | None,
    tag_prefix: str | None,
) -> None:
    """Write the changelog entry of an already tagged release."""
    from semrel.cli.commands.changelog import ChangelogOptions, run_changelog

    options = ChangelogOptions(
        dry_run=dry_run,
        skip_dirty=skip_dirty,
        skip_commit=skip_commit,
        since=since,
        until=until,
        changelog_file=changelog_file,
        links=not no_links,
        include_all_commits=changelog_all,
        commit_suffix=commit_suffix,
        tag_prefix=tag_prefix,
    )
    run_changelog(path, options, obj.console, obj.err_console)


@cli.command("set-version")
@path_option
@click.argument("version")
@click.pass_obj
def set_version(obj: CliContext, path: str | None, version: str) -> None:
    """Write VERSION into the project files."""
    from semrel.cli.commands.set_version import run_set_version

    run_set_version(path, version, obj.console, obj.err_console)


def main() -> None:
    cli(prog_name="semrel")
