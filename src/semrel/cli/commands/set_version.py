"""Implementation of the 'set-version' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from semrel.cli.commands._common import fail, load_project_config, resolve_project_path
from semrel.core.version import parse_version
from semrel.exceptions import SemrelError
from semrel.project.pyproject import write_project_version

if TYPE_CHECKING:
    from rich.console import Console

    from semrel.core.version import Version


def run_set_version(path: str | None, version: str, console: Console, err_console: Console) -> Version:
    """Write an explicit version into pyproject.toml and the configured version files."""
    try:
        new_version = parse_version(version)
    except SemrelError as e:
        raise fail(err_console, "Invalid version", e) from e

    project_path = resolve_project_path(path, err_console)
    config = load_project_config(project_path, err_console)

    try:
        updated = write_project_version(project_path, str(new_version), config.version.version_files)
    except SemrelError as e:
        raise fail(err_console, "Error updating project version", e) from e

    for file_path in updated:
        console.print(f"  [green]✓[/] set version {new_version} in {file_path.name}")
    return new_version
