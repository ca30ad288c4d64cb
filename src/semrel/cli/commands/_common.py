"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from semrel.cli.app import EXIT_FAILURE, EXIT_NO_DIRECTORY, EXIT_NO_REPOSITORY
from semrel.config import SemrelConfig, load_config
from semrel.exceptions import DirtyRepositoryError, NotARepositoryError, SemrelError
from semrel.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def resolve_project_path(path: str | None, err_console: Console) -> Path:
    project_path = Path(path) if path else Path.cwd()
    if not project_path.is_dir():
        err_console.print(f"[red]Error:[/] Directory {project_path} does not exist")
        raise SystemExit(EXIT_NO_DIRECTORY)
    return project_path.resolve()


def open_repository(project_path: Path, err_console: Console) -> GitRepository:
    try:
        return GitRepository.discover(project_path)
    except NotARepositoryError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(EXIT_NO_REPOSITORY) from e


def load_project_config(project_path: Path, err_console: Console) -> SemrelConfig:
    try:
        return load_config(project_path)
    except SemrelError as e:
        err_console.print(f"[red]Error opening repository:[/] {e}")
        raise SystemExit(EXIT_FAILURE) from e


def ensure_clean(repo: GitRepository, allow_dirty: bool, err_console: Console) -> None:
    if allow_dirty:
        return
    try:
        repo.ensure_clean()
    except DirtyRepositoryError as e:
        err_console.print(
            f"[red]Error:[/] {e}\n"
            "Use [cyan]--skip-dirty[/] or [cyan]allow_dirty = true[/] to release anyway."
        )
        raise SystemExit(EXIT_FAILURE) from e
    except SemrelError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(EXIT_FAILURE) from e


def fail(err_console: Console, label: str, error: Exception) -> SystemExit:
    """Print an error and build the SystemExit to raise."""
    err_console.print(f"[red]{label}:[/] {error}")
    return SystemExit(EXIT_FAILURE)
