"""Project version manifests."""

from __future__ import annotations

from semrel.project.pyproject import (
    get_pyproject_version,
    get_version_from_file,
    update_pyproject_version,
    update_version_file,
    write_project_version,
)

__all__ = [
    "get_pyproject_version",
    "get_version_from_file",
    "update_pyproject_version",
    "update_version_file",
    "write_project_version",
]
