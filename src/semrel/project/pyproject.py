"""Version manifests: pyproject.toml and __version__ files.

Versions are read and replaced with targeted regular expressions so
that formatting and comments of the files are preserved.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from semrel.config.loader import find_pyproject_toml
from semrel.exceptions import ProjectError, VersionNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# Sections that may declare the project version, in lookup order
VERSION_SECTIONS = ("project", "tool.poetry")

_VERSION_LINE = r'^(?P<prefix>version\s*=\s*)["\'](?P<version>[^"\']+)["\']'

DEFAULT_VERSION_FILE_PATTERNS = (
    r'^(?P<prefix>__version__\s*=\s*)["\'](?P<version>[^"\']+)["\']',
    r'^(?P<prefix>VERSION\s*=\s*)["\'](?P<version>[^"\']+)["\']',
)


def _section_pattern(section: str) -> re.Pattern[str]:
    # The whole table up to the next header or EOF
    return re.compile(rf"^\[{re.escape(section)}\][^\n]*\n.*?(?=^\[|\Z)", re.MULTILINE | re.DOTALL)


def _resolve(path: Path | None) -> Path:
    if path is None:
        return find_pyproject_toml()
    if path.is_dir():
        return find_pyproject_toml(path)
    return path


def get_pyproject_version(path: Path | None = None) -> str:
    """Get the version declared in pyproject.toml.

    Args:
        path: pyproject.toml or a directory to search from

    Raises:
        VersionNotFoundError: If neither [project] nor [tool.poetry] declares one
    """
    pyproject_path = _resolve(path)
    content = pyproject_path.read_text(encoding="utf-8")

    for section in VERSION_SECTIONS:
        table = _section_pattern(section).search(content)
        if not table:
            continue
        match = re.search(_VERSION_LINE, table.group(0), re.MULTILINE)
        if match:
            return match.group("version")

    raise VersionNotFoundError(
        f"Could not find version in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )


def update_pyproject_version(path: Path | None, new_version: str) -> Path:
    """Set the version in pyproject.toml.

    Returns:
        Path of the updated file

    Raises:
        VersionNotFoundError: If no version declaration exists
        ProjectError: If the file already holds new_version
    """
    pyproject_path = _resolve(path)
    content = pyproject_path.read_text(encoding="utf-8")

    def replace(table: re.Match[str]) -> str:
        return re.sub(
            _VERSION_LINE,
            lambda m: f'{m.group("prefix")}"{new_version}"',
            table.group(0),
            count=1,
            flags=re.MULTILINE,
        )

    for section in VERSION_SECTIONS:
        pattern = _section_pattern(section)
        table = pattern.search(content)
        if not table or not re.search(_VERSION_LINE, table.group(0), re.MULTILINE):
            continue

        new_content = pattern.sub(replace, content, count=1)
        if new_content == content:
            raise ProjectError(
                f"Version in {pyproject_path} was not updated. It may already be {new_version}."
            )

        pyproject_path.write_text(new_content, encoding="utf-8")
        logger.debug("Set [%s].version to %s in %s", section, new_version, pyproject_path)
        return pyproject_path

    raise VersionNotFoundError(
        f"Could not find version to update in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )


def get_version_from_file(file_path: Path, pattern: str | None = None) -> str:
    """Read a version from a Python file such as __init__.py.

    Args:
        file_path: File to read
        pattern: Regex with a "version" group; defaults to __version__ / VERSION

    Raises:
        ProjectError: If the file does not exist
        VersionNotFoundError: If no pattern matches
    """
    if not file_path.is_file():
        raise ProjectError(f"Version file not found: {file_path}")

    content = file_path.read_text(encoding="utf-8")
    for pat in (pattern,) if pattern else DEFAULT_VERSION_FILE_PATTERNS:
        match = re.search(pat, content, re.MULTILINE)
        if match:
            return match.group("version")

    raise VersionNotFoundError(f"Could not find version pattern in {file_path}")


def update_version_file(file_path: Path, new_version: str, pattern: str | None = None) -> None:
    """Replace the version in a Python file.

    Args:
        file_path: File to update
        new_version: Version to write
        pattern: Regex with "prefix" and "version" groups; defaults to __version__ / VERSION

    Raises:
        ProjectError: If the file does not exist
        VersionNotFoundError: If no pattern matches
    """
    if not file_path.is_file():
        raise ProjectError(f"Version file not found: {file_path}")

    content = file_path.read_text(encoding="utf-8")
    for pat in (pattern,) if pattern else DEFAULT_VERSION_FILE_PATTERNS:
        new_content, count = re.subn(
            pat,
            lambda m: f'{m.group("prefix")}"{new_version}"',
            content,
            count=1,
            flags=re.MULTILINE,
        )
        if count:
            file_path.write_text(new_content, encoding="utf-8")
            return

    raise VersionNotFoundError(f"Could not find version pattern in {file_path}")


def write_project_version(project_path: Path, new_version: str, version_files: list[Path]) -> list[Path]:
    """Write a version into pyproject.toml and the extra version files.

    Returns:
        Paths of all updated files
    """
    updated = [update_pyproject_version(project_path, new_version)]
    for version_file in version_files:
        file_path = project_path / version_file
        update_version_file(file_path, new_version)
        updated.append(file_path)
    return updated
