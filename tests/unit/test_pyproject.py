"""Tests for reading and writing project versions."""

from __future__ import annotations

from pathlib import Path

import pytest

from semrel.exceptions import ProjectError, VersionNotFoundError
from semrel.project.pyproject import (
    get_pyproject_version,
    get_version_from_file,
    update_pyproject_version,
    update_version_file,
    write_project_version,
)

PEP621 = """\
# project metadata
[project]
name = "demo"
version = "1.2.3"  # bumped by semrel
dependencies = []

[tool.other]
version = "9.9.9"
"""

POETRY = """\
[tool.poetry]
name = "demo"
version = '0.4.0'
"""


class TestGetPyprojectVersion:
    """Tests for get_pyproject_version()."""

    def test_pep621(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(PEP621)
        assert get_pyproject_version(tmp_path) == "1.2.3"

    def test_poetry(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(POETRY)
        assert get_pyproject_version(tmp_path / "pyproject.toml") == "0.4.0"

    def test_version_outside_project_table_ignored(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n\n[tool.other]\nversion = "9.9.9"\n')

        with pytest.raises(VersionNotFoundError):
            get_pyproject_version(tmp_path)


class TestUpdatePyprojectVersion:
    """Tests for update_pyproject_version()."""

    def test_pep621_preserves_formatting(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text(PEP621)

        update_pyproject_version(tmp_path, "2.0.0")

        assert path.read_text() == PEP621.replace('version = "1.2.3"', 'version = "2.0.0"')

    def test_poetry(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text(POETRY)

        update_pyproject_version(path, "0.5.0")

        assert 'version = "0.5.0"' in path.read_text()
        assert get_pyproject_version(path) == "0.5.0"

    def test_same_version_raises(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(PEP621)

        with pytest.raises(ProjectError, match="already be 1.2.3"):
            update_pyproject_version(tmp_path, "1.2.3")

    def test_missing_version_raises(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')

        with pytest.raises(VersionNotFoundError):
            update_pyproject_version(tmp_path, "1.0.0")


class TestVersionFiles:
    """Tests for __version__ files."""

    def test_read_and_update(self, tmp_path: Path):
        path = tmp_path / "__init__.py"
        path.write_text('"""Demo."""\n\n__version__ = "1.0.0"\n')

        assert get_version_from_file(path) == "1.0.0"
        update_version_file(path, "1.1.0")
        assert path.read_text() == '"""Demo."""\n\n__version__ = "1.1.0"\n'

    def test_uppercase_version_constant(self, tmp_path: Path):
        path = tmp_path / "version.py"
        path.write_text("VERSION = '3.0.0'\n")

        update_version_file(path, "3.1.0")
        assert get_version_from_file(path) == "3.1.0"

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ProjectError, match="not found"):
            update_version_file(tmp_path / "missing.py", "1.0.0")

    def test_no_declaration_raises(self, tmp_path: Path):
        path = tmp_path / "empty.py"
        path.write_text("x = 1\n")

        with pytest.raises(VersionNotFoundError):
            get_version_from_file(path)


class TestWriteProjectVersion:
    """Tests for write_project_version()."""

    def test_updates_all_files(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(PEP621)
        package = tmp_path / "demo"
        package.mkdir()
        (package / "__init__.py").write_text('__version__ = "1.2.3"\n')

        updated = write_project_version(tmp_path, "1.3.0", [Path("demo/__init__.py")])

        assert [p.name for p in updated] == ["pyproject.toml", "__init__.py"]
        assert get_pyproject_version(tmp_path) == "1.3.0"
        assert get_version_from_file(package / "__init__.py") == "1.3.0"
