"""Configuration models for semrel.

All settings live under ``[tool.semrel]`` in pyproject.toml:

    [tool.semrel]
    tag_prefix = "v"

    [tool.semrel.changelog]
    include_all_commits = true

    [tool.semrel.version]
    ignore_insignificant = true
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from semrel.core.version import BumpType, Version


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CommitsConfig(_Section):
    """How commit messages are classified."""

    breaking_keywords: list[str] = Field(
        default_factory=lambda: ["BREAKING CHANGE", "BREAKING-CHANGE"],
        description="Footer keywords marking a breaking change (case-insensitive)",
    )

    @field_validator("breaking_keywords")
    @classmethod
    def _not_empty(cls, value: list[str]) -> list[str]:
        keywords = [keyword.strip() for keyword in value if keyword.strip()]
        if not keywords:
            raise ValueError("at least one breaking change keyword is required")
        return keywords


class ChangelogConfig(_Section):
    """Changelog generation settings."""

    enabled: bool = True
    path: Path = Path("CHANGELOG.md")
    include_all_commits: bool = Field(
        default=False,
        description="List commits that are not fixes, features or breaking changes",
    )
    links: bool = Field(default=True, description="Link tags and commits to the remote host")


class VersionConfig(_Section):
    """Version calculation settings."""

    ignore_insignificant: bool = Field(
        default=False,
        description="Keep the version when no fix, feat or breaking commit exists",
    )
    insignificant_bump: Literal["patch", "none"] = Field(
        default="patch",
        description="Bump for releases without significant commits; 'none' requires --release-as",
    )
    from_tag: bool = Field(default=False, description="Read the current version from the latest tag")
    initial_version: str = Field(
        default="0.1.0",
        description="First release version when reading versions from tags and none exists",
    )
    write_project_version: bool = True
    version_files: list[Path] = Field(
        default_factory=list,
        description="Extra files with a __version__ declaration to update",
    )

    @field_validator("initial_version")
    @classmethod
    def _valid_initial_version(cls, value: str) -> str:
        if Version.try_parse(value) is None:
            raise ValueError(f"{value!r} is not a semantic version")
        return value

    @property
    def fallback_bump(self) -> BumpType:
        return BumpType(self.insignificant_bump)


class GitConfig(_Section):
    """Release commit and tag settings."""

    commit: bool = True
    tag: bool = True
    commit_suffix: str = Field(default="", description="Appended to the release commit message")


class SemrelConfig(_Section):
    """Root configuration."""

    tag_prefix: str = "v"
    allow_dirty: bool = False
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    git: GitConfig = Field(default_factory=GitConfig)

    @property
    def changelog_path(self) -> Path:
        return self.changelog.path

    def tag_name(self, version: object) -> str:
        return f"{self.tag_prefix}{version}"
