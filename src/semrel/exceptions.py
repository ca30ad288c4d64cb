"""Exception hierarchy for semrel.

Every error raised by semrel derives from :class:`SemrelError`, so the
CLI can report any failure with a single ``except`` clause.
"""

from __future__ import annotations


class SemrelError(Exception):
    """Base class for all semrel errors."""


# Configuration


class ConfigError(SemrelError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml was found."""


class ConfigValidationError(ConfigError):
    """Configuration values are invalid."""


# Versions


class VersionError(SemrelError):
    """Version handling failed."""


class InvalidVersionError(VersionError):
    """A version string is not a valid semantic version."""


class NoSignificantChangesError(VersionError):
    """No significant commits and no instruction on how to bump."""


# Changelog


class ChangelogError(SemrelError):
    """Changelog could not be generated or written."""


# Git


class GitError(SemrelError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        message = super().__str__()
        if self.stderr:
            return f"{message}: {self.stderr.strip()}"
        return message


class NotARepositoryError(GitError):
    """Directory is not inside a git working copy."""


class DirtyRepositoryError(GitError):
    """Working copy has uncommitted changes."""


# Project files


class ProjectError(SemrelError):
    """Project manifest could not be read or written."""


class VersionNotFoundError(ProjectError):
    """No version declaration found in a project file."""
