"""Semantic version parsing, ordering and bumping.

Versions follow Semantic Versioning 2.0.0:
``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]``.

Precedence compares major, minor and patch numerically, then the
pre-release identifiers. Build metadata never takes part in ordering or
equality.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from functools import total_ordering

from semrel.exceptions import InvalidVersionError, NoSignificantChangesError

_IDENTIFIER = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"

SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    rf"(?:-(?P<prerelease>{_IDENTIFIER}(?:\.{_IDENTIFIER})*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class BumpType(StrEnum):
    """How a version changes for a release."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Dot-separated pre-release identifiers (e.g. "rc.1")
        build: Dot-separated build metadata (e.g. "build.5")
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string.

        Args:
            value: Version string such as "1.2.3" or "2.0.0-rc.1+build.7"

        Returns:
            Parsed Version

        Raises:
            InvalidVersionError: If the string is not a semantic version
        """
        match = SEMVER_PATTERN.match(value.strip())
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {value!r}")

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
            build=match.group("build"),
        )

    @classmethod
    def try_parse(cls, value: str) -> Version | None:
        """Parse a version string, returning None when it is invalid."""
        try:
            return cls.parse(value)
        except InvalidVersionError:
            return None

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for a bump type.

        Every real bump drops pre-release and build metadata.
        BumpType.NONE returns the version unchanged.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def _precedence_key(self) -> tuple:
        if self.prerelease is None:
            # A release sorts after all of its pre-releases
            return (self.major, self.minor, self.patch, (1,))

        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part)
            for part in self.prerelease.split(".")
        )
        return (self.major, self.minor, self.patch, (0, identifiers))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version


def parse_version(value: str) -> Version:
    """Parse a version string, stripping a leading "v" if present.

    Raises:
        InvalidVersionError: If the string is not a semantic version
    """
    value = value.strip()
    if value[:1] in ("v", "V"):
        value = value[1:]
    return Version.parse(value)


def next_version(
    current: Version,
    bump_type: BumpType,
    ignore_insignificant: bool,
    *,
    fallback: BumpType | None = None,
) -> Version:
    """Compute the version that follows ``current``.

    Args:
        current: Version of the last release
        bump_type: Bump decided from the commits since that release
        ignore_insignificant: Keep the version when there is nothing to bump
        fallback: Bump to apply when bump_type is NONE and insignificant
            commits are not ignored

    Returns:
        The next version (``current`` itself for an ignored NONE bump)

    Raises:
        NoSignificantChangesError: If bump_type is NONE, insignificant
            commits are not ignored and no usable fallback is given
    """
    if bump_type != BumpType.NONE:
        return current.bump(bump_type)

    if ignore_insignificant:
        return current

    if fallback is None or fallback == BumpType.NONE:
        raise NoSignificantChangesError(
            f"No significant commits since {current}. "
            "Specify the release version explicitly."
        )

    return current.bump(fallback)
