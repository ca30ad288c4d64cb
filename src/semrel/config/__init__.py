"""Configuration management for semrel."""

from __future__ import annotations

from semrel.config.loader import load_config
from semrel.config.models import (
    ChangelogConfig,
    CommitsConfig,
    GitConfig,
    SemrelConfig,
    VersionConfig,
)

__all__ = [
    "ChangelogConfig",
    "CommitsConfig",
    "GitConfig",
    "SemrelConfig",
    "VersionConfig",
    "load_config",
]
