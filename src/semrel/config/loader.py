"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from semrel.config.models import SemrelConfig
from semrel.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

TOOL_KEY = "semrel"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the nearest pyproject.toml, walking up from ``start``.

    Args:
        start: Directory to start from (defaults to cwd)

    Returns:
        Path to pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists in start or its parents
    """
    current = (start or Path.cwd()).resolve()

    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate

    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"File not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_semrel_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the [tool.semrel] table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_KEY, {})


def load_config(path: Path | None = None) -> SemrelConfig:
    """Load semrel configuration for a project.

    Defaults are used when there is no pyproject.toml or no
    ``[tool.semrel]`` section.

    Args:
        path: Project directory or pyproject.toml path

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    try:
        if path is not None and path.is_file():
            pyproject_path = path
        else:
            pyproject_path = find_pyproject_toml(path)
    except ConfigNotFoundError:
        logger.debug("No pyproject.toml found, using default configuration")
        return SemrelConfig()

    data = extract_semrel_config(load_pyproject_toml(pyproject_path))
    logger.debug("Loaded configuration from %s", pyproject_path)

    try:
        return SemrelConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_KEY}] configuration:\n{e}") from e
