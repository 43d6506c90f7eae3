"""YAML loading for settings and build configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError


def load_mapping(path: Path) -> dict[str, Any]:
    """Load a YAML file whose root must be a mapping.

    An empty file is read as an empty mapping.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed dictionary.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read file: {e}", str(path)) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Root must be a mapping", str(path))

    return data

