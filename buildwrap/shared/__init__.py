"""Shared utilities for buildwrap."""

from .errors import (
    EXIT_FAILURE,
    EXIT_USAGE,
    BuildwrapError,
    ConfigError,
    DepotToolsError,
    NoActiveConfigError,
    UpdateError,
    UsageError,
)
from .settings import Settings

__all__ = [
    # Errors
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "BuildwrapError",
    "ConfigError",
    "DepotToolsError",
    "NoActiveConfigError",
    "UpdateError",
    "UsageError",
    # Configuration
    "Settings",
]
