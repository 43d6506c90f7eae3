"""Custom exceptions for buildwrap."""

from __future__ import annotations

EXIT_FAILURE = 1
EXIT_USAGE = 2


class BuildwrapError(Exception):
    """Base exception for errors detected before a child process is spawned."""

    exit_code = EXIT_FAILURE

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(message)


class ConfigError(BuildwrapError):
    """Raised when settings or a build configuration are invalid."""

    exit_code = EXIT_USAGE

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        full_message = message if not config_path else f"[{config_path}] {message}"
        super().__init__(full_message)


class NoActiveConfigError(ConfigError):
    """Raised when no build configuration has been selected."""

    def __init__(self, hint: str = "Run `bw use <name>` to select one.") -> None:
        super().__init__(f"No active build configuration. {hint}")


class UsageError(BuildwrapError):
    """Raised when a command is invoked with missing or bad arguments."""

    exit_code = EXIT_USAGE

    def __init__(self, message: str, verb: str | None = None) -> None:
        self.verb = verb
        if verb:
            message = f"{verb}: {message}"
        super().__init__(message)


class DepotToolsError(BuildwrapError):
    """Raised when the depot tools checkout cannot be installed."""


class UpdateError(BuildwrapError):
    """Raised when the self-updater cannot be started at all."""
