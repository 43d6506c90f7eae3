"""
Subprocess execution adapter.

Runs one child process to completion with a composed environment and
reports how it ended. Spawn failures come back as a result value rather
than an exception so callers can print one uniform diagnostic.
"""

from __future__ import annotations

import enum
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
SIGNAL_EXIT_BASE = 128
STDERR_FD = 2


class StdioMode(enum.Enum):
    """How the child's standard streams are wired."""

    INHERIT = "inherit"
    # stdout goes to our stderr so it never mixes with data on our stdout
    PIPE_STDERR_ONLY = "pipe-stderr-only"


@dataclass(frozen=True)
class DispatchRequest:
    """A fully resolved child process invocation."""

    executable: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None
    env_overrides: Mapping[str, str] = field(default_factory=dict)
    stdio: StdioMode = StdioMode.INHERIT

    @property
    def command(self) -> list[str]:
        return [str(self.executable), *self.args]


@dataclass(frozen=True)
class DispatchResult:
    """Exit status of a child, or the error that kept it from starting."""

    exit_code: int
    error: OSError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.exit_code == 0


def compose_env(
    overrides: Mapping[str, str],
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge overrides onto the base environment without mutating either."""
    return {**(os.environ if base is None else base), **overrides}


def normalize_returncode(returncode: int) -> int:
    """Map a signal death (negative return code) to 128 + signal number."""
    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


def resolve_command(command: Sequence[str]) -> list[str]:
    """On Windows, resolve the executable path to handle .cmd/.bat files."""
    resolved_cmd = list(command)
    if sys.platform == "win32" and command:
        resolved = shutil.which(command[0])
        if resolved:
            resolved_cmd[0] = resolved
    return resolved_cmd


def run(request: DispatchRequest) -> DispatchResult:
    """Run the request synchronously and return how the child ended."""
    command = resolve_command(request.command)
    print(f"$ {' '.join(command)}", file=sys.stderr)

    stdout = STDERR_FD if request.stdio is StdioMode.PIPE_STDERR_ONLY else None
    try:
        result = subprocess.run(
            command,
            cwd=request.cwd,
            env=compose_env(request.env_overrides),
            stdout=stdout,
        )
    except FileNotFoundError as e:
        return DispatchResult(EXIT_NOT_FOUND, e)
    except OSError as e:
        return DispatchResult(EXIT_NOT_EXECUTABLE, e)

    return DispatchResult(normalize_returncode(result.returncode))


def describe_error(request: DispatchRequest, result: DispatchResult) -> str:
    """One-line diagnostic for a request that could not be started."""
    if isinstance(result.error, FileNotFoundError):
        return f"Command not found: {request.executable}"
    return f"Cannot execute {request.executable}: {result.error}"
