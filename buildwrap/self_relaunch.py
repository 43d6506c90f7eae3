"""
Self-update and relaunch.

When the update gate says a check is due, the updater runs as a child
process, the check time is recorded, and the original command line is
run again under the (possibly) updated code. The exit status of that
second child becomes the exit status of this process:

1. updater child (stdout redirected to our stderr)
2. persist the timestamp captured before step 1
3. relaunch child with fully inherited stdio
4. exit with the relaunch child's status
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

from buildwrap import executor, update_gate
from buildwrap.executor import DispatchRequest, DispatchResult, StdioMode
from buildwrap.shared.errors import UpdateError
from buildwrap.shared.settings import Settings

TOOL_ROOT = Path(__file__).resolve().parents[1]
RELAUNCH_ENV = "BUILDWRAP_RELAUNCHED"
UPDATER_MODULE = "buildwrap.auto_update"
PACKAGE_MODULE = "buildwrap"
NATIVE_LAUNCHER_SUFFIXES = {".exe"}

# Verbs that never trigger the gate
UNGATED_VERBS = {"auto-update", "-h", "--help", "help"}

Adapter = Callable[[DispatchRequest], DispatchResult]


@dataclass(frozen=True)
class InvocationContext:
    """How this process was started. Captured once, never modified."""

    command_line: tuple[str, ...]
    cwd: Path
    environ: Mapping[str, str] = field(default_factory=dict)
    python: str = sys.executable

    @classmethod
    def capture(cls) -> InvocationContext:
        return cls(
            command_line=tuple(sys.argv),
            cwd=Path.cwd(),
            environ=dict(os.environ),
            python=sys.executable,
        )

    @property
    def relaunched(self) -> bool:
        return self.environ.get(RELAUNCH_ENV) == "1"


def updater_request(context: InvocationContext) -> DispatchRequest:
    return DispatchRequest(
        executable=context.python,
        args=("-m", UPDATER_MODULE, "check", "--no-record"),
        cwd=TOOL_ROOT,
        stdio=StdioMode.PIPE_STDERR_ONLY,
    )


def relaunch_args(command_line: tuple[str, ...]) -> tuple[str, ...]:
    """Interpreter arguments that re-run the given command line.

    argv[0] is a Python script for bw.py, `python -m buildwrap` and POSIX
    console scripts. Native launchers (the Windows bw.exe shim) are not, so
    those relaunch through the package instead.
    """
    if command_line and Path(command_line[0]).suffix.lower() in NATIVE_LAUNCHER_SUFFIXES:
        return ("-m", PACKAGE_MODULE, *command_line[1:])
    return tuple(command_line)


def relaunch_request(context: InvocationContext) -> DispatchRequest:
    return DispatchRequest(
        executable=context.python,
        args=relaunch_args(context.command_line),
        cwd=context.cwd,
        env_overrides={RELAUNCH_ENV: "1"},
        stdio=StdioMode.INHERIT,
    )


def run_update_cycle(
    context: InvocationContext,
    settings: Settings,
    *,
    now: int | None = None,
    adapter: Adapter = executor.run,
) -> int:
    """Run the updater, record the check, relaunch, and return the exit code.

    Raises:
        UpdateError: If the updater process could not be started.
    """
    started = update_gate.now_ms() if now is None else now

    print("Checking for tool updates...", file=sys.stderr)
    update_result = adapter(updater_request(context))
    if update_result.error is not None:
        raise UpdateError(
            f"Could not run the updater ({update_result.error}). "
            f"Disable automatic updates with: touch {settings.disable_marker}"
        )

    if update_result.ok:
        update_gate.UpdateState(started).save(settings.state_file)
    else:
        print(
            f"Warning: update check failed with exit code {update_result.exit_code}; "
            "continuing with the current version.",
            file=sys.stderr,
        )
        if settings.advance_on_failure:
            update_gate.UpdateState(started).save(settings.state_file)

    request = relaunch_request(context)
    result = adapter(request)
    if result.error is not None:
        print(f"Error: {executor.describe_error(request, result)}", file=sys.stderr)
    return result.exit_code


def maybe_self_update(
    context: InvocationContext,
    settings: Settings,
    verb: str | None,
    *,
    now: int | None = None,
    adapter: Adapter = executor.run,
) -> int | None:
    """Run an update cycle if one is due.

    Returns:
        None when no cycle ran and the command should proceed in this
        process, otherwise the exit code of the relaunched command.
    """
    if verb is None or verb in UNGATED_VERBS or context.relaunched:
        return None

    current = update_gate.now_ms() if now is None else now
    due = update_gate.check_due(
        settings.state_file,
        settings.disable_marker,
        settings.update_interval_hours,
        current,
    )
    if not due:
        return None
    return run_update_cycle(context, settings, now=current, adapter=adapter)
