"""
Companion depot tools checkout.

The checkout is cloned on first use and refreshed behind its own update
gate afterwards. Git output is sent to stderr so it never mixes with the
output of the tool being dispatched.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping

from buildwrap import executor, update_gate
from buildwrap.executor import DispatchRequest, StdioMode
from buildwrap.shared.errors import DepotToolsError
from buildwrap.shared.settings import Settings

STATE_FILE = ".buildwrap-last-update"
ACCEPT_TOS_ENV = "DEPOT_TOOLS_ACCEPT_TOS"

# Scripts that must run through the interpreter shipped with depot tools
PYTHON_SCRIPTS = frozenset({"gclient.py", "gn.py", "ninja.py", "fetch.py", "roll-dep.py"})


def interpreter(depot_dir: Path) -> Path:
    name = "vpython3.bat" if sys.platform == "win32" else "vpython3"
    return depot_dir / name


def depot_env(depot_dir: Path, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment overrides for any command run from depot tools."""
    base = os.environ if environ is None else environ
    path = base.get("PATH", "")
    overrides = {
        "PATH": f"{depot_dir}{os.pathsep}{path}" if path else str(depot_dir),
        ACCEPT_TOS_ENV: "1",
    }
    if sys.platform == "win32":
        overrides["DEPOT_TOOLS_WIN_TOOLCHAIN"] = "0"
    return overrides


def _git(args: list[str], cwd: Path | None = None) -> None:
    result = executor.run(
        DispatchRequest(
            executable="git",
            args=tuple(args),
            cwd=cwd,
            stdio=StdioMode.PIPE_STDERR_ONLY,
        )
    )
    if result.error is not None:
        raise DepotToolsError(f"git is required to manage depot tools: {result.error}")
    if result.exit_code != 0:
        raise DepotToolsError(f"git {' '.join(args)} failed with exit code {result.exit_code}")


def install(settings: Settings) -> Path:
    """Clone depot tools into the configured directory."""
    depot_dir = settings.depot_tools_dir
    print(f"Installing depot tools into {depot_dir}...", file=sys.stderr)
    depot_dir.parent.mkdir(parents=True, exist_ok=True)
    _git(["clone", "--quiet", settings.depot_tools_url, str(depot_dir)])
    update_gate.UpdateState(update_gate.now_ms()).save(depot_dir / STATE_FILE)
    return depot_dir


def refresh(settings: Settings, now: int) -> None:
    """Fast-forward the checkout. A failure here is reported, not fatal."""
    depot_dir = settings.depot_tools_dir
    try:
        _git(["pull", "--ff-only", "--quiet"], cwd=depot_dir)
    except DepotToolsError as e:
        print(f"Warning: could not update depot tools: {e}", file=sys.stderr)
    update_gate.UpdateState(now).save(depot_dir / STATE_FILE)


def ensure(settings: Settings, *, now: int | None = None) -> Path:
    """Make sure depot tools are installed and reasonably fresh.

    Returns:
        The depot tools directory.

    Raises:
        DepotToolsError: If the checkout is missing and cannot be cloned.
    """
    depot_dir = settings.depot_tools_dir
    if not (depot_dir / ".git").exists():
        return install(settings)

    current = update_gate.now_ms() if now is None else now
    state = update_gate.UpdateState.load(depot_dir / STATE_FILE)
    if update_gate.should_check(
        current,
        state.last_check_ms,
        settings.depot_tools_update_hours,
        update_gate.is_disabled(settings.disable_marker),
    ):
        refresh(settings, current)
    return depot_dir
