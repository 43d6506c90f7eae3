#!/usr/bin/env python3
"""
Self-updater for buildwrap.

Subcommands:
    enable      Re-enable automatic update checks
    disable     Turn automatic update checks off
    check       Update now: git pull the tool checkout and, when it moved,
                reinstall it so new dependencies are picked up

When run by the update gate, stdout of this script is redirected to the
caller's stderr.
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from buildwrap import update_gate  # noqa: E402
from buildwrap.shared.errors import BuildwrapError  # noqa: E402
from buildwrap.shared.settings import Settings  # noqa: E402


class UpdateFailed(Exception):
    """Raised when a step of the update fails."""

    pass


def run_command(
    command: list[str],
    cwd: Path = ROOT,
    *,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    """Run a command, raising UpdateFailed on failure."""
    print(f"$ {' '.join(str(c) for c in command)}")
    try:
        return subprocess.run(
            command,
            cwd=cwd,
            check=True,
            capture_output=capture,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        if capture and e.stderr:
            print(e.stderr, file=sys.stderr)
        raise UpdateFailed(f"Command failed: {' '.join(str(c) for c in command)}") from e
    except FileNotFoundError as e:
        raise UpdateFailed(f"Command not found: {e.filename}") from e


def git_head(root: Path = ROOT) -> str:
    return run_command(["git", "rev-parse", "HEAD"], root, capture=True).stdout.strip()


def update_checkout(root: Path = ROOT) -> bool:
    """Pull the tool checkout. Returns True if HEAD moved."""
    if not (root / ".git").exists():
        print(f"{root} is not a git checkout, skipping update.")
        return False

    before = git_head(root)
    run_command(["git", "pull", "--ff-only", "--quiet"], root)
    after = git_head(root)

    if before == after:
        print("buildwrap is up to date.")
        return False

    print(f"Updated buildwrap {before[:9]}..{after[:9]}")
    return True


def reinstall(root: Path = ROOT) -> None:
    """Reinstall the package so updated dependencies are installed."""
    run_command([sys.executable, "-m", "pip", "install", "--quiet", "-e", str(root)], root)


def cmd_enable(settings: Settings) -> int:
    marker = settings.disable_marker
    if marker.exists():
        marker.unlink()
    print("Automatic updates enabled.")
    return 0


def cmd_disable(settings: Settings) -> int:
    marker = settings.disable_marker
    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.touch()
    print("Automatic updates disabled.")
    return 0


def cmd_check(settings: Settings, *, record: bool = True) -> int:
    started = update_gate.now_ms()
    try:
        if update_checkout():
            reinstall()
    except UpdateFailed as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return 1
    finally:
        if record:
            update_gate.UpdateState(started).save(settings.state_file)
    print("[OK] Update check complete.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bw auto-update",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "action",
        nargs="?",
        choices=["enable", "disable", "check"],
        default="check",
        help="What to do (default: check)",
    )
    parser.add_argument(
        "--no-record",
        action="store_true",
        help="Do not record the check time (the caller records it)",
    )
    args = parser.parse_args(argv)

    try:
        settings = Settings.load()
    except BuildwrapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code

    if args.action == "enable":
        return cmd_enable(settings)
    if args.action == "disable":
        return cmd_disable(settings)
    return cmd_check(settings, record=not args.no_record)


if __name__ == "__main__":
    sys.exit(main())
