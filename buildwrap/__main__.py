#!/usr/bin/env python3
"""
Unified CLI for buildwrap.

Usage:
    python -m buildwrap <command> [args...]

Commands:
    start       Run the built application (alias: run)
    node        Run the built application as Node.js
    npm         Run npm against the current build's headers
    depot-tools Run a depot tools command (alias: d)
    use         Select the active build configuration
    show        Show values derived from the active configuration
    auto-update Enable, disable or run self-update checks

Arguments after the command are passed through verbatim, including flags
the wrapped tool understands.

Examples:
    python -m buildwrap start --enable-logging
    python -m buildwrap node -e "console.log(process.version)"
    python -m buildwrap npm install
    python -m buildwrap d gclient.py sync
    python -m buildwrap use testing
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure buildwrap is importable when run as a script or relaunched
BUILDWRAP_DIR = Path(__file__).parent
if str(BUILDWRAP_DIR.parent) not in sys.path:
    sys.path.insert(0, str(BUILDWRAP_DIR.parent))

from buildwrap import config_resolver, self_relaunch  # noqa: E402
from buildwrap.router import VERB_TABLE, Router  # noqa: E402
from buildwrap.self_relaunch import InvocationContext  # noqa: E402
from buildwrap.shared.errors import BuildwrapError  # noqa: E402
from buildwrap.shared.settings import Settings  # noqa: E402

EXIT_INTERRUPTED = 130


def _dispatcher(verb: str):
    def handler(settings: Settings, args: list[str]) -> int:
        return Router(settings).dispatch(verb, args)

    return handler


def cmd_use(settings: Settings, args: list[str]) -> int:
    """Select the active build configuration."""
    parser = argparse.ArgumentParser(prog="bw use", description="Select a build configuration")
    parser.add_argument("name", help="Configuration name")
    parsed = parser.parse_args(args)

    config = config_resolver.use(settings, parsed.name)
    print(f"Now using config {config.name}", file=sys.stderr)
    return 0


def cmd_show(settings: Settings, args: list[str]) -> int:
    """Print a value derived from the active configuration."""
    parser = argparse.ArgumentParser(prog="bw show", description="Show config values")
    parser.add_argument(
        "what",
        choices=["current", "out", "exe", "root", "configs"],
        help="Which value to print",
    )
    parsed = parser.parse_args(args)

    if parsed.what == "configs":
        active = config_resolver.current_name(settings)
        for name in config_resolver.list_configs(settings):
            marker = "*" if name == active else " "
            print(f"{marker} {name}")
        return 0

    config = config_resolver.current(settings)
    values = {
        "current": config.name,
        "out": str(config.output_dir),
        "exe": str(config.executable),
        "root": str(config.root),
    }
    print(values[parsed.what])
    return 0


def cmd_auto_update(settings: Settings, args: list[str]) -> int:
    """Enable, disable or run update checks."""
    from buildwrap import auto_update
    try:
        return auto_update.main(args)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


COMMANDS = {
    **{
        name: (_dispatcher(verb.name), verb.help)
        for verb in VERB_TABLE
        for name in (verb.name, *verb.aliases)
    },
    "use": (cmd_use, "Select the active build configuration"),
    "show": (cmd_show, "Show values from the active configuration"),
    "auto-update": (cmd_auto_update, "Enable, disable or run update checks"),
}


def print_help() -> None:
    print(__doc__)
    print("Available commands:")
    for name, (_, desc) in COMMANDS.items():
        print(f"  {name:12} {desc}")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args or args[0] in ("-h", "--help", "help"):
        print_help()
        return 0

    command, rest = args[0], args[1:]
    if command not in COMMANDS:
        print(f"Unknown command: {command}", file=sys.stderr)
        print(f"Available commands: {', '.join(COMMANDS.keys())}", file=sys.stderr)
        return 2

    handler, _ = COMMANDS[command]
    try:
        settings = Settings.load()
        relaunched = self_relaunch.maybe_self_update(
            InvocationContext.capture(), settings, command
        )
        if relaunched is not None:
            return relaunched
        return handler(settings, rest)
    except BuildwrapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
