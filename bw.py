#!/usr/bin/env python3
"""
Convenience wrapper for buildwrap.

Forwards to the buildwrap module. Run with --help to see available commands.

Usage:
    python bw.py <command> [args...]
    ./bw.py <command> [args...]  (on Unix with execute permission)

Commands:
    start       Run the built application (alias: run)
    node        Run the built application as Node.js
    npm         Run npm against the current build's headers
    depot-tools Run a depot tools command (alias: d)
    use         Select the active build configuration
    show        Show values derived from the active configuration
    auto-update Enable, disable or run self-update checks

Examples:
    python bw.py use testing
    python bw.py start
    python bw.py d gn.py args out/Testing
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from buildwrap.__main__ import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
