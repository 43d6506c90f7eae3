"""
Update gate: decides whether a self-update check is due.

The decision itself is a pure function of its inputs. Reading and writing
the persisted timestamp is left to the caller so the throttle logic can be
exercised without touching the filesystem.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path

MS_PER_HOUR = 3_600_000


@dataclass(frozen=True)
class UpdateState:
    """Epoch milliseconds of the last update check."""

    last_check_ms: int = 0

    @classmethod
    def load(cls, path: Path) -> UpdateState:
        """Read the state file. Anything unusable counts as never checked."""
        try:
            raw = path.read_text(encoding="utf-8").strip()
        except OSError:
            return cls()
        try:
            value = int(raw)
        except ValueError:
            return cls()
        return cls(max(value, 0))

    def save(self, path: Path) -> None:
        """Overwrite the state file with this timestamp."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(str(self.last_check_ms), encoding="utf-8")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def is_disabled(marker: Path) -> bool:
    """Presence of the marker file suppresses update checks."""
    return marker.exists()


def should_check(
    now: int,
    last_check_ms: int,
    interval_hours: float,
    disabled: bool,
) -> bool:
    """Return True if an update check is due.

    A clock that moved backwards simply postpones the next check.
    """
    if disabled:
        return False
    return now >= last_check_ms + interval_hours * MS_PER_HOUR


def check_due(state_file: Path, marker: Path, interval_hours: float, now: int) -> bool:
    """Apply :func:`should_check` to the persisted state."""
    if is_disabled(marker):
        return False
    state = UpdateState.load(state_file)
    return should_check(now, state.last_check_ms, interval_hours, False)
