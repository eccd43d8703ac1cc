"""Millisecond clocks for scheduling active actions."""

from __future__ import annotations
from dataclasses import dataclass
import time


class SystemClock:
    """Wall-clock milliseconds."""

    def now(self) -> int:
        return int(time.time() * 1000)


@dataclass
class ManualClock:
    """A clock that only moves when told to. Used by tests and replays."""
    current: int = 0

    def now(self) -> int:
        return self.current

    def advance(self, ms: int) -> int:
        self.current += ms
        return self.current

    def set(self, ms: int) -> None:
        self.current = ms
