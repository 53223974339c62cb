"""Time sources for presence tracking.

TTL comparisons always use a monotonic clock; wall-clock time is only used for
response timestamps and session-id stamps.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction."""

    def now(self) -> float:
        """Return monotonic seconds."""


class MonotonicClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Clock that only moves when told to (tests, simulations)."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._lock = threading.Lock()

    def now(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("monotonic clock cannot go backwards")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, value: float) -> float:
        with self._lock:
            if value < self._now:
                raise ValueError("monotonic clock cannot go backwards")
            self._now = float(value)
            return self._now


def epoch_millis() -> int:
    """Wall-clock milliseconds since the Unix epoch."""
    return int(time.time() * 1000)


__all__ = ["Clock", "MonotonicClock", "ManualClock", "epoch_millis"]
