"""Clock sources — the external tick counter and wall clock.

The engine never reads time itself. Arena actions ask a Clock for the
current tick (a monotonically non-decreasing slot counter that drives the
turn timeout) and the unix timestamp (seed material for the roster
shuffle, plus the informational creation time).

Provides ABC and concrete implementations:
- SystemClock: ticks derived from time.monotonic() in fixed-length slots
- ManualClock: deterministic, advanced by hand, for tests and replays
"""

import time
from abc import ABC, abstractmethod

# Default slot length, matching a ~400ms block cadence
DEFAULT_SLOT_MS = 400


class Clock(ABC):
    """Abstract base for tick sources."""

    @abstractmethod
    def current_tick(self) -> int:
        """Return the current slot number. Never decreases."""

    @abstractmethod
    def unix_timestamp(self) -> int:
        """Return wall-clock seconds since the epoch."""


class SystemClock(Clock):
    """Slot counter backed by the process monotonic clock."""

    def __init__(self, slot_ms: int = DEFAULT_SLOT_MS, start_tick: int = 0):
        if slot_ms <= 0:
            raise ValueError(f"slot_ms must be positive, got {slot_ms}")
        self._slot_ms = slot_ms
        self._start_tick = start_tick
        self._origin = time.monotonic()

    def current_tick(self) -> int:
        elapsed_ms = (time.monotonic() - self._origin) * 1000
        return self._start_tick + int(elapsed_ms // self._slot_ms)

    def unix_timestamp(self) -> int:
        return int(time.time())


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, tick: int = 0, timestamp: int = 0):
        self._tick = tick
        self._timestamp = timestamp

    def current_tick(self) -> int:
        return self._tick

    def unix_timestamp(self) -> int:
        return self._timestamp

    def advance(self, ticks: int = 1, seconds: int = 0) -> None:
        if ticks < 0 or seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._tick += ticks
        self._timestamp += seconds

    def set_timestamp(self, timestamp: int) -> None:
        self._timestamp = timestamp
