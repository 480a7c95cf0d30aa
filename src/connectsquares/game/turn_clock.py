"""TurnClock — whose turn is live right now.

A player who lets ``timeout`` ticks pass without moving forfeits their
turn, not the match: the turn passes on lazily, computed at call time from
the tick of the last accepted move. No scheduler is involved, so this must
be re-evaluated on every play rather than cached.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["TURN_TIMEOUT", "TurnClock"]

TURN_TIMEOUT = 240


@dataclass(frozen=True)
class TurnClock:
    timeout: int = TURN_TIMEOUT

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"turn timeout must be positive, got {self.timeout}")

    def turns_skipped(self, last_move_slot: int, current_tick: int) -> int:
        # A clock reporting an earlier tick counts as no time elapsed
        elapsed = max(0, current_tick - last_move_slot)
        return elapsed // self.timeout

    def resolve(
        self,
        last_move_slot: int,
        turn_cursor: int,
        joined_count: int,
        current_tick: int,
    ) -> int:
        """Return the roster index whose turn is live at ``current_tick``."""
        skipped = self.turns_skipped(last_move_slot, current_tick)
        if skipped >= joined_count:
            # Full cycles around the table are a no-op
            skipped %= joined_count
        return (turn_cursor + skipped) % joined_count

    def ticks_remaining(self, last_move_slot: int, current_tick: int) -> int:
        """Ticks left before the live turn passes to the next player."""
        elapsed = max(0, current_tick - last_move_slot)
        return self.timeout - (elapsed % self.timeout)
