"""Roster shuffle — runs once, when a match activates.

WARNING: this is a weak, deterministic permutation seeded from public
values (the unix timestamp and the tick at activation). Anyone who can
predict or influence those values can predict the seating order. It is
kept exactly as specified for compatibility with existing matches and
replays; do not swap in ``random`` or ``secrets`` here without a rules
version bump.
"""

from __future__ import annotations

from typing import TypeVar

__all__ = ["shuffle_roster"]

T = TypeVar("T")

_U64_MASK = 2**64 - 1


def shuffle_roster(roster: list[T], seed_a: int, seed_b: int) -> list[T]:
    """Return a permuted copy of ``roster``. Membership never changes."""
    # Seeds are read as unsigned 64-bit, so a negative timestamp wraps
    seed_a &= _U64_MASK
    seed_b &= _U64_MASK
    shuffled = list(roster)
    count = len(shuffled)
    for i in range(1, count):
        a = (seed_a // i) % count
        b = (seed_b // i) % count
        if a != b:
            shuffled[a], shuffled[b] = shuffled[b], shuffled[a]
    return shuffled
