"""Ledger — escrow holders with checked-arithmetic transfers.

Balances are unsigned 64-bit amounts keyed by holder id (players, match
pots, the treasury). ``move_funds`` is the only way value changes hands:
it debits one holder and credits another atomically, or raises and
changes nothing. Underflow and overflow are typed MatchErrors, never a
silent wraparound.

The ledger is shared across matches (the treasury receives every payout
remainder), so every mutation happens under one lock. Credits are plain
checked additions and therefore order-independent.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from connectsquares.core.errors import ErrorKind, MatchError

logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class Movement:
    """One completed debit/credit pair."""

    source: str
    destination: str
    amount: int


class Ledger:
    """In-memory balance book for escrow holders."""

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()
        for holder, amount in (balances or {}).items():
            self.deposit(holder, amount)

    def balance(self, holder: str) -> int:
        with self._lock:
            return self._balances.get(holder, 0)

    def balances(self) -> dict[str, int]:
        with self._lock:
            return dict(self._balances)

    def deposit(self, holder: str, amount: int) -> None:
        """Credit external funds to a holder (checked)."""
        _check_amount(amount)
        with self._lock:
            post = self._balances[holder] + amount
            if post > U64_MAX:
                raise MatchError(
                    ErrorKind.PAYOUT_CREDIT_NUMERICAL_OVERFLOW,
                    f"deposit of {amount} to {holder!r}",
                )
            self._balances[holder] = post

    def move_funds(self, source: str, destination: str, amount: int) -> Movement:
        """Debit ``source`` and credit ``destination`` by ``amount``.

        Both post-balances are computed before either is written, so a
        failure on either side leaves both holders untouched.
        """
        _check_amount(amount)
        with self._lock:
            post_source = self._balances.get(source, 0) - amount
            if post_source < 0:
                raise MatchError(
                    ErrorKind.PAYOUT_DEBIT_NUMERICAL_OVERFLOW,
                    f"{source!r} holds {self._balances.get(source, 0)}, "
                    f"cannot debit {amount}",
                )
            if source == destination:
                return Movement(source, destination, amount)
            post_destination = self._balances.get(destination, 0) + amount
            if post_destination > U64_MAX:
                raise MatchError(
                    ErrorKind.PAYOUT_CREDIT_NUMERICAL_OVERFLOW,
                    f"crediting {amount} to {destination!r}",
                )
            self._balances[source] = post_source
            self._balances[destination] = post_destination
        logger.debug("moved %d from %s to %s", amount, source, destination)
        return Movement(source, destination, amount)

    @contextmanager
    def transaction(self) -> Iterator[list[Movement]]:
        """Group transfers so they all apply or none do.

        Yields a journal list; callers append each Movement returned by
        ``move_funds``. If an exception escapes the block, the journalled
        movements are reversed newest-first and the exception re-raised.
        Reversal only touches the amounts moved here, so concurrent
        credits to shared holders survive a rollback.

        A reversal that cannot be applied (the destination already spent
        the funds) is logged and skipped; the remaining reversals still
        run, and the original exception is raised with the first such
        failure as its cause.
        """
        journal: list[Movement] = []
        try:
            yield journal
        except Exception as exc:
            undo_error: MatchError | None = None
            for movement in reversed(journal):
                try:
                    self.move_funds(movement.destination, movement.source, movement.amount)
                except MatchError as e:
                    logger.error("could not reverse %s: %s", movement, e)
                    undo_error = undo_error or e
            if journal:
                logger.warning("rolled back %d ledger movement(s)", len(journal))
            if undo_error is not None:
                raise exc from undo_error
            raise


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"amount must be an int, got {type(amount).__name__}")
    if amount < 0 or amount > U64_MAX:
        raise ValueError(f"amount out of u64 range: {amount}")
