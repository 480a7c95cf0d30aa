"""PotAccounting — how a match pot is divided when a match ends.

Pure functions over balances: they return Transfer instructions and never
touch a ledger. The arena executes the plan through ``Ledger.move_funds``
inside one ledger transaction, so a failure part-way leaves no holder
changed.
"""

from __future__ import annotations

from dataclasses import dataclass

from connectsquares.core.errors import ErrorKind, MatchError
from connectsquares.core.ledger import U64_MAX

__all__ = ["Transfer", "payout", "refund", "tie_refund"]


@dataclass(frozen=True)
class Transfer:
    """Move ``amount`` from the match pot to ``destination``."""

    destination: str
    amount: int
    reason: str


def payout(
    pot_balance: int,
    wager: int,
    joined_count: int,
    winner: str,
    treasury: str,
) -> list[Transfer]:
    """Winner takes ``wager * joined_count``; the remainder is swept to the treasury.

    Raises PAYOUT_DEBIT_NUMERICAL_OVERFLOW if the pot cannot cover the
    winnings and PAYOUT_CREDIT_NUMERICAL_OVERFLOW if the winnings exceed
    the u64 range.
    """
    winnings = wager * joined_count
    if winnings > U64_MAX:
        raise MatchError(
            ErrorKind.PAYOUT_CREDIT_NUMERICAL_OVERFLOW,
            f"winnings {winnings} exceed u64",
        )
    remainder = pot_balance - winnings
    if remainder < 0:
        raise MatchError(
            ErrorKind.PAYOUT_DEBIT_NUMERICAL_OVERFLOW,
            f"pot holds {pot_balance}, winnings are {winnings}",
        )
    return [
        Transfer(destination=winner, amount=winnings, reason="winnings"),
        Transfer(destination=treasury, amount=remainder, reason="sweep"),
    ]


def refund(pot_balance: int, creator: str) -> list[Transfer]:
    """Cancellation closes the pot back to the creator."""
    return [Transfer(destination=creator, amount=pot_balance, reason="refund")]


def tie_refund(
    pot_balance: int,
    wager: int,
    players: list[str],
    treasury: str,
) -> list[Transfer]:
    """Each player gets their wager back; anything left goes to the treasury.

    Only used by the no-deathmatch rule set, where a full board ends the
    match in a tie.
    """
    total = wager * len(players)
    remainder = pot_balance - total
    if remainder < 0:
        raise MatchError(
            ErrorKind.PAYOUT_DEBIT_NUMERICAL_OVERFLOW,
            f"pot holds {pot_balance}, refunds total {total}",
        )
    plan = [Transfer(destination=p, amount=wager, reason="refund") for p in players]
    plan.append(Transfer(destination=treasury, amount=remainder, reason="sweep"))
    return plan
