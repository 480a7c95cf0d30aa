"""Tests for PotAccounting — payout plans."""

import pytest

from connectsquares.core.errors import ErrorKind, MatchError
from connectsquares.core.ledger import U64_MAX
from connectsquares.game.pot import Transfer, payout, refund, tie_refund


class TestPayout:
    def test_winner_takes_wager_times_players(self):
        plan = payout(20, wager=10, joined_count=2, winner="bob", treasury="treasury")
        assert plan == [
            Transfer("bob", 20, "winnings"),
            Transfer("treasury", 0, "sweep"),
        ]

    def test_excess_swept_to_treasury(self):
        plan = payout(27, wager=10, joined_count=2, winner="bob", treasury="house")
        assert plan[0].amount == 20
        assert plan[1] == Transfer("house", 7, "sweep")
        assert sum(t.amount for t in plan) == 27

    def test_short_pot_is_debit_overflow(self):
        with pytest.raises(MatchError) as exc:
            payout(15, wager=10, joined_count=2, winner="bob", treasury="treasury")
        assert exc.value.kind == ErrorKind.PAYOUT_DEBIT_NUMERICAL_OVERFLOW

    def test_winnings_beyond_u64_is_credit_overflow(self):
        with pytest.raises(MatchError) as exc:
            payout(U64_MAX, wager=U64_MAX, joined_count=2, winner="bob", treasury="t")
        assert exc.value.kind == ErrorKind.PAYOUT_CREDIT_NUMERICAL_OVERFLOW

    def test_zero_wager(self):
        plan = payout(0, wager=0, joined_count=2, winner="bob", treasury="t")
        assert [t.amount for t in plan] == [0, 0]


class TestRefunds:
    def test_cancel_refund_returns_everything(self):
        assert refund(13, "alice") == [Transfer("alice", 13, "refund")]

    def test_tie_refund(self):
        plan = tie_refund(23, wager=10, players=["alice", "bob"], treasury="t")
        assert plan == [
            Transfer("alice", 10, "refund"),
            Transfer("bob", 10, "refund"),
            Transfer("t", 3, "sweep"),
        ]

    def test_tie_refund_short_pot(self):
        with pytest.raises(MatchError) as exc:
            tie_refund(5, wager=10, players=["alice", "bob"], treasury="t")
        assert exc.value.kind == ErrorKind.PAYOUT_DEBIT_NUMERICAL_OVERFLOW
