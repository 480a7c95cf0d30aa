"""Tests for Ledger — checked transfers between escrow holders."""

import pytest

from connectsquares.core.errors import ErrorKind, MatchError
from connectsquares.core.ledger import U64_MAX, Ledger, Movement


@pytest.fixture
def book():
    return Ledger({"alice": 100, "pot": 20})


class TestBalances:
    def test_initial_balances(self, book):
        assert book.balance("alice") == 100
        assert book.balance("pot") == 20

    def test_unknown_holder_is_zero(self, book):
        assert book.balance("nobody") == 0
        assert "nobody" not in book.balances()

    def test_deposit(self, book):
        book.deposit("alice", 5)
        assert book.balance("alice") == 105

    def test_deposit_overflow(self, book):
        with pytest.raises(MatchError) as exc:
            book.deposit("alice", U64_MAX)
        assert exc.value.kind == ErrorKind.PAYOUT_CREDIT_NUMERICAL_OVERFLOW
        assert book.balance("alice") == 100


class TestMoveFunds:
    def test_move(self, book):
        movement = book.move_funds("pot", "bob", 20)
        assert movement == Movement("pot", "bob", 20)
        assert book.balance("pot") == 0
        assert book.balance("bob") == 20

    def test_underflow_changes_nothing(self, book):
        with pytest.raises(MatchError) as exc:
            book.move_funds("pot", "bob", 21)
        assert exc.value.kind == ErrorKind.PAYOUT_DEBIT_NUMERICAL_OVERFLOW
        assert book.balance("pot") == 20
        assert book.balance("bob") == 0

    def test_overflow_changes_nothing(self):
        book = Ledger({"pot": 10, "whale": U64_MAX - 5})
        with pytest.raises(MatchError) as exc:
            book.move_funds("pot", "whale", 10)
        assert exc.value.kind == ErrorKind.PAYOUT_CREDIT_NUMERICAL_OVERFLOW
        assert book.balance("pot") == 10
        assert book.balance("whale") == U64_MAX - 5

    def test_zero_amount(self, book):
        book.move_funds("nobody", "alice", 0)
        assert book.balance("alice") == 100

    def test_self_transfer_is_noop(self, book):
        book.move_funds("alice", "alice", 50)
        assert book.balance("alice") == 100

    @pytest.mark.parametrize("amount", [-1, U64_MAX + 1])
    def test_amount_out_of_range(self, book, amount):
        with pytest.raises(ValueError):
            book.move_funds("alice", "bob", amount)

    def test_amount_must_be_int(self, book):
        with pytest.raises(TypeError):
            book.move_funds("alice", "bob", 1.5)
        with pytest.raises(TypeError):
            book.move_funds("alice", "bob", True)


class TestTransaction:
    def test_commit(self, book):
        with book.transaction() as journal:
            journal.append(book.move_funds("pot", "bob", 15))
            journal.append(book.move_funds("pot", "treasury", 5))
        assert book.balance("bob") == 15
        assert book.balance("treasury") == 5

    def test_rollback_on_failure(self, book):
        with pytest.raises(MatchError):
            with book.transaction() as journal:
                journal.append(book.move_funds("pot", "bob", 15))
                journal.append(book.move_funds("pot", "treasury", 6))
        assert book.balance("pot") == 20
        assert book.balance("bob") == 0
        assert book.balance("treasury") == 0

    def test_rollback_keeps_unrelated_credits(self, book):
        with pytest.raises(RuntimeError):
            with book.transaction() as journal:
                journal.append(book.move_funds("pot", "treasury", 5))
                # Another match pays the treasury mid-transaction
                book.deposit("treasury", 3)
                raise RuntimeError("boom")
        assert book.balance("treasury") == 3
        assert book.balance("pot") == 20

    def test_unreversible_movement_keeps_original_error(self, book):
        with pytest.raises(RuntimeError, match="boom") as exc:
            with book.transaction() as journal:
                journal.append(book.move_funds("pot", "treasury", 5))
                journal.append(book.move_funds("pot", "bob", 15))
                # bob spends the credit before the block fails
                book.move_funds("bob", "elsewhere", 15)
                raise RuntimeError("boom")
        cause = exc.value.__cause__
        assert isinstance(cause, MatchError)
        assert cause.kind == ErrorKind.PAYOUT_DEBIT_NUMERICAL_OVERFLOW
        # The other reversal still ran
        assert book.balance("treasury") == 0
        assert book.balance("pot") == 5
        assert book.balance("elsewhere") == 15
