"""Tests for Board — bounds-safe grid access."""

import pytest

from connectsquares.core.errors import ErrorKind, MatchError
from connectsquares.game.board import Board


@pytest.fixture
def board():
    return Board(3, 4)


class TestBoardSetup:
    def test_new_board_is_empty(self, board):
        for r in range(3):
            for c in range(4):
                assert board.cell(r, c) is None
        assert board.is_empty()
        assert board.filled() == 0

    def test_dimensions(self, board):
        assert board.rows == 3
        assert board.cols == 4


class TestCellAccess:
    @pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (3, 0), (0, 4), (99, 99)])
    def test_out_of_range_reads_none(self, board, row, col):
        assert board.cell(row, col) is None

    def test_set_then_read(self, board):
        board.set(2, 3, 1)
        assert board.cell(2, 3) == 1
        assert board.filled() == 1

    def test_set_occupied_rejected(self, board):
        board.set(1, 1, 0)
        with pytest.raises(MatchError) as exc:
            board.set(1, 1, 1)
        assert exc.value.kind == ErrorKind.TILE_ALREADY_SET
        assert board.cell(1, 1) == 0

    def test_set_out_of_range_rejected(self, board):
        with pytest.raises(MatchError) as exc:
            board.set(3, 0, 0)
        assert exc.value.kind == ErrorKind.TILE_OUT_OF_BOUNDS

    def test_index_zero_counts_as_occupied(self, board):
        board.set(0, 0, 0)
        with pytest.raises(MatchError):
            board.set(0, 0, 0)


class TestReset:
    def test_reset_clears_every_cell(self, board):
        for c in range(4):
            board.set(0, c, c % 2)
        board.reset()
        assert board.is_empty()
        board.set(0, 0, 1)
        assert board.cell(0, 0) == 1

    def test_is_full(self):
        b = Board(3, 3)
        for r in range(3):
            for c in range(3):
                b.set(r, c, (r + c) % 2)
        assert b.is_full()


class TestSerialisation:
    def test_to_list_is_a_copy(self, board):
        cells = board.to_list()
        cells[0][0] = 5
        assert board.cell(0, 0) is None

    def test_from_list(self):
        b = Board.from_list([[0, None, None], [None, 1, None], [None, None, None]])
        assert b.rows == 3 and b.cols == 3
        assert b.cell(1, 1) == 1
        assert b == Board.from_list(b.to_list())

    def test_from_list_rejects_ragged(self):
        with pytest.raises(ValueError):
            Board.from_list([[None, None, None], [None, None]])

    def test_render_marks_cells(self):
        b = Board(3, 3)
        b.set(0, 0, 1)
        text = b.render()
        assert "| 1 |" in text
        assert text.splitlines()[0].strip().startswith("0")
