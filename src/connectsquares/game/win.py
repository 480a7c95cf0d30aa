"""WinDetector — connect-N check around the cell just played.

Only the four lines through the last move can have changed, so instead of
scanning the whole board we count matching neighbours outward from that
cell in both directions of each axis. Works for any ``connect`` and any
board aspect ratio.
"""

from __future__ import annotations

from connectsquares.game.board import Board

__all__ = ["AXES", "run_length", "wins", "winning_axis"]

# Each axis is a pair of opposite unit steps (d_row, d_col)
AXES = {
    "horizontal": ((0, 1), (0, -1)),
    "vertical": ((1, 0), (-1, 0)),
    "positive_diagonal": ((1, -1), (-1, 1)),
    "negative_diagonal": ((1, 1), (-1, -1)),
}


def run_length(board: Board, row: int, col: int, d_row: int, d_col: int) -> int:
    """Count consecutive cells equal to (row, col) strictly in one direction.

    The origin cell itself is not counted. Empty cells never match, so a
    walk off the board or into an empty cell stops the run.
    """
    origin = board.cell(row, col)
    if origin is None:
        return 0
    count = 0
    r, c = row + d_row, col + d_col
    while board.cell(r, c) == origin:
        count += 1
        r += d_row
        c += d_col
    return count


def winning_axis(board: Board, row: int, col: int, connect: int) -> str | None:
    """Return the name of the first axis completing a run of ``connect``, or None."""
    needed = connect - 1  # the origin already supplies one unit of the run
    for name, ((dr1, dc1), (dr2, dc2)) in AXES.items():
        total = run_length(board, row, col, dr1, dc1) + run_length(board, row, col, dr2, dc2)
        if total >= needed:
            return name
    return None


def wins(board: Board, row: int, col: int, connect: int) -> bool:
    return winning_axis(board, row, col, connect) is not None
