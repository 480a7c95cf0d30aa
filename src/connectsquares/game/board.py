"""Board — a rows × cols grid of optional roster indices.

Cells hold the roster index of the player who claimed them (not the
player identity), so the grid stays small and survives the roster
shuffle unchanged. All reads go through ``cell()``, which answers None
for any coordinate off the grid; the win scan relies on that to walk past
edges without its own bounds checks.
"""

from __future__ import annotations

from connectsquares.core.errors import ErrorKind, MatchError

__all__ = ["Board"]


class Board:
    """Fixed-size grid. Cells are immutable once set, until ``reset()``."""

    def __init__(self, rows: int, cols: int) -> None:
        self._rows = rows
        self._cols = cols
        self._cells: list[list[int | None]] = []
        self.reset()

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    def cell(self, row: int, col: int) -> int | None:
        if not (0 <= row < self._rows and 0 <= col < self._cols):
            return None
        return self._cells[row][col]

    def set(self, row: int, col: int, player_index: int) -> None:
        if not (0 <= row < self._rows and 0 <= col < self._cols):
            raise MatchError(
                ErrorKind.TILE_OUT_OF_BOUNDS,
                f"[{row}, {col}] on a {self._rows}x{self._cols} board",
            )
        if self._cells[row][col] is not None:
            raise MatchError(
                ErrorKind.TILE_ALREADY_SET,
                f"[{row}, {col}] already held by player index {self._cells[row][col]}",
            )
        self._cells[row][col] = player_index

    def reset(self) -> None:
        self._cells = [[None] * self._cols for _ in range(self._rows)]

    def filled(self) -> int:
        return sum(1 for row in self._cells for c in row if c is not None)

    def is_full(self) -> bool:
        return self.filled() == self._rows * self._cols

    def is_empty(self) -> bool:
        return self.filled() == 0

    def to_list(self) -> list[list[int | None]]:
        return [row[:] for row in self._cells]

    @classmethod
    def from_list(cls, cells: list[list[int | None]]) -> Board:
        if not cells or not cells[0]:
            raise ValueError("board must have at least one row and one column")
        cols = len(cells[0])
        if any(len(row) != cols for row in cells):
            raise ValueError("board rows must all have the same length")
        board = cls(len(cells), cols)
        board._cells = [list(row) for row in cells]
        return board

    def render(self) -> str:
        """Render ASCII board with column numbers and row indices."""
        lines = ["  " + "   ".join(f"{c}" for c in range(self._cols))]
        lines.append("+---" * self._cols + "+")
        for r in range(self._rows):
            cells = "| " + " | ".join(
                " " if v is None else str(v) for v in self._cells[r]
            ) + " |"
            lines.append(f"{cells}  {r}")
            lines.append("+---" * self._cols + "+")
        return "\n".join(lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"Board({self._rows}x{self._cols}, filled={self.filled()})"
