# src/dropfour/core/board.py

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from dropfour.config import ROWS, COLS
from dropfour.core.rules import winning_run
from dropfour.errors import ColumnFullError, ColumnOutOfRangeError, IllegalMoveError, SnapshotError
from dropfour.types import Cell, Coord, CPU, OPPONENT, Player, Move

EMPTY_SYMBOL = "="
SYMBOLS = {None: EMPTY_SYMBOL, CPU: CPU, OPPONENT: OPPONENT}
_FROM_SYMBOL = {v: k for k, v in SYMBOLS.items()}


@dataclass(slots=True)
class Board:
    rows: int = ROWS
    cols: int = COLS
    grid: List[List[Cell]] = field(default_factory=list)  # row 0 is the top

    def __post_init__(self) -> None:
        if not self.grid:
            self.grid = [[None for _ in range(self.cols)] for _ in range(self.rows)]

    def copy(self) -> "Board":
        b = Board(self.rows, self.cols)
        b.grid = [row[:] for row in self.grid]
        return b

    def is_legal(self, col: int) -> bool:
        return 0 <= col < self.cols and self.grid[0][col] is None

    def legal_columns(self) -> List[Move]:
        return [Move(c) for c in range(self.cols) if self.grid[0][c] is None]

    def is_full(self) -> bool:
        return all(self.grid[0][c] is not None for c in range(self.cols))

    def top_row(self, col: int) -> Optional[int]:
        """Row of the topmost occupied cell in a column, None when the column is empty."""
        if col < 0 or col >= self.cols:
            raise ColumnOutOfRangeError(f"Column must be between 0 and {self.cols - 1}.")
        for r in range(self.rows):
            if self.grid[r][col] is not None:
                return r
        return None

    def place(self, col: int, player: Player) -> bool:
        if not self.is_legal(col):
            return False

        for r in range(self.rows - 1, -1, -1):
            if self.grid[r][col] is None:
                self.grid[r][col] = player
                return True
        return False

    def drop(self, col: Move, player: Player) -> int:
        c = int(col)
        if c < 0 or c >= self.cols:
            raise ColumnOutOfRangeError(f"Column must be between 0 and {self.cols - 1}.")
        if not self.place(c, player):
            raise ColumnFullError(f"Column {c} is full.")
        return self.top_row(c)  # type: ignore[return-value]

    def retract(self, col: int) -> None:
        """
        Remove the top-most piece from a column.

        Precondition: retractions happen in exact reverse order of placements
        (per column and across interleaved columns). Retracting out of order
        removes whatever piece is on top and leaves the board inconsistent with
        the caller's move history.
        """
        r = self.top_row(col)
        if r is None:
            raise ValueError("Cannot retract: column is empty.")
        self.grid[r][col] = None

    def detect_win(self, col: int) -> Tuple[bool, Optional[Player]]:
        """Did the most recent piece in `col` complete four in a row? Returns (won, winner)."""
        res = self.winning_line(col)
        if res is None:
            return False, None
        return True, res[0]

    def winning_line(self, col: int) -> Optional[Tuple[Player, List[Coord]]]:
        r = self.top_row(col)
        if r is None:
            return None
        return winning_run(self.grid, self.rows, self.cols, r, col)

    # ---------- snapshots ----------
    def to_snapshot(self) -> str:
        return "\n".join("".join(SYMBOLS[cell] for cell in row) for row in self.grid)

    @classmethod
    def from_snapshot(cls, text: str) -> "Board":
        lines = text.strip("\n").split("\n")
        if not lines or not lines[0]:
            raise SnapshotError("Empty board snapshot.")

        cols = len(lines[0])
        grid: List[List[Cell]] = []
        for i, line in enumerate(lines):
            if len(line) != cols:
                raise SnapshotError(f"Row {i} has {len(line)} cells, expected {cols}.")
            try:
                grid.append([_FROM_SYMBOL[ch] for ch in line])
            except KeyError as e:
                raise SnapshotError(f"Unknown cell symbol {e.args[0]!r} in row {i}.") from None

        for c in range(cols):
            for r in range(len(grid) - 1):
                if grid[r][c] is not None and grid[r + 1][c] is None:
                    raise SnapshotError(f"Floating piece at row {r}, column {c}.")

        return cls(len(grid), cols, grid)


@contextmanager
def placed(board: Board, col: int, player: Player) -> Iterator[Board]:
    """Play a move for the duration of a with-block; it is retracted on every exit path."""
    if not board.place(col, player):
        raise IllegalMoveError(f"Column {col} is not playable.")
    try:
        yield board
    finally:
        board.retract(col)
