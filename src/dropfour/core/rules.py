from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from dropfour.config import CONNECT_N
from dropfour.types import Cell, Coord, CPU, OPPONENT, Player

# (d_row, d_col): horizontal, vertical, "\" diagonal, "/" diagonal
DIRECTIONS: Tuple[Coord, ...] = ((0, 1), (1, 0), (1, 1), (1, -1))


def other(player: Player) -> Player:
    return OPPONENT if player == CPU else CPU


def line_through(rows: int, cols: int, row: int, col: int, d_row: int, d_col: int) -> List[Coord]:
    """
    Every cell of the board line through (row, col) in direction (d_row, d_col),
    ordered edge to edge: walk back to one edge first, then collect forward.
    """
    r, c = row, col
    while 0 <= r - d_row < rows and 0 <= c - d_col < cols:
        r -= d_row
        c -= d_col

    cells: List[Coord] = []
    while 0 <= r < rows and 0 <= c < cols:
        cells.append((r, c))
        r += d_row
        c += d_col
    return cells


def longest_run(grid: Sequence[Sequence[Cell]], cells: Sequence[Coord], player: Player) -> Tuple[int, int]:
    """
    Scan cells in order counting a run of `player`, resetting on any mismatch.
    Returns (start index, length) of the longest run seen anywhere in the scan.
    """
    best_start, best_len = 0, 0
    run_start, run_len = 0, 0
    for i, (r, c) in enumerate(cells):
        if grid[r][c] == player:
            if run_len == 0:
                run_start = i
            run_len += 1
            if run_len > best_len:
                best_start, best_len = run_start, run_len
        else:
            run_len = 0
    return best_start, best_len


def winning_run(
    grid: Sequence[Sequence[Cell]], rows: int, cols: int, row: int, col: int
) -> Optional[Tuple[Player, List[Coord]]]:
    """Four-or-more line of the owner of (row, col) passing through that cell, if any."""
    player = grid[row][col]
    if player is None:
        return None

    for d_row, d_col in DIRECTIONS:
        cells = line_through(rows, cols, row, col, d_row, d_col)
        if len(cells) < CONNECT_N:
            continue
        start, length = longest_run(grid, cells, player)
        if length >= CONNECT_N:
            return player, cells[start : start + length]
    return None
