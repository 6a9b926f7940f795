from __future__ import annotations
from typing import Iterable, Optional, Set

from dropfour import config
from dropfour.core.board import Board, SYMBOLS
from dropfour.types import Cell, Coord, CPU
from dropfour.ui.colors import c, enabled, BOLD, DIM, FG_CYAN, FG_GRAY, FG_RED, FG_YELLOW, REVERSE, RESET


def format_grid(board: Board) -> str:
    """Plain board: one line per row, one symbol per cell, each row newline-terminated."""
    return "".join("".join(SYMBOLS[cell] for cell in row) + "\n" for row in board.grid)


def _piece(cell: Cell) -> str:
    if cell is None:
        return c("·", FG_GRAY)
    if cell == CPU:
        return c("C", FG_RED)
    return c("P", FG_YELLOW)


def clear_screen() -> None:
    if config.CLEAR_SCREEN and enabled():
        print("\033[2J\033[H", end="")


def render(board: Board, status: str = "", highlight: Optional[Iterable[Coord]] = None) -> None:
    clear_screen()

    hl: Set[Coord] = set(highlight) if highlight else set()

    print(c("CONNECT 4", BOLD))
    if status:
        print(c(status, FG_CYAN))
    else:
        print()

    nums = "   " + " ".join(str(i) for i in range(board.cols))
    print(c(nums, DIM))

    for r in range(board.rows):
        parts = []
        for cidx in range(board.cols):
            p = _piece(board.grid[r][cidx])
            if (r, cidx) in hl:
                p = f"{REVERSE}{p}{RESET}" if enabled() else "*"
            parts.append(p)

        print(" | " + " ".join(parts) + " |")

    print(c("   " + "—" * (2 * board.cols - 1), DIM))
    print(c(f"   Enter 0-{board.cols - 1} to drop. Enter q to quit.", DIM))


def render_plain(board: Board, status: str = "") -> None:
    if status:
        print(status)
    print(format_grid(board), end="")
