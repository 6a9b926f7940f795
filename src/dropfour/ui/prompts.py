from __future__ import annotations
from typing import Callable, Optional

from dropfour.core.board import Board
from dropfour.errors import ColumnFullError, ColumnOutOfRangeError, MoveInputError, NotANumberError
from dropfour.types import Move

QUIT_WORDS = {"q", "quit", "exit"}


def parse_move(raw: str, board: Board) -> Optional[Move]:
    """0-based column from user text. None means quit; unplayable input raises MoveInputError."""
    s = raw.strip().lower()
    if s in QUIT_WORDS:
        return None
    try:
        col = int(s)
    except ValueError:
        raise NotANumberError(f"{raw.strip()!r} is not a number. Enter a column 0-{board.cols - 1} or q.") from None
    if col < 0 or col >= board.cols:
        raise ColumnOutOfRangeError(f"Column must be between 0 and {board.cols - 1}.")
    if not board.is_legal(col):
        raise ColumnFullError(f"Column {col} is full. Pick another column.")
    return Move(col)


def prompt_move(
    board: Board,
    read: Callable[[str], str] = input,
    show: Callable[[str], None] = print,
    prompt: str = "Your move: ",
) -> Optional[Move]:
    while True:
        try:
            return parse_move(read(prompt), board)
        except MoveInputError as e:
            show(str(e))
