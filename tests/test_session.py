import pytest

from dropfour.core.board import Board
from dropfour.errors import ColumnFullError
from dropfour.game.state import GameSession
from dropfour.types import CPU, OPPONENT


def test_players_alternate_human_first() -> None:
    s = GameSession()
    assert s.current == OPPONENT
    assert s.apply(3) == 6
    assert s.current == CPU
    s.apply(3)
    assert s.history == [(OPPONENT, 3), (CPU, 3)]
    assert s.board.grid[5][3] == CPU


def test_win_finishes_game() -> None:
    s = GameSession()
    for _ in range(3):
        s.apply(0)  # P
        s.apply(1)  # C
    s.apply(0)
    assert s.finished
    assert s.winner == OPPONENT
    assert s.winning_line == [(3, 0), (4, 0), (5, 0), (6, 0)]
    with pytest.raises(ValueError):
        s.apply(2)


def test_full_board_is_a_draw() -> None:
    s = GameSession(board=Board(rows=1, cols=2))
    s.apply(0)
    s.apply(1)
    assert s.finished
    assert s.winner is None


def test_full_column_rejected() -> None:
    s = GameSession(board=Board(rows=1, cols=2))
    s.apply(0)
    with pytest.raises(ColumnFullError):
        s.apply(0)
