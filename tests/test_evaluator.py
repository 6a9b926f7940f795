import pytest

from dropfour.ai.evaluator import SearchStats, evaluate
from dropfour.core.board import Board
from dropfour.types import CPU, OPPONENT


def board_from(*rows: str) -> Board:
    return Board.from_snapshot("\n".join(rows))


EMPTY_ROWS = ("=======",) * 4


@pytest.mark.parametrize("depth", [0, 1, 3])
def test_cpu_four_in_a_row_scores_one_at_any_depth(depth: int) -> None:
    b = board_from(*EMPTY_ROWS, "=======", "PPP====", "CCCC===")
    assert evaluate(b, CPU, 3, depth) == 1.0


def test_opponent_four_in_a_row_scores_minus_one() -> None:
    b = board_from(*EMPTY_ROWS, "===P===", "===P===", "CC=PC==")
    b.place(3, OPPONENT)
    assert evaluate(b, OPPONENT, 3, 0) == -1.0


def test_depth_zero_without_win_is_neutral() -> None:
    b = Board()
    b.place(3, CPU)
    assert evaluate(b, CPU, 3, 0) == 0.0


def test_opponent_takes_winning_reply() -> None:
    # P threatens col 3; CPU just played elsewhere
    b = board_from(*EMPTY_ROWS, "===P===", "C==P===", "CC=P===")
    assert evaluate(b, CPU, 1, 1) == -1.0


def test_cpu_takes_winning_reply() -> None:
    b = board_from(*EMPTY_ROWS, "=======", "PP=====", "CCC===P")
    assert evaluate(b, OPPONENT, 6, 1) == 1.0


def test_non_terminal_children_are_averaged() -> None:
    # Opponent to move: only the block in col 3 stops CPU's immediate win.
    b = board_from(*EMPTY_ROWS, "=======", "PP=====", "CCC===P")
    assert evaluate(b, CPU, 2, 2) == pytest.approx(6 / 7)


def test_one_legal_column_left_terminates() -> None:
    # 3x3 cannot hold four in a row, so nothing ends early
    b = Board(rows=3, cols=3)
    for col in (0, 1):
        for i in range(3):
            b.place(col, CPU if (i + col) % 2 else OPPONENT)
    b.place(2, CPU)
    assert b.legal_columns() == [2]

    score = evaluate(b, CPU, 2, 5)
    assert -1.0 <= score <= 1.0
    assert score == 0.0


def test_full_board_without_winner_is_a_draw() -> None:
    b = Board(rows=2, cols=2)
    for col in (0, 1):
        b.place(col, CPU)
        b.place(col, OPPONENT)
    assert evaluate(b, OPPONENT, 1, 4) == 0.0


def test_search_leaves_board_unchanged() -> None:
    b = board_from(*EMPTY_ROWS, "===P===", "C==P===", "CC=P===")
    before = b.to_snapshot()
    evaluate(b, CPU, 1, 3)   # exits early through the opponent-win shortcut
    evaluate(b, OPPONENT, 3, 2)
    assert b.to_snapshot() == before


def test_stats_count_nodes() -> None:
    b = Board()
    b.place(0, CPU)
    stats = SearchStats()
    evaluate(b, CPU, 0, 2, stats)
    # root + 7 replies + 49 answers
    assert stats.nodes == 1 + 7 + 49
