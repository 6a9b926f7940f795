import pytest

from dropfour.core.board import Board, placed
from dropfour.errors import ColumnFullError, ColumnOutOfRangeError, IllegalMoveError, SnapshotError
from dropfour.types import CPU, OPPONENT


def board_from(*rows: str) -> Board:
    return Board.from_snapshot("\n".join(rows))


def test_empty_board_all_columns_legal() -> None:
    b = Board()
    assert (b.rows, b.cols) == (7, 7)
    assert [b.is_legal(c) for c in range(7)] == [True] * 7
    assert b.legal_columns() == list(range(7))


def test_out_of_range_columns_illegal() -> None:
    b = Board()
    assert not b.is_legal(-1)
    assert not b.is_legal(7)
    assert not b.place(7, CPU)
    assert b.to_snapshot() == Board().to_snapshot()


def test_full_column_is_illegal() -> None:
    b = Board()
    for i in range(7):
        assert b.place(2, CPU if i % 2 else OPPONENT)
    assert not b.is_legal(2)
    assert not b.place(2, CPU)
    assert b.legal_columns() == [0, 1, 3, 4, 5, 6]


def test_place_fills_lowest_empty_cell() -> None:
    b = Board()
    assert b.place(3, CPU)
    assert b.place(3, OPPONENT)
    assert b.grid[6][3] == CPU
    assert b.grid[5][3] == OPPONENT
    assert b.top_row(3) == 5
    assert b.top_row(0) is None


def test_place_then_retract_restores_board() -> None:
    b = board_from(
        "=======",
        "=======",
        "=======",
        "=======",
        "==P====",
        "==C=P==",
        "C=PCC=P",
    )
    before = b.to_snapshot()
    for col in range(7):
        if b.place(col, CPU):
            b.retract(col)
        assert b.to_snapshot() == before


def test_interleaved_retract_in_reverse_order() -> None:
    b = Board()
    before = b.to_snapshot()
    b.place(1, CPU)
    b.place(4, OPPONENT)
    b.place(1, OPPONENT)
    b.retract(1)
    b.retract(4)
    b.retract(1)
    assert b.to_snapshot() == before


def test_retract_empty_column_raises() -> None:
    with pytest.raises(ValueError):
        Board().retract(0)


def test_drop_raises_specific_errors() -> None:
    b = Board(rows=1, cols=2)
    assert b.drop(0, CPU) == 0
    with pytest.raises(ColumnFullError):
        b.drop(0, CPU)
    with pytest.raises(ColumnOutOfRangeError):
        b.drop(5, CPU)


def test_placed_retracts_on_exception() -> None:
    b = Board()
    with pytest.raises(RuntimeError):
        with placed(b, 0, CPU):
            assert b.grid[6][0] == CPU
            raise RuntimeError("boom")
    assert b.grid[6][0] is None


def test_placed_rejects_illegal_move() -> None:
    b = Board(rows=1, cols=1)
    b.place(0, CPU)
    with pytest.raises(IllegalMoveError):
        with placed(b, 0, OPPONENT):
            pass


def test_horizontal_four_wins_three_does_not() -> None:
    b = Board()
    for c in (0, 1, 2):
        b.place(c, CPU)
    assert b.detect_win(2) == (False, None)
    b.place(3, CPU)
    assert b.detect_win(3) == (True, CPU)


def test_vertical_four_wins() -> None:
    b = Board()
    for _ in range(3):
        b.place(5, OPPONENT)
    assert b.detect_win(5) == (False, None)
    b.place(5, OPPONENT)
    assert b.detect_win(5) == (True, OPPONENT)


def test_rising_diagonal_wins() -> None:
    b = board_from(
        "=======",
        "=======",
        "=======",
        "=======",
        "==CP===",
        "=CPP===",
        "CPPC===",
    )
    assert b.detect_win(2) == (False, None)
    b.place(3, CPU)  # (3, 3) completes the "/" line from (6, 0)
    assert b.detect_win(3) == (True, CPU)
    assert b.winning_line(3) == (CPU, [(3, 3), (4, 2), (5, 1), (6, 0)])


def test_falling_diagonal_wins() -> None:
    b = board_from(
        "=======",
        "=======",
        "=======",
        "===P===",
        "===CP==",
        "===CCP=",
        "===CCCP",
    )
    assert b.detect_win(6) == (True, OPPONENT)
    assert b.detect_win(5) == (True, OPPONENT)
    assert b.detect_win(4) == (True, OPPONENT)


def test_run_in_middle_of_line_is_found() -> None:
    # four on the left, then a different piece, then the line continues
    b = board_from(
        "=======",
        "=======",
        "=======",
        "=======",
        "=======",
        "=======",
        "CCCCP=P",
    )
    assert b.detect_win(0) == (True, CPU)
    assert b.detect_win(3) == (True, CPU)


def test_detect_win_on_empty_column() -> None:
    assert Board().detect_win(4) == (False, None)


def test_column_lookups_reject_out_of_range() -> None:
    b = board_from(*("=======",) * 6, "======C")
    for col in (-1, 7):
        with pytest.raises(ColumnOutOfRangeError):
            b.top_row(col)
        with pytest.raises(ColumnOutOfRangeError):
            b.detect_win(col)
    assert b.top_row(6) == 6


def test_snapshot_round_trip_keeps_cells() -> None:
    b = Board()
    b.place(0, CPU)
    b.place(0, OPPONENT)
    copy = Board.from_snapshot(b.to_snapshot())
    assert copy.grid == b.grid
    assert copy.to_snapshot().splitlines()[-1] == "C======"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "===\n==",
        "==X\n===",
        "C==\n===",
    ],
)
def test_bad_snapshots_rejected(text: str) -> None:
    with pytest.raises(SnapshotError):
        Board.from_snapshot(text)


def test_copy_is_independent() -> None:
    b = Board()
    c = b.copy()
    c.place(0, CPU)
    assert b.grid[6][0] is None
