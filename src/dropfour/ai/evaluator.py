from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dropfour.core.board import Board, placed
from dropfour.core.rules import other
from dropfour.types import CPU, LOSS, OPPONENT, UNKNOWN, WIN, Player, Score

# A position with no legal reply and no winner is a draw
DRAW: Score = 0.0


@dataclass(slots=True)
class SearchStats:
    nodes: int = 0


def evaluate(
    board: Board,
    last_mover: Player,
    last_col: int,
    depth: int,
    stats: Optional[SearchStats] = None,
) -> Score:
    """
    Score the position reached by `last_mover` playing `last_col`, from the CPU's side.

    Terminal wins are recognised before the depth cutoff, so a winning move scores
    +1/-1 even at depth 0. Below that, the side to move takes a winning reply when
    one exists (CPU: any child >= 1, opponent: any child <= -1); otherwise the node
    is the plain average of its children, i.e. both sides are treated as picking
    uniformly among non-winning replies. A node whose children are all wins (or all
    losses) collapses to +1 (or -1).
    """
    if stats is not None:
        stats.nodes += 1

    won, winner = board.detect_win(last_col)
    if won:
        return WIN if winner == CPU else LOSS

    if depth == 0:
        return UNKNOWN

    mover = other(last_mover)
    total = 0.0
    count = 0
    all_wins = True
    all_losses = True

    for col in range(board.cols):
        if not board.is_legal(col):
            continue

        with placed(board, col, mover):
            score = evaluate(board, mover, col, depth - 1, stats)

        if score > LOSS:
            all_losses = False
        if score < WIN:
            all_wins = False

        if mover == CPU and score >= WIN:
            return WIN
        if mover == OPPONENT and score <= LOSS:
            return LOSS

        total += score
        count += 1

    if count == 0:
        return DRAW
    if all_wins:
        return WIN
    if all_losses:
        return LOSS
    return total / count
