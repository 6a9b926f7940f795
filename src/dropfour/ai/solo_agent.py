from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

from dropfour.ai.base import Decision, pick_column
from dropfour.ai.evaluator import SearchStats, evaluate
from dropfour.config import SEARCH_DEPTH
from dropfour.core.board import Board, placed
from dropfour.game.state import GameSession
from dropfour.types import CPU, LOSS, UNKNOWN, Move, Score

log = logging.getLogger(__name__)


def _saturated(scores: Dict[int, Score]) -> bool:
    values = set(scores.values())
    return len(values) == 1 and values.pop() in (UNKNOWN, LOSS)


def score_candidates(board: Board, depth: int, stats: Optional[SearchStats] = None) -> Dict[int, Score]:
    scores: Dict[int, Score] = {}
    for col in board.legal_columns():
        with placed(board, col, CPU):
            scores[int(col)] = round(evaluate(board, CPU, col, max(0, depth - 1), stats), 3)
    return scores


@dataclass(slots=True)
class SoloAgent:
    """
    Single-process search: score every legal CPU move directly.

    When the search is saturated (every candidate is the same forced loss or the
    same "unknown" 0), the depth is halved and the candidates rescored, so the
    pick is not an arbitrary lowest column. Stops after a depth-1 pass.
    """
    name: str = "CPU (solo)"
    depth: int = SEARCH_DEPTH
    last_decision: Optional[Decision] = None

    def choose_move(self, session: GameSession) -> Move:
        board = session.board
        if not board.legal_columns():
            raise ValueError("No valid moves.")

        start = time.perf_counter()
        stats = SearchStats()
        depth = max(1, self.depth)

        while True:
            scores = score_candidates(board, depth, stats)
            if not _saturated(scores) or depth <= 1:
                break
            log.debug("search saturated at depth %d (%s), retrying at %d", depth, scores, depth // 2)
            depth //= 2

        col = pick_column(scores)
        self.last_decision = Decision(
            column=col,
            scores=scores,
            depth=depth,
            mode="solo",
            nodes=stats.nodes,
            time_ms=max(1, int((time.perf_counter() - start) * 1000)),
        )
        return col
