from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from dropfour.game.state import GameSession
from dropfour.types import Move, Score


@dataclass(slots=True)
class Decision:
    column: Move
    scores: Dict[int, Score] = field(default_factory=dict)  # legal columns only
    depth: int = 0
    mode: str = "solo"
    workers: int = 0
    nodes: int = 0
    time_ms: int = 0
    requeued: int = 0

    @property
    def best_score(self) -> Score:
        return self.scores.get(int(self.column), 0.0)


class Agent(Protocol):
    name: str
    last_decision: Optional[Decision]

    def choose_move(self, session: GameSession) -> Move:
        ...


def pick_column(scores: Dict[int, Score]) -> Move:
    """Strictly greatest score, scanning columns in ascending order (ties keep the lowest)."""
    if not scores:
        raise ValueError("No valid moves.")
    best_col = -1
    best = 0.0
    for col in sorted(scores):
        if best_col == -1 or scores[col] > best:
            best_col = col
            best = scores[col]
    return Move(best_col)


def format_scores(scores: Dict[int, Score]) -> str:
    # + 0.0 folds -0.0 into 0.0
    return " ".join(f"{scores[c] + 0.0:.3f}" for c in sorted(scores))
