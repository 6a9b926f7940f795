from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from dropfour.core.board import Board
from dropfour.core.rules import other
from dropfour.types import Coord, Move, OPPONENT, Player


@dataclass(slots=True)
class GameSession:
    """Everything one game owns: the board, who moves next, and how it ended."""
    board: Board = field(default_factory=Board)
    current: Player = OPPONENT  # the human moves first
    turn: int = 0               # CPU turns taken so far
    history: List[Tuple[Player, Move]] = field(default_factory=list)
    winner: Optional[Player] = None
    winning_line: Optional[List[Coord]] = None
    finished: bool = False
    last_status: str = "Your move."

    def apply(self, move: Move) -> int:
        """Play `move` for the side to move; updates winner/finished. Returns the row filled."""
        if self.finished:
            raise ValueError("Game is already over.")

        row = self.board.drop(move, self.current)
        self.history.append((self.current, move))

        res = self.board.winning_line(int(move))
        if res is not None:
            self.winner, self.winning_line = res
            self.finished = True
        elif self.board.is_full():
            self.finished = True

        self.current = other(self.current)
        return row
