# src/dropfour/types.py

from __future__ import annotations
from typing import Literal, Optional, NewType, Tuple

Player = Literal["C", "P"]
Cell = Optional[Player]
Move = NewType("Move", int)   # column index 0..COLS-1
Score = float
Coord = Tuple[int, int]       # (row, col)

CPU: Player = "C"
OPPONENT: Player = "P"

WIN: Score = 1.0
LOSS: Score = -1.0
UNKNOWN: Score = 0.0
