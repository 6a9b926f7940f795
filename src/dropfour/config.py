# src/dropfour/config.py

from __future__ import annotations

from dataclasses import dataclass

ROWS = 7
COLS = 7
CONNECT_N = 4

# UI toggles
USE_COLOR = True
CLEAR_SCREEN = False

# Search defaults. Workers search SEARCH_DEPTH - 2 plies below their task.
SEARCH_DEPTH = 6

# Master-side recovery for stalled or lost workers
TASK_TIMEOUT_SEC = 60.0
POLL_INTERVAL_SEC = 0.5
MAX_TASK_ATTEMPTS = 3
SHUTDOWN_TIMEOUT_SEC = 5.0

# Aggregate for a CPU column that leaves the opponent no legal reply
NO_REPLY_SCORE = 0.0

LOG_FORMAT = "%(asctime)s %(processName)s %(name)s %(levelname)s: %(message)s"


@dataclass(frozen=True, slots=True)
class SearchSettings:
    depth: int = SEARCH_DEPTH
    task_timeout_sec: float = TASK_TIMEOUT_SEC
    poll_interval_sec: float = POLL_INTERVAL_SEC
    max_task_attempts: int = MAX_TASK_ATTEMPTS
    shutdown_timeout_sec: float = SHUTDOWN_TIMEOUT_SEC

    @property
    def task_depth(self) -> int:
        # cpu move + opponent reply are already on the board when a task is evaluated
        return max(0, self.depth - 2)
