# src/dropfour/reports/turn_log.py

from __future__ import annotations

import csv
import time
from pathlib import Path
from typing import IO, List, Optional

from dropfour.ai.base import Decision


def turn_log_columns(width: int) -> List[str]:
    return [
        "turn", "mode", "workers", "depth",
        "chosen", "best_score",
        "nodes", "time_ms", "requeued",
    ] + [f"score_{c}" for c in range(width)]


def default_path(results_dir: Path) -> Path:
    ts = time.strftime("%Y%m%d_%H%M%S")
    return results_dir / f"turns_{ts}.csv"


class TurnLog:
    """One CSV row per CPU decision. Columns the CPU could not play are left empty."""

    def __init__(self, path: Path, width: int) -> None:
        self.path = path
        self.width = width
        self._fh: Optional[IO[str]] = None
        self._writer = None

    def open(self) -> "TurnLog":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, "w", newline="")
        self._writer = csv.writer(self._fh)
        self._writer.writerow(turn_log_columns(self.width))
        return self

    def write(self, turn: int, d: Decision) -> None:
        if self._writer is None or self._fh is None:
            raise RuntimeError("TurnLog is not open.")
        per_col = [("" if c not in d.scores else round(d.scores[c], 6)) for c in range(self.width)]
        self._writer.writerow([
            turn, d.mode, d.workers, d.depth,
            int(d.column), round(d.best_score, 6),
            d.nodes, d.time_ms, d.requeued,
        ] + per_col)
        self._fh.flush()

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
            self._writer = None

    def __enter__(self) -> "TurnLog":
        return self.open()

    def __exit__(self, *exc: object) -> None:
        self.close()
