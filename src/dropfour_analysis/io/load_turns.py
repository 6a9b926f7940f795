from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

import pandas as pd


BASE_COLS = [
    "turn", "mode", "workers", "depth",
    "chosen", "best_score",
    "nodes", "time_ms", "requeued",
]


@dataclass(frozen=True)
class LoadSpec:
    csv_path: Path
    expected_cols: tuple[str, ...] = tuple(BASE_COLS)


def score_columns(df: pd.DataFrame) -> List[str]:
    cols = [c for c in df.columns if c.startswith("score_")]
    return sorted(cols, key=lambda c: int(c.split("_", 1)[1]))


def _coerce_numeric(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    out = df.copy()
    for c in cols:
        if c in out.columns:
            out[c] = pd.to_numeric(out[c], errors="coerce")
    return out


def load_turns(spec: LoadSpec) -> pd.DataFrame:
    if not spec.csv_path.exists():
        raise FileNotFoundError(f"CSV not found: {spec.csv_path}")

    df = pd.read_csv(spec.csv_path)
    df.columns = [c.strip() for c in df.columns]

    missing = [c for c in spec.expected_cols if c not in df.columns]
    if missing:
        raise ValueError(f"CSV missing required columns {missing}. Columns: {list(df.columns)}")

    numeric_like = [c for c in BASE_COLS if c != "mode"] + score_columns(df)
    df = _coerce_numeric(df, numeric_like)
    df["mode"] = df["mode"].astype(str)

    return df.sort_values("turn").reset_index(drop=True)


def load_latest_from_dir(results_dir: Path, pattern: str = "turns_*.csv") -> Path:
    if not results_dir.exists():
        raise FileNotFoundError(f"Results directory not found: {results_dir}")

    files = sorted(results_dir.glob(pattern))
    if not files:
        raise FileNotFoundError(f"No files matching {pattern} in {results_dir}")

    # Filenames include timestamp, lexicographic sort works
    return files[-1]
