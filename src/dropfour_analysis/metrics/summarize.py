from __future__ import annotations

import pandas as pd

from ..io.load_turns import score_columns


def _require_cols(df: pd.DataFrame, cols: list[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}. Present: {list(df.columns)}")


def turn_table(df: pd.DataFrame) -> pd.DataFrame:
    _require_cols(df, ["turn", "chosen", "best_score"])
    keep = [c for c in ["turn", "mode", "workers", "depth", "chosen", "best_score", "time_ms", "nodes", "requeued"]
            if c in df.columns]
    out = df[keep].copy()

    # margin of the pick over the runner-up column
    scores = df[score_columns(df)]
    margins = []
    for row in scores.itertuples(index=False):
        vals = sorted((v for v in row if pd.notna(v)), reverse=True)
        margins.append(vals[0] - vals[1] if len(vals) >= 2 else float("nan"))
    out["margin"] = margins
    return out


def column_preferences(df: pd.DataFrame) -> pd.DataFrame:
    """How often each column was chosen, plus its mean score over the turns it was playable."""
    _require_cols(df, ["chosen"])
    cols = score_columns(df)

    chosen = df["chosen"].value_counts().rename("times_chosen")
    rows = []
    for c in cols:
        idx = int(c.split("_", 1)[1])
        s = df[c].dropna()
        rows.append({
            "column": idx,
            "times_chosen": int(chosen.get(idx, 0)),
            "playable_turns": int(s.shape[0]),
            "mean_score": float(s.mean()) if not s.empty else float("nan"),
            "forced_losses": int((s <= -1.0).sum()),
        })
    return pd.DataFrame(rows, columns=["column", "times_chosen", "playable_turns", "mean_score", "forced_losses"])


def numeric_summary(df: pd.DataFrame) -> pd.DataFrame:
    num = df.select_dtypes(include="number")
    if num.empty:
        return pd.DataFrame()
    return num.describe(percentiles=[0.05, 0.25, 0.5, 0.75, 0.95]).T


def timing_by_mode(df: pd.DataFrame) -> pd.DataFrame:
    _require_cols(df, ["mode", "workers", "time_ms"])
    return (
        df.groupby(["mode", "workers"])["time_ms"]
        .agg(["count", "mean", "median", "max"])
        .reset_index()
    )
