from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd
import matplotlib.pyplot as plt

from ..io.load_turns import score_columns


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _finish(fig, outdir: Path, name: str, *, show: bool) -> None:
    if show:
        plt.show()
    else:
        _ensure_dir(outdir)
        fig.savefig(outdir / name, dpi=200, bbox_inches="tight")
        plt.close(fig)


def plot_histograms(df: pd.DataFrame, outdir: Path, cols: Iterable[str], *, show: bool) -> None:
    num_cols = [c for c in cols if c in df.columns and pd.api.types.is_numeric_dtype(df[c])]

    for c in num_cols:
        fig = plt.figure()
        plt.hist(df[c].dropna(), bins=30)
        plt.title(f"Histogram: {c}")
        plt.xlabel(c)
        plt.ylabel("count")
        _finish(fig, outdir, f"hist_{c}.png", show=show)


def plot_score_trend(df: pd.DataFrame, outdir: Path, *, show: bool) -> None:
    if "turn" not in df.columns or "best_score" not in df.columns:
        return

    fig = plt.figure()
    plt.plot(df["turn"], df["best_score"], marker="o")
    plt.axhline(0.0, color="gray", linewidth=0.8)
    plt.ylim(-1.05, 1.05)
    plt.title("Chosen move score per turn")
    plt.xlabel("turn")
    plt.ylabel("score")
    _finish(fig, outdir, "trend_best_score.png", show=show)


def plot_column_heatmap(df: pd.DataFrame, outdir: Path, *, show: bool) -> None:
    """Turn x column grid of scores; blank cells are columns the CPU could not play."""
    cols = score_columns(df)
    if not cols or "turn" not in df.columns:
        return

    grid = df[cols].to_numpy(dtype=float)
    fig = plt.figure(figsize=(max(4, len(cols)), max(3, 0.35 * len(df))))
    img = plt.imshow(grid, aspect="auto", cmap="RdYlGn", vmin=-1.0, vmax=1.0)
    plt.colorbar(img, label="score")
    plt.xticks(range(len(cols)), [c.split("_", 1)[1] for c in cols])
    plt.yticks(range(len(df)), df["turn"].astype(int).tolist())
    plt.xlabel("column")
    plt.ylabel("turn")
    plt.title("Column scores by turn")
    _finish(fig, outdir, "heatmap_column_scores.png", show=show)


def plot_time_per_turn(df: pd.DataFrame, outdir: Path, *, show: bool) -> None:
    if "turn" not in df.columns or "time_ms" not in df.columns:
        return

    fig = plt.figure()
    plt.bar(df["turn"].astype(int), df["time_ms"].astype(float))
    plt.title("Decision time per turn")
    plt.xlabel("turn")
    plt.ylabel("ms")
    _finish(fig, outdir, "time_per_turn.png", show=show)
