from __future__ import annotations

import argparse
from pathlib import Path

from ..io.load_turns import LoadSpec, load_latest_from_dir, load_turns
from ..metrics.summarize import column_preferences, numeric_summary, timing_by_mode, turn_table
from ..plots.chart import plot_column_heatmap, plot_histograms, plot_score_trend, plot_time_per_turn


DEFAULT_NUMERIC_PLOTS = [
    "best_score",
    "time_ms",
    "nodes",
]


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Analyze dropfour turn logs.")
    ap.add_argument("--csv", type=str, default=None, help="Path to a turn log CSV. If omitted, uses latest in --results-dir.")
    ap.add_argument("--results-dir", type=str, default="data/turns", help="Directory containing turns_*.csv")
    ap.add_argument("--pattern", type=str, default="turns_*.csv", help="Glob pattern for selecting latest file")

    ap.add_argument("--outdir", type=str, default="figures", help="Directory for saving plots")
    ap.add_argument("--show", action="store_true", help="Show plots instead of saving")
    ap.add_argument("--no-plots", action="store_true", help="Print tables only")
    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    outdir = Path(args.outdir)

    if args.csv:
        csv_path = Path(args.csv)
    else:
        csv_path = load_latest_from_dir(Path(args.results_dir), pattern=args.pattern)

    df = load_turns(LoadSpec(csv_path=csv_path))

    print(f"\nLoaded: {csv_path}")
    print(f"Turns: {len(df):,}  Cols: {len(df.columns)}")

    print("\n=== Turns ===")
    print(turn_table(df).to_string(index=False))

    print("\n=== Columns ===")
    print(column_preferences(df).to_string(index=False))

    print("\n=== Timing ===")
    print(timing_by_mode(df).to_string(index=False))

    desc = numeric_summary(df)
    if not desc.empty:
        print("\n=== Numeric summary ===")
        print(desc.to_string())

    if args.no_plots:
        return 0

    plot_histograms(df, outdir, DEFAULT_NUMERIC_PLOTS, show=args.show)
    plot_score_trend(df, outdir, show=args.show)
    plot_column_heatmap(df, outdir, show=args.show)
    plot_time_per_turn(df, outdir, show=args.show)

    if not args.show:
        print(f"\nSaved figures to: {outdir.resolve()}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
