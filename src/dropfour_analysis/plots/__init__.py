from .chart import (
    plot_column_heatmap,
    plot_histograms,
    plot_score_trend,
    plot_time_per_turn,
)

__all__ = [
    "plot_column_heatmap",
    "plot_histograms",
    "plot_score_trend",
    "plot_time_per_turn",
]
