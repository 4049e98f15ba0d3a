"""Chart-series adapter: reshapes engine output for plotting consumers."""

from mmm_attribution.charts.series import (
    CHANNEL_COLORS,
    ChartData,
    ChartLayout,
    ChartSeries,
    build_chart,
    channel_comparison,
    contribution_breakdown,
    revenue_vs_spend,
    spend_over_time,
)

__all__ = [
    "CHANNEL_COLORS",
    "ChartData",
    "ChartLayout",
    "ChartSeries",
    "build_chart",
    "channel_comparison",
    "contribution_breakdown",
    "revenue_vs_spend",
    "spend_over_time",
]
