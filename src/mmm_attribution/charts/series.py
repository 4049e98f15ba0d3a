"""
Chart-ready series for the four built-in MMM charts.

Charts:
  - spend_over_time        : one line per channel, weekly spend
  - revenue_vs_spend       : total weekly spend against the outcome
  - channel_comparison     : total spend per channel (bar)
  - contribution_breakdown : stacked weekly contribution per channel

The adapter only reshapes what the design-matrix builder and the
decomposer already produce.  ``ChartData.to_plotly()`` emits the
Plotly JSON layout (``data`` + ``layout``); ``to_figure()`` builds a
``plotly.graph_objects.Figure`` from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from loguru import logger

from mmm_attribution.config import PrecisionConfig
from mmm_attribution.core.contracts import (
    Channel,
    ChartType,
    Decomposition,
    OutcomeRecord,
    RegressionResult,
    SpendRecord,
    Target,
    coerce_chart_type,
    coerce_target,
)
from mmm_attribution.linalg.matrix import DEFAULT_EPSILON
from mmm_attribution.mmm.decomposition import decompose_contributions
from mmm_attribution.mmm.design import (
    align_outcomes,
    build_design_matrix,
    channel_names,
    pivot_spend,
    spend_row,
)
from mmm_attribution.mmm.ols import solve_ols

CHANNEL_COLORS = ["#636EFA", "#EF553B", "#00CC96", "#AB63FA", "#FFA15A"]


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class ChartSeries:
    """One named series.  ``kind`` is ``line``, ``markers`` or ``bar``."""

    name: str
    x: list[Any]
    y: list[float]
    kind: str = "line"
    marker: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "kind": self.kind,
            "marker": self.marker,
        }

    def to_plotly(self) -> dict:
        trace: dict[str, Any] = {"x": self.x, "y": self.y, "name": self.name}
        if self.kind == "bar":
            trace["type"] = "bar"
        else:
            trace["type"] = "scatter"
            trace["mode"] = "lines" if self.kind == "line" else "markers"
        if self.marker:
            trace["marker"] = self.marker
        return trace


@dataclass
class ChartLayout:
    """Minimal layout metadata: title, axis titles and bar mode."""

    title: str
    x_title: str
    y_title: str
    barmode: str | None = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "x_title": self.x_title,
            "y_title": self.y_title,
            "barmode": self.barmode,
        }

    def to_plotly(self) -> dict:
        layout: dict[str, Any] = {
            "title": self.title,
            "xaxis": {"title": self.x_title},
            "yaxis": {"title": self.y_title},
        }
        if self.barmode:
            layout["barmode"] = self.barmode
        return layout


@dataclass
class ChartData:
    """Series plus layout for one chart."""

    chart_type: ChartType
    series: list[ChartSeries]
    layout: ChartLayout

    def to_dict(self) -> dict:
        return {
            "chart_type": self.chart_type.value,
            "series": [s.to_dict() for s in self.series],
            "layout": self.layout.to_dict(),
        }

    def to_plotly(self) -> dict:
        return {
            "data": [s.to_plotly() for s in self.series],
            "layout": self.layout.to_plotly(),
        }

    def to_figure(self):
        """Build a ``plotly.graph_objects.Figure``."""
        import plotly.graph_objects as go

        payload = self.to_plotly()
        return go.Figure(data=payload["data"], layout=payload["layout"])


# ---------------------------------------------------------------------------
# Chart builders
# ---------------------------------------------------------------------------

def _label(target: Target) -> str:
    return target.value.capitalize()


def _unit(target: Target) -> str:
    return " ($)" if target == Target.REVENUE else ""


def spend_over_time(
    channels: Sequence[str],
    table: dict[str, dict[str, float]],
) -> ChartData:
    periods = sorted(table)
    series = [
        ChartSeries(
            name=ch,
            x=list(periods),
            y=[table[period].get(ch, 0.0) for period in periods],
            kind="line",
        )
        for ch in channels
    ]
    return ChartData(
        chart_type=ChartType.SPEND_OVER_TIME,
        series=series,
        layout=ChartLayout(
            title="Weekly Spend by Channel", x_title="Week", y_title="Spend ($)"
        ),
    )


def revenue_vs_spend(
    channels: Sequence[str],
    table: dict[str, dict[str, float]],
    outcomes: Iterable[OutcomeRecord],
    target: Target = Target.REVENUE,
) -> ChartData:
    periods = sorted(table)
    by_period = align_outcomes(periods, outcomes)
    label = _label(target)
    series = ChartSeries(
        name=f"{label} vs Total Spend",
        x=[sum(spend_row(table, period, channels)) for period in periods],
        y=[by_period[period].value(target) for period in periods],
        kind="markers",
        marker={"size": 8},
    )
    return ChartData(
        chart_type=ChartType.REVENUE_VS_SPEND,
        series=[series],
        layout=ChartLayout(
            title=f"{label} vs Total Spend",
            x_title="Total Weekly Spend ($)",
            y_title=f"{label}{_unit(target)}",
        ),
    )


def channel_comparison(
    channels: Sequence[str],
    table: dict[str, dict[str, float]],
) -> ChartData:
    totals = [sum(week.get(ch, 0.0) for week in table.values()) for ch in channels]
    colors = [CHANNEL_COLORS[i % len(CHANNEL_COLORS)] for i in range(len(channels))]
    series = ChartSeries(
        name="Total Spend",
        x=list(channels),
        y=totals,
        kind="bar",
        marker={"color": colors},
    )
    return ChartData(
        chart_type=ChartType.CHANNEL_COMPARISON,
        series=[series],
        layout=ChartLayout(
            title="Total Spend by Channel", x_title="Channel", y_title="Total Spend ($)"
        ),
    )


def contribution_breakdown(decomposition: Decomposition) -> ChartData:
    periods = decomposition.periods
    channels = list(decomposition.summary)
    label = _label(decomposition.target)
    series = [
        ChartSeries(
            name=ch,
            x=list(periods),
            y=decomposition.channel_series(ch),
            kind="bar",
        )
        for ch in channels
    ]
    return ChartData(
        chart_type=ChartType.CONTRIBUTION_BREAKDOWN,
        series=series,
        layout=ChartLayout(
            title=f"{label} Contribution by Channel",
            x_title="Week",
            y_title=f"{label} Contribution{_unit(decomposition.target)}",
            barmode="stack",
        ),
    )


def build_chart(
    chart_type: ChartType | str,
    channels: Sequence[Channel | str],
    spend: Iterable[SpendRecord],
    outcomes: Iterable[OutcomeRecord],
    target: Target | str = Target.REVENUE,
    regression: RegressionResult | None = None,
    decomposition: Decomposition | None = None,
    precision: PrecisionConfig | None = None,
    epsilon: float = DEFAULT_EPSILON,
) -> ChartData:
    """
    Build one of the four chart kinds from raw records.

    ``contribution_breakdown`` uses *decomposition* when given, otherwise
    decomposes *regression*, otherwise fits the regression first.

    Raises:
        DataValidationError: Unknown chart type or target.
        DataIntegrityError: Spend and outcome periods do not pair up.
    """
    chart_type = coerce_chart_type(chart_type)
    target = coerce_target(target)
    names = channel_names(channels)
    spend = list(spend)
    outcomes = list(outcomes)
    table = pivot_spend(names, spend)

    logger.debug(f"Building chart {chart_type.value} for {len(names)} channels")

    if chart_type == ChartType.SPEND_OVER_TIME:
        return spend_over_time(names, table)
    if chart_type == ChartType.REVENUE_VS_SPEND:
        return revenue_vs_spend(names, table, outcomes, target)
    if chart_type == ChartType.CHANNEL_COMPARISON:
        return channel_comparison(names, table)

    if decomposition is None:
        if regression is None:
            design = build_design_matrix(names, spend, outcomes, target)
            regression = solve_ols(design, precision=precision, epsilon=epsilon)
        decomposition = decompose_contributions(regression, names, spend, precision)
    return contribution_breakdown(decomposition)
