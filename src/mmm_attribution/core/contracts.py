"""
Canonical data contracts for mmm-attribution.

These Pydantic models define every data boundary of the engine.  A data
provider converts whatever it stores into ``Channel``, ``SpendRecord`` and
``OutcomeRecord`` once; from there on the engine only works with these
typed records and plain numeric lists.

Design principles:
  - Periods are opaque string keys (ISO week-start dates in practice) and
    sort lexicographically.
  - Money amounts are floats in the currency of the project.
  - Mappings keyed by channel always follow the run's channel order.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from mmm_attribution.core.exceptions import DataValidationError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Target(str, Enum):
    REVENUE = "revenue"
    CONVERSIONS = "conversions"


class ChartType(str, Enum):
    SPEND_OVER_TIME = "spend_over_time"
    REVENUE_VS_SPEND = "revenue_vs_spend"
    CHANNEL_COMPARISON = "channel_comparison"
    CONTRIBUTION_BREAKDOWN = "contribution_breakdown"


def coerce_target(value: Target | str) -> Target:
    """Accept a ``Target`` or its string value."""
    try:
        return Target(value)
    except ValueError:
        allowed = ", ".join(t.value for t in Target)
        raise DataValidationError(
            f"Unknown target '{value}'. Expected one of: {allowed}", field="target"
        ) from None


def coerce_chart_type(value: ChartType | str) -> ChartType:
    """Accept a ``ChartType`` or its string value."""
    try:
        return ChartType(value)
    except ValueError:
        allowed = ", ".join(c.value for c in ChartType)
        raise DataValidationError(
            f"Unknown chart type '{value}'. Expected one of: {allowed}",
            field="chart_type",
        ) from None


# ---------------------------------------------------------------------------
# Input contracts  (what a data provider hands to the engine)
# ---------------------------------------------------------------------------

class Channel(BaseModel):
    """A marketing channel.  Its position in the channel list is its column."""

    id: int
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None


class SpendRecord(BaseModel):
    """Spend of one channel in one period (long format)."""

    period: str = Field(min_length=1)
    channel: str = Field(min_length=1)
    spend: float = Field(ge=0)


class OutcomeRecord(BaseModel):
    """Outcome metrics of one period."""

    period: str = Field(min_length=1)
    revenue: float
    conversions: float = Field(ge=0)

    def value(self, target: Target) -> float:
        return self.revenue if target == Target.REVENUE else self.conversions


# ---------------------------------------------------------------------------
# Output contracts  (what the engine produces)
# ---------------------------------------------------------------------------

class RegressionResult(BaseModel):
    """
    Fitted OLS model in presentation form.

    ``intercept``, ``coefficients`` and ``r_squared`` are rounded for
    display.  The ``raw_*`` fields keep the unrounded solver output and are
    left out of ``model_dump()``; they are ``None`` when a result was built
    by hand from presentation values.
    """

    target: Target
    intercept: float
    coefficients: dict[str, float]
    r_squared: float
    observations: int = Field(ge=1)

    raw_intercept: float | None = Field(default=None, exclude=True)
    raw_coefficients: dict[str, float] | None = Field(default=None, exclude=True)
    raw_r_squared: float | None = Field(default=None, exclude=True)

    @property
    def channels(self) -> list[str]:
        return list(self.coefficients)


class ContributionRow(BaseModel):
    """Attributed outcome of a single period."""

    period: str
    base: float
    channels: dict[str, float]
    total: float


class ChannelContributionSummary(BaseModel):
    """Contribution of one channel across every period."""

    total_contribution: float
    percent_of_total: float


class Decomposition(BaseModel):
    """Week-by-week contributions plus the per-channel roll-up."""

    target: Target
    contributions: list[ContributionRow] = Field(default_factory=list)
    summary: dict[str, ChannelContributionSummary] = Field(default_factory=dict)

    @property
    def periods(self) -> list[str]:
        return [row.period for row in self.contributions]

    def channel_series(self, channel: str) -> list[float]:
        """Per-period contribution of *channel*, in period order."""
        return [row.channels[channel] for row in self.contributions]
