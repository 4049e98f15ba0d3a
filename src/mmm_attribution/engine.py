"""
Attribution engine -- the three entry points callers use.

    engine = MMMEngine(SQLiteProvider("data/mmm.db"))
    result = engine.run_regression("revenue")
    breakdown = engine.decompose_contributions("revenue")
    chart = engine.generate_chart_series("contribution_breakdown")

Each call reads the provider afresh and keeps nothing between calls, so
one engine can serve concurrent callers.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from mmm_attribution.charts.series import ChartData, build_chart
from mmm_attribution.config import EngineConfig
from mmm_attribution.connectors.base import DataProvider
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
from mmm_attribution.core.exceptions import DataValidationError
from mmm_attribution.mmm.decomposition import decompose_contributions
from mmm_attribution.mmm.design import build_design_matrix
from mmm_attribution.mmm.ols import solve_ols


@dataclass
class Snapshot:
    """Provider data read for a single call."""

    channels: list[Channel]
    spend: list[SpendRecord]
    outcomes: list[OutcomeRecord]


class MMMEngine:
    """Regression, decomposition and chart series over a data provider."""

    def __init__(self, provider: DataProvider, config: EngineConfig | None = None):
        self.provider = provider
        self.config = config or EngineConfig()

    def _snapshot(self, start: str | None, end: str | None) -> Snapshot:
        return Snapshot(
            channels=self.provider.list_channels(),
            spend=self.provider.list_spend(start=start, end=end),
            outcomes=self.provider.list_outcomes(start=start, end=end),
        )

    @staticmethod
    def _check_target(regression: RegressionResult | None, target: Target) -> None:
        if regression is not None and regression.target != target:
            raise DataValidationError(
                f"Regression was fitted on '{regression.target.value}' "
                f"but '{target.value}' was requested",
                field="target",
            )

    def _fit(self, snapshot: Snapshot, target: Target) -> RegressionResult:
        design = build_design_matrix(
            snapshot.channels, snapshot.spend, snapshot.outcomes, target
        )
        return solve_ols(
            design,
            precision=self.config.precision,
            epsilon=self.config.solver.singular_epsilon,
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run_regression(
        self,
        target: Target | str = Target.REVENUE,
        start: str | None = None,
        end: str | None = None,
    ) -> RegressionResult:
        """
        Fit OLS of *target* on per-channel spend.

        Raises:
            InsufficientDataError, DataIntegrityError, SingularMatrix,
            DegenerateTarget, DataValidationError
        """
        target = coerce_target(target)
        logger.info(f"Running regression on {target.value} via {self.provider.name}")
        return self._fit(self._snapshot(start, end), target)

    def decompose_contributions(
        self,
        target: Target | str = Target.REVENUE,
        start: str | None = None,
        end: str | None = None,
        regression: RegressionResult | None = None,
    ) -> Decomposition:
        """
        Per-period, per-channel contributions of *target*.

        A previously fitted *regression* is reused when given; otherwise
        the regression is run first on the same provider data.  A supplied
        regression fitted on another target raises ``DataValidationError``.
        """
        target = coerce_target(target)
        self._check_target(regression, target)
        snapshot = self._snapshot(start, end)
        if regression is None:
            regression = self._fit(snapshot, target)
        return decompose_contributions(
            regression,
            snapshot.channels,
            snapshot.spend,
            precision=self.config.precision,
        )

    def generate_chart_series(
        self,
        chart_type: ChartType | str,
        target: Target | str | None = None,
        start: str | None = None,
        end: str | None = None,
        regression: RegressionResult | None = None,
    ) -> ChartData:
        """
        Series and layout for one of the four chart kinds.

        *target* defaults to the supplied regression's target, else revenue.
        """
        chart_type = coerce_chart_type(chart_type)
        if target is None:
            target = regression.target if regression is not None else Target.REVENUE
        target = coerce_target(target)
        self._check_target(regression, target)
        snapshot = self._snapshot(start, end)
        return build_chart(
            chart_type,
            snapshot.channels,
            snapshot.spend,
            snapshot.outcomes,
            target=target,
            regression=regression,
            precision=self.config.precision,
            epsilon=self.config.solver.singular_epsilon,
        )
