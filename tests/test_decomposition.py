"""Tests for contribution decomposition."""

import pytest

from mmm_attribution.config import PrecisionConfig
from mmm_attribution.core.contracts import RegressionResult, SpendRecord, Target
from mmm_attribution.core.exceptions import DataIntegrityError, InsufficientDataError
from mmm_attribution.mmm import (
    build_design_matrix,
    decompose_contributions,
    model_parameters,
    round_half_up,
    solve_ols,
)


def _fit(channels, spend, outcomes, target=Target.REVENUE):
    return solve_ols(build_design_matrix(channels, spend, outcomes, target))


class TestDecomposeContributions:
    """Test decompose_contributions."""

    def test_single_channel_scenario(self, scenario_channels, scenario_spend, scenario_outcomes):
        """Week two: base 100 plus 2 * 20 from TV gives 140."""
        regression = _fit(scenario_channels, scenario_spend, scenario_outcomes)
        result = decompose_contributions(regression, scenario_channels, scenario_spend)

        row = result.contributions[1]
        assert row.period == "2023-01-09"
        assert row.base == 100.0
        assert row.channels == {"TV": 40.0}
        assert row.total == 140.0
        assert [r.total for r in result.contributions] == [120.0, 140.0, 160.0]

    def test_summary(self, scenario_channels, scenario_spend, scenario_outcomes):
        """Channel totals and shares of the grand total."""
        regression = _fit(scenario_channels, scenario_spend, scenario_outcomes)
        result = decompose_contributions(regression, scenario_channels, scenario_spend)

        summary = result.summary["TV"]
        assert summary.total_contribution == 120.0
        # 120 / 420 * 100
        assert summary.percent_of_total == 28.6

    def test_one_row_per_period_sorted(self, linear_channels, linear_spend, linear_outcomes):
        regression = _fit(linear_channels, linear_spend, linear_outcomes)
        result = decompose_contributions(regression, linear_channels, linear_spend)

        assert result.periods == sorted(result.periods)
        assert len(result.contributions) == 6
        assert result.target == Target.REVENUE
        assert list(result.summary) == ["Search", "Social"]

    def test_total_consistency(self, linear_channels, linear_spend, linear_outcomes):
        """Every row total is the rounded sum of base and rounded contributions."""
        regression = _fit(linear_channels, linear_spend, linear_outcomes, Target.CONVERSIONS)
        result = decompose_contributions(regression, linear_channels, linear_spend)

        for row in result.contributions:
            expected = row.base
            for ch in ["Search", "Social"]:
                expected += row.channels[ch]
            assert row.total == round_half_up(expected, 2)

    def test_contribution_is_coefficient_times_spend(
        self, linear_channels, linear_spend, linear_outcomes
    ):
        regression = _fit(linear_channels, linear_spend, linear_outcomes)
        result = decompose_contributions(regression, linear_channels, linear_spend)

        spend = {(r.period, r.channel): r.spend for r in linear_spend}
        for row in result.contributions:
            for ch, value in row.channels.items():
                assert value == round_half_up(
                    regression.coefficients[ch] * spend[(row.period, ch)], 2
                )

    def test_missing_spend_contributes_zero(self):
        """A channel without spend in a period contributes exactly zero."""
        regression = RegressionResult(
            target=Target.REVENUE,
            intercept=10.0,
            coefficients={"A": 2.0, "B": 3.0},
            r_squared=0.9,
            observations=2,
        )
        spend = [
            SpendRecord(period="2024-01-01", channel="A", spend=5),
            SpendRecord(period="2024-01-01", channel="B", spend=1),
            SpendRecord(period="2024-01-08", channel="A", spend=4),
        ]
        result = decompose_contributions(regression, ["A", "B"], spend)

        assert result.contributions[1].channels == {"A": 8.0, "B": 0.0}
        assert result.contributions[1].total == 18.0

    def test_zero_grand_total(self):
        """A grand total of zero reports 0% shares instead of dividing by zero."""
        regression = RegressionResult(
            target=Target.REVENUE,
            intercept=-10.0,
            coefficients={"A": 1.0},
            r_squared=0.5,
            observations=2,
        )
        spend = [
            SpendRecord(period="2024-01-01", channel="A", spend=5),
            SpendRecord(period="2024-01-08", channel="A", spend=15),
        ]
        result = decompose_contributions(regression, ["A"], spend)

        assert [r.total for r in result.contributions] == [-5.0, 5.0]
        assert result.summary["A"].total_contribution == 20.0
        assert result.summary["A"].percent_of_total == 0.0


class TestCoefficientPolicy:
    """Rounded versus raw coefficients."""

    @pytest.fixture
    def regression(self):
        return RegressionResult(
            target=Target.REVENUE,
            intercept=1.0,
            coefficients={"A": 0.123},
            r_squared=0.9,
            observations=1,
            raw_intercept=1.004,
            raw_coefficients={"A": 0.12345},
            raw_r_squared=0.9,
        )

    @pytest.fixture
    def spend(self):
        return [SpendRecord(period="2024-01-01", channel="A", spend=1000)]

    def test_rounded_by_default(self, regression, spend):
        result = decompose_contributions(regression, ["A"], spend)

        row = result.contributions[0]
        assert row.base == 1.0
        assert row.channels == {"A": 123.0}
        assert row.total == 124.0

    def test_raw_values(self, regression, spend):
        result = decompose_contributions(
            regression, ["A"], spend, precision=PrecisionConfig(decompose_with_rounded=False)
        )

        row = result.contributions[0]
        assert row.base == 1.004
        assert row.channels == {"A": 123.45}
        assert row.total == 124.45

    def test_falls_back_without_raw_values(self):
        """Hand-built results without raw values always use the rounded ones."""
        regression = RegressionResult(
            target=Target.REVENUE,
            intercept=2.0,
            coefficients={"A": 0.5},
            r_squared=0.9,
            observations=1,
        )
        assert model_parameters(regression, use_rounded=False) == (2.0, {"A": 0.5})


class TestDecompositionFailures:
    """Inputs the decomposer refuses."""

    def test_channel_mismatch(self, scenario_channels, scenario_spend, scenario_outcomes):
        regression = _fit(scenario_channels, scenario_spend, scenario_outcomes)
        with pytest.raises(DataIntegrityError):
            decompose_contributions(regression, ["TV", "Radio"], scenario_spend)

    def test_no_spend(self, scenario_channels, scenario_spend, scenario_outcomes):
        regression = _fit(scenario_channels, scenario_spend, scenario_outcomes)
        with pytest.raises(InsufficientDataError):
            decompose_contributions(regression, scenario_channels, [])
