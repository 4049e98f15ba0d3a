"""Tests for the engine entry points."""

import pytest

from mmm_attribution import EngineConfig, MMMEngine
from mmm_attribution.config import PrecisionConfig
from mmm_attribution.connectors import InMemoryProvider
from mmm_attribution.core.contracts import Channel, ChartType, SpendRecord, Target
from mmm_attribution.core.exceptions import (
    DataIntegrityError,
    DataValidationError,
    DegenerateTarget,
    InsufficientDataError,
    SingularMatrix,
)
from mmm_attribution.synthetic import GROUND_TRUTH, generate_synthetic_data


class TestRunRegression:
    """Test MMMEngine.run_regression."""

    def test_scenario(self, scenario_provider):
        result = MMMEngine(scenario_provider).run_regression("revenue")

        assert result.intercept == 100.0
        assert result.coefficients == {"TV": 2.0}
        assert result.r_squared == 1.0

    def test_target_enum_and_string_agree(self, linear_provider):
        engine = MMMEngine(linear_provider)
        assert engine.run_regression(Target.CONVERSIONS) == engine.run_regression("conversions")

    def test_unknown_target(self, linear_provider):
        with pytest.raises(DataValidationError):
            MMMEngine(linear_provider).run_regression("profit")

    def test_period_range(self, linear_provider):
        """start/end bounds are inclusive."""
        result = MMMEngine(linear_provider).run_regression(
            start="2024-01-08", end="2024-01-29"
        )
        assert result.observations == 4

    def test_empty_range(self, linear_provider):
        with pytest.raises(InsufficientDataError):
            MMMEngine(linear_provider).run_regression(start="2030-01-01")

    def test_constant_target(self, scenario_channels, scenario_spend):
        outcomes = [
            {"period": r.period, "revenue": 10.0, "conversions": 1.0} for r in scenario_spend
        ]
        engine = MMMEngine(InMemoryProvider(scenario_channels, scenario_spend, outcomes))
        with pytest.raises(DegenerateTarget):
            engine.run_regression()

    def test_precision_from_config(self, linear_provider):
        config = EngineConfig(precision=PrecisionConfig(r_squared_decimals=2))
        result = MMMEngine(linear_provider, config).run_regression()
        assert result.r_squared == 1.0

    def test_excludes_raw_values_from_dump(self, linear_provider):
        dumped = MMMEngine(linear_provider).run_regression().model_dump(mode="json")
        assert set(dumped) == {"target", "intercept", "coefficients", "r_squared", "observations"}


class TestSyntheticRecovery:
    """The engine recovers the synthetic generator's parameters."""

    @pytest.fixture(scope="class")
    def dataset(self):
        return generate_synthetic_data(noise=False, round_outcomes=False)

    def test_revenue(self, dataset):
        result = MMMEngine(dataset.to_provider()).run_regression("revenue")
        truth = GROUND_TRUTH[Target.REVENUE]

        # spend is ~1e4..1e5 against an intercept column of ones, so X'X is
        # poorly conditioned and the intercept carries most of the error
        assert result.raw_intercept == pytest.approx(truth.intercept, rel=1e-3)
        for ch, coef in truth.coefficients.items():
            assert result.raw_coefficients[ch] == pytest.approx(coef, abs=0.05)
        assert result.raw_r_squared == pytest.approx(1.0, abs=1e-6)
        assert result.observations == 52

    def test_conversions(self, dataset):
        result = MMMEngine(dataset.to_provider()).run_regression("conversions")
        truth = GROUND_TRUTH[Target.CONVERSIONS]

        assert result.raw_intercept == pytest.approx(truth.intercept, rel=1e-3)
        for ch, coef in truth.coefficients.items():
            assert result.raw_coefficients[ch] == pytest.approx(coef, abs=1e-3)

    def test_noisy_fit_is_reasonable(self):
        dataset = generate_synthetic_data(seed=7)
        result = MMMEngine(dataset.to_provider()).run_regression("revenue")

        assert 0.0 <= result.r_squared <= 1.0
        assert list(result.coefficients) == ["TV", "Search", "Social", "Email", "Display"]


class TestCollinearSpend:
    """A channel that is a scaled copy of another is rejected at real spend scale."""

    @pytest.mark.parametrize("factor", [0.1, 0.3, 0.7, 1.1, 1 / 3, 2.9])
    def test_scaled_duplicate_channel(self, factor):
        dataset = generate_synthetic_data()
        channels = dataset.channels + [Channel(id=6, name="TV2")]
        spend = dataset.spend + [
            SpendRecord(period=r.period, channel="TV2", spend=factor * r.spend)
            for r in dataset.spend
            if r.channel == "TV"
        ]
        engine = MMMEngine(InMemoryProvider(channels, spend, dataset.outcomes))

        with pytest.raises(SingularMatrix):
            engine.run_regression("revenue")


class TestDecomposeContributions:
    """Test MMMEngine.decompose_contributions."""

    def test_fits_when_no_regression_given(self, scenario_provider):
        result = MMMEngine(scenario_provider).decompose_contributions("revenue")

        assert result.contributions[1].total == 140.0
        assert result.summary["TV"].percent_of_total == 28.6

    def test_reuses_regression(self, linear_provider):
        engine = MMMEngine(linear_provider)
        regression = engine.run_regression("conversions")

        reused = engine.decompose_contributions("conversions", regression=regression)
        fresh = engine.decompose_contributions("conversions")

        assert reused == fresh
        assert reused.target == Target.CONVERSIONS

    def test_regression_for_other_target(self, linear_provider):
        """A conversions fit cannot be decomposed as revenue."""
        engine = MMMEngine(linear_provider)
        regression = engine.run_regression("conversions")

        with pytest.raises(DataValidationError) as exc:
            engine.decompose_contributions("revenue", regression=regression)
        assert exc.value.field == "target"

    def test_outcome_gap(self, linear_channels, linear_spend, linear_outcomes):
        provider = InMemoryProvider(linear_channels, linear_spend, linear_outcomes[:-1])
        with pytest.raises(DataIntegrityError):
            MMMEngine(provider).decompose_contributions()


class TestGenerateChartSeries:
    """Test MMMEngine.generate_chart_series."""

    @pytest.mark.parametrize("chart_type", [c.value for c in ChartType])
    def test_every_chart_type(self, linear_provider, chart_type):
        chart = MMMEngine(linear_provider).generate_chart_series(chart_type)

        assert chart.chart_type == ChartType(chart_type)
        assert chart.series

    def test_target_defaults_to_revenue(self, linear_provider):
        chart = MMMEngine(linear_provider).generate_chart_series("contribution_breakdown")
        assert chart.layout.title == "Revenue Contribution by Channel"

    def test_regression_for_other_target(self, linear_provider):
        engine = MMMEngine(linear_provider)
        regression = engine.run_regression("conversions")

        with pytest.raises(DataValidationError) as exc:
            engine.generate_chart_series(
                "contribution_breakdown", "revenue", regression=regression
            )
        assert exc.value.field == "target"

    def test_target_follows_supplied_regression(self, linear_provider):
        engine = MMMEngine(linear_provider)
        regression = engine.run_regression("conversions")

        chart = engine.generate_chart_series("contribution_breakdown", regression=regression)
        assert chart.layout.title == "Conversions Contribution by Channel"

    def test_unknown_chart_type(self, linear_provider):
        with pytest.raises(DataValidationError):
            MMMEngine(linear_provider).generate_chart_series("pie")
