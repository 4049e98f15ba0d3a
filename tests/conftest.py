"""Shared fixtures: small exact datasets and providers built from them."""

import pytest

from mmm_attribution.connectors import InMemoryProvider
from mmm_attribution.core.contracts import Channel, OutcomeRecord, SpendRecord

PERIODS = ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22", "2024-01-29", "2024-02-05"]
SEARCH = [10.0, 20.0, 30.0, 40.0, 50.0, 60.0]
SOCIAL = [5.0, 3.0, 8.0, 1.0, 9.0, 4.0]


@pytest.fixture
def scenario_channels():
    return [Channel(id=1, name="TV")]


@pytest.fixture
def scenario_spend():
    """Three weeks, one channel: spend 10, 20, 30."""
    return [
        SpendRecord(period="2023-01-02", channel="TV", spend=10),
        SpendRecord(period="2023-01-09", channel="TV", spend=20),
        SpendRecord(period="2023-01-16", channel="TV", spend=30),
    ]


@pytest.fixture
def scenario_outcomes():
    """Revenue 120, 140, 160 -> exactly 100 + 2 * spend."""
    return [
        OutcomeRecord(period="2023-01-02", revenue=120, conversions=12),
        OutcomeRecord(period="2023-01-09", revenue=140, conversions=14),
        OutcomeRecord(period="2023-01-16", revenue=160, conversions=16),
    ]


@pytest.fixture
def scenario_provider(scenario_channels, scenario_spend, scenario_outcomes):
    return InMemoryProvider(scenario_channels, scenario_spend, scenario_outcomes)


@pytest.fixture
def linear_channels():
    return [Channel(id=1, name="Search"), Channel(id=2, name="Social")]


@pytest.fixture
def linear_spend():
    """Two channels over six weeks, listed out of period order."""
    records = []
    for period, search, social in reversed(list(zip(PERIODS, SEARCH, SOCIAL))):
        records.append(SpendRecord(period=period, channel="Social", spend=social))
        records.append(SpendRecord(period=period, channel="Search", spend=search))
    return records


@pytest.fixture
def linear_outcomes():
    """revenue = 50 + 3 * Search + 7 * Social; conversions = 10 + 0.5 * Search + 2 * Social."""
    return [
        OutcomeRecord(
            period=period,
            revenue=50 + 3 * search + 7 * social,
            conversions=10 + 0.5 * search + 2 * social,
        )
        for period, search, social in zip(PERIODS, SEARCH, SOCIAL)
    ]


@pytest.fixture
def linear_provider(linear_channels, linear_spend, linear_outcomes):
    return InMemoryProvider(linear_channels, linear_spend, linear_outcomes)
