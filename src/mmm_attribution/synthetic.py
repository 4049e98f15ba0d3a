"""
Synthetic weekly marketing data with known ground truth.

Five channels, one spend record per channel and week, and outcomes drawn
from a linear model::

    revenue     = 500000 + sum(coef_ch * spend_ch) + N(0, 20000)
    conversions =   1000 + sum(coef_ch * spend_ch) + N(0, 50)

With ``noise=False`` and ``round_outcomes=False`` the outcomes are exactly
linear in spend, so an OLS fit must recover the coefficients.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pandas as pd
from loguru import logger

from mmm_attribution.connectors.memory import InMemoryProvider
from mmm_attribution.connectors.sqlite import SQLiteProvider
from mmm_attribution.core.contracts import Channel, OutcomeRecord, SpendRecord, Target
from mmm_attribution.mmm.rounding import round_half_up

CHANNELS = [
    ("TV", "Television advertising"),
    ("Search", "Paid search (Google Ads, Bing)"),
    ("Social", "Social media advertising"),
    ("Email", "Email marketing campaigns"),
    ("Display", "Display/banner advertising"),
]

# channel -> (base weekly spend, +/- variation)
SPEND_PROFILE: dict[str, tuple[float, float]] = {
    "TV": (50000, 15000),
    "Search": (30000, 10000),
    "Social": (20000, 8000),
    "Email": (10000, 3000),
    "Display": (15000, 5000),
}

MIN_WEEKLY_SPEND = 1000.0


@dataclass
class GroundTruth:
    """Parameters the outcomes were generated from."""

    intercept: float
    coefficients: dict[str, float]
    noise_std: float


GROUND_TRUTH: dict[Target, GroundTruth] = {
    Target.REVENUE: GroundTruth(
        intercept=500000.0,
        coefficients={"TV": 2.5, "Search": 4.0, "Social": 3.0, "Email": 6.0, "Display": 1.5},
        noise_std=20000.0,
    ),
    Target.CONVERSIONS: GroundTruth(
        intercept=1000.0,
        coefficients={
            "TV": 0.005,
            "Search": 0.012,
            "Social": 0.008,
            "Email": 0.015,
            "Display": 0.003,
        },
        noise_std=50.0,
    ),
}


@dataclass
class SyntheticDataset:
    channels: list[Channel]
    spend: list[SpendRecord]
    outcomes: list[OutcomeRecord]
    truth: dict[Target, GroundTruth] = field(default_factory=lambda: copy.deepcopy(GROUND_TRUTH))

    @property
    def periods(self) -> list[str]:
        return [o.period for o in self.outcomes]

    def to_provider(self) -> InMemoryProvider:
        return InMemoryProvider(self.channels, self.spend, self.outcomes)


def generate_synthetic_data(
    n_weeks: int = 52,
    start: str = "2023-01-02",
    seed: int | None = 42,
    noise: bool = True,
    round_outcomes: bool = True,
) -> SyntheticDataset:
    """
    Generate *n_weeks* of weekly spend and outcomes.

    Args:
        n_weeks:        Number of weekly periods.
        start:          First week start (ISO date).
        seed:           Seed for ``numpy.random.default_rng``.
        noise:          Add Gaussian noise to the outcomes.
        round_outcomes: Round revenue to cents and conversions to counts.
    """
    rng = np.random.default_rng(seed)
    weeks = pd.date_range(start=start, periods=n_weeks, freq="7D").strftime("%Y-%m-%d")

    channels = [
        Channel(id=i + 1, name=name, description=description)
        for i, (name, description) in enumerate(CHANNELS)
    ]
    revenue_truth = GROUND_TRUTH[Target.REVENUE]
    conversions_truth = GROUND_TRUTH[Target.CONVERSIONS]

    spend: list[SpendRecord] = []
    outcomes: list[OutcomeRecord] = []
    for week in weeks:
        weekly: dict[str, float] = {}
        for channel in channels:
            base, variation = SPEND_PROFILE[channel.name]
            draw = base + (rng.random() - 0.5) * 2 * variation
            weekly[channel.name] = max(MIN_WEEKLY_SPEND, round_half_up(draw, 0))
            spend.append(SpendRecord(period=week, channel=channel.name, spend=weekly[channel.name]))

        revenue = revenue_truth.intercept
        conversions = conversions_truth.intercept
        for name, amount in weekly.items():
            revenue += revenue_truth.coefficients[name] * amount
            conversions += conversions_truth.coefficients[name] * amount

        if noise:
            revenue += rng.normal(0, revenue_truth.noise_std)
            conversions += rng.normal(0, conversions_truth.noise_std)

        if round_outcomes:
            revenue = round_half_up(revenue, 2)
            conversions = max(0.0, round_half_up(conversions, 0))
        else:
            conversions = max(0.0, conversions)

        outcomes.append(
            OutcomeRecord(period=week, revenue=float(revenue), conversions=float(conversions))
        )

    logger.info(
        f"Generated {n_weeks} weeks of synthetic data for {len(channels)} channels "
        f"(noise={'on' if noise else 'off'})"
    )
    return SyntheticDataset(channels=channels, spend=spend, outcomes=outcomes)


def seed_database(path: str | Path, dataset: SyntheticDataset | None = None) -> SQLiteProvider:
    """
    Write *dataset* (default: a fresh synthetic one) to a new SQLite file.

    Any existing database at *path* is replaced.
    """
    path = Path(path)
    dataset = dataset or generate_synthetic_data()
    if path.exists():
        logger.info(f"Removing existing database {path}")
        path.unlink()

    provider = SQLiteProvider(path)
    provider.write(dataset.channels, dataset.spend, dataset.outcomes)
    logger.info(
        f"Database seeded: {len(dataset.channels)} channels, "
        f"{len(dataset.spend)} weekly spend records, "
        f"{len(dataset.outcomes)} weekly metrics records"
    )
    return provider
