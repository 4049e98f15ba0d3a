"""
Design-matrix construction from long-format spend and outcome records.

One row per period, sorted ascending by period key::

    [1.0, spend(channel_1), ..., spend(channel_k)]

A channel without a spend record in some period contributes zero spend
that period.  A period without exactly one outcome record is an error,
never a zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from loguru import logger

from mmm_attribution.core.contracts import (
    Channel,
    OutcomeRecord,
    SpendRecord,
    Target,
    coerce_target,
)
from mmm_attribution.core.exceptions import DataIntegrityError, InsufficientDataError

SpendTable = dict[str, dict[str, float]]


@dataclass
class DesignMatrix:
    """Regression inputs aligned period by period."""

    periods: list[str]
    channels: list[str]
    rows: list[list[float]]
    target: list[float]
    target_name: Target = Target.REVENUE

    @property
    def n_observations(self) -> int:
        return len(self.rows)

    @property
    def n_parameters(self) -> int:
        return len(self.channels) + 1


def channel_names(channels: Iterable[Channel | str]) -> list[str]:
    """Channel names in the given order; duplicate names are rejected."""
    names = [c.name if isinstance(c, Channel) else str(c) for c in channels]
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise DataIntegrityError(f"Channel '{name}' is listed more than once")
        seen.add(name)
    return names


def pivot_spend(channels: Sequence[str], spend: Iterable[SpendRecord]) -> SpendTable:
    """
    Pivot long-format spend into ``period -> channel -> spend``.

    Only periods that have at least one spend record appear.  Every
    record must name a known channel, and a channel may appear at most
    once per period.
    """
    known = set(channels)
    table: SpendTable = {}
    for record in spend:
        if record.channel not in known:
            raise DataIntegrityError(
                f"Spend record for unknown channel '{record.channel}' "
                f"in period {record.period}",
                period=record.period,
            )
        week = table.setdefault(record.period, {})
        if record.channel in week:
            raise DataIntegrityError(
                f"Duplicate spend record for channel '{record.channel}' "
                f"in period {record.period}",
                period=record.period,
            )
        week[record.channel] = record.spend
    return table


def spend_row(table: SpendTable, period: str, channels: Sequence[str]) -> list[float]:
    """Spend of each channel in *period*, zero where nothing was recorded."""
    week = table.get(period, {})
    return [week.get(ch, 0.0) for ch in channels]


def align_outcomes(
    periods: Sequence[str],
    outcomes: Iterable[OutcomeRecord],
) -> dict[str, OutcomeRecord]:
    """
    Pair every spend period with its single outcome record.

    Raises:
        DataIntegrityError: On a duplicate outcome period, a spend period
            without an outcome, or an outcome period without spend.
    """
    by_period: dict[str, OutcomeRecord] = {}
    for record in outcomes:
        if record.period in by_period:
            raise DataIntegrityError(
                f"Duplicate outcome record for period {record.period}",
                period=record.period,
            )
        by_period[record.period] = record

    for period in periods:
        if period not in by_period:
            raise DataIntegrityError(
                f"Period {period} has spend records but no outcome record",
                period=period,
            )

    expected = set(periods)
    orphans = sorted(p for p in by_period if p not in expected)
    if orphans:
        raise DataIntegrityError(
            f"Period {orphans[0]} has an outcome record but no spend records "
            f"({len(orphans)} such period(s))",
            period=orphans[0],
        )
    return by_period


def build_design_matrix(
    channels: Sequence[Channel | str],
    spend: Iterable[SpendRecord],
    outcomes: Iterable[OutcomeRecord],
    target: Target | str = Target.REVENUE,
) -> DesignMatrix:
    """
    Assemble the design matrix and target vector.

    Args:
        channels: Channel list; its order fixes the column order.
        spend:    Long-format spend records.
        outcomes: One outcome record per period.
        target:   Which outcome field to regress on.

    Returns:
        ``DesignMatrix`` with an intercept column followed by one spend
        column per channel.

    Raises:
        InsufficientDataError: If there are no spend records at all.
        DataIntegrityError: If spend and outcome periods do not pair up.
    """
    target = coerce_target(target)
    names = channel_names(channels)
    table = pivot_spend(names, spend)
    periods = sorted(table)
    if not periods:
        raise InsufficientDataError()

    by_period = align_outcomes(periods, outcomes)

    rows = [[1.0] + spend_row(table, period, names) for period in periods]
    y = [by_period[period].value(target) for period in periods]

    logger.debug(
        f"Design matrix: {len(rows)} periods x {len(names) + 1} columns "
        f"(target={target.value})"
    )
    return DesignMatrix(
        periods=periods,
        channels=names,
        rows=rows,
        target=y,
        target_name=target,
    )
