"""
Contribution decomposition.

Breaks the fitted outcome of every period into a base (the intercept)
and one contribution per channel::

    contribution[ch] = coefficient[ch] * spend(ch, period)
    total            = base + sum(contribution[ch])

and rolls the channel contributions up into totals and shares.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from loguru import logger

from mmm_attribution.config import PrecisionConfig
from mmm_attribution.core.contracts import (
    Channel,
    ChannelContributionSummary,
    ContributionRow,
    Decomposition,
    RegressionResult,
    SpendRecord,
)
from mmm_attribution.core.exceptions import DataIntegrityError, InsufficientDataError
from mmm_attribution.mmm.design import channel_names, pivot_spend, spend_row
from mmm_attribution.mmm.rounding import round_half_up


def model_parameters(
    regression: RegressionResult,
    use_rounded: bool = True,
) -> tuple[float, dict[str, float]]:
    """
    Intercept and coefficients to decompose with.

    With ``use_rounded`` the presentation values are used, so the
    decomposition matches the published coefficients exactly.  Otherwise
    the raw solver values are used when the result carries them.
    """
    if use_rounded or regression.raw_coefficients is None or regression.raw_intercept is None:
        return regression.intercept, dict(regression.coefficients)
    return regression.raw_intercept, dict(regression.raw_coefficients)


def decompose_contributions(
    regression: RegressionResult,
    channels: Sequence[Channel | str],
    spend: Iterable[SpendRecord],
    precision: PrecisionConfig | None = None,
) -> Decomposition:
    """
    Attribute every period's fitted outcome to base and channels.

    Args:
        regression: Fitted model, e.g. from ``solve_ols``.
        channels:   Same channel list (and order) used for the fit.
        spend:      Same spend records used for the fit.
        precision:  Rounding and the rounded-vs-raw coefficient policy.

    Returns:
        ``Decomposition`` with one ``ContributionRow`` per period (sorted)
        and a per-channel summary.  A zero grand total yields 0% shares.

    Raises:
        DataIntegrityError: If the channels do not match the regression.
        InsufficientDataError: If there are no spend records.
    """
    precision = precision or PrecisionConfig()
    names = channel_names(channels)
    if names != regression.channels:
        raise DataIntegrityError(
            f"Channel list {names} does not match the regression channels "
            f"{regression.channels}"
        )

    base, coefficients = model_parameters(regression, precision.decompose_with_rounded)
    table = pivot_spend(names, spend)
    periods = sorted(table)
    if not periods:
        raise InsufficientDataError()

    digits = precision.contribution_decimals
    rows: list[ContributionRow] = []
    for period in periods:
        contributions: dict[str, float] = {}
        total = base
        for ch, amount in zip(names, spend_row(table, period, names)):
            value = round_half_up(coefficients[ch] * amount, digits)
            contributions[ch] = value
            total += value
        rows.append(
            ContributionRow(
                period=period,
                base=base,
                channels=contributions,
                total=round_half_up(total, digits),
            )
        )

    grand_total = sum(row.total for row in rows)
    if grand_total == 0:
        logger.warning("Grand total of contributions is zero; reporting 0% shares")

    summary: dict[str, ChannelContributionSummary] = {}
    for ch in names:
        channel_total = sum(row.channels[ch] for row in rows)
        share = channel_total / grand_total * 100 if grand_total != 0 else 0.0
        summary[ch] = ChannelContributionSummary(
            total_contribution=round_half_up(channel_total, digits),
            percent_of_total=round_half_up(share, precision.percent_decimals),
        )

    logger.info(
        f"Decomposed {len(rows)} periods across {len(names)} channels "
        f"(target={regression.target.value})"
    )
    return Decomposition(target=regression.target, contributions=rows, summary=summary)
