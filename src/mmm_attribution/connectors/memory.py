"""
In-memory data provider.

Holds typed records in plain lists.  Handy for tests, notebooks and for
wrapping DataFrames that were loaded some other way.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import pandas as pd
from loguru import logger

from mmm_attribution.connectors.base import DataProvider, in_range
from mmm_attribution.connectors.schemas import (
    OutcomeSchema,
    SpendSchema,
    validate_frame,
)
from mmm_attribution.core.contracts import Channel, OutcomeRecord, SpendRecord


def _as_channel(value: Channel | Mapping[str, Any] | str, position: int) -> Channel:
    if isinstance(value, Channel):
        return value
    if isinstance(value, str):
        return Channel(id=position + 1, name=value)
    return Channel(**{"id": position + 1, **value})


def _iso_periods(df: pd.DataFrame, column: str) -> pd.DataFrame:
    if pd.api.types.is_datetime64_any_dtype(df[column]):
        df = df.copy()
        df[column] = df[column].dt.strftime("%Y-%m-%d")
    return df


class InMemoryProvider(DataProvider):
    """Provider backed by lists of records."""

    def __init__(
        self,
        channels: Iterable[Channel | Mapping[str, Any] | str],
        spend: Iterable[SpendRecord | Mapping[str, Any]],
        outcomes: Iterable[OutcomeRecord | Mapping[str, Any]],
    ):
        self._channels = [_as_channel(c, i) for i, c in enumerate(channels)]
        self._spend = [
            r if isinstance(r, SpendRecord) else SpendRecord(**r) for r in spend
        ]
        self._outcomes = [
            r if isinstance(r, OutcomeRecord) else OutcomeRecord(**r) for r in outcomes
        ]

    @classmethod
    def from_frames(
        cls,
        spend: pd.DataFrame,
        outcomes: pd.DataFrame,
        channels: Iterable[Channel | str] | None = None,
        period_col: str = "period",
    ) -> "InMemoryProvider":
        """
        Build a provider from long-format DataFrames.

        Args:
            spend:      Columns ``period``, ``channel``, ``spend``.
            outcomes:   Columns ``period``, ``revenue``, ``conversions``.
            channels:   Channel order; defaults to first appearance in *spend*.
            period_col: Name of the period column in both frames.

        Datetime period columns are converted to ``YYYY-MM-DD`` strings.
        """
        spend = _iso_periods(spend.rename(columns={period_col: "period"}), "period")
        outcomes = _iso_periods(outcomes.rename(columns={period_col: "period"}), "period")
        spend = validate_frame(SpendSchema, spend, "spend frame")
        outcomes = validate_frame(OutcomeSchema, outcomes, "outcome frame")

        if channels is None:
            channels = list(dict.fromkeys(spend["channel"]))

        logger.info(
            f"Loaded {len(spend)} spend rows and {len(outcomes)} outcome rows from DataFrames"
        )
        return cls(
            channels=channels,
            spend=spend[["period", "channel", "spend"]].to_dict(orient="records"),
            outcomes=outcomes[["period", "revenue", "conversions"]].to_dict(orient="records"),
        )

    def list_channels(self) -> list[Channel]:
        return list(self._channels)

    def list_spend(
        self,
        start: str | None = None,
        end: str | None = None,
        channel: str | None = None,
    ) -> list[SpendRecord]:
        return [
            r
            for r in self._spend
            if in_range(r.period, start, end) and (channel is None or r.channel == channel)
        ]

    def list_outcomes(
        self,
        start: str | None = None,
        end: str | None = None,
    ) -> list[OutcomeRecord]:
        return [r for r in self._outcomes if in_range(r.period, start, end)]
