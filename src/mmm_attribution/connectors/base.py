"""
Data-provider contract.

The engine never opens a database itself: every entry point receives a
``DataProvider`` and reads channels, spend and outcomes through it.
Period bounds are inclusive and compare as strings, which orders ISO
dates correctly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mmm_attribution.core.contracts import Channel, OutcomeRecord, SpendRecord


class DataProvider(ABC):
    """Interface that every data provider implements."""

    @abstractmethod
    def list_channels(self) -> list[Channel]:
        """Channels in a stable order; that order fixes matrix columns."""
        ...

    @abstractmethod
    def list_spend(
        self,
        start: str | None = None,
        end: str | None = None,
        channel: str | None = None,
    ) -> list[SpendRecord]:
        """Spend records, optionally limited to a period range or one channel."""
        ...

    @abstractmethod
    def list_outcomes(
        self,
        start: str | None = None,
        end: str | None = None,
    ) -> list[OutcomeRecord]:
        """Outcome records, optionally limited to a period range."""
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__


def in_range(period: str, start: str | None, end: str | None) -> bool:
    if start is not None and period < start:
        return False
    if end is not None and period > end:
        return False
    return True
