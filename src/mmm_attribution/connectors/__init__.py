"""
Data providers for mmm-attribution.

Supports in-memory records (or pandas DataFrames) and SQLite databases.
"""

from .base import DataProvider, in_range
from .memory import InMemoryProvider
from .schemas import ChannelSchema, OutcomeSchema, SpendSchema, validate_frame
from .sqlite import SQLiteProvider

__all__ = [
    "DataProvider",
    "in_range",
    "InMemoryProvider",
    "ChannelSchema",
    "OutcomeSchema",
    "SpendSchema",
    "validate_frame",
    "SQLiteProvider",
]
