"""
mmm-attribution: linear marketing-mix attribution engine.

Fits ordinary least squares of a weekly outcome (revenue or conversions)
on per-channel spend and attributes every week's outcome back to the
channels.

Quickstart::

    from mmm_attribution import MMMEngine, SQLiteProvider
    engine = MMMEngine(SQLiteProvider("data/mmm.db"))
    result = engine.run_regression("revenue")
"""

__version__ = "0.1.0"

from mmm_attribution.config import EngineConfig
from mmm_attribution.connectors import DataProvider, InMemoryProvider, SQLiteProvider
from mmm_attribution.engine import MMMEngine

__all__ = [
    "__version__",
    "EngineConfig",
    "DataProvider",
    "InMemoryProvider",
    "SQLiteProvider",
    "MMMEngine",
]
