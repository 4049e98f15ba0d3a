"""
Core module for mmm-attribution.

Provides the canonical data contracts and exception types shared by
every layer of the engine.
"""

from mmm_attribution.core.contracts import (
    Channel,
    ChannelContributionSummary,
    ChartType,
    ContributionRow,
    Decomposition,
    OutcomeRecord,
    RegressionResult,
    SpendRecord,
    Target,
    coerce_chart_type,
    coerce_target,
)
from mmm_attribution.core.exceptions import (
    ConnectorError,
    DataIntegrityError,
    DataValidationError,
    DegenerateTarget,
    DimensionMismatch,
    InsufficientDataError,
    MMMAttributionError,
    SingularMatrix,
)

__all__ = [
    "Channel",
    "ChannelContributionSummary",
    "ChartType",
    "ContributionRow",
    "Decomposition",
    "OutcomeRecord",
    "RegressionResult",
    "SpendRecord",
    "Target",
    "coerce_chart_type",
    "coerce_target",
    "ConnectorError",
    "DataIntegrityError",
    "DataValidationError",
    "DegenerateTarget",
    "DimensionMismatch",
    "InsufficientDataError",
    "MMMAttributionError",
    "SingularMatrix",
]
