"""
Custom exception types for mmm-attribution.

Every exception carries a machine-readable code so callers can
handle specific failure modes programmatically.  None of them are
retried inside the engine: the same inputs always fail the same way.
"""

from __future__ import annotations


class MMMAttributionError(Exception):
    """Base exception for all mmm-attribution errors."""

    def __init__(self, message: str, code: str = "MMM_ATTRIBUTION_ERROR"):
        self.code = code
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": self.message}


class DimensionMismatch(MMMAttributionError):
    """Raised when matrix shapes do not line up (a builder bug, not bad data)."""

    def __init__(
        self,
        message: str,
        left: tuple[int, int] | None = None,
        right: tuple[int, int] | None = None,
    ):
        self.left = left
        self.right = right
        super().__init__(message, code="DIMENSION_MISMATCH")


class SingularMatrix(MMMAttributionError):
    """Raised when the normal equations cannot be inverted."""

    def __init__(self, message: str, column: int | None = None):
        self.column = column
        super().__init__(message, code="SINGULAR_MATRIX")


class DataIntegrityError(MMMAttributionError):
    """Raised when spend and outcome records do not pair up period by period."""

    def __init__(self, message: str, period: str | None = None):
        self.period = period
        super().__init__(message, code="DATA_INTEGRITY_ERROR")


class InsufficientDataError(MMMAttributionError):
    """Raised when there are no usable periods to regress on."""

    def __init__(self, message: str = "Not enough data: no periods with spend records."):
        super().__init__(message, code="INSUFFICIENT_DATA")


class DegenerateTarget(MMMAttributionError):
    """Raised when the target metric is constant, leaving R-squared undefined."""

    def __init__(self, target: str = ""):
        self.target = target
        msg = (
            f"Target '{target}' is constant across all periods; "
            "fit quality (R-squared) is undefined."
        )
        super().__init__(msg, code="DEGENERATE_TARGET")


class DataValidationError(MMMAttributionError):
    """Raised when a caller passes an unknown target, chart type or field."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, code="DATA_VALIDATION_ERROR")


class ConnectorError(MMMAttributionError):
    """Raised when a data provider fails to load or write."""

    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(message, code="CONNECTOR_ERROR")
