"""
Pandera schemas for provider DataFrames.

Rows are validated once when a provider loads them, before they are
turned into typed records.

Example (spend):
    period     | channel | spend
    2023-01-02 | TV      | 48213.0
    2023-01-02 | Search  | 31877.0
"""

import pandas as pd
import pandera as pa
from pandera.typing import Series

from mmm_attribution.core.exceptions import DataIntegrityError


class ChannelSchema(pa.DataFrameModel):
    """Channel table: id plus a non-empty display name."""

    id: Series[int] = pa.Field(coerce=True)
    name: Series[str] = pa.Field(
        str_length={"min_value": 1, "max_value": 120},
        unique=True,
        coerce=True,
    )

    class Config:
        strict = False  # description and any extra columns pass through


class SpendSchema(pa.DataFrameModel):
    """Long-format weekly spend: one row per period x channel."""

    period: Series[str] = pa.Field(
        str_length={"min_value": 1},
        coerce=True,
        description="Period key (week start)",
    )
    channel: Series[str] = pa.Field(
        str_length={"min_value": 1},
        coerce=True,
        description="Channel name",
    )
    spend: Series[float] = pa.Field(
        ge=0,
        description="Spend amount in currency units",
        coerce=True,
    )

    class Config:
        strict = False


class OutcomeSchema(pa.DataFrameModel):
    """Weekly outcome metrics: one row per period."""

    period: Series[str] = pa.Field(str_length={"min_value": 1}, coerce=True)
    revenue: Series[float] = pa.Field(coerce=True, description="Revenue in currency units")
    conversions: Series[float] = pa.Field(ge=0, coerce=True, description="Conversion count")

    class Config:
        strict = False


def validate_frame(schema: type[pa.DataFrameModel], df: pd.DataFrame, source: str) -> pd.DataFrame:
    """Validate *df* against *schema*, reporting failures as data-integrity errors."""
    try:
        return schema.validate(df)
    except pa.errors.SchemaError as e:
        raise DataIntegrityError(f"{source} failed validation: {e}") from e
