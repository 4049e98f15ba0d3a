"""Dense matrix algebra used by the OLS solver."""

from mmm_attribution.linalg.matrix import (
    DEFAULT_EPSILON,
    Matrix,
    identity,
    invert,
    multiply,
    select_pivot,
    shape,
    transpose,
)

__all__ = [
    "DEFAULT_EPSILON",
    "Matrix",
    "identity",
    "invert",
    "multiply",
    "select_pivot",
    "shape",
    "transpose",
]
