"""
Closed-form ordinary least squares on a ``DesignMatrix``.

    beta = (X'X)^-1 X'y

The first entry of ``beta`` is the intercept; the rest follow the
design-matrix channel order.  Presentation rounding happens only when
the ``RegressionResult`` is assembled; the unrounded values travel along
in its ``raw_*`` fields.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from loguru import logger

from mmm_attribution.config import PrecisionConfig
from mmm_attribution.core.contracts import RegressionResult
from mmm_attribution.core.exceptions import (
    DegenerateTarget,
    DimensionMismatch,
    InsufficientDataError,
    SingularMatrix,
)
from mmm_attribution.linalg.matrix import DEFAULT_EPSILON, invert, multiply, transpose
from mmm_attribution.mmm.design import DesignMatrix
from mmm_attribution.mmm.rounding import round_half_up


@dataclass
class OLSFit:
    """Unrounded solver output."""

    beta: list[float]
    fitted: list[float]
    residuals: list[float]
    ss_tot: float

    @property
    def intercept(self) -> float:
        return self.beta[0]

    @property
    def slopes(self) -> list[float]:
        return self.beta[1:]

    @property
    def ss_res(self) -> float:
        return sum(r ** 2 for r in self.residuals)

    @property
    def r_squared(self) -> float:
        return 1 - self.ss_res / self.ss_tot


def fit_ols(
    rows: Sequence[Sequence[float]],
    target: Sequence[float],
    epsilon: float = DEFAULT_EPSILON,
    target_name: str = "",
) -> OLSFit:
    """
    Solve the normal equations for ``rows`` (intercept column included).

    Raises:
        InsufficientDataError: If there are no rows.
        DimensionMismatch: If ``target`` is not aligned with ``rows``.
        DegenerateTarget: If every target value is the same.
        SingularMatrix: If ``X'X`` cannot be inverted.
    """
    n = len(rows)
    if n == 0:
        raise InsufficientDataError()
    if len(target) != n:
        raise DimensionMismatch(
            f"Target has {len(target)} entries but the design matrix has {n} rows",
            left=(n, len(rows[0])),
            right=(len(target), 1),
        )
    if max(target) == min(target):
        raise DegenerateTarget(target_name)

    y = [[value] for value in target]
    xt = transpose(rows)
    xtx = multiply(xt, rows)
    xtx_inv = invert(xtx, epsilon=epsilon)
    xty = multiply(xt, y)
    beta = [row[0] for row in multiply(xtx_inv, xty)]

    if not all(math.isfinite(b) for b in beta):
        raise SingularMatrix("Solver produced non-finite coefficients")

    fitted = [sum(x * b for x, b in zip(row, beta)) for row in rows]
    mean = sum(target) / n
    residuals = [obs - pred for obs, pred in zip(target, fitted)]
    ss_tot = sum((obs - mean) ** 2 for obs in target)

    return OLSFit(beta=beta, fitted=fitted, residuals=residuals, ss_tot=ss_tot)


def solve_ols(
    design: DesignMatrix,
    precision: PrecisionConfig | None = None,
    epsilon: float = DEFAULT_EPSILON,
) -> RegressionResult:
    """
    Fit OLS on *design* and return the presentation-ready result.

    Args:
        design:    Output of ``build_design_matrix``.
        precision: Decimal places for intercept, coefficients and R-squared.
        epsilon:   Pivot threshold handed to the matrix inverse.

    Returns:
        ``RegressionResult`` with rounded values and the raw ones attached.
    """
    precision = precision or PrecisionConfig()
    fit = fit_ols(
        design.rows,
        design.target,
        epsilon=epsilon,
        target_name=design.target_name.value,
    )

    raw_coefficients = dict(zip(design.channels, fit.slopes))
    result = RegressionResult(
        target=design.target_name,
        intercept=round_half_up(fit.intercept, precision.intercept_decimals),
        coefficients={
            ch: round_half_up(value, precision.coefficient_decimals)
            for ch, value in raw_coefficients.items()
        },
        r_squared=round_half_up(fit.r_squared, precision.r_squared_decimals),
        observations=design.n_observations,
        raw_intercept=fit.intercept,
        raw_coefficients=raw_coefficients,
        raw_r_squared=fit.r_squared,
    )

    logger.info(
        f"OLS fit complete.  target={design.target_name.value}  "
        f"n={result.observations}  channels={len(design.channels)}  "
        f"R2={result.r_squared:.4f}"
    )
    return result
