"""
Dense matrix primitives for the OLS solver.

Matrices are row-major sequences of sequences of floats.  Every function
returns a new ``list[list[float]]`` and never mutates its input.

The inverse uses Gauss-Jordan elimination with partial pivoting.  Pivot
selection is deterministic: the largest absolute value in the current
column wins and ties go to the lowest row index.
"""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from mmm_attribution.core.exceptions import DimensionMismatch, SingularMatrix

Matrix = list[list[float]]
MatrixLike = Sequence[Sequence[float]]

DEFAULT_EPSILON = 1e-12


def shape(m: MatrixLike) -> tuple[int, int]:
    """Return ``(rows, cols)``; ragged rows raise ``DimensionMismatch``."""
    rows = len(m)
    if rows == 0:
        return 0, 0
    cols = len(m[0])
    for i, row in enumerate(m):
        if len(row) != cols:
            raise DimensionMismatch(
                f"Ragged matrix: row {i} has {len(row)} columns, expected {cols}"
            )
    return rows, cols


def identity(n: int) -> Matrix:
    return [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]


def transpose(m: MatrixLike) -> Matrix:
    return [list(col) for col in zip(*m)]


def multiply(a: MatrixLike, b: MatrixLike) -> Matrix:
    """
    Matrix product ``a @ b``.

    Raises:
        DimensionMismatch: If ``cols(a) != rows(b)`` or either input is ragged.
    """
    rows_a, cols_a = shape(a)
    rows_b, cols_b = shape(b)
    if cols_a != rows_b:
        raise DimensionMismatch(
            f"Cannot multiply {rows_a}x{cols_a} by {rows_b}x{cols_b}",
            left=(rows_a, cols_a),
            right=(rows_b, cols_b),
        )

    result: Matrix = [[0.0] * cols_b for _ in range(rows_a)]
    for i in range(rows_a):
        row_a = a[i]
        out = result[i]
        for j in range(cols_b):
            acc = 0.0
            for k in range(cols_a):
                acc += row_a[k] * b[k][j]
            out[j] = acc
    return result


def select_pivot(aug: MatrixLike, column: int, start: int) -> int:
    """
    Index of the pivot row for *column*, searching rows ``start..n-1``.

    Only a strictly larger magnitude replaces the current best, so the
    lowest row index wins ties.
    """
    best = start
    best_abs = abs(aug[start][column])
    for k in range(start + 1, len(aug)):
        candidate = abs(aug[k][column])
        if candidate > best_abs:
            best = k
            best_abs = candidate
    return best


def invert(m: MatrixLike, epsilon: float = DEFAULT_EPSILON) -> Matrix:
    """
    Inverse of a square matrix by Gauss-Jordan elimination.

    A pivot in column ``i`` whose magnitude falls below
    ``epsilon * max(1, max_k |m[k][i]|)`` is treated as zero.  For columns
    with entries of at most 1 this is the plain ``epsilon``; columns of
    large magnitude (normal equations of raw spend) scale it with them.

    As a consequence a matrix that is merely ill-conditioned, whose
    residual pivot in some column is nonzero but below ``epsilon`` times
    that column's largest entry, is reported as ``SingularMatrix`` rather
    than inverted.

    Raises:
        DimensionMismatch: If *m* is not square.
        SingularMatrix: If some column has no usable pivot.
    """
    rows, cols = shape(m)
    if rows != cols:
        raise DimensionMismatch(
            f"Only square matrices can be inverted, got {rows}x{cols}",
            left=(rows, cols),
        )
    n = rows
    if n == 0:
        return []

    thresholds = [
        epsilon * max(1.0, max(abs(m[k][i]) for k in range(n))) for i in range(n)
    ]

    eye = identity(n)
    aug: Matrix = [[float(v) for v in m[i]] + eye[i] for i in range(n)]
    width = 2 * n

    for i in range(n):
        p = select_pivot(aug, i, i)
        pivot = aug[p][i]
        threshold = thresholds[i]
        if abs(pivot) < threshold:
            raise SingularMatrix(
                f"Matrix is singular: no pivot above {threshold:.3g} in column {i}. "
                "Input columns are collinear or there are fewer observations "
                "than parameters.",
                column=i,
            )
        if p != i:
            aug[i], aug[p] = aug[p], aug[i]
            logger.debug(f"Pivot swap: row {p} <-> row {i}")

        pivot_row = aug[i]
        for j in range(width):
            pivot_row[j] /= pivot

        for k in range(n):
            if k == i:
                continue
            factor = aug[k][i]
            if factor == 0.0:
                continue
            row_k = aug[k]
            for j in range(width):
                row_k[j] -= factor * pivot_row[j]

    return [row[n:] for row in aug]
