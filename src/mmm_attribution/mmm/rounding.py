"""Presentation rounding shared by the solver, decomposer and charts."""

from __future__ import annotations

import math


def round_half_up(value: float, decimals: int) -> float:
    """
    Round to *decimals* places with halves going towards +infinity.

    Unlike ``round()``, halves never go to the even neighbour:
    ``round_half_up(0.125, 2) == 0.13``.
    """
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor
