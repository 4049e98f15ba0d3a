"""
Linear marketing-mix model for mmm-attribution.

Design-matrix construction, the OLS solver and contribution
decomposition.
"""

from mmm_attribution.mmm.design import (
    DesignMatrix,
    align_outcomes,
    build_design_matrix,
    channel_names,
    pivot_spend,
    spend_row,
)
from mmm_attribution.mmm.ols import (
    OLSFit,
    fit_ols,
    solve_ols,
)
from mmm_attribution.mmm.decomposition import (
    decompose_contributions,
    model_parameters,
)
from mmm_attribution.mmm.rounding import round_half_up

__all__ = [
    "DesignMatrix",
    "align_outcomes",
    "build_design_matrix",
    "channel_names",
    "pivot_spend",
    "spend_row",
    "OLSFit",
    "fit_ols",
    "solve_ols",
    "decompose_contributions",
    "model_parameters",
    "round_half_up",
]
