"""
Value-at-Risk.
"""

from valuation_risk.risk.var import (
    ASSUMED_VOLATILITIES,
    Z_SCORES,
    VaRCombiner,
    VaRMethod,
    VaRResult,
    compute_var,
    z_score,
)

__all__ = [
    "ASSUMED_VOLATILITIES",
    "Z_SCORES",
    "VaRCombiner",
    "VaRMethod",
    "VaRResult",
    "compute_var",
    "z_score",
]
