"""
Valuation function protocol and the reference valuation model.
"""

from valuation_risk.valuation.base import ValuationFunction, evaluate
from valuation_risk.valuation.reference import (
    DEFAULT_BASE_INPUTS,
    ReferenceValuationModel,
    default_base_inputs,
)

__all__ = [
    "ValuationFunction",
    "evaluate",
    "DEFAULT_BASE_INPUTS",
    "ReferenceValuationModel",
    "default_base_inputs",
]
