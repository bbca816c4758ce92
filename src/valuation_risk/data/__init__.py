"""
Input and output data model for the valuation risk engine.
"""

from valuation_risk.data.inputs import (
    InputParameterSet,
    get_path,
    has_path,
    iter_leaf_paths,
    leaf_paths,
    numeric_leaves,
    with_path_value,
    with_path_values,
)
from valuation_risk.data.schemas import (
    COLONY_YEAR_PATH,
    DEFAULT_INPUT_DEFINITIONS,
    DISCOUNT_RATE_PATH,
    VOLATILITY_PATH,
    BumpProfile,
    Component,
    InputDefinition,
    ValuationResult,
)

__all__ = [
    "InputParameterSet",
    "get_path",
    "has_path",
    "iter_leaf_paths",
    "leaf_paths",
    "numeric_leaves",
    "with_path_value",
    "with_path_values",
    "COLONY_YEAR_PATH",
    "DEFAULT_INPUT_DEFINITIONS",
    "DISCOUNT_RATE_PATH",
    "VOLATILITY_PATH",
    "BumpProfile",
    "Component",
    "InputDefinition",
    "ValuationResult",
]
