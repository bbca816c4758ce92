"""
Bump-and-reprice Greeks.

Exports:
- DifferentiationEngine, calculate_all_greeks: finite-difference engine
- GreekSet, GreekValue, GreekWarning, GreekKind: result containers
- NaturalInput, SyntheticVolatility, SyntheticTime, SyntheticDiscountRate:
  risk dimensions
- factor_adjusted_greeks: systematic / idiosyncratic Delta split
"""

from valuation_risk.greeks.dimensions import (
    EARTH_UNCERTAINTY_PREMIUM,
    MARS_UNCERTAINTY_PREMIUM,
    NaturalInput,
    RepricingContext,
    RiskDimension,
    SyntheticDiscountRate,
    SyntheticTime,
    SyntheticVolatility,
    build_dimensions,
)
from valuation_risk.greeks.factor_adjustment import (
    DEFAULT_FACTOR_CORRELATION,
    DEFAULT_FACTOR_CORRELATIONS,
    FactorAdjustedGreek,
    factor_adjusted_greeks,
)
from valuation_risk.greeks.finite_difference import (
    DifferentiationEngine,
    calculate_all_greeks,
    first_derivative,
    second_derivative,
)
from valuation_risk.greeks.results import (
    GreekKind,
    GreekSet,
    GreekValue,
    GreekWarning,
)

__all__ = [
    # Engine
    "DifferentiationEngine",
    "calculate_all_greeks",
    "first_derivative",
    "second_derivative",
    # Results
    "GreekKind",
    "GreekSet",
    "GreekValue",
    "GreekWarning",
    # Dimensions
    "EARTH_UNCERTAINTY_PREMIUM",
    "MARS_UNCERTAINTY_PREMIUM",
    "NaturalInput",
    "RepricingContext",
    "RiskDimension",
    "SyntheticDiscountRate",
    "SyntheticTime",
    "SyntheticVolatility",
    "build_dimensions",
    # Factor adjustment
    "DEFAULT_FACTOR_CORRELATION",
    "DEFAULT_FACTOR_CORRELATIONS",
    "FactorAdjustedGreek",
    "factor_adjusted_greeks",
]
