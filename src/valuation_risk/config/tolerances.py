"""
Centralized tolerance framework for the valuation risk engine.

Tolerance Tiers:
    Tier 1 (Analytical): Deterministic finite differences on smooth functions
    Tier 2 (Model): Taylor-expansion and reference-model checks
    Tier 3 (Stochastic): CLT-derived, Monte Carlo statistics

References:
    [T1] Higham (2002) "Accuracy and Stability of Numerical Algorithms"
    [T1] Glasserman (2003) Ch. 3-4 - Monte Carlo error bounds
"""

from typing import Final

import numpy as np

# =============================================================================
# Engine Thresholds
# =============================================================================

#: Input changes smaller than this are ignored by attribution
ATTRIBUTION_CHANGE_THRESHOLD: Final[float] = 1e-7

#: Valuation gaps smaller than this are treated as no gap
VALUATION_GAP_TOLERANCE: Final[float] = 1e-9


# =============================================================================
# Tier 1: Analytical Tolerances (Deterministic)
# =============================================================================

#: Ordering checks (percentiles, VaR dominance)
ANTI_PATTERN_TOLERANCE: Final[float] = 1e-10

#: Finite-difference Greeks on linear/quadratic toy functions
#: Differences of O(1e3) valuations carry ~1e-13 relative error, divided by h
GREEKS_NUMERICAL_TOLERANCE: Final[float] = 1e-6


# =============================================================================
# Tier 2: Model Tolerances
# =============================================================================

#: Attribution vs exact change for smooth single-input moves (relative)
ATTRIBUTION_TAYLOR_TOLERANCE: Final[float] = 1e-6

#: Greeks vs independent re-derivation on the reference model (relative)
GREEKS_VALIDATION_TOLERANCE: Final[float] = 1e-9


# =============================================================================
# Tier 3: Stochastic Tolerances (CLT-Derived)
# =============================================================================


def mc_tolerance(n_runs: int, sigma: float = 1.0, confidence: float = 3.0) -> float:
    """
    Calculate CLT-derived Monte Carlo tolerance for a sample mean.

    [T1] Standard error of the mean is σ/√N; 3σ gives a 99.7% interval.

    Parameters
    ----------
    n_runs : int
        Number of Monte Carlo iterations
    sigma : float
        Standard deviation of the sampled quantity
    confidence : float
        Number of standard errors

    Returns
    -------
    float
        Tolerance for sample mean vs expected value

    Examples
    --------
    >>> round(mc_tolerance(10_000, sigma=0.05), 4)
    0.0015
    """
    return confidence * sigma / np.sqrt(n_runs)


# =============================================================================
# Tolerance Registry (For Dynamic Access)
# =============================================================================

TOLERANCE_REGISTRY: dict[str, float] = {
    "attribution_change": ATTRIBUTION_CHANGE_THRESHOLD,
    "valuation_gap": VALUATION_GAP_TOLERANCE,
    "anti_pattern": ANTI_PATTERN_TOLERANCE,
    "greeks_numerical": GREEKS_NUMERICAL_TOLERANCE,
    "attribution_taylor": ATTRIBUTION_TAYLOR_TOLERANCE,
    "greeks_validation": GREEKS_VALIDATION_TOLERANCE,
}


def get_tolerance(name: str) -> float:
    """
    Get tolerance by name from registry.

    Raises
    ------
    KeyError
        If tolerance name not found
    """
    if name not in TOLERANCE_REGISTRY:
        available = ", ".join(sorted(TOLERANCE_REGISTRY.keys()))
        raise KeyError(f"Unknown tolerance '{name}'. Available: {available}")
    return TOLERANCE_REGISTRY[name]
