"""
Property-based tests for finite-difference Greeks.

Uses Hypothesis to verify:
1. Delta of a linear model is its slope per display unit, in both schemes
2. Gamma of a linear model vanishes; Gamma of a quadratic is constant
3. Rho is negative for any positive valuation and discount rate
4. Vega of each component is fixed by its uncertainty premium

References:
    [T1] Central differences are exact for quadratics
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from valuation_risk.config.settings import DifferentiationMode, GreeksConfig
from valuation_risk.data.schemas import Component
from valuation_risk.greeks.finite_difference import calculate_all_greeks
from valuation_risk.greeks.results import GreekKind

# =============================================================================
# Strategy Definitions
# =============================================================================

penetration_strategy = st.floats(min_value=0.05, max_value=0.90, allow_nan=False, allow_infinity=False)
intercept_strategy = st.floats(min_value=-1e4, max_value=1e4, allow_nan=False, allow_infinity=False)
slope_strategy = st.floats(min_value=-1e5, max_value=1e5, allow_nan=False, allow_infinity=False)
value_strategy = st.floats(min_value=1.0, max_value=1e5, allow_nan=False, allow_infinity=False)
rate_strategy = st.floats(min_value=0.0, max_value=0.30, allow_nan=False, allow_infinity=False)
mode_strategy = st.sampled_from(list(DifferentiationMode))

NATURAL_ONLY = GreeksConfig(include_synthetic=False)
PENETRATION = "Starlink Penetration"


def _inputs(penetration: float) -> dict:
    return {"earth": {"starlinkPenetration": penetration}}


# =============================================================================
# Natural Inputs
# =============================================================================


class TestLinearModelProperty:
    """[T1] Delta of a + b·p is b per unit, i.e. 0.01·b per 1% point."""

    @given(p=penetration_strategy, a=intercept_strategy, b=slope_strategy, mode=mode_strategy)
    @settings(max_examples=100)
    def test_delta_is_slope(self, p: float, a: float, b: float, mode: DifferentiationMode) -> None:
        def model(inputs):
            return {"earth": a + b * inputs["earth"]["starlinkPenetration"], "mars": 0.0}

        greeks = calculate_all_greeks(model, _inputs(p), GreeksConfig(mode=mode, include_synthetic=False))
        assert greeks.get(GreekKind.DELTA, PENETRATION) == pytest.approx(0.01 * b, rel=1e-6, abs=1e-6)

    @given(p=penetration_strategy, a=intercept_strategy, b=slope_strategy)
    @settings(max_examples=100)
    def test_gamma_vanishes(self, p: float, a: float, b: float) -> None:
        def model(inputs):
            return {"earth": a + b * inputs["earth"]["starlinkPenetration"], "mars": 0.0}

        greeks = calculate_all_greeks(model, _inputs(p), NATURAL_ONLY)
        assert greeks.get(GreekKind.GAMMA, PENETRATION) == pytest.approx(0.0, abs=1e-6)


class TestQuadraticModelProperty:
    """[T1] For c·p², central Delta = 2cp·0.01 and Gamma = 2c·0.0001."""

    @given(p=penetration_strategy, c=slope_strategy)
    @settings(max_examples=100)
    def test_central_exact(self, p: float, c: float) -> None:
        def model(inputs):
            x = inputs["earth"]["starlinkPenetration"]
            return {"earth": c * x * x, "mars": 0.0}

        greeks = calculate_all_greeks(model, _inputs(p), NATURAL_ONLY)
        assert greeks.get(GreekKind.DELTA, PENETRATION) == pytest.approx(0.02 * c * p, rel=1e-6, abs=1e-6)
        assert greeks.get(GreekKind.GAMMA, PENETRATION) == pytest.approx(2e-4 * c, rel=1e-4, abs=1e-6)


# =============================================================================
# Synthetic Dimensions
# =============================================================================


class TestSyntheticProperty:
    """Signs and premiums of the synthetic Greeks."""

    @given(earth=value_strategy, mars=value_strategy, rate=rate_strategy)
    @settings(max_examples=100)
    def test_rho_negative(self, earth: float, mars: float, rate: float) -> None:
        inputs = {"financial": {"discountRate": rate}}
        greeks = calculate_all_greeks(lambda x: {"earth": earth, "mars": mars}, inputs)
        assert greeks.get(GreekKind.RHO, "Discount Rate") < 0

    @given(earth=value_strategy, mars=value_strategy)
    @settings(max_examples=100)
    def test_vega_premiums(self, earth: float, mars: float) -> None:
        greeks = calculate_all_greeks(lambda x: {"earth": earth, "mars": mars}, {})
        label = "Overall Volatility"
        assert greeks.get(GreekKind.VEGA, label, Component.EARTH) == pytest.approx(-0.005 * earth)
        assert greeks.get(GreekKind.VEGA, label, Component.MARS) == pytest.approx(-0.015 * mars)
        assert greeks.get(GreekKind.VEGA, label) < 0

    @given(earth=value_strategy, mars=value_strategy, rate=rate_strategy)
    @settings(max_examples=100)
    def test_theta_spares_earth(self, earth: float, mars: float, rate: float) -> None:
        inputs = {"mars": {"firstColonyYear": 2030}, "financial": {"discountRate": rate}}
        greeks = calculate_all_greeks(lambda x: {"earth": earth, "mars": mars}, inputs)
        assert greeks.get(GreekKind.THETA, "Time Decay", Component.EARTH) == 0.0
        assert greeks.get(GreekKind.THETA, "Time Decay", Component.MARS) <= 0.0
