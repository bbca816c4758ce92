"""
Property-based tests for Monte Carlo statistics and VaR.

Uses Hypothesis to verify:
1. Summary statistics are always ordered
2. Histograms are normalised and account for every sample
3. Nearest-rank percentiles are monotone in p
4. VaR is non-negative and the combined method dominates its parts

References:
    [T1] Jorion (2006) Ch. 5 - VaR as a quantile of the loss distribution
"""

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from valuation_risk.data.schemas import Component, ValuationResult
from valuation_risk.greeks.results import GreekKind, GreekSet, GreekValue
from valuation_risk.risk.var import compute_var
from valuation_risk.simulation.statistics import (
    compute_distribution,
    compute_histogram,
    nearest_rank_percentile,
)

# =============================================================================
# Strategy Definitions
# =============================================================================

finite_value = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)
sample_strategy = st.lists(finite_value, min_size=1, max_size=200)
probability_strategy = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)
delta_strategy = st.floats(min_value=-1e4, max_value=1e4, allow_nan=False, allow_infinity=False)
confidence_strategy = st.sampled_from([0.95, 0.99, 0.999])


def _greeks(earth_delta: float, mars_delta: float) -> GreekSet:
    def _table(value: float) -> dict:
        return {GreekKind.DELTA: {"Launch Volume": GreekValue(value, "$B/unit")}}

    return GreekSet(
        baseline=ValuationResult(earth=1000.0, mars=500.0, total=1500.0),
        entries={
            Component.EARTH: _table(earth_delta),
            Component.MARS: _table(mars_delta),
            Component.TOTAL: _table(earth_delta + mars_delta),
        },
    )


# =============================================================================
# Statistics
# =============================================================================


class TestDistributionProperty:
    @given(values=sample_strategy)
    @settings(max_examples=200)
    def test_ordered(self, values: list[float]) -> None:
        dist = compute_distribution(values, bin_count=10)
        assert dist.is_ordered
        assert dist.n == len(values)
        assert dist.std_dev >= 0

    @given(values=sample_strategy, bins=st.integers(min_value=1, max_value=60))
    @settings(max_examples=200)
    def test_histogram_normalised(self, values: list[float], bins: int) -> None:
        hist = compute_histogram(np.sort(np.asarray(values)), bins)
        assert len(hist.counts) == bins
        assert max(hist.counts) == pytest.approx(100.0)
        assert min(hist.counts) >= 0.0

    @given(values=sample_strategy, p1=probability_strategy, p2=probability_strategy)
    @settings(max_examples=200)
    def test_percentile_monotone(self, values: list[float], p1: float, p2: float) -> None:
        arr = np.sort(np.asarray(values))
        lo, hi = sorted((p1, p2))
        assert nearest_rank_percentile(arr, lo) <= nearest_rank_percentile(arr, hi)


# =============================================================================
# VaR
# =============================================================================


class TestVaRProperty:
    @given(earth=delta_strategy, mars=delta_strategy, confidence=confidence_strategy)
    @settings(max_examples=100)
    def test_greeks_var_sign_invariant(self, earth: float, mars: float, confidence: float) -> None:
        up = compute_var("greeks", confidence, 10, greeks=_greeks(earth, mars))
        down = compute_var("greeks", confidence, 10, greeks=_greeks(-earth, -mars))
        assert up.var_value >= 0
        assert up.var_value == pytest.approx(down.var_value)
        assert up.expected_shortfall == pytest.approx(1.2 * up.var_value)

    @given(
        earth=delta_strategy,
        mars=delta_strategy,
        values=st.lists(finite_value, min_size=5, max_size=100),
        confidence=confidence_strategy,
    )
    @settings(max_examples=100)
    def test_combined_dominates(
        self, earth: float, mars: float, values: list[float], confidence: float
    ) -> None:
        greeks = _greeks(earth, mars)
        samples = {
            "earth": np.asarray(values),
            "mars": np.asarray(values) * 0.5,
            "total": np.asarray(values) * 1.5,
        }
        kwargs = dict(greeks=greeks, distribution=samples)
        parametric = compute_var("greeks", confidence, 10, **kwargs)
        empirical = compute_var("monte_carlo", confidence, 10, **kwargs)
        combined = compute_var("combined", confidence, 10, **kwargs)

        assert empirical.var_value >= 0
        assert combined.var_value >= parametric.var_value - 1e-9
        for name in ("earth", "mars"):
            assert combined.components[name] >= parametric.components[name] - 1e-9
            assert combined.components[name] >= empirical.components[name] - 1e-9
