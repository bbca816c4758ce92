"""
Tests for P&L attribution - attribution/.

[T1] Second-order Taylor attribution must reproduce quadratic valuation
changes exactly; unregistered changes fall back to a flagged estimate.
"""

import math

import pytest

from valuation_risk.attribution.decomposer import (
    ADDED_NOTE,
    ESTIMATE_NOTE,
    REMOVED_NOTE,
    UNEXPLAINED_LABEL,
    AttributionDecomposer,
    attribute,
)
from valuation_risk.attribution.registry import (
    ATTRIBUTION_REGISTRY,
    AttributionEntry,
    UnitKind,
)
from valuation_risk.data.inputs import with_path_value
from valuation_risk.data.schemas import Component, ValuationResult
from valuation_risk.greeks.results import GreekKind, GreekSet, GreekValue

PENETRATION_PATH = "earth.starlinkPenetration"


# =============================================================================
# Registry
# =============================================================================


class TestRegistry:
    def test_unit_scales(self) -> None:
        assert UnitKind.PERCENTAGE.scale == 100.0
        assert UnitKind.RATE.scale == 1000.0
        assert UnitKind.ABSOLUTE.scale == 1.0
        assert UnitKind.YEAR.scale == 1.0

    def test_gamma_source_rejected(self) -> None:
        with pytest.raises(ValueError, match="CRITICAL"):
            AttributionEntry("x", UnitKind.ABSOLUTE, GreekKind.GAMMA)

    def test_lookup_label(self) -> None:
        assert ATTRIBUTION_REGISTRY["mars.firstColonyYear"].lookup_label == "Time Decay"
        assert ATTRIBUTION_REGISTRY["earth.launchVolume"].lookup_label == "Launch Volume"

    def test_sources(self) -> None:
        assert ATTRIBUTION_REGISTRY["financial.discountRate"].greek_source is GreekKind.RHO
        assert ATTRIBUTION_REGISTRY["financial.volatility"].greek_source is GreekKind.VEGA


# =============================================================================
# Greek-based attribution
# =============================================================================


class TestTaylorAttribution:
    def test_toy_round_trip(self, toy_model, toy_inputs, toy_greeks, tolerances) -> None:
        compare = with_path_value(toy_inputs, PENETRATION_PATH, 0.17)
        result = attribute(toy_inputs, compare, toy_greeks, compare_value=toy_model(compare)["total"])

        assert len(result.details) == 1
        detail = result.details[0]
        assert detail.input_label == "Starlink Penetration"
        assert detail.delta_pnl == pytest.approx(900.0, abs=tolerances.numerical)
        assert detail.gamma_pnl == pytest.approx(0.0, abs=tolerances.numerical)
        assert result.actual_change == pytest.approx(900.0)
        assert result.residual == pytest.approx(0.0, abs=tolerances.numerical)

    def test_quadratic_exact(self, reference_model, base_inputs, reference_greeks, tolerances) -> None:
        """Total is quadratic in penetration, so Delta + Gamma explain the change."""
        compare = with_path_value(base_inputs, PENETRATION_PATH, 0.20)
        result = attribute(
            base_inputs,
            compare,
            reference_greeks,
            base_value=reference_model(base_inputs),
            compare_value=reference_model(compare),
        )
        assert result.gamma_pnl != 0.0
        assert result.residual == pytest.approx(0.0, abs=tolerances.integration)

    def test_rho_term(self, base_inputs, reference_greeks) -> None:
        compare = with_path_value(base_inputs, "financial.discountRate", 0.13)
        detail = attribute(base_inputs, compare, reference_greeks).details[0]
        rho = reference_greeks.get(GreekKind.RHO, "Discount Rate")
        assert detail.rho_pnl == pytest.approx(rho * 10.0)
        assert detail.rho_pnl < 0
        assert detail.delta_pnl == 0.0

    @pytest.mark.parametrize("year", [2032, 2028])
    def test_theta_uses_magnitude(self, base_inputs, reference_greeks, year) -> None:
        compare = with_path_value(base_inputs, "mars.firstColonyYear", year)
        detail = attribute(base_inputs, compare, reference_greeks).details[0]
        theta = reference_greeks.get(GreekKind.THETA, "Time Decay")
        assert detail.input_label == "Colony Year"
        assert detail.theta_pnl == pytest.approx(theta * 2.0)

    def test_vega_term(self, toy_greeks) -> None:
        base = {"financial": {"volatility": 0.20}}
        compare = {"financial": {"volatility": 0.25}}
        detail = attribute(base, compare, toy_greeks).details[0]
        assert detail.vega_pnl == pytest.approx(-38.75 * 5.0)
        assert detail.input_label == "Volatility"

    def test_details_sorted_by_path(self, base_inputs, reference_greeks) -> None:
        compare = with_path_value(base_inputs, "mars.populationGrowth", 0.6)
        compare = with_path_value(compare, "earth.launchVolume", 160.0)
        result = attribute(base_inputs, compare, reference_greeks)
        assert [d.path for d in result.details] == ["earth.launchVolume", "mars.populationGrowth"]

    def test_contribution_sums(self, base_inputs, reference_greeks) -> None:
        compare = with_path_value(base_inputs, "earth.launchVolume", 170.0)
        result = attribute(base_inputs, compare, reference_greeks)
        detail = result.details[0]
        assert detail.total_contribution == pytest.approx(detail.delta_pnl + detail.gamma_pnl)
        assert result.explained == pytest.approx(sum(d.total_contribution for d in result.details))
        assert result.residual is None


# =============================================================================
# Fallbacks and edge cases
# =============================================================================


class TestFallbacks:
    def test_unmapped_path_estimate(self, toy_greeks) -> None:
        base = {"earth": {"launchPriceDecline": 0.08}}
        compare = {"earth": {"launchPriceDecline": 0.10}}
        detail = attribute(base, compare, toy_greeks).details[0]
        assert detail.note == ESTIMATE_NOTE
        assert detail.input_label == "earth.launchPriceDecline"
        assert detail.delta_pnl == pytest.approx(7750.0 * (0.02 / 0.08) * 0.1)

    def test_missing_greek_estimate_from_zero(self, toy_greeks) -> None:
        base = {"earth": {"launchVolume": 0.0}}
        compare = {"earth": {"launchVolume": 2.0}}
        detail = attribute(base, compare, toy_greeks).details[0]
        assert detail.input_label == "Launch Volume"
        assert detail.note == ESTIMATE_NOTE
        assert detail.delta_pnl == pytest.approx(7750.0 * 2.0 * 0.1)

    def test_non_numeric_change(self, base_inputs, reference_greeks) -> None:
        compare = with_path_value(base_inputs, "mars.industrialBootstrap", False)
        result = attribute(base_inputs, compare, reference_greeks)
        detail = result.details[0]
        assert detail.total_contribution == 0.0
        assert "non-numeric" in detail.note

    def test_added_input_attributed_from_zero(self, toy_greeks) -> None:
        """A numeric input absent from the base scenario changes from 0."""
        result = attribute({"earth": {}}, {"earth": {"starlinkPenetration": 0.17}}, toy_greeks)
        detail = result.details[0]
        assert detail.change == pytest.approx(0.17)
        assert detail.delta_pnl == pytest.approx(450.0 * 17.0, rel=1e-6)
        assert detail.note == ADDED_NOTE
        assert "non-numeric" not in detail.note

    def test_removed_input_attributed_to_zero(self, toy_greeks) -> None:
        result = attribute({"earth": {"starlinkPenetration": 0.17}}, {"earth": {}}, toy_greeks)
        detail = result.details[0]
        assert detail.change == pytest.approx(-0.17)
        assert detail.delta_pnl == pytest.approx(-450.0 * 17.0, rel=1e-6)
        assert detail.note == REMOVED_NOTE

    def test_added_unmapped_input_keeps_estimate_flag(self, toy_greeks) -> None:
        detail = attribute({}, {"earth": {"launchPriceDecline": 0.1}}, toy_greeks).details[0]
        assert detail.note == f"{ADDED_NOTE}; {ESTIMATE_NOTE}"
        assert detail.delta_pnl == pytest.approx(7750.0 * 0.1 * 0.1)

    def test_below_threshold_ignored(self, base_inputs, reference_greeks) -> None:
        compare = with_path_value(base_inputs, "earth.launchVolume", 150.0 + 1e-9)
        assert attribute(base_inputs, compare, reference_greeks).details == ()

    def test_custom_threshold(self, base_inputs, reference_greeks) -> None:
        compare = with_path_value(base_inputs, "earth.launchVolume", 150.5)
        decomposer = AttributionDecomposer(change_threshold=1.0)
        assert decomposer.attribute(base_inputs, compare, reference_greeks).details == ()

    def test_unexplained_gap(self, base_inputs, reference_greeks) -> None:
        base_total = reference_greeks.baseline.total
        result = attribute(base_inputs, base_inputs, reference_greeks, compare_value=base_total + 5.0)
        assert len(result.details) == 1
        detail = result.details[0]
        assert detail.input_label == UNEXPLAINED_LABEL
        assert detail.methodology_pnl == pytest.approx(5.0)
        assert result.delta_pnl == 0.0
        assert result.residual == pytest.approx(0.0)

    def test_identical_no_gap(self, base_inputs, reference_greeks) -> None:
        result = attribute(
            base_inputs, base_inputs, reference_greeks, compare_value=reference_greeks.baseline
        )
        assert result.details == ()

    def test_non_finite_term_zeroed(self) -> None:
        greeks = GreekSet(
            baseline=ValuationResult(10.0, 0.0, 10.0),
            entries={
                Component.TOTAL: {
                    GreekKind.DELTA: {"Launch Volume": GreekValue(math.inf, "$B/unit")}
                }
            },
        )
        detail = attribute(
            {"earth": {"launchVolume": 1.0}}, {"earth": {"launchVolume": 2.0}}, greeks
        ).details[0]
        assert detail.delta_pnl == 0.0
        assert "non-finite delta" in detail.note


class TestSerialization:
    def test_to_dict(self, toy_inputs, toy_greeks) -> None:
        compare = with_path_value(toy_inputs, PENETRATION_PATH, 0.16)
        data = attribute(toy_inputs, compare, toy_greeks).to_dict()
        assert data["details"][0]["inputLabel"] == "Starlink Penetration"
        assert "note" not in data["details"][0]
        assert data["compareValue"] is None

    def test_to_frame(self, toy_inputs, toy_greeks) -> None:
        compare = with_path_value(toy_inputs, PENETRATION_PATH, 0.16)
        frame = attribute(toy_inputs, compare, toy_greeks).to_frame()
        assert len(frame) == 1
        assert "total_contribution" in frame.columns
