"""
Tests for input validation gates (HALT/WARN/PASS framework).
"""

import math

import pytest

from valuation_risk.errors import InvalidInputError
from valuation_risk.validation.gates import (
    ColonyYearGate,
    DiscountRateGate,
    FiniteInputsGate,
    FractionBoundsGate,
    GateStatus,
    LaunchVolumeGate,
    ValidationEngine,
    ensure_valid_inputs,
    validate_inputs,
)


class TestFiniteInputsGate:
    def test_pass(self, base_inputs) -> None:
        assert FiniteInputsGate().check(base_inputs).status == GateStatus.PASS

    def test_nan_halts(self) -> None:
        result = FiniteInputsGate().check({"earth": {"launchVolume": math.nan}})
        assert result.status == GateStatus.HALT
        assert "earth.launchVolume" in result.message

    def test_string_halts(self) -> None:
        result = FiniteInputsGate().check({"earth": {"launchVolume": "many"}})
        assert result.status == GateStatus.HALT

    def test_boolean_flags_allowed(self) -> None:
        result = FiniteInputsGate().check({"mars": {"industrialBootstrap": False}})
        assert result.status == GateStatus.PASS


class TestDiscountRateGate:
    @pytest.mark.parametrize(
        "rate, status",
        [
            (0.12, GateStatus.PASS),
            (0.0, GateStatus.PASS),
            (0.60, GateStatus.WARN),
            (-0.01, GateStatus.HALT),
            (1.0, GateStatus.HALT),
        ],
    )
    def test_bounds(self, rate: float, status: GateStatus) -> None:
        result = DiscountRateGate().check({"financial": {"discountRate": rate}})
        assert result.status == status

    def test_missing_passes(self) -> None:
        assert DiscountRateGate().check({}).status == GateStatus.PASS


class TestFractionBoundsGate:
    def test_penetration_above_one_halts(self) -> None:
        result = FractionBoundsGate().check({"earth": {"starlinkPenetration": 1.2}})
        assert result.status == GateStatus.HALT
        assert "starlinkPenetration" in result.message

    def test_negative_dilution_halts(self) -> None:
        result = FractionBoundsGate().check({"financial": {"dilutionFactor": -0.1}})
        assert result.status == GateStatus.HALT

    def test_bounds_inclusive(self) -> None:
        result = FractionBoundsGate().check({"earth": {"starlinkPenetration": 1.0}})
        assert result.status == GateStatus.PASS


class TestColonyYearGate:
    def test_out_of_range_halts(self) -> None:
        assert ColonyYearGate().check({"mars": {"firstColonyYear": 1990}}).status == GateStatus.HALT
        assert ColonyYearGate().check({"mars": {"firstColonyYear": 2300}}).status == GateStatus.HALT

    def test_in_range_passes(self) -> None:
        assert ColonyYearGate().check({"mars": {"firstColonyYear": 2030}}).status == GateStatus.PASS


class TestLaunchVolumeGate:
    def test_negative_halts(self) -> None:
        assert LaunchVolumeGate().check({"earth": {"launchVolume": -1.0}}).status == GateStatus.HALT

    def test_zero_passes(self) -> None:
        assert LaunchVolumeGate().check({"earth": {"launchVolume": 0.0}}).status == GateStatus.PASS


class TestValidationEngine:
    def test_default_inputs_pass(self, base_inputs) -> None:
        report = validate_inputs(base_inputs)
        assert report.passed
        assert report.overall_status == GateStatus.PASS

    def test_warn_still_passes(self, base_inputs) -> None:
        base_inputs["financial"]["discountRate"] = 0.7
        report = validate_inputs(base_inputs)
        assert report.passed
        assert report.overall_status == GateStatus.WARN
        assert len(report.warned_gates) == 1

    def test_ensure_raises_with_report(self, base_inputs) -> None:
        base_inputs["financial"]["discountRate"] = -0.05
        with pytest.raises(InvalidInputError) as exc_info:
            ensure_valid_inputs(base_inputs)
        assert exc_info.value.report is not None
        assert exc_info.value.report.halted_gates[0].gate_name == "discount_rate"

    def test_invalid_input_error_is_value_error(self, base_inputs) -> None:
        base_inputs["earth"]["starlinkPenetration"] = 2.0
        with pytest.raises(ValueError):
            ensure_valid_inputs(base_inputs)

    def test_custom_gates(self) -> None:
        engine = ValidationEngine(gates=[LaunchVolumeGate()])
        report = engine.validate_inputs({"financial": {"discountRate": -1.0}})
        assert report.passed

    def test_report_to_dict(self, base_inputs) -> None:
        data = validate_inputs(base_inputs).to_dict()
        assert data["overallStatus"] == "pass"
        assert data["nHalted"] == 0
        assert len(data["results"]) == 5
