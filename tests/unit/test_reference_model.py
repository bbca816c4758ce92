"""
Tests for the reference Earth/Mars valuation model - valuation/reference.py.
"""

import pytest

from valuation_risk.data.inputs import with_path_value
from valuation_risk.data.schemas import ValuationResult
from valuation_risk.errors import ValuationFailureError
from valuation_risk.valuation.base import evaluate
from valuation_risk.valuation.reference import (
    DEFAULT_BASE_INPUTS,
    ReferenceValuationModel,
    default_base_inputs,
)


class TestReferenceModel:
    def test_positive_components(self, reference_model, base_inputs) -> None:
        result = reference_model(base_inputs)
        assert isinstance(result, ValuationResult)
        assert result.earth > 0
        assert result.mars > 0

    def test_deterministic(self, reference_model, base_inputs) -> None:
        assert reference_model(base_inputs) == reference_model(base_inputs)

    def test_dilution(self, reference_model, base_inputs) -> None:
        result = reference_model(base_inputs)
        assert result.total == pytest.approx((result.earth + result.mars) * 0.85)

    @pytest.mark.parametrize("rate", [0.10, 0.12, 0.15, 0.20])
    def test_non_increasing_in_discount_rate(self, reference_model, base_inputs, rate) -> None:
        lower = reference_model(with_path_value(base_inputs, "financial.discountRate", rate))
        higher = reference_model(with_path_value(base_inputs, "financial.discountRate", rate + 0.01))
        assert higher.earth <= lower.earth
        assert higher.mars <= lower.mars

    def test_later_colony_lowers_mars(self, reference_model, base_inputs) -> None:
        later = reference_model(with_path_value(base_inputs, "mars.firstColonyYear", 2035))
        assert later.mars < reference_model(base_inputs).mars
        assert later.earth == reference_model(base_inputs).earth

    def test_no_bootstrap(self, reference_model, base_inputs) -> None:
        without = reference_model(with_path_value(base_inputs, "mars.industrialBootstrap", False))
        assert without.mars == pytest.approx(0.1 * reference_model(base_inputs).mars)

    def test_zero_penetration(self, reference_model, base_inputs) -> None:
        result = reference_model(with_path_value(base_inputs, "earth.starlinkPenetration", 0.0))
        assert result.earth == 0.0

    def test_defaults_fill_missing(self) -> None:
        assert ReferenceValuationModel()({}).total > 0

    def test_default_inputs_copied(self) -> None:
        inputs = default_base_inputs()
        inputs["earth"]["launchVolume"] = 1.0
        assert DEFAULT_BASE_INPUTS["earth"]["launchVolume"] == 150.0


class TestEvaluate:
    def test_private_copy(self, base_inputs) -> None:
        def mutating(inputs):
            inputs["earth"]["launchVolume"] = 0.0
            return {"earth": 1.0, "mars": 1.0}

        evaluate(mutating, base_inputs)
        assert base_inputs["earth"]["launchVolume"] == 150.0

    def test_wraps_exceptions(self) -> None:
        def broken(inputs):
            raise ZeroDivisionError("division by zero")

        with pytest.raises(ValuationFailureError, match="ZeroDivisionError") as exc_info:
            evaluate(broken, {})
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)
