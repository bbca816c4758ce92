"""
Centralized pytest fixtures for the valuation-risk test suite.

This module provides shared fixtures used across all test categories:
- unit/
- properties/
- integration/

Fixture Categories:
1. Valuation Functions - Linear toy model and the reference model
2. Inputs - Base input parameter sets
3. Tolerances - Tiered tolerance settings
"""

from dataclasses import dataclass
from typing import Any

import pytest

from valuation_risk.config.settings import DifferentiationMode, GreeksConfig
from valuation_risk.greeks.finite_difference import calculate_all_greeks
from valuation_risk.greeks.results import GreekSet
from valuation_risk.valuation.reference import ReferenceValuationModel, default_base_inputs

# =============================================================================
# TOLERANCE TIERS
# =============================================================================


@dataclass(frozen=True)
class ToleranceTiers:
    """
    Tiered tolerance framework for different test types.

    Derived from precision requirements, not ad hoc.
    """

    # Anti-pattern tests: Very tight (fundamental violations)
    anti_pattern: float = 1e-10

    # Finite differences on linear/quadratic functions
    numerical: float = 1e-6

    # Integration tests: Workflow correctness
    integration: float = 1e-4


TOLERANCES = ToleranceTiers()


@pytest.fixture(scope="session")
def tolerances() -> ToleranceTiers:
    """Provide tiered tolerance settings for all tests."""
    return TOLERANCES


# =============================================================================
# VALUATION FUNCTIONS
# =============================================================================


def linear_toy_model(inputs: dict[str, Any]) -> dict[str, float]:
    """V = 1000 + 45000 · penetration, all value on Earth."""
    value = 1000.0 + 45000.0 * inputs["earth"]["starlinkPenetration"]
    return {"earth": value, "mars": 0.0, "total": value}


class CountingModel:
    """Wraps a valuation function and counts calls."""

    def __init__(self, valuate):
        self.valuate = valuate
        self.calls = 0

    def __call__(self, inputs):
        self.calls += 1
        return self.valuate(inputs)


@pytest.fixture
def toy_model():
    """Linear toy valuation function."""
    return linear_toy_model


@pytest.fixture
def toy_inputs() -> dict[str, Any]:
    """Inputs for the toy model (penetration 15%)."""
    return {"earth": {"starlinkPenetration": 0.15}}


@pytest.fixture(scope="session")
def reference_model() -> ReferenceValuationModel:
    """Deterministic reference Earth/Mars model."""
    return ReferenceValuationModel()


@pytest.fixture
def base_inputs() -> dict[str, Any]:
    """Fresh default base inputs."""
    return default_base_inputs()


@pytest.fixture
def counting_model():
    """Factory for call-counting wrappers."""
    return CountingModel


# =============================================================================
# GREEKS
# =============================================================================


@pytest.fixture
def toy_greeks(toy_model, toy_inputs) -> GreekSet:
    """Central-difference Greeks of the toy model."""
    return calculate_all_greeks(toy_model, toy_inputs)


@pytest.fixture
def reference_greeks(reference_model, base_inputs) -> GreekSet:
    """Central-difference Greeks of the reference model."""
    return calculate_all_greeks(
        reference_model, base_inputs, GreeksConfig(mode=DifferentiationMode.CENTRAL)
    )
