"""
Input validation gates.
"""

from valuation_risk.validation.gates import (
    ColonyYearGate,
    DiscountRateGate,
    FiniteInputsGate,
    FractionBoundsGate,
    GateResult,
    GateStatus,
    LaunchVolumeGate,
    ValidationEngine,
    ValidationGate,
    ValidationReport,
    ensure_valid_inputs,
    validate_inputs,
)

__all__ = [
    "ColonyYearGate",
    "DiscountRateGate",
    "FiniteInputsGate",
    "FractionBoundsGate",
    "GateResult",
    "GateStatus",
    "LaunchVolumeGate",
    "ValidationEngine",
    "ValidationGate",
    "ValidationReport",
    "ensure_valid_inputs",
    "validate_inputs",
]
