"""
Validation Gates - HALT/PASS framework for valuation inputs.

Runs before any valuation call so that out-of-domain inputs are rejected
without a partial result. Gates can HALT (reject with diagnostics), WARN
(allow but flag) or PASS.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from valuation_risk.data.inputs import get_path, is_number, iter_leaf_paths
from valuation_risk.data.schemas import COLONY_YEAR_PATH, DISCOUNT_RATE_PATH
from valuation_risk.errors import InvalidInputError

logger = logging.getLogger(__name__)


class GateStatus(Enum):
    """Status of a validation gate."""
    PASS = "pass"
    HALT = "halt"
    WARN = "warn"


@dataclass(frozen=True)
class GateResult:
    """
    Result of a validation gate check.

    Attributes
    ----------
    status : GateStatus
        PASS, HALT, or WARN
    gate_name : str
        Name of the gate that was checked
    message : str
        Explanation of the result
    value : Any, optional
        The value that was checked
    threshold : Any, optional
        The threshold that was applied
    """

    status: GateStatus
    gate_name: str
    message: str
    value: Any | None = None
    threshold: Any | None = None

    @property
    def passed(self) -> bool:
        """Check if gate passed (PASS or WARN)."""
        return self.status != GateStatus.HALT


@dataclass(frozen=True)
class ValidationReport:
    """
    Complete validation report from all gates.

    Attributes
    ----------
    results : tuple[GateResult, ...]
        Results from all gates
    """

    results: tuple[GateResult, ...]

    @property
    def overall_status(self) -> GateStatus:
        """Get worst status across all gates."""
        if any(r.status == GateStatus.HALT for r in self.results):
            return GateStatus.HALT
        elif any(r.status == GateStatus.WARN for r in self.results):
            return GateStatus.WARN
        return GateStatus.PASS

    @property
    def passed(self) -> bool:
        """Check if all gates passed (no HALTs)."""
        return self.overall_status != GateStatus.HALT

    @property
    def halted_gates(self) -> list[GateResult]:
        """Get all gates that halted."""
        return [r for r in self.results if r.status == GateStatus.HALT]

    @property
    def warned_gates(self) -> list[GateResult]:
        """Get all gates that warned."""
        return [r for r in self.results if r.status == GateStatus.WARN]

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "overallStatus": self.overall_status.value,
            "passed": self.passed,
            "nHalted": len(self.halted_gates),
            "nWarned": len(self.warned_gates),
            "results": [
                {
                    "gate": r.gate_name,
                    "status": r.status.value,
                    "message": r.message,
                    "value": r.value,
                    "threshold": r.threshold,
                }
                for r in self.results
            ],
        }


# =============================================================================
# Gate Implementations
# =============================================================================

class ValidationGate:
    """
    Base class for input validation gates.

    Subclasses implement check() to validate an input parameter set.
    """

    name: str = "base_gate"

    def check(self, inputs: Mapping[str, Any]) -> GateResult:
        """
        Check the inputs.

        Parameters
        ----------
        inputs : Mapping
            Nested input parameter set

        Returns
        -------
        GateResult
            Validation result
        """
        raise NotImplementedError

    def _pass(self, message: str, value: Any = None) -> GateResult:
        return GateResult(status=GateStatus.PASS, gate_name=self.name, message=message, value=value)


class FiniteInputsGate(ValidationGate):
    """
    Every leaf must be a finite number or a boolean flag.

    [T1] NaN or infinite inputs make every downstream derivative meaningless.
    """

    name = "finite_inputs"

    def check(self, inputs: Mapping[str, Any]) -> GateResult:
        bad: list[str] = []
        for path, value in iter_leaf_paths(inputs):
            if isinstance(value, bool) or value is None:
                continue
            if not is_number(value) or not math.isfinite(value):
                bad.append(path)

        if bad:
            return GateResult(
                status=GateStatus.HALT,
                gate_name=self.name,
                message=f"Non-finite or non-numeric inputs: {', '.join(sorted(bad))}",
                value=tuple(sorted(bad)),
            )
        return self._pass("All inputs finite")


class DiscountRateGate(ValidationGate):
    """
    Discount rate must lie in [0, 1); rates above ``warn_above`` are flagged.
    """

    name = "discount_rate"

    def __init__(self, warn_above: float = 0.50):
        self.warn_above = warn_above

    def check(self, inputs: Mapping[str, Any]) -> GateResult:
        rate = get_path(inputs, DISCOUNT_RATE_PATH)
        if not is_number(rate):
            return self._pass("No discount rate supplied")

        if rate < 0:
            return GateResult(
                status=GateStatus.HALT,
                gate_name=self.name,
                message=f"Discount rate {rate} is negative",
                value=rate,
                threshold=0.0,
            )
        if rate >= 1.0:
            return GateResult(
                status=GateStatus.HALT,
                gate_name=self.name,
                message=f"Discount rate {rate} must be below 1.0 (100%)",
                value=rate,
                threshold=1.0,
            )
        if rate > self.warn_above:
            return GateResult(
                status=GateStatus.WARN,
                gate_name=self.name,
                message=f"Discount rate {rate:.2%} is unusually high",
                value=rate,
                threshold=self.warn_above,
            )
        return self._pass(f"Discount rate {rate:.2%} within bounds", value=rate)


class FractionBoundsGate(ValidationGate):
    """
    Fraction-valued inputs (penetration, decline rates, dilution) must lie in [0, 1].
    """

    name = "fraction_bounds"

    DEFAULT_PATHS: tuple[str, ...] = (
        "earth.starlinkPenetration",
        "earth.bandwidthPriceDecline",
        "earth.launchPriceDecline",
        "mars.transportCostDecline",
        "financial.dilutionFactor",
    )

    def __init__(self, paths: tuple[str, ...] | None = None):
        self.paths = paths if paths is not None else self.DEFAULT_PATHS

    def check(self, inputs: Mapping[str, Any]) -> GateResult:
        violations = {}
        for path in self.paths:
            value = get_path(inputs, path)
            if is_number(value) and not 0.0 <= value <= 1.0:
                violations[path] = value

        if violations:
            details = ", ".join(f"{p}={v}" for p, v in sorted(violations.items()))
            return GateResult(
                status=GateStatus.HALT,
                gate_name=self.name,
                message=f"Fractions outside [0, 1]: {details}",
                value=violations,
                threshold=(0.0, 1.0),
            )
        return self._pass("Fractions within [0, 1]")


class ColonyYearGate(ValidationGate):
    """Colony year must be a plausible calendar year."""

    name = "colony_year"

    def __init__(self, min_year: int = 2000, max_year: int = 2200):
        self.min_year = min_year
        self.max_year = max_year

    def check(self, inputs: Mapping[str, Any]) -> GateResult:
        year = get_path(inputs, COLONY_YEAR_PATH)
        if not is_number(year):
            return self._pass("No colony year supplied")

        if not self.min_year <= year <= self.max_year:
            return GateResult(
                status=GateStatus.HALT,
                gate_name=self.name,
                message=f"Colony year {year} outside [{self.min_year}, {self.max_year}]",
                value=year,
                threshold=(self.min_year, self.max_year),
            )
        return self._pass(f"Colony year {year} within bounds", value=year)


class LaunchVolumeGate(ValidationGate):
    """Launch volume cannot be negative."""

    name = "launch_volume"

    def check(self, inputs: Mapping[str, Any]) -> GateResult:
        volume = get_path(inputs, "earth.launchVolume")
        if not is_number(volume):
            return self._pass("No launch volume supplied")

        if volume < 0:
            return GateResult(
                status=GateStatus.HALT,
                gate_name=self.name,
                message=f"Launch volume {volume} is negative",
                value=volume,
                threshold=0.0,
            )
        return self._pass(f"Launch volume {volume} within bounds", value=volume)


# =============================================================================
# Validation Engine
# =============================================================================

class ValidationEngine:
    """
    Engine for running validation gates on input parameter sets.

    Parameters
    ----------
    gates : list[ValidationGate], optional
        Custom gates to use. If None, uses default gates.

    Examples
    --------
    >>> engine = ValidationEngine()
    >>> report = engine.validate_inputs({"financial": {"discountRate": -0.01}})
    >>> report.passed
    False
    """

    def __init__(
        self,
        gates: list[ValidationGate] | None = None,
    ):
        if gates is None:
            gates = self._default_gates()
        self.gates = gates

    def _default_gates(self) -> list[ValidationGate]:
        """Create default set of validation gates."""
        return [
            FiniteInputsGate(),
            DiscountRateGate(),
            FractionBoundsGate(),
            ColonyYearGate(),
            LaunchVolumeGate(),
        ]

    def validate_inputs(self, inputs: Mapping[str, Any]) -> ValidationReport:
        """
        Run all validation gates on an input parameter set.

        Returns
        -------
        ValidationReport
            Complete validation report
        """
        results = tuple(gate.check(inputs) for gate in self.gates)
        report = ValidationReport(results=results)
        for warned in report.warned_gates:
            logger.warning(f"Input gate '{warned.gate_name}': {warned.message}")
        return report

    def validate_and_raise(self, inputs: Mapping[str, Any]) -> ValidationReport:
        """
        Validate and raise on HALT.

        Raises
        ------
        InvalidInputError
            If any gate HALTs
        """
        report = self.validate_inputs(inputs)

        if not report.passed:
            halt_messages = [g.message for g in report.halted_gates]
            raise InvalidInputError(
                "CRITICAL: Invalid inputs. HALTs:\n" + "\n".join(f"  - {m}" for m in halt_messages),
                report=report,
            )

        return report


# =============================================================================
# Convenience Functions
# =============================================================================

def validate_inputs(inputs: Mapping[str, Any]) -> ValidationReport:
    """
    Quick validation of an input parameter set.

    Examples
    --------
    >>> report = validate_inputs({"earth": {"starlinkPenetration": 0.15}})
    >>> report.passed
    True
    """
    return ValidationEngine().validate_inputs(inputs)


def ensure_valid_inputs(inputs: Mapping[str, Any]) -> ValidationReport:
    """
    Validate and raise if invalid.

    Raises
    ------
    InvalidInputError
        If validation fails
    """
    return ValidationEngine().validate_and_raise(inputs)
