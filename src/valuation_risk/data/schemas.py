"""
Core data schemas for valuation inputs and outputs.

Immutable dataclasses and enums shared by the Greeks engine, the Monte Carlo
sampler, the attribution decomposer and the VaR combiner.

Conventions
-----------
- Valuations are in billions of dollars ($B)
- Input paths are dotted ``category.field`` strings (e.g. ``earth.launchVolume``)
- Sensitivities are quoted per *display unit* of the input: per 1% point for
  percentage inputs, per 0.1% for rates, per unit for absolute and year inputs
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from valuation_risk.errors import ValuationFailureError

# =============================================================================
# Bump Profiles
# =============================================================================


class BumpProfile(Enum):
    """
    Perturbation profile attached to every registered input.

    The profile selects the default bump size, the display unit in which
    sensitivities are quoted, and the unit strings used in reports.
    """

    PERCENTAGE = "percentage"
    ABSOLUTE = "absolute"
    TIME_YEAR = "time-year"
    VOLATILITY = "volatility"
    RATE = "rate"

    @property
    def display_unit(self) -> float:
        """Size of one display unit in raw input terms."""
        return _DISPLAY_UNITS[self]

    def unit(self, order: int = 1) -> str:
        """Unit string for a first (order=1) or second (order=2) derivative."""
        base = _UNIT_LABELS[self]
        if order == 2:
            return f"$B/{base}²"
        return f"$B/{base}"


_DISPLAY_UNITS: dict[BumpProfile, float] = {
    BumpProfile.PERCENTAGE: 0.01,
    BumpProfile.ABSOLUTE: 1.0,
    BumpProfile.TIME_YEAR: 1.0,
    BumpProfile.VOLATILITY: 0.01,
    BumpProfile.RATE: 0.001,
}

_UNIT_LABELS: dict[BumpProfile, str] = {
    BumpProfile.PERCENTAGE: "%",
    BumpProfile.ABSOLUTE: "unit",
    BumpProfile.TIME_YEAR: "year",
    BumpProfile.VOLATILITY: "%vol",
    BumpProfile.RATE: "0.1%",
}


# =============================================================================
# Valuation Result
# =============================================================================


class Component(Enum):
    """Valuation components reported by every valuation function."""

    EARTH = "earth"
    MARS = "mars"
    TOTAL = "total"


@dataclass(frozen=True)
class ValuationResult:
    """
    Output of a valuation function. [$B]

    Attributes
    ----------
    earth : float
        Earth business value
    mars : float
        Mars optionality value
    total : float
        Total enterprise value
    """

    earth: float
    mars: float
    total: float

    @classmethod
    def from_value(cls, value: Any) -> "ValuationResult":
        """
        Coerce a valuation function's return value.

        Accepts a ValuationResult, or any mapping with ``earth``/``mars``
        and optional ``total`` (defaults to earth + mars).

        Raises
        ------
        ValuationFailureError
            If the value cannot be read or any component is non-finite
        """
        if isinstance(value, ValuationResult):
            result = value
        elif isinstance(value, Mapping):
            try:
                earth = float(value.get("earth", 0.0))
                mars = float(value.get("mars", 0.0))
                total = float(value["total"]) if value.get("total") is not None else earth + mars
            except (TypeError, ValueError) as e:
                raise ValuationFailureError(f"Unreadable valuation output: {e}") from e
            result = cls(earth=earth, mars=mars, total=total)
        else:
            raise ValuationFailureError(
                f"Valuation function returned unsupported type: {type(value).__name__}"
            )

        if not result.is_finite:
            raise ValuationFailureError(f"Valuation returned non-finite values: {result}")
        return result

    @property
    def is_finite(self) -> bool:
        """True when every component is a finite number."""
        return all(math.isfinite(v) for v in (self.earth, self.mars, self.total))

    def get(self, component: Component) -> float:
        """Get a component value."""
        return getattr(self, component.value)

    def scaled(self, earth_factor: float, mars_factor: float) -> "ValuationResult":
        """
        Return a new result with each component rescaled.

        The total keeps its ratio to earth + mars, so proportional
        adjustments such as dilution carry through. When earth + mars is zero
        the total moves by the component changes instead.
        """
        earth = self.earth * earth_factor
        mars = self.mars * mars_factor
        components = self.earth + self.mars
        if components != 0.0:
            total = self.total * (earth + mars) / components
        else:
            total = self.total + (earth - self.earth) + (mars - self.mars)
        return ValuationResult(earth=earth, mars=mars, total=total)

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {"earth": self.earth, "mars": self.mars, "total": self.total}


# =============================================================================
# Input Definitions
# =============================================================================


@dataclass(frozen=True)
class InputDefinition:
    """
    A registered valuation input eligible for bump-and-reprice.

    Attributes
    ----------
    path : str
        Dotted input path (e.g. "earth.starlinkPenetration")
    label : str
        Human-readable label used as the Greek key
    profile : BumpProfile
        Perturbation profile
    """

    path: str
    label: str
    profile: BumpProfile

    def __post_init__(self) -> None:
        if "." not in self.path:
            raise ValueError(f"CRITICAL: Input path must be 'category.field', got '{self.path}'")

    @property
    def category(self) -> str:
        """Top-level category of the path."""
        return self.path.split(".", 1)[0]


#: Inputs the Greeks engine perturbs when present in the base inputs
DEFAULT_INPUT_DEFINITIONS: tuple[InputDefinition, ...] = (
    InputDefinition("earth.starlinkPenetration", "Starlink Penetration", BumpProfile.PERCENTAGE),
    InputDefinition("earth.launchVolume", "Launch Volume", BumpProfile.ABSOLUTE),
    InputDefinition("earth.bandwidthPriceDecline", "Bandwidth Price Decline", BumpProfile.PERCENTAGE),
    InputDefinition("mars.firstColonyYear", "Colony Year", BumpProfile.TIME_YEAR),
    InputDefinition("mars.populationGrowth", "Population Growth", BumpProfile.PERCENTAGE),
    InputDefinition("financial.discountRate", "Discount Rate", BumpProfile.RATE),
    InputDefinition("financial.dilutionFactor", "Dilution Factor", BumpProfile.PERCENTAGE),
)

#: Well-known paths used by the synthetic risk dimensions
COLONY_YEAR_PATH = "mars.firstColonyYear"
DISCOUNT_RATE_PATH = "financial.discountRate"
VOLATILITY_PATH = "financial.volatility"
