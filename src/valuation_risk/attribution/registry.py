"""
Declarative attribution registry.

Maps an input path to its display label, the unit its change is measured
in, and the Greek that explains it. Adding an input to attribution means
adding an entry here; the decomposer has no per-input branches.

Greeks are quoted per display unit of the bump, so a change is rescaled
into the same units before multiplying:

    percentage : change × 100    ($B per 1% point)
    rate       : change × 1000   ($B per 0.1%)
    absolute   : change          ($B per unit)
    year       : change          ($B per year)
"""

from dataclasses import dataclass
from enum import Enum

from valuation_risk.data.schemas import (
    COLONY_YEAR_PATH,
    DISCOUNT_RATE_PATH,
    VOLATILITY_PATH,
)
from valuation_risk.greeks.results import GreekKind


class UnitKind(Enum):
    """Unit in which an input change is measured."""

    PERCENTAGE = "percentage"
    ABSOLUTE = "absolute"
    YEAR = "year"
    RATE = "rate"

    @property
    def scale(self) -> float:
        """Multiplier converting a raw change into Greek display units."""
        return {
            UnitKind.PERCENTAGE: 100.0,
            UnitKind.RATE: 1000.0,
            UnitKind.ABSOLUTE: 1.0,
            UnitKind.YEAR: 1.0,
        }[self]


@dataclass(frozen=True)
class AttributionEntry:
    """
    How one input path is attributed.

    Attributes
    ----------
    label : str
        Display label of the input
    unit_kind : UnitKind
        Unit of the change
    greek_source : GreekKind
        DELTA (with Gamma), THETA, RHO or VEGA
    greek_label : str, optional
        Label of the Greek entry to read; defaults to ``label``
    """

    label: str
    unit_kind: UnitKind
    greek_source: GreekKind = GreekKind.DELTA
    greek_label: str | None = None

    def __post_init__(self) -> None:
        if self.greek_source is GreekKind.GAMMA:
            raise ValueError("CRITICAL: Gamma is second-order; use DELTA as greek_source")

    @property
    def lookup_label(self) -> str:
        return self.greek_label or self.label

    def scaled_change(self, raw_change: float) -> float:
        return raw_change * self.unit_kind.scale


ATTRIBUTION_REGISTRY: dict[str, AttributionEntry] = {
    "earth.starlinkPenetration": AttributionEntry("Starlink Penetration", UnitKind.PERCENTAGE),
    "earth.launchVolume": AttributionEntry("Launch Volume", UnitKind.ABSOLUTE),
    "earth.bandwidthPriceDecline": AttributionEntry("Bandwidth Price Decline", UnitKind.PERCENTAGE),
    "mars.populationGrowth": AttributionEntry("Population Growth", UnitKind.PERCENTAGE),
    "financial.dilutionFactor": AttributionEntry("Dilution Factor", UnitKind.PERCENTAGE),
    COLONY_YEAR_PATH: AttributionEntry(
        "Colony Year", UnitKind.YEAR, GreekKind.THETA, greek_label="Time Decay"
    ),
    DISCOUNT_RATE_PATH: AttributionEntry("Discount Rate", UnitKind.RATE, GreekKind.RHO),
    VOLATILITY_PATH: AttributionEntry(
        "Volatility", UnitKind.PERCENTAGE, GreekKind.VEGA, greek_label="Overall Volatility"
    ),
}
