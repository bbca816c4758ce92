"""
Reference Earth/Mars valuation model.

A compact deterministic stand-in for the production formula evaluator, used
by examples and tests. It keeps the qualitative shape of the spreadsheet
model without reproducing its numbers:

- Earth: revenue scales with Starlink penetration (power 2) and launch volume
  (power 0.8), net of bandwidth price decline; cash flow is discounted over an
  explicit horizon plus a terminal multiple
- Mars: option value driven by colony year and population growth,
  discounted from the colony year to the valuation year
- Total: (Earth + Mars) net of dilution

[T1] PV = CF / (1 + r)^t, so every component is non-increasing in the
discount rate when cash flows are positive.
"""

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from valuation_risk.data.inputs import get_path
from valuation_risk.data.schemas import ValuationResult

#: Base inputs matching the model's calibration point
DEFAULT_BASE_INPUTS: dict[str, dict[str, Any]] = {
    "earth": {
        "starlinkPenetration": 0.15,
        "launchVolume": 150.0,
        "bandwidthPriceDecline": 0.08,
        "launchPriceDecline": 0.08,
    },
    "mars": {
        "firstColonyYear": 2030,
        "populationGrowth": 0.50,
        "transportCostDecline": 0.20,
        "industrialBootstrap": True,
    },
    "financial": {
        "discountRate": 0.12,
        "terminalGrowth": 0.03,
        "dilutionFactor": 0.15,
    },
}


def default_base_inputs() -> dict[str, dict[str, Any]]:
    """Fresh copy of the default base inputs."""
    return copy.deepcopy(DEFAULT_BASE_INPUTS)


@dataclass(frozen=True)
class ReferenceValuationModel:
    """
    Deterministic reference valuation. [$B]

    Attributes
    ----------
    base_revenue : float
        Annual Earth revenue at the calibration point
    base_costs : float
        Annual Earth costs at the calibration point
    tax_rate : float
        Tax/expense rate on revenue
    horizon_years : int
        Explicit cash-flow horizon
    terminal_multiple : float
        Exit multiple applied to the final-year cash flow
    base_mars_value : float
        Mars option value at the base colony year, before discounting
    valuation_year : int
        Year to which all values are discounted

    Examples
    --------
    >>> model = ReferenceValuationModel()
    >>> result = model(default_base_inputs())
    >>> result.total > 0
    True
    """

    base_revenue: float = 148.13
    base_costs: float = 10.32
    tax_rate: float = 0.09
    horizon_years: int = 10
    terminal_multiple: float = 12.0
    base_mars_value: float = 250.0
    valuation_year: int = 2025

    # Calibration point
    base_penetration: float = 0.15
    base_launch_volume: float = 150.0
    base_price_decline: float = 0.08
    base_colony_year: int = 2030
    base_population_growth: float = 0.50
    base_transport_cost_decline: float = 0.20

    def __call__(self, inputs: Mapping[str, Any]) -> ValuationResult:
        earth = self.earth_value(inputs)
        mars = self.mars_value(inputs)
        dilution = float(get_path(inputs, "financial.dilutionFactor", 0.0))
        total = (earth + mars) * (1.0 - dilution)
        return ValuationResult(earth=earth, mars=mars, total=total)

    def earth_value(self, inputs: Mapping[str, Any]) -> float:
        """Discounted Earth business value."""
        penetration = float(get_path(inputs, "earth.starlinkPenetration", self.base_penetration))
        if penetration <= 0:
            return 0.0

        launch_volume = float(get_path(inputs, "earth.launchVolume", self.base_launch_volume))
        bandwidth_decline = float(
            get_path(inputs, "earth.bandwidthPriceDecline", self.base_price_decline)
        )
        launch_decline = float(get_path(inputs, "earth.launchPriceDecline", self.base_price_decline))
        rate = float(get_path(inputs, "financial.discountRate", 0.12))
        growth = float(get_path(inputs, "financial.terminalGrowth", 0.03))

        volume_ratio = max(launch_volume, 0.0) / self.base_launch_volume
        revenue = (
            self.base_revenue
            * (penetration / self.base_penetration) ** 2.0
            * volume_ratio ** 0.8
            * (1.0 - bandwidth_decline)
            / (1.0 - self.base_price_decline)
        )
        costs = (
            self.base_costs
            * volume_ratio ** 0.5
            * (1.0 - launch_decline)
            / (1.0 - self.base_price_decline)
        )
        cash_flow = revenue * (1.0 - self.tax_rate) - costs

        present_value = 0.0
        for t in range(1, self.horizon_years + 1):
            present_value += cash_flow * (1.0 + growth) ** (t - 1) / (1.0 + rate) ** t

        terminal = (
            cash_flow
            * (1.0 + growth) ** self.horizon_years
            * self.terminal_multiple
            / (1.0 + rate) ** self.horizon_years
        )
        return max(0.0, present_value + terminal)

    def mars_value(self, inputs: Mapping[str, Any]) -> float:
        """Discounted Mars option value."""
        colony_year = float(get_path(inputs, "mars.firstColonyYear", self.base_colony_year))
        population_growth = float(
            get_path(inputs, "mars.populationGrowth", self.base_population_growth)
        )
        transport_decline = float(
            get_path(inputs, "mars.transportCostDecline", self.base_transport_cost_decline)
        )
        bootstrap = get_path(inputs, "mars.industrialBootstrap", True)
        rate = float(get_path(inputs, "financial.discountRate", 0.12))

        value = (
            self.base_mars_value
            * 1.1 ** (self.base_colony_year - colony_year)
            * max(population_growth, 0.0)
            / self.base_population_growth
            * (1.0 + transport_decline)
            / (1.0 + self.base_transport_cost_decline)
        )
        if bootstrap is False:
            value *= 0.1

        years_to_colony = max(colony_year - self.valuation_year, 0.0)
        return value / (1.0 + rate) ** years_to_colony
