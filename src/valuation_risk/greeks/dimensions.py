"""
Risk dimensions for bump-and-reprice.

The engine differentiates along a closed set of dimensions:

- NaturalInput: a registered input path, repriced through the valuation
  function (Delta and Gamma)
- SyntheticVolatility: uncertainty-premium shock on the baseline (Vega)
- SyntheticTime: shift of the colony-year axis, compounding Mars optionality
  only (Theta)
- SyntheticDiscountRate: present-value rescaling of both components (Rho)

Synthetic dimensions are not inputs of the valuation function; they are
applied to the cached baseline, so they cost no extra valuation calls.

Limitations
-----------
No discontinuity detection is performed. Valuation functions with regime
switches (milestone triggers) give biased or noisy derivatives when a bump
crosses a branch boundary.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from valuation_risk.config.settings import GreeksConfig
from valuation_risk.data.inputs import get_path, is_number, with_path_value
from valuation_risk.data.schemas import (
    COLONY_YEAR_PATH,
    DISCOUNT_RATE_PATH,
    BumpProfile,
    InputDefinition,
    ValuationResult,
)
from valuation_risk.errors import ValuationFailureError
from valuation_risk.greeks.results import GreekKind
from valuation_risk.valuation.base import ValuationFunction, evaluate

#: Uncertainty-premium sensitivity per unit of volatility
EARTH_UNCERTAINTY_PREMIUM = 0.5
MARS_UNCERTAINTY_PREMIUM = 1.5


@dataclass(frozen=True)
class RepricingContext:
    """
    Immutable baseline shared by every dimension in one Greeks run.

    Attributes
    ----------
    valuate : ValuationFunction
        Wrapped valuation function
    base_inputs : Mapping
        Unbumped inputs (never modified)
    baseline : ValuationResult
        Valuation at base_inputs
    config : GreeksConfig
        Run configuration
    """

    valuate: ValuationFunction
    base_inputs: Mapping[str, Any]
    baseline: ValuationResult
    config: GreeksConfig

    @property
    def discount_rate(self) -> float:
        """Base discount rate, or the configured default."""
        rate = get_path(self.base_inputs, DISCOUNT_RATE_PATH)
        return float(rate) if is_number(rate) else self.config.default_discount_rate


class RiskDimension(ABC):
    """
    One direction of perturbation.

    Attributes
    ----------
    label : str
        Greek key (e.g. "Launch Volume")
    kind : GreekKind
        First-order Greek produced
    profile : BumpProfile
        Selects bump size and display unit
    has_second_order : bool
        Whether Gamma is produced
    """

    label: str
    kind: GreekKind
    profile: BumpProfile
    has_second_order: bool = False

    @abstractmethod
    def reprice(self, context: RepricingContext, shift: float) -> ValuationResult:
        """
        Valuation with this dimension shifted by ``shift`` raw units.

        Raises
        ------
        ValuationFailureError
            If the shifted valuation fails or is non-finite
        """

    def unit(self, order: int = 1) -> str:
        """Unit string for the first or second derivative."""
        return self.profile.unit(order)


@dataclass(frozen=True)
class NaturalInput(RiskDimension):
    """A registered input path, bumped and repriced through the valuation function."""

    definition: InputDefinition

    kind = GreekKind.DELTA
    has_second_order = True

    @property
    def label(self) -> str:  # type: ignore[override]
        return self.definition.label

    @property
    def profile(self) -> BumpProfile:  # type: ignore[override]
        return self.definition.profile

    @property
    def path(self) -> str:
        return self.definition.path

    def reprice(self, context: RepricingContext, shift: float) -> ValuationResult:
        base_value = float(get_path(context.base_inputs, self.path))
        bumped = with_path_value(context.base_inputs, self.path, base_value + shift)
        return evaluate(context.valuate, bumped)


@dataclass(frozen=True)
class SyntheticVolatility(RiskDimension):
    """
    Volatility shock applied as an uncertainty-premium multiplier.

    [T3] Earth value scales by (1 - 0.5·dσ), Mars optionality by (1 - 1.5·dσ):
    higher uncertainty raises the premium investors demand, and the
    less-proven Mars business carries the larger premium.
    """

    label: str = "Overall Volatility"

    kind = GreekKind.VEGA
    profile = BumpProfile.VOLATILITY

    def reprice(self, context: RepricingContext, shift: float) -> ValuationResult:
        return _checked(
            context.baseline.scaled(
                1.0 - EARTH_UNCERTAINTY_PREMIUM * shift,
                1.0 - MARS_UNCERTAINTY_PREMIUM * shift,
            ),
            self.label,
        )


@dataclass(frozen=True)
class SyntheticTime(RiskDimension):
    """
    Shift of the colony-year axis by ``dt`` years.

    [T1] Mars optionality is discounted by a further (1 + r)^dt; Earth value
    is unaffected.
    """

    label: str = "Time Decay"

    kind = GreekKind.THETA
    profile = BumpProfile.TIME_YEAR

    def reprice(self, context: RepricingContext, shift: float) -> ValuationResult:
        growth = 1.0 + context.discount_rate
        if growth <= 0:
            raise ValuationFailureError(f"Cannot compound at rate {context.discount_rate}")
        return _checked(context.baseline.scaled(1.0, growth ** (-shift)), self.label)


@dataclass(frozen=True)
class SyntheticDiscountRate(RiskDimension):
    """
    Discount-rate shock applied as a present-value rescaling.

    [T1] V(r_new) = V(r_base) · (1 + r_base)^n / (1 + r_new)^n, i.e. the
    baseline divided by ((1 + r_new)^n / (1 + r_base)^n), with n the
    valuation horizon in years. Rho is negative for positive values.
    """

    label: str = "Discount Rate"

    kind = GreekKind.RHO
    profile = BumpProfile.RATE

    def reprice(self, context: RepricingContext, shift: float) -> ValuationResult:
        base_rate = context.discount_rate
        new_rate = base_rate + shift
        if 1.0 + new_rate <= 0:
            raise ValuationFailureError(f"Discount rate {new_rate} gives non-positive growth factor")
        n = context.config.horizon_years
        factor = ((1.0 + base_rate) / (1.0 + new_rate)) ** n
        return _checked(context.baseline.scaled(factor, factor), self.label)


def _checked(result: ValuationResult, label: str) -> ValuationResult:
    if not result.is_finite:
        raise ValuationFailureError(f"{label}: shocked valuation is non-finite")
    return result


def build_dimensions(
    base_inputs: Mapping[str, Any],
    config: GreeksConfig,
) -> list[RiskDimension]:
    """
    Dimensions to differentiate for these inputs.

    Natural inputs are included only when their path holds a number. Theta
    requires a colony year and Rho a discount rate; Vega is always included
    when synthetic dimensions are enabled.

    Parameters
    ----------
    base_inputs : Mapping
        Unbumped inputs
    config : GreeksConfig
        Registered inputs and synthetic switch

    Returns
    -------
    list[RiskDimension]
        Dimensions in evaluation order
    """
    dimensions: list[RiskDimension] = [
        NaturalInput(definition)
        for definition in config.inputs
        if is_number(get_path(base_inputs, definition.path))
    ]

    if config.include_synthetic:
        dimensions.append(SyntheticVolatility())
        if is_number(get_path(base_inputs, COLONY_YEAR_PATH)):
            dimensions.append(SyntheticTime())
        if is_number(get_path(base_inputs, DISCOUNT_RATE_PATH)):
            dimensions.append(SyntheticDiscountRate())

    return dimensions
