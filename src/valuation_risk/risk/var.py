"""
Value-at-Risk from Greeks, Monte Carlo outcomes, or both.

Methods:
- GREEKS (parametric): [T3] each Delta is paired with an assumed annualised
  volatility; per component VaR = z · sqrt(Σ (Delta·σ)²) · sqrt(days/252)
- MONTE_CARLO (empirical): [T1] VaR = max(0, current - q_(1-c)) with q the
  nearest-rank percentile of the simulated outcomes
- COMBINED: [T3] per component sqrt(VaR_greeks² + VaR_mc²), treating the two
  estimates as orthogonal; the total is the sum of the components

Expected shortfall is a fixed multiple of VaR (1.2 by default), a
documented simplification rather than a tail mean.

See: Jorion (2006) "Value at Risk", Ch. 5 and 12
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np

from valuation_risk.config.settings import VaRConfig
from valuation_risk.data.schemas import Component, ValuationResult
from valuation_risk.errors import InvalidInputError
from valuation_risk.greeks.results import GreekKind, GreekSet
from valuation_risk.simulation.sampler import SimulationResult
from valuation_risk.simulation.statistics import nearest_rank_percentile

logger = logging.getLogger(__name__)

#: One-sided standard normal quantiles for the supported confidence levels
Z_SCORES: dict[float, float] = {
    0.95: 1.645,
    0.99: 2.326,
    0.999: 3.09,
}

#: Assumed annualised volatility of each input, by Greek label
ASSUMED_VOLATILITIES: dict[str, float] = {
    "Starlink Penetration": 0.15,
    "Launch Volume": 0.20,
    "Colony Year": 0.10,
    "Discount Rate": 0.05,
    "Population Growth": 0.25,
}

COMPONENTS = (Component.EARTH, Component.MARS)

SampleSource = Union[SimulationResult, Mapping[Component, np.ndarray], np.ndarray]


class VaRMethod(Enum):
    """VaR estimation method."""

    GREEKS = "greeks"
    MONTE_CARLO = "monte_carlo"
    COMBINED = "combined"


@dataclass(frozen=True)
class VaRResult:
    """
    Value-at-Risk estimate.

    Attributes
    ----------
    method : VaRMethod
        Estimation method
    confidence : float
        Confidence level
    time_horizon_days : int
        Holding period
    current_valuation : float
        Total valuation the loss is measured from
    var_value : float
        VaR in $B (>= 0)
    var_percent : float
        VaR as % of current valuation
    expected_shortfall : float
        Fixed multiple of VaR
    components : dict[str, float]
        VaR per component ("earth", "mars")
    """

    method: VaRMethod
    confidence: float
    time_horizon_days: int
    current_valuation: float
    var_value: float
    var_percent: float
    expected_shortfall: float
    components: dict[str, float]

    def to_dict(self) -> dict:
        return {
            "method": self.method.value,
            "confidence": self.confidence,
            "timeHorizonDays": self.time_horizon_days,
            "currentValuation": self.current_valuation,
            "varValue": self.var_value,
            "varPercent": self.var_percent,
            "expectedShortfall": self.expected_shortfall,
            "components": dict(self.components),
        }


def _finite(value: float) -> float:
    """Collapse non-finite sub-terms to 0."""
    return value if math.isfinite(value) else 0.0


def z_score(confidence: float) -> float:
    """
    One-sided z for a supported confidence level.

    Raises
    ------
    InvalidInputError
        If the confidence is not 0.95, 0.99 or 0.999
    """
    for level, z in Z_SCORES.items():
        if math.isclose(confidence, level, rel_tol=0.0, abs_tol=1e-12):
            return z
    raise InvalidInputError(
        f"CRITICAL: Unsupported confidence {confidence}; expected one of {sorted(Z_SCORES)}"
    )


class VaRCombiner:
    """
    VaR calculator for the three methods.

    Parameters
    ----------
    config : VaRConfig, optional
        Confidence, horizon and ES multiplier. If None, uses defaults.
    assumed_volatilities : Mapping[str, float], optional
        Label -> annualised volatility for the parametric method

    Examples
    --------
    >>> combiner = VaRCombiner(VaRConfig(confidence=0.95, time_horizon_days=10))
    >>> result = combiner.compute(VaRMethod.COMBINED, greeks=greeks, distribution=sim)
    >>> result.var_value >= 0
    True
    """

    def __init__(
        self,
        config: VaRConfig | None = None,
        assumed_volatilities: Mapping[str, float] | None = None,
    ):
        self.config = config or VaRConfig()
        self.assumed_volatilities = (
            ASSUMED_VOLATILITIES if assumed_volatilities is None else assumed_volatilities
        )
        z_score(self.config.confidence)
        if self.config.time_horizon_days <= 0:
            raise InvalidInputError(
                f"CRITICAL: time_horizon_days must be > 0, got {self.config.time_horizon_days}"
            )
        if self.config.trading_days_per_year <= 0:
            raise InvalidInputError(
                f"CRITICAL: trading_days_per_year must be > 0, got {self.config.trading_days_per_year}"
            )

    def greeks_components(self, greeks: GreekSet) -> dict[str, float]:
        """Parametric VaR per component."""
        z = z_score(self.config.confidence)
        horizon = math.sqrt(self.config.time_horizon_days / self.config.trading_days_per_year)
        components: dict[str, float] = {}
        for component in COMPONENTS:
            variance = 0.0
            for label, entry in greeks.table(GreekKind.DELTA, component).items():
                vol = self.assumed_volatilities.get(label)
                if vol is None:
                    continue
                term = entry.value * vol
                variance += _finite(term * term)
            components[component.value] = _finite(z * math.sqrt(variance) * horizon)
        return components

    def monte_carlo_components(
        self,
        distribution: SampleSource,
        current: ValuationResult,
    ) -> tuple[dict[str, float], float]:
        """
        Empirical VaR per component and for the total series.

        Components are split in proportion to the current earth/mars values
        when only a total series is available.
        """
        series = _series(distribution)
        p = 1.0 - self.config.confidence

        def _loss(values: np.ndarray, level: float) -> float:
            values = np.sort(np.asarray(values, dtype=float))
            return _finite(max(0.0, level - nearest_rank_percentile(values, p)))

        total = _loss(series[Component.TOTAL], current.total)

        components: dict[str, float] = {}
        if all(c in series for c in COMPONENTS):
            for component in COMPONENTS:
                components[component.value] = _loss(series[component], current.get(component))
        else:
            gross = current.earth + current.mars
            earth_share = current.earth / gross if gross else 1.0
            components[Component.EARTH.value] = _finite(total * earth_share)
            components[Component.MARS.value] = _finite(total * (1.0 - earth_share))
        return components, total

    def compute(
        self,
        method: VaRMethod | str,
        greeks: GreekSet | None = None,
        distribution: SampleSource | None = None,
        current_valuation: ValuationResult | float | None = None,
    ) -> VaRResult:
        """
        Compute VaR by the requested method.

        Parameters
        ----------
        method : VaRMethod or str
            "greeks", "monte_carlo" or "combined"
        greeks : GreekSet, optional
            Required for GREEKS and COMBINED
        distribution : SimulationResult or samples, optional
            Required for MONTE_CARLO and COMBINED
        current_valuation : ValuationResult or float, optional
            Valuation losses are measured from. Defaults to the Greeks'
            baseline, then the simulation's base valuation. A float sets the
            total; component levels then come from the Greeks' baseline.

        Returns
        -------
        VaRResult
            VaR, VaR %, expected shortfall and component split

        Raises
        ------
        InvalidInputError
            If the method is unknown or its inputs are missing
        """
        try:
            method = VaRMethod(method)
        except ValueError as e:
            raise InvalidInputError(f"CRITICAL: Unknown VaR method: {method!r}") from e

        if method in (VaRMethod.GREEKS, VaRMethod.COMBINED) and greeks is None:
            raise InvalidInputError(f"CRITICAL: {method.value} VaR requires Greeks")
        if method in (VaRMethod.MONTE_CARLO, VaRMethod.COMBINED) and distribution is None:
            raise InvalidInputError(f"CRITICAL: {method.value} VaR requires a simulated distribution")

        current = _current(current_valuation, greeks, distribution)

        if method is VaRMethod.GREEKS:
            components = self.greeks_components(greeks)
            var_value = sum(components.values())
        elif method is VaRMethod.MONTE_CARLO:
            components, var_value = self.monte_carlo_components(distribution, current)
        else:
            parametric = self.greeks_components(greeks)
            empirical, _ = self.monte_carlo_components(distribution, current)
            components = {
                name: _finite(math.hypot(parametric[name], empirical[name]))
                for name in parametric
            }
            var_value = sum(components.values())

        var_value = _finite(var_value)
        var_percent = _finite(var_value / current.total * 100.0) if current.total else 0.0
        result = VaRResult(
            method=method,
            confidence=self.config.confidence,
            time_horizon_days=self.config.time_horizon_days,
            current_valuation=current.total,
            var_value=var_value,
            var_percent=var_percent,
            expected_shortfall=_finite(self.config.expected_shortfall_multiplier * var_value),
            components=components,
        )
        logger.debug(
            f"{method.value} VaR({self.config.confidence:.3f}, {self.config.time_horizon_days}d) "
            f"= {var_value:.2f} ({var_percent:.2f}%)"
        )
        return result


def _series(distribution: SampleSource) -> dict[Component, np.ndarray]:
    if isinstance(distribution, SimulationResult):
        return dict(distribution.samples)
    if isinstance(distribution, Mapping):
        try:
            series = {
                Component(k) if isinstance(k, str) else k: np.asarray(v)
                for k, v in distribution.items()
            }
        except ValueError as e:
            raise InvalidInputError(f"CRITICAL: Unknown sample series: {e}") from e
        if Component.TOTAL not in series:
            raise InvalidInputError("CRITICAL: Sample mapping must contain a 'total' series")
        return series
    return {Component.TOTAL: np.asarray(distribution, dtype=float)}


def _current(
    current_valuation: ValuationResult | float | None,
    greeks: GreekSet | None,
    distribution: SampleSource | None,
) -> ValuationResult:
    if isinstance(current_valuation, ValuationResult):
        return current_valuation

    reference = None
    if greeks is not None:
        reference = greeks.baseline
    elif isinstance(distribution, SimulationResult) and distribution.base_valuation is not None:
        reference = distribution.base_valuation

    if current_valuation is None:
        if reference is None:
            raise InvalidInputError("CRITICAL: current_valuation is required without Greeks or a base valuation")
        return reference

    total = float(current_valuation)
    if reference is None:
        return ValuationResult(earth=total, mars=0.0, total=total)
    return ValuationResult(earth=reference.earth, mars=reference.mars, total=total)


def compute_var(
    method: VaRMethod | str,
    confidence: float,
    time_horizon_days: int,
    greeks: GreekSet | None = None,
    distribution: SampleSource | None = None,
    current_valuation: ValuationResult | float | None = None,
) -> VaRResult:
    """
    Convenience wrapper around :class:`VaRCombiner`.

    Examples
    --------
    >>> compute_var("greeks", 0.99, 10, greeks=greeks).method
    <VaRMethod.GREEKS: 'greeks'>
    """
    config = VaRConfig(confidence=confidence, time_horizon_days=time_horizon_days)
    return VaRCombiner(config).compute(method, greeks, distribution, current_valuation)
