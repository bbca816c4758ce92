"""
Frozen configuration settings for the valuation risk engine.

All configuration is immutable (frozen dataclasses) and passed explicitly per
call, so concurrent requests never share mutable bump-size state.
"""

import os
from dataclasses import dataclass, field, replace
from enum import Enum

from valuation_risk.data.schemas import (
    DEFAULT_INPUT_DEFINITIONS,
    BumpProfile,
    InputDefinition,
)

# =============================================================================
# Environment Overrides
# =============================================================================


def _env_int(name: str, default: int | None) -> int | None:
    """
    Read an integer from the environment.

    Returns ``default`` when the variable is unset or empty.

    Raises
    ------
    ValueError
        If the variable is set but not an integer
    """
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"CRITICAL: {name} must be an integer, got '{raw}'") from e


# =============================================================================
# Differentiation Configuration
# =============================================================================


class DifferentiationMode(Enum):
    """Finite difference scheme."""

    FORWARD = "forward"
    CENTRAL = "central"


@dataclass(frozen=True)
class BumpSizeConfig:
    """
    Bump size per profile.

    Attributes
    ----------
    percentage : float
        Step for percentage inputs (1 percentage point)
    absolute : float
        Step for absolute inputs (1 unit)
    time : float
        Step for time inputs (1 year)
    volatility : float
        Step for the volatility dimension (1 vol point)
    rate : float
        Step for rate inputs (0.1%)
    """

    percentage: float = 0.01
    absolute: float = 1.0
    time: float = 1.0
    volatility: float = 0.01
    rate: float = 0.001

    def __post_init__(self) -> None:
        for name in ("percentage", "absolute", "time", "volatility", "rate"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"CRITICAL: Bump size '{name}' must be > 0, got {value}")

    def for_profile(self, profile: BumpProfile) -> float:
        """Bump size for a profile."""
        return {
            BumpProfile.PERCENTAGE: self.percentage,
            BumpProfile.ABSOLUTE: self.absolute,
            BumpProfile.TIME_YEAR: self.time,
            BumpProfile.VOLATILITY: self.volatility,
            BumpProfile.RATE: self.rate,
        }[profile]

    def with_overrides(self, **overrides: float) -> "BumpSizeConfig":
        """Return a copy with some sizes replaced."""
        return replace(self, **overrides)


@dataclass(frozen=True)
class GreeksConfig:
    """
    Immutable Greeks configuration.

    Attributes
    ----------
    mode : DifferentiationMode
        Forward or central differences (central is more accurate)
    bump_sizes : BumpSizeConfig
        Step size per bump profile
    inputs : tuple[InputDefinition, ...]
        Registered natural inputs to perturb
    include_synthetic : bool
        Compute Vega, Theta and Rho
    horizon_years : float
        Discounting horizon n used by the Rho rescaling ((1+r)^n)
    default_discount_rate : float
        Rate used by Theta when the inputs carry none
    """

    mode: DifferentiationMode = DifferentiationMode.CENTRAL
    bump_sizes: BumpSizeConfig = field(default_factory=BumpSizeConfig)
    inputs: tuple[InputDefinition, ...] = DEFAULT_INPUT_DEFINITIONS
    include_synthetic: bool = True
    horizon_years: float = 10.0
    default_discount_rate: float = 0.12

    def __post_init__(self) -> None:
        if self.horizon_years <= 0:
            raise ValueError(f"CRITICAL: horizon_years must be > 0, got {self.horizon_years}")

    @property
    def use_central_difference(self) -> bool:
        """True for central differences."""
        return self.mode is DifferentiationMode.CENTRAL


# =============================================================================
# Monte Carlo Configuration
# =============================================================================


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable Monte Carlo configuration.

    Attributes
    ----------
    num_runs : int
        Iterations per simulation. Override with VALUATION_RISK_MC_RUNS.
    bin_count : int
        Histogram bins
    seed : int, optional
        Random seed for reproducibility. Override with VALUATION_RISK_MC_SEED.
    n_workers : int
        Worker threads; each owns an independent random stream
    """

    num_runs: int = field(default_factory=lambda: _env_int("VALUATION_RISK_MC_RUNS", 5000))
    bin_count: int = 50
    seed: int | None = field(default_factory=lambda: _env_int("VALUATION_RISK_MC_SEED", None))
    n_workers: int = 1


# =============================================================================
# VaR Configuration
# =============================================================================


@dataclass(frozen=True)
class VaRConfig:
    """
    Immutable Value-at-Risk configuration.

    Attributes
    ----------
    confidence : float
        One of 0.95, 0.99, 0.999
    time_horizon_days : int
        Holding period in trading days
    trading_days_per_year : int
        Annualization basis for the parametric method
    expected_shortfall_multiplier : float
        Fixed ES/VaR ratio (simplification, not a tail mean)
    """

    confidence: float = 0.99
    time_horizon_days: int = 10
    trading_days_per_year: int = 252
    expected_shortfall_multiplier: float = 1.2


# =============================================================================
# Master Configuration
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """
    Master frozen configuration combining all sub-configs.

    Usage
    -----
    >>> from valuation_risk.config.settings import SETTINGS
    >>> SETTINGS.var.confidence
    0.99
    """

    greeks: GreeksConfig = field(default_factory=GreeksConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    var: VaRConfig = field(default_factory=VaRConfig)


# Singleton instance - import this
SETTINGS = Settings()
