"""
Configuration for the valuation risk engine.
"""

from valuation_risk.config.settings import (
    SETTINGS,
    BumpSizeConfig,
    DifferentiationMode,
    GreeksConfig,
    Settings,
    SimulationConfig,
    VaRConfig,
)

__all__ = [
    "SETTINGS",
    "BumpSizeConfig",
    "DifferentiationMode",
    "GreeksConfig",
    "Settings",
    "SimulationConfig",
    "VaRConfig",
]
