"""
valuation-risk: Greeks, Monte Carlo, attribution and VaR for valuation models.

Quick Start
-----------
>>> from valuation_risk import ReferenceValuationModel, calculate_all_greeks, default_base_inputs
>>> model = ReferenceValuationModel()
>>> greeks = calculate_all_greeks(model, default_base_inputs())
>>> greeks.delta["Starlink Penetration"].unit
'$B/%'

Version: 0.1.0
"""

__version__ = "0.1.0"

# =============================================================================
# Valuation - Primary API
# =============================================================================
from valuation_risk.data.schemas import (
    BumpProfile,
    Component,
    InputDefinition,
    ValuationResult,
)
from valuation_risk.valuation.base import ValuationFunction
from valuation_risk.valuation.reference import ReferenceValuationModel, default_base_inputs

# =============================================================================
# Greeks
# =============================================================================
from valuation_risk.greeks import (
    DifferentiationEngine,
    GreekKind,
    GreekSet,
    calculate_all_greeks,
    factor_adjusted_greeks,
)

# =============================================================================
# Monte Carlo
# =============================================================================
from valuation_risk.simulation import (
    MonteCarloSampler,
    ParameterDistribution,
    SimulationResult,
    get_default_distribution_spec,
    run_simulation,
)

# =============================================================================
# Attribution and VaR
# =============================================================================
from valuation_risk.attribution import AttributionResult, attribute
from valuation_risk.risk import VaRCombiner, VaRMethod, VaRResult, compute_var

# =============================================================================
# Configuration
# =============================================================================
from valuation_risk.config.settings import SETTINGS

# =============================================================================
# Errors
# =============================================================================
from valuation_risk.errors import (
    InvalidInputError,
    NumericDegeneracyError,
    ValuationFailureError,
    ValuationRiskError,
)

# =============================================================================
# Workflow
# =============================================================================
from valuation_risk.analysis import (
    RiskAnalysisConfig,
    RiskAnalysisRunner,
    RiskReporter,
    SensitivityAnalyzer,
)

__all__ = [
    # Version
    "__version__",
    # Valuation
    "BumpProfile",
    "Component",
    "InputDefinition",
    "ValuationResult",
    "ValuationFunction",
    "ReferenceValuationModel",
    "default_base_inputs",
    # Greeks
    "DifferentiationEngine",
    "GreekKind",
    "GreekSet",
    "calculate_all_greeks",
    "factor_adjusted_greeks",
    # Monte Carlo
    "MonteCarloSampler",
    "ParameterDistribution",
    "SimulationResult",
    "get_default_distribution_spec",
    "run_simulation",
    # Attribution and VaR
    "AttributionResult",
    "attribute",
    "VaRCombiner",
    "VaRMethod",
    "VaRResult",
    "compute_var",
    # Config
    "SETTINGS",
    # Errors
    "InvalidInputError",
    "NumericDegeneracyError",
    "ValuationFailureError",
    "ValuationRiskError",
    # Workflow
    "RiskAnalysisConfig",
    "RiskAnalysisRunner",
    "RiskReporter",
    "SensitivityAnalyzer",
]
