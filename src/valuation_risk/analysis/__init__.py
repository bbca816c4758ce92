"""
Risk workflow, sensitivity analysis and reporting.

Exports:
- RiskAnalysisRunner, RiskAnalysisConfig, RiskAnalysisResult: orchestration
- SensitivityAnalyzer, TornadoData: one-at-a-time analysis
- RiskReporter: Markdown / JSON reports
"""

from valuation_risk.analysis.reporting import (
    ReportConfig,
    RiskReporter,
    format_attribution_table,
    format_distribution_table,
    format_greeks_table,
    format_var_table,
)
from valuation_risk.analysis.runner import (
    RiskAnalysisConfig,
    RiskAnalysisResult,
    RiskAnalysisRunner,
    quick_risk_analysis,
)
from valuation_risk.analysis.sensitivity import (
    SensitivityAnalyzer,
    SensitivityParameter,
    SensitivityResult,
    TornadoData,
    format_sensitivity_result,
    format_tornado_table,
    get_default_sensitivity_parameters,
)

__all__ = [
    # Runner
    "RiskAnalysisConfig",
    "RiskAnalysisResult",
    "RiskAnalysisRunner",
    "quick_risk_analysis",
    # Sensitivity
    "SensitivityAnalyzer",
    "SensitivityParameter",
    "SensitivityResult",
    "TornadoData",
    "format_sensitivity_result",
    "format_tornado_table",
    "get_default_sensitivity_parameters",
    # Reporting
    "ReportConfig",
    "RiskReporter",
    "format_attribution_table",
    "format_distribution_table",
    "format_greeks_table",
    "format_var_table",
]
