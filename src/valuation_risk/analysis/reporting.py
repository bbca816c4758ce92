"""
Risk reporting.

[T2] Markdown (human-readable) and JSON (machine-readable) reports for a
RiskAnalysisResult, plus standalone ``format_*`` table helpers for each
artifact.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from valuation_risk.analysis.runner import RiskAnalysisResult
from valuation_risk.analysis.sensitivity import format_tornado_table
from valuation_risk.attribution.decomposer import AttributionResult
from valuation_risk.greeks.results import GreekKind, GreekSet
from valuation_risk.risk.var import VaRResult
from valuation_risk.simulation.statistics import Distribution

REPORT_VERSION = "1.0"


# =============================================================================
# Table Helpers
# =============================================================================


def format_greeks_table(greeks: GreekSet) -> str:
    """
    Markdown table of total-component Greeks.

    Examples
    --------
    >>> print(format_greeks_table(greeks))
    | Greek | Input | Value | Unit |
    ...
    """
    lines = [
        "| Greek | Input                     |        Value | Unit      |",
        "|-------|---------------------------|--------------|-----------|",
    ]
    for kind in GreekKind:
        for label, entry in greeks.table(kind).items():
            lines.append(
                f"| {kind.value:<5} | {label:<25} | {entry.value:>12,.4f} | {entry.unit:<9} |"
            )
    if greeks.warnings:
        lines.append("")
        for w in greeks.warnings:
            lines.append(f"- *{w.kind.value} unavailable for {w.label}*: {w.reason}")
    return "\n".join(lines)


def format_distribution_table(distribution: Distribution, title: str = "Total") -> str:
    """Markdown table of one series' summary statistics."""
    rows = [
        ("Mean", distribution.mean),
        ("Median", distribution.median),
        ("Std Dev", distribution.std_dev),
        ("Min", distribution.min),
        ("P10", distribution.p10),
        ("Q1", distribution.q1),
        ("Q3", distribution.q3),
        ("P90", distribution.p90),
        ("Max", distribution.max),
    ]
    lines = [
        f"| Statistic | {title} ($B) |",
        "|-----------|--------------|",
    ]
    lines.extend(f"| {name:<9} | {value:>12,.2f} |" for name, value in rows)
    return "\n".join(lines)


def format_attribution_table(attribution: AttributionResult) -> str:
    """Markdown table of attribution details with totals and residual."""
    lines = [
        "| Input                     |   Change |    Delta |    Gamma |    Theta |      Rho |     Vega |  Method. |    Total | Note |",
        "|---------------------------|----------|----------|----------|----------|----------|----------|----------|----------|------|",
    ]
    for d in attribution.details:
        lines.append(
            f"| {d.input_label:<25} | {d.change:>8.4f} | {d.delta_pnl:>8.2f} | {d.gamma_pnl:>8.2f} | "
            f"{d.theta_pnl:>8.2f} | {d.rho_pnl:>8.2f} | {d.vega_pnl:>8.2f} | "
            f"{d.methodology_pnl:>8.2f} | {d.total_contribution:>8.2f} | {d.note or ''} |"
        )
    lines.append("")
    lines.append(f"**Explained**: ${attribution.explained:,.2f}B")
    if attribution.residual is not None:
        lines.append(f"**Actual change**: ${attribution.actual_change:,.2f}B")
        lines.append(f"**Residual**: ${attribution.residual:,.2f}B")
    return "\n".join(lines)


def format_var_table(results: list[VaRResult]) -> str:
    """Markdown table comparing VaR results."""
    lines = [
        "| Method      | Confidence | Horizon |      VaR |   VaR % |       ES |    Earth |     Mars |",
        "|-------------|------------|---------|----------|---------|----------|----------|----------|",
    ]
    for r in results:
        lines.append(
            f"| {r.method.value:<11} | {r.confidence:>10.1%} | {r.time_horizon_days:>5}d | "
            f"{r.var_value:>8,.1f} | {r.var_percent:>6.2f}% | {r.expected_shortfall:>8,.1f} | "
            f"{r.components.get('earth', 0.0):>8,.1f} | {r.components.get('mars', 0.0):>8,.1f} |"
        )
    return "\n".join(lines)


# =============================================================================
# Report Configuration
# =============================================================================


@dataclass(frozen=True)
class ReportConfig:
    """
    Configuration for report generation.

    Attributes
    ----------
    title : str
        Report title
    include_greeks : bool
        Include the Greeks table
    include_distribution : bool
        Include Monte Carlo statistics
    include_sensitivity : bool
        Include the tornado table
    include_attribution : bool
        Include the attribution table
    """

    title: str = "Valuation Risk Report"
    include_greeks: bool = True
    include_distribution: bool = True
    include_sensitivity: bool = True
    include_attribution: bool = True


# =============================================================================
# Reporter
# =============================================================================


class RiskReporter:
    """
    Generates risk reports in Markdown and JSON formats.

    Examples
    --------
    >>> result = quick_risk_analysis(model, base_inputs)
    >>> print(RiskReporter().to_markdown(result))
    """

    def __init__(self, config: ReportConfig | None = None):
        self.config = config or ReportConfig()

    def generate_executive_summary(self, result: RiskAnalysisResult) -> str:
        """One-paragraph summary of valuation and headline VaR."""
        var = result.headline_var
        text = (
            f"Baseline valuation is ${result.baseline.total:,.1f}B "
            f"(Earth ${result.baseline.earth:,.1f}B, Mars ${result.baseline.mars:,.1f}B). "
            f"The {var.method.value} {var.confidence:.1%} VaR over {var.time_horizon_days} days is "
            f"${var.var_value:,.1f}B ({var.var_percent:.1f}% of value), "
            f"with expected shortfall ${var.expected_shortfall:,.1f}B."
        )
        if result.sensitivity and result.sensitivity.most_sensitive_parameter:
            text += f" The most impactful input is {result.sensitivity.most_sensitive_parameter}."
        if not result.greeks.is_complete:
            text += f" {len(result.greeks.warnings)} Greek(s) could not be computed."
        return text

    def to_markdown(self, result: RiskAnalysisResult, title: str | None = None) -> str:
        """
        Generate complete Markdown report.

        Parameters
        ----------
        result : RiskAnalysisResult
            Risk run output
        title : str, optional
            Override report title

        Returns
        -------
        str
            Complete Markdown report
        """
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        sections = [
            f"# {title or self.config.title}",
            "",
            f"**Generated**: {timestamp}",
            f"**Execution Time**: {result.execution_time_sec:.2f}s",
            f"**Baseline Valuation**: ${result.baseline.total:,.1f}B",
            "",
            "## Executive Summary",
            "",
            self.generate_executive_summary(result),
            "",
            "## Value at Risk",
            "",
            format_var_table(list(result.var.values())),
            "",
        ]

        if self.config.include_greeks:
            sections += ["## Greeks", "", format_greeks_table(result.greeks), ""]

        if self.config.include_distribution and result.simulation is not None:
            sim = result.simulation
            sections += [
                "## Monte Carlo Distribution",
                "",
                f"{sim.n_runs} runs, {sim.n_failures} failed (clamped to 0)",
                "",
                format_distribution_table(sim.distribution),
                "",
            ]

        if self.config.include_sensitivity and result.sensitivity is not None:
            sections += [format_tornado_table(result.sensitivity), ""]

        if self.config.include_attribution and result.attribution is not None:
            sections += ["## Attribution", "", format_attribution_table(result.attribution), ""]

        return "\n".join(sections)

    def to_dict(self, result: RiskAnalysisResult) -> dict[str, Any]:
        """JSON-serializable report."""
        report = result.to_dict()
        report["metadata"] = {
            "timestamp": datetime.now().isoformat(),
            "executionTimeSec": result.execution_time_sec,
            "reportVersion": REPORT_VERSION,
        }
        report["executiveSummary"] = self.generate_executive_summary(result)
        return report

    def to_json(self, result: RiskAnalysisResult, indent: int = 2) -> str:
        """
        Generate JSON report.

        Parameters
        ----------
        result : RiskAnalysisResult
            Risk run output
        indent : int
            JSON indentation (0 for compact)
        """
        return json.dumps(self.to_dict(result), indent=indent if indent > 0 else None)
