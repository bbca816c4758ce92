#!/usr/bin/env python3
"""
Greeks and Value-at-Risk Demo - Reference Earth/Mars Model.

This example computes bump-and-reprice Greeks for the reference valuation
model, runs a seeded Monte Carlo over the default uncertainty set, and
compares the three VaR methods.

Key Concepts:
- Greeks are quoted per display unit: $B per 1% point, per 0.1% of rate, per year
- Vega, Theta and Rho are synthetic shocks applied to the cached baseline
- Combined VaR treats the parametric and empirical estimates as orthogonal

Usage:
    python examples/01_greeks_and_var.py          # Full demo
    python examples/01_greeks_and_var.py --ci     # CI mode (fewer runs)
"""

import argparse
import logging
import sys

# Add src to path if running as script
sys.path.insert(0, "src")

from valuation_risk import (
    ReferenceValuationModel,
    RiskAnalysisConfig,
    RiskAnalysisRunner,
    RiskReporter,
    default_base_inputs,
    factor_adjusted_greeks,
)
from valuation_risk.analysis.reporting import format_greeks_table, format_var_table
from valuation_risk.config.settings import SimulationConfig


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.split("\n")[1])
    parser.add_argument("--ci", action="store_true", help="CI mode (fewer Monte Carlo runs)")
    parser.add_argument("--json", action="store_true", help="Print the JSON report instead")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    model = ReferenceValuationModel()
    base_inputs = default_base_inputs()
    config = RiskAnalysisConfig(
        simulation=SimulationConfig(num_runs=500 if args.ci else 5000, seed=42),
        include_sensitivity=True,
        verbose=True,
    )
    result = RiskAnalysisRunner().run(model, base_inputs, config)

    if args.json:
        print(RiskReporter().to_json(result))
        return

    print("=" * 70)
    print("  GREEKS")
    print("=" * 70)
    print(format_greeks_table(result.greeks))
    print()

    print("Factor-adjusted Deltas:")
    for label, adjusted in factor_adjusted_greeks(result.greeks).items():
        print(
            f"  {label:<25} raw {adjusted.raw:>10.3f}  "
            f"idiosyncratic {adjusted.factor_adjusted:>10.3f}  (ρ={adjusted.correlation:.1f})"
        )
    print()

    print("=" * 70)
    print("  VALUE AT RISK")
    print("=" * 70)
    print(format_var_table(list(result.var.values())))
    print()
    print(RiskReporter().generate_executive_summary(result))


if __name__ == "__main__":
    main()
