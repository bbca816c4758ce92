#!/usr/bin/env python3
"""
Scenario Attribution Demo - Bull Case vs Base Case.

This example explains the valuation change between the base scenario and a
bull scenario (higher Starlink penetration, earlier colony, lower discount
rate) input by input, using the base-scenario Greeks.

Key Concepts:
- Delta + ½·Gamma·Δx² per changed input, Theta for colony-year shifts,
  Rho for discount-rate changes
- The residual is what the second-order expansion does not capture
  (cross terms and higher orders)

Usage:
    python examples/02_scenario_attribution.py
"""

import sys

# Add src to path if running as script
sys.path.insert(0, "src")

from valuation_risk import (
    ReferenceValuationModel,
    attribute,
    calculate_all_greeks,
    default_base_inputs,
)
from valuation_risk.analysis.reporting import format_attribution_table
from valuation_risk.data.inputs import with_path_values


def main() -> None:
    model = ReferenceValuationModel()
    base = default_base_inputs()
    bull = with_path_values(
        base,
        {
            "earth.starlinkPenetration": 0.20,
            "mars.firstColonyYear": 2028,
            "financial.discountRate": 0.11,
        },
    )

    greeks = calculate_all_greeks(model, base)
    base_value = greeks.baseline
    bull_value = model(bull)

    print(f"Base valuation: ${base_value.total:,.1f}B")
    print(f"Bull valuation: ${bull_value.total:,.1f}B")
    print()

    result = attribute(base, bull, greeks, base_value, bull_value)
    print(format_attribution_table(result))


if __name__ == "__main__":
    main()
