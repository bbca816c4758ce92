"""
Monte Carlo simulation of valuation outcomes.

Exports:
- ParameterDistribution, get_default_distribution_spec: input uncertainty
- MonteCarloSampler, run_simulation, SimulationResult: sampling
- Distribution, Histogram, compute_distribution: summary statistics
"""

from valuation_risk.simulation.distributions import (
    DEFAULT_UNCERTAINTY,
    DistributionKind,
    DistributionSpec,
    ParameterDistribution,
    box_muller,
    get_default_distribution_spec,
    parse_distribution_spec,
)
from valuation_risk.simulation.sampler import (
    MonteCarloSampler,
    SimulationResult,
    run_simulation,
)
from valuation_risk.simulation.statistics import (
    Distribution,
    Histogram,
    compute_distribution,
    compute_histogram,
    nearest_rank_percentile,
)

__all__ = [
    # Distributions
    "DEFAULT_UNCERTAINTY",
    "DistributionKind",
    "DistributionSpec",
    "ParameterDistribution",
    "box_muller",
    "get_default_distribution_spec",
    "parse_distribution_spec",
    # Sampler
    "MonteCarloSampler",
    "SimulationResult",
    "run_simulation",
    # Statistics
    "Distribution",
    "Histogram",
    "compute_distribution",
    "compute_histogram",
    "nearest_rank_percentile",
]
