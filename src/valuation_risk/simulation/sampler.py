"""
Monte Carlo sampler over uncertain valuation inputs.

Each iteration draws one value per distribution path, substitutes the draws
into a deep copy of the base inputs and calls the valuation function. The
earth, mars and total outcomes are collected and summarised.

Failed or non-finite iterations are clamped to 0 and counted; they never
abort a run.

Parallelism: with ``n_workers > 1`` the iterations are split into
contiguous chunks, each with its own stream spawned from one
``np.random.SeedSequence``, run on a thread pool and joined in chunk
order. A given (seed, n_workers) pair is fully reproducible.

See: Glasserman (2003) "Monte Carlo Methods in Financial Engineering"
"""

import logging
import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

import numpy as np

from valuation_risk.config.settings import SimulationConfig
from valuation_risk.data.inputs import with_path_values
from valuation_risk.data.schemas import Component, ValuationResult
from valuation_risk.errors import InvalidInputError, ValuationFailureError
from valuation_risk.simulation.distributions import ParameterDistribution, parse_distribution_spec
from valuation_risk.simulation.statistics import Distribution, compute_distribution
from valuation_risk.valuation.base import ValuationFunction, evaluate
from valuation_risk.validation.gates import ensure_valid_inputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """
    Monte Carlo run output.

    Attributes
    ----------
    statistics : dict[Component, Distribution]
        Summary per series (earth, mars, total)
    samples : dict[Component, np.ndarray]
        Raw outcomes per series, in iteration order
    n_runs : int
        Iterations performed
    n_failures : int
        Iterations clamped to 0 after a failure or non-finite outcome
    seed : int, optional
        Seed used
    base_valuation : ValuationResult, optional
        Valuation at the unperturbed inputs
    elapsed_seconds : float
        Wall-clock duration
    """

    statistics: dict[Component, Distribution]
    samples: dict[Component, np.ndarray]
    n_runs: int
    n_failures: int = 0
    seed: int | None = None
    base_valuation: ValuationResult | None = None
    elapsed_seconds: float = 0.0

    @property
    def distribution(self) -> Distribution:
        """Total-valuation summary."""
        return self.statistics[Component.TOTAL]

    @property
    def failure_rate(self) -> float:
        return self.n_failures / self.n_runs if self.n_runs else 0.0

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "statistics": {c.value: d.to_dict() for c, d in self.statistics.items()},
            "distribution": self.distribution.to_dict(),
            "nRuns": self.n_runs,
            "nFailures": self.n_failures,
            "seed": self.seed,
            "elapsedSeconds": self.elapsed_seconds,
        }
        if self.base_valuation is not None:
            data["baseValuation"] = self.base_valuation.to_dict()
        return data


class MonteCarloSampler:
    """
    Seeded Monte Carlo sampler.

    Parameters
    ----------
    config : SimulationConfig, optional
        Run count, bins, seed and workers. If None, uses defaults.

    Examples
    --------
    >>> sampler = MonteCarloSampler(SimulationConfig(num_runs=1000, seed=42))
    >>> result = sampler.run(model, base_inputs, get_default_distribution_spec(base_inputs))
    >>> result.distribution.is_ordered
    True
    """

    def __init__(self, config: SimulationConfig | None = None):
        self.config = config or SimulationConfig()

    def run(
        self,
        valuate: ValuationFunction,
        base_inputs: Mapping[str, Any],
        distribution_spec: Mapping[str, Any],
        include_base_valuation: bool = True,
    ) -> SimulationResult:
        """
        Run the simulation.

        Parameters
        ----------
        valuate : ValuationFunction
            Pure valuation function
        base_inputs : Mapping
            Unperturbed inputs (never modified)
        distribution_spec : Mapping
            path -> ParameterDistribution (or its dict form)
        include_base_valuation : bool, default True
            Also value the unperturbed inputs

        Returns
        -------
        SimulationResult
            Per-series statistics and raw samples

        Raises
        ------
        InvalidInputError
            If num_runs, bin_count, n_workers or the distributions are invalid, or the
            base inputs fail validation
        """
        config = self.config
        if config.num_runs <= 0:
            raise InvalidInputError(f"CRITICAL: num_runs must be > 0, got {config.num_runs}")
        if config.bin_count <= 0:
            raise InvalidInputError(f"CRITICAL: bin_count must be > 0, got {config.bin_count}")
        if config.n_workers <= 0:
            raise InvalidInputError(f"CRITICAL: n_workers must be > 0, got {config.n_workers}")
        spec = parse_distribution_spec(distribution_spec)
        ensure_valid_inputs(base_inputs)

        start = time.perf_counter()
        base_valuation = evaluate(valuate, base_inputs) if include_base_valuation else None

        n_workers = min(config.n_workers, config.num_runs)
        chunks = np.array_split(np.arange(config.num_runs), n_workers)
        streams = [
            np.random.default_rng(child)
            for child in np.random.SeedSequence(config.seed).spawn(n_workers)
        ]

        if n_workers == 1:
            outputs = [_run_chunk(valuate, base_inputs, spec, len(chunks[0]), streams[0])]
        else:
            with ThreadPoolExecutor(max_workers=n_workers) as pool:
                futures = [
                    pool.submit(_run_chunk, valuate, base_inputs, spec, len(chunk), rng)
                    for chunk, rng in zip(chunks, streams)
                ]
                outputs = [f.result() for f in futures]

        values = np.concatenate([out for out, _ in outputs], axis=0)
        n_failures = sum(failed for _, failed in outputs)

        samples = {component: values[:, i].copy() for i, component in enumerate(Component)}
        statistics = {
            component: compute_distribution(series, config.bin_count)
            for component, series in samples.items()
        }
        elapsed = time.perf_counter() - start

        if n_failures:
            logger.warning(
                f"{n_failures}/{config.num_runs} Monte Carlo iterations failed and were clamped to 0"
            )
        logger.info(
            f"Monte Carlo: {config.num_runs} runs on {n_workers} worker(s) in {elapsed:.2f}s, "
            f"mean total {statistics[Component.TOTAL].mean:.2f}"
        )

        return SimulationResult(
            statistics=statistics,
            samples=samples,
            n_runs=config.num_runs,
            n_failures=n_failures,
            seed=config.seed,
            base_valuation=base_valuation,
            elapsed_seconds=elapsed,
        )


def _run_chunk(
    valuate: ValuationFunction,
    base_inputs: Mapping[str, Any],
    spec: Mapping[str, ParameterDistribution],
    n: int,
    rng: np.random.Generator,
) -> tuple[np.ndarray, int]:
    """Run ``n`` iterations on one stream; return (n x 3 outcomes, failures)."""
    out = np.zeros((n, len(Component)), dtype=float)
    failures = 0
    for i in range(n):
        draws = {path: dist.sample(rng) for path, dist in spec.items()}
        try:
            result = evaluate(valuate, with_path_values(base_inputs, draws))
        except ValuationFailureError as e:
            failures += 1
            logger.debug(f"Iteration failed, clamped to 0: {e}")
            continue
        out[i] = [result.get(component) for component in Component]
    return out, failures


def run_simulation(
    valuate: ValuationFunction,
    base_inputs: Mapping[str, Any],
    distribution_spec: Mapping[str, Any],
    num_runs: int | None = None,
    bin_count: int = 50,
    seed: int | None = None,
    n_workers: int = 1,
) -> SimulationResult:
    """
    Convenience wrapper around :class:`MonteCarloSampler`.

    ``num_runs`` and ``seed`` default to :class:`SimulationConfig`'s
    (5000 runs unseeded, or VALUATION_RISK_MC_RUNS / VALUATION_RISK_MC_SEED).

    Examples
    --------
    >>> result = run_simulation(model, base_inputs, spec, num_runs=500, seed=7)
    >>> result.statistics[Component.TOTAL].p10 <= result.statistics[Component.TOTAL].p90
    True
    """
    defaults = SimulationConfig()
    config = SimulationConfig(
        num_runs=defaults.num_runs if num_runs is None else num_runs,
        bin_count=bin_count,
        seed=defaults.seed if seed is None else seed,
        n_workers=n_workers,
    )
    return MonteCarloSampler(config).run(valuate, base_inputs, distribution_spec)
