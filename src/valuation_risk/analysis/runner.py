"""
Risk analysis runner.

[T2] Orchestrates a full risk run around a valuation function without
modifying it:

    validate inputs -> baseline -> Greeks -> Monte Carlo -> VaR
                    -> optional OAT sensitivity -> optional attribution

Only the Greeks engine and the sampler call the valuation function (plus
one baseline and, for attribution, one compare valuation).
"""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from valuation_risk.analysis.sensitivity import SensitivityAnalyzer, TornadoData
from valuation_risk.attribution.decomposer import AttributionDecomposer, AttributionResult
from valuation_risk.config.settings import SETTINGS, GreeksConfig, SimulationConfig, VaRConfig
from valuation_risk.data.schemas import ValuationResult
from valuation_risk.greeks.finite_difference import DifferentiationEngine
from valuation_risk.greeks.results import GreekSet
from valuation_risk.risk.var import VaRCombiner, VaRMethod, VaRResult
from valuation_risk.simulation.distributions import get_default_distribution_spec
from valuation_risk.simulation.sampler import MonteCarloSampler, SimulationResult
from valuation_risk.valuation.base import ValuationFunction, evaluate
from valuation_risk.validation.gates import ValidationEngine, ValidationReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskAnalysisConfig:
    """
    Configuration for a risk run.

    Attributes
    ----------
    greeks : GreeksConfig
        Bump sizes and scheme
    simulation : SimulationConfig
        Monte Carlo runs, bins, seed and workers
    var : VaRConfig
        Confidence and horizon
    distribution_spec : Mapping, optional
        path -> distribution. If None, uses the default uncertainty set.
    include_simulation : bool
        Run Monte Carlo (otherwise VaR is Greeks-only)
    include_sensitivity : bool
        Run the OAT tornado analysis
    verbose : bool
        Log progress at INFO
    """

    greeks: GreeksConfig = field(default_factory=lambda: SETTINGS.greeks)
    simulation: SimulationConfig = field(default_factory=lambda: SETTINGS.simulation)
    var: VaRConfig = field(default_factory=lambda: SETTINGS.var)
    distribution_spec: Mapping[str, Any] | None = None
    include_simulation: bool = True
    include_sensitivity: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class RiskAnalysisResult:
    """
    Complete risk run output.

    Attributes
    ----------
    baseline : ValuationResult
        Valuation at the base inputs
    greeks : GreekSet
        Bump-and-reprice sensitivities
    var : dict[VaRMethod, VaRResult]
        VaR for every method the run could support
    validation : ValidationReport
        Input gate results
    execution_time_sec : float
        Wall-clock duration
    simulation : SimulationResult, optional
        Monte Carlo output
    sensitivity : TornadoData, optional
        OAT analysis
    attribution : AttributionResult, optional
        Base-to-compare decomposition
    """

    baseline: ValuationResult
    greeks: GreekSet
    var: dict[VaRMethod, VaRResult]
    validation: ValidationReport
    execution_time_sec: float
    simulation: SimulationResult | None = None
    sensitivity: TornadoData | None = None
    attribution: AttributionResult | None = None

    @property
    def headline_var(self) -> VaRResult:
        """Combined VaR when available, else the Greeks-only figure."""
        return self.var.get(VaRMethod.COMBINED, self.var[VaRMethod.GREEKS])

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseline": self.baseline.to_dict(),
            "greeks": self.greeks.to_dict(),
            "var": {m.value: r.to_dict() for m, r in self.var.items()},
            "validation": self.validation.to_dict(),
            "executionTimeSec": self.execution_time_sec,
            "simulation": self.simulation.to_dict() if self.simulation else None,
            "sensitivity": self.sensitivity.to_dict() if self.sensitivity else None,
            "attribution": self.attribution.to_dict() if self.attribution else None,
        }


class RiskAnalysisRunner:
    """
    Runs the full risk workflow for one valuation function.

    Examples
    --------
    >>> runner = RiskAnalysisRunner()
    >>> result = runner.run(model, base_inputs, RiskAnalysisConfig(simulation=SimulationConfig(num_runs=1000, seed=1)))
    >>> print(f"VaR: {result.headline_var.var_value:.1f}")
    """

    def __init__(self, validation_engine: ValidationEngine | None = None):
        self.validation_engine = validation_engine or ValidationEngine()

    def run(
        self,
        valuate: ValuationFunction,
        base_inputs: Mapping[str, Any],
        config: RiskAnalysisConfig | None = None,
        compare_inputs: Mapping[str, Any] | None = None,
        compare_value: ValuationResult | float | None = None,
    ) -> RiskAnalysisResult:
        """
        Execute the risk workflow.

        Parameters
        ----------
        valuate : ValuationFunction
            Pure valuation function
        base_inputs : Mapping
            Base scenario inputs (not modified)
        config : RiskAnalysisConfig, optional
            Run configuration. If None, uses defaults.
        compare_inputs : Mapping, optional
            Scenario to attribute against
        compare_value : ValuationResult or float, optional
            Valuation of ``compare_inputs``; computed when omitted

        Returns
        -------
        RiskAnalysisResult
            All computed artifacts

        Raises
        ------
        InvalidInputError
            If the base inputs fail a HALT gate
        ValuationFailureError
            If the baseline valuation fails
        """
        start_time = time.time()
        config = config or RiskAnalysisConfig()

        report = self.validation_engine.validate_and_raise(base_inputs)
        baseline = evaluate(valuate, base_inputs)
        if config.verbose:
            logger.info(f"Baseline total: ${baseline.total:,.1f}B")

        greeks = DifferentiationEngine(config.greeks).calculate_all_greeks(
            valuate, base_inputs, baseline=baseline
        )
        if config.verbose:
            logger.info(
                f"Greeks: {len(greeks.delta)} deltas, {len(greeks.warnings)} unavailable"
            )

        simulation = None
        if config.include_simulation:
            spec = config.distribution_spec
            if spec is None:
                spec = get_default_distribution_spec(base_inputs)
            simulation = MonteCarloSampler(config.simulation).run(valuate, base_inputs, spec)

        combiner = VaRCombiner(config.var)
        var = {VaRMethod.GREEKS: combiner.compute(VaRMethod.GREEKS, greeks=greeks, current_valuation=baseline)}
        if simulation is not None:
            for method in (VaRMethod.MONTE_CARLO, VaRMethod.COMBINED):
                var[method] = combiner.compute(
                    method, greeks=greeks, distribution=simulation, current_valuation=baseline
                )

        sensitivity = None
        if config.include_sensitivity:
            sensitivity = SensitivityAnalyzer().run_oat(valuate, base_inputs)

        attribution = None
        if compare_inputs is not None:
            if compare_value is None:
                compare_value = evaluate(valuate, compare_inputs)
            attribution = AttributionDecomposer().attribute(
                base_inputs, compare_inputs, greeks, baseline, compare_value
            )

        execution_time = time.time() - start_time
        result = RiskAnalysisResult(
            baseline=baseline,
            greeks=greeks,
            var=var,
            validation=report,
            execution_time_sec=execution_time,
            simulation=simulation,
            sensitivity=sensitivity,
            attribution=attribution,
        )

        if config.verbose:
            headline = result.headline_var
            logger.info(f"Completed in {execution_time:.2f}s")
            logger.info(
                f"{headline.method.value} VaR({headline.confidence:.1%}, "
                f"{headline.time_horizon_days}d): ${headline.var_value:,.1f}B "
                f"({headline.var_percent:.1f}%)"
            )
        return result


def quick_risk_analysis(
    valuate: ValuationFunction,
    base_inputs: Mapping[str, Any],
    num_runs: int = 1000,
    seed: int | None = 42,
    verbose: bool = False,
) -> RiskAnalysisResult:
    """
    Risk run with default settings and a small seeded simulation.

    Examples
    --------
    >>> result = quick_risk_analysis(ReferenceValuationModel(), default_base_inputs())
    >>> result.greeks.is_complete
    True
    """
    config = RiskAnalysisConfig(
        simulation=SimulationConfig(num_runs=num_runs, seed=seed),
        verbose=verbose,
    )
    return RiskAnalysisRunner().run(valuate, base_inputs, config)
