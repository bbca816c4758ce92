"""
Tests for the Monte Carlo sampler - simulation/sampler.py.
"""

import numpy as np
import pytest

from valuation_risk.config.settings import SimulationConfig
from valuation_risk.data.schemas import Component
from valuation_risk.errors import InvalidInputError
from valuation_risk.simulation.distributions import (
    ParameterDistribution,
    get_default_distribution_spec,
)
from valuation_risk.simulation.sampler import MonteCarloSampler, run_simulation


@pytest.fixture
def launch_spec() -> dict:
    return {"earth.launchVolume": ParameterDistribution.normal(150.0, 30.0, 10.0, 500.0)}


class TestMonteCarloSampler:
    def test_zero_std_collapses(self, reference_model, base_inputs) -> None:
        spec = {
            "earth.launchVolume": {"kind": "normal", "mean": 150, "stdDev": 0, "min": 150, "max": 150}
        }
        result = run_simulation(reference_model, base_inputs, spec, num_runs=100, seed=1)
        dist = result.distribution
        assert dist.std_dev == pytest.approx(0.0, abs=1e-9)
        assert dist.min == dist.max
        assert dist.mean == pytest.approx(reference_model(base_inputs).total)

    def test_seed_reproducible(self, reference_model, base_inputs, launch_spec) -> None:
        a = run_simulation(reference_model, base_inputs, launch_spec, num_runs=200, seed=42)
        b = run_simulation(reference_model, base_inputs, launch_spec, num_runs=200, seed=42)
        np.testing.assert_array_equal(a.samples[Component.TOTAL], b.samples[Component.TOTAL])

    def test_seed_reproducible_with_workers(self, reference_model, base_inputs, launch_spec) -> None:
        config = SimulationConfig(num_runs=300, seed=7, n_workers=3)
        a = MonteCarloSampler(config).run(reference_model, base_inputs, launch_spec)
        b = MonteCarloSampler(config).run(reference_model, base_inputs, launch_spec)
        np.testing.assert_array_equal(a.samples[Component.TOTAL], b.samples[Component.TOTAL])
        assert len(a.samples[Component.TOTAL]) == 300

    def test_different_seeds_differ(self, reference_model, base_inputs, launch_spec) -> None:
        a = run_simulation(reference_model, base_inputs, launch_spec, num_runs=50, seed=1)
        b = run_simulation(reference_model, base_inputs, launch_spec, num_runs=50, seed=2)
        assert not np.array_equal(a.samples[Component.TOTAL], b.samples[Component.TOTAL])

    def test_statistics_ordered(self, reference_model, base_inputs) -> None:
        spec = get_default_distribution_spec(base_inputs)
        result = run_simulation(reference_model, base_inputs, spec, num_runs=500, seed=3)
        for component in Component:
            assert result.statistics[component].is_ordered
            assert result.statistics[component].n == 500

    def test_failures_clamped_to_zero(self, base_inputs, launch_spec, caplog) -> None:
        def fragile(inputs):
            if inputs["earth"]["launchVolume"] > 150.0:
                raise RuntimeError("out of range")
            return {"earth": 10.0, "mars": 5.0}

        with caplog.at_level("WARNING", logger="valuation_risk.simulation.sampler"):
            result = run_simulation(fragile, base_inputs, launch_spec, num_runs=200, seed=5)

        totals = result.samples[Component.TOTAL]
        assert result.n_failures == int(np.sum(totals == 0.0))
        assert 0 < result.n_failures < 200
        assert set(np.unique(totals)) <= {0.0, 15.0}
        assert result.failure_rate == result.n_failures / 200
        assert "clamped to 0" in caplog.text

    def test_does_not_mutate_inputs(self, reference_model, base_inputs, launch_spec) -> None:
        run_simulation(reference_model, base_inputs, launch_spec, num_runs=20, seed=1)
        assert base_inputs["earth"]["launchVolume"] == 150.0

    def test_base_valuation(self, reference_model, base_inputs, launch_spec) -> None:
        result = run_simulation(reference_model, base_inputs, launch_spec, num_runs=10, seed=1)
        assert result.base_valuation == reference_model(base_inputs)

    @pytest.mark.parametrize(
        "config",
        [
            SimulationConfig(num_runs=0, seed=1),
            SimulationConfig(num_runs=10, bin_count=0, seed=1),
            SimulationConfig(num_runs=10, n_workers=0, seed=1),
        ],
    )
    def test_invalid_config(self, reference_model, base_inputs, launch_spec, config) -> None:
        with pytest.raises(InvalidInputError, match="CRITICAL"):
            MonteCarloSampler(config).run(reference_model, base_inputs, launch_spec)

    def test_invalid_inputs_rejected(self, reference_model, base_inputs, launch_spec, counting_model) -> None:
        base_inputs["financial"]["discountRate"] = -0.5
        counted = counting_model(reference_model)
        with pytest.raises(InvalidInputError):
            run_simulation(counted, base_inputs, launch_spec, num_runs=10, seed=1)
        assert counted.calls == 0

    def test_to_dict(self, reference_model, base_inputs, launch_spec) -> None:
        data = run_simulation(reference_model, base_inputs, launch_spec, num_runs=10, seed=1).to_dict()
        assert data["nRuns"] == 10
        assert set(data["statistics"]) == {"earth", "mars", "total"}
        assert "baseValuation" in data
