"""
Tests for frozen configuration - config/settings.py.
"""

from dataclasses import FrozenInstanceError

import pytest

from valuation_risk.config.settings import (
    SETTINGS,
    BumpSizeConfig,
    DifferentiationMode,
    GreeksConfig,
    SimulationConfig,
    VaRConfig,
)
from valuation_risk.data.schemas import BumpProfile


class TestBumpSizeConfig:
    """Bump sizes per profile."""

    def test_defaults(self) -> None:
        sizes = BumpSizeConfig()
        assert sizes.for_profile(BumpProfile.PERCENTAGE) == 0.01
        assert sizes.for_profile(BumpProfile.ABSOLUTE) == 1.0
        assert sizes.for_profile(BumpProfile.TIME_YEAR) == 1.0
        assert sizes.for_profile(BumpProfile.VOLATILITY) == 0.01
        assert sizes.for_profile(BumpProfile.RATE) == 0.001

    def test_with_overrides_returns_copy(self) -> None:
        sizes = BumpSizeConfig()
        custom = sizes.with_overrides(rate=0.0005)
        assert custom.rate == 0.0005
        assert sizes.rate == 0.001

    @pytest.mark.parametrize("field", ["percentage", "absolute", "time", "volatility", "rate"])
    def test_non_positive_rejected(self, field: str) -> None:
        with pytest.raises(ValueError, match=field):
            BumpSizeConfig(**{field: 0.0})

    def test_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            BumpSizeConfig().rate = 0.01  # type: ignore


class TestGreeksConfig:
    """Greeks configuration."""

    def test_default_is_central(self) -> None:
        config = GreeksConfig()
        assert config.mode is DifferentiationMode.CENTRAL
        assert config.use_central_difference

    def test_horizon_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="horizon_years"):
            GreeksConfig(horizon_years=0)


class TestSimulationConfig:
    """Environment overrides for Monte Carlo."""

    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("VALUATION_RISK_MC_RUNS", raising=False)
        monkeypatch.delenv("VALUATION_RISK_MC_SEED", raising=False)
        config = SimulationConfig()
        assert config.num_runs == 5000
        assert config.bin_count == 50
        assert config.seed is None
        assert config.n_workers == 1

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("VALUATION_RISK_MC_RUNS", "123")
        monkeypatch.setenv("VALUATION_RISK_MC_SEED", "7")
        config = SimulationConfig()
        assert config.num_runs == 123
        assert config.seed == 7

    def test_blank_env_uses_default(self, monkeypatch) -> None:
        monkeypatch.setenv("VALUATION_RISK_MC_RUNS", "  ")
        assert SimulationConfig().num_runs == 5000

    def test_invalid_env_raises(self, monkeypatch) -> None:
        monkeypatch.setenv("VALUATION_RISK_MC_RUNS", "many")
        with pytest.raises(ValueError, match="VALUATION_RISK_MC_RUNS"):
            SimulationConfig()

    def test_explicit_value_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("VALUATION_RISK_MC_RUNS", "123")
        assert SimulationConfig(num_runs=10).num_runs == 10


class TestMasterSettings:
    """SETTINGS singleton."""

    def test_var_defaults(self) -> None:
        assert SETTINGS.var == VaRConfig()
        assert SETTINGS.var.confidence == 0.99
        assert SETTINGS.var.time_horizon_days == 10
        assert SETTINGS.var.expected_shortfall_multiplier == 1.2

    def test_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            SETTINGS.var = VaRConfig()  # type: ignore
