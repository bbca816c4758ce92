"""
One-at-a-time sensitivity analysis of the valuation.

[T2] Varies each input independently between a down and an up value while
holding the others at base, and ranks inputs by the width of the resulting
valuation swing (tornado diagram data). ``sweep`` traces the valuation over
a grid of values for one input.

Unlike the Greeks, these are finite (non-local) moves, so they expose
non-linearity and milestone switches that a local derivative hides.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from valuation_risk.data.inputs import get_path, is_number, with_path_value
from valuation_risk.data.schemas import (
    COLONY_YEAR_PATH,
    DISCOUNT_RATE_PATH,
    Component,
    ValuationResult,
)
from valuation_risk.errors import InvalidInputError
from valuation_risk.valuation.base import ValuationFunction, evaluate
from valuation_risk.validation.gates import ensure_valid_inputs

logger = logging.getLogger(__name__)


# =============================================================================
# Dataclasses
# =============================================================================


@dataclass(frozen=True)
class SensitivityParameter:
    """
    Input to perturb in an OAT analysis.

    Attributes
    ----------
    path : str
        Input path (e.g., "earth.launchVolume")
    display_name : str
        Human-readable name for reports
    base_value : float
        Value in the base scenario
    range_down : float
        Value at the down shock
    range_up : float
        Value at the up shock
    unit : str
        Display unit (e.g., "%", "year")
    """

    path: str
    display_name: str
    base_value: float
    range_down: float
    range_up: float
    unit: str = ""


@dataclass(frozen=True)
class SensitivityResult:
    """
    OAT result for one input.

    Attributes
    ----------
    path, display_name : str
        Input identity
    base_value, down_value, up_value : float
        Input values
    base_valuation, down_valuation, up_valuation : float
        Total valuation at each value ($B)
    down_delta_pct, up_delta_pct : float
        Relative change from base (decimal)
    sensitivity_width : float
        abs(up_delta_pct - down_delta_pct)
    """

    path: str
    display_name: str
    base_value: float
    base_valuation: float
    down_value: float
    down_valuation: float
    up_value: float
    up_valuation: float
    down_delta_pct: float
    up_delta_pct: float
    sensitivity_width: float

    def __post_init__(self) -> None:
        if self.sensitivity_width < 0:
            raise ValueError("CRITICAL: sensitivity_width must be >= 0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "displayName": self.display_name,
            "baseValue": self.base_value,
            "baseValuation": self.base_valuation,
            "downValue": self.down_value,
            "downValuation": self.down_valuation,
            "upValue": self.up_value,
            "upValuation": self.up_valuation,
            "downDeltaPct": self.down_delta_pct,
            "upDeltaPct": self.up_delta_pct,
            "sensitivityWidth": self.sensitivity_width,
        }


@dataclass
class TornadoData:
    """
    Tornado diagram data, sorted by sensitivity width (widest first).

    Attributes
    ----------
    results : list[SensitivityResult]
        Per-input results
    base_valuation : float
        Total valuation at base (center of tornado)
    scenario_name : str
        Label for reports
    """

    results: list[SensitivityResult]
    base_valuation: float
    scenario_name: str = "Base Scenario"
    n_parameters: int = field(init=False)

    def __post_init__(self) -> None:
        self.n_parameters = len(self.results)
        self.results = sorted(self.results, key=lambda r: r.sensitivity_width, reverse=True)

    @property
    def most_sensitive_parameter(self) -> str | None:
        return self.results[0].display_name if self.results else None

    @property
    def least_sensitive_parameter(self) -> str | None:
        return self.results[-1].display_name if self.results else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenarioName": self.scenario_name,
            "baseValuation": self.base_valuation,
            "nParameters": self.n_parameters,
            "results": [r.to_dict() for r in self.results],
        }


# =============================================================================
# Default Parameters
# =============================================================================


def get_default_sensitivity_parameters(
    base_inputs: Mapping[str, Any],
) -> list[SensitivityParameter]:
    """
    Default OAT ranges around the base inputs.

    [T2] Colony year ±5 years, penetration and launch volume ±20% (relative),
    discount rate ±3 points. Paths absent from ``base_inputs`` are skipped.

    Parameters
    ----------
    base_inputs : Mapping
        Base scenario inputs

    Returns
    -------
    list[SensitivityParameter]
        Parameters present in the inputs
    """
    parameters: list[SensitivityParameter] = []

    year = get_path(base_inputs, COLONY_YEAR_PATH)
    if is_number(year):
        parameters.append(
            SensitivityParameter(COLONY_YEAR_PATH, "Colony Year", year, year - 5, year + 5, "year")
        )

    penetration = get_path(base_inputs, "earth.starlinkPenetration")
    if is_number(penetration):
        parameters.append(
            SensitivityParameter(
                "earth.starlinkPenetration",
                "Starlink Penetration",
                penetration,
                max(0.0, penetration * 0.8),
                min(1.0, penetration * 1.2),
                "%",
            )
        )

    launches = get_path(base_inputs, "earth.launchVolume")
    if is_number(launches):
        parameters.append(
            SensitivityParameter(
                "earth.launchVolume", "Launch Volume", launches, launches * 0.8, launches * 1.2, "launches"
            )
        )

    rate = get_path(base_inputs, DISCOUNT_RATE_PATH)
    if is_number(rate):
        parameters.append(
            SensitivityParameter(
                DISCOUNT_RATE_PATH, "Discount Rate", rate, max(0.0, rate - 0.03), rate + 0.03, "%"
            )
        )

    return parameters


# =============================================================================
# Sensitivity Analyzer
# =============================================================================


class SensitivityAnalyzer:
    """
    One-at-a-time sensitivity analysis over a valuation function.

    Parameters
    ----------
    component : Component
        Series to measure (default total)

    Examples
    --------
    >>> analyzer = SensitivityAnalyzer()
    >>> tornado = analyzer.run_oat(model, base_inputs)
    >>> print(f"Most sensitive: {tornado.most_sensitive_parameter}")
    """

    def __init__(self, component: Component = Component.TOTAL):
        self.component = component

    def _value(self, result: ValuationResult) -> float:
        return result.get(self.component)

    def run_single_parameter(
        self,
        valuate: ValuationFunction,
        base_inputs: Mapping[str, Any],
        parameter: SensitivityParameter,
        base_valuation: float,
    ) -> SensitivityResult:
        """
        Evaluate the down and up values of one input.

        Raises
        ------
        ValuationFailureError
            If either shocked valuation fails
        """
        down = self._value(evaluate(valuate, with_path_value(base_inputs, parameter.path, parameter.range_down)))
        up = self._value(evaluate(valuate, with_path_value(base_inputs, parameter.path, parameter.range_up)))

        if base_valuation != 0:
            down_delta_pct = (down - base_valuation) / abs(base_valuation)
            up_delta_pct = (up - base_valuation) / abs(base_valuation)
        else:
            down_delta_pct = 0.0
            up_delta_pct = 0.0

        logger.debug(f"{parameter.display_name}: down {down:.2f}, up {up:.2f}")

        return SensitivityResult(
            path=parameter.path,
            display_name=parameter.display_name,
            base_value=parameter.base_value,
            base_valuation=base_valuation,
            down_value=parameter.range_down,
            down_valuation=down,
            up_value=parameter.range_up,
            up_valuation=up,
            down_delta_pct=down_delta_pct,
            up_delta_pct=up_delta_pct,
            sensitivity_width=abs(up_delta_pct - down_delta_pct),
        )

    def run_oat(
        self,
        valuate: ValuationFunction,
        base_inputs: Mapping[str, Any],
        parameters: list[SensitivityParameter] | None = None,
        scenario_name: str = "Base Scenario",
    ) -> TornadoData:
        """
        Run OAT analysis for all parameters.

        Parameters
        ----------
        valuate : ValuationFunction
            Pure valuation function
        base_inputs : Mapping
            Base scenario inputs (not modified)
        parameters : list[SensitivityParameter], optional
            Inputs to vary. If None, uses the defaults for ``base_inputs``.
        scenario_name : str
            Label for reporting

        Returns
        -------
        TornadoData
            Results sorted by sensitivity width
        """
        ensure_valid_inputs(base_inputs)
        if parameters is None:
            parameters = get_default_sensitivity_parameters(base_inputs)

        base_valuation = self._value(evaluate(valuate, base_inputs))
        results = [
            self.run_single_parameter(valuate, base_inputs, p, base_valuation)
            for p in parameters
        ]
        return TornadoData(results=results, base_valuation=base_valuation, scenario_name=scenario_name)

    def sweep(
        self,
        valuate: ValuationFunction,
        base_inputs: Mapping[str, Any],
        path: str,
        min_value: float,
        max_value: float,
        steps: int = 11,
    ) -> pd.DataFrame:
        """
        Valuation over an evenly spaced grid of one input.

        Parameters
        ----------
        valuate : ValuationFunction
            Pure valuation function
        base_inputs : Mapping
            Base scenario inputs (not modified)
        path : str
            Input to vary
        min_value, max_value : float
            Grid bounds (inclusive)
        steps : int, default 11
            Grid points (>= 2)

        Returns
        -------
        pd.DataFrame
            Columns: value, earth, mars, total

        Raises
        ------
        InvalidInputError
            If steps < 2 or min_value > max_value
        """
        if steps < 2:
            raise InvalidInputError(f"CRITICAL: steps must be >= 2, got {steps}")
        if min_value > max_value:
            raise InvalidInputError(f"CRITICAL: min_value ({min_value}) must be <= max_value ({max_value})")
        ensure_valid_inputs(base_inputs)

        rows = []
        for value in np.linspace(min_value, max_value, steps):
            result = evaluate(valuate, with_path_value(base_inputs, path, float(value)))
            rows.append({"value": float(value), **result.to_dict()})
        return pd.DataFrame(rows, columns=["value", "earth", "mars", "total"])


# =============================================================================
# Formatting Functions
# =============================================================================


def format_sensitivity_result(result: SensitivityResult) -> str:
    """Format one result as a Markdown table row."""
    return (
        f"| {result.display_name:<25} | "
        f"{result.down_delta_pct*100:>+7.1f}% | "
        f"{result.up_delta_pct*100:>+7.1f}% | "
        f"{result.sensitivity_width*100:>6.1f}% |"
    )


def format_tornado_table(tornado: TornadoData) -> str:
    """
    Format tornado data as a Markdown table.

    Parameters
    ----------
    tornado : TornadoData
        Tornado data to format

    Returns
    -------
    str
        Formatted Markdown table
    """
    lines = [
        f"### Sensitivity Analysis: {tornado.scenario_name}",
        f"Base Valuation: ${tornado.base_valuation:,.1f}B",
        "",
        "| Parameter                 | Down Δ   | Up Δ     | Width  |",
        "|---------------------------|----------|----------|--------|",
    ]
    lines.extend(format_sensitivity_result(r) for r in tornado.results)

    if tornado.most_sensitive_parameter:
        lines.append("")
        lines.append(
            f"**Most sensitive**: {tornado.most_sensitive_parameter} "
            f"(width: {tornado.results[0].sensitivity_width*100:.1f}%)"
        )
    return "\n".join(lines)
