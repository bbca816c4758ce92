"""
P&L attribution of a valuation change to its inputs.

[T1] Second-order Taylor expansion per changed input:

    delta_pnl = Delta · Δx
    gamma_pnl = 0.5 · Gamma · Δx²
    theta_pnl = Theta · |Δt|       (colony year)
    rho_pnl   = Rho · Δr           (discount rate)
    vega_pnl  = Vega · Δσ          (volatility)

with Δx expressed in the Greek's display units (see registry).

[T3] Unregistered inputs fall back to a proportional estimate
base_value · (Δx / |x|) · 0.1, flagged with note "estimate".

A numeric input present on one side only is attributed as a change from 0
and noted "added input" or "removed input".

A valuation gap with no changed input is booked as a single
"Unexplained Difference" methodology record, never as a Greek.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import pandas as pd

from valuation_risk.attribution.registry import ATTRIBUTION_REGISTRY, AttributionEntry
from valuation_risk.config.tolerances import (
    ATTRIBUTION_CHANGE_THRESHOLD,
    VALUATION_GAP_TOLERANCE,
)
from valuation_risk.data.inputs import get_path, is_number, leaf_paths
from valuation_risk.data.schemas import ValuationResult
from valuation_risk.greeks.results import GreekKind, GreekSet

logger = logging.getLogger(__name__)

UNEXPLAINED_LABEL = "Unexplained Difference"
ESTIMATE_NOTE = "estimate"
ESTIMATE_FACTOR = 0.1
ADDED_NOTE = "added input"
REMOVED_NOTE = "removed input"


@dataclass(frozen=True)
class AttributionDetail:
    """
    Contribution of one input to the valuation change.

    ``total_contribution`` is always the sum of the five Greek terms and
    ``methodology_pnl``.
    """

    input_label: str
    change: float
    delta_pnl: float = 0.0
    gamma_pnl: float = 0.0
    theta_pnl: float = 0.0
    rho_pnl: float = 0.0
    vega_pnl: float = 0.0
    methodology_pnl: float = 0.0
    path: str | None = None
    note: str | None = None

    @property
    def total_contribution(self) -> float:
        return (
            self.delta_pnl
            + self.gamma_pnl
            + self.theta_pnl
            + self.rho_pnl
            + self.vega_pnl
            + self.methodology_pnl
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "inputLabel": self.input_label,
            "path": self.path,
            "change": self.change,
            "deltaPnL": self.delta_pnl,
            "gammaPnL": self.gamma_pnl,
            "thetaPnL": self.theta_pnl,
            "rhoPnL": self.rho_pnl,
            "vegaPnL": self.vega_pnl,
            "methodologyPnL": self.methodology_pnl,
            "totalContribution": self.total_contribution,
        }
        if self.note is not None:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class AttributionResult:
    """
    Aggregated attribution between two scenarios.

    Attributes
    ----------
    details : tuple[AttributionDetail, ...]
        One record per changed input (or the unexplained-gap record)
    base_value : float
        Total valuation of the base scenario
    compare_value : float, optional
        Total valuation of the compare scenario
    """

    details: tuple[AttributionDetail, ...] = field(default_factory=tuple)
    base_value: float = 0.0
    compare_value: float | None = None

    @property
    def delta_pnl(self) -> float:
        return sum(d.delta_pnl for d in self.details)

    @property
    def gamma_pnl(self) -> float:
        return sum(d.gamma_pnl for d in self.details)

    @property
    def theta_pnl(self) -> float:
        return sum(d.theta_pnl for d in self.details)

    @property
    def rho_pnl(self) -> float:
        return sum(d.rho_pnl for d in self.details)

    @property
    def vega_pnl(self) -> float:
        return sum(d.vega_pnl for d in self.details)

    @property
    def methodology_pnl(self) -> float:
        return sum(d.methodology_pnl for d in self.details)

    @property
    def explained(self) -> float:
        """Sum of every detail's contribution."""
        return sum(d.total_contribution for d in self.details)

    @property
    def actual_change(self) -> float | None:
        if self.compare_value is None:
            return None
        return self.compare_value - self.base_value

    @property
    def residual(self) -> float | None:
        """Actual change minus the attributed total (higher-order and cross terms)."""
        actual = self.actual_change
        return None if actual is None else actual - self.explained

    def to_dict(self) -> dict[str, Any]:
        return {
            "deltaPnL": self.delta_pnl,
            "gammaPnL": self.gamma_pnl,
            "thetaPnL": self.theta_pnl,
            "rhoPnL": self.rho_pnl,
            "vegaPnL": self.vega_pnl,
            "methodologyPnL": self.methodology_pnl,
            "explained": self.explained,
            "baseValue": self.base_value,
            "compareValue": self.compare_value,
            "actualChange": self.actual_change,
            "residual": self.residual,
            "details": [d.to_dict() for d in self.details],
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per detail with snake_case columns."""
        columns = [
            "input_label", "path", "change", "delta_pnl", "gamma_pnl", "theta_pnl",
            "rho_pnl", "vega_pnl", "methodology_pnl", "total_contribution", "note",
        ]
        rows = [
            {
                "input_label": d.input_label,
                "path": d.path,
                "change": d.change,
                "delta_pnl": d.delta_pnl,
                "gamma_pnl": d.gamma_pnl,
                "theta_pnl": d.theta_pnl,
                "rho_pnl": d.rho_pnl,
                "vega_pnl": d.vega_pnl,
                "methodology_pnl": d.methodology_pnl,
                "total_contribution": d.total_contribution,
                "note": d.note,
            }
            for d in self.details
        ]
        return pd.DataFrame(rows, columns=columns)


def _total(value: ValuationResult | float | None) -> float | None:
    if value is None:
        return None
    if isinstance(value, ValuationResult):
        return value.total
    return float(value)


def _finite_or_flag(terms: dict[str, float]) -> tuple[dict[str, float], str | None]:
    """Replace non-finite terms with 0 and name them."""
    bad = [name for name, v in terms.items() if not math.isfinite(v)]
    if not bad:
        return terms, None
    cleaned = {name: (0.0 if name in bad else v) for name, v in terms.items()}
    return cleaned, f"non-finite {', '.join(bad)} set to 0"


class AttributionDecomposer:
    """
    Registry-driven Taylor attribution.

    Parameters
    ----------
    registry : Mapping[str, AttributionEntry], optional
        path -> entry. If None, uses ATTRIBUTION_REGISTRY.
    change_threshold : float
        Changes with smaller magnitude are ignored
    """

    def __init__(
        self,
        registry: Mapping[str, AttributionEntry] | None = None,
        change_threshold: float = ATTRIBUTION_CHANGE_THRESHOLD,
    ):
        self.registry = ATTRIBUTION_REGISTRY if registry is None else registry
        self.change_threshold = change_threshold

    def attribute(
        self,
        base_inputs: Mapping[str, Any],
        compare_inputs: Mapping[str, Any],
        greeks: GreekSet,
        base_value: ValuationResult | float | None = None,
        compare_value: ValuationResult | float | None = None,
    ) -> AttributionResult:
        """
        Decompose the change from ``base_inputs`` to ``compare_inputs``.

        Parameters
        ----------
        base_inputs, compare_inputs : Mapping
            Scenario inputs (not modified)
        greeks : GreekSet
            Greeks computed at ``base_inputs``
        base_value : ValuationResult or float, optional
            Base valuation; defaults to the Greeks' baseline
        compare_value : ValuationResult or float, optional
            Compare valuation; enables ``residual`` and the unexplained-gap record

        Returns
        -------
        AttributionResult
            Details in sorted path order
        """
        base_total = _total(base_value)
        if base_total is None:
            base_total = greeks.baseline.total
        compare_total = _total(compare_value)

        paths = sorted(set(leaf_paths(base_inputs)) | set(leaf_paths(compare_inputs)))
        details: list[AttributionDetail] = []

        for path in paths:
            old = get_path(base_inputs, path)
            new = get_path(compare_inputs, path)

            presence = None
            if old is None and is_number(new):
                old, presence = 0.0, ADDED_NOTE
            elif new is None and is_number(old):
                new, presence = 0.0, REMOVED_NOTE

            if not (is_number(old) and is_number(new)):
                if old != new:
                    entry = self.registry.get(path)
                    details.append(
                        AttributionDetail(
                            input_label=entry.label if entry else path,
                            change=0.0,
                            path=path,
                            note=f"non-numeric change: {old!r} -> {new!r}",
                        )
                    )
                continue

            change = float(new) - float(old)
            if abs(change) < self.change_threshold:
                continue

            entry = self.registry.get(path)
            detail = None
            if entry is not None:
                detail = self._from_greeks(path, entry, change, greeks)
            if detail is None:
                detail = self._estimate(path, entry, float(old), change, base_total)
            if presence is not None:
                note = presence if detail.note is None else f"{presence}; {detail.note}"
                detail = replace(detail, note=note)
            details.append(detail)

        if (
            not details
            and compare_total is not None
            and abs(compare_total - base_total) > VALUATION_GAP_TOLERANCE
        ):
            details.append(
                AttributionDetail(
                    input_label=UNEXPLAINED_LABEL,
                    change=0.0,
                    methodology_pnl=compare_total - base_total,
                    note="valuation gap with identical inputs",
                )
            )

        result = AttributionResult(
            details=tuple(details),
            base_value=base_total,
            compare_value=compare_total,
        )
        logger.debug(
            f"Attributed {len(details)} input change(s): explained {result.explained:.4f}, "
            f"residual {result.residual}"
        )
        return result

    def _from_greeks(
        self,
        path: str,
        entry: AttributionEntry,
        change: float,
        greeks: GreekSet,
    ) -> AttributionDetail | None:
        """Taylor terms for a registered input, or None if its Greek is unavailable."""
        greek = greeks.get(entry.greek_source, entry.lookup_label)
        if greek is None:
            return None

        scaled = entry.scaled_change(change)
        terms = {"delta": 0.0, "gamma": 0.0, "theta": 0.0, "rho": 0.0, "vega": 0.0}
        if entry.greek_source is GreekKind.DELTA:
            terms["delta"] = greek * scaled
            gamma = greeks.get(GreekKind.GAMMA, entry.lookup_label)
            if gamma is not None:
                terms["gamma"] = 0.5 * gamma * scaled * scaled
        elif entry.greek_source is GreekKind.THETA:
            terms["theta"] = greek * abs(change)
        elif entry.greek_source is GreekKind.RHO:
            terms["rho"] = greek * scaled
        elif entry.greek_source is GreekKind.VEGA:
            terms["vega"] = greek * scaled

        terms, note = _finite_or_flag(terms)
        return AttributionDetail(
            input_label=entry.label,
            change=change,
            delta_pnl=terms["delta"],
            gamma_pnl=terms["gamma"],
            theta_pnl=terms["theta"],
            rho_pnl=terms["rho"],
            vega_pnl=terms["vega"],
            path=path,
            note=note,
        )

    def _estimate(
        self,
        path: str,
        entry: AttributionEntry | None,
        old: float,
        change: float,
        base_total: float,
    ) -> AttributionDetail:
        """Proportional fallback for inputs without a usable Greek."""
        relative = change / abs(old) if old != 0 else change
        terms, note = _finite_or_flag({"delta": base_total * relative * ESTIMATE_FACTOR})
        return AttributionDetail(
            input_label=entry.label if entry else path,
            change=change,
            delta_pnl=terms["delta"],
            path=path,
            note=ESTIMATE_NOTE if note is None else f"{ESTIMATE_NOTE}; {note}",
        )


def attribute(
    base_inputs: Mapping[str, Any],
    compare_inputs: Mapping[str, Any],
    greeks: GreekSet,
    base_value: ValuationResult | float | None = None,
    compare_value: ValuationResult | float | None = None,
) -> AttributionResult:
    """
    Convenience wrapper around :class:`AttributionDecomposer`.

    Examples
    --------
    >>> compare = with_path_value(base_inputs, "earth.starlinkPenetration", 0.17)
    >>> result = attribute(base_inputs, compare, greeks, base_value, model(compare))
    >>> result.details[0].input_label
    'Starlink Penetration'
    """
    return AttributionDecomposer().attribute(
        base_inputs, compare_inputs, greeks, base_value, compare_value
    )
