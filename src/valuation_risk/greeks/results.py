"""
Greek result containers.

A GreekSet is computed against exactly one baseline valuation and is never
modified after construction. Entries are partitioned by valuation component
(earth / mars / total), then by Greek kind, then by input label.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

import pandas as pd

from valuation_risk.config.settings import DifferentiationMode
from valuation_risk.data.schemas import Component, ValuationResult


class GreekKind(Enum):
    """Sensitivity dimensions."""

    DELTA = "delta"
    GAMMA = "gamma"
    VEGA = "vega"
    THETA = "theta"
    RHO = "rho"


@dataclass(frozen=True)
class GreekValue:
    """
    A single sensitivity.

    Attributes
    ----------
    value : float
        Sensitivity in $B per display unit of the input
    unit : str
        Display unit (e.g. "$B/%", "$B/year²")
    """

    value: float
    unit: str

    def to_dict(self) -> dict[str, float | str]:
        return {"value": self.value, "unit": self.unit}


@dataclass(frozen=True)
class GreekWarning:
    """
    Record of a Greek entry omitted because a bump evaluation failed.

    Attributes
    ----------
    kind : GreekKind
        Greek that could not be computed
    label : str
        Input label
    reason : str
        Failure description
    """

    kind: GreekKind
    label: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "label": self.label, "reason": self.reason}


GreekTable = Mapping[Component, Mapping[GreekKind, Mapping[str, GreekValue]]]


@dataclass(frozen=True)
class GreekSet:
    """
    Complete set of Greeks for one baseline.

    Attributes
    ----------
    baseline : ValuationResult
        Valuation at the unbumped inputs
    entries : GreekTable
        component -> kind -> label -> GreekValue
    mode : DifferentiationMode
        Scheme used for first-order Greeks
    warnings : tuple[GreekWarning, ...]
        Entries omitted because a bump evaluation failed

    Examples
    --------
    >>> greeks.get(GreekKind.DELTA, "Starlink Penetration")
    450.0
    >>> greeks.is_complete
    True
    """

    baseline: ValuationResult
    entries: GreekTable
    mode: DifferentiationMode = DifferentiationMode.CENTRAL
    warnings: tuple[GreekWarning, ...] = field(default_factory=tuple)

    @property
    def is_complete(self) -> bool:
        """True when no Greek entry was dropped."""
        return not self.warnings

    def table(
        self, kind: GreekKind, component: Component = Component.TOTAL
    ) -> Mapping[str, GreekValue]:
        """All entries of one kind for one component."""
        return self.entries.get(component, {}).get(kind, {})

    def get(
        self,
        kind: GreekKind,
        label: str,
        component: Component = Component.TOTAL,
    ) -> float | None:
        """Value of one Greek, or None when unavailable."""
        entry = self.table(kind, component).get(label)
        return entry.value if entry is not None else None

    def labels(self, kind: GreekKind) -> list[str]:
        """Input labels with an entry of this kind (total component)."""
        return list(self.table(kind).keys())

    @property
    def delta(self) -> Mapping[str, GreekValue]:
        return self.table(GreekKind.DELTA)

    @property
    def gamma(self) -> Mapping[str, GreekValue]:
        return self.table(GreekKind.GAMMA)

    @property
    def vega(self) -> Mapping[str, GreekValue]:
        return self.table(GreekKind.VEGA)

    @property
    def theta(self) -> Mapping[str, GreekValue]:
        return self.table(GreekKind.THETA)

    @property
    def rho(self) -> Mapping[str, GreekValue]:
        return self.table(GreekKind.RHO)

    def to_dict(self) -> dict:
        """
        Serialize to plain data.

        Top-level Greek keys hold the total component; ``earth`` and ``mars``
        hold the component partitions.
        """

        def _partition(component: Component) -> dict:
            return {
                kind.value: {
                    label: entry.to_dict()
                    for label, entry in self.table(kind, component).items()
                }
                for kind in GreekKind
            }

        data = _partition(Component.TOTAL)
        data["earth"] = _partition(Component.EARTH)
        data["mars"] = _partition(Component.MARS)
        data["baseline"] = self.baseline.to_dict()
        data["mode"] = self.mode.value
        data["warnings"] = [w.to_dict() for w in self.warnings]
        return data

    def to_frame(self) -> pd.DataFrame:
        """
        Long-format DataFrame with one row per (component, greek, input).

        Columns: component, greek, input, value, unit.
        """
        rows = [
            {
                "component": component.value,
                "greek": kind.value,
                "input": label,
                "value": entry.value,
                "unit": entry.unit,
            }
            for component, kinds in self.entries.items()
            for kind, labels in kinds.items()
            for label, entry in labels.items()
        ]
        return pd.DataFrame(rows, columns=["component", "greek", "input", "value", "unit"])
