"""
Factor-adjusted Greeks.

Splits each Delta into a systematic (market factor) part and an
idiosyncratic part using an assumed correlation with the market factor:

    factor_component = Delta · ρ
    factor_adjusted  = Delta · (1 - ρ)

[T3] Correlations are judgement-based assumptions, not estimates.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from valuation_risk.greeks.results import GreekSet

#: Assumed correlation of each input with the market factor, by input label
DEFAULT_FACTOR_CORRELATIONS: dict[str, float] = {
    "Starlink Penetration": 0.3,
    "Discount Rate": 0.4,
    "Launch Volume": 0.2,
    "Colony Year": 0.1,
}

DEFAULT_FACTOR_CORRELATION = 0.1


@dataclass(frozen=True)
class FactorAdjustedGreek:
    """
    Delta split into factor and idiosyncratic parts.

    Attributes
    ----------
    label : str
        Input label
    raw : float
        Delta as computed ($B per display unit)
    factor_adjusted : float
        Idiosyncratic part, raw·(1-ρ)
    factor_component : float
        Systematic part, raw·ρ
    correlation : float
        ρ used
    """

    label: str
    raw: float
    factor_adjusted: float
    factor_component: float
    correlation: float

    def to_dict(self) -> dict[str, float | str]:
        return {
            "label": self.label,
            "raw": self.raw,
            "factorAdjusted": self.factor_adjusted,
            "factorComponent": self.factor_component,
            "correlation": self.correlation,
        }


def factor_adjusted_greeks(
    greeks: GreekSet,
    correlations: Mapping[str, float] | None = None,
) -> dict[str, FactorAdjustedGreek]:
    """
    Factor-adjust every total-component Delta.

    Parameters
    ----------
    greeks : GreekSet
        Computed Greeks
    correlations : Mapping[str, float], optional
        Label -> factor correlation. Labels not listed use 0.1.

    Returns
    -------
    dict[str, FactorAdjustedGreek]
        Keyed by input label, in Delta order

    Raises
    ------
    ValueError
        If a correlation lies outside [-1, 1]

    Examples
    --------
    >>> adjusted = factor_adjusted_greeks(greeks)
    >>> adjusted["Starlink Penetration"].factor_component
    135.0
    """
    table = DEFAULT_FACTOR_CORRELATIONS if correlations is None else correlations
    result: dict[str, FactorAdjustedGreek] = {}
    for label, entry in greeks.delta.items():
        rho = float(table.get(label, DEFAULT_FACTOR_CORRELATION))
        if not -1.0 <= rho <= 1.0:
            raise ValueError(f"CRITICAL: correlation for '{label}' must be in [-1, 1], got {rho}")
        result[label] = FactorAdjustedGreek(
            label=label,
            raw=entry.value,
            factor_adjusted=entry.value * (1.0 - rho),
            factor_component=entry.value * rho,
            correlation=rho,
        )
    return result
