"""
P&L attribution between two input scenarios.
"""

from valuation_risk.attribution.decomposer import (
    ESTIMATE_NOTE,
    UNEXPLAINED_LABEL,
    AttributionDecomposer,
    AttributionDetail,
    AttributionResult,
    attribute,
)
from valuation_risk.attribution.registry import (
    ATTRIBUTION_REGISTRY,
    AttributionEntry,
    UnitKind,
)

__all__ = [
    "ATTRIBUTION_REGISTRY",
    "AttributionEntry",
    "UnitKind",
    "ESTIMATE_NOTE",
    "UNEXPLAINED_LABEL",
    "AttributionDecomposer",
    "AttributionDetail",
    "AttributionResult",
    "attribute",
]
