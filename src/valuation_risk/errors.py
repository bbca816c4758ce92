"""
Exception taxonomy for the valuation risk engine.

- InvalidInputError: rejected before any valuation call, no partial result
- ValuationFailureError: the wrapped valuation function raised or returned
  non-finite values
- NumericDegeneracyError: an aggregate cannot be formed (e.g. empty sample set)
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from valuation_risk.validation.gates import ValidationReport


class ValuationRiskError(Exception):
    """Base class for all engine errors."""

    pass


class InvalidInputError(ValuationRiskError, ValueError):
    """
    Raised when a parameter or configuration is out of domain.

    Attributes
    ----------
    report : ValidationReport, optional
        Gate report that triggered the rejection
    """

    def __init__(self, message: str, report: "ValidationReport | None" = None):
        super().__init__(message)
        self.report = report


class ValuationFailureError(ValuationRiskError):
    """Raised when the valuation function fails or returns non-finite output."""

    pass


class NumericDegeneracyError(ValuationRiskError):
    """Raised when an aggregate statistic cannot be computed."""

    pass
