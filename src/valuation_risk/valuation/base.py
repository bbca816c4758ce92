"""
Valuation function protocol and guarded evaluation.

The engine consumes any callable ``valuate(inputs) -> {earth, mars, total}``
that is pure, deterministic, synchronous and non-mutating. Every call goes
through :func:`evaluate`, which hands the callable a private deep copy of the
inputs and normalizes its output.
"""

import copy
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from valuation_risk.data.schemas import ValuationResult
from valuation_risk.errors import ValuationFailureError


@runtime_checkable
class ValuationFunction(Protocol):
    """
    Protocol for valuation functions.

    Implementations return a ValuationResult or a mapping with ``earth``,
    ``mars`` and (optionally) ``total`` in $B.
    """

    def __call__(self, inputs: dict[str, Any]) -> ValuationResult | Mapping[str, float]:
        ...


def evaluate(valuate: ValuationFunction, inputs: Mapping[str, Any]) -> ValuationResult:
    """
    Call a valuation function on a private copy of ``inputs``.

    Parameters
    ----------
    valuate : ValuationFunction
        Wrapped valuation function
    inputs : Mapping
        Input parameter set (not modified)

    Returns
    -------
    ValuationResult
        Finite valuation

    Raises
    ------
    ValuationFailureError
        If the function raises or returns non-finite/unreadable output
    """
    try:
        raw = valuate(copy.deepcopy(dict(inputs)))
    except ValuationFailureError:
        raise
    except Exception as e:
        raise ValuationFailureError(
            f"Valuation function raised {type(e).__name__}: {e}"
        ) from e
    return ValuationResult.from_value(raw)
