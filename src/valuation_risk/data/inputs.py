"""
Helpers for nested input parameter sets.

An input parameter set is a nested mapping ``{category: {field: number}}``.
All helpers are non-mutating: every write returns a deep copy so a valuation
function never sees an object shared with the caller or another bump.
"""

import copy
import math
from collections.abc import Iterator, Mapping
from typing import Any

InputParameterSet = dict[str, Any]


def _split(path: str) -> list[str]:
    parts = path.split(".")
    if len(parts) < 2 or any(not p for p in parts):
        raise ValueError(f"CRITICAL: Invalid input path '{path}': expected 'category.field'")
    return parts


def get_path(inputs: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """
    Read a dotted path from nested inputs.

    Examples
    --------
    >>> get_path({"earth": {"launchVolume": 150}}, "earth.launchVolume")
    150
    >>> get_path({}, "mars.firstColonyYear") is None
    True
    """
    node: Any = inputs
    for key in _split(path):
        if not isinstance(node, Mapping) or key not in node:
            return default
        node = node[key]
    return node


def has_path(inputs: Mapping[str, Any], path: str) -> bool:
    """True when ``path`` resolves to a non-None value."""
    return get_path(inputs, path) is not None


def with_path_value(inputs: Mapping[str, Any], path: str, value: Any) -> InputParameterSet:
    """
    Return a deep copy of ``inputs`` with ``path`` set to ``value``.

    Missing intermediate categories are created.
    """
    return with_path_values(inputs, {path: value})


def with_path_values(inputs: Mapping[str, Any], values: Mapping[str, Any]) -> InputParameterSet:
    """Return a deep copy of ``inputs`` with several paths replaced."""
    updated = copy.deepcopy(dict(inputs))
    for path, value in values.items():
        _set_in_place(updated, path, value)
    return updated


def _set_in_place(node: dict[str, Any], path: str, value: Any) -> None:
    parts = _split(path)
    for key in parts[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            # Replace scalars or foreign mappings with a private dict
            child = dict(child) if isinstance(child, Mapping) else {}
            node[key] = child
        node = child
    node[parts[-1]] = value


def iter_leaf_paths(inputs: Mapping[str, Any], prefix: str = "") -> Iterator[tuple[str, Any]]:
    """
    Yield ``(path, value)`` for every non-mapping leaf.

    Top-level scalars are skipped; inputs are always grouped by category.
    """
    for key, value in inputs.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            yield from iter_leaf_paths(value, path)
        elif prefix:
            yield path, value


def leaf_paths(inputs: Mapping[str, Any]) -> list[str]:
    """Sorted list of leaf paths."""
    return sorted(path for path, _ in iter_leaf_paths(inputs))


def is_number(value: Any) -> bool:
    """True for real numbers (bools excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def numeric_leaves(inputs: Mapping[str, Any]) -> dict[str, float]:
    """Map of path -> float for every finite numeric leaf."""
    leaves: dict[str, float] = {}
    for path, value in iter_leaf_paths(inputs):
        if is_number(value) and math.isfinite(value):
            leaves[path] = float(value)
    return leaves
