"""
Input distributions for Monte Carlo sampling.

Each uncertain input path carries a ParameterDistribution: normal (drawn by
Box–Muller from two uniforms) or uniform, clamped to [clamp_min, clamp_max].

[T1] Box–Muller: z = sqrt(-2 ln u1) · cos(2π u2), u1, u2 ~ U(0, 1)

See: Glasserman (2003) Ch. 2.3 - Normal random variables
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from valuation_risk.data.inputs import get_path, is_number
from valuation_risk.errors import InvalidInputError


class DistributionKind(Enum):
    """Sampling law for one input."""

    NORMAL = "normal"
    UNIFORM = "uniform"


@dataclass(frozen=True)
class ParameterDistribution:
    """
    Distribution of a single uncertain input.

    Attributes
    ----------
    kind : DistributionKind
        Normal or uniform
    mean : float
        Centre for normal draws
    std_dev : float
        Standard deviation for normal draws (>= 0)
    min : float, optional
        Lower bound; uniform support and default clamp floor
    max : float, optional
        Upper bound; uniform support and default clamp cap
    clamp_min : float, optional
        Draws below are clamped up (defaults to ``min``)
    clamp_max : float, optional
        Draws above are clamped down (defaults to ``max``)

    Examples
    --------
    >>> ParameterDistribution.normal(mean=150.0, std_dev=30.0, min=10.0, max=500.0)
    >>> ParameterDistribution.from_dict({"kind": "uniform", "min": 0.0, "max": 0.2})
    """

    kind: DistributionKind
    mean: float = 0.0
    std_dev: float = 0.0
    min: float | None = None
    max: float | None = None
    clamp_min: float | None = None
    clamp_max: float | None = None

    def __post_init__(self) -> None:
        for name in ("mean", "std_dev", "min", "max", "clamp_min", "clamp_max"):
            value = getattr(self, name)
            if value is not None and not math.isfinite(value):
                raise InvalidInputError(f"CRITICAL: distribution {name} must be finite, got {value}")
        if self.kind is DistributionKind.NORMAL and self.std_dev < 0:
            raise InvalidInputError(f"CRITICAL: std_dev must be >= 0, got {self.std_dev}")
        if self.kind is DistributionKind.UNIFORM:
            if self.min is None or self.max is None:
                raise InvalidInputError("CRITICAL: uniform distribution requires min and max")
            if self.min > self.max:
                raise InvalidInputError(
                    f"CRITICAL: uniform min ({self.min}) must be <= max ({self.max})"
                )
        low, high = self.lower_bound, self.upper_bound
        if low is not None and high is not None and low > high:
            raise InvalidInputError(f"CRITICAL: clamp bounds inverted: [{low}, {high}]")

    @classmethod
    def normal(
        cls,
        mean: float,
        std_dev: float,
        min: float | None = None,
        max: float | None = None,
    ) -> "ParameterDistribution":
        """Normal distribution clamped to [min, max]."""
        return cls(kind=DistributionKind.NORMAL, mean=mean, std_dev=std_dev, min=min, max=max)

    @classmethod
    def uniform(cls, min: float, max: float) -> "ParameterDistribution":
        """Uniform distribution on [min, max]."""
        return cls(kind=DistributionKind.UNIFORM, mean=0.5 * (min + max), min=min, max=max)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParameterDistribution":
        """
        Build from a plain mapping.

        Accepts ``kind`` (or ``type``; default normal), ``mean``,
        ``stdDev``/``std_dev``, ``min``, ``max``, ``clampMin``/``clamp_min``
        and ``clampMax``/``clamp_max``.

        Raises
        ------
        InvalidInputError
            If the kind is unknown or a field is not numeric
        """
        raw_kind = data.get("kind", data.get("type", DistributionKind.NORMAL.value))
        try:
            kind = raw_kind if isinstance(raw_kind, DistributionKind) else DistributionKind(raw_kind)
        except ValueError as e:
            raise InvalidInputError(f"CRITICAL: Unknown distribution kind: {raw_kind!r}") from e

        def _field(*names: str) -> float | None:
            for name in names:
                value = data.get(name)
                if value is None:
                    continue
                if not is_number(value):
                    raise InvalidInputError(f"CRITICAL: Distribution field '{name}' must be numeric, got {value!r}")
                return float(value)
            return None

        minimum = _field("min")
        maximum = _field("max")
        mean = _field("mean")
        if mean is None:
            mean = 0.5 * (minimum + maximum) if minimum is not None and maximum is not None else 0.0

        return cls(
            kind=kind,
            mean=mean,
            std_dev=_field("stdDev", "std_dev") or 0.0,
            min=minimum,
            max=maximum,
            clamp_min=_field("clampMin", "clamp_min"),
            clamp_max=_field("clampMax", "clamp_max"),
        )

    @property
    def lower_bound(self) -> float | None:
        """Effective clamp floor."""
        return self.clamp_min if self.clamp_min is not None else self.min

    @property
    def upper_bound(self) -> float | None:
        """Effective clamp cap."""
        return self.clamp_max if self.clamp_max is not None else self.max

    def sample(self, rng: np.random.Generator) -> float:
        """
        Draw one clamped value.

        Parameters
        ----------
        rng : np.random.Generator
            Random stream (consumed: two uniforms for normal, one for uniform)

        Returns
        -------
        float
            Sampled value within the clamp bounds
        """
        if self.kind is DistributionKind.NORMAL:
            value = self.mean + self.std_dev * box_muller(rng.random(), rng.random())
        else:
            value = self.min + (self.max - self.min) * rng.random()
        return self.clamp(value)

    def clamp(self, value: float) -> float:
        """Clamp a value to the effective bounds."""
        if self.lower_bound is not None and value < self.lower_bound:
            value = self.lower_bound
        if self.upper_bound is not None and value > self.upper_bound:
            value = self.upper_bound
        return value

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "mean": self.mean,
            "stdDev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "clampMin": self.lower_bound,
            "clampMax": self.upper_bound,
        }


def box_muller(u1: float, u2: float) -> float:
    """
    Standard normal draw from two uniforms on [0, 1).

    ``1 - u1`` lies in (0, 1], so the logarithm is always finite.
    """
    return math.sqrt(-2.0 * math.log(1.0 - u1)) * math.cos(2.0 * math.pi * u2)


DistributionSpec = Mapping[str, ParameterDistribution]


def parse_distribution_spec(spec: Mapping[str, Any]) -> dict[str, ParameterDistribution]:
    """
    Normalise a distribution spec.

    Accepts a flat mapping ``path -> ParameterDistribution | mapping`` or a
    nested one ``category -> field -> mapping`` as sent by clients.

    Raises
    ------
    InvalidInputError
        If an entry is malformed or a path lacks a category
    """
    parsed: dict[str, ParameterDistribution] = {}
    for key, value in spec.items():
        if isinstance(value, ParameterDistribution):
            parsed[key] = value
        elif isinstance(value, Mapping) and "." not in key and _is_nested(value):
            for field_name, entry in value.items():
                parsed[f"{key}.{field_name}"] = (
                    entry if isinstance(entry, ParameterDistribution) else ParameterDistribution.from_dict(entry)
                )
        elif isinstance(value, Mapping):
            parsed[key] = ParameterDistribution.from_dict(value)
        else:
            raise InvalidInputError(f"CRITICAL: Distribution for '{key}' must be a mapping, got {value!r}")

    for path in parsed:
        if "." not in path:
            raise InvalidInputError(f"CRITICAL: Distribution path '{path}' must be 'category.field'")
    return parsed


def _is_nested(value: Mapping[str, Any]) -> bool:
    return bool(value) and all(
        isinstance(v, (Mapping, ParameterDistribution)) for v in value.values()
    )


#: Standard uncertainty set: path -> (std_dev, min, max)
DEFAULT_UNCERTAINTY: dict[str, tuple[float, float, float]] = {
    "earth.starlinkPenetration": (0.05, 0.05, 0.30),
    "earth.launchVolume": (30.0, 10.0, 500.0),
    "earth.bandwidthPriceDecline": (0.02, 0.0, 0.20),
    "mars.firstColonyYear": (5.0, 2025.0, 2060.0),
    "mars.populationGrowth": (0.15, 0.1, 1.0),
    "financial.discountRate": (0.03, 0.08, 0.25),
    "financial.dilutionFactor": (0.05, 0.05, 0.30),
}


def get_default_distribution_spec(
    base_inputs: Mapping[str, Any],
) -> dict[str, ParameterDistribution]:
    """
    Standard normal uncertainty set centred on the base inputs.

    Only paths holding a number in ``base_inputs`` are included.

    Examples
    --------
    >>> spec = get_default_distribution_spec(default_base_inputs())
    >>> spec["earth.launchVolume"].std_dev
    30.0
    """
    spec: dict[str, ParameterDistribution] = {}
    for path, (std_dev, low, high) in DEFAULT_UNCERTAINTY.items():
        centre = get_path(base_inputs, path)
        if is_number(centre):
            spec[path] = ParameterDistribution.normal(
                mean=float(centre), std_dev=std_dev, min=low, max=high
            )
    return spec
