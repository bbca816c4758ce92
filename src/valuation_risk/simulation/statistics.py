"""
Summary statistics for Monte Carlo outcome series.

[T2] Percentiles use the nearest-rank index floor(N·p), clipped to N-1.
This is a documented approximation (no interpolation); the median uses the
average of the two central elements for even N.
"""

import math
from dataclasses import dataclass

import numpy as np

from valuation_risk.errors import NumericDegeneracyError


@dataclass(frozen=True)
class Histogram:
    """
    Fixed-bin histogram over [min, max].

    Attributes
    ----------
    bins : int
        Number of bins
    bin_size : float
        Bin width (0 for a degenerate range)
    counts : tuple[float, ...]
        Counts normalised so the fullest bin is 100
    bin_centers : tuple[float, ...]
        Centre of each bin
    """

    bins: int
    bin_size: float
    counts: tuple[float, ...]
    bin_centers: tuple[float, ...]

    def to_dict(self) -> dict:
        return {
            "bins": self.bins,
            "binSize": self.bin_size,
            "counts": list(self.counts),
            "binCenters": list(self.bin_centers),
        }


@dataclass(frozen=True)
class Distribution:
    """
    Summary of one outcome series.

    Attributes
    ----------
    mean, median, std_dev, min, max : float
        Moments and extremes (population standard deviation)
    p10, q1, q3, p90 : float
        Nearest-rank 10th, 25th, 75th and 90th percentiles
    histogram : Histogram
        Normalised histogram
    n : int
        Sample count
    """

    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    p10: float
    q1: float
    q3: float
    p90: float
    histogram: Histogram
    n: int

    @property
    def is_ordered(self) -> bool:
        """min <= p10 <= q1 <= median <= q3 <= p90 <= max."""
        chain = [self.min, self.p10, self.q1, self.median, self.q3, self.p90, self.max]
        return all(a <= b for a, b in zip(chain, chain[1:]))

    def to_dict(self) -> dict:
        return {
            "mean": self.mean,
            "median": self.median,
            "stdDev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "p10": self.p10,
            "q1": self.q1,
            "q3": self.q3,
            "p90": self.p90,
            "n": self.n,
            "histogram": self.histogram.to_dict(),
        }


def nearest_rank_percentile(sorted_values: np.ndarray, p: float) -> float:
    """
    Nearest-rank percentile of an ascending array.

    Parameters
    ----------
    sorted_values : np.ndarray
        Ascending, non-empty
    p : float
        Probability in [0, 1]

    Returns
    -------
    float
        sorted_values[min(floor(N·p), N-1)]

    Examples
    --------
    >>> nearest_rank_percentile(np.arange(10.0), 0.25)
    2.0
    """
    n = len(sorted_values)
    if n == 0:
        raise NumericDegeneracyError("Cannot take a percentile of an empty sample")
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"CRITICAL: p must be in [0, 1], got {p}")
    index = min(int(math.floor(n * p)), n - 1)
    return float(sorted_values[index])


def compute_histogram(sorted_values: np.ndarray, bin_count: int) -> Histogram:
    """
    Histogram over [min, max] with counts scaled to 0–100.

    A zero-width range places every sample in the first bin.
    """
    if bin_count <= 0:
        raise ValueError(f"CRITICAL: bin_count must be > 0, got {bin_count}")

    lo = float(sorted_values[0])
    hi = float(sorted_values[-1])
    bin_size = (hi - lo) / bin_count
    counts = np.zeros(bin_count, dtype=float)

    if bin_size > 0:
        indices = np.floor((sorted_values - lo) / bin_size).astype(int)
        np.clip(indices, 0, bin_count - 1, out=indices)
        np.add.at(counts, indices, 1.0)
    else:
        counts[0] = float(len(sorted_values))

    peak = counts.max()
    if peak > 0:
        counts = counts / peak * 100.0

    centers = lo + (np.arange(bin_count) + 0.5) * bin_size
    return Histogram(
        bins=bin_count,
        bin_size=bin_size,
        counts=tuple(float(c) for c in counts),
        bin_centers=tuple(float(c) for c in centers),
    )


def compute_distribution(values, bin_count: int = 50) -> Distribution:
    """
    Summarise a series of finite outcomes.

    Parameters
    ----------
    values : array-like
        Outcomes (any order)
    bin_count : int, default 50
        Histogram bins

    Returns
    -------
    Distribution
        Ordered summary

    Raises
    ------
    NumericDegeneracyError
        If ``values`` is empty
    """
    arr = np.sort(np.asarray(values, dtype=float))
    n = len(arr)
    if n == 0:
        raise NumericDegeneracyError("Cannot summarise an empty sample set")

    mid = n // 2
    median = float(arr[mid]) if n % 2 else float(0.5 * (arr[mid - 1] + arr[mid]))
    mean = float(np.mean(arr))

    return Distribution(
        mean=mean,
        median=median,
        std_dev=float(np.std(arr)),
        min=float(arr[0]),
        max=float(arr[-1]),
        p10=nearest_rank_percentile(arr, 0.10),
        q1=nearest_rank_percentile(arr, 0.25),
        q3=nearest_rank_percentile(arr, 0.75),
        p90=nearest_rank_percentile(arr, 0.90),
        histogram=compute_histogram(arr, bin_count),
        n=n,
    )
