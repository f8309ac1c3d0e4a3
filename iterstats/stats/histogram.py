"""
iterstats.stats.histogram
=========================

Fixed-width histogram over ``[lower, upper)``.

The bin layout is fixed at construction; samples outside the range are
counted as underflow or overflow rather than rejected, and NaN samples
land in a separate `nan` counter. Two histograms
merge exactly when their layouts are identical.

Examples
--------
>>> from iterstats.stats.histogram import HistogramAccumulator
>>> h = HistogramAccumulator(0.0, 4.0, bins=4)
>>> h.extend([0.5, 1.5, 1.7, 3.9, 4.0, -1.0])
>>> h.counts(), h.underflow, h.overflow
([1, 2, 0, 1], 1, 1)
>>> h.bin_edges()
[0.0, 1.0, 2.0, 3.0, 4.0]
"""

from __future__ import annotations
import math
from typing import Any, Dict, List

from iterstats.core.components import Mergeable
from iterstats.core.errors import InsufficientData, InvalidConfiguration
from iterstats.core.names import EstimatorKind
from iterstats.core.snapshot import register_estimator


@register_estimator(EstimatorKind.HISTOGRAM)
class HistogramAccumulator(Mergeable):
    """
    Fixed-width histogram with out-of-range and NaN counters.

    Attributes:
        lower: Inclusive lower bound of the first bin
        upper: Exclusive upper bound of the last bin
        bins: Number of equal-width bins
    """

    __slots__ = ("lower", "upper", "bins", "_width", "_counts", "underflow", "overflow", "nan")

    def __init__(self, lower: float, upper: float, bins: int) -> None:
        lower, upper, bins = float(lower), float(upper), int(bins)
        if bins < 1:
            raise InvalidConfiguration(f"bins must be positive, got {bins}")
        if not (math.isfinite(lower) and math.isfinite(upper)) or upper <= lower:
            raise InvalidConfiguration(
                f"histogram range must be finite with lower < upper, got [{lower}, {upper})"
            )
        self.lower = lower
        self.upper = upper
        self.bins = bins
        self._width = (upper - lower) / bins
        self._counts = [0] * bins
        self.underflow = 0
        self.overflow = 0
        self.nan = 0

    @property
    def count(self) -> int:
        return sum(self._counts) + self.underflow + self.overflow + self.nan

    def update(self, x: float) -> None:
        x = float(x)
        if math.isnan(x):
            self.nan += 1
        elif x < self.lower:
            self.underflow += 1
        elif x >= self.upper:
            self.overflow += 1
        else:
            # Rounding can push values just below `upper` into a phantom bin.
            idx = min(int((x - self.lower) / self._width), self.bins - 1)
            self._counts[idx] += 1

    def _layout(self) -> tuple:
        return self.lower, self.upper, self.bins

    def merge(self, other: "HistogramAccumulator") -> None:
        if self._layout() != other._layout():
            raise InvalidConfiguration(
                f"cannot merge histograms with layouts {self._layout()} and {other._layout()}"
            )
        self._counts = [a + b for a, b in zip(self._counts, other._counts)]
        self.underflow += other.underflow
        self.overflow += other.overflow
        self.nan += other.nan

    def counts(self) -> List[int]:
        return list(self._counts)

    def bin_edges(self) -> List[float]:
        return [self.lower + i * self._width for i in range(self.bins)] + [self.upper]

    def density(self) -> List[float]:
        """In-range counts normalized so the histogram integrates to 1."""
        total = sum(self._counts)
        if total == 0:
            raise InsufficientData("density", required=1, count=0)
        return [c / (total * self._width) for c in self._counts]

    def summary(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "counts": self.counts(),
            "underflow": self.underflow,
            "overflow": self.overflow,
            "nan": self.nan,
        }

    def snapshot(self) -> Dict[str, Any]:
        return {
            "kind": EstimatorKind.HISTOGRAM.value,
            "lower": self.lower,
            "upper": self.upper,
            "bins": self.bins,
            "counts": list(self._counts),
            "underflow": self.underflow,
            "overflow": self.overflow,
            "nan": self.nan,
        }

    @classmethod
    def from_snapshot(cls, payload: Dict[str, Any]) -> "HistogramAccumulator":
        obj = cls(payload["lower"], payload["upper"], payload["bins"])
        counts = [int(c) for c in payload["counts"]]
        if len(counts) != obj.bins:
            raise InvalidConfiguration(
                f"histogram snapshot holds {len(counts)} counts for {obj.bins} bins"
            )
        obj._counts = counts
        obj.underflow = int(payload["underflow"])
        obj.overflow = int(payload["overflow"])
        obj.nan = int(payload["nan"])
        return obj
