"""
iterstats.stats.weighted
========================

Running weighted mean with its standard error.

Each sample carries a non-negative weight; the mean advances with
``mean += (w / W) * (x - mean)`` where ``W`` is the total weight so far
(West, 1979). Alongside the mean the accumulator keeps the weighted sum of
squared deviations ``S`` and the sum of squared weights ``W2``, which give

- the effective sample size ``W^2 / W2`` (equal to the count for unit
  weights),
- the reliability-weighted sample variance ``S / (W - W2 / W)``,
- the standard error of the weighted mean ``sqrt(variance / ess)``.

With unit weights these reduce to the unweighted sample variance and
``std / sqrt(n)``.

Examples
--------
>>> from iterstats.stats.weighted import WeightedMeanAccumulator
>>> acc = WeightedMeanAccumulator()
>>> acc.update(1.0, weight=1.0)
>>> acc.update(4.0, weight=2.0)
>>> acc.mean(), acc.total_weight
(3.0, 3.0)
>>> acc.effective_sample_size()
1.8
"""

from __future__ import annotations
import math
from typing import Any, Dict

from iterstats.core.components import Mergeable
from iterstats.core.errors import InsufficientData, InvalidConfiguration
from iterstats.core.names import EstimatorKind
from iterstats.core.snapshot import register_estimator


@register_estimator(EstimatorKind.WEIGHTED_MEAN)
class WeightedMeanAccumulator(Mergeable):
    """
    Running weighted mean.

    `update(x)` without a weight counts the sample with weight 1.
    `mean()` raises `InsufficientData` while the total weight is zero;
    `variance()` and `error()` also need the effective sample size to
    exceed one.
    """

    __slots__ = ("_count", "_weight", "_weight_sq", "_mean", "_m2")

    def __init__(self) -> None:
        self._count = 0
        self._weight = 0.0
        self._weight_sq = 0.0
        self._mean = 0.0
        self._m2 = 0.0

    @property
    def count(self) -> int:
        return self._count

    @property
    def total_weight(self) -> float:
        return self._weight

    def update(self, x: float, weight: float = 1.0) -> None:
        weight = float(weight)
        if weight < 0.0:
            raise InvalidConfiguration(f"weight must be non-negative, got {weight}")
        self._count += 1
        if weight == 0.0:
            return
        x = float(x)
        self._weight += weight
        self._weight_sq += weight * weight
        delta = x - self._mean
        self._mean += (weight / self._weight) * delta
        self._m2 += weight * delta * (x - self._mean)

    def merge(self, other: "WeightedMeanAccumulator") -> None:
        self._count += other._count
        if other._weight == 0.0:
            return
        if self._weight == 0.0:
            self._weight, self._weight_sq = other._weight, other._weight_sq
            self._mean, self._m2 = other._mean, other._m2
            return
        total = self._weight + other._weight
        delta = other._mean - self._mean
        self._m2 += other._m2 + delta * delta * self._weight * other._weight / total
        self._mean = (self._weight * self._mean + other._weight * other._mean) / total
        self._weight = total
        self._weight_sq += other._weight_sq

    def mean(self) -> float:
        if self._weight == 0.0:
            raise InsufficientData("weighted mean", required=1, count=self._count)
        return self._mean

    def effective_sample_size(self) -> float:
        """Kish's effective sample size ``W^2 / W2``."""
        if self._weight == 0.0:
            raise InsufficientData("effective sample size", required=1, count=self._count)
        return self._weight * self._weight / self._weight_sq

    def variance(self) -> float:
        """Reliability-weighted sample variance ``S / (W - W2 / W)``."""
        if self._weight == 0.0:
            raise InsufficientData("weighted variance", required=2, count=self._count)
        denom = self._weight - self._weight_sq / self._weight
        if denom <= 0.0:
            raise InsufficientData("weighted variance", required=2, count=self._count)
        return self._m2 / denom

    def error(self) -> float:
        """Standard error of the weighted mean."""
        return math.sqrt(self.variance() / self.effective_sample_size())

    def summary(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "count": self._count,
            "total_weight": self._weight,
            "mean": None,
            "effective_sample_size": None,
            "error": None,
        }
        if self._weight > 0.0:
            out["mean"] = self._mean
            out["effective_sample_size"] = self.effective_sample_size()
            if self._weight - self._weight_sq / self._weight > 0.0:
                out["error"] = self.error()
        return out

    def snapshot(self) -> Dict[str, Any]:
        return {
            "kind": EstimatorKind.WEIGHTED_MEAN.value,
            "count": self._count,
            "weight": self._weight,
            "weight_sq": self._weight_sq,
            "mean": self._mean,
            "m2": self._m2,
        }

    @classmethod
    def from_snapshot(cls, payload: Dict[str, Any]) -> "WeightedMeanAccumulator":
        obj = cls()
        obj._count = int(payload["count"])
        obj._weight = float(payload["weight"])
        obj._weight_sq = float(payload["weight_sq"])
        obj._mean = float(payload["mean"])
        obj._m2 = float(payload["m2"])
        return obj
