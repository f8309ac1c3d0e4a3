"""
iterstats.stats.mean
====================

Running arithmetic mean.

The mean is advanced with ``mean += (x - mean) / count``, which never forms
the full sum and keeps the relative error independent of stream length.

Examples
--------
>>> from iterstats.stats.mean import MeanAccumulator
>>> a = MeanAccumulator.from_iterable([1.0, 2.0])
>>> b = MeanAccumulator.from_iterable([3.0, 4.0, 5.0])
>>> a.merge(b)
>>> a.count, a.mean()
(5, 3.0)
"""

from __future__ import annotations
from typing import Any, Dict

from iterstats.core.components import Mergeable
from iterstats.core.errors import InsufficientData
from iterstats.core.names import EstimatorKind
from iterstats.core.snapshot import register_estimator
from iterstats.stats.common.moments import merge_mean


@register_estimator(EstimatorKind.MEAN)
class MeanAccumulator(Mergeable):
    """
    Running count and arithmetic mean.

    Invariant: ``count == 0`` implies the stored mean is ``0.0``.
    `mean()` raises `InsufficientData` on an empty accumulator.
    """

    __slots__ = ("_count", "_mean")

    def __init__(self) -> None:
        self._count = 0
        self._mean = 0.0

    @property
    def count(self) -> int:
        return self._count

    def is_empty(self) -> bool:
        return self._count == 0

    def update(self, x: float) -> None:
        self._count += 1
        self._mean += (float(x) - self._mean) / self._count

    def merge(self, other: "MeanAccumulator") -> None:
        self._mean = merge_mean(self._count, self._mean, other._count, other._mean)
        self._count += other._count

    def mean(self) -> float:
        if self._count == 0:
            raise InsufficientData("mean", required=1, count=0)
        return self._mean

    def summary(self) -> Dict[str, Any]:
        return {"count": self._count, "mean": self._mean if self._count else None}

    def snapshot(self) -> Dict[str, Any]:
        return {"kind": EstimatorKind.MEAN.value, "count": self._count, "mean": self._mean}

    @classmethod
    def from_snapshot(cls, payload: Dict[str, Any]) -> "MeanAccumulator":
        obj = cls()
        obj._count = int(payload["count"])
        obj._mean = float(payload["mean"]) if obj._count else 0.0
        return obj
