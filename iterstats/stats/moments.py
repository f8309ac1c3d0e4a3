"""
iterstats.stats.moments
=======================

Running central moments up to 4th order: mean, variance, skewness and
excess kurtosis from a single pass with constant memory.

The accumulator keeps ``count``, ``mean`` and the central moment sums
``m2, m3, m4`` (``m_k = sum((x_i - mean)^k)``) and advances them with
`iterstats.stats.common.moments.welford_step`. Two accumulators over
disjoint sub-streams merge exactly with
`iterstats.stats.common.moments.merge_central_moments`.

Degenerate-input policy
-----------------------
When every sample is identical (``m2 == 0``) skewness and kurtosis are
mathematically undefined. By default they resolve to ``0.0``; pass
``strict=True`` to raise `DegenerateInput` instead.

Non-finite input
----------------
NaN or infinite samples are not rejected; they propagate into every
derived statistic as NaN.

Examples
--------
>>> from iterstats.stats.moments import MomentAccumulator
>>> acc = MomentAccumulator.from_iterable([2, 4, 4, 4, 5, 5, 7, 9])
>>> round(acc.mean(), 12), round(acc.variance(), 12)
(5.0, 4.0)
>>> round(acc.variance(ddof=1), 3)
4.571
"""

from __future__ import annotations
import math
from typing import Any, Dict, Optional

from iterstats.core.components import Mergeable
from iterstats.core.errors import DegenerateInput, InsufficientData, InvalidConfiguration
from iterstats.core.names import Ddof, EstimatorKind
from iterstats.core.snapshot import register_estimator
from iterstats.stats.common.moments import (
    MomentState,
    excess_kurtosis_from_sums,
    merge_central_moments,
    skewness_from_sums,
    welford_step,
)


@register_estimator(EstimatorKind.MOMENTS)
class MomentAccumulator(Mergeable):
    """
    Running count, mean and central moment sums up to 4th order.

    Invariants:
        - ``m2 >= 0``
        - ``count == 0`` implies every field is zero
        - ``count == 1`` implies ``m2 == m3 == m4 == 0``

    Queries raise `InsufficientData` until enough samples exist:
    variance needs 1 sample (``ddof=0``) or 2 (``ddof=1``); skewness and
    kurtosis need 2.
    """

    __slots__ = ("_count", "_mean", "_m2", "_m3", "_m4")

    def __init__(self) -> None:
        self._count = 0
        self._mean = 0.0
        self._m2 = 0.0
        self._m3 = 0.0
        self._m4 = 0.0

    # ---- state ----

    @property
    def count(self) -> int:
        return self._count

    def _state(self) -> MomentState:
        return self._count, self._mean, self._m2, self._m3, self._m4

    def _set_state(self, state: MomentState) -> None:
        self._count, self._mean, self._m2, self._m3, self._m4 = state

    def update(self, x: float) -> None:
        self._set_state(welford_step(self._state(), float(x)))

    def merge(self, other: "MomentAccumulator") -> None:
        self._set_state(merge_central_moments(self._state(), other._state()))

    # ---- queries ----

    def _require(self, statistic: str, required: int) -> None:
        if self._count < required:
            raise InsufficientData(statistic, required=required, count=self._count)

    def mean(self) -> float:
        self._require("mean", 1)
        return self._mean

    def variance(self, ddof: Ddof = 0) -> float:
        """Population (``ddof=0``) or unbiased sample (``ddof=1``) variance."""
        if ddof not in (0, 1):
            raise InvalidConfiguration(f"ddof must be 0 or 1, got {ddof!r}")
        self._require("variance", 1 + ddof)
        return self._m2 / (self._count - ddof)

    def std(self, ddof: Ddof = 0) -> float:
        return math.sqrt(self.variance(ddof))

    def standard_error(self) -> float:
        """Standard error of the mean, ``sqrt(sample variance / count)``."""
        return math.sqrt(self.variance(ddof=1) / self._count)

    def skewness(self, strict: bool = False) -> float:
        """Population skewness ``sqrt(n) * m3 / m2^1.5``."""
        self._require("skewness", 2)
        if self._m2 == 0.0:
            if strict:
                raise DegenerateInput("skewness")
            return 0.0
        return skewness_from_sums(self._count, self._m2, self._m3)

    def kurtosis(self, strict: bool = False) -> float:
        """Population excess kurtosis ``n * m4 / m2^2 - 3``."""
        self._require("kurtosis", 2)
        if self._m2 == 0.0:
            if strict:
                raise DegenerateInput("kurtosis")
            return 0.0
        return excess_kurtosis_from_sums(self._count, self._m2, self._m4)

    def summary(self) -> Dict[str, Any]:
        def maybe(fn: Any, *args: Any) -> Optional[float]:
            try:
                return fn(*args)
            except InsufficientData:
                return None

        return {
            "count": self._count,
            "mean": maybe(self.mean),
            "variance": maybe(self.variance, 0),
            "sample_variance": maybe(self.variance, 1),
            "std": maybe(self.std, 0),
            "skewness": maybe(self.skewness),
            "kurtosis": maybe(self.kurtosis),
        }

    # ---- snapshots ----

    def snapshot(self) -> Dict[str, Any]:
        return {
            "kind": EstimatorKind.MOMENTS.value,
            "count": self._count,
            "mean": self._mean,
            "m2": self._m2,
            "m3": self._m3,
            "m4": self._m4,
        }

    @classmethod
    def from_snapshot(cls, payload: Dict[str, Any]) -> "MomentAccumulator":
        obj = cls()
        obj._set_state(
            (
                int(payload["count"]),
                float(payload["mean"]),
                float(payload["m2"]),
                float(payload["m3"]),
                float(payload["m4"]),
            )
        )
        return obj
