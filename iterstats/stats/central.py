"""
iterstats.stats.central
=======================

Running central moments of any fixed order.

`CentralMoments(order)` keeps ``count``, ``mean`` and the sums
``M_p = sum((x_i - mean)^p)`` for ``2 <= p <= order``. Every update is the
exact merge of the current state with a single-sample state, so updating
and merging share one formula
(`iterstats.stats.common.moments.merge_central_sums`). An update costs
``O(order^2)``; for order 4 `MomentAccumulator` is the cheaper choice.

The same degenerate-input and non-finite policies as `MomentAccumulator`
apply: standardized moments of a constant stream are ``0.0`` unless
``strict=True``, and NaN samples propagate.

Examples
--------
>>> from iterstats.stats.central import CentralMoments
>>> acc = CentralMoments.from_iterable([2, 4, 4, 4, 5, 5, 7, 9], 3)
>>> acc.order
3
>>> round(acc.central_moment(2), 12), round(acc.central_moment(3), 12)
(4.0, 5.25)
"""

from __future__ import annotations
from typing import Any, Dict, List

from iterstats.core.components import Mergeable
from iterstats.core.errors import DegenerateInput, InsufficientData, InvalidConfiguration
from iterstats.core.names import Ddof, EstimatorKind
from iterstats.core.snapshot import register_estimator
from iterstats.stats.common.moments import merge_central_sums


@register_estimator(EstimatorKind.CENTRAL_MOMENTS)
class CentralMoments(Mergeable):
    """
    Running count, mean and central moment sums up to `order`.

    Attributes:
        order: Highest central moment tracked, at least 2

    Two accumulators merge only when their orders are equal.
    """

    __slots__ = ("order", "_count", "_mean", "_sums", "_zeros")

    def __init__(self, order: int = 4) -> None:
        if isinstance(order, bool) or int(order) != order or order < 2:
            raise InvalidConfiguration(f"order must be an integer >= 2, got {order!r}")
        self.order = int(order)
        self._count = 0
        self._mean = 0.0
        self._sums = [0.0] * (self.order - 1)
        self._zeros = [0.0] * (self.order - 1)

    @property
    def count(self) -> int:
        return self._count

    def update(self, x: float) -> None:
        self._count, self._mean, self._sums = merge_central_sums(
            self._count, self._mean, self._sums, 1, float(x), self._zeros
        )

    def merge(self, other: "CentralMoments") -> None:
        if other.order != self.order:
            raise InvalidConfiguration(
                f"cannot merge central moments of order {self.order} and {other.order}"
            )
        self._count, self._mean, self._sums = merge_central_sums(
            self._count, self._mean, self._sums, other._count, other._mean, other._sums
        )

    def _require(self, statistic: str, required: int) -> None:
        if self._count < required:
            raise InsufficientData(statistic, required=required, count=self._count)

    def _check_order(self, p: int) -> None:
        if not 0 <= p <= self.order:
            raise InvalidConfiguration(f"moment order must be in [0, {self.order}], got {p}")

    def mean(self) -> float:
        self._require("mean", 1)
        return self._mean

    def variance(self, ddof: Ddof = 0) -> float:
        if ddof not in (0, 1):
            raise InvalidConfiguration(f"ddof must be 0 or 1, got {ddof!r}")
        self._require("variance", 1 + ddof)
        return self._sums[0] / (self._count - ddof)

    def central_moment(self, p: int) -> float:
        """Population central moment ``M_p / n``."""
        self._check_order(p)
        self._require(f"central moment {p}", 1)
        if p == 0:
            return 1.0
        if p == 1:
            return 0.0
        return self._sums[p - 2] / self._count

    def standardized_moment(self, p: int, strict: bool = False) -> float:
        """Central moment ``p`` divided by ``variance ** (p / 2)``.

        Order 3 is the population skewness, order 4 the (non-excess)
        kurtosis.
        """
        self._check_order(p)
        self._require(f"standardized moment {p}", 2)
        m2 = self._sums[0]
        if m2 == 0.0:
            if strict:
                raise DegenerateInput(f"standardized moment {p}")
            return 0.0
        return self.central_moment(p) / (m2 / self._count) ** (p / 2)

    def central_moments(self) -> List[float]:
        """Central moments of orders ``2..order``."""
        self._require("central moments", 1)
        return [s / self._count for s in self._sums]

    def summary(self) -> Dict[str, Any]:
        has_data = self._count > 0
        return {
            "count": self._count,
            "order": self.order,
            "mean": self._mean if has_data else None,
            "variance": self._sums[0] / self._count if has_data else None,
            "central_moments": self.central_moments() if has_data else None,
        }

    def snapshot(self) -> Dict[str, Any]:
        return {
            "kind": EstimatorKind.CENTRAL_MOMENTS.value,
            "order": self.order,
            "count": self._count,
            "mean": self._mean,
            "sums": list(self._sums),
        }

    @classmethod
    def from_snapshot(cls, payload: Dict[str, Any]) -> "CentralMoments":
        obj = cls(payload["order"])
        sums = [float(s) for s in payload["sums"]]
        if len(sums) != obj.order - 1:
            raise InvalidConfiguration(
                f"central moments snapshot of order {obj.order} holds {len(sums)} sums"
            )
        obj._count = int(payload["count"])
        obj._mean = float(payload["mean"])
        obj._sums = sums
        return obj

