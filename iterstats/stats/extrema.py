"""
iterstats.stats.extrema
=======================

Running minimum and maximum.

Examples
--------
>>> from iterstats.stats.extrema import MinAccumulator, MaxAccumulator
>>> MinAccumulator.from_iterable([3.0, -1.0, 2.0]).min()
-1.0
>>> MaxAccumulator.from_iterable([3.0, -1.0, 2.0]).max()
3.0
"""

from __future__ import annotations
import math
from abc import abstractmethod
from typing import Any, Dict

from iterstats.core.components import Mergeable
from iterstats.core.errors import InsufficientData
from iterstats.core.names import EstimatorKind
from iterstats.core.snapshot import register_estimator


class _Extremum(Mergeable):
    """Shared state of `MinAccumulator` and `MaxAccumulator`."""

    __slots__ = ("_count", "_value")

    _kind: EstimatorKind
    _empty: float

    def __init__(self) -> None:
        self._count = 0
        self._value = self._empty

    @property
    def count(self) -> int:
        return self._count

    @abstractmethod
    def _pick(self, a: float, b: float) -> float:
        """Return the more extreme of `a` and `b`."""

    def update(self, x: float) -> None:
        self._count += 1
        self._value = self._pick(self._value, float(x))

    def merge(self, other: "_Extremum") -> None:
        self._count += other._count
        self._value = self._pick(self._value, other._value)

    def _get(self) -> float:
        if self._count == 0:
            raise InsufficientData(self._kind.value, required=1, count=0)
        return self._value

    def summary(self) -> Dict[str, Any]:
        return {"count": self._count, self._kind.value: self._value if self._count else None}

    def snapshot(self) -> Dict[str, Any]:
        # JSON has no infinity literal; an empty extremum stores None.
        return {
            "kind": self._kind.value,
            "count": self._count,
            "value": self._value if self._count else None,
        }

    @classmethod
    def from_snapshot(cls, payload: Dict[str, Any]) -> Any:
        obj = cls()
        obj._count = int(payload["count"])
        if obj._count:
            obj._value = float(payload["value"])
        return obj


@register_estimator(EstimatorKind.MIN)
class MinAccumulator(_Extremum):
    """Running minimum; `min()` raises `InsufficientData` when empty."""

    _kind = EstimatorKind.MIN
    _empty = math.inf

    def _pick(self, a: float, b: float) -> float:
        return b if b < a else a

    def min(self) -> float:
        return self._get()


@register_estimator(EstimatorKind.MAX)
class MaxAccumulator(_Extremum):
    """Running maximum; `max()` raises `InsufficientData` when empty."""

    _kind = EstimatorKind.MAX
    _empty = -math.inf

    def _pick(self, a: float, b: float) -> float:
        return b if b > a else a

    def max(self) -> float:
        return self._get()
