"""
iterstats.stats.quantile
========================

Streaming quantile estimation with the P² algorithm.

The estimator moves through two states:

- **Filling** (fewer than 5 samples): raw samples are stored in the
  five-slot height array.
- **Steady** (5 or more samples): the fifth update sorts the buffer into
  the initial marker heights; from then on five markers approximate the
  minimum, three points around the target quantile and the maximum.

Memory is fixed at five heights, five positions and five desired
positions regardless of stream length. The estimate is approximate and
tightest near the configured quantile.

Two independently steady estimators encode non-composable summaries of
their histories, so `QuantileEstimator` offers no merge and reducers
reject it.

Examples
--------
>>> from iterstats.stats.quantile import QuantileEstimator
>>> q = QuantileEstimator(0.5)
>>> q.extend([5.0, 1.0, 4.0, 2.0, 3.0])
>>> q.quantile()
3.0
>>> q.markers()
[1.0, 2.0, 3.0, 4.0, 5.0]
"""

from __future__ import annotations
from typing import Any, Dict, List

import numpy as np

from iterstats.core.components import Estimator
from iterstats.core.errors import InsufficientData, InvalidConfiguration
from iterstats.core.names import EstimatorKind
from iterstats.core.snapshot import register_estimator
from iterstats.stats.common.p2 import (
    MARKERS,
    desired_increments,
    find_cell,
    initial_desired_positions,
    linear,
    parabolic,
)


@register_estimator(EstimatorKind.QUANTILE)
class QuantileEstimator(Estimator):
    """
    P² estimator of a single target quantile.

    Attributes:
        p: Target quantile, strictly between 0 and 1

    Invariant: once steady, marker positions are strictly increasing and
    marker heights non-decreasing.
    """

    __slots__ = ("p", "_count", "_heights", "_positions", "_desired", "_increments")

    def __init__(self, p: float) -> None:
        p = float(p)
        if not 0.0 < p < 1.0:
            raise InvalidConfiguration(f"target quantile must be in (0, 1), got {p}")
        self.p = p
        self._count = 0
        self._heights = [0.0] * MARKERS
        self._positions = [float(i) for i in range(1, MARKERS + 1)]
        self._desired = initial_desired_positions(p)
        self._increments = desired_increments(p)

    @property
    def count(self) -> int:
        return self._count

    @property
    def is_steady(self) -> bool:
        return self._count >= MARKERS

    def update(self, x: float) -> None:
        x = float(x)
        if self._count < MARKERS:
            self._heights[self._count] = x
            self._count += 1
            if self._count == MARKERS:
                self._heights.sort()
            return

        heights, positions, desired = self._heights, self._positions, self._desired
        k = find_cell(heights, x)
        for i in range(k + 1, MARKERS):
            positions[i] += 1.0
        for i in range(MARKERS):
            desired[i] += self._increments[i]
        self._count += 1

        for i in range(1, MARKERS - 1):
            d = desired[i] - positions[i]
            if (d >= 1.0 and positions[i + 1] - positions[i] > 1.0) or (
                d <= -1.0 and positions[i - 1] - positions[i] < -1.0
            ):
                d = 1.0 if d > 0 else -1.0
                candidate = parabolic(heights, positions, i, d)
                if heights[i - 1] < candidate < heights[i + 1]:
                    heights[i] = candidate
                else:
                    heights[i] = linear(heights, positions, i, d)
                positions[i] += d

    def quantile(self, fallback: bool = False) -> float:
        """
        Current estimate of the target quantile.

        Parameters
        ----------
        fallback : bool
            While filling, return the exact (linearly interpolated) quantile
            of the buffered samples instead of raising.

        Raises
        ------
        InsufficientData
            Fewer than 5 samples seen and `fallback` is off, or no samples at all.
        """
        if self._count >= MARKERS:
            return self._heights[2]
        if not fallback or self._count == 0:
            raise InsufficientData("quantile", required=MARKERS, count=self._count)
        buffered = np.asarray(self._heights[: self._count], dtype=np.float64)
        return float(np.quantile(buffered, self.p, method="linear"))

    def markers(self) -> List[float]:
        """Marker heights: min, three points around the quantile, max."""
        if self._count < MARKERS:
            raise InsufficientData("markers", required=MARKERS, count=self._count)
        return list(self._heights)

    def min(self) -> float:
        if self._count == 0:
            raise InsufficientData("min", required=1, count=0)
        return min(self._heights[: min(self._count, MARKERS)])

    def max(self) -> float:
        if self._count == 0:
            raise InsufficientData("max", required=1, count=0)
        return max(self._heights[: min(self._count, MARKERS)])

    def summary(self) -> Dict[str, Any]:
        estimate = self._heights[2] if self.is_steady else None
        return {"count": self._count, "p": self.p, "quantile": estimate}

    def snapshot(self) -> Dict[str, Any]:
        return {
            "kind": EstimatorKind.QUANTILE.value,
            "p": self.p,
            "count": self._count,
            "heights": list(self._heights),
            "positions": list(self._positions),
            "desired": list(self._desired),
        }

    @classmethod
    def from_snapshot(cls, payload: Dict[str, Any]) -> "QuantileEstimator":
        obj = cls(payload["p"])
        obj._count = int(payload["count"])
        for name in ("heights", "positions", "desired"):
            values = [float(v) for v in payload[name]]
            if len(values) != MARKERS:
                raise InvalidConfiguration(
                    f"quantile snapshot field '{name}' must hold {MARKERS} values"
                )
            setattr(obj, f"_{name}", values)
        return obj
