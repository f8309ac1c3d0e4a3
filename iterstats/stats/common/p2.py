"""
iterstats.stats.common.p2
=========================

Marker kernels of the P² (piecewise-parabolic) quantile algorithm of
Jain & Chlamtac (1985).

Five markers track the minimum, three points bracketing the target
quantile ``p`` and the maximum. Marker ``i`` has a height ``q[i]`` (the
estimate) and an integer position ``n[i]`` (its rank in the stream so far).
When a marker drifts at least one rank away from its desired position it
is moved by one rank and its height re-estimated with a quadratic through
its neighbours, or linearly when the quadratic would break monotonicity.

Examples
--------
>>> initial_desired_positions(0.5)
[1.0, 2.0, 3.0, 4.0, 5.0]
>>> desired_increments(0.5)
[0.0, 0.25, 0.5, 0.75, 1.0]
>>> find_cell([1.0, 2.0, 3.0, 4.0, 5.0], 3.5)
2
"""

from __future__ import annotations
from typing import List, Sequence

MARKERS = 5


def initial_desired_positions(p: float) -> List[float]:
    """Desired marker positions right after the five-sample initialization."""
    return [1.0, 1.0 + 2.0 * p, 1.0 + 4.0 * p, 3.0 + 2.0 * p, 5.0]


def desired_increments(p: float) -> List[float]:
    """Per-observation advance of each marker's desired position."""
    return [0.0, p / 2.0, p, (1.0 + p) / 2.0, 1.0]


def find_cell(heights: List[float], x: float) -> int:
    """Return the cell ``k`` (0..3) with ``q[k] <= x < q[k+1]``.

    Samples outside the marker range extend the extreme markers in place
    and fall into the first or last cell.
    """
    if x < heights[0]:
        heights[0] = x
        return 0
    if x >= heights[-1]:
        heights[-1] = x
        return MARKERS - 2
    k = 0
    while x >= heights[k + 1]:
        k += 1
    return k


def parabolic(heights: Sequence[float], positions: Sequence[float], i: int, d: float) -> float:
    """Piecewise-parabolic height prediction for marker `i` moved by `d` (±1)."""
    q0, q1, q2 = heights[i - 1], heights[i], heights[i + 1]
    n0, n1, n2 = positions[i - 1], positions[i], positions[i + 1]
    return q1 + d / (n2 - n0) * (
        (n1 - n0 + d) * (q2 - q1) / (n2 - n1)
        + (n2 - n1 - d) * (q1 - q0) / (n1 - n0)
    )


def linear(heights: Sequence[float], positions: Sequence[float], i: int, d: float) -> float:
    """Linear height prediction towards the neighbour in direction `d`."""
    j = i + int(d)
    return heights[i] + d * (heights[j] - heights[i]) / (positions[j] - positions[i])
