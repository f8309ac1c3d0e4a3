"""
iterstats.stats.common.moments
==============================

Numerical kernels for running central moments.

These functions are estimator-agnostic: they operate on plain tuples
``(count, mean, m2, m3, m4)`` where ``m_k`` is the running sum of
``(x_i - mean)^k``, or, for `merge_central_sums`, on a list of sums of
any order. Accumulator classes in `iterstats.stats` wrap them.

Mathematical background
-----------------------
The single-sample update is Terriberry's extension of Welford's algorithm:
all four sums are advanced in lock-step from ``delta = x - mean_old``, so
no sum is ever recomputed against a stale mean. The combination of two
disjoint partial states follows Pébay (2008), which is exact and therefore
associative up to floating-point reassociation.

Examples
--------
>>> state = (0, 0.0, 0.0, 0.0, 0.0)
>>> for x in [2.0, 4.0, 4.0, 4.0]:
...     state = welford_step(state, x)
>>> tuple(round(v, 12) for v in state[:3])
(4, 3.5, 3.0)
>>> merge_central_moments((4, 3.5, 3.0, 0.0, 0.0), (4, 6.5, 11.0, 0.0, 0.0))[:3]
(8, 5.0, 32.0)
"""

from __future__ import annotations
import math
from typing import List, Sequence, Tuple

MomentState = Tuple[int, float, float, float, float]


def merge_mean(n_a: int, mean_a: float, n_b: int, mean_b: float) -> float:
    """Count-weighted average of two means; 0.0 when both sides are empty."""
    n = n_a + n_b
    if n == 0:
        return 0.0
    if n_a == 0:
        return mean_b
    if n_b == 0:
        return mean_a
    return (n_a * mean_a + n_b * mean_b) / n


def welford_step(state: MomentState, x: float) -> MomentState:
    """Return the moment state after observing one more sample `x`.

    Args:
        state: Tuple ``(count, mean, m2, m3, m4)`` before the update
        x: New sample

    Returns:
        Updated ``(count, mean, m2, m3, m4)``
    """
    n_old, mean, m2, m3, m4 = state
    n = n_old + 1
    delta = x - mean
    delta_n = delta / n
    delta_n2 = delta_n * delta_n
    term = delta * delta_n * n_old

    # m4 and m3 must read the pre-update m2/m3.
    m4 = m4 + term * delta_n2 * (n * n - 3 * n + 3) + 6.0 * delta_n2 * m2 - 4.0 * delta_n * m3
    m3 = m3 + term * delta_n * (n - 2) - 3.0 * delta_n * m2
    m2 = m2 + term
    return n, mean + delta_n, m2, m3, m4


def merge_central_moments(a: MomentState, b: MomentState) -> MomentState:
    """Combine the moment states of two disjoint samples.

    Args:
        a: ``(count, mean, m2, m3, m4)`` of the first sample
        b: ``(count, mean, m2, m3, m4)`` of the second sample

    Returns:
        The exact moment state of the union of both samples

    Note:
        An empty side is the identity; the other side is returned unchanged.
    """
    n_a, mean_a, m2_a, m3_a, m4_a = a
    n_b, mean_b, m2_b, m3_b, m4_b = b
    if n_b == 0:
        return a
    if n_a == 0:
        return b

    n = n_a + n_b
    delta = mean_b - mean_a
    delta2 = delta * delta
    delta3 = delta2 * delta
    delta4 = delta2 * delta2

    mean = merge_mean(n_a, mean_a, n_b, mean_b)
    m2 = m2_a + m2_b + delta2 * n_a * n_b / n
    m3 = (
        m3_a
        + m3_b
        + delta3 * n_a * n_b * (n_a - n_b) / (n * n)
        + 3.0 * delta * (n_a * m2_b - n_b * m2_a) / n
    )
    m4 = (
        m4_a
        + m4_b
        + delta4 * n_a * n_b * (n_a * n_a - n_a * n_b + n_b * n_b) / (n * n * n)
        + 6.0 * delta2 * (n_a * n_a * m2_b + n_b * n_b * m2_a) / (n * n)
        + 4.0 * delta * (n_a * m3_b - n_b * m3_a) / n
    )
    return n, mean, m2, m3, m4


def skewness_from_sums(n: int, m2: float, m3: float) -> float:
    """Population skewness ``sqrt(n) * m3 / m2^1.5``; caller guards ``m2 > 0``."""
    return math.sqrt(n) * m3 / (m2 ** 1.5)


def excess_kurtosis_from_sums(n: int, m2: float, m4: float) -> float:
    """Population excess kurtosis ``n * m4 / m2^2 - 3``; caller guards ``m2 > 0``."""
    return n * m4 / (m2 * m2) - 3.0


def merge_central_sums(
    n_a: int,
    mean_a: float,
    sums_a: Sequence[float],
    n_b: int,
    mean_b: float,
    sums_b: Sequence[float],
) -> Tuple[int, float, List[float]]:
    """Combine central moment sums of arbitrary order (Pébay 2008, eq. 2.1).

    ``sums[j]`` holds ``sum((x - mean) ** (j + 2))``; the first central sum
    is identically zero and is not stored. Both sides must carry the same
    number of sums. With ``delta = mean_b - mean_a``::

        M_p = M_p^a + M_p^b
              + sum_{k=1}^{p-2} C(p, k) delta^k
                    [(-n_b / n)^k M_{p-k}^a + (n_a / n)^k M_{p-k}^b]
              + (n_a n_b delta / n)^p [n_b^(1-p) - (-1 / n_a)^(p-1)]

    A single-sample update is the merge with ``(1, x, [0.0, ...])``.

    Examples
    --------
    >>> merge_central_sums(4, 3.5, [3.0, -3.0], 4, 6.5, [11.0, 9.0])
    (8, 5.0, [32.0, 42.0])
    """
    if n_b == 0:
        return n_a, mean_a, list(sums_a)
    if n_a == 0:
        return n_b, mean_b, list(sums_b)

    n = n_a + n_b
    delta = mean_b - mean_a
    w_a, w_b = -n_b / n, n_a / n
    tail = n_a * n_b * delta / n
    sums: List[float] = []
    for p in range(2, len(sums_a) + 2):
        total = sums_a[p - 2] + sums_b[p - 2]
        for k in range(1, p - 1):
            total += math.comb(p, k) * delta ** k * (
                w_a ** k * sums_a[p - k - 2] + w_b ** k * sums_b[p - k - 2]
            )
        total += tail ** p * (n_b ** (1 - p) - (-1.0 / n_a) ** (p - 1))
        sums.append(total)
    return n, merge_mean(n_a, mean_a, n_b, mean_b), sums
