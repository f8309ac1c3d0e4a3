"""
iterstats.core.names
====================

Typed names shared across the package.

- `EstimatorKind`: an Enum naming every estimator that can be snapshotted.
- `StreamId`, `PartitionKey`: NewType wrappers for clarity.
- `Ddof`: the delta degrees of freedom accepted by variance queries.

Examples
--------
>>> from iterstats.core.names import EstimatorKind, StreamId
>>> EstimatorKind.MOMENTS.value
'moments'
>>> sid = StreamId("latency"); isinstance(sid, str)
True
"""

from __future__ import annotations
from enum import Enum
from typing import Literal, NewType


class EstimatorKind(str, Enum):
    """Well-known estimator kinds, used as the `kind` key of snapshots.

    - MEAN: running count and mean
    - MOMENTS: count, mean and central moment sums up to 4th order
    - QUANTILE: P² quantile markers
    - MIN / MAX: running extremes
    - WEIGHTED_MEAN: running weighted mean
    - HISTOGRAM: fixed-width bin counts
    - CENTRAL_MOMENTS: count, mean and central moment sums of any order
    """

    MEAN = "mean"
    MOMENTS = "moments"
    QUANTILE = "quantile"
    MIN = "min"
    MAX = "max"
    WEIGHTED_MEAN = "weighted_mean"
    HISTOGRAM = "histogram"
    CENTRAL_MOMENTS = "central_moments"


# Optional: typed aliases for logical identifiers (thin wrappers over str).
StreamId = NewType("StreamId", str)
PartitionKey = NewType("PartitionKey", str)

Ddof = Literal[0, 1]
