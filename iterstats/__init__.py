"""
iterstats: calculate statistics iteratively.

Streams that are too large to buffer, that arrive incrementally, or that
must be summarized with minimal overhead can still be described precisely.
iterstats centers on *accumulators*: small value types that see each sample
once, never retain it, and answer queries (mean, variance, skewness,
kurtosis, quantiles) at any point of the stream.

Mean and moment accumulators form a commutative monoid under `merge`: the
empty accumulator is the identity, and merging the states of two disjoint
sub-streams yields exactly the state of the concatenated stream. That
property is what lets a stream be split into partitions, folded on worker
threads, and recombined in any order (see `iterstats.runtime`). The P²
quantile estimator keeps five markers in constant memory but has no exact
merge.

Snapshots of every accumulator are flat dicts of numbers, so a stream can be
checkpointed (`iterstats.core.ledger`, `iterstats.backends.polars`) and
resumed as if it had never stopped.

Example
-------
>>> import iterstats
>>> acc = iterstats.MomentAccumulator.from_iterable([2, 4, 4, 4, 5, 5, 7, 9])
>>> acc.count
8
>>> assert hasattr(iterstats, "core")
>>> assert hasattr(iterstats, "stats")
"""

from iterstats import core, stats
from iterstats.__version__ import __version__
from iterstats.core.components import Estimator, Mergeable, concatenate
from iterstats.core.errors import (
    DegenerateInput,
    InsufficientData,
    InvalidConfiguration,
    StatsError,
)
from iterstats.stats import (
    CentralMoments,
    HistogramAccumulator,
    MaxAccumulator,
    MeanAccumulator,
    MinAccumulator,
    MomentAccumulator,
    QuantileEstimator,
    WeightedMeanAccumulator,
)

__all__ = [
    "CentralMoments",
    "DegenerateInput",
    "Estimator",
    "HistogramAccumulator",
    "InsufficientData",
    "InvalidConfiguration",
    "MaxAccumulator",
    "MeanAccumulator",
    "Mergeable",
    "MinAccumulator",
    "MomentAccumulator",
    "QuantileEstimator",
    "StatsError",
    "WeightedMeanAccumulator",
    "__version__",
    "concatenate",
]
