"""
Single-pass estimators.

1. **Common** (iterstats.stats.common):
   Pure numerical kernels, independent of any accumulator class: the
   Terriberry/Welford moment update, the Pébay merge and the P² marker rules.

2. **Accumulators** (iterstats.stats.*):
   Value types holding fixed-size state, fed through `update()` and queried
   at any time. Mean, moment (fixed 4th order or any order), extremum,
   weighted-mean and histogram accumulators merge exactly; the quantile estimator does not merge.

Example:
--------
>>> from iterstats.stats import MomentAccumulator, QuantileEstimator
>>> acc = MomentAccumulator.from_iterable([1.0, 2.0, 3.0])
>>> acc.count
3
>>> QuantileEstimator(0.9).count
0
"""

from iterstats.stats.central import CentralMoments
from iterstats.stats.extrema import MaxAccumulator, MinAccumulator
from iterstats.stats.histogram import HistogramAccumulator
from iterstats.stats.mean import MeanAccumulator
from iterstats.stats.moments import MomentAccumulator
from iterstats.stats.quantile import QuantileEstimator
from iterstats.stats.weighted import WeightedMeanAccumulator

__all__ = [
    "CentralMoments",
    "HistogramAccumulator",
    "MaxAccumulator",
    "MeanAccumulator",
    "MinAccumulator",
    "MomentAccumulator",
    "QuantileEstimator",
    "WeightedMeanAccumulator",
]
