"""
iterstats.runtime
=================

Execution helpers that aggregate streams with the merge protocol.

Key Components
--------------
- `ReducerConfig`: worker and partition settings, readable from the environment
- `SequentialReducer`: single-threaded fold, optionally over partitions
- `ParallelReducer`: fork-join fold over a thread pool
- `partition`, `fold`, `tree_merge`: the building blocks both reducers use

Examples
--------
>>> from iterstats.stats.moments import MomentAccumulator
>>> from iterstats.runtime import ParallelReducer, ReducerConfig
>>> reducer = ParallelReducer(MomentAccumulator, ReducerConfig(max_workers=2, chunk_size=3))
>>> reducer.reduce(range(10)).count
10
"""

from iterstats.runtime.config import ReducerConfig
from iterstats.runtime.runners import (
    ParallelReducer,
    SequentialReducer,
    fold,
    partition,
    tree_merge,
)

__all__ = [
    "ParallelReducer",
    "ReducerConfig",
    "SequentialReducer",
    "fold",
    "partition",
    "tree_merge",
]
