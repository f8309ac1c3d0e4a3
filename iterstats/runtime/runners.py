"""
iterstats.runtime.runners
=========================

Reducers that aggregate a stream through the merge protocol.

A reducer partitions the input into chunks, folds each chunk into its own
accumulator and combines the partial accumulators with `merge`. Because
merge is associative and commutative, the result does not depend on how
the stream was partitioned or in which order partial results arrive, up
to floating-point reassociation.

Threading model: every worker owns the accumulator it folds into and no
accumulator is shared while being updated. `SequentialReducer` combines
its partials in a binary-tree fan-in; `ParallelReducer` keeps a bounded
window of chunks in flight and merges finished partials, oldest first,
into a running result on the caller's thread. There is no cancellation
and no timeout.

Examples
--------
>>> from iterstats.stats.mean import MeanAccumulator
>>> from iterstats.runtime.runners import SequentialReducer
>>> from iterstats.runtime.config import ReducerConfig
>>> reducer = SequentialReducer(MeanAccumulator, ReducerConfig(chunk_size=2))
>>> reducer.reduce_partitions([[1.0, 2.0], [3.0]]).mean()
2.0
"""

from __future__ import annotations
import logging
import os
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from itertools import islice
from typing import (
    Any,
    Callable,
    Deque,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    TypeVar,
)

from iterstats.core.components import Estimator, Mergeable
from iterstats.core.errors import InvalidConfiguration
from iterstats.runtime.config import ReducerConfig

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Estimator)
M = TypeVar("M", bound=Mergeable)


def partition(samples: Iterable[float], chunk_size: int) -> Iterator[List[float]]:
    """Split `samples` into consecutive lists of at most `chunk_size` items."""
    if chunk_size < 1:
        raise InvalidConfiguration(f"chunk_size must be positive, got {chunk_size}")
    it = iter(samples)
    while True:
        chunk = list(islice(it, chunk_size))
        if not chunk:
            return
        yield chunk


def fold(factory: Callable[[], E], samples: Iterable[float]) -> E:
    """Create an accumulator with `factory` and feed it every sample."""
    acc = factory()
    acc.extend(samples)
    return acc


def tree_merge(partials: Sequence[M]) -> Optional[M]:
    """
    Combine partial accumulators pairwise in a binary tree.

    The left operand of each pair is merged into in place, so ownership of
    `partials` passes to this function. Returns None for an empty sequence.
    """
    level = list(partials)
    if not level:
        return None
    while len(level) > 1:
        paired: List[M] = []
        for i in range(0, len(level) - 1, 2):
            left, right = level[i], level[i + 1]
            left.merge(right)
            paired.append(left)
        if len(level) % 2:
            paired.append(level[-1])
        level = paired
    return level[0]


def _require_mergeable(factory: Callable[[], Estimator]) -> None:
    sample = factory()
    if not isinstance(sample, Mergeable):
        raise InvalidConfiguration(
            f"{type(sample).__name__} does not support exact merge and cannot be reduced"
        )


class SequentialReducer(Generic[E]):
    """
    Single-threaded reducer.

    `reduce` feeds the whole stream into one accumulator and works with any
    estimator; `reduce_partitions` folds each partition separately and
    merges the results, which requires a `Mergeable` estimator.
    """

    def __init__(
        self, factory: Callable[[], E], config: Optional[ReducerConfig] = None
    ) -> None:
        self.factory = factory
        self.config = config or ReducerConfig()

    def reduce(self, samples: Iterable[float]) -> E:
        """Aggregate a whole stream into one accumulator."""
        return fold(self.factory, samples)

    def reduce_partitions(self, partitions: Iterable[Iterable[float]]) -> E:
        """Fold each partition independently and merge the partial results."""
        _require_mergeable(self.factory)
        partials = [fold(self.factory, part) for part in partitions]
        logger.debug("merging %d partial accumulators", len(partials))
        merged = tree_merge(partials)  # type: ignore[type-var]
        return self.factory() if merged is None else merged


class ParallelReducer(SequentialReducer[E]):
    """
    Fork-join reducer over a thread pool.

    The input is cut into chunks of ``config.chunk_size`` samples; each
    chunk is folded on a worker thread into a private accumulator. At most
    ``2 * workers`` chunks are in flight: the oldest partial is merged into
    the running result on the calling thread before the next chunk is
    pulled, so memory stays bounded however long the stream is.

    Notes
    -----
    CPython threads share one interpreter lock, so the pool pays off when
    the samples come from sources that release it (I/O, numpy, polars).
    """

    def __init__(
        self, factory: Callable[[], E], config: Optional[ReducerConfig] = None
    ) -> None:
        _require_mergeable(factory)
        super().__init__(factory, config)

    @property
    def workers(self) -> int:
        """Resolved worker count (the executor default when unset)."""
        if self.config.max_workers is not None:
            return self.config.max_workers
        return min(32, (os.cpu_count() or 1) + 4)

    def reduce(self, samples: Iterable[float]) -> E:
        """Partition `samples` and aggregate the chunks concurrently."""
        return self.reduce_partitions(partition(samples, self.config.chunk_size))

    def reduce_partitions(self, partitions: Iterable[Iterable[float]]) -> E:
        workers = self.workers
        window = 2 * workers
        result: Any = self.factory()
        pending: Deque["Future[E]"] = deque()
        submitted = 0
        with ThreadPoolExecutor(max_workers=workers) as pool:
            for part in partitions:
                if len(pending) >= window:
                    result.merge(pending.popleft().result())
                pending.append(pool.submit(fold, self.factory, part))
                submitted += 1
            while pending:
                result.merge(pending.popleft().result())
        logger.debug("merged %d partitions on %d workers", submitted, workers)
        return result
