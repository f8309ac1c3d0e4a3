"""
iterstats.backends.polars.frames
================================

Polars adapters for estimators.

- `accumulate_series(series, factory)`: feed a Series (nulls skipped) into
  an estimator, optionally through a reducer
- `describe_frame(df)`: single-pass summary of numeric columns (moments
  unless a reducer with another factory is given)
- `snapshots_to_frame` / `frame_to_snapshots`: a flat frame of JSON
  snapshots, one row per stream, validated against `SNAPSHOT_SCHEMA`;
  the stores in `.io` persist these frames

Examples
--------
>>> import polars as pl
>>> from iterstats.backends.polars.frames import accumulate_series, describe_frame
>>> from iterstats.stats.mean import MeanAccumulator
>>> accumulate_series(pl.Series("x", [1.0, None, 3.0]), MeanAccumulator).mean()
2.0
>>> describe_frame(pl.DataFrame({"x": [1, 2, 3], "s": ["a", "b", "c"]}))["column"].to_list()
['x']
"""

from __future__ import annotations
import logging
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence

import polars as pl

from iterstats.core.components import Estimator
from iterstats.core.errors import InvalidConfiguration
from iterstats.core.snapshot import SnapshotRegistry, dumps, loads
from iterstats.runtime.runners import SequentialReducer
from iterstats.stats.moments import MomentAccumulator

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA = {
    "stream_id": pl.Utf8,
    "kind": pl.Utf8,
    "count": pl.Int64,
    "payload": pl.Utf8,
}


def _iter_values(series: pl.Series, chunk_size: int) -> Iterator[float]:
    """Yield non-null values as floats, converting one slice at a time."""
    clean = series.drop_nulls().cast(pl.Float64)
    for offset in range(0, clean.len(), chunk_size):
        yield from clean.slice(offset, chunk_size).to_list()


def accumulate_series(
    series: pl.Series,
    factory: Callable[[], Estimator] = MomentAccumulator,
    reducer: Optional[SequentialReducer] = None,
) -> Estimator:
    """Feed every non-null value of `series` into a new estimator.

    Parameters
    ----------
    series : pl.Series
        Numeric series
    factory : callable
        Zero-argument estimator factory (ignored when `reducer` is given)
    reducer : SequentialReducer, optional
        Reducer to aggregate with; defaults to a sequential fold
    """
    reducer = reducer or SequentialReducer(factory)
    return reducer.reduce(_iter_values(series, reducer.config.chunk_size))


def describe_frame(
    df: pl.DataFrame,
    columns: Optional[Sequence[str]] = None,
    reducer: Optional[SequentialReducer] = None,
) -> pl.DataFrame:
    """Single-pass summary of each column, one row per column.

    Parameters
    ----------
    df : pl.DataFrame
        Input frame
    columns : sequence of str, optional
        Columns to describe; defaults to every numeric column
    reducer : SequentialReducer, optional
        Reducer aggregating each column; its factory decides which
        statistics appear. Defaults to a sequential `MomentAccumulator` fold
        (count, mean, variance, skewness, kurtosis).
    """
    if columns is None:
        columns = [name for name, dtype in df.schema.items() if dtype.is_numeric()]
    reducer = reducer or SequentialReducer(MomentAccumulator)
    rows = []
    for name in columns:
        acc = accumulate_series(df.get_column(name), reducer=reducer)
        rows.append({"column": name, **acc.summary()})
    logger.debug("described %d column(s) with %s", len(rows), type(reducer).__name__)
    return pl.DataFrame(rows)


def snapshots_to_frame(estimators: Mapping[str, Estimator]) -> pl.DataFrame:
    """One row per stream: stream id, kind, count and the JSON snapshot."""
    rows: List[Dict[str, object]] = [
        {
            "stream_id": stream_id,
            "kind": str(est.snapshot()["kind"]),
            "count": est.count,
            "payload": dumps(est),
        }
        for stream_id, est in estimators.items()
    ]
    return pl.DataFrame(rows, schema=SNAPSHOT_SCHEMA)


def validate_snapshot_frame(df: pl.DataFrame) -> pl.DataFrame:
    """Check a frame against `SNAPSHOT_SCHEMA` and cast it to that schema.

    Text-only sources (CSV) come back with every column as a string; the
    cast restores the integer `count` column.

    Raises
    ------
    InvalidConfiguration
        A column is missing, a stream id repeats, or a value cannot be cast.
    """
    missing = [name for name in SNAPSHOT_SCHEMA if name not in df.columns]
    if missing:
        raise InvalidConfiguration(f"snapshot frame is missing column(s) {missing}")
    try:
        out = df.select([pl.col(name).cast(dtype) for name, dtype in SNAPSHOT_SCHEMA.items()])
    except pl.exceptions.PolarsError as exc:
        raise InvalidConfiguration(f"snapshot frame does not match its schema: {exc}") from exc
    if out["stream_id"].n_unique() != out.height:
        raise InvalidConfiguration("snapshot frame holds more than one row per stream")
    return out


def frame_to_snapshots(df: pl.DataFrame) -> Dict[str, Estimator]:
    """Inverse of `snapshots_to_frame`.

    Each payload is decoded through the snapshot registry and checked
    against the row's `kind` and `count` columns.
    """
    estimators: Dict[str, Estimator] = {}
    for row in validate_snapshot_frame(df).iter_rows(named=True):
        stream_id = str(row["stream_id"])
        est = SnapshotRegistry.decode(loads(row["payload"]))
        if str(est.snapshot()["kind"]) != row["kind"] or est.count != row["count"]:
            raise InvalidConfiguration(
                f"snapshot of stream '{stream_id}' disagrees with its kind/count columns"
            )
        estimators[stream_id] = est
    return estimators
