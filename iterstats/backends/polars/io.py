"""
iterstats.backends.polars.io
============================

File stores for estimator snapshots.

A store persists a mapping ``stream_id -> estimator`` as a snapshot frame
(see `iterstats.backends.polars.frames`) and reads it back as decoded
estimators. Every read is validated against `SNAPSHOT_SCHEMA` and each
payload is cross-checked with its `kind` and `count` columns.

- `ParquetSnapshotStore`: typed columns, the default choice
- `CsvSnapshotStore`: plain text; the integer column is restored on read

`checkpoint()` folds freshly aggregated partials into what is already on
disk, which is how a batch job accumulates a stream across runs.

Examples
--------
>>> from iterstats.backends.polars.io import ParquetSnapshotStore
>>> from iterstats.stats.mean import MeanAccumulator
>>> store = ParquetSnapshotStore("_tmp/snapshots.parquet")  # doctest: +SKIP
>>> store.checkpoint({"latency": MeanAccumulator.from_iterable([1.0, 3.0])})  # doctest: +SKIP
>>> store.read()["latency"].mean()  # doctest: +SKIP
2.0
"""

from __future__ import annotations
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Protocol

import polars as pl

from iterstats.backends.polars.frames import frame_to_snapshots, snapshots_to_frame
from iterstats.core.components import Estimator, Mergeable
from iterstats.core.errors import InvalidConfiguration

logger = logging.getLogger(__name__)


class SnapshotSink(Protocol):
    """Write-only: estimators -> storage; returns the number of streams written."""

    def write(self, estimators: Mapping[str, Estimator]) -> int: ...


class SnapshotSource(Protocol):
    """Read-only: storage -> estimators keyed by stream id."""

    def read(self) -> Dict[str, Estimator]: ...


class SnapshotFileStore(ABC):
    """A single file holding the latest snapshot of each stream.

    Subclasses only decide the file format.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    @abstractmethod
    def _write_frame(self, df: pl.DataFrame) -> None: ...

    @abstractmethod
    def _read_frame(self) -> pl.DataFrame: ...

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def write(self, estimators: Mapping[str, Estimator]) -> int:
        """Replace the file with snapshots of `estimators`."""
        df = snapshots_to_frame(estimators)
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self._write_frame(df)
        logger.debug("wrote %d snapshot(s) to %s", df.height, self.path)
        return df.height

    def read(self) -> Dict[str, Estimator]:
        """Decode every stored snapshot.

        Raises
        ------
        FileNotFoundError
            Nothing has been written yet.
        InvalidConfiguration
            The file does not hold a valid snapshot frame.
        """
        return frame_to_snapshots(self._read_frame())

    def checkpoint(self, estimators: Mapping[str, Estimator]) -> Dict[str, Estimator]:
        """Merge `estimators` into the stored snapshots and write the result.

        Streams not on disk yet are stored as given. A stream already on disk
        must hold the same mergeable type.

        Returns
        -------
        dict
            The merged state that was written
        """
        stored = self.read() if self.exists() else {}
        for stream_id, est in estimators.items():
            previous = stored.get(stream_id)
            if previous is None:
                stored[stream_id] = est.copy()
            elif isinstance(previous, Mergeable) and type(previous) is type(est):
                previous.merge(est)
            else:
                raise InvalidConfiguration(
                    f"cannot merge {type(est).__name__} into stored "
                    f"{type(previous).__name__} of stream '{stream_id}'"
                )
        self.write(stored)
        return stored


class ParquetSnapshotStore(SnapshotFileStore):
    def _write_frame(self, df: pl.DataFrame) -> None:
        df.write_parquet(self.path)

    def _read_frame(self) -> pl.DataFrame:
        return pl.read_parquet(self.path)


class CsvSnapshotStore(SnapshotFileStore):
    """CSV store; every column is read as text so JSON payloads survive."""

    def _write_frame(self, df: pl.DataFrame) -> None:
        df.write_csv(self.path)

    def _read_frame(self) -> pl.DataFrame:
        return pl.read_csv(self.path, infer_schema_length=0)
