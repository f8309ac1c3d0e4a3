"""
iterstats.backends.polars
=========================

Polars integration: snapshot frames, their persistence, and accumulation
of Series/DataFrame columns.
"""

from iterstats.backends.polars.frames import (
    accumulate_series,
    describe_frame,
    frame_to_snapshots,
    snapshots_to_frame,
    validate_snapshot_frame,
)
from iterstats.backends.polars.io import (
    CsvSnapshotStore,
    ParquetSnapshotStore,
    SnapshotFileStore,
)

__all__ = [
    "CsvSnapshotStore",
    "ParquetSnapshotStore",
    "SnapshotFileStore",
    "accumulate_series",
    "describe_frame",
    "frame_to_snapshots",
    "snapshots_to_frame",
    "validate_snapshot_frame",
]
