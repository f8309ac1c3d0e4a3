"""
iterstats.core.ledger
=====================

An append-only ledger of estimator snapshots on top of ibis-framework.

Long-running or partitioned streams checkpoint their accumulators here and
resume from the latest snapshot later:

- Backend-agnostic via ibis-framework (duckdb in tests)
- JSON payloads produced by `iterstats.core.snapshot`
- Automatic iterstats_version tracking
- `resume()` rebuilds the latest estimator of a stream, `merged()` folds the
  latest snapshot of every partition of a stream

Examples:
---------
>>> from iterstats.core.ledger import SnapshotLedger, create_test_connection
>>> from iterstats.stats.moments import MomentAccumulator
>>>
>>> ledger = SnapshotLedger(create_test_connection("duckdb"), "test")
>>> acc = MomentAccumulator.from_iterable([1.0, 2.0, 3.0])
>>> ledger.write_snapshot("latency", acc)
1
>>> restored = ledger.resume("latency")
>>> restored == acc
True
"""

from __future__ import annotations
import logging
import uuid as uuid_module
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import ibis
import pandas as pd
from ibis import BaseBackend
from ibis.expr.types import Table

from iterstats.core.components import Estimator, Mergeable
from iterstats.core.errors import InsufficientData, InvalidConfiguration
from iterstats.core.names import PartitionKey, StreamId
from iterstats.core.snapshot import SnapshotRegistry, dumps, loads
from iterstats.__version__ import __version__

logger = logging.getLogger(__name__)

StreamLike = Union[StreamId, str]


def get_ledger_schema() -> ibis.Schema:
    """Get the standardized snapshot ledger schema using ibis.Schema."""
    return ibis.schema(
        [
            ("uuid", "string"),
            ("ledger_name", "string"),
            ("stream_id", "string"),
            ("partition_key", "string"),
            ("seq", "int64"),
            ("ts", "string"),  # ISO-8601 UTC
            ("kind", "string"),
            ("tag", "string"),
            ("payload", "string"),  # JSON snapshot
            ("iterstats_version", "string"),
        ]
    )


class SnapshotLedger:
    """
    Append-only store of estimator snapshots.

    Responsibilities:
    - Table lifecycle on the ibis connection
    - Per-stream, per-partition sequence numbers
    - Snapshot encoding/decoding through `SnapshotRegistry`

    Query construction beyond the helpers below is left to callers, who use
    the `table` expression directly.
    """

    def __init__(
        self,
        connection: BaseBackend,
        ledger_name: str = "default",
        table_name: str = "snapshots",
    ):
        """Initialize ledger with connection and names.

        Parameters
        ----------
        connection : BaseBackend
            Ibis backend connection
        ledger_name : str
            Name of this ledger instance (for multi-ledger support)
        table_name : str
            Name of the table in the backend
        """
        self.connection = connection
        self.ledger_name = ledger_name
        self.table_name = table_name
        self._ensure_table_exists()

    def _ensure_table_exists(self) -> None:
        if self.table_name not in self.connection.list_tables():
            logger.debug("creating snapshot table %s", self.table_name)
            self.connection.create_table(self.table_name, schema=get_ledger_schema())

    @property
    def table(self) -> Table:
        """
        Ibis table filtered to this ledger's name.

        Examples
        --------
        >>> ledger = SnapshotLedger(create_test_connection("duckdb"), "t")
        >>> int(ledger.table.count().execute())
        0
        """
        table = self.connection.table(self.table_name)
        return table.filter(table.ledger_name == self.ledger_name)

    @property
    def raw_table(self) -> Table:
        """Unfiltered table, for analysis across ledgers."""
        return self.connection.table(self.table_name)

    def _stream_rows(self, stream_id: StreamLike, partition: Optional[str]) -> Table:
        t = self.table
        t = t.filter(t.stream_id == str(stream_id))
        if partition is not None:
            t = t.filter(t.partition_key == str(partition))
        return t

    # ---- writers ----

    def write_snapshot(
        self,
        stream_id: StreamLike,
        estimator: Estimator,
        *,
        partition: Union[PartitionKey, str] = "",
        tag: Optional[str] = None,
        ts: Optional[datetime] = None,
    ) -> int:
        """Append a snapshot of `estimator` and return its sequence number.

        Parameters
        ----------
        stream_id : StreamId or str
            Stream the estimator summarizes
        estimator : Estimator
            Estimator to checkpoint (not modified)
        partition : PartitionKey or str
            Partition of the stream, "" for an unpartitioned stream
        tag : str, optional
            Free-form label for filtering
        ts : datetime, optional
            Timestamp, defaults to now (naive values are taken as UTC)
        """
        if ts is None:
            ts = datetime.now(timezone.utc)
        elif ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)

        seq = int(self._stream_rows(stream_id, str(partition)).count().execute()) + 1
        snapshot = estimator.snapshot()
        record = {
            "uuid": str(uuid_module.uuid4()),
            "ledger_name": self.ledger_name,
            "stream_id": str(stream_id),
            "partition_key": str(partition),
            "seq": seq,
            "ts": ts.isoformat(),
            "kind": str(snapshot["kind"]),
            "tag": tag or "",
            "payload": dumps(estimator),
            "iterstats_version": __version__,
        }
        self.connection.insert(self.table_name, pd.DataFrame([record]))
        logger.debug(
            "snapshot %s/%s seq=%d kind=%s count=%d",
            stream_id,
            partition,
            seq,
            record["kind"],
            estimator.count,
        )
        return seq

    # ---- readers ----

    def latest(
        self, stream_id: StreamLike, partition: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Return the latest snapshot row of a stream (or None).

        With `partition` None, the latest row across all partitions is
        returned. The payload is decoded to a dict.
        """
        t = self._stream_rows(stream_id, partition)
        # seq is only ordered within a partition
        keys = ["seq", "ts"] if partition is not None else ["ts", "seq"]
        df = t.order_by([ibis.desc(k) for k in keys]).limit(1).execute()
        rows = self.unwrap_results(df)
        return rows[0] if rows else None

    def resume(self, stream_id: StreamLike, partition: Optional[str] = None) -> Estimator:
        """Rebuild the estimator of the latest snapshot of a stream.

        With `partition` None the most recent snapshot across all partitions
        is used; pass a partition key to resume that partition only.

        Raises
        ------
        InsufficientData
            No snapshot has been written for the stream.
        """
        row = self.latest(stream_id, partition)
        if row is None:
            raise InsufficientData(f"snapshot of stream '{stream_id}'", required=1, count=0)
        return SnapshotRegistry.decode(row["payload"])

    def partitions(self, stream_id: StreamLike) -> List[str]:
        t = self._stream_rows(stream_id, None)
        df = t.select(t.partition_key).distinct().execute()
        return sorted(str(p) for p in df["partition_key"])

    def merged(self, stream_id: StreamLike) -> Estimator:
        """Merge the latest snapshot of every partition of a stream.

        Raises
        ------
        InsufficientData
            No snapshot has been written for the stream.
        InvalidConfiguration
            The stream's estimators do not support exact merge.
        """
        parts = self.partitions(stream_id)
        if not parts:
            raise InsufficientData(f"snapshot of stream '{stream_id}'", required=1, count=0)
        estimators = [self.resume(stream_id, p) for p in parts]
        first = estimators[0]
        if not isinstance(first, Mergeable):
            raise InvalidConfiguration(
                f"{type(first).__name__} snapshots of '{stream_id}' cannot be merged"
            )
        if any(type(est) is not type(first) for est in estimators[1:]):
            raise InvalidConfiguration(f"partitions of '{stream_id}' hold different kinds")
        for other in estimators[1:]:
            first.merge(other)
        return first

    def unwrap_results(self, df: Any) -> List[Dict[str, Any]]:
        """
        Decode the payload column of query results.

        Parameters
        ----------
        df : pandas.DataFrame
            Query results with a JSON `payload` column

        Returns
        -------
        List[Dict[str, Any]]
            Records with the payload parsed into a dict
        """
        records: List[Dict[str, Any]] = df.to_dict("records")
        for record in records:
            if "payload" in record:
                record["payload"] = loads(record["payload"])
        return records


def create_test_connection(backend: str = "duckdb") -> BaseBackend:
    """Create an in-memory connection for testing purposes.

    Parameters
    ----------
    backend : str
        Backend type ("duckdb" or "sqlite")

    Returns
    -------
    BaseBackend
        Ibis backend connection
    """
    if backend == "duckdb":
        return ibis.duckdb.connect(":memory:")
    elif backend == "sqlite":
        return ibis.sqlite.connect(":memory:")
    else:
        raise ValueError(f"Unsupported backend: {backend}. Use 'duckdb' or 'sqlite'.")
