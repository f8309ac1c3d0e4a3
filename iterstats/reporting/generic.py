"""
iterstats.reporting.generic
===========================

A kind-agnostic reporter over a snapshot ledger: which streams exist, how
many snapshots of each kind were written, and the latest summary of every
stream.

Examples
--------
>>> from iterstats.core.ledger import SnapshotLedger, create_test_connection
>>> from iterstats.reporting.generic import SnapshotReporter
>>> from iterstats.stats.mean import MeanAccumulator
>>> L = SnapshotLedger(create_test_connection("duckdb"), "test")
>>> _ = L.write_snapshot("a", MeanAccumulator.from_iterable([1.0, 3.0]))
>>> rep = SnapshotReporter(L)
>>> rep.unique_streams()
['a']
>>> rep.summary_frame()["mean"].to_list()
[2.0]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, cast
from dataclasses import dataclass

import ibis
import polars as pl

from iterstats.core.components import Estimator, Mergeable

if TYPE_CHECKING:
    from iterstats.core.ledger import SnapshotLedger


@dataclass
class SnapshotReporter:
    """
    A generic reporter for any snapshot ledger.
    Works on the ibis table for backend-agnostic operations.
    """

    ledger: "SnapshotLedger"

    def unique_streams(self) -> list[str]:
        """List all stream ids that have at least one snapshot."""
        table = self.ledger.table
        df = table.select(table.stream_id).distinct().execute()
        return sorted(str(s) for s in df["stream_id"])

    def kind_counts(self) -> Any:
        """
        Count snapshots grouped by estimator kind.

        Returns
        -------
        ibis.Table
            Table with kind and count columns
        """
        table = self.ledger.table
        return (
            table.group_by(table.kind)
            .aggregate(count=ibis._.count())
            .order_by("kind")
        )

    def summary_frame(self) -> pl.DataFrame:
        """
        Latest summary of each stream.

        A stream split over several partitions is merged into a single row
        (``partition_key`` null) when its estimators share one mergeable
        type; otherwise every partition reports its own latest summary.
        """
        rows: List[Dict[str, Any]] = []
        for stream_id in self.unique_streams():
            latest = {
                part: self.ledger.resume(stream_id, part)
                for part in self.ledger.partitions(stream_id)
            }
            if len(latest) > 1 and _mergeable_together(list(latest.values())):
                estimators = list(latest.values())
                merged = cast(Mergeable, estimators[0])
                for other in estimators[1:]:
                    merged.merge(other)
                rows.append(_summary_row(stream_id, None, merged))
            else:
                rows.extend(_summary_row(stream_id, part, est) for part, est in latest.items())
        return pl.DataFrame(rows)


def _mergeable_together(estimators: List[Estimator]) -> bool:
    first = estimators[0]
    return isinstance(first, Mergeable) and all(type(e) is type(first) for e in estimators)


def _summary_row(stream_id: str, partition: Optional[str], est: Estimator) -> Dict[str, Any]:
    # nested values (histogram counts, composite members) stay out of the flat frame
    flat = {k: v for k, v in est.summary().items() if not isinstance(v, (list, dict))}
    return {
        "stream_id": stream_id,
        "partition_key": partition,
        "kind": str(est.snapshot()["kind"]),
        **flat,
    }
