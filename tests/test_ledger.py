from datetime import datetime, timezone

import pytest

from iterstats.core.errors import InsufficientData, InvalidConfiguration
from iterstats.core.ledger import SnapshotLedger, create_test_connection
from iterstats.reporting.generic import SnapshotReporter
from iterstats.stats.mean import MeanAccumulator
from iterstats.stats.moments import MomentAccumulator
from iterstats.stats.quantile import QuantileEstimator


def test_sequence_numbers_increase_per_partition(ledger):
    acc = MeanAccumulator()
    assert ledger.write_snapshot("s", acc) == 1
    acc.update(1.0)
    assert ledger.write_snapshot("s", acc) == 2
    assert ledger.write_snapshot("s", acc, partition="p1") == 1
    assert ledger.write_snapshot("other", acc) == 1


def test_resume_returns_latest_state(ledger, skewed_samples):
    acc = MomentAccumulator()
    for chunk_start in range(0, 300, 100):
        acc.extend(skewed_samples[chunk_start:chunk_start + 100])
        ledger.write_snapshot("latency", acc, tag="checkpoint")

    resumed = ledger.resume("latency")
    assert resumed == acc
    assert resumed.count == 300

    resumed.extend(skewed_samples[300:])
    straight = MomentAccumulator.from_iterable(skewed_samples)
    assert resumed == straight


def test_resume_picks_partition_or_most_recent(ledger):
    early = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    late = datetime(2024, 5, 1, 13, 0, tzinfo=timezone.utc)
    ledger.write_snapshot("s", MeanAccumulator.from_iterable([1.0]), partition="a", ts=late)
    ledger.write_snapshot("s", MeanAccumulator.from_iterable([7.0, 9.0]), partition="b", ts=early)

    assert ledger.resume("s").mean() == 1.0
    assert ledger.resume("s", "b").mean() == 8.0
    with pytest.raises(InsufficientData):
        ledger.resume("s", "c")


def test_latest_row_fields(ledger):
    ts = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    ledger.write_snapshot("s", MeanAccumulator.from_iterable([2.0]), tag="t", ts=ts)
    row = ledger.latest("s")
    assert row["stream_id"] == "s"
    assert row["partition_key"] == ""
    assert row["kind"] == "mean"
    assert row["tag"] == "t"
    assert row["seq"] == 1
    assert row["ts"] == ts.isoformat()
    assert row["payload"] == {"kind": "mean", "count": 1, "mean": 2.0}


def test_latest_of_unknown_stream_is_none(ledger):
    assert ledger.latest("missing") is None
    with pytest.raises(InsufficientData):
        ledger.resume("missing")
    with pytest.raises(InsufficientData):
        ledger.merged("missing")


def test_merged_folds_latest_of_each_partition(ledger, example_stream):
    left = MomentAccumulator.from_iterable(example_stream[:2])
    ledger.write_snapshot("s", left, partition="a")
    left.extend(example_stream[2:4])
    ledger.write_snapshot("s", left, partition="a")
    ledger.write_snapshot("s", MomentAccumulator.from_iterable(example_stream[4:]), partition="b")

    assert ledger.partitions("s") == ["a", "b"]
    merged = ledger.merged("s")
    assert merged.count == 8
    assert merged.mean() == pytest.approx(5.0)
    assert merged.variance() == pytest.approx(4.0)


def test_merged_rejects_quantiles(ledger):
    ledger.write_snapshot("q", QuantileEstimator(0.5), partition="a")
    ledger.write_snapshot("q", QuantileEstimator(0.5), partition="b")
    with pytest.raises(InvalidConfiguration):
        ledger.merged("q")


def test_ledgers_sharing_a_table_are_isolated():
    conn = create_test_connection("duckdb")
    first = SnapshotLedger(conn, "first")
    second = SnapshotLedger(conn, "second")
    first.write_snapshot("s", MeanAccumulator.from_iterable([1.0]))
    assert second.latest("s") is None
    assert int(first.raw_table.count().execute()) == 1


def test_unsupported_backend():
    with pytest.raises(ValueError):
        create_test_connection("oracle")


class TestReporter:
    def test_streams_and_kind_counts(self, ledger):
        ledger.write_snapshot("a", MeanAccumulator.from_iterable([1.0]))
        ledger.write_snapshot("a", MeanAccumulator.from_iterable([1.0, 2.0]))
        ledger.write_snapshot("b", MomentAccumulator.from_iterable([1.0, 2.0]))
        rep = SnapshotReporter(ledger)

        assert rep.unique_streams() == ["a", "b"]
        counts = rep.kind_counts().execute()
        assert dict(zip(counts["kind"], counts["count"])) == {"mean": 2, "moments": 1}

    def test_summary_frame(self, ledger, example_stream):
        ledger.write_snapshot("m", MeanAccumulator.from_iterable([1.0, 2.0]))
        ledger.write_snapshot("v", MomentAccumulator.from_iterable(example_stream[:4]), partition="x")
        ledger.write_snapshot("v", MomentAccumulator.from_iterable(example_stream[4:]), partition="y")

        frame = SnapshotReporter(ledger).summary_frame()
        assert frame["stream_id"].to_list() == ["m", "v"]
        assert frame["count"].to_list() == [2, 8]
        assert frame["mean"].to_list() == pytest.approx([1.5, 5.0])
        assert frame["variance"][1] == pytest.approx(4.0)

    def test_summary_frame_keeps_partitions_that_cannot_merge(self, ledger):
        ledger.write_snapshot("q", QuantileEstimator.from_iterable(range(1, 10), 0.5), partition="a")
        ledger.write_snapshot("q", QuantileEstimator.from_iterable(range(1, 4), 0.5), partition="b")
        ledger.write_snapshot("m", MeanAccumulator.from_iterable([1.0]), partition="a")
        ledger.write_snapshot("m", MeanAccumulator.from_iterable([3.0]), partition="b")

        frame = SnapshotReporter(ledger).summary_frame()
        assert frame["stream_id"].to_list() == ["m", "q", "q"]
        assert frame["partition_key"].to_list() == [None, "a", "b"]
        assert frame["count"].to_list() == [2, 9, 3]
        assert frame["quantile"].to_list() == [None, 5.0, None]
