import json

import pytest

from iterstats.core.errors import InvalidConfiguration
from iterstats.core.snapshot import SnapshotRegistry, dumps, loads, restore
from iterstats.stats.extrema import MaxAccumulator, MinAccumulator
from iterstats.stats.histogram import HistogramAccumulator
from iterstats.stats.mean import MeanAccumulator
from iterstats.stats.moments import MomentAccumulator
from iterstats.stats.quantile import QuantileEstimator
from iterstats.stats.weighted import WeightedMeanAccumulator

FACTORIES = [
    MeanAccumulator,
    MomentAccumulator,
    MinAccumulator,
    MaxAccumulator,
    WeightedMeanAccumulator,
    lambda: HistogramAccumulator(0.0, 20.0, 8),
    lambda: QuantileEstimator(0.9),
]


@pytest.mark.parametrize("factory", FACTORIES)
def test_snapshot_is_flat(factory, skewed_samples):
    est = factory()
    est.extend(skewed_samples[:100])
    snap = est.snapshot()
    assert isinstance(snap["kind"], str)
    for key, value in snap.items():
        assert not isinstance(value, dict), key
        if isinstance(value, list):
            assert all(isinstance(v, (int, float)) for v in value), key


@pytest.mark.parametrize("factory", FACTORIES)
@pytest.mark.parametrize("cut", [0, 1, 4, 37])
def test_resume_through_json_is_seamless(factory, skewed_samples, cut):
    samples = skewed_samples[:200]
    straight = factory()
    straight.extend(samples)

    stopped = factory()
    stopped.extend(samples[:cut])
    resumed = restore(dumps(stopped))
    resumed.extend(samples[cut:])

    assert type(resumed) is type(straight)
    assert resumed == straight


def test_dumps_is_compact_json():
    text = dumps(MeanAccumulator.from_iterable([1.0]))
    assert " " not in text
    assert json.loads(text) == {"kind": "mean", "count": 1, "mean": 1.0}


def test_unknown_kind_is_rejected():
    with pytest.raises(InvalidConfiguration):
        SnapshotRegistry.decode({"kind": "t-digest", "count": 0})


def test_missing_kind_is_rejected():
    with pytest.raises(InvalidConfiguration):
        SnapshotRegistry.decode({"count": 0})


def test_loads_requires_object():
    with pytest.raises(InvalidConfiguration):
        loads("[1, 2]")


def test_quantile_snapshot_must_hold_five_markers():
    snap = QuantileEstimator(0.5).snapshot()
    snap["heights"] = [0.0, 1.0]
    with pytest.raises(InvalidConfiguration):
        SnapshotRegistry.decode(snap)
