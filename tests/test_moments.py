import math

import numpy as np
import pytest
from scipy import stats as sps

from iterstats.core.errors import DegenerateInput, InsufficientData, InvalidConfiguration
from iterstats.stats.moments import MomentAccumulator


def test_example_scenario(example_stream):
    acc = MomentAccumulator.from_iterable(example_stream)
    assert acc.count == 8
    assert acc.mean() == pytest.approx(5.0, abs=1e-12)
    assert acc.variance() == pytest.approx(4.0, abs=1e-12)
    assert acc.variance(ddof=1) == pytest.approx(32.0 / 7.0, abs=1e-12)
    assert acc.std() == pytest.approx(2.0, abs=1e-12)


def test_example_scenario_split_and_merged(example_stream):
    left = MomentAccumulator.from_iterable(example_stream[:4])
    right = MomentAccumulator.from_iterable(example_stream[4:])
    left.merge(right)
    assert left.count == 8
    assert left.mean() == 5.0
    assert left.variance() == 4.0


def test_matches_scipy_reference(skewed_samples):
    acc = MomentAccumulator.from_iterable(skewed_samples)
    data = np.asarray(skewed_samples)
    assert acc.mean() == pytest.approx(data.mean(), rel=1e-12)
    assert acc.variance() == pytest.approx(data.var(), rel=1e-10)
    assert acc.variance(ddof=1) == pytest.approx(data.var(ddof=1), rel=1e-10)
    assert acc.skewness() == pytest.approx(sps.skew(data), rel=1e-8)
    assert acc.kurtosis() == pytest.approx(sps.kurtosis(data), rel=1e-8)
    assert acc.standard_error() == pytest.approx(sps.sem(data), rel=1e-10)


def test_large_offset_is_numerically_stable(rng):
    # naive sum-of-squares loses every significant digit at this offset
    samples = (1e9 + rng.standard_normal(10_000)).tolist()
    acc = MomentAccumulator.from_iterable(samples)
    assert acc.variance() == pytest.approx(np.var(samples), rel=1e-5)


@pytest.mark.parametrize("cuts", [(1,), (3, 4), (100, 2500, 2501, 4999), (10, 20, 30, 4000)])
def test_merge_is_partition_independent(skewed_samples, cuts):
    whole = MomentAccumulator.from_iterable(skewed_samples)
    bounds = [0, *cuts, len(skewed_samples)]
    parts = [
        MomentAccumulator.from_iterable(skewed_samples[lo:hi])
        for lo, hi in zip(bounds, bounds[1:])
    ]

    forward = MomentAccumulator()
    for part in parts:
        forward.merge(part)
    backward = MomentAccumulator()
    for part in reversed(parts):
        backward.merge(part)

    for merged in (forward, backward):
        assert merged.count == whole.count
        assert merged.mean() == pytest.approx(whole.mean(), rel=1e-12)
        assert merged.variance() == pytest.approx(whole.variance(), rel=1e-10)
        assert merged.skewness() == pytest.approx(whole.skewness(), rel=1e-8)
        assert merged.kurtosis() == pytest.approx(whole.kurtosis(), rel=1e-8)


def test_merge_identity(skewed_samples):
    x = MomentAccumulator.from_iterable(skewed_samples[:50])
    left = MomentAccumulator()
    left.merge(x)
    assert left == x
    right = x.copy()
    right.merge(MomentAccumulator())
    assert right == x


def test_combine_does_not_mutate_inputs():
    a = MomentAccumulator.from_iterable([1.0, 2.0])
    b = MomentAccumulator.from_iterable([10.0])
    before_a, before_b = a.snapshot(), b.snapshot()
    c = MomentAccumulator.combine(a, b)
    assert c.count == 3
    assert a.snapshot() == before_a
    assert b.snapshot() == before_b


def test_single_sample_has_zero_central_sums():
    acc = MomentAccumulator.from_iterable([42.0])
    snap = acc.snapshot()
    assert snap["m2"] == snap["m3"] == snap["m4"] == 0.0
    assert acc.variance() == 0.0
    with pytest.raises(InsufficientData):
        acc.variance(ddof=1)
    with pytest.raises(InsufficientData):
        acc.skewness()
    with pytest.raises(InsufficientData):
        acc.kurtosis()


def test_empty_accumulator_raises():
    acc = MomentAccumulator()
    for query in (acc.mean, acc.variance, acc.std, acc.skewness, acc.kurtosis):
        with pytest.raises(InsufficientData):
            query()


def test_invalid_ddof():
    acc = MomentAccumulator.from_iterable([1.0, 2.0, 3.0])
    with pytest.raises(InvalidConfiguration):
        acc.variance(ddof=2)


def test_degenerate_stream_policy():
    acc = MomentAccumulator.from_iterable([3.25] * 20)
    assert acc.variance() == 0.0
    assert acc.variance(ddof=1) == 0.0
    assert acc.skewness() == 0.0
    assert acc.kurtosis() == 0.0
    with pytest.raises(DegenerateInput):
        acc.skewness(strict=True)
    with pytest.raises(DegenerateInput):
        acc.kurtosis(strict=True)


def test_nan_propagates():
    acc = MomentAccumulator.from_iterable([1.0, float("nan"), 2.0])
    assert math.isnan(acc.mean())
    assert math.isnan(acc.variance())


def test_summary_marks_unavailable_statistics():
    summary = MomentAccumulator.from_iterable([1.0]).summary()
    assert summary["mean"] == 1.0
    assert summary["variance"] == 0.0
    assert summary["sample_variance"] is None
    assert summary["skewness"] is None
    assert summary["kurtosis"] is None
