import numpy as np
import pytest
from scipy import stats as sps

from iterstats.core.errors import InsufficientData, InvalidConfiguration
from iterstats.stats.extrema import MaxAccumulator, MinAccumulator
from iterstats.stats.histogram import HistogramAccumulator
from iterstats.stats.weighted import WeightedMeanAccumulator


class TestExtrema:
    def test_min_max(self):
        data = [4.0, -2.5, 9.0, 0.0]
        assert MinAccumulator.from_iterable(data).min() == -2.5
        assert MaxAccumulator.from_iterable(data).max() == 9.0

    def test_empty_raises(self):
        with pytest.raises(InsufficientData):
            MinAccumulator().min()
        with pytest.raises(InsufficientData):
            MaxAccumulator().max()

    def test_merge(self):
        a = MinAccumulator.from_iterable([3.0, 5.0])
        b = MinAccumulator.from_iterable([4.0, 1.0])
        a.merge(b)
        assert a.min() == 1.0
        assert a.count == 4

    def test_merge_identity(self):
        x = MaxAccumulator.from_iterable([1.0, 2.0])
        left = MaxAccumulator()
        left.merge(x)
        assert left == x
        x.merge(MaxAccumulator())
        assert x.max() == 2.0 and x.count == 2

    def test_extremum_without_pick_cannot_be_built(self):
        from iterstats.stats.extrema import _Extremum

        class Incomplete(_Extremum):
            _empty = 0.0

        with pytest.raises(TypeError):
            Incomplete()

    def test_equality_with_other_types(self):
        acc = MinAccumulator.from_iterable([1.0])
        assert acc != MaxAccumulator.from_iterable([1.0])
        assert acc != {"kind": "min", "count": 1, "value": 1.0}

    def test_empty_snapshot_is_json_safe(self):
        assert MinAccumulator().snapshot() == {"kind": "min", "count": 0, "value": None}
        restored = MinAccumulator.from_snapshot(MinAccumulator().snapshot())
        restored.update(3.0)
        assert restored.min() == 3.0


class TestWeightedMean:
    def test_weighted_mean(self):
        acc = WeightedMeanAccumulator()
        for x, w in [(1.0, 1.0), (2.0, 2.0), (4.0, 1.0)]:
            acc.update(x, weight=w)
        assert acc.mean() == pytest.approx(9.0 / 4.0)
        assert acc.total_weight == 4.0
        assert acc.count == 3

    def test_default_weight_is_one(self):
        acc = WeightedMeanAccumulator.from_iterable([1.0, 2.0, 3.0])
        assert acc.mean() == pytest.approx(2.0)

    def test_zero_weight_only_raises(self):
        acc = WeightedMeanAccumulator()
        acc.update(5.0, weight=0.0)
        with pytest.raises(InsufficientData):
            acc.mean()

    def test_negative_weight_rejected(self):
        with pytest.raises(InvalidConfiguration):
            WeightedMeanAccumulator().update(1.0, weight=-1.0)

    def test_merge(self):
        a = WeightedMeanAccumulator()
        a.update(1.0, weight=3.0)
        b = WeightedMeanAccumulator()
        b.update(5.0, weight=1.0)
        a.merge(b)
        assert a.mean() == pytest.approx(2.0)
        assert a.total_weight == 4.0

    def test_merge_identity(self):
        x = WeightedMeanAccumulator()
        x.update(0.3, weight=0.7)
        x.update(1.9, weight=0.1)
        left = WeightedMeanAccumulator()
        left.merge(x)
        assert left == x

    def test_unit_weights_match_unweighted_statistics(self, skewed_samples):
        acc = WeightedMeanAccumulator.from_iterable(skewed_samples)
        data = np.asarray(skewed_samples)
        assert acc.effective_sample_size() == pytest.approx(len(data))
        assert acc.variance() == pytest.approx(data.var(ddof=1), rel=1e-10)
        assert acc.error() == pytest.approx(sps.sem(data), rel=1e-10)

    def test_error_with_weights(self, rng):
        x = rng.standard_normal(500)
        w = rng.uniform(0.1, 2.0, size=500)
        acc = WeightedMeanAccumulator()
        for xi, wi in zip(x, w):
            acc.update(xi, weight=wi)

        W, W2 = w.sum(), (w ** 2).sum()
        mean = np.average(x, weights=w)
        variance = (w * (x - mean) ** 2).sum() / (W - W2 / W)
        assert acc.mean() == pytest.approx(mean, rel=1e-10)
        assert acc.effective_sample_size() == pytest.approx(W * W / W2, rel=1e-12)
        assert acc.variance() == pytest.approx(variance, rel=1e-10)
        assert acc.error() == pytest.approx(np.sqrt(variance * W2 / (W * W)), rel=1e-10)

    def test_error_needs_two_weighted_samples(self):
        acc = WeightedMeanAccumulator()
        acc.update(3.0, weight=2.0)
        assert acc.effective_sample_size() == 1.0
        with pytest.raises(InsufficientData):
            acc.error()
        assert acc.summary()["error"] is None

    def test_merge_keeps_error(self, rng):
        x = rng.standard_normal(200)
        w = rng.uniform(0.5, 1.5, size=200)
        whole = WeightedMeanAccumulator()
        left, right = WeightedMeanAccumulator(), WeightedMeanAccumulator()
        for i, (xi, wi) in enumerate(zip(x, w)):
            whole.update(xi, weight=wi)
            (left if i < 70 else right).update(xi, weight=wi)
        left.merge(right)
        assert left.count == whole.count
        assert left.mean() == pytest.approx(whole.mean(), rel=1e-10)
        assert left.effective_sample_size() == pytest.approx(whole.effective_sample_size(), rel=1e-12)
        assert left.error() == pytest.approx(whole.error(), rel=1e-10)


class TestHistogram:
    def test_binning(self):
        h = HistogramAccumulator(0.0, 10.0, bins=5)
        h.extend([0.0, 1.9, 2.0, 9.99, 10.0, -0.1, 5.5])
        assert h.counts() == [2, 1, 1, 0, 1]
        assert h.underflow == 1
        assert h.overflow == 1
        assert h.count == 7

    def test_density_integrates_to_one(self):
        h = HistogramAccumulator.from_iterable([0.1, 0.2, 0.6, 0.7], 0.0, 1.0, 4)
        width = 0.25
        assert sum(d * width for d in h.density()) == pytest.approx(1.0)

    def test_empty_density_raises(self):
        with pytest.raises(InsufficientData):
            HistogramAccumulator(0.0, 1.0, 2).density()

    @pytest.mark.parametrize(
        "args", [(0.0, 1.0, 0), (1.0, 1.0, 3), (2.0, 1.0, 3), (0.0, float("inf"), 3)]
    )
    def test_invalid_layout(self, args):
        with pytest.raises(InvalidConfiguration):
            HistogramAccumulator(*args)

    def test_merge_same_layout(self):
        a = HistogramAccumulator.from_iterable([0.5, 1.5], 0.0, 2.0, 2)
        b = HistogramAccumulator.from_iterable([1.5, 3.0], 0.0, 2.0, 2)
        a.merge(b)
        assert a.counts() == [1, 2]
        assert a.overflow == 1

    def test_merge_different_layout_rejected(self):
        a = HistogramAccumulator(0.0, 2.0, 2)
        b = HistogramAccumulator(0.0, 2.0, 4)
        with pytest.raises(InvalidConfiguration):
            a.merge(b)

    def test_nan_is_counted_separately(self):
        h = HistogramAccumulator(0.0, 1.0, 4)
        h.extend([float("nan"), 0.1, float("inf"), float("-inf")])
        assert h.nan == 1
        assert h.counts() == [1, 0, 0, 0]
        assert (h.underflow, h.overflow) == (1, 1)
        assert h.count == 4

        other = HistogramAccumulator.from_iterable([float("nan")], 0.0, 1.0, 4)
        h.merge(other)
        assert h.nan == 2
        assert HistogramAccumulator.from_snapshot(h.snapshot()) == h
