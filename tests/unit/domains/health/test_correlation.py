"""Tests for pairwise Pearson correlation over daily history."""

from __future__ import annotations

import math
from datetime import date, timedelta

import pytest

from tempo.domains.health.domain_logic.condition_models import (
    CorrelationStrength,
    DailyMetricRecord,
    MetricPair,
)
from tempo.domains.health.domain_logic.correlation import (
    align_pair,
    classify_strength,
    compute_pair_correlations,
    confidence_interval,
    correlate,
    correlate_pair,
    p_value,
    pearson,
)

_START = date(2026, 2, 1)


def _records(**series: list[float | None]) -> list[DailyMetricRecord]:
    length = len(next(iter(series.values())))
    return [
        DailyMetricRecord(
            day=_START + timedelta(days=n),
            **{name: values[n] for name, values in series.items()},
        )
        for n in range(length)
    ]


class TestPearson:
    def test_known_value(self):
        r = pearson([1, 2, 3, 4, 5], [2, 4, 5, 4, 5])
        assert r == pytest.approx(6 / math.sqrt(60))

    def test_perfect_positive_and_negative(self):
        xs = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0]
        assert pearson(xs, [2 * x + 1 for x in xs]) == pytest.approx(1.0)
        assert pearson(xs, [10 - x for x in xs]) == pytest.approx(-1.0)

    def test_constant_series_yields_zero(self):
        assert pearson([5.0] * 8, [1, 2, 3, 4, 5, 6, 7, 8]) == 0.0

    def test_mismatched_lengths_raise(self):
        with pytest.raises(ValueError, match="equal length"):
            pearson([1, 2, 3], [1, 2])

    def test_empty_series(self):
        assert pearson([], []) == 0.0


class TestCorrelate:
    def test_symmetric_in_operands(self):
        xs = [61.0, 72.5, 68.0, 80.0, 55.5, 77.0, 70.0, 66.0]
        ys = [40.0, 48.0, 47.5, 52.0, 39.0, 50.5, 44.0, 45.0]
        assert correlate(xs, ys) == correlate(ys, xs)

    @pytest.mark.parametrize("a,b", [(0.1, 0.1), (83.33, 70.3), (70.3, 83.33), (61.7, 0.3)])
    @pytest.mark.parametrize("n", [7, 14, 30, 90])
    def test_inexact_constant_series_yield_zero(self, a, b, n):
        result = correlate([a] * n, [b] * n)
        assert result.r == 0.0
        assert result.p_value == 1.0
        assert not result.is_significant

    def test_one_inexact_constant_series_yields_exact_zero(self):
        ys = [60.0, 72.5, 68.0, 80.0, 55.5, 77.0, 70.0, 66.0, 71.0, 64.0]
        result = correlate([83.33] * 10, ys)
        assert result.r == 0.0
        assert not result.is_significant

    def test_constant_series_not_significant(self):
        result = correlate([5.0] * 10, list(range(10)))
        assert result.r == 0.0
        assert result.p_value == 1.0
        assert not result.is_significant

    def test_strong_linear_is_significant(self):
        xs = [60.0, 70.0, 65.0, 80.0, 75.0, 85.0, 72.0, 68.0]
        result = correlate(xs, [0.8 * x + 5 for x in xs])
        assert result.is_significant
        assert result.p_value < 0.001
        assert result.sample_size == 8

    def test_too_few_samples_never_significant(self):
        xs = [1.0, 2.0, 3.0, 4.0, 5.0]
        result = correlate(xs, [2 * x for x in xs])
        assert result.r == pytest.approx(1.0)
        assert not result.is_significant

    def test_confidence_interval_contains_r(self):
        xs = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
        ys = [2, 1, 4, 3, 6, 5, 8, 7, 10, 9]
        result = correlate(xs, ys)
        assert -1.0 <= result.ci_low < result.r < result.ci_high <= 1.0


class TestPValue:
    def test_moderate_r_small_sample(self):
        assert 0.1 < p_value(6 / math.sqrt(60), 5) < 0.2

    def test_degenerate_sample_size(self):
        assert p_value(0.9, 2) == 1.0

    def test_perfect_correlation(self):
        assert p_value(1.0, 10) == 0.0

    def test_larger_sample_lowers_p(self):
        assert p_value(0.5, 30) < p_value(0.5, 10)

    def test_interval_widens_for_small_samples(self):
        assert confidence_interval(0.5, 3) == (-1.0, 1.0)
        narrow = confidence_interval(0.5, 100)
        wide = confidence_interval(0.5, 10)
        assert (narrow[1] - narrow[0]) < (wide[1] - wide[0])


class TestClassifyStrength:
    @pytest.mark.parametrize(
        "r,strength",
        [
            (0.85, CorrelationStrength.STRONG),
            (-0.7, CorrelationStrength.STRONG),
            (0.55, CorrelationStrength.MODERATE),
            (-0.4, CorrelationStrength.MODERATE),
            (0.25, CorrelationStrength.WEAK),
            (0.19, CorrelationStrength.NONE),
            (0.0, CorrelationStrength.NONE),
        ],
    )
    def test_thresholds(self, r, strength):
        assert classify_strength(r) is strength


class TestPairCorrelations:
    def test_alignment_skips_days_missing_either_value(self):
        records = _records(
            sleep=[70, None, 75, 80, 65],
            hrv=[50, 55, None, 60, 48],
        )
        days, xs, ys = align_pair(records, MetricPair.SLEEP_HRV)
        assert xs == [70, 80, 65]
        assert ys == [50, 60, 48]
        assert days == [_START, _START + timedelta(days=3), _START + timedelta(days=4)]

    def test_pair_with_fewer_than_seven_aligned_days_is_skipped(self):
        sleep = [60, 70, 65, 80, 75, 85, 72, 68]
        hrv = [50, 55, 52, 60, None, 62, 57, 54]
        records = _records(sleep=sleep, hrv=[*hrv[:-2], None, None])
        assert correlate_pair(records, MetricPair.SLEEP_HRV) is None

    def test_seven_aligned_days_is_enough(self):
        sleep = [60, 70, 65, 80, 75, 85, 72]
        records = _records(sleep=sleep, hrv=[0.8 * s + 5 for s in sleep])
        result = correlate_pair(records, MetricPair.SLEEP_HRV)
        assert result is not None
        assert result.sample_size == 7
        assert result.strength is CorrelationStrength.STRONG
        assert result.start_date == _START
        assert result.end_date == _START + timedelta(days=6)

    def test_unsorted_history_is_ordered_by_day(self):
        sleep = [60, 70, 65, 80, 75, 85, 72, 68]
        records = _records(sleep=sleep, hrv=[0.8 * s + 5 for s in sleep])
        result = correlate_pair(list(reversed(records)), MetricPair.SLEEP_HRV)
        assert result.start_date < result.end_date

    def test_only_pairs_with_data_are_returned(self):
        sleep = [60, 70, 65, 80, 75, 85, 72, 68, 74, 79]
        records = _records(sleep=sleep, hrv=[0.8 * s + 5 for s in sleep])
        pairs = [c.pair for c in compute_pair_correlations(records)]
        assert pairs == [MetricPair.SLEEP_HRV]

    def test_date_range_limits_window(self):
        sleep = [60, 70, 65, 80, 75, 85, 72, 68, 74, 79]
        records = _records(sleep=sleep, hrv=[0.8 * s + 5 for s in sleep])
        window = (_START + timedelta(days=4), _START + timedelta(days=9))
        assert compute_pair_correlations(records, window) == []

    def test_stress_pair_expected_negative(self):
        hrv = [40, 55, 48, 62, 51, 58, 45, 60]
        records = _records(hrv=hrv, stress=[100 - h for h in hrv])
        result = correlate_pair(records, MetricPair.STRESS_HRV)
        assert result.r == pytest.approx(-1.0)
        assert result.is_significant
