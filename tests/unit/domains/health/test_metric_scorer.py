"""Tests for per-metric scoring against the user baseline."""

from __future__ import annotations

import math

import pytest

from tempo.domains.health.domain_logic.condition_models import (
    ActivityLevel,
    ActivitySample,
    Gender,
    HeartRateSample,
    HRVSample,
    MetricKind,
    RawDailySample,
    SleepSample,
    UserBaseline,
)
from tempo.domains.health.domain_logic.metric_scorer import (
    hrv_baseline_for,
    resting_hr_baseline_for,
    score_activity,
    score_heart_rate,
    score_hrv,
    score_metrics,
    score_sleep,
    to_finite,
)


class TestSleepScore:
    def test_full_night_at_95_percent_efficiency(self):
        score = score_sleep(SleepSample(total_minutes=480, efficiency=0.95))
        assert score.is_valid
        assert score.value == pytest.approx(95.0)

    def test_short_night_scales_linearly(self):
        score = score_sleep(SleepSample(total_minutes=360, efficiency=0.9))
        assert score.value == pytest.approx(67.5)

    def test_long_night_is_clamped_to_100(self):
        score = score_sleep(SleepSample(total_minutes=600, efficiency=1.0))
        assert score.value == 100.0

    def test_efficiency_derived_from_awake_minutes(self):
        score = score_sleep(SleepSample(total_minutes=450, awake_minutes=50))
        assert score.is_valid
        assert score.details["efficiency_derived"] is True
        assert score.value == pytest.approx(450 / 480 * 0.9 * 100)

    def test_stage_proportions_recorded_but_do_not_change_score(self):
        plain = score_sleep(SleepSample(total_minutes=480, efficiency=0.9))
        staged = score_sleep(
            SleepSample(total_minutes=480, efficiency=0.9, deep_minutes=96, rem_minutes=120)
        )
        assert staged.value == plain.value
        assert staged.details["deep_pct"] == pytest.approx(0.2)
        assert staged.details["rem_pct"] == pytest.approx(0.25)

    @pytest.mark.parametrize(
        "sample,reason",
        [
            (None, "no_sleep_data"),
            (SleepSample(efficiency=0.9), "missing_total_minutes"),
            (SleepSample(total_minutes=-10, efficiency=0.9), "implausible_total_minutes"),
            (SleepSample(total_minutes=2000, efficiency=0.9), "implausible_total_minutes"),
            (SleepSample(total_minutes=float("nan"), efficiency=0.9), "missing_total_minutes"),
            (SleepSample(total_minutes=420), "missing_efficiency"),
            (SleepSample(total_minutes=420, efficiency=1.3), "implausible_efficiency"),
        ],
    )
    def test_invalid_inputs(self, sample, reason):
        score = score_sleep(sample)
        assert not score.is_valid
        assert score.value == 0.0
        assert score.details["invalid_reason"] == reason


    def test_zero_minute_night_scores_zero(self):
        score = score_sleep(SleepSample(total_minutes=0))
        assert score.is_valid
        assert score.value == 0.0

    def test_zero_minute_night_with_zero_awake_time(self):
        score = score_sleep(SleepSample(total_minutes=0, awake_minutes=0, deep_minutes=0))
        assert score.is_valid
        assert score.value == 0.0


class TestHrvScore:
    def test_age_30_reference_is_50ms(self):
        assert hrv_baseline_for(30) == pytest.approx(50.0)

    def test_reference_non_increasing_with_age(self):
        values = [hrv_baseline_for(age) for age in range(15, 90)]
        assert all(a >= b for a, b in zip(values, values[1:]))

    def test_reference_interpolates_between_rows(self):
        assert hrv_baseline_for(32.5) == pytest.approx(48.5)

    def test_above_baseline_clamped_to_100(self, baseline):
        score = score_hrv(HRVSample(average_ms=55.0), baseline)
        assert score.value == 100.0
        assert score.details["baseline_source"] == "personal"

    def test_half_of_age_reference(self):
        score = score_hrv(HRVSample(average_ms=25.0), UserBaseline(age=30))
        assert score.value == pytest.approx(50.0)
        assert score.details["baseline_source"] == "age_table"

    def test_older_user_scores_higher_for_same_hrv(self):
        young = score_hrv(HRVSample(average_ms=35.0), UserBaseline(age=25))
        old = score_hrv(HRVSample(average_ms=35.0), UserBaseline(age=60))
        assert old.value > young.value

    @pytest.mark.parametrize("average", [None, 0.0, -5.0, 500.0, float("inf")])
    def test_invalid_average(self, average):
        score = score_hrv(HRVSample(average_ms=average), UserBaseline())
        assert not score.is_valid
        assert score.value == 0.0


class TestActivityScore:
    def test_steps_only(self):
        score = score_activity(ActivitySample(steps=5000), UserBaseline())
        assert score.value == pytest.approx(50.0)
        assert "active_minutes_score" not in score.details

    def test_steps_over_target_clamped(self):
        score = score_activity(ActivitySample(steps=25000), UserBaseline())
        assert score.value == 100.0

    def test_zero_steps_is_valid(self):
        score = score_activity(ActivitySample(steps=0), UserBaseline())
        assert score.is_valid
        assert score.value == 0.0

    def test_active_minutes_blend(self):
        score = score_activity(ActivitySample(steps=5000, active_minutes=30), UserBaseline())
        assert score.value == pytest.approx(0.7 * 50 + 0.3 * 100)

    def test_activity_level_changes_minutes_target(self):
        sample = ActivitySample(steps=5000, active_minutes=15)
        sedentary = score_activity(sample, UserBaseline(activity_level=ActivityLevel.SEDENTARY))
        very_active = score_activity(
            sample, UserBaseline(activity_level=ActivityLevel.VERY_ACTIVE)
        )
        assert sedentary.value == pytest.approx(65.0)
        assert very_active.value == pytest.approx(0.7 * 50 + 0.3 * 25)

    @pytest.mark.parametrize("steps", [None, -1, 500_000])
    def test_invalid_steps(self, steps):
        score = score_activity(ActivitySample(steps=steps), UserBaseline())
        assert not score.is_valid


class TestHeartRateScore:
    def test_reference_by_gender(self):
        assert resting_hr_baseline_for(30, Gender.MALE) == pytest.approx(62.0)
        assert resting_hr_baseline_for(30, Gender.FEMALE) == pytest.approx(67.0)
        assert resting_hr_baseline_for(30, Gender.OTHER) == pytest.approx(64.5)

    def test_at_reference_scores_100(self, baseline):
        score = score_heart_rate(HeartRateSample(resting_bpm=62), baseline)
        assert score.value == pytest.approx(100.0)

    def test_deviation_is_symmetric(self, baseline):
        high = score_heart_rate(HeartRateSample(resting_bpm=72), baseline)
        low = score_heart_rate(HeartRateSample(resting_bpm=52), baseline)
        assert high.value == pytest.approx(80.0)
        assert low.value == pytest.approx(80.0)

    def test_large_deviation_floors_at_zero(self, baseline):
        score = score_heart_rate(HeartRateSample(resting_bpm=140), baseline)
        assert score.is_valid
        assert score.value == 0.0

    @pytest.mark.parametrize("resting", [None, 10, 300])
    def test_invalid_resting(self, baseline, resting):
        score = score_heart_rate(HeartRateSample(resting_bpm=resting), baseline)
        assert not score.is_valid


class TestScoreMetrics:
    def test_full_sample(self, full_sample, baseline):
        scores = score_metrics(full_sample, baseline)
        assert [s.kind for s in scores] == [
            MetricKind.SLEEP,
            MetricKind.HRV,
            MetricKind.ACTIVITY,
            MetricKind.HEART_RATE,
        ]
        assert scores.sleep.value == pytest.approx(95.0)
        assert scores.hrv.value == 100.0
        assert scores.activity.value == pytest.approx(86.0)
        assert scores.heart_rate.value == pytest.approx(100.0)

    def test_missing_categories_do_not_affect_others(self, baseline):
        sample = RawDailySample(sleep=SleepSample(total_minutes=480, efficiency=0.95))
        scores = score_metrics(sample, baseline)
        assert scores.sleep.is_valid
        assert scores.sleep.value == pytest.approx(95.0)
        assert len(scores.valid()) == 1
        assert scores.value_or_none(MetricKind.HRV) is None

    def test_values_always_in_range(self, baseline):
        for total in (0, 30, 240, 480, 900, 1500):
            for eff in (0.0, 0.5, 1.0):
                sample = RawDailySample(
                    sleep=SleepSample(total_minutes=total, efficiency=eff),
                    hrv=HRVSample(average_ms=total / 5 or None),
                    heart_rate=HeartRateSample(resting_bpm=40 + total / 20),
                    activity=ActivitySample(steps=total * 30, active_minutes=total / 10),
                )
                for score in score_metrics(sample, baseline):
                    assert 0.0 <= score.value <= 100.0
                    assert not math.isnan(score.value)


class TestToFinite:
    @pytest.mark.parametrize("raw,expected", [(42, 42.0), ("61.5", 61.5), (0, 0.0)])
    def test_numeric_values(self, raw, expected):
        assert to_finite(raw) == expected

    @pytest.mark.parametrize("raw", [None, True, "n/a", float("nan"), float("-inf")])
    def test_unusable_values(self, raw):
        assert to_finite(raw) is None
