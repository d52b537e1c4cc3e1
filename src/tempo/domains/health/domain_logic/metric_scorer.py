"""Deterministic metric scoring: one day's raw sample -> four 0-100 scores.

Each score function takes one raw sample part plus the user baseline and
returns a ``MetricScore``. A metric whose required readings are absent, NaN
or physiologically implausible is returned with ``is_valid=False`` and a
value of 0; it is never defaulted to a mid-range score.
"""

from __future__ import annotations

import math

from tempo.domains.health.domain_logic.condition_models import (
    SCORE_MAX,
    SCORE_MIN,
    ActivityLevel,
    ActivitySample,
    Gender,
    HeartRateSample,
    HRVSample,
    MetricKind,
    MetricScore,
    MetricScores,
    RawDailySample,
    SleepSample,
    UserBaseline,
)


# ---------------------------------------------------------------------------
# Reference values
# ---------------------------------------------------------------------------

TARGET_SLEEP_MINUTES = 480.0
TARGET_STEPS = 10_000.0

# HRV reference by age (ms), population averages for healthy adults
HRV_BASELINE_BY_AGE: list[tuple[int, float]] = [
    (20, 56.0), (25, 53.0), (30, 50.0), (35, 47.0), (40, 43.0),
    (45, 40.0), (50, 37.0), (55, 34.0), (60, 31.0), (65, 29.0),
]

# Resting heart rate reference by age (bpm)
RESTING_HR_BASELINE_BY_AGE: dict[Gender, list[tuple[int, float]]] = {
    Gender.MALE: [(20, 60.0), (30, 62.0), (40, 64.0), (50, 66.0), (60, 68.0)],
    Gender.FEMALE: [(20, 65.0), (30, 67.0), (40, 69.0), (50, 71.0), (60, 73.0)],
}

# Daily active-minutes target per self-reported activity level
ACTIVE_MINUTES_TARGET: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 15.0,
    ActivityLevel.LIGHT: 20.0,
    ActivityLevel.MODERATE: 30.0,
    ActivityLevel.ACTIVE: 45.0,
    ActivityLevel.VERY_ACTIVE: 60.0,
}
STEPS_BLEND_WEIGHT = 0.7
ACTIVE_MINUTES_BLEND_WEIGHT = 0.3

HEART_RATE_DEVIATION_PENALTY = 2.0

# Physiologically plausible ranges
MAX_SLEEP_MINUTES = 1440.0
MAX_HRV_MS = 300.0
RESTING_HR_RANGE = (25.0, 220.0)
MAX_DAILY_STEPS = 100_000.0
MAX_ACTIVE_MINUTES = 1440.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _clamp(value: float, lo: float = SCORE_MIN, hi: float = SCORE_MAX) -> float:
    """Clamp a value to [lo, hi]."""
    return max(lo, min(hi, value))


def to_finite(val) -> float | None:
    """Convert to a finite float; None for absent, NaN, infinite or non-numeric."""
    if val is None or isinstance(val, bool):
        return None
    try:
        result = float(val)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _invalid(kind: MetricKind, reason: str) -> MetricScore:
    return MetricScore(kind=kind, value=0.0, is_valid=False, details={"invalid_reason": reason})


def _interpolate(table: list[tuple[int, float]], age: float) -> float:
    """Linear interpolation over an age table, clamped at both ends."""
    if age <= table[0][0]:
        return table[0][1]
    if age >= table[-1][0]:
        return table[-1][1]
    for (lo_age, lo_val), (hi_age, hi_val) in zip(table, table[1:]):
        if lo_age <= age <= hi_age:
            frac = (age - lo_age) / (hi_age - lo_age)
            return lo_val + frac * (hi_val - lo_val)
    return table[-1][1]  # pragma: no cover


def hrv_baseline_for(age: float) -> float:
    """Age-adjusted HRV reference in ms; non-increasing with age."""
    return _interpolate(HRV_BASELINE_BY_AGE, age)


def resting_hr_baseline_for(age: float, gender: Gender | str = Gender.OTHER) -> float:
    """Age/gender-adjusted resting heart rate reference in bpm.

    Genders without a dedicated table use the mean of the male and female
    references.
    """
    gender = Gender(gender)
    if gender in RESTING_HR_BASELINE_BY_AGE:
        return _interpolate(RESTING_HR_BASELINE_BY_AGE[gender], age)
    male = _interpolate(RESTING_HR_BASELINE_BY_AGE[Gender.MALE], age)
    female = _interpolate(RESTING_HR_BASELINE_BY_AGE[Gender.FEMALE], age)
    return (male + female) / 2


# ---------------------------------------------------------------------------
# Metric scores
# ---------------------------------------------------------------------------

def score_sleep(sleep: SleepSample | None) -> MetricScore:
    """Sleep score = (total / 480) x efficiency x 100.

    Efficiency falls back to total / (total + awake) when only awake minutes
    were captured. Stage proportions are recorded in ``details`` but do not
    change the score. A recorded night of zero minutes is a valid score of 0.
    """
    if sleep is None:
        return _invalid(MetricKind.SLEEP, "no_sleep_data")

    total = to_finite(sleep.total_minutes)
    if total is None:
        return _invalid(MetricKind.SLEEP, "missing_total_minutes")
    if total < 0 or total > MAX_SLEEP_MINUTES:
        return _invalid(MetricKind.SLEEP, "implausible_total_minutes")

    details: dict = {"total_minutes": total}
    if total == 0:
        return MetricScore(kind=MetricKind.SLEEP, value=0.0, is_valid=True, details=details)

    efficiency = to_finite(sleep.efficiency)
    if efficiency is None:
        awake = to_finite(sleep.awake_minutes)
        if awake is not None and awake >= 0:
            efficiency = total / (total + awake)
            details["efficiency_derived"] = True
    if efficiency is None:
        return _invalid(MetricKind.SLEEP, "missing_efficiency")
    if not 0.0 <= efficiency <= 1.0:
        return _invalid(MetricKind.SLEEP, "implausible_efficiency")
    details["efficiency"] = round(efficiency, 4)

    for stage in ("deep", "rem", "light"):
        minutes = to_finite(getattr(sleep, f"{stage}_minutes"))
        if minutes is not None and minutes >= 0:
            details[f"{stage}_pct"] = round(minutes / total, 4)

    value = _clamp((total / TARGET_SLEEP_MINUTES) * efficiency * 100)
    return MetricScore(kind=MetricKind.SLEEP, value=value, is_valid=True, details=details)


def score_hrv(hrv: HRVSample | None, baseline: UserBaseline) -> MetricScore:
    """HRV score = (average HRV / personal reference) x 100.

    An average of 0 ms is treated as invalid rather than scored: beat-to-beat
    variability is never zero in a live recording, so it marks a sensor fault.
    """
    if hrv is None:
        return _invalid(MetricKind.HRV, "no_hrv_data")

    average = to_finite(hrv.average_ms)
    if average is None:
        return _invalid(MetricKind.HRV, "missing_average_ms")
    if average <= 0 or average > MAX_HRV_MS:
        return _invalid(MetricKind.HRV, "implausible_average_ms")

    personal = to_finite(baseline.hrv_baseline_ms)
    if personal is not None and personal > 0:
        reference = personal
        source = "personal"
    else:
        reference = hrv_baseline_for(baseline.age)
        source = "age_table"

    ratio = average / reference
    return MetricScore(
        kind=MetricKind.HRV,
        value=_clamp(ratio * 100),
        is_valid=True,
        details={
            "average_ms": average,
            "baseline_ms": round(reference, 2),
            "baseline_source": source,
            "ratio": round(ratio, 4),
        },
    )


def score_activity(activity: ActivitySample | None, baseline: UserBaseline) -> MetricScore:
    """Activity score = (steps / 10000) x 100, blended with active minutes.

    When active minutes were captured the score is 70% step score plus 30%
    active-minutes score against the activity-level target.
    """
    if activity is None:
        return _invalid(MetricKind.ACTIVITY, "no_activity_data")

    steps = to_finite(activity.steps)
    if steps is None:
        return _invalid(MetricKind.ACTIVITY, "missing_steps")
    if steps < 0 or steps > MAX_DAILY_STEPS:
        return _invalid(MetricKind.ACTIVITY, "implausible_steps")

    step_score = _clamp((steps / TARGET_STEPS) * 100)
    details: dict = {"steps": steps, "step_score": round(step_score, 2)}

    minutes = to_finite(activity.active_minutes)
    if minutes is not None and 0 <= minutes <= MAX_ACTIVE_MINUTES:
        target = ACTIVE_MINUTES_TARGET[ActivityLevel(baseline.activity_level)]
        minutes_score = _clamp((minutes / target) * 100)
        value = STEPS_BLEND_WEIGHT * step_score + ACTIVE_MINUTES_BLEND_WEIGHT * minutes_score
        details["active_minutes"] = minutes
        details["active_minutes_target"] = target
        details["active_minutes_score"] = round(minutes_score, 2)
    else:
        value = step_score

    return MetricScore(kind=MetricKind.ACTIVITY, value=_clamp(value), is_valid=True, details=details)


def score_heart_rate(heart_rate: HeartRateSample | None, baseline: UserBaseline) -> MetricScore:
    """Heart-rate score = 100 - |resting - personal norm| x 2."""
    if heart_rate is None:
        return _invalid(MetricKind.HEART_RATE, "no_heart_rate_data")

    resting = to_finite(heart_rate.resting_bpm)
    if resting is None:
        return _invalid(MetricKind.HEART_RATE, "missing_resting_bpm")
    lo, hi = RESTING_HR_RANGE
    if not lo <= resting <= hi:
        return _invalid(MetricKind.HEART_RATE, "implausible_resting_bpm")

    reference = resting_hr_baseline_for(baseline.age, baseline.gender)
    deviation = abs(resting - reference)
    details: dict = {
        "resting_bpm": resting,
        "baseline_bpm": round(reference, 2),
        "deviation_bpm": round(deviation, 2),
    }
    average = to_finite(heart_rate.average_bpm)
    if average is not None:
        details["reserve_bpm"] = round(average - resting, 2)

    value = _clamp(100 - deviation * HEART_RATE_DEVIATION_PENALTY)
    return MetricScore(kind=MetricKind.HEART_RATE, value=value, is_valid=True, details=details)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def score_metrics(sample: RawDailySample, baseline: UserBaseline) -> MetricScores:
    """Score all four metric categories for one day.

    Each category is scored independently; a missing category never affects
    the others.
    """
    return MetricScores(
        sleep=score_sleep(sample.sleep),
        hrv=score_hrv(sample.hrv, baseline),
        activity=score_activity(sample.activity, baseline),
        heart_rate=score_heart_rate(sample.heart_rate, baseline),
    )
