"""Mock daily samples and history for development and testing.

All mock data represents a median healthy adult: not in crisis, not
perfectly optimized. Values are deterministic functions of the calendar day
so repeated calls return identical data.
"""

from __future__ import annotations

import math
from datetime import date, timedelta

from tempo.domains.health.domain_logic.condition_models import (
    ActivitySample,
    DailyMetricRecord,
    EnvironmentSample,
    HeartRateSample,
    HRVSample,
    RawDailySample,
    SleepSample,
)


def get_mock_daily_sample(day: date) -> RawDailySample:
    """Return a mock sample for ``day``."""
    i = day.toordinal()
    total = 450 + 30 * math.sin(i * 0.9)
    return RawDailySample(
        day=day,
        sleep=SleepSample(
            total_minutes=round(total),
            deep_minutes=round(total * 0.18),
            rem_minutes=round(total * 0.22),
            light_minutes=round(total * 0.55),
            awake_minutes=24,
            efficiency=round(0.88 + 0.04 * math.cos(i * 0.7), 3),
        ),
        hrv=HRVSample(
            average_ms=round(44 + 6 * math.sin(i * 0.9), 1),
            min_ms=22.0,
            max_ms=78.0,
        ),
        heart_rate=HeartRateSample(
            resting_bpm=round(64 + 3 * math.cos(i * 1.7)),
            average_bpm=78.0,
            min_bpm=52.0,
            max_bpm=148.0,
        ),
        activity=ActivitySample(
            steps=round(8200 + 2500 * math.sin(i * 0.5 + 1)),
            distance_km=6.1,
            active_calories=420.0,
            active_minutes=round(32 + 10 * math.sin(i * 0.5 + 1)),
        ),
        environment=EnvironmentSample(
            pressure_hpa=1013.0,
            pressure_3h_ago_hpa=round(1013.0 + 3 * math.sin(i * 1.3), 1),
            humidity_pct=55.0,
            feels_like_c=22.0,
            uv_index=4.0,
        ),
    )


def get_mock_daily_record(day: date) -> DailyMetricRecord:
    """Return one day of mock score history.

    HRV tracks sleep closely and the stress graph moves against HRV, so a
    few weeks of history produce significant correlations.
    """
    i = day.toordinal()
    sleep = 75 + 12 * math.sin(i * 0.9)
    hrv = 0.8 * sleep + 5 + 3 * math.cos(i * 2.3)
    activity = 65 + 15 * math.sin(i * 0.5 + 1)
    heart_rate = 85 + 6 * math.cos(i * 1.7)
    stress = None if i % 5 == 0 else 60 - 0.9 * (hrv - 65) + 4 * math.sin(i * 3.1)
    return DailyMetricRecord(
        day=day,
        sleep=round(sleep, 2),
        hrv=round(hrv, 2),
        activity=round(activity, 2),
        heart_rate=round(heart_rate, 2),
        stress=round(stress, 2) if stress is not None else None,
        energy=round(0.6 * sleep + 0.4 * hrv, 2),
    )


def get_mock_history(end: date, days: int = 30) -> list[DailyMetricRecord]:
    """Return ``days`` records ending at ``end`` (inclusive), oldest first."""
    start = end - timedelta(days=days - 1)
    return [get_mock_daily_record(start + timedelta(days=n)) for n in range(days)]
