"""Shared test fixtures for Tempo condition tests."""

from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

_SETTINGS_ENV_VARS = (
    "TEMPO_HOST",
    "TEMPO_PORT",
    "TEMPO_LOG_LEVEL",
    "TEMPO_ALLOW_INSECURE_BIND",
    "TEMPO_TRANSPORT",
    "USER_AGE",
    "USER_GENDER",
    "USER_ACTIVITY_LEVEL",
    "USER_HRV_BASELINE_MS",
    "INSIGHT_MAX_PER_RUN",
    "INSIGHT_COOLDOWN_DAYS",
    "CORRELATION_WINDOW_DAYS",
)


@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from tempo.domains.health.connectors.providers import MockHealthDataProvider  # noqa: E402
from tempo.domains.health.domain_logic.condition_models import (  # noqa: E402
    ActivitySample,
    DailyMetricRecord,
    EnvironmentSample,
    Gender,
    HeartRateSample,
    HRVSample,
    RawDailySample,
    SleepSample,
    UserBaseline,
)

TODAY = date(2026, 3, 14)


def make_history(
    sleep: list[float | None],
    hrv: list[float | None] | None = None,
    *,
    end: date = TODAY,
    **series: list[float | None],
) -> list[DailyMetricRecord]:
    """Build oldest-first history records ending at ``end``.

    ``hrv`` defaults to 0.8 x sleep + 5, a perfectly linear response.
    """
    if hrv is None:
        hrv = [None if s is None else 0.8 * s + 5 for s in sleep]
    start = end - timedelta(days=len(sleep) - 1)
    records = []
    for n, (s, h) in enumerate(zip(sleep, hrv)):
        extra = {name: values[n] for name, values in series.items()}
        records.append(DailyMetricRecord(day=start + timedelta(days=n), sleep=s, hrv=h, **extra))
    return records


@pytest.fixture
def baseline() -> UserBaseline:
    """Age-30 baseline with a 50 ms HRV reference."""
    return UserBaseline(age=30, gender=Gender.MALE, hrv_baseline_ms=50.0)


@pytest.fixture
def full_sample() -> RawDailySample:
    """A complete, healthy day of readings."""
    return RawDailySample(
        day=TODAY,
        sleep=SleepSample(
            total_minutes=480,
            deep_minutes=90,
            rem_minutes=100,
            light_minutes=260,
            awake_minutes=25,
            efficiency=0.95,
        ),
        hrv=HRVSample(average_ms=55.0, min_ms=30.0, max_ms=80.0),
        heart_rate=HeartRateSample(resting_bpm=62.0, average_bpm=76.0),
        activity=ActivitySample(steps=8000, active_minutes=30),
        environment=EnvironmentSample(
            pressure_hpa=1013.0,
            pressure_3h_ago_hpa=1013.5,
            humidity_pct=50.0,
            feels_like_c=21.0,
        ),
    )


@pytest.fixture
def mock_provider() -> MockHealthDataProvider:
    return MockHealthDataProvider()


@pytest.fixture
def history_factory():
    """Return the ``make_history`` builder."""
    return make_history
