"""Concrete HealthDataProvider implementations."""

from __future__ import annotations

from datetime import date, timedelta

from tempo.domains.health.connectors.mock_data import (
    get_mock_daily_record,
    get_mock_daily_sample,
    get_mock_history,
)
from tempo.domains.health.domain_logic.condition_models import (
    DailyMetricRecord,
    RawDailySample,
    UserBaseline,
)


class MockHealthDataProvider:
    """Uses mock data generators. Always available."""

    def __init__(self, baseline: UserBaseline | None = None) -> None:
        self._baseline = baseline

    async def get_daily_sample(self, day: date) -> RawDailySample:
        return get_mock_daily_sample(day)

    async def get_history(self, end: date, days: int = 30) -> list[DailyMetricRecord]:
        return get_mock_history(end, days)

    async def get_previous_energy(self, day: date) -> float | None:
        return get_mock_daily_record(day - timedelta(days=1)).energy

    def get_user_baseline(self) -> UserBaseline | None:
        return self._baseline

    def is_connected(self) -> bool:
        return False

    @property
    def data_source(self) -> str:
        return "mock"

    def get_provenance(self) -> dict[str, str]:
        return {
            "data_source": self.data_source,
            "data_source_note": (
                "Using simulated health data. "
                "Connect a health data source for real measurements."
            ),
        }
