"""Health data connectors: abstraction layer for daily sample and history retrieval."""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from tempo.domains.health.domain_logic.condition_models import (
    DailyMetricRecord,
    RawDailySample,
    UserBaseline,
)


@runtime_checkable
class HealthDataProvider(Protocol):
    """Abstract interface for the engine's external inputs.

    Tools call these methods without knowing whether data comes from the
    platform health store, a weather service, stored history, or mock
    generators.
    """

    async def get_daily_sample(self, day: date) -> RawDailySample:
        """Biometric and environmental readings for one calendar day."""
        ...

    async def get_history(self, end: date, days: int = 30) -> list[DailyMetricRecord]:
        """Ordered, de-duplicated daily records for the ``days`` ending at ``end``."""
        ...

    async def get_previous_energy(self, day: date) -> float | None:
        """Energy level recorded for the day before ``day``, if any."""
        ...

    def get_user_baseline(self) -> UserBaseline | None:
        """Stored personalization, or None to fall back to configured defaults."""
        ...

    def is_connected(self) -> bool:
        """Whether real health data is available."""
        ...

    @property
    def data_source(self) -> str:
        """Label for the active data source, e.g. 'healthkit' or 'mock'."""
        ...

    def get_provenance(self) -> dict[str, str]:
        """Return provenance metadata suitable for merging into tool output."""
        ...
