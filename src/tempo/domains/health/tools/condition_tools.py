"""MCP tools exposing the daily condition engine.

Every tool returns a JSON string of structured results. Text generation
belongs to the downstream narrative layer; nothing here writes prose.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import date, timedelta
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from tempo.core.config.settings import Settings
    from tempo.domains.health.connectors import HealthDataProvider

from tempo.domains.health.domain_logic.condition_models import MetricPair
from tempo.domains.health.domain_logic.daily_condition import analyze_daily_condition
from tempo.domains.health.domain_logic.energy_engine import pressure_trend
from tempo.domains.health.domain_logic.insights import analyze

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _parse_day(value: str | None) -> date:
    """Parse an ISO date, defaulting to today."""
    if value in (None, ""):
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"day must be an ISO date (YYYY-MM-DD), got {value!r}") from None


def _parse_recently_shown(value: dict[str, str] | None) -> dict[MetricPair, date]:
    """Parse {pair: last_shown_iso_date} cooldown records."""
    if not value:
        return {}
    parsed: dict[MetricPair, date] = {}
    for pair_name, shown_on in value.items():
        try:
            pair = MetricPair(pair_name)
        except ValueError:
            raise ValueError(
                f"Unknown pair {pair_name!r}; expected one of "
                f"{', '.join(p.value for p in MetricPair)}"
            ) from None
        parsed[pair] = _parse_day(shown_on)
    return parsed


def register_condition_tools(
    mcp: FastMCP,
    health_data_provider: HealthDataProvider,
    settings: Settings,
) -> None:
    """Register daily condition tools on the MCP server."""

    baseline = health_data_provider.get_user_baseline() or settings.user_baseline()
    policy = settings.display_policy()

    @mcp.tool
    async def daily_condition(
        ctx: Context,
        day: str | None = None,
        concerns: list[str] | None = None,
        recently_shown: dict[str, str] | None = None,
    ) -> str:
        """Score today's biometrics and return status, energy and insights.

        Args:
            day: ISO date to analyze (default: today).
            concerns: Focus tags (chill, work, beauty, diet, sleep, fitness)
                or metric names the user cares about.
            recently_shown: Map of insight pair -> ISO date it was last shown.
        """
        start_time = time.monotonic()
        target_day = _parse_day(day)
        shown = _parse_recently_shown(recently_shown)

        sample = await health_data_provider.get_daily_sample(target_day)
        previous_energy = await health_data_provider.get_previous_energy(target_day)
        history = await health_data_provider.get_history(
            target_day, days=settings.correlation_window_days
        )

        summary = analyze_daily_condition(
            sample,
            baseline,
            previous_energy=previous_energy,
            history=history,
            recently_shown=shown,
            concerns=concerns,
            policy=policy,
        )

        payload = summary.as_dict()
        payload["provenance"] = health_data_provider.get_provenance()

        logger.info(
            "daily_condition %s: status=%s energy=%.1f insights=%d (%.1f ms)",
            target_day.isoformat(),
            summary.assessment.status.value,
            summary.energy.value,
            len(summary.insights),
            (time.monotonic() - start_time) * 1000,
        )
        return json.dumps(payload)

    @mcp.tool
    async def correlation_insights(
        ctx: Context,
        days: int = 30,
        end: str | None = None,
        concerns: list[str] | None = None,
        recently_shown: dict[str, str] | None = None,
    ) -> str:
        """Correlate metric history and return the insights worth showing.

        Requires at least 7 aligned days per pair; pairs with less history are
        omitted.

        Args:
            days: Length of the history window (7-90 recommended).
            end: ISO date closing the window (default: today).
            concerns: Focus tags or metric names the user cares about.
            recently_shown: Map of insight pair -> ISO date it was last shown.
        """
        if days < 1:
            raise ValueError("days must be at least 1")
        end_day = _parse_day(end)
        start_day = end_day - timedelta(days=days - 1)

        history = await health_data_provider.get_history(end_day, days=days)
        analysis = analyze(
            history,
            (start_day, end_day),
            recently_shown=_parse_recently_shown(recently_shown),
            concerns=concerns,
            policy=policy,
        )

        payload = analysis.as_dict()
        payload["window"] = {
            "start": start_day.isoformat(),
            "end": end_day.isoformat(),
            "days_available": len(history),
        }
        payload["provenance"] = health_data_provider.get_provenance()
        return json.dumps(payload)

    @mcp.tool
    def pressure_trend_check(
        current_hpa: float,
        pressure_3h_ago_hpa: float | None = None,
    ) -> str:
        """Classify the 3-hour barometric pressure trend.

        Args:
            current_hpa: Current pressure in hPa.
            pressure_3h_ago_hpa: Pressure about 3 hours ago, if known.
        """
        trend = pressure_trend(current_hpa, pressure_3h_ago_hpa)
        diff = (
            round(current_hpa - pressure_3h_ago_hpa, 2)
            if pressure_3h_ago_hpa is not None
            else None
        )
        return json.dumps({"pressure_trend": trend.value, "diff_hpa": diff})
