"""Energy level: sleep + HRV recovery minus environmental load, with day-over-day trend."""

from __future__ import annotations

from tempo.domains.health.domain_logic.condition_models import (
    SCORE_MAX,
    SCORE_MIN,
    EnergyLevel,
    EnergyTrend,
    EnvironmentSample,
    MetricScore,
    PressureTrend,
)
from tempo.domains.health.domain_logic.metric_scorer import to_finite

SLEEP_WEIGHT = 0.6
HRV_WEIGHT = 0.4

PRESSURE_TREND_THRESHOLD_HPA = 2.0
ENERGY_TREND_THRESHOLD = 5.0

FALLING_PRESSURE_PENALTY = 5.0
LOW_HUMIDITY_PCT = 30.0
LOW_HUMIDITY_PENALTY = 3.0
HOT_FEELS_LIKE_C = 30.0
HEAT_PENALTY = 4.0


def pressure_trend(current_hpa: float | None, prior_hpa: float | None) -> PressureTrend:
    """Classify the 3-hour barometric trend.

    A change of exactly +/-2 hPa is ``stable``; only a strictly larger move
    counts as rising or falling. Missing readings are ``stable``.
    """
    current = to_finite(current_hpa)
    prior = to_finite(prior_hpa)
    if current is None or prior is None:
        return PressureTrend.STABLE

    diff = current - prior
    if diff > PRESSURE_TREND_THRESHOLD_HPA:
        return PressureTrend.RISING
    if diff < -PRESSURE_TREND_THRESHOLD_HPA:
        return PressureTrend.FALLING
    return PressureTrend.STABLE


def energy_trend(current: float, previous: float | EnergyLevel | None) -> EnergyTrend:
    """Compare today's energy with yesterday's; absent history is ``stable``."""
    if isinstance(previous, EnergyLevel):
        previous = previous.value if previous.is_valid else None
    previous = to_finite(previous)
    if previous is None:
        return EnergyTrend.STABLE

    diff = current - previous
    if diff > ENERGY_TREND_THRESHOLD:
        return EnergyTrend.RECOVERING
    if diff < -ENERGY_TREND_THRESHOLD:
        return EnergyTrend.DECLINING
    return EnergyTrend.STABLE


def environmental_penalties(environment: EnvironmentSample | None) -> dict[str, float]:
    """Cumulative penalties from pressure, humidity and perceived temperature."""
    if environment is None:
        return {}

    penalties: dict[str, float] = {}
    trend = pressure_trend(environment.pressure_hpa, environment.pressure_3h_ago_hpa)
    if trend is PressureTrend.FALLING:
        penalties["falling_pressure"] = FALLING_PRESSURE_PENALTY

    humidity = to_finite(environment.humidity_pct)
    if humidity is not None and humidity < LOW_HUMIDITY_PCT:
        penalties["low_humidity"] = LOW_HUMIDITY_PENALTY

    feels_like = to_finite(environment.feels_like_c)
    if feels_like is not None and feels_like > HOT_FEELS_LIKE_C:
        penalties["heat"] = HEAT_PENALTY

    return penalties


def _score_value(score: MetricScore | float | None) -> float | None:
    if isinstance(score, MetricScore):
        return score.value if score.is_valid else None
    return to_finite(score)


def compute_energy(
    sleep_score: MetricScore | float | None,
    hrv_score: MetricScore | float | None,
    environment: EnvironmentSample | None = None,
    previous_energy: EnergyLevel | float | None = None,
) -> EnergyLevel:
    """Compute today's energy level.

    base = sleep x 0.6 + hrv x 0.4, minus environmental penalties, clamped to
    [0, 100]. When only one of the two scores is valid it carries the full
    weight; with neither the result is marked invalid.
    """
    sleep = _score_value(sleep_score)
    hrv = _score_value(hrv_score)
    trend_of_pressure = (
        pressure_trend(environment.pressure_hpa, environment.pressure_3h_ago_hpa)
        if environment is not None
        else PressureTrend.STABLE
    )

    if sleep is None and hrv is None:
        return EnergyLevel(
            value=0.0,
            trend=EnergyTrend.STABLE,
            is_valid=False,
            pressure_trend=trend_of_pressure,
        )

    if sleep is not None and hrv is not None:
        base = sleep * SLEEP_WEIGHT + hrv * HRV_WEIGHT
    else:
        base = sleep if sleep is not None else hrv

    penalties = environmental_penalties(environment)
    value = max(SCORE_MIN, min(SCORE_MAX, base - sum(penalties.values())))

    return EnergyLevel(
        value=value,
        trend=energy_trend(value, previous_energy),
        is_valid=True,
        pressure_trend=trend_of_pressure,
        base_energy=base,
        penalties=penalties,
    )
