"""Daily condition pipeline.

Composes the scorer, classifier, energy engine and (when history is given)
the correlation/insight engine into one structured summary. Every input,
including yesterday's energy and the insight cooldown state, is an explicit
argument; nothing is retained between calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime

from tempo.domains.health.domain_logic.assessment import classify
from tempo.domains.health.domain_logic.condition_models import (
    DailyConditionSummary,
    DailyMetricRecord,
    EnergyLevel,
    FocusTag,
    InsightDisplayPolicy,
    MetricKind,
    MetricPair,
    MetricScores,
    RawDailySample,
    UserBaseline,
)
from tempo.domains.health.domain_logic.energy_engine import compute_energy
from tempo.domains.health.domain_logic.insights import analyze
from tempo.domains.health.domain_logic.metric_scorer import score_metrics


def analyze_daily_condition(
    sample: RawDailySample,
    baseline: UserBaseline,
    *,
    previous_energy: EnergyLevel | float | None = None,
    history: Sequence[DailyMetricRecord] | None = None,
    recently_shown: Mapping[MetricPair, date] | None = None,
    concerns: Iterable[str | FocusTag] | None = None,
    policy: InsightDisplayPolicy = InsightDisplayPolicy(),
    now: datetime | None = None,
) -> DailyConditionSummary:
    """Run the full daily analysis for one sample.

    Args:
        sample: Today's raw readings (any part may be absent).
        baseline: Age/gender/activity personalization.
        previous_energy: Yesterday's energy, for the trend.
        history: Prior days' records for correlation insights. Today is not
            appended automatically; pass it in if it should count.
        recently_shown: Pair -> last date its insight was displayed.
        concerns: Focus tags or series names the user cares about.
        policy: Insight cap and cooldown.
        now: Timestamp for generated insights.
    """
    scores = score_metrics(sample, baseline)
    assessment = classify(scores)
    energy = compute_energy(
        scores.sleep,
        scores.hrv,
        sample.environment,
        previous_energy,
    )

    correlations = []
    insights = []
    if history:
        analysis = analyze(
            history,
            recently_shown=recently_shown,
            concerns=concerns,
            policy=policy,
            today=sample.day,
            now=now,
        )
        correlations = analysis.correlations
        insights = analysis.insights

    return DailyConditionSummary(
        day=sample.day,
        scores=scores,
        assessment=assessment,
        energy=energy,
        correlations=correlations,
        insights=insights,
    )


def to_daily_record(
    day: date,
    scores: MetricScores,
    energy: EnergyLevel | None = None,
    stress: float | None = None,
) -> DailyMetricRecord:
    """Convert one day's outputs into a history record (invalid metrics -> None)."""
    return DailyMetricRecord(
        day=day,
        sleep=scores.value_or_none(MetricKind.SLEEP),
        hrv=scores.value_or_none(MetricKind.HRV),
        activity=scores.value_or_none(MetricKind.ACTIVITY),
        heart_rate=scores.value_or_none(MetricKind.HEART_RATE),
        stress=stress,
        energy=energy.value if energy is not None and energy.is_valid else None,
    )
