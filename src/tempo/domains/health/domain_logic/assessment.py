"""Overall assessment: four metric scores -> status tier, data quality, confidence."""

from __future__ import annotations

from tempo.domains.health.domain_logic.condition_models import (
    METRIC_KINDS,
    DataQuality,
    HealthStatus,
    MetricScores,
    OverallHealthAssessment,
)

# Lower bounds, inclusive, highest tier first
STATUS_THRESHOLDS: list[tuple[float, HealthStatus]] = [
    (80.0, HealthStatus.OPTIMAL),
    (60.0, HealthStatus.GOOD),
    (40.0, HealthStatus.CARE),
]


def status_for_score(overall_score: float) -> HealthStatus:
    """Map an overall score to its status tier (monotonic in the score)."""
    for lower_bound, status in STATUS_THRESHOLDS:
        if overall_score >= lower_bound:
            return status
    return HealthStatus.REST


def data_quality_for(valid_count: int) -> DataQuality:
    if valid_count >= 4:
        return DataQuality.EXCELLENT
    if valid_count == 3:
        return DataQuality.GOOD
    if valid_count == 2:
        return DataQuality.FAIR
    return DataQuality.POOR


def classify(scores: MetricScores) -> OverallHealthAssessment:
    """Combine the valid metric scores into an overall assessment.

    The overall score is the equal-weight mean of valid scores only. With no
    valid scores the status is ``unknown`` and score and confidence are 0.
    """
    valid = scores.valid()
    valid_count = len(valid)
    quality = data_quality_for(valid_count)

    if valid_count == 0:
        return OverallHealthAssessment(
            overall_score=0.0,
            status=HealthStatus.UNKNOWN,
            data_quality=quality,
            confidence=0.0,
            valid_categories=0,
        )

    overall = sum(s.value for s in valid) / valid_count
    confidence = max(0.0, min(1.0, valid_count / len(METRIC_KINDS)))

    return OverallHealthAssessment(
        overall_score=overall,
        status=status_for_score(overall),
        data_quality=quality,
        confidence=confidence,
        valid_categories=valid_count,
    )
