"""Daily condition models and domain constants.

Inputs are frozen dataclasses; every raw reading is ``float | None`` where
``None`` means the reading was not captured (absence is not zero).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class MetricKind(str, Enum):
    SLEEP = "sleep"
    HRV = "hrv"
    ACTIVITY = "activity"
    HEART_RATE = "heart_rate"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class HealthStatus(str, Enum):
    OPTIMAL = "optimal"
    GOOD = "good"
    CARE = "care"
    REST = "rest"
    UNKNOWN = "unknown"


class DataQuality(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class PressureTrend(str, Enum):
    RISING = "rising"
    STABLE = "stable"
    FALLING = "falling"


class EnergyTrend(str, Enum):
    RECOVERING = "recovering"
    STABLE = "stable"
    DECLINING = "declining"


class MetricPair(str, Enum):
    """The six fixed correlation pairs, named driver first."""

    SLEEP_HRV = "sleep_hrv"
    RHYTHM_SLEEP = "rhythm_sleep"
    ACTIVITY_HRV = "activity_hrv"
    RHYTHM_HRV = "rhythm_hrv"
    ACTIVITY_SLEEP = "activity_sleep"
    STRESS_HRV = "stress_hrv"

    @property
    def driver(self) -> str:
        return PAIR_SERIES[self][0]

    @property
    def response(self) -> str:
        return PAIR_SERIES[self][1]

    @property
    def metrics(self) -> tuple[str, str]:
        return PAIR_SERIES[self]


class CorrelationStrength(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    NONE = "none"


class InsightSubCondition(str, Enum):
    RECENT_DECLINE = "recent_decline"
    RECENT_RISE = "recent_rise"
    STEADY = "steady"
    INVERTED = "inverted"


class InsightTone(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    CAUTION = "caution"


class InsightCategory(str, Enum):
    """Opaque identifiers rendered into text by the narrative layer."""

    SLEEP_DRIVES_RECOVERY = "sleep_drives_recovery"
    SLEEP_DEFICIT_LOWERING_HRV = "sleep_deficit_lowering_hrv"
    SLEEP_GAINS_LIFTING_HRV = "sleep_gains_lifting_hrv"

    RHYTHM_SHAPES_SLEEP = "rhythm_shapes_sleep"
    RHYTHM_STRAIN_DISRUPTING_SLEEP = "rhythm_strain_disrupting_sleep"
    RHYTHM_SETTLING_SLEEP = "rhythm_settling_sleep"

    ACTIVITY_SUPPORTS_RECOVERY = "activity_supports_recovery"
    ACTIVITY_DROP_LOWERING_HRV = "activity_drop_lowering_hrv"
    ACTIVITY_GAINS_LIFTING_HRV = "activity_gains_lifting_hrv"

    RHYTHM_TRACKS_RECOVERY = "rhythm_tracks_recovery"
    RHYTHM_STRAIN_LOWERING_HRV = "rhythm_strain_lowering_hrv"
    RHYTHM_SETTLING_HRV = "rhythm_settling_hrv"

    ACTIVITY_SHAPES_SLEEP = "activity_shapes_sleep"
    ACTIVITY_DROP_AFFECTING_SLEEP = "activity_drop_affecting_sleep"
    ACTIVITY_GAINS_IMPROVING_SLEEP = "activity_gains_improving_sleep"

    STRESS_WEIGHS_ON_RECOVERY = "stress_weighs_on_recovery"
    STRESS_SPIKE_LOWERING_HRV = "stress_spike_lowering_hrv"
    STRESS_EASING_LIFTING_HRV = "stress_easing_lifting_hrv"

    EMERGING_PATTERN = "emerging_pattern"
    ATYPICAL_PATTERN = "atypical_pattern"


class ActionSuggestion(str, Enum):
    EXTEND_SLEEP_WINDOW = "extend_sleep_window"
    KEEP_CONSISTENT_BEDTIME = "keep_consistent_bedtime"
    EVENING_WIND_DOWN = "evening_wind_down"
    SHORT_DAYTIME_WALK = "short_daytime_walk"
    KEEP_MOVEMENT_ROUTINE = "keep_movement_routine"
    EASE_TRAINING_LOAD = "ease_training_load"
    BREATHING_BREAK = "breathing_break"


class FocusTag(str, Enum):
    CHILL = "chill"
    WORK = "work"
    BEAUTY = "beauty"
    DIET = "diet"
    SLEEP = "sleep"
    FITNESS = "fitness"


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

METRIC_KINDS = [
    MetricKind.SLEEP,
    MetricKind.HRV,
    MetricKind.ACTIVITY,
    MetricKind.HEART_RATE,
]

# History series names: the four metrics plus the stress graph.
STRESS_SERIES = "stress"
SERIES_NAMES = [kind.value for kind in METRIC_KINDS] + [STRESS_SERIES]

# (driver, response) series for each pair
PAIR_SERIES: dict[MetricPair, tuple[str, str]] = {
    MetricPair.SLEEP_HRV: ("sleep", "hrv"),
    MetricPair.RHYTHM_SLEEP: ("heart_rate", "sleep"),
    MetricPair.ACTIVITY_HRV: ("activity", "hrv"),
    MetricPair.RHYTHM_HRV: ("heart_rate", "hrv"),
    MetricPair.ACTIVITY_SLEEP: ("activity", "sleep"),
    MetricPair.STRESS_HRV: ("stress", "hrv"),
}

# Expected sign of r for a physiologically "ordinary" relationship.
# Higher stress goes with lower HRV; every other pair moves together.
EXPECTED_SIGN: dict[MetricPair, int] = {
    pair: (-1 if pair is MetricPair.STRESS_HRV else 1) for pair in MetricPair
}

FOCUS_TAG_CONCERNS: dict[FocusTag, frozenset[str]] = {
    FocusTag.CHILL: frozenset({"hrv", STRESS_SERIES}),
    FocusTag.WORK: frozenset({"hrv", "sleep", STRESS_SERIES}),
    FocusTag.BEAUTY: frozenset({"sleep"}),
    FocusTag.DIET: frozenset({"activity"}),
    FocusTag.SLEEP: frozenset({"sleep"}),
    FocusTag.FITNESS: frozenset({"activity", "heart_rate"}),
}

SCORE_MIN = 0.0
SCORE_MAX = 100.0


# ---------------------------------------------------------------------------
# Raw inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SleepSample:
    total_minutes: float | None = None
    deep_minutes: float | None = None
    rem_minutes: float | None = None
    light_minutes: float | None = None
    awake_minutes: float | None = None
    efficiency: float | None = None      # ratio 0-1


@dataclass(frozen=True)
class HRVSample:
    average_ms: float | None = None
    min_ms: float | None = None
    max_ms: float | None = None


@dataclass(frozen=True)
class HeartRateSample:
    resting_bpm: float | None = None
    average_bpm: float | None = None
    min_bpm: float | None = None
    max_bpm: float | None = None


@dataclass(frozen=True)
class ActivitySample:
    steps: float | None = None
    distance_km: float | None = None
    active_calories: float | None = None
    active_minutes: float | None = None


@dataclass(frozen=True)
class EnvironmentSample:
    pressure_hpa: float | None = None
    pressure_3h_ago_hpa: float | None = None
    humidity_pct: float | None = None
    feels_like_c: float | None = None
    uv_index: float | None = None


@dataclass(frozen=True)
class RawDailySample:
    """One calendar day of biometric and environmental readings."""

    day: date | None = None
    sleep: SleepSample | None = None
    hrv: HRVSample | None = None
    heart_rate: HeartRateSample | None = None
    activity: ActivitySample | None = None
    environment: EnvironmentSample | None = None


@dataclass(frozen=True)
class UserBaseline:
    """Long-lived personalization inputs supplied by the caller."""

    age: int = 30
    gender: Gender = Gender.OTHER
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    hrv_baseline_ms: float | None = None   # personal override of the age table


@dataclass(frozen=True)
class DailyMetricRecord:
    """One day of stored history. ``None`` marks an invalid or missing metric."""

    day: date
    sleep: float | None = None
    hrv: float | None = None
    activity: float | None = None
    heart_rate: float | None = None
    stress: float | None = None
    energy: float | None = None

    def series_value(self, name: str) -> float | None:
        return getattr(self, name)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class MetricScore:
    kind: MetricKind
    value: float                 # 0-100, 0 when invalid
    is_valid: bool
    details: dict = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": round(self.value, 2),
            "is_valid": self.is_valid,
            "details": self.details,
        }


@dataclass
class MetricScores:
    sleep: MetricScore
    hrv: MetricScore
    activity: MetricScore
    heart_rate: MetricScore

    def __iter__(self):
        return iter([self.sleep, self.hrv, self.activity, self.heart_rate])

    def valid(self) -> list[MetricScore]:
        return [s for s in self if s.is_valid]

    def value_or_none(self, kind: MetricKind) -> float | None:
        score = getattr(self, kind.value)
        return score.value if score.is_valid else None

    def as_dict(self) -> dict[str, Any]:
        return {s.kind.value: s.as_dict() for s in self}


@dataclass
class OverallHealthAssessment:
    overall_score: float
    status: HealthStatus
    data_quality: DataQuality
    confidence: float
    valid_categories: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "overall_score": round(self.overall_score, 2),
            "status": self.status.value,
            "data_quality": self.data_quality.value,
            "confidence": round(self.confidence, 4),
            "valid_categories": self.valid_categories,
        }


@dataclass
class EnergyLevel:
    value: float
    trend: EnergyTrend
    is_valid: bool = True
    pressure_trend: PressureTrend = PressureTrend.STABLE
    base_energy: float = 0.0
    penalties: dict[str, float] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "value": round(self.value, 2),
            "trend": self.trend.value,
            "is_valid": self.is_valid,
            "pressure_trend": self.pressure_trend.value,
            "base_energy": round(self.base_energy, 2),
            "penalties": dict(self.penalties),
        }


@dataclass(frozen=True)
class PearsonResult:
    r: float
    p_value: float
    ci_low: float
    ci_high: float
    sample_size: int
    is_significant: bool


@dataclass
class MetricPairCorrelation:
    pair: MetricPair
    r: float
    p_value: float
    ci_low: float
    ci_high: float
    is_significant: bool
    sample_size: int
    start_date: date
    end_date: date
    strength: CorrelationStrength = CorrelationStrength.NONE

    def as_dict(self) -> dict[str, Any]:
        return {
            "pair": self.pair.value,
            "r": round(self.r, 4),
            "p_value": round(self.p_value, 6),
            "confidence_interval": [round(self.ci_low, 4), round(self.ci_high, 4)],
            "is_significant": self.is_significant,
            "sample_size": self.sample_size,
            "date_range": [self.start_date.isoformat(), self.end_date.isoformat()],
            "strength": self.strength.value,
        }


@dataclass(frozen=True)
class InsightTemplate:
    category: InsightCategory
    tone: InsightTone
    action: ActionSuggestion | None = None


@dataclass
class CorrelationInsight:
    pair: MetricPair
    strength: CorrelationStrength
    category: InsightCategory
    tone: InsightTone
    sub_condition: InsightSubCondition
    action: ActionSuggestion | None
    priority: int
    generated_at: datetime
    correlation: MetricPairCorrelation

    @property
    def has_action(self) -> bool:
        return self.action is not None

    def as_dict(self) -> dict[str, Any]:
        return {
            "pair": self.pair.value,
            "strength": self.strength.value,
            "category": self.category.value,
            "tone": self.tone.value,
            "sub_condition": self.sub_condition.value,
            "action": self.action.value if self.action else None,
            "priority": self.priority,
            "generated_at": self.generated_at.isoformat(),
            "r": round(self.correlation.r, 4),
        }


@dataclass(frozen=True)
class InsightDisplayPolicy:
    max_insights: int = 2
    cooldown_days: int = 7


@dataclass
class CorrelationAnalysis:
    correlations: list[MetricPairCorrelation]
    insights: list[CorrelationInsight]
    candidates: list[CorrelationInsight] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "correlations": [c.as_dict() for c in self.correlations],
            "insights": [i.as_dict() for i in self.insights],
            "candidate_count": len(self.candidates),
        }


@dataclass
class DailyConditionSummary:
    """Structured output consumed by the narrative and UI layers."""

    day: date | None
    scores: MetricScores
    assessment: OverallHealthAssessment
    energy: EnergyLevel
    correlations: list[MetricPairCorrelation] = field(default_factory=list)
    insights: list[CorrelationInsight] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat() if self.day else None,
            "scores": self.scores.as_dict(),
            "assessment": self.assessment.as_dict(),
            "energy": self.energy.as_dict(),
            "correlations": [c.as_dict() for c in self.correlations],
            "insights": [i.as_dict() for i in self.insights],
        }
