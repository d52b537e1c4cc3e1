"""Correlation insights: catalog lookup, priority scoring and display policy.

Significant correlations are mapped through a fixed catalog keyed by
(pair, strength, sub-condition) to an insight category identifier and an
optional action identifier. Text is produced downstream; nothing here
builds natural language.

Display policy, applied after scoring:
    1. Drop pairs shown within the cooldown window.
    2. Rank by priority, then action presence, then recency, then |r|.
    3. Truncate to the per-run cap.
    4. Positivity balance: never show only cautions when a non-caution
       candidate is available. The swap drops a caution without an action
       before one that carries an action.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone

from tempo.domains.health.domain_logic.condition_models import (
    EXPECTED_SIGN,
    FOCUS_TAG_CONCERNS,
    SERIES_NAMES,
    ActionSuggestion,
    CorrelationAnalysis,
    CorrelationInsight,
    CorrelationStrength,
    DailyMetricRecord,
    FocusTag,
    InsightCategory,
    InsightDisplayPolicy,
    InsightSubCondition,
    InsightTemplate,
    InsightTone,
    MetricPair,
    MetricPairCorrelation,
)
from tempo.domains.health.domain_logic.correlation import (
    align_pair,
    compute_pair_correlations,
    filter_date_range,
)

logger = logging.getLogger(__name__)

STRENGTH_BONUS: dict[CorrelationStrength, int] = {
    CorrelationStrength.WEAK: 10,
    CorrelationStrength.MODERATE: 20,
    CorrelationStrength.STRONG: 30,
}
ACTIONABLE_BONUS = 20
USER_CONCERN_BONUS = 25
RECENT_CHANGE_BONUS = 15

RECENT_WINDOW_DAYS = 3
MATERIAL_CHANGE_POINTS = 10.0


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _PairTemplates:
    steady: InsightCategory
    worsening: InsightCategory
    improving: InsightCategory
    worsening_action: ActionSuggestion
    steady_action: ActionSuggestion


_PAIR_TEMPLATES: dict[MetricPair, _PairTemplates] = {
    MetricPair.SLEEP_HRV: _PairTemplates(
        steady=InsightCategory.SLEEP_DRIVES_RECOVERY,
        worsening=InsightCategory.SLEEP_DEFICIT_LOWERING_HRV,
        improving=InsightCategory.SLEEP_GAINS_LIFTING_HRV,
        worsening_action=ActionSuggestion.EXTEND_SLEEP_WINDOW,
        steady_action=ActionSuggestion.KEEP_CONSISTENT_BEDTIME,
    ),
    MetricPair.RHYTHM_SLEEP: _PairTemplates(
        steady=InsightCategory.RHYTHM_SHAPES_SLEEP,
        worsening=InsightCategory.RHYTHM_STRAIN_DISRUPTING_SLEEP,
        improving=InsightCategory.RHYTHM_SETTLING_SLEEP,
        worsening_action=ActionSuggestion.EVENING_WIND_DOWN,
        steady_action=ActionSuggestion.KEEP_CONSISTENT_BEDTIME,
    ),
    MetricPair.ACTIVITY_HRV: _PairTemplates(
        steady=InsightCategory.ACTIVITY_SUPPORTS_RECOVERY,
        worsening=InsightCategory.ACTIVITY_DROP_LOWERING_HRV,
        improving=InsightCategory.ACTIVITY_GAINS_LIFTING_HRV,
        worsening_action=ActionSuggestion.SHORT_DAYTIME_WALK,
        steady_action=ActionSuggestion.KEEP_MOVEMENT_ROUTINE,
    ),
    MetricPair.RHYTHM_HRV: _PairTemplates(
        steady=InsightCategory.RHYTHM_TRACKS_RECOVERY,
        worsening=InsightCategory.RHYTHM_STRAIN_LOWERING_HRV,
        improving=InsightCategory.RHYTHM_SETTLING_HRV,
        worsening_action=ActionSuggestion.EASE_TRAINING_LOAD,
        steady_action=ActionSuggestion.KEEP_MOVEMENT_ROUTINE,
    ),
    MetricPair.ACTIVITY_SLEEP: _PairTemplates(
        steady=InsightCategory.ACTIVITY_SHAPES_SLEEP,
        worsening=InsightCategory.ACTIVITY_DROP_AFFECTING_SLEEP,
        improving=InsightCategory.ACTIVITY_GAINS_IMPROVING_SLEEP,
        worsening_action=ActionSuggestion.SHORT_DAYTIME_WALK,
        steady_action=ActionSuggestion.KEEP_MOVEMENT_ROUTINE,
    ),
    MetricPair.STRESS_HRV: _PairTemplates(
        steady=InsightCategory.STRESS_WEIGHS_ON_RECOVERY,
        worsening=InsightCategory.STRESS_SPIKE_LOWERING_HRV,
        improving=InsightCategory.STRESS_EASING_LIFTING_HRV,
        worsening_action=ActionSuggestion.BREATHING_BREAK,
        steady_action=ActionSuggestion.BREATHING_BREAK,
    ),
}


def _worsening_condition(pair: MetricPair) -> InsightSubCondition:
    """A rising stress graph is the worsening move; for every other driver it is a decline."""
    if EXPECTED_SIGN[pair] < 0:
        return InsightSubCondition.RECENT_RISE
    return InsightSubCondition.RECENT_DECLINE


def _build_catalog() -> dict[
    tuple[MetricPair, CorrelationStrength, InsightSubCondition], InsightTemplate
]:
    catalog = {}
    graded = (
        CorrelationStrength.WEAK,
        CorrelationStrength.MODERATE,
        CorrelationStrength.STRONG,
    )
    for pair, templates in _PAIR_TEMPLATES.items():
        worsening = _worsening_condition(pair)
        improving = (
            InsightSubCondition.RECENT_DECLINE
            if worsening is InsightSubCondition.RECENT_RISE
            else InsightSubCondition.RECENT_RISE
        )
        for strength in graded:
            actionable = strength is not CorrelationStrength.WEAK

            catalog[(pair, strength, worsening)] = InsightTemplate(
                category=templates.worsening,
                tone=InsightTone.CAUTION,
                action=templates.worsening_action if actionable else None,
            )
            catalog[(pair, strength, improving)] = InsightTemplate(
                category=templates.improving,
                tone=InsightTone.POSITIVE,
                action=templates.steady_action if strength is CorrelationStrength.STRONG else None,
            )
            if strength is CorrelationStrength.WEAK:
                steady = InsightTemplate(InsightCategory.EMERGING_PATTERN, InsightTone.NEUTRAL)
            else:
                steady = InsightTemplate(
                    category=templates.steady,
                    tone=InsightTone.NEUTRAL,
                    action=templates.steady_action if strength is CorrelationStrength.STRONG else None,
                )
            catalog[(pair, strength, InsightSubCondition.STEADY)] = steady
            catalog[(pair, strength, InsightSubCondition.INVERTED)] = InsightTemplate(
                InsightCategory.ATYPICAL_PATTERN, InsightTone.NEUTRAL
            )
    return catalog


INSIGHT_CATALOG = _build_catalog()


def lookup_insight(
    pair: MetricPair,
    strength: CorrelationStrength,
    sub_condition: InsightSubCondition,
) -> InsightTemplate | None:
    """Catalog cell for the key; None for ``none`` strength."""
    return INSIGHT_CATALOG.get((pair, strength, sub_condition))


# ---------------------------------------------------------------------------
# Concerns
# ---------------------------------------------------------------------------

def resolve_concerns(concerns: Iterable[str | FocusTag] | None) -> frozenset[str]:
    """Normalize user concerns given as focus tags or series names.

    Raises:
        ValueError: If a concern is neither a focus tag nor a series name.
    """
    if not concerns:
        return frozenset()
    resolved: set[str] = set()
    for concern in concerns:
        name = concern.value if isinstance(concern, FocusTag) else str(concern).strip().lower()
        if name in SERIES_NAMES:
            resolved.add(name)
            continue
        try:
            resolved |= FOCUS_TAG_CONCERNS[FocusTag(name)]
        except ValueError:
            raise ValueError(
                f"Unknown concern {concern!r}; expected a focus tag "
                f"({', '.join(t.value for t in FocusTag)}) or one of {', '.join(SERIES_NAMES)}"
            ) from None
    return frozenset(resolved)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def recent_change(values: Sequence[float], window: int = RECENT_WINDOW_DAYS) -> float | None:
    """Mean of the last ``window`` values minus the mean of everything before."""
    if len(values) <= window:
        return None
    recent = values[-window:]
    earlier = values[:-window]
    return sum(recent) / len(recent) - sum(earlier) / len(earlier)


def sub_condition_for(
    correlation: MetricPairCorrelation,
    driver_change: float | None,
) -> InsightSubCondition:
    if correlation.r * EXPECTED_SIGN[correlation.pair] < 0:
        return InsightSubCondition.INVERTED
    if driver_change is None or abs(driver_change) < MATERIAL_CHANGE_POINTS:
        return InsightSubCondition.STEADY
    if driver_change < 0:
        return InsightSubCondition.RECENT_DECLINE
    return InsightSubCondition.RECENT_RISE


def priority_score(
    strength: CorrelationStrength,
    *,
    has_action: bool,
    concern_match: bool,
    recent_change_material: bool,
) -> int:
    return (
        STRENGTH_BONUS.get(strength, 0)
        + (ACTIONABLE_BONUS if has_action else 0)
        + (USER_CONCERN_BONUS if concern_match else 0)
        + (RECENT_CHANGE_BONUS if recent_change_material else 0)
    )


def build_insight(
    correlation: MetricPairCorrelation,
    history: Sequence[DailyMetricRecord],
    *,
    concerns: frozenset[str] = frozenset(),
    now: datetime | None = None,
) -> CorrelationInsight | None:
    """Turn one correlation into a scored insight, or None if it does not qualify."""
    if not correlation.is_significant or correlation.strength is CorrelationStrength.NONE:
        return None

    _, driver_values, _ = align_pair(history, correlation.pair)
    change = recent_change(driver_values)
    sub_condition = sub_condition_for(correlation, change)
    template = lookup_insight(correlation.pair, correlation.strength, sub_condition)
    if template is None:
        return None

    material = change is not None and abs(change) >= MATERIAL_CHANGE_POINTS
    priority = priority_score(
        correlation.strength,
        has_action=template.action is not None,
        concern_match=bool(concerns & set(correlation.pair.metrics)),
        recent_change_material=material,
    )
    return CorrelationInsight(
        pair=correlation.pair,
        strength=correlation.strength,
        category=template.category,
        tone=template.tone,
        sub_condition=sub_condition,
        action=template.action,
        priority=priority,
        generated_at=now or datetime.now(timezone.utc),
        correlation=correlation,
    )


# ---------------------------------------------------------------------------
# Display policy
# ---------------------------------------------------------------------------

_PAIR_ORDER = {pair: index for index, pair in enumerate(MetricPair)}


def _rank_key(insight: CorrelationInsight):
    return (
        -insight.priority,
        0 if insight.has_action else 1,
        -insight.correlation.end_date.toordinal(),
        -abs(insight.correlation.r),
        _PAIR_ORDER[insight.pair],
    )


def in_cooldown(
    pair: MetricPair,
    recently_shown: Mapping[MetricPair, date],
    today: date,
    cooldown_days: int,
) -> bool:
    last_shown = recently_shown.get(pair)
    if last_shown is None:
        return False
    return (today - last_shown).days < cooldown_days


def apply_display_policy(
    candidates: Sequence[CorrelationInsight],
    *,
    recently_shown: Mapping[MetricPair, date] | None = None,
    today: date,
    policy: InsightDisplayPolicy = InsightDisplayPolicy(),
) -> list[CorrelationInsight]:
    """Filter scored candidates down to what is shown this run."""
    shown = recently_shown or {}
    eligible = []
    for insight in candidates:
        if in_cooldown(insight.pair, shown, today, policy.cooldown_days):
            logger.debug("Insight for %s suppressed by cooldown", insight.pair.value)
            continue
        eligible.append(insight)

    ranked = sorted(eligible, key=_rank_key)
    selected = ranked[: max(0, policy.max_insights)]

    if len(selected) >= 2 and all(i.tone is InsightTone.CAUTION for i in selected):
        replacement = next(
            (i for i in ranked[len(selected):] if i.tone is not InsightTone.CAUTION),
            None,
        )
        if replacement is not None:
            # Lowest-ranked caution without an action goes first; else the last one.
            index = next(
                (n for n in reversed(range(len(selected))) if not selected[n].has_action),
                len(selected) - 1,
            )
            logger.debug(
                "Positivity balance: %s replaces %s",
                replacement.pair.value,
                selected[index].pair.value,
            )
            del selected[index]
            selected.append(replacement)

    return selected


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def analyze(
    history: Sequence[DailyMetricRecord],
    date_range: tuple[date, date] | None = None,
    *,
    recently_shown: Mapping[MetricPair, date] | None = None,
    concerns: Iterable[str | FocusTag] | None = None,
    policy: InsightDisplayPolicy = InsightDisplayPolicy(),
    today: date | None = None,
    now: datetime | None = None,
) -> CorrelationAnalysis:
    """Correlate the history window and return correlations plus shown insights.

    ``today`` anchors the cooldown check and defaults to the end of the date
    range (or the latest history day). ``now`` stamps generated insights.
    """
    window = filter_date_range(history, date_range)
    correlations = compute_pair_correlations(window)
    resolved = resolve_concerns(concerns)

    candidates = []
    for correlation in correlations:
        insight = build_insight(correlation, window, concerns=resolved, now=now)
        if insight is not None:
            candidates.append(insight)

    if today is None:
        if date_range is not None:
            today = date_range[1]
        elif window:
            today = max(r.day for r in window)
        else:
            today = (now or datetime.now(timezone.utc)).date()

    insights = apply_display_policy(
        candidates, recently_shown=recently_shown, today=today, policy=policy
    )
    return CorrelationAnalysis(correlations=correlations, insights=insights, candidates=candidates)
