"""Pairwise Pearson correlations over a rolling window of daily metric history.

For each fixed metric pair the aligned series (days where both values are
present) is correlated; pairs with fewer than 7 aligned days are skipped.
Zero-variance series yield r = 0 and are never significant.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import date

from scipy import stats as sp_stats

from tempo.domains.health.domain_logic.condition_models import (
    CorrelationStrength,
    DailyMetricRecord,
    MetricPair,
    MetricPairCorrelation,
    PearsonResult,
)
from tempo.domains.health.domain_logic.metric_scorer import to_finite

logger = logging.getLogger(__name__)

MIN_ALIGNED_DAYS = 7
SIGNIFICANCE_LEVEL = 0.05
Z_95 = 1.959963984540054

# Lower bounds on |r|, strongest first
STRENGTH_THRESHOLDS: list[tuple[float, CorrelationStrength]] = [
    (0.7, CorrelationStrength.STRONG),
    (0.4, CorrelationStrength.MODERATE),
    (0.2, CorrelationStrength.WEAK),
]


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson r via covariance / sqrt(variance product).

    A series whose values are all equal yields exactly 0. That is decided from
    the values themselves, since a rounded mean leaves tiny nonzero deviations.

    Raises:
        ValueError: If the series differ in length.
    """
    if len(x) != len(y):
        raise ValueError(f"Paired series must have equal length (got {len(x)} and {len(y)})")
    n = len(x)
    if n == 0 or min(x) == max(x) or min(y) == max(y):
        return 0.0

    mean_x = sum(x) / n
    mean_y = sum(y) / n
    cov = 0.0
    var_x = 0.0
    var_y = 0.0
    for xi, yi in zip(x, y):
        dx = xi - mean_x
        dy = yi - mean_y
        cov += dx * dy
        var_x += dx * dx
        var_y += dy * dy

    denominator = math.sqrt(var_x * var_y)
    if denominator == 0.0:
        return 0.0
    return max(-1.0, min(1.0, cov / denominator))


def p_value(r: float, n: int) -> float:
    """Two-tailed p-value for r under H0: rho = 0 (t-distribution, n-2 df)."""
    if n < 3:
        return 1.0
    residual = 1.0 - r * r
    if abs(r) >= 1.0 or residual <= 0.0:
        return 0.0
    t_stat = r * math.sqrt((n - 2) / residual)
    return float(min(1.0, 2.0 * sp_stats.t.sf(abs(t_stat), n - 2)))


def confidence_interval(r: float, n: int) -> tuple[float, float]:
    """95% interval for r via the Fisher z-transform."""
    if n <= 3:
        return -1.0, 1.0
    bounded = max(-0.999999, min(0.999999, r))
    z = math.atanh(bounded)
    half_width = Z_95 / math.sqrt(n - 3)
    return math.tanh(z - half_width), math.tanh(z + half_width)


def correlate(
    x: Sequence[float],
    y: Sequence[float],
    *,
    min_samples: int = MIN_ALIGNED_DAYS,
    alpha: float = SIGNIFICANCE_LEVEL,
) -> PearsonResult:
    """Full correlation statistics for two equal-length series.

    Symmetric in its operands: ``correlate(x, y) == correlate(y, x)``.
    """
    r = pearson(x, y)
    n = len(x)
    if r == 0.0:
        p = 1.0
    else:
        p = p_value(r, n)
    ci_low, ci_high = confidence_interval(r, n)
    return PearsonResult(
        r=r,
        p_value=p,
        ci_low=ci_low,
        ci_high=ci_high,
        sample_size=n,
        is_significant=(p < alpha and n >= min_samples),
    )


def classify_strength(r: float) -> CorrelationStrength:
    """Strength by |r|: >=0.7 strong, >=0.4 moderate, >=0.2 weak, else none."""
    magnitude = abs(r)
    for lower_bound, strength in STRENGTH_THRESHOLDS:
        if magnitude >= lower_bound:
            return strength
    return CorrelationStrength.NONE


def sort_history(history: Sequence[DailyMetricRecord]) -> list[DailyMetricRecord]:
    return sorted(history, key=lambda record: record.day)


def filter_date_range(
    history: Sequence[DailyMetricRecord],
    date_range: tuple[date, date] | None,
) -> list[DailyMetricRecord]:
    """Keep records within the inclusive date range (all when range is None)."""
    if date_range is None:
        return list(history)
    start, end = date_range
    return [r for r in history if start <= r.day <= end]


def align_pair(
    history: Sequence[DailyMetricRecord],
    pair: MetricPair,
) -> tuple[list[date], list[float], list[float]]:
    """Return (days, driver values, response values) for days with both present."""
    days: list[date] = []
    xs: list[float] = []
    ys: list[float] = []
    for record in sort_history(history):
        x = to_finite(record.series_value(pair.driver))
        y = to_finite(record.series_value(pair.response))
        if x is None or y is None:
            continue
        days.append(record.day)
        xs.append(x)
        ys.append(y)
    return days, xs, ys


def correlate_pair(
    history: Sequence[DailyMetricRecord],
    pair: MetricPair,
    *,
    min_days: int = MIN_ALIGNED_DAYS,
) -> MetricPairCorrelation | None:
    """Correlation for one pair, or None when fewer than ``min_days`` align."""
    days, xs, ys = align_pair(history, pair)
    if len(days) < min_days:
        logger.debug("Skipping %s: %d aligned days (< %d)", pair.value, len(days), min_days)
        return None

    result = correlate(xs, ys, min_samples=min_days)
    return MetricPairCorrelation(
        pair=pair,
        r=result.r,
        p_value=result.p_value,
        ci_low=result.ci_low,
        ci_high=result.ci_high,
        is_significant=result.is_significant,
        sample_size=result.sample_size,
        start_date=days[0],
        end_date=days[-1],
        strength=classify_strength(result.r),
    )


def compute_pair_correlations(
    history: Sequence[DailyMetricRecord],
    date_range: tuple[date, date] | None = None,
    *,
    min_days: int = MIN_ALIGNED_DAYS,
) -> list[MetricPairCorrelation]:
    """Correlations for every fixed pair with enough aligned history."""
    window = filter_date_range(history, date_range)
    correlations = []
    for pair in MetricPair:
        correlation = correlate_pair(window, pair, min_days=min_days)
        if correlation is not None:
            correlations.append(correlation)
    return correlations
