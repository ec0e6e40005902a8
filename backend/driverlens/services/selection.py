from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from driverlens.models.criteria import SelectionCriteria
from driverlens.models.drivers import DiscoveredDriver, DiscoverySummary, DriverScore, LineAnalysis
from driverlens.models.enums import Category, ConfidenceLevel, DataQualityLabel


CONFIDENCE_WEIGHT = {
    ConfidenceLevel.high: 0.8,
    ConfidenceLevel.medium: 0.6,
    ConfidenceLevel.low: 0.4,
}


def is_selected(score: DriverScore, criteria: SelectionCriteria) -> bool:
    return (
        score.composite >= criteria.minimum_score
        and score.materiality >= criteria.minimum_materiality
        and score.data_quality >= criteria.minimum_data_quality
    )


def fails_only_materiality(score: DriverScore, criteria: SelectionCriteria) -> bool:
    return (
        score.materiality < criteria.minimum_materiality
        and score.composite >= criteria.minimum_score
        and score.data_quality >= criteria.minimum_data_quality
    )


def driver_coverage(score: DriverScore) -> float:
    return score.materiality * 100.0


def business_coverage(drivers: Sequence[DiscoveredDriver]) -> float:
    revenue = sum(row.coverage for row in drivers if row.category == Category.revenue)
    expense = sum(row.coverage for row in drivers if row.category == Category.expense)
    return min(100.0, (revenue + expense) / 2.0)


def confidence_level(score: DriverScore) -> ConfidenceLevel:
    factors = (
        score.predictability,
        score.data_quality,
        min(score.materiality * 2.0, 1.0),
        1.0 - score.variability,
    )
    average = sum(factors) / len(factors)
    if average > 0.7:
        return ConfidenceLevel.high
    if average > 0.4:
        return ConfidenceLevel.medium
    return ConfidenceLevel.low


def rank_key(driver: DiscoveredDriver | LineAnalysis) -> tuple[float, str]:
    return (-driver.score.composite, driver.name)


def partition_drivers(
    ranked: Sequence[DiscoveredDriver],
    primary_count: int,
) -> tuple[tuple[DiscoveredDriver, ...], tuple[DiscoveredDriver, ...]]:
    """Split rank-ordered drivers into primary and secondary.

    Primary holds the top ``primary_count`` by composite, except that every
    category present among the drivers keeps at least one primary slot when
    ``primary_count`` allows it.
    """
    primary = list(ranked[:primary_count])
    rest = list(ranked[primary_count:])
    for category in (Category.revenue, Category.expense):
        if any(row.category == category for row in primary):
            continue
        candidate = next((row for row in rest if row.category == category), None)
        if candidate is None or len(primary) < 2:
            continue
        counts = Counter(row.category for row in primary)
        crowded = counts.most_common(1)[0][0]
        if counts[crowded] < 2:
            continue
        victim = next(row for row in reversed(primary) if row.category == crowded)
        primary.remove(victim)
        rest.remove(candidate)
        primary.append(candidate)
        rest.append(victim)
    primary.sort(key=rank_key)
    rest.sort(key=rank_key)
    return tuple(primary), tuple(rest)


def average_confidence_percent(drivers: Sequence[DiscoveredDriver]) -> int:
    if not drivers:
        return 0
    total = sum(CONFIDENCE_WEIGHT[row.confidence] for row in drivers)
    return round(total / len(drivers) * 100)


def data_quality_label(drivers: Sequence[DiscoveredDriver]) -> DataQualityLabel:
    if not drivers:
        return DataQualityLabel.poor
    average = sum(row.score.data_quality for row in drivers) / len(drivers) * 100.0
    if average > 85:
        return DataQualityLabel.excellent
    if average > 70:
        return DataQualityLabel.good
    if average > 50:
        return DataQualityLabel.fair
    return DataQualityLabel.poor


def build_summary(drivers: Sequence[DiscoveredDriver], months_analyzed: int) -> DiscoverySummary:
    return DiscoverySummary(
        drivers_found=len(drivers),
        business_coverage_percent=business_coverage(drivers),
        average_confidence_percent=average_confidence_percent(drivers),
        data_quality_label=data_quality_label(drivers),
        months_analyzed=months_analyzed,
    )
