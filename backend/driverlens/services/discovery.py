from __future__ import annotations

from collections.abc import Sequence
from datetime import date
import logging
import time

from driverlens.core.errors import InputShapeError
from driverlens.models.criteria import ScoringConfig, SelectionCriteria
from driverlens.models.drivers import (
    DiscoveredDriver,
    DiscoveryMetadata,
    DriverDiscoveryResult,
    LineAnalysis,
)
from driverlens.models.enums import Category
from driverlens.models.series import MonthlySeries, ParsedReport
from driverlens.services.classification import classify, correlated_groups, pearson, trend_for
from driverlens.services.forecast_methods import assign_method
from driverlens.services.scoring import DEFAULT_SCORING, ensure_shared_axis, growth_rate, score_batch
from driverlens.services.selection import (
    build_summary,
    confidence_level,
    driver_coverage,
    fails_only_materiality,
    is_selected,
    partition_drivers,
    rank_key,
)


logger = logging.getLogger("driverlens.discovery")

ALGORITHMS_USED = ("composite_scoring", "correlation_analysis", "trend_detection")


def _category_totals(series: Sequence[MonthlySeries], category: Category, month_count: int) -> tuple[float, ...]:
    row = next((item for item in series if item.category == category), None)
    if row is None:
        return tuple(0.0 for _ in range(month_count))
    return row.business_totals


def analyze_lines(
    series: Sequence[MonthlySeries],
    revenue_totals: Sequence[float],
    scoring: ScoringConfig = DEFAULT_SCORING,
    *,
    max_workers: int | None = None,
) -> list[LineAnalysis]:
    scores = score_batch(series, scoring, max_workers=max_workers)
    analyses: list[LineAnalysis] = []
    for row, score in zip(series, scores):
        correlation = pearson(row.values, revenue_totals)
        annual_rate = growth_rate(row.values)
        analyses.append(
            LineAnalysis(
                series=row,
                score=score,
                correlation_with_revenue=correlation,
                classification=classify(row.category, score, correlation),
                trend=trend_for(annual_rate),
                growth_rate=annual_rate,
            )
        )
        logger.debug(
            "Scored %r: composite=%.3f materiality=%.3f variability=%.3f predictability=%.3f "
            "growth=%.3f quality=%.3f corr=%.3f",
            row.name,
            score.composite,
            score.materiality,
            score.variability,
            score.predictability,
            score.growth_impact,
            score.data_quality,
            correlation,
        )
    return analyses


def _to_driver(analysis: LineAnalysis, correlated: tuple[str, ...]) -> DiscoveredDriver:
    return DiscoveredDriver(
        series=analysis.series,
        score=analysis.score,
        correlation_with_revenue=analysis.correlation_with_revenue,
        classification=analysis.classification,
        confidence=confidence_level(analysis.score),
        coverage=driver_coverage(analysis.score),
        method=assign_method(analysis.series, analysis.score, analysis.correlation_with_revenue),
        trend=analysis.trend,
        growth_rate=analysis.growth_rate,
        correlated_drivers=correlated,
    )


def discover_drivers(
    series: Sequence[MonthlySeries],
    criteria: SelectionCriteria,
    scoring: ScoringConfig = DEFAULT_SCORING,
    *,
    revenue_totals: Sequence[float] | None = None,
    expense_totals: Sequence[float] | None = None,
    skipped_lines: Sequence[str] = (),
    period_start: date | None = None,
    period_end: date | None = None,
    max_workers: int | None = None,
) -> DriverDiscoveryResult:
    started = time.monotonic()
    months = ensure_shared_axis(series)
    month_count = len(months)
    revenue_axis = tuple(revenue_totals) if revenue_totals is not None else _category_totals(
        series, Category.revenue, month_count
    )
    expense_axis = tuple(expense_totals) if expense_totals is not None else _category_totals(
        series, Category.expense, month_count
    )
    if len(revenue_axis) != month_count or len(expense_axis) != month_count:
        raise InputShapeError("Category totals must cover the same months as the series.")

    logger.info("Starting driver discovery over %d lines and %d months.", len(series), month_count)
    analyses = analyze_lines(series, revenue_axis, scoring, max_workers=max_workers)

    selected = sorted((row for row in analyses if is_selected(row.score, criteria)), key=rank_key)
    groups = correlated_groups([row.series for row in selected], criteria.correlation_threshold)
    drivers = tuple(_to_driver(row, groups[row.name]) for row in selected)
    primary, secondary = partition_drivers(drivers, criteria.primary_driver_count)

    selected_names = {row.name for row in drivers}
    consolidated: list[str] = []
    excluded: list[str] = []
    for row in analyses:
        if row.name in selected_names:
            continue
        if fails_only_materiality(row.score, criteria):
            consolidated.append(row.name)
        else:
            excluded.append(row.name)
    excluded.extend(skipped_lines)

    elapsed_ms = (time.monotonic() - started) * 1000
    result = DriverDiscoveryResult(
        drivers=drivers,
        primary_drivers=primary,
        secondary_drivers=secondary,
        consolidated_items=tuple(consolidated),
        excluded_items=tuple(excluded),
        summary=build_summary(drivers, month_count),
        months=months,
        revenue_totals=revenue_axis,
        expense_totals=expense_axis,
        metadata=DiscoveryMetadata(
            algorithms_used=ALGORITHMS_USED,
            data_range_start=period_start,
            data_range_end=period_end,
            processing_time_ms=round(elapsed_ms, 3),
        ),
    )
    logger.info(
        "Driver discovery complete: %d of %d lines selected, coverage %.1f%% in %.2fms.",
        len(drivers),
        len(analyses),
        result.summary.business_coverage_percent,
        elapsed_ms,
    )
    return result


def discover_from_report(
    report: ParsedReport,
    criteria: SelectionCriteria,
    scoring: ScoringConfig = DEFAULT_SCORING,
    *,
    max_workers: int | None = None,
) -> DriverDiscoveryResult:
    if not report.series:
        raise InputShapeError("Report contains no usable line items.")
    return discover_drivers(
        report.series,
        criteria,
        scoring,
        revenue_totals=report.revenue_totals,
        expense_totals=report.expense_totals,
        skipped_lines=report.skipped_lines,
        period_start=report.period_start,
        period_end=report.period_end,
        max_workers=max_workers,
    )
