from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
import logging

from driverlens.core.errors import InputShapeError
from driverlens.models.criteria import ScoringConfig
from driverlens.models.drivers import DriverScore
from driverlens.models.series import MonthlySeries
from driverlens.utils.decimal_math import clamp_unit, safe_ratio
from driverlens.utils.stats import compound_annual_growth, linear_regression, mean, population_std


logger = logging.getLogger("driverlens.scoring")

CV_CAP = 5.0
MIN_POINTS_FOR_VARIABILITY = 3
MIN_POINTS_FOR_TREND = 3
MIN_MONTHS_FOR_GROWTH = 6
GROWTH_SCALE = 5.0

DEFAULT_SCORING = ScoringConfig()


def materiality_score(line_total: float, business_total: float) -> float:
    return clamp_unit(safe_ratio(abs(line_total), abs(business_total)))


def variability_score(values: Sequence[float], *, name: str = "") -> float:
    non_trivial = [value for value in values if value != 0]
    if len(non_trivial) < MIN_POINTS_FOR_VARIABILITY:
        logger.debug("Variability for %r degraded to 0: %d non-zero points.", name, len(non_trivial))
        return 0.0
    center = mean(values)
    if center == 0:
        logger.debug("Variability for %r degraded to 0: zero mean.", name)
        return 0.0
    cv = population_std(values) / abs(center)
    return clamp_unit(min(cv, CV_CAP) / CV_CAP)


def predictability_score(values: Sequence[float], *, name: str = "") -> float:
    if len(values) < MIN_POINTS_FOR_TREND:
        logger.debug("Predictability for %r degraded to 0: %d points.", name, len(values))
        return 0.0
    return clamp_unit(linear_regression(values).r_squared)


def growth_rate(values: Sequence[float]) -> float:
    cagr = compound_annual_growth(values, min_months=MIN_MONTHS_FOR_GROWTH)
    return 0.0 if cagr is None else cagr


def growth_impact_score(values: Sequence[float], *, name: str = "") -> float:
    cagr = compound_annual_growth(values, min_months=MIN_MONTHS_FOR_GROWTH)
    if cagr is None:
        logger.debug("Growth impact for %r degraded to 0: growth undefined.", name)
        return 0.0
    return clamp_unit(min(abs(cagr) * GROWTH_SCALE, 1.0))


def data_quality_score(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(1 for value in values if value != 0) / len(values)


def composite_score(
    *,
    materiality: float,
    variability: float,
    predictability: float,
    growth_impact: float,
    data_quality: float,
    config: ScoringConfig = DEFAULT_SCORING,
) -> float:
    return clamp_unit(
        materiality * config.materiality
        + variability * config.variability
        + predictability * config.predictability
        + growth_impact * config.growth_impact
        + data_quality * config.data_quality
    )


def score_series(series: MonthlySeries, config: ScoringConfig = DEFAULT_SCORING) -> DriverScore:
    if series.month_count == 0:
        raise InputShapeError(f"Series '{series.name}' has no months.")
    values = series.values
    materiality = materiality_score(series.total, series.business_total)
    variability = variability_score(values, name=series.name)
    predictability = predictability_score(values, name=series.name)
    growth_impact = growth_impact_score(values, name=series.name)
    data_quality = data_quality_score(values)
    return DriverScore(
        materiality=materiality,
        variability=variability,
        predictability=predictability,
        growth_impact=growth_impact,
        data_quality=data_quality,
        composite=composite_score(
            materiality=materiality,
            variability=variability,
            predictability=predictability,
            growth_impact=growth_impact,
            data_quality=data_quality,
            config=config,
        ),
    )


def ensure_shared_axis(batch: Sequence[MonthlySeries]) -> tuple[str, ...]:
    if not batch:
        raise InputShapeError("At least one series is required.")
    axis = batch[0].months
    if not axis:
        raise InputShapeError(f"Series '{batch[0].name}' has no months.")
    for series in batch[1:]:
        if series.months != axis:
            raise InputShapeError(
                f"Series '{series.name}' month axis differs from '{batch[0].name}'."
            )
    return axis


def score_batch(
    batch: Sequence[MonthlySeries],
    config: ScoringConfig = DEFAULT_SCORING,
    *,
    max_workers: int | None = None,
) -> list[DriverScore]:
    ensure_shared_axis(batch)
    if max_workers is None or max_workers <= 1 or len(batch) < 2:
        return [score_series(series, config) for series in batch]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda series: score_series(series, config), batch))
