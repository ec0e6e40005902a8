from __future__ import annotations

from driverlens.models.drivers import (
    DriverScore,
    ForecastMethod,
    PercentageOfRevenue,
    ScenarioRange,
    SimpleGrowth,
    TrendExtrapolation,
)
from driverlens.models.series import MonthlySeries
from driverlens.services.scoring import growth_rate
from driverlens.utils.stats import linear_regression, percentile


REVENUE_COUPLING_THRESHOLD = 0.7
TREND_PREDICTABILITY_FLOOR = 0.8
TREND_VARIABILITY_CEILING = 0.2
RANGE_VARIABILITY_FLOOR = 0.5


def assign_method(
    series: MonthlySeries,
    score: DriverScore,
    correlation_with_revenue: float,
) -> ForecastMethod:
    # First matching rule wins.
    if correlation_with_revenue > REVENUE_COUPLING_THRESHOLD:
        return PercentageOfRevenue(
            historical_ratio=score.materiality,
            confidence=correlation_with_revenue,
        )

    if score.predictability > TREND_PREDICTABILITY_FLOOR and score.variability < TREND_VARIABILITY_CEILING:
        fit = linear_regression(series.values)
        return TrendExtrapolation(
            monthly_growth_rate=fit.slope,
            confidence=score.predictability,
            intercept=fit.intercept,
            origin_index=series.month_count - 1,
        )

    if score.variability > RANGE_VARIABILITY_FLOOR:
        return ScenarioRange(
            conservative=percentile(series.values, 25),
            base=percentile(series.values, 50),
            aggressive=percentile(series.values, 75),
        )

    return SimpleGrowth(annual_growth_rate=growth_rate(series.values))
