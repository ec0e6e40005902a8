"""Project discovered drivers forward under the baseline, growth and downturn scenarios.

Every projected value is a pure function of the driver's static parameters,
the scenario, and the forecast month index, so months and scenarios can be
computed in any order.
"""
from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
import logging

from driverlens.core.errors import ConfigurationError, InputShapeError
from driverlens.models.drivers import (
    DiscoveredDriver,
    DriverDiscoveryResult,
    PercentageOfRevenue,
    ScenarioRange,
    SimpleGrowth,
    TrendExtrapolation,
)
from driverlens.models.enums import Category, Classification, ConfidenceLevel, Scenario
from driverlens.models.forecast import (
    ConfidenceBand,
    DriverAdjustment,
    ForecastSummary,
    ProjectedDriver,
    ScenarioComparison,
    ScenarioForecast,
    ScenarioProjection,
    ValueRange,
)
from driverlens.services.scoring import growth_rate
from driverlens.utils.decimal_math import money
from driverlens.utils.stats import mean, median_or_zero, monthly_rate_from_annual, population_std


logger = logging.getLogger("driverlens.scenarios")

MIN_HORIZON_MONTHS = 1
MAX_HORIZON_MONTHS = 60

SCENARIO_MULTIPLIERS: dict[Scenario, dict[Classification, float]] = {
    Scenario.baseline: {
        Classification.recurring_revenue: 1.00,
        Classification.variable_revenue: 1.00,
        Classification.fixed_cost: 1.00,
        Classification.variable_cost: 1.00,
    },
    Scenario.growth: {
        Classification.recurring_revenue: 1.10,
        Classification.variable_revenue: 1.20,
        Classification.fixed_cost: 1.00,
        Classification.variable_cost: 0.95,
    },
    Scenario.downturn: {
        Classification.recurring_revenue: 0.90,
        Classification.variable_revenue: 0.80,
        Classification.fixed_cost: 1.00,
        Classification.variable_cost: 1.05,
    },
}

BAND_BASE = 0.10
BAND_STEP = 0.02
# Band scale never drops below this share of gross monthly volume.
BAND_GROSS_FLOOR = 0.05
BAND_CONFIDENCE_FACTOR = {
    ConfidenceLevel.high: 1.0,
    ConfidenceLevel.medium: 1.25,
    ConfidenceLevel.low: 1.5,
}

CATCH_ALL_TERMS = (
    "miscellaneous",
    "misc",
    "other",
    "uncategorized",
    "unassigned",
    "general",
    "various",
    "additional",
    "sundry",
)
BASELINE_WINDOW = 3
# Bounds on the annual growth rate compounded into projections.
MAX_PROJECTED_ANNUAL_GROWTH = 1.0
MIN_PROJECTED_ANNUAL_GROWTH = -1.0
OUTLIER_SIGMAS = 2.0


def scenario_multiplier(scenario: Scenario, classification: Classification) -> float:
    return SCENARIO_MULTIPLIERS[Scenario(scenario)][Classification(classification)]


def projected_annual_rate(annual_rate: float) -> float:
    return max(MIN_PROJECTED_ANNUAL_GROWTH, min(MAX_PROJECTED_ANNUAL_GROWTH, annual_rate))


def is_catch_all(name: str) -> bool:
    lowered = name.lower()
    return any(term in lowered for term in CATCH_ALL_TERMS)


def robust_baseline(values: Sequence[float], name: str = "") -> float:
    positive = [value for value in values if value > 0]
    if not positive:
        return 0.0
    if is_catch_all(name):
        # One-off spend booked to catch-all accounts should not be projected forward.
        return min(positive)
    recent = positive[-BASELINE_WINDOW:]
    center = mean(recent)
    spread = population_std(recent)
    kept = [value for value in recent if abs(value - center) <= OUTLIER_SIGMAS * spread]
    if not kept:
        return median_or_zero(positive)
    return mean(kept)


@dataclass(frozen=True)
class ForecastContext:
    revenue_baseline: float
    expense_baseline: float
    revenue_monthly_growth: float

    @classmethod
    def from_discovery(cls, result: DriverDiscoveryResult) -> ForecastContext:
        annual_rate = growth_rate(result.revenue_totals)
        bounded = projected_annual_rate(annual_rate)
        if bounded != annual_rate:
            logger.warning("Revenue growth %.4f clamped to %.4f for projection.", annual_rate, bounded)
        return cls(
            revenue_baseline=robust_baseline(result.revenue_totals),
            expense_baseline=robust_baseline(result.expense_totals),
            revenue_monthly_growth=monthly_rate_from_annual(bounded),
        )

    def category_baseline(self, category: Category) -> float:
        if category == Category.revenue:
            return self.revenue_baseline
        return self.expense_baseline


def base_case_value(driver: DiscoveredDriver, month_index: int, context: ForecastContext) -> float:
    method = driver.method
    if isinstance(method, PercentageOfRevenue):
        growth = (1.0 + context.revenue_monthly_growth) ** month_index
        return method.historical_ratio * context.category_baseline(driver.category) * growth
    if isinstance(method, TrendExtrapolation):
        value = method.intercept + method.monthly_growth_rate * (method.origin_index + month_index)
        if min(driver.series.values) >= 0:
            return max(0.0, value)
        return value
    if isinstance(method, ScenarioRange):
        return method.base
    if isinstance(method, SimpleGrowth):
        baseline = robust_baseline(driver.series.values, driver.name)
        rate = projected_annual_rate(method.annual_growth_rate)
        return baseline * (1.0 + rate / 12.0) ** month_index
    raise TypeError(f"Unsupported forecast method {type(method).__name__}.")


def _validate_horizon(horizon_months: int) -> None:
    if not isinstance(horizon_months, int) or not MIN_HORIZON_MONTHS <= horizon_months <= MAX_HORIZON_MONTHS:
        raise ConfigurationError(
            f"horizon_months must be between {MIN_HORIZON_MONTHS} and {MAX_HORIZON_MONTHS}."
        )


def _validate_adjustments(
    adjustments: Sequence[DriverAdjustment],
    drivers: Sequence[DiscoveredDriver],
    horizon_months: int,
) -> None:
    names = {row.name for row in drivers}
    for adjustment in adjustments:
        if adjustment.driver_name not in names:
            raise InputShapeError(f"Adjustment targets unknown driver '{adjustment.driver_name}'.")
        if adjustment.start_month < 1 or adjustment.start_month > horizon_months:
            raise ConfigurationError("Adjustment start_month must fall inside the forecast horizon.")
        if adjustment.end_month is not None and adjustment.end_month < adjustment.start_month:
            raise ConfigurationError("Adjustment end_month must be >= start_month.")
        if adjustment.impact <= -1.0:
            raise ConfigurationError("Adjustment impact must be greater than -100%.")


def _adjustment_factor(adjustments: Sequence[DriverAdjustment], month_index: int) -> float:
    factor = 1.0
    for adjustment in adjustments:
        end = adjustment.end_month if adjustment.end_month is not None else month_index
        if adjustment.start_month <= month_index <= end:
            factor *= 1.0 + adjustment.impact
    return factor


def _reduced_confidence(confidence: ConfidenceLevel, adjustment_count: int) -> ConfidenceLevel:
    if adjustment_count == 0:
        return confidence
    if adjustment_count >= 3:
        return ConfidenceLevel.low
    if confidence == ConfidenceLevel.high:
        return ConfidenceLevel.medium
    return ConfidenceLevel.low


def project_driver(
    driver: DiscoveredDriver,
    scenario: Scenario,
    horizon_months: int,
    context: ForecastContext,
    adjustments: Sequence[DriverAdjustment] = (),
) -> ProjectedDriver:
    own = tuple(row for row in adjustments if row.driver_name == driver.name)
    multiplier = scenario_multiplier(scenario, driver.classification)
    values = tuple(
        base_case_value(driver, month, context) * multiplier * _adjustment_factor(own, month)
        for month in range(1, horizon_months + 1)
    )
    return ProjectedDriver(
        name=driver.name,
        category=driver.category,
        classification=driver.classification,
        method=driver.method.method,
        base_value=base_case_value(driver, 0, context),
        monthly_values=values,
        confidence=_reduced_confidence(driver.confidence, len(own)),
        adjustments=own,
    )


def band_multiplier(drivers: Sequence[ProjectedDriver]) -> float:
    if not drivers:
        return BAND_CONFIDENCE_FACTOR[ConfidenceLevel.low]
    return mean([BAND_CONFIDENCE_FACTOR[row.confidence] for row in drivers])


def confidence_band(
    net_income: Decimal | float,
    month_index: int,
    multiplier: float,
    gross_volume: Decimal | float = 0.0,
) -> ConfidenceBand:
    net = float(net_income)
    scale = max(abs(net), BAND_GROSS_FLOOR * abs(float(gross_volume)))
    uncertainty = scale * (BAND_BASE + BAND_STEP * (month_index - 1)) * multiplier
    return ConfidenceBand(low=money(net - uncertainty), high=money(net + uncertainty))


def _monthly_projections(
    scenario: Scenario,
    drivers: Sequence[ProjectedDriver],
    horizon_months: int,
) -> tuple[ScenarioProjection, ...]:
    multiplier = band_multiplier(drivers)
    rows: list[ScenarioProjection] = []
    for index in range(horizon_months):
        month_index = index + 1
        revenue = sum(row.monthly_values[index] for row in drivers if row.category == Category.revenue)
        expenses = sum(row.monthly_values[index] for row in drivers if row.category == Category.expense)
        revenue_amount = money(revenue)
        expense_amount = money(expenses)
        net_income = revenue_amount - expense_amount
        rows.append(
            ScenarioProjection(
                scenario=scenario,
                month_index=month_index,
                revenue=revenue_amount,
                expenses=expense_amount,
                net_income=net_income,
                confidence_band=confidence_band(
                    net_income, month_index, multiplier, revenue_amount + expense_amount
                ),
                driver_breakdown={row.name: money(row.monthly_values[index]) for row in drivers},
            )
        )
    return tuple(rows)


def _key_insights(projections: Sequence[ScenarioProjection], drivers: Sequence[ProjectedDriver]) -> tuple[str, ...]:
    insights: list[str] = []
    first_revenue = projections[0].revenue
    last_revenue = projections[-1].revenue
    if first_revenue > 0 and last_revenue > first_revenue:
        growth_pct = (last_revenue - first_revenue) / first_revenue * Decimal("100")
        insights.append(f"Revenue projected to grow {growth_pct:.0f}% over the forecast period")

    profitable = sum(1 for row in projections if row.net_income > 0)
    if profitable == len(projections):
        insights.append("Business projected to remain profitable throughout the period")
    elif profitable > len(projections) / 2:
        insights.append(f"Business projected to be profitable {profitable} out of {len(projections)} months")

    if drivers:
        top = max(drivers, key=lambda row: (sum(abs(value) for value in row.monthly_values), row.name))
        insights.append(f"{top.name} is the largest driver of financial performance")
    return tuple(insights)


def summarize_projections(
    projections: Sequence[ScenarioProjection],
    drivers: Sequence[ProjectedDriver],
) -> ForecastSummary:
    total_revenue = money(sum(row.revenue for row in projections))
    total_expenses = money(sum(row.expenses for row in projections))
    months = len(projections)

    runway: int | None = None
    break_even: int | None = None
    cumulative = Decimal("0")
    for row in projections:
        cumulative += row.net_income
        if break_even is None and row.net_income >= 0:
            break_even = row.month_index
        if runway is None and cumulative < 0:
            runway = row.month_index

    return ForecastSummary(
        total_projected_revenue=total_revenue,
        total_projected_expenses=total_expenses,
        total_net_income=money(total_revenue - total_expenses),
        average_monthly_revenue=money(total_revenue / months),
        average_monthly_expenses=money(total_expenses / months),
        projected_runway_months=runway if runway is not None else months,
        break_even_month=break_even,
        key_insights=_key_insights(projections, drivers),
    )


def forecast_scenario(
    drivers: Sequence[DiscoveredDriver],
    scenario: Scenario,
    horizon_months: int,
    context: ForecastContext,
    adjustments: Sequence[DriverAdjustment] = (),
) -> ScenarioForecast:
    projected = tuple(project_driver(row, scenario, horizon_months, context, adjustments) for row in drivers)
    projections = _monthly_projections(scenario, projected, horizon_months)
    return ScenarioForecast(
        scenario=scenario,
        projections=projections,
        drivers=projected,
        summary=summarize_projections(projections, projected),
    )


def generate_scenario_forecast(
    result: DriverDiscoveryResult,
    horizon_months: int = 12,
    *,
    adjustments: Sequence[DriverAdjustment] = (),
    max_workers: int | None = None,
) -> ScenarioComparison:
    _validate_horizon(horizon_months)
    drivers = result.drivers
    if not drivers:
        raise InputShapeError("No drivers available to forecast.")
    _validate_adjustments(adjustments, drivers, horizon_months)
    for driver in drivers:
        if isinstance(driver.method, SimpleGrowth):
            rate = driver.method.annual_growth_rate
            if projected_annual_rate(rate) != rate:
                logger.warning(
                    "Growth rate %.4f for %r clamped to %.4f for projection.",
                    rate,
                    driver.name,
                    projected_annual_rate(rate),
                )

    context = ForecastContext.from_discovery(result)
    scenarios = tuple(Scenario)
    logger.info(
        "Forecasting %d drivers over %d months for %d scenarios with %d adjustments.",
        len(drivers),
        horizon_months,
        len(scenarios),
        len(adjustments),
    )

    def run(scenario: Scenario) -> ScenarioForecast:
        return forecast_scenario(drivers, scenario, horizon_months, context, adjustments)

    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            forecasts = list(pool.map(run, scenarios))
    else:
        forecasts = [run(scenario) for scenario in scenarios]

    by_scenario = {forecast.scenario: forecast for forecast in forecasts}
    every_month = [row for forecast in forecasts for row in forecast.projections]
    return ScenarioComparison(
        forecasts=by_scenario,
        revenue_range=ValueRange(
            minimum=min(row.revenue for row in every_month),
            maximum=max(row.revenue for row in every_month),
        ),
        net_income_range=ValueRange(
            minimum=min(row.net_income for row in every_month),
            maximum=max(row.net_income for row in every_month),
        ),
        horizon_months=horizon_months,
    )
