from decimal import Decimal

import pytest

from driverlens.core.errors import ConfigurationError, InputShapeError
from driverlens.models.criteria import SelectionCriteria
from driverlens.models.drivers import (
    DiscoveredDriver,
    DriverDiscoveryResult,
    DriverScore,
    PercentageOfRevenue,
    ScenarioRange,
    SimpleGrowth,
    TrendExtrapolation,
)
from driverlens.models.enums import Category, Classification, ConfidenceLevel, Scenario, Trend
from driverlens.models.forecast import ConfidenceBand, DriverAdjustment, ScenarioProjection
from driverlens.models.series import MonthlySeries
from driverlens.services.discovery import discover_from_report
from driverlens.services.normalizer import normalize_report, series_from_mapping
from driverlens.services.sample_report import build_sample_report
from driverlens.services.scenarios import (
    ForecastContext,
    base_case_value,
    confidence_band,
    generate_scenario_forecast,
    robust_baseline,
    scenario_multiplier,
    summarize_projections,
)
from driverlens.utils.decimal_math import money


def _result() -> DriverDiscoveryResult:
    report = normalize_report(build_sample_report(months=18))
    return discover_from_report(report, SelectionCriteria.demo())


def _driver(method, values: tuple[float, ...] = (100.0, 100.0, 100.0), category: Category = Category.revenue):
    return DiscoveredDriver(
        series=MonthlySeries(
            name="Line",
            category=category,
            months=tuple(f"M{index}" for index in range(len(values))),
            values=values,
            business_totals=tuple(1_000.0 for _ in values),
        ),
        score=DriverScore(0.1, 0.1, 0.9, 0.1, 1.0, 0.5),
        correlation_with_revenue=0.0,
        classification=Classification.recurring_revenue,
        confidence=ConfidenceLevel.high,
        coverage=10.0,
        method=method,
        trend=Trend.stable,
        growth_rate=0.0,
    )


def _projection(month_index: int, net: str) -> ScenarioProjection:
    return ScenarioProjection(
        scenario=Scenario.baseline,
        month_index=month_index,
        revenue=money("100"),
        expenses=money(Decimal("100") - Decimal(net)),
        net_income=money(net),
        confidence_band=ConfidenceBand(low=money(net), high=money(net)),
        driver_breakdown={},
    )


CONTEXT = ForecastContext(revenue_baseline=1_000.0, expense_baseline=500.0, revenue_monthly_growth=0.0)


@pytest.mark.parametrize(
    ("scenario", "classification", "expected"),
    [
        (Scenario.baseline, Classification.variable_revenue, 1.0),
        (Scenario.growth, Classification.recurring_revenue, 1.10),
        (Scenario.growth, Classification.variable_revenue, 1.20),
        (Scenario.growth, Classification.variable_cost, 0.95),
        (Scenario.downturn, Classification.variable_revenue, 0.80),
        (Scenario.downturn, Classification.variable_cost, 1.05),
        (Scenario.downturn, Classification.fixed_cost, 1.0),
    ],
)
def test_scenario_multiplier_table(scenario, classification, expected) -> None:
    assert scenario_multiplier(scenario, classification) == expected


def test_robust_baseline_uses_recent_level() -> None:
    assert robust_baseline([0.0, 50.0, 100.0, 200.0, 300.0]) == pytest.approx(200.0)


def test_robust_baseline_for_catch_all_line_uses_minimum() -> None:
    assert robust_baseline([120.0, 0.0, 340.0, 2_150.0], "Miscellaneous Expense") == 120.0


def test_robust_baseline_without_positive_values() -> None:
    assert robust_baseline([0.0, -5.0]) == 0.0


def test_base_case_percentage_of_revenue() -> None:
    driver = _driver(PercentageOfRevenue(historical_ratio=0.2, confidence=0.9))
    assert base_case_value(driver, 3, CONTEXT) == pytest.approx(200.0)

    growing = ForecastContext(revenue_baseline=1_000.0, expense_baseline=500.0, revenue_monthly_growth=0.01)
    assert base_case_value(driver, 2, growing) == pytest.approx(200.0 * 1.01**2)


def test_base_case_trend_is_floored_for_non_negative_history() -> None:
    method = TrendExtrapolation(monthly_growth_rate=-50.0, confidence=0.9, intercept=100.0, origin_index=2)
    assert base_case_value(_driver(method), 1, CONTEXT) == 0.0

    signed = _driver(method, values=(100.0, -20.0, 30.0))
    assert base_case_value(signed, 1, CONTEXT) == pytest.approx(-50.0)


def test_base_case_range_and_growth() -> None:
    assert base_case_value(_driver(ScenarioRange(1.0, 2.0, 3.0)), 7, CONTEXT) == 2.0
    growth = _driver(SimpleGrowth(annual_growth_rate=0.12))
    assert base_case_value(growth, 2, CONTEXT) == pytest.approx(100.0 * 1.01**2)


def test_confidence_band_widens_with_horizon() -> None:
    early = confidence_band(1_000.0, 1, 1.0)
    late = confidence_band(1_000.0, 12, 1.0)

    assert early == ConfidenceBand(low=money("900"), high=money("1100"))
    assert late.high - late.low > early.high - early.low


def test_confidence_band_narrows_with_confidence() -> None:
    confident = confidence_band(1_000.0, 3, 1.0)
    unsure = confidence_band(1_000.0, 3, 1.5)
    assert confident.high - confident.low < unsure.high - unsure.low


def test_confidence_band_floor_for_break_even_month() -> None:
    early = confidence_band(0.0, 1, 1.0, 100_000.0)
    late = confidence_band(0.0, 12, 1.0, 100_000.0)

    assert early == ConfidenceBand(low=money("-500"), high=money("500"))
    assert late.high - late.low > early.high - early.low
    assert confidence_band(40_000.0, 1, 1.0, 100_000.0) == ConfidenceBand(low=money("36000"), high=money("44000"))


def test_summary_runway_and_break_even() -> None:
    summary = summarize_projections([_projection(1, "-100"), _projection(2, "50"), _projection(3, "30")], [])

    assert summary.projected_runway_months == 1
    assert summary.break_even_month == 2
    assert summary.total_net_income == money("-20")


def test_summary_for_profitable_forecast() -> None:
    summary = summarize_projections([_projection(1, "10"), _projection(2, "20")], [])

    assert summary.projected_runway_months == 2
    assert summary.break_even_month == 1
    assert "Business projected to remain profitable throughout the period" in summary.key_insights


def test_forecast_has_horizon_months_per_scenario() -> None:
    comparison = generate_scenario_forecast(_result(), 6)

    assert set(comparison.forecasts) == set(Scenario)
    for forecast in comparison.forecasts.values():
        assert [row.month_index for row in forecast.projections] == [1, 2, 3, 4, 5, 6]
        for row in forecast.projections:
            assert row.net_income == row.revenue - row.expenses
            assert row.confidence_band.low <= row.net_income <= row.confidence_band.high


def test_growth_revenue_dominates_baseline_and_downturn() -> None:
    comparison = generate_scenario_forecast(_result(), 12)
    growth = comparison.forecasts[Scenario.growth].projections
    baseline = comparison.forecasts[Scenario.baseline].projections
    downturn = comparison.forecasts[Scenario.downturn].projections

    for high, mid, low in zip(growth, baseline, downturn):
        assert high.revenue >= mid.revenue >= low.revenue
    assert comparison.revenue_range.minimum <= comparison.revenue_range.maximum


def test_parallel_scenarios_match_sequential() -> None:
    result = _result()
    assert generate_scenario_forecast(result, 12, max_workers=3) == generate_scenario_forecast(result, 12)


@pytest.mark.parametrize("horizon", [0, 61])
def test_horizon_out_of_range_rejected(horizon) -> None:
    with pytest.raises(ConfigurationError):
        generate_scenario_forecast(_result(), horizon)


def test_forecast_without_drivers_rejected() -> None:
    report = normalize_report(build_sample_report(months=18))
    strict = SelectionCriteria(minimum_score=1.0, minimum_materiality=1.0, minimum_data_quality=1.0)
    with pytest.raises(InputShapeError):
        generate_scenario_forecast(discover_from_report(report, strict), 12)


def test_adjustment_for_unknown_driver_rejected() -> None:
    with pytest.raises(InputShapeError):
        generate_scenario_forecast(_result(), 12, adjustments=[DriverAdjustment("Office Plants", 0.2)])


def test_adjustment_scales_targeted_months_only() -> None:
    result = _result()
    target = result.drivers[0].name
    plain = generate_scenario_forecast(result, 4).forecasts[Scenario.baseline]
    adjusted = generate_scenario_forecast(
        result,
        4,
        adjustments=[DriverAdjustment(target, 0.5, start_month=1, end_month=2)],
    ).forecasts[Scenario.baseline]

    for index in (0, 1):
        before = plain.projections[index].driver_breakdown[target]
        after = adjusted.projections[index].driver_breakdown[target]
        assert after == pytest.approx(before * Decimal("1.5"), abs=Decimal("0.02"))
    assert adjusted.projections[2].driver_breakdown[target] == plain.projections[2].driver_breakdown[target]


def test_adjusted_driver_loses_confidence() -> None:
    result = _result()
    source = result.drivers[0]
    forecast = generate_scenario_forecast(
        result, 3, adjustments=[DriverAdjustment(source.name, 0.1)]
    ).forecasts[Scenario.baseline]

    projected = next(row for row in forecast.drivers if row.name == source.name)
    expected = ConfidenceLevel.medium if source.confidence == ConfidenceLevel.high else ConfidenceLevel.low
    assert projected.confidence == expected
    assert len(projected.adjustments) == 1


def test_projected_growth_rate_is_bounded() -> None:
    runaway = _driver(SimpleGrowth(annual_growth_rate=99.0), values=(10_000.0,) * 6)
    assert base_case_value(runaway, 60, CONTEXT) == pytest.approx(10_000.0 * (1 + 1 / 12) ** 60)

    collapse = _driver(SimpleGrowth(annual_growth_rate=-1.0), values=(10_000.0,) * 6)
    assert base_case_value(collapse, 12, CONTEXT) > 0.0


def test_partial_first_month_line_forecasts_over_long_horizon() -> None:
    sales = [50_000, 49_000, 51_000, 50_500, 49_500, 50_200, 49_800, 50_100, 50_600, 49_400, 50_300, 49_700]
    report = series_from_mapping(
        [f"2024-{month:02d}" for month in range(1, 13)],
        revenue={"Sales": sales},
        expenses={"Software": [100.0] + [10_000.0] * 11, "Rent": [5_000.0] * 12},
    )
    result = discover_from_report(report, SelectionCriteria.demo())
    software = next(row for row in result.drivers if row.name == "Software")
    assert isinstance(software.method, SimpleGrowth)
    assert software.method.annual_growth_rate > 1.0

    comparison = generate_scenario_forecast(result, 60)

    ceiling = money(10_000.0 * (1 + 1 / 12) ** 60 * 1.05)
    for forecast in comparison.forecasts.values():
        assert len(forecast.projections) == 60
        for row in forecast.projections:
            assert row.driver_breakdown["Software"] <= ceiling


def test_forecast_records_are_read_only() -> None:
    comparison = generate_scenario_forecast(_result(), 2)
    projection = comparison.forecasts[Scenario.baseline].projections[0]

    with pytest.raises(TypeError):
        projection.driver_breakdown["Injected"] = money("1")
    with pytest.raises(TypeError):
        comparison.forecasts[Scenario.growth] = comparison.forecasts[Scenario.baseline]
