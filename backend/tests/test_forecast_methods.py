import pytest

from driverlens.models.drivers import (
    DriverScore,
    PercentageOfRevenue,
    ScenarioRange,
    SimpleGrowth,
    TrendExtrapolation,
)
from driverlens.models.enums import Category
from driverlens.models.series import MonthlySeries
from driverlens.services.forecast_methods import assign_method


def _series(values: list[float]) -> MonthlySeries:
    return MonthlySeries(
        name="Line",
        category=Category.expense,
        months=tuple(f"M{index}" for index in range(len(values))),
        values=tuple(values),
        business_totals=tuple(1_000.0 for _ in values),
    )


def _score(*, variability: float, predictability: float, materiality: float = 0.15) -> DriverScore:
    return DriverScore(
        materiality=materiality,
        variability=variability,
        predictability=predictability,
        growth_impact=0.0,
        data_quality=1.0,
        composite=0.5,
    )


def test_revenue_coupled_line_uses_percentage_of_revenue() -> None:
    method = assign_method(_series([1.0, 2.0, 3.0]), _score(variability=0.6, predictability=0.95), 0.9)
    assert method == PercentageOfRevenue(historical_ratio=0.15, confidence=0.9)
    assert method.method == "percentage_of_revenue"


def test_predictable_line_uses_trend_extrapolation() -> None:
    method = assign_method(_series([100.0, 110.0, 120.0, 130.0]), _score(variability=0.1, predictability=0.95), 0.2)

    assert isinstance(method, TrendExtrapolation)
    assert method.monthly_growth_rate == pytest.approx(10.0)
    assert method.intercept == pytest.approx(100.0)
    assert method.origin_index == 3
    assert method.confidence == 0.95


def test_volatile_line_uses_scenario_range() -> None:
    method = assign_method(_series([5.0, 1.0, 4.0, 2.0, 3.0]), _score(variability=0.6, predictability=0.1), 0.0)

    assert method == ScenarioRange(conservative=2.0, base=3.0, aggressive=4.0)
    assert method.confidence == 0.6


def test_remaining_lines_use_simple_growth() -> None:
    method = assign_method(_series([100.0] * 12), _score(variability=0.3, predictability=0.4), 0.5)

    assert method == SimpleGrowth(annual_growth_rate=0.0)
    assert method.confidence == 0.5


def test_negative_correlation_does_not_couple_to_revenue() -> None:
    method = assign_method(_series([100.0] * 12), _score(variability=0.3, predictability=0.4), -0.95)
    assert isinstance(method, SimpleGrowth)
