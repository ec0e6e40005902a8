from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from driverlens.models.enums import Category, Classification, ConfidenceLevel, Scenario


@dataclass(frozen=True)
class DriverAdjustment:
    driver_name: str
    impact: float
    start_month: int = 1
    end_month: int | None = None


@dataclass(frozen=True)
class ConfidenceBand:
    low: Decimal
    high: Decimal


@dataclass(frozen=True)
class ScenarioProjection:
    scenario: Scenario
    month_index: int
    revenue: Decimal
    expenses: Decimal
    net_income: Decimal
    confidence_band: ConfidenceBand
    driver_breakdown: Mapping[str, Decimal]

    def __post_init__(self) -> None:
        object.__setattr__(self, "driver_breakdown", MappingProxyType(dict(self.driver_breakdown)))


@dataclass(frozen=True)
class ProjectedDriver:
    name: str
    category: Category
    classification: Classification
    method: str
    base_value: float
    monthly_values: tuple[float, ...]
    confidence: ConfidenceLevel
    adjustments: tuple[DriverAdjustment, ...] = ()


@dataclass(frozen=True)
class ForecastSummary:
    total_projected_revenue: Decimal
    total_projected_expenses: Decimal
    total_net_income: Decimal
    average_monthly_revenue: Decimal
    average_monthly_expenses: Decimal
    projected_runway_months: int
    break_even_month: int | None
    key_insights: tuple[str, ...]


@dataclass(frozen=True)
class ScenarioForecast:
    scenario: Scenario
    projections: tuple[ScenarioProjection, ...]
    drivers: tuple[ProjectedDriver, ...]
    summary: ForecastSummary


@dataclass(frozen=True)
class ValueRange:
    minimum: Decimal
    maximum: Decimal


@dataclass(frozen=True)
class ScenarioComparison:
    forecasts: Mapping[Scenario, ScenarioForecast]
    revenue_range: ValueRange
    net_income_range: ValueRange
    horizon_months: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "forecasts", MappingProxyType(dict(self.forecasts)))
