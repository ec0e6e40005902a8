from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from driverlens.models.enums import Category, Classification, ConfidenceLevel, Scenario, SelectionProfile
from driverlens.schemas.common import DomainModel, ReportRequest
from driverlens.schemas.drivers import DiscoverySummaryOut


class DriverAdjustmentIn(BaseModel):
    driver_name: str = Field(min_length=1)
    impact: float = Field(gt=-1)
    start_month: int = Field(default=1, ge=1)
    end_month: int | None = Field(default=None, ge=1)


class ForecastRequest(ReportRequest):
    horizon_months: int | None = Field(default=None, ge=1)
    adjustments: list[DriverAdjustmentIn] = Field(default_factory=list)


class ConfidenceBandOut(DomainModel):
    low: Decimal
    high: Decimal


class ScenarioProjectionOut(DomainModel):
    month_index: int
    revenue: Decimal
    expenses: Decimal
    net_income: Decimal
    confidence_band: ConfidenceBandOut
    driver_breakdown: dict[str, Decimal]


class ProjectedDriverOut(DomainModel):
    name: str
    category: Category
    classification: Classification
    method: str
    confidence: ConfidenceLevel
    adjusted: bool


class ForecastSummaryOut(DomainModel):
    total_projected_revenue: Decimal
    total_projected_expenses: Decimal
    total_net_income: Decimal
    average_monthly_revenue: Decimal
    average_monthly_expenses: Decimal
    projected_runway_months: int
    break_even_month: int | None
    key_insights: list[str]


class ScenarioForecastOut(BaseModel):
    scenario: Scenario
    projections: list[ScenarioProjectionOut]
    drivers: list[ProjectedDriverOut]
    summary: ForecastSummaryOut


class ValueRangeOut(DomainModel):
    minimum: Decimal
    maximum: Decimal


class ScenarioComparisonOut(BaseModel):
    revenue_range: ValueRangeOut
    net_income_range: ValueRangeOut


class ForecastResponse(BaseModel):
    selection_profile: SelectionProfile
    horizon_months: int
    discovery: DiscoverySummaryOut
    scenarios: list[ScenarioForecastOut]
    comparison: ScenarioComparisonOut
