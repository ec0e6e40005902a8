from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from driverlens.models.enums import Category, Classification, ConfidenceLevel, DataQualityLabel, SelectionProfile, Trend
from driverlens.schemas.common import DomainModel


class DriverScoreOut(DomainModel):
    materiality: float = Field(ge=0, le=1)
    variability: float = Field(ge=0, le=1)
    predictability: float = Field(ge=0, le=1)
    growth_impact: float = Field(ge=0, le=1)
    data_quality: float = Field(ge=0, le=1)
    composite: float = Field(ge=0, le=1)


class ForecastMethodOut(BaseModel):
    method: str
    confidence: float
    parameters: dict[str, Any]


class DriverOut(DomainModel):
    name: str
    account_id: str | None = None
    category: Category
    classification: Classification
    confidence: ConfidenceLevel
    coverage_percent: float
    correlation_with_revenue: float
    trend: Trend
    growth_rate: float
    score: DriverScoreOut
    forecast_method: ForecastMethodOut
    correlated_drivers: list[str]
    monthly_values: list[float]


class DiscoverySummaryOut(DomainModel):
    drivers_found: int
    business_coverage_percent: float
    average_confidence_percent: int
    data_quality_label: DataQualityLabel
    months_analyzed: int
    recommended_approach: str


class DiscoveryMetadataOut(BaseModel):
    algorithms_used: list[str]
    data_range_start: date | None
    data_range_end: date | None
    processing_time_ms: float


class DriverDiscoveryResponse(BaseModel):
    selection_profile: SelectionProfile
    months: list[str]
    drivers: list[DriverOut]
    primary_drivers: list[str]
    secondary_drivers: list[str]
    consolidated_items: list[str]
    excluded_items: list[str]
    summary: DiscoverySummaryOut
    metadata: DiscoveryMetadataOut
