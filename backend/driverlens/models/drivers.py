from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Union

from driverlens.models.enums import Category, Classification, ConfidenceLevel, DataQualityLabel, Trend
from driverlens.models.series import MonthlySeries


@dataclass(frozen=True)
class DriverScore:
    materiality: float
    variability: float
    predictability: float
    growth_impact: float
    data_quality: float
    composite: float

    def components(self) -> dict[str, float]:
        return {
            "materiality": self.materiality,
            "variability": self.variability,
            "predictability": self.predictability,
            "growth_impact": self.growth_impact,
            "data_quality": self.data_quality,
        }


@dataclass(frozen=True)
class PercentageOfRevenue:
    method: ClassVar[str] = "percentage_of_revenue"
    historical_ratio: float
    confidence: float


@dataclass(frozen=True)
class TrendExtrapolation:
    method: ClassVar[str] = "trend_extrapolation"
    monthly_growth_rate: float
    confidence: float
    intercept: float = 0.0
    origin_index: int = 0


@dataclass(frozen=True)
class ScenarioRange:
    method: ClassVar[str] = "scenario_range"
    conservative: float
    base: float
    aggressive: float

    @property
    def confidence(self) -> float:
        return 0.6


@dataclass(frozen=True)
class SimpleGrowth:
    method: ClassVar[str] = "simple_growth"
    annual_growth_rate: float

    @property
    def confidence(self) -> float:
        return 0.5


ForecastMethod = Union[PercentageOfRevenue, TrendExtrapolation, ScenarioRange, SimpleGrowth]


@dataclass(frozen=True)
class LineAnalysis:
    """A scored and classified line before selection."""

    series: MonthlySeries
    score: DriverScore
    correlation_with_revenue: float
    classification: Classification
    trend: Trend
    growth_rate: float

    @property
    def name(self) -> str:
        return self.series.name

    @property
    def category(self) -> Category:
        return self.series.category


@dataclass(frozen=True)
class DiscoveredDriver:
    series: MonthlySeries
    score: DriverScore
    correlation_with_revenue: float
    classification: Classification
    confidence: ConfidenceLevel
    coverage: float
    method: ForecastMethod
    trend: Trend
    growth_rate: float
    correlated_drivers: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.series.name

    @property
    def category(self) -> Category:
        return self.series.category


@dataclass(frozen=True)
class DiscoverySummary:
    drivers_found: int
    business_coverage_percent: float
    average_confidence_percent: int
    data_quality_label: DataQualityLabel
    months_analyzed: int
    recommended_approach: str = "driver_based_forecasting"


@dataclass(frozen=True)
class DiscoveryMetadata:
    algorithms_used: tuple[str, ...]
    data_range_start: date | None
    data_range_end: date | None
    processing_time_ms: float


@dataclass(frozen=True)
class DriverDiscoveryResult:
    drivers: tuple[DiscoveredDriver, ...]
    primary_drivers: tuple[DiscoveredDriver, ...]
    secondary_drivers: tuple[DiscoveredDriver, ...]
    consolidated_items: tuple[str, ...]
    excluded_items: tuple[str, ...]
    summary: DiscoverySummary
    months: tuple[str, ...]
    revenue_totals: tuple[float, ...]
    expense_totals: tuple[float, ...]
    metadata: DiscoveryMetadata
