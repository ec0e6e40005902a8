from driverlens.models.criteria import ScoringConfig, SelectionCriteria
from driverlens.models.drivers import (
    DiscoveredDriver,
    DiscoveryMetadata,
    DiscoverySummary,
    DriverDiscoveryResult,
    DriverScore,
    ForecastMethod,
    LineAnalysis,
    PercentageOfRevenue,
    ScenarioRange,
    SimpleGrowth,
    TrendExtrapolation,
)
from driverlens.models.enums import (
    Category,
    Classification,
    ConfidenceLevel,
    DataQualityLabel,
    Scenario,
    SelectionProfile,
    Trend,
)
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
from driverlens.models.series import MonthlySeries, ParsedReport

__all__ = [
    "ScoringConfig",
    "SelectionCriteria",
    "DiscoveredDriver",
    "DiscoveryMetadata",
    "DiscoverySummary",
    "DriverDiscoveryResult",
    "DriverScore",
    "ForecastMethod",
    "LineAnalysis",
    "PercentageOfRevenue",
    "ScenarioRange",
    "SimpleGrowth",
    "TrendExtrapolation",
    "Category",
    "Classification",
    "ConfidenceLevel",
    "DataQualityLabel",
    "Scenario",
    "SelectionProfile",
    "Trend",
    "ConfidenceBand",
    "DriverAdjustment",
    "ForecastSummary",
    "ProjectedDriver",
    "ScenarioComparison",
    "ScenarioForecast",
    "ScenarioProjection",
    "ValueRange",
    "MonthlySeries",
    "ParsedReport",
]
