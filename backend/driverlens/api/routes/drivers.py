from dataclasses import asdict

from fastapi import APIRouter, Depends

from driverlens.api.deps import criteria_for, get_scoring_workers, resolve_profile
from driverlens.core.config import Settings, get_settings
from driverlens.models.drivers import DiscoveredDriver, DiscoverySummary, DriverDiscoveryResult
from driverlens.models.enums import SelectionProfile
from driverlens.schemas.common import ReportRequest
from driverlens.schemas.drivers import (
    DiscoveryMetadataOut,
    DiscoverySummaryOut,
    DriverDiscoveryResponse,
    DriverOut,
    DriverScoreOut,
    ForecastMethodOut,
)
from driverlens.services.discovery import discover_from_report
from driverlens.services.normalizer import normalize_report


router = APIRouter(tags=["drivers"])


def driver_out(driver: DiscoveredDriver) -> DriverOut:
    return DriverOut(
        name=driver.name,
        account_id=driver.series.account_id,
        category=driver.category,
        classification=driver.classification,
        confidence=driver.confidence,
        coverage_percent=round(driver.coverage, 4),
        correlation_with_revenue=round(driver.correlation_with_revenue, 6),
        trend=driver.trend,
        growth_rate=round(driver.growth_rate, 6),
        score=DriverScoreOut.model_validate(driver.score),
        forecast_method=ForecastMethodOut(
            method=driver.method.method,
            confidence=round(driver.method.confidence, 6),
            parameters=asdict(driver.method),
        ),
        correlated_drivers=list(driver.correlated_drivers),
        monthly_values=list(driver.series.values),
    )


def summary_out(summary: DiscoverySummary) -> DiscoverySummaryOut:
    return DiscoverySummaryOut.model_validate(summary)


def discovery_response(result: DriverDiscoveryResult, profile: SelectionProfile) -> DriverDiscoveryResponse:
    return DriverDiscoveryResponse(
        selection_profile=profile,
        months=list(result.months),
        drivers=[driver_out(row) for row in result.drivers],
        primary_drivers=[row.name for row in result.primary_drivers],
        secondary_drivers=[row.name for row in result.secondary_drivers],
        consolidated_items=list(result.consolidated_items),
        excluded_items=list(result.excluded_items),
        summary=summary_out(result.summary),
        metadata=DiscoveryMetadataOut(
            algorithms_used=list(result.metadata.algorithms_used),
            data_range_start=result.metadata.data_range_start,
            data_range_end=result.metadata.data_range_end,
            processing_time_ms=result.metadata.processing_time_ms,
        ),
    )


@router.post("/drivers/discover", response_model=DriverDiscoveryResponse)
def discover(
    payload: ReportRequest,
    settings: Settings = Depends(get_settings),
    max_workers: int | None = Depends(get_scoring_workers),
) -> DriverDiscoveryResponse:
    profile = resolve_profile(payload.selection_profile, settings)
    report = normalize_report(payload.report)
    result = discover_from_report(report, criteria_for(profile), max_workers=max_workers)
    return discovery_response(result, profile)
