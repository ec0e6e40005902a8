from fastapi import APIRouter, Depends, HTTPException, status

from driverlens.api.deps import criteria_for, get_scoring_workers, resolve_horizon, resolve_profile
from driverlens.api.routes.drivers import summary_out
from driverlens.core.config import Settings, get_settings
from driverlens.models.forecast import DriverAdjustment, ScenarioComparison, ScenarioForecast
from driverlens.schemas.forecast import (
    ConfidenceBandOut,
    ForecastRequest,
    ForecastResponse,
    ForecastSummaryOut,
    ProjectedDriverOut,
    ScenarioComparisonOut,
    ScenarioForecastOut,
    ScenarioProjectionOut,
    ValueRangeOut,
)
from driverlens.services.discovery import discover_from_report
from driverlens.services.normalizer import normalize_report
from driverlens.services.scenarios import generate_scenario_forecast


router = APIRouter(tags=["forecast"])


def scenario_out(forecast: ScenarioForecast) -> ScenarioForecastOut:
    return ScenarioForecastOut(
        scenario=forecast.scenario,
        projections=[
            ScenarioProjectionOut(
                month_index=row.month_index,
                revenue=row.revenue,
                expenses=row.expenses,
                net_income=row.net_income,
                confidence_band=ConfidenceBandOut(low=row.confidence_band.low, high=row.confidence_band.high),
                driver_breakdown=dict(row.driver_breakdown),
            )
            for row in forecast.projections
        ],
        drivers=[
            ProjectedDriverOut(
                name=row.name,
                category=row.category,
                classification=row.classification,
                method=row.method,
                confidence=row.confidence,
                adjusted=bool(row.adjustments),
            )
            for row in forecast.drivers
        ],
        summary=ForecastSummaryOut(
            total_projected_revenue=forecast.summary.total_projected_revenue,
            total_projected_expenses=forecast.summary.total_projected_expenses,
            total_net_income=forecast.summary.total_net_income,
            average_monthly_revenue=forecast.summary.average_monthly_revenue,
            average_monthly_expenses=forecast.summary.average_monthly_expenses,
            projected_runway_months=forecast.summary.projected_runway_months,
            break_even_month=forecast.summary.break_even_month,
            key_insights=list(forecast.summary.key_insights),
        ),
    )


def comparison_out(comparison: ScenarioComparison) -> ScenarioComparisonOut:
    return ScenarioComparisonOut(
        revenue_range=ValueRangeOut(
            minimum=comparison.revenue_range.minimum,
            maximum=comparison.revenue_range.maximum,
        ),
        net_income_range=ValueRangeOut(
            minimum=comparison.net_income_range.minimum,
            maximum=comparison.net_income_range.maximum,
        ),
    )


@router.post("/forecast", response_model=ForecastResponse)
def forecast(
    payload: ForecastRequest,
    settings: Settings = Depends(get_settings),
    max_workers: int | None = Depends(get_scoring_workers),
) -> ForecastResponse:
    profile = resolve_profile(payload.selection_profile, settings)
    horizon = resolve_horizon(payload.horizon_months, settings)
    report = normalize_report(payload.report)
    result = discover_from_report(report, criteria_for(profile), max_workers=max_workers)
    if not result.drivers:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No drivers met the selection criteria; nothing to forecast.",
        )
    adjustments = tuple(
        DriverAdjustment(
            driver_name=row.driver_name,
            impact=row.impact,
            start_month=row.start_month,
            end_month=row.end_month,
        )
        for row in payload.adjustments
    )
    comparison = generate_scenario_forecast(
        result,
        horizon,
        adjustments=adjustments,
        max_workers=max_workers,
    )
    return ForecastResponse(
        selection_profile=profile,
        horizon_months=comparison.horizon_months,
        discovery=summary_out(result.summary),
        scenarios=[scenario_out(item) for item in comparison.forecasts.values()],
        comparison=comparison_out(comparison),
    )
