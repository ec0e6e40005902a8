from fastapi import Depends, HTTPException, status

from driverlens.core.config import Settings, get_settings
from driverlens.models.criteria import SelectionCriteria
from driverlens.models.enums import SelectionProfile


def resolve_profile(requested: SelectionProfile | None, settings: Settings) -> SelectionProfile:
    if requested is not None:
        return SelectionProfile(requested)
    return SelectionProfile(settings.selection_profile)


def criteria_for(profile: SelectionProfile) -> SelectionCriteria:
    return SelectionCriteria.preset(profile)


def get_scoring_workers(settings: Settings = Depends(get_settings)) -> int | None:
    return settings.scoring_workers if settings.scoring_workers > 1 else None


def resolve_horizon(requested: int | None, settings: Settings) -> int:
    horizon = requested if requested is not None else settings.default_horizon_months
    if horizon > settings.max_horizon_months:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"horizon_months cannot exceed {settings.max_horizon_months}.",
        )
    return horizon
