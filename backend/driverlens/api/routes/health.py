from fastapi import APIRouter, Depends

from driverlens.core.config import Settings, get_settings


router = APIRouter(tags=["health"])


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict:
    return {
        "ok": True,
        "service": settings.app_name,
        "selection_profile": settings.selection_profile,
    }
