from fastapi import APIRouter

from driverlens.api.routes import drivers, forecast, health


api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(drivers.router)
api_router.include_router(forecast.router)
