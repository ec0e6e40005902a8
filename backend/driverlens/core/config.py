from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from driverlens.models.enums import SelectionProfile


class Settings(BaseSettings):
    app_name: str = "DriverLens API"
    api_prefix: str = "/api/v1"
    debug: bool = False

    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    selection_profile: SelectionProfile = SelectionProfile.production
    default_horizon_months: int = 12
    max_horizon_months: int = 60
    rate_limit_requests: int = 120
    rate_limit_window_seconds: int = 60
    scoring_workers: int = 1

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
