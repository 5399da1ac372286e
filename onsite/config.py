from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "OnSite Leave"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://onsite:onsite@db:5432/onsite"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Comp time: one earned day is a standard 8-hour workday.
    comp_day_minutes: int = 480
    comp_time_expiry_days: int = 90
    comp_time_expiring_window_days: int = 14


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
