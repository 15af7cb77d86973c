from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Basic settings
    PROJECT_NAME: str = "Salon Booking"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./salon_booking.db"

    # CORS
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8081"]

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    # Salon calendar
    SALON_TIMEZONE: str = "UTC"
    HOLIDAY_COUNTRY: Optional[str] = None
    MAX_CALENDAR_RANGE_DAYS: int = 62

    # Booking policy: treat a failed availability re-check as "no conflicts"
    FAIL_OPEN_CONFLICT_CHECK: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "case_sensitive": True}


# Global settings instance
settings = Settings()
