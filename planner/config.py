# planner/config.py

from __future__ import annotations

import logging
from typing import List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Project-wide settings, read from environment variables.
    Pydantic v2 + pydantic-settings.
    """
    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # --- General ---
    ENVIRONMENT: str = Field("dev", description="Application environment (dev, test, prod)")
    LOG_LEVEL: str = Field("INFO", description="Root logging level")

    # --- Database ---
    DATABASE_URL: str = Field(..., description="Async database URL (postgresql+asyncpg://... or sqlite+aiosqlite://...)")

    # --- JWT ---
    JWT_SECRET_KEY: str = Field(..., description="Secret key for signing JWT tokens")
    JWT_ALGORITHM: str = Field("HS256", description="Algorithm for JWT signing")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24 * 7, description="JWT access token lifetime in minutes")

    # --- HTTP ---
    CORS_ORIGINS: str = Field("http://localhost:3000", description="Comma-separated list of allowed origins")

    # --- Recurrence / calendar windows ---
    RECURRENCE_HORIZON_MONTHS: int = Field(3, description="How far a recurring series is expanded for conflict checks")
    LIST_WINDOW_PAST_MONTHS: int = Field(1, description="Default listing window before today")
    LIST_WINDOW_FUTURE_MONTHS: int = Field(3, description="Default listing window after today")

    @model_validator(mode="after")
    def check_windows(self) -> "Settings":
        for name in ("RECURRENCE_HORIZON_MONTHS", "LIST_WINDOW_PAST_MONTHS", "LIST_WINDOW_FUTURE_MONTHS"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be a positive number of months")
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


try:
    settings = Settings()
    log.info("Settings loaded successfully for ENVIRONMENT=%s", settings.ENVIRONMENT)
    log.debug(
        "Loaded settings: DB URL=%s..., horizon=%d months",
        settings.DATABASE_URL[:25],
        settings.RECURRENCE_HORIZON_MONTHS,
    )
except Exception:
    log.exception("Failed to instantiate Settings.")
    raise
