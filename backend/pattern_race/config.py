"""
Application configuration using pydantic-settings.

Every tunable of the pattern monitor and race pipeline lives here so the
composition root (``pattern_race.main``) can build both from one place.
"""
import re
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables with the
    PATTERN_RACE_ prefix. Example: PATTERN_RACE_TICK_INTERVAL_SECONDS=2
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PATTERN_RACE_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Pattern Race"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # Pattern monitor
    tick_interval_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Interval between race-update heartbeats"
    )
    recent_window_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Window used to count recent pattern events on each tick"
    )
    trend_deadband: float = Field(
        default=2.0,
        ge=0.0,
        description="Score change required before a trend is reported as up/down"
    )

    # Seed values for the aggregate stream metrics.
    # total_components and average_score are never recomputed from events.
    seed_total_components: int = Field(default=147, ge=0)
    seed_average_score: float = Field(default=63.67, ge=0.0, le=100.0)
    seed_race_position: Literal["leading", "close", "trailing"] = "leading"
    seed_momentum: float = Field(default=0.85, ge=0.0, le=1.0)

    # Race pipeline
    history_capacity: int = Field(
        default=100,
        ge=1,
        description="Number of race events kept in the history buffer"
    )
    recent_events_count: int = Field(
        default=10,
        ge=1,
        description="Number of race events returned with the current stats"
    )
    initial_race_position: Literal["leading", "close", "trailing"] = "close"
    stream_buffer_size: int = Field(
        default=1000,
        ge=1,
        description="Undelivered events buffered per event stream before the oldest are dropped"
    )

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str], info) -> list[str]:
        """
        Validate CORS origins are properly formatted URLs.

        Wildcards are rejected in production.
        """
        if info.data.get("environment") == "production" and "*" in v:
            raise ValueError(
                "Wildcard '*' CORS origin is not allowed in production. "
                "Specify explicit origins instead."
            )

        valid_origin_pattern = re.compile(
            r"^https?://"
            r"[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?"
            r"(\.[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?)*"
            r"(:[0-9]{1,5})?"
            r"$"
        )

        for origin in v:
            if origin == "*":
                continue
            if not valid_origin_pattern.match(origin):
                raise ValueError(
                    f"Invalid CORS origin format: '{origin}'. "
                    f"Must be a valid URL like 'http://localhost:3000' or 'https://example.com'"
                )

        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Environment variables are parsed only once per process.
    """
    return Settings()


# Convenience instance for direct imports
settings = get_settings()
