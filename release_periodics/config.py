"""
Configuration module for the Release Periodics controller.
Centralizes the poll cadence, definition sources and job store settings.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Application Settings ────────────────────────────────────────────
    app_name: str = "Release Periodics Controller"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"

    # ─── Reconciliation Settings ─────────────────────────────────────────
    poll_interval_seconds: int = Field(
        default=120,
        gt=0,
        description="Seconds between two reconciliation ticks"
    )
    job_name_suffix: str = Field(
        default="periodic",
        description="Suffix appended to every derived periodic job name"
    )
    qualifying_phases: List[str] = Field(
        default=["Accepted"],
        description="Release tag phases a periodic job may be run against"
    )
    cron_timezone: str = Field(
        default="UTC",
        description="Time zone cron expressions are evaluated in"
    )

    # ─── Definition Sources ──────────────────────────────────────────────
    releases_path: str = Field(
        default="config/releases.json",
        description="JSON document listing release definitions and their tags"
    )
    templates_path: str = Field(
        default="config/periodics.json",
        description="JSON document listing periodic job templates"
    )

    # ─── Redis Settings ──────────────────────────────────────────────────
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for the job store"
    )
    redis_jobs_key: str = Field(
        default="periodics:jobs",
        description="Redis hash holding one JSON document per job"
    )
    redis_stream_job_requests: str = Field(
        default="periodics.jobs.requested",
        description="Redis stream job executors consume creation requests from"
    )
    job_retention_seconds: int = Field(
        default=7 * 24 * 3600,
        ge=0,
        description="Age after which finished job documents are pruned (0 keeps all)"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Cached settings object
    """
    return Settings()
