"""
Cleaning Scheduler - Centralized configuration.

Loads all settings from .env. Every key has a working default, so the
scheduler runs without a .env file.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from cleaning_scheduler/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite (schedules, configs, staff, room status)
    DATABASE_PATH: str = "data/cleaning.db"

    # Cache
    CACHE_TTL_SECONDS: int = 300

    # Scoring / analytics windows
    PERFORMANCE_WINDOW_DAYS: int = 30
    TOP_PERFORMERS_LIMIT: int = 5

    # Generation
    GENERATION_DEDUPE: bool = True
    SEED_DEFAULT_CONFIGS: bool = True

    LOG_LEVEL: str = "INFO"

    @field_validator(
        "CACHE_TTL_SECONDS",
        "PERFORMANCE_WINDOW_DAYS",
        "TOP_PERFORMERS_LIMIT",
        mode="before",
    )
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("GENERATION_DEDUPE", "SEED_DEFAULT_CONFIGS", mode="before")
    @classmethod
    def parse_flag(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in ("1", "true", "yes", "on")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/cleaning.db"),
        CACHE_TTL_SECONDS=os.getenv("CACHE_TTL_SECONDS", "300"),
        PERFORMANCE_WINDOW_DAYS=os.getenv("PERFORMANCE_WINDOW_DAYS", "30"),
        TOP_PERFORMERS_LIMIT=os.getenv("TOP_PERFORMERS_LIMIT", "5"),
        GENERATION_DEDUPE=os.getenv("GENERATION_DEDUPE", "true"),
        SEED_DEFAULT_CONFIGS=os.getenv("SEED_DEFAULT_CONFIGS", "true"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Imported by other modules as:
#   from cleaning_scheduler.config import settings
settings = _load_settings()
