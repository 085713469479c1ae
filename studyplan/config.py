"""
StudyPlan Calendar — Centralized configuration.

Loads settings from .env and validates them.
Every other module reads its tunables from the `settings` singleton.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (one level up from studyplan/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseModel):
    """Engine settings loaded from environment variables."""

    # Size of the "upcoming reviews" sidebar list
    UPCOMING_REVIEWS_LIMIT: int = 15

    # First day of a calendar week: 0 = Sunday ... 6 = Saturday
    WEEK_STARTS_ON: int = 0

    # Compare the cached payload on a key hit, not just the digest
    CACHE_VERIFY_ON_HIT: bool = True

    LOG_LEVEL: str = "INFO"

    @field_validator("UPCOMING_REVIEWS_LIMIT", mode="before")
    @classmethod
    def parse_limit(cls, v: str | int) -> int:
        limit = int(v)
        if limit < 1:
            raise ValueError("UPCOMING_REVIEWS_LIMIT must be at least 1")
        return limit

    @field_validator("WEEK_STARTS_ON", mode="before")
    @classmethod
    def parse_week_start(cls, v: str | int) -> int:
        day = int(v)
        if not 0 <= day <= 6:
            raise ValueError("WEEK_STARTS_ON must be between 0 (Sunday) and 6 (Saturday)")
        return day

    @field_validator("CACHE_VERIFY_ON_HIT", mode="before")
    @classmethod
    def parse_flag(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in {"1", "true", "yes", "on"}

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown LOG_LEVEL: {v!r}")
        return level


def _load_settings() -> Settings:
    """Load settings from environment, validating every key."""
    try:
        return Settings(
            UPCOMING_REVIEWS_LIMIT=os.getenv("UPCOMING_REVIEWS_LIMIT", "15"),
            WEEK_STARTS_ON=os.getenv("WEEK_STARTS_ON", "0"),
            CACHE_VERIFY_ON_HIT=os.getenv("CACHE_VERIFY_ON_HIT", "true"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid StudyPlan settings in environment:\n{exc}", file=sys.stderr)
        sys.exit(1)


def configure_logging(level: str | None = None) -> None:
    """Apply the project log format at the configured level."""
    logging.basicConfig(level=level or settings.LOG_LEVEL, format=LOG_FORMAT)


# Singleton, imported by all other modules as:
#   from studyplan.config import settings
settings = _load_settings()
