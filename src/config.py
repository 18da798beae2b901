"""
Nutrient Reminder — Centralized configuration.

Loads all settings from .env and validates them.
Every key is optional; defaults reproduce the desktop app's behaviour
(1-second tick, 30-minute snooze, 2-minute conflict window).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Persisted alarm list (JSON)
    ALARMS_FILE: str = "alarms_data.json"

    # Conflict knowledge table; empty → bundled src/data/conflicts.json
    CONFLICT_DATA_PATH: str = ""

    # Scheduler
    TICK_SECONDS: float = 1.0
    SNOOZE_MINUTES: int = 30
    CONFLICT_WINDOW_MINUTES: int = 2

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("TICK_SECONDS", mode="before")
    @classmethod
    def parse_tick(cls, v: str | float) -> float:
        value = float(v)
        if value <= 0:
            raise ValueError("TICK_SECONDS must be positive")
        return value

    @field_validator("SNOOZE_MINUTES", mode="before")
    @classmethod
    def parse_snooze(cls, v: str | int) -> int:
        value = int(v)
        if value <= 0:
            raise ValueError("SNOOZE_MINUTES must be positive")
        return value

    @field_validator("CONFLICT_WINDOW_MINUTES", mode="before")
    @classmethod
    def parse_window(cls, v: str | int) -> int:
        value = int(v)
        if value < 0:
            raise ValueError("CONFLICT_WINDOW_MINUTES must not be negative")
        return value

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        ALARMS_FILE=os.getenv("ALARMS_FILE", "alarms_data.json"),
        CONFLICT_DATA_PATH=os.getenv("CONFLICT_DATA_PATH", ""),
        TICK_SECONDS=os.getenv("TICK_SECONDS", "1.0"),
        SNOOZE_MINUTES=os.getenv("SNOOZE_MINUTES", "30"),
        CONFLICT_WINDOW_MINUTES=os.getenv("CONFLICT_WINDOW_MINUTES", "2"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by other modules as:
#   from src.config import settings
settings = _load_settings()
