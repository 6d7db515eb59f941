"""
Configuration management for slot_finder.
Uses pydantic-settings to load from environment variables and .env files.
"""

import json
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .models import AvailabilityConfig, FilterConfig, LimitConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google Calendar
    google_calendar_token_file: Path = Field(default=Path("./token.json"))
    # Calendars whose events count as busy time
    selected_calendars: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["primary"])
    # IANA timezone name working hours are evaluated in, e.g. "Europe/Nicosia", "America/New_York"
    calendar_timezone: str = "UTC"

    # Request defaults
    default_duration_minutes: int = Field(default=30, gt=0)
    default_days: int = Field(default=5, ge=0)
    booking_link: str | None = None

    # Which events block time
    include_all_day: bool = False
    include_no_location: bool = False
    include_no_participants: bool = False

    # Result limiting (0 = unlimited)
    max_slots: int = Field(default=0, ge=0)
    diversify: bool = False

    # Fetched events are reused for this long (same calendar and time range)
    event_cache_ttl_seconds: float = 60.0

    # Logging
    log_level: str = "INFO"

    @field_validator("selected_calendars", mode="before")
    @classmethod
    def _coerce_calendars(cls, v: object) -> list[str]:
        """Accept a comma-separated string or a JSON array.

        Either of these works:
            SELECTED_CALENDARS=primary,team@group.calendar.google.com
            SELECTED_CALENDARS=["primary", "team@group.calendar.google.com"]
        """
        if isinstance(v, list):
            return [str(x) for x in v]
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                return [str(x) for x in json.loads(s)]
            return [x.strip() for x in s.split(",") if x.strip()]
        return []

    def filter_config(self) -> FilterConfig:
        return FilterConfig(
            include_all_day=self.include_all_day,
            include_no_location=self.include_no_location,
            include_no_participants=self.include_no_participants,
        )

    def limit_config(self) -> LimitConfig:
        return LimitConfig(max_slots=self.max_slots, diversify=self.diversify)

    def availability_config(self) -> AvailabilityConfig:
        return AvailabilityConfig(filter=self.filter_config(), limit=self.limit_config())


# Global settings instance
settings = Settings()
