from __future__ import annotations

import calendar
import os
from dataclasses import dataclass
from datetime import timezone as dt_timezone, tzinfo
from functools import lru_cache
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


_LOG_LEVEL_ENV = "LOG_LEVEL"
_HISTORY_DAYS_ENV = "READINGS_HISTORY_DAYS"
_INTERVAL_ENV = "READINGS_INTERVAL_MINUTES"
_SEED_ENV = "READINGS_SEED"
_CSV_PATH_ENV = "READINGS_CSV_PATH"
_TIMEZONE_ENV = "READINGS_TIMEZONE"
_WEEK_FIRST_DAY_ENV = "WEEK_FIRST_DAY"
_CORS_ORIGINS_ENV = "CORS_ALLOW_ORIGINS"

_WEEKDAYS = {name.lower(): index for index, name in enumerate(calendar.day_name)}


@dataclass(frozen=True)
class Settings:
    log_level: str
    history_days: int
    interval_minutes: int
    seed: Optional[int]
    csv_path: Optional[str]
    timezone: str
    first_weekday: int
    cors_origins: Tuple[str, ...]

    @property
    def zone(self) -> tzinfo:
        """Calendar zone for buckets and naive timestamps; UTC when unknown."""
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return dt_timezone.utc


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_seed() -> Optional[int]:
    candidate = _read_optional_env(_SEED_ENV, None)
    if candidate is None:
        return None
    try:
        return int(candidate)
    except ValueError:
        return None


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _read_first_weekday(default: int) -> int:
    candidate = _read_str_env(_WEEK_FIRST_DAY_ENV, "").lower()
    return _WEEKDAYS.get(candidate, default)


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


@lru_cache
def get_settings() -> Settings:
    return Settings(
        log_level=_read_log_level("INFO"),
        history_days=_read_positive_int(_HISTORY_DAYS_ENV, 366),
        interval_minutes=_read_positive_int(_INTERVAL_ENV, 30),
        seed=_read_seed(),
        csv_path=_read_optional_env(_CSV_PATH_ENV, None),
        timezone=_read_str_env(_TIMEZONE_ENV, "UTC"),
        first_weekday=_read_first_weekday(calendar.SUNDAY),
        cors_origins=_read_origins(("*",)),
    )
