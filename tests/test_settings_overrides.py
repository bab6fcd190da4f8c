from __future__ import annotations

import calendar
from datetime import timezone
from zoneinfo import ZoneInfo

from services.aggregator import build_default_aggregator
from settings import get_settings


def _clear_caches() -> None:
    get_settings.cache_clear()
    build_default_aggregator.cache_clear()


def test_defaults_apply_without_environment(monkeypatch) -> None:
    for name in (
        "LOG_LEVEL",
        "READINGS_HISTORY_DAYS",
        "READINGS_INTERVAL_MINUTES",
        "READINGS_SEED",
        "READINGS_CSV_PATH",
        "READINGS_TIMEZONE",
        "WEEK_FIRST_DAY",
        "CORS_ALLOW_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    _clear_caches()

    try:
        settings = get_settings()
        assert settings.log_level == "INFO"
        assert settings.history_days == 366
        assert settings.interval_minutes == 30
        assert settings.seed is None
        assert settings.csv_path is None
        assert settings.timezone == "UTC"
        assert settings.first_weekday == calendar.SUNDAY
        assert settings.cors_origins == ("*",)
    finally:
        _clear_caches()


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("READINGS_HISTORY_DAYS", "30")
    monkeypatch.setenv("READINGS_INTERVAL_MINUTES", "5")
    monkeypatch.setenv("READINGS_SEED", "11")
    monkeypatch.setenv("READINGS_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("WEEK_FIRST_DAY", "Monday")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.example, http://b.example")
    _clear_caches()

    try:
        settings = get_settings()
        aggregator = build_default_aggregator()
        assert settings.log_level == "DEBUG"
        assert settings.history_days == 30
        assert settings.interval_minutes == 5
        assert settings.seed == 11
        assert settings.cors_origins == ("http://a.example", "http://b.example")
        assert aggregator.tz == ZoneInfo("Europe/Berlin")
        assert aggregator.first_weekday == calendar.MONDAY
    finally:
        _clear_caches()


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("READINGS_HISTORY_DAYS", "-3")
    monkeypatch.setenv("READINGS_INTERVAL_MINUTES", "often")
    monkeypatch.setenv("READINGS_SEED", "abc")
    monkeypatch.setenv("READINGS_TIMEZONE", "Mars/Olympus_Mons")
    monkeypatch.setenv("WEEK_FIRST_DAY", "funday")
    _clear_caches()

    try:
        settings = get_settings()
        aggregator = build_default_aggregator()
        assert settings.history_days == 366
        assert settings.interval_minutes == 30
        assert settings.seed is None
        assert settings.first_weekday == calendar.SUNDAY
        assert aggregator.tz is timezone.utc
    finally:
        _clear_caches()
