from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from datasource.readings import (
    CsvReadingSource,
    InMemoryReadingSource,
    build_default_source,
    generate_readings,
)
from models.records import Reading
from services.aggregator import Aggregator, Granularity
from settings import get_settings

NOW = datetime(2024, 3, 6, 15, 30, tzinfo=timezone.utc)


def test_generate_readings_covers_trailing_history() -> None:
    readings = generate_readings(NOW, history_days=366, interval_minutes=60, seed=7)

    assert readings[0].timestamp == NOW - timedelta(days=366)
    assert readings[-1].timestamp == NOW
    assert len(readings) == 366 * 24 + 1
    assert all(a.timestamp < b.timestamp for a, b in zip(readings, readings[1:]))
    assert all(0 <= r.temperature < 100 and 0 <= r.humidity < 100 for r in readings)


def test_generate_readings_is_deterministic_for_a_seed() -> None:
    first = generate_readings(NOW, history_days=2, interval_minutes=5, seed=42)
    second = generate_readings(NOW, history_days=2, interval_minutes=5, seed=42)

    assert first == second


def test_generate_readings_rejects_non_positive_spans() -> None:
    with pytest.raises(ValueError):
        generate_readings(NOW, history_days=0)


def test_in_memory_source_sorts_snapshot() -> None:
    later = Reading(timestamp=NOW, temperature=1.0, humidity=2.0)
    earlier = Reading(timestamp=NOW - timedelta(hours=1), temperature=3.0, humidity=4.0)

    source = InMemoryReadingSource([later, earlier])

    assert list(source.get_all_readings()) == [earlier, later]
    assert len(source) == 2


def test_csv_source_loads_readings(tmp_path) -> None:
    path = tmp_path / "readings.csv"
    path.write_text(
        "Timestamp,Temperature,Humidity\n"
        "2024-03-05T14:07:00Z,21.5,40\n"
        "2024-03-05T13:00:00,20.0,42.5\n"
    )

    source = CsvReadingSource(path)
    readings = source.get_all_readings()

    assert [r.temperature for r in readings] == [20.0, 21.5]
    assert readings[0].timestamp == datetime(2024, 3, 5, 13, tzinfo=timezone.utc)
    assert readings[1].humidity == 40.0


def test_csv_source_reports_missing_columns(tmp_path) -> None:
    path = tmp_path / "readings.csv"
    path.write_text("timestamp,temperature\n2024-03-05T14:07:00Z,21.5\n")

    with pytest.raises(ValueError, match="humidity"):
        CsvReadingSource(path)


def test_csv_source_reports_bad_row_number(tmp_path) -> None:
    path = tmp_path / "readings.csv"
    path.write_text(
        "timestamp,temperature,humidity\n"
        "2024-03-05T14:07:00Z,21.5,40\n"
        "2024-03-05T15:07:00Z,warm,40\n"
    )

    with pytest.raises(ValueError, match="row 3"):
        CsvReadingSource(path)


def test_default_source_prefers_configured_csv(monkeypatch, tmp_path) -> None:
    path = tmp_path / "readings.csv"
    path.write_text("timestamp,temperature,humidity\n2024-03-05T14:07:00Z,21.5,40\n")
    monkeypatch.setenv("READINGS_CSV_PATH", str(path))
    get_settings.cache_clear()
    build_default_source.cache_clear()

    try:
        source = build_default_source()
        assert isinstance(source, CsvReadingSource)
        assert len(source) == 1
    finally:
        build_default_source.cache_clear()
        get_settings.cache_clear()


def test_default_source_generates_configured_history(monkeypatch) -> None:
    monkeypatch.delenv("READINGS_CSV_PATH", raising=False)
    monkeypatch.setenv("READINGS_HISTORY_DAYS", "2")
    monkeypatch.setenv("READINGS_INTERVAL_MINUTES", "60")
    get_settings.cache_clear()
    build_default_source.cache_clear()

    try:
        source = build_default_source()
        assert not isinstance(source, CsvReadingSource)
        assert len(source) == 2 * 24 + 1
    finally:
        build_default_source.cache_clear()
        get_settings.cache_clear()


def test_csv_naive_timestamps_are_read_in_configured_zone(tmp_path) -> None:
    berlin = ZoneInfo("Europe/Berlin")
    path = tmp_path / "readings.csv"
    path.write_text(
        "timestamp,temperature,humidity\n"
        "2024-03-05T14:07:00,21.5,40\n"
        "2024-03-05T13:30:00Z,19.5,44\n"
    )

    source = CsvReadingSource(path, tz=berlin)
    aggregator = Aggregator(tz=berlin)
    buckets = aggregator.select_by_range(
        source.get_all_readings(), date(2024, 3, 5), date(2024, 3, 5), Granularity.hour
    )

    assert [bucket.label for bucket in buckets] == ["05/03/2024, h:14"]
    assert buckets[0].reading_count == 2


def test_default_source_stamps_csv_with_configured_zone(monkeypatch, tmp_path) -> None:
    path = tmp_path / "readings.csv"
    path.write_text("timestamp,temperature,humidity\n2024-03-05T14:07:00,21.5,40\n")
    monkeypatch.setenv("READINGS_CSV_PATH", str(path))
    monkeypatch.setenv("READINGS_TIMEZONE", "Europe/Berlin")
    get_settings.cache_clear()
    build_default_source.cache_clear()

    try:
        source = build_default_source()
        assert source.get_all_readings()[0].timestamp == datetime(
            2024, 3, 5, 14, 7, tzinfo=ZoneInfo("Europe/Berlin")
        )
    finally:
        build_default_source.cache_clear()
        get_settings.cache_clear()
