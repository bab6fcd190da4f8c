"""Read-only sources of sensor readings handed to the aggregator."""

from __future__ import annotations

import csv
import logging
import random
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from models.records import Reading
from settings import get_settings

logger = logging.getLogger(__name__)

_REQUIRED_COLUMNS = ("timestamp", "temperature", "humidity")


class ReadingSource(Protocol):
    """Anything able to hand out a timestamp-ordered snapshot of readings."""

    def get_all_readings(self) -> Sequence[Reading]:
        ...


class InMemoryReadingSource:

    def __init__(self, readings: Iterable[Reading]) -> None:
        self._readings: Tuple[Reading, ...] = tuple(
            sorted(readings, key=lambda reading: reading.timestamp)
        )

    def get_all_readings(self) -> Sequence[Reading]:
        return self._readings

    def __len__(self) -> int:
        return len(self._readings)


class CsvReadingSource(InMemoryReadingSource):
    """Snapshot loaded once from a ``timestamp,temperature,humidity`` CSV file.

    Timestamps without an offset are wall-clock time in ``tz``.
    """

    def __init__(self, path: Path, tz: tzinfo = timezone.utc) -> None:
        self.path = path
        self.tz = tz
        super().__init__(_load_csv(path, tz))


def generate_readings(
    now: datetime,
    history_days: int = 366,
    interval_minutes: int = 30,
    seed: Optional[int] = None,
) -> List[Reading]:
    """Produce evenly spaced random readings covering ``history_days`` up to ``now``."""
    if history_days <= 0 or interval_minutes <= 0:
        raise ValueError("history_days and interval_minutes must be positive.")

    rng = random.Random(seed)
    step = timedelta(minutes=interval_minutes)
    moment = now - timedelta(days=history_days)
    readings: List[Reading] = []
    while moment <= now:
        readings.append(
            Reading(
                timestamp=moment,
                temperature=float(rng.randrange(100)),
                humidity=float(rng.randrange(100)),
            )
        )
        moment += step
    return readings


def parse_timestamp(value: str, tz: tzinfo = timezone.utc) -> datetime:
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _load_csv(path: Path, tz: tzinfo) -> List[Reading]:
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError(f"CSV file {path} is missing a header row.")

        normalized = {name.lower().strip(): name for name in reader.fieldnames}
        missing = [column for column in _REQUIRED_COLUMNS if column not in normalized]
        if missing:
            raise ValueError(f"CSV missing required columns: {', '.join(missing)}")

        readings: List[Reading] = []
        for row_number, row in enumerate(reader, start=2):
            timestamp_raw = (row.get(normalized["timestamp"]) or "").strip()
            temperature_raw = (row.get(normalized["temperature"]) or "").strip()
            humidity_raw = (row.get(normalized["humidity"]) or "").strip()
            try:
                readings.append(
                    Reading(
                        timestamp=parse_timestamp(timestamp_raw, tz),
                        temperature=float(temperature_raw),
                        humidity=float(humidity_raw),
                    )
                )
            except ValueError as exc:
                raise ValueError(f"Invalid reading on row {row_number}: {exc}") from exc

    return readings


@lru_cache
def build_default_source(csv_path: Optional[str] = None) -> InMemoryReadingSource:
    """Factory for the process-wide reading snapshot."""
    settings = get_settings()
    path = csv_path if csv_path is not None else settings.csv_path
    if path:
        source: InMemoryReadingSource = CsvReadingSource(Path(path), tz=settings.zone)
        logger.info(
            "Loaded readings from CSV",
            extra={"source": "csv", "path": path, "reading_count": len(source)},
        )
        return source

    readings = generate_readings(
        now=datetime.now(timezone.utc),
        history_days=settings.history_days,
        interval_minutes=settings.interval_minutes,
        seed=settings.seed,
    )
    source = InMemoryReadingSource(readings)
    logger.info(
        "Generated in-memory readings",
        extra={"source": "generated", "reading_count": len(source)},
    )
    return source
