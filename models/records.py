"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Reading:
    """A single timestamped temperature/humidity sample."""

    timestamp: datetime
    temperature: float
    humidity: float


@dataclass(frozen=True, slots=True)
class BucketResult:
    """Averaged values for every reading sharing one group key."""

    label: str
    avg_temperature: float
    avg_humidity: float
    reading_count: int


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    """One field of one reading, as exposed by raw-series consumers."""

    timestamp: datetime
    value: float
