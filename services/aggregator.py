"""Aggregation logic for sensor readings."""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from functools import lru_cache
from typing import Callable, Dict, Iterable, List, Optional, Type, TypeVar, cast

from models.records import BucketResult, Reading, SeriesPoint
from services.params import (
    Granularity,
    InvalidArgument,
    SeriesField,
    Window,
    parse_granularity,
    parse_series_field,
    parse_window,
)
from settings import get_settings

__all__ = [
    "Aggregator",
    "Granularity",
    "InvalidArgument",
    "SeriesField",
    "Window",
    "build_default_aggregator",
]

logger = logging.getLogger(__name__)

_LABEL_DATE_FORMAT = "%d/%m/%Y"

_E = TypeVar("_E", bound=Enum)

_PARSERS: Dict[type, Callable[[Optional[str]], Enum]] = {
    Granularity: parse_granularity,
    Window: parse_window,
    SeriesField: parse_series_field,
}


def _coerce(enum_type: Type[_E], value: object, name: str) -> _E:
    if isinstance(value, enum_type):
        return value
    if value is None or isinstance(value, str):
        return cast(_E, _PARSERS[enum_type](value))
    raise InvalidArgument(f"Unrecognized {name}: {value!r}.")


class Aggregator:
    """Selects readings by time range and averages them into buckets.

    Every operation is a pure function of the readings handed in, the
    arguments, and (for windows) the injected clock. Naive timestamps are
    read as wall-clock time in ``tz``; aware ones are converted to it before
    dates and hours are extracted.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        tz: Optional[tzinfo] = None,
        first_weekday: int = calendar.SUNDAY,
    ) -> None:
        self.tz = tz or timezone.utc
        self.first_weekday = first_weekday
        self._clock = clock or (lambda: datetime.now(self.tz))

    def now(self) -> datetime:
        return self._localize(self._clock())

    def select_by_range(
        self,
        readings: Iterable[Reading],
        start_date: date | datetime | None,
        end_date: date | datetime | None,
        granularity: Granularity | str | None,
    ) -> List[BucketResult]:
        """Bucket readings whose calendar date lies in ``[start_date, end_date]``.

        An inverted range is a valid query with no data and yields an empty list.
        """
        start = self._as_date(start_date, "start_date")
        end = self._as_date(end_date, "end_date")
        step = _coerce(Granularity, granularity, "granularity")

        if end < start:
            logger.debug(
                "End date precedes start date; returning no buckets",
                extra={"start_date": start, "end_date": end},
            )
            return []

        selected = [
            reading
            for reading in readings
            if start <= self._localize(reading.timestamp).date() <= end
        ]
        buckets = self._bucket(selected, step)
        logger.debug(
            "Aggregated explicit range",
            extra={
                "start_date": start,
                "end_date": end,
                "granularity": step.value,
                "reading_count": len(selected),
                "bucket_count": len(buckets),
            },
        )
        return buckets

    def window_start(self, window: Window | str | None) -> datetime:
        """Inclusive lower bound of ``window`` relative to the clock."""
        selected = _coerce(Window, window, "window")
        now = self.now()
        if selected is Window.last_12_hours:
            # Elapsed time, so step back in UTC rather than on the local wall clock.
            return (now.astimezone(timezone.utc) - timedelta(hours=12)).astimezone(self.tz)

        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if selected is Window.last_day:
            return midnight
        if selected is Window.last_week:
            offset = (midnight.weekday() - self.first_weekday) % 7
            return midnight - timedelta(days=offset)
        if selected is Window.last_month:
            return midnight.replace(day=1)
        return midnight.replace(month=1, day=1)

    def select_by_window(
        self, readings: Iterable[Reading], window: Window | str | None
    ) -> List[BucketResult]:
        selected_window = _coerce(Window, window, "window")
        boundary = self.window_start(selected_window).astimezone(timezone.utc)
        selected = [
            reading
            for reading in readings
            if self._localize(reading.timestamp).astimezone(timezone.utc) >= boundary
        ]
        buckets = self._bucket(selected, selected_window.granularity)
        logger.debug(
            "Aggregated relative window",
            extra={
                "window": selected_window.value,
                "granularity": selected_window.granularity.value,
                "reading_count": len(selected),
                "bucket_count": len(buckets),
            },
        )
        return buckets

    def project_series(
        self, readings: Iterable[Reading], field: SeriesField | str | None
    ) -> List[SeriesPoint]:
        """Expose one field of every reading, unfiltered and in original order."""
        selected = _coerce(SeriesField, field, "field")
        return [
            SeriesPoint(timestamp=reading.timestamp, value=getattr(reading, selected.value))
            for reading in readings
        ]

    def _bucket(
        self, readings: Iterable[Reading], granularity: Granularity
    ) -> List[BucketResult]:
        # Labels map one-to-one onto group keys; dict order keeps first-seen order.
        totals: Dict[str, List[float]] = {}
        for reading in readings:
            label = self._group_label(reading, granularity)
            entry = totals.get(label)
            if entry is None:
                entry = totals[label] = [0, 0.0, 0.0]
            entry[0] += 1
            entry[1] += reading.temperature
            entry[2] += reading.humidity

        return [
            BucketResult(
                label=label,
                avg_temperature=temperature / count,
                avg_humidity=humidity / count,
                reading_count=int(count),
            )
            for label, (count, temperature, humidity) in totals.items()
        ]

    def _group_label(self, reading: Reading, granularity: Granularity) -> str:
        local = self._localize(reading.timestamp)
        if granularity is Granularity.hour:
            return f"{local.strftime(_LABEL_DATE_FORMAT)}, h:{local.hour}"
        if granularity is Granularity.day:
            return local.strftime(_LABEL_DATE_FORMAT)
        # Month of year only: the same month in different years shares a bucket.
        return str(local.month)

    def _as_date(self, value: object, name: str) -> date:
        if value is None or value == "":
            raise InvalidArgument(f"{name} is required.")
        # datetime is a date subclass, so it has to be checked first.
        if isinstance(value, datetime):
            return self._localize(value).date()
        if isinstance(value, date):
            return value
        raise InvalidArgument(f"{name} must be a date, got {type(value).__name__}.")

    def _localize(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment.astimezone(self.tz)


@lru_cache
def build_default_aggregator() -> Aggregator:
    """Factory that wires the aggregator with the configured calendar."""
    settings = get_settings()
    tz = settings.zone
    if tz is timezone.utc:
        logger.warning(
            "Unknown timezone; falling back to UTC",
            extra={"reason": settings.timezone},
        )
    return Aggregator(tz=tz, first_weekday=settings.first_weekday)
