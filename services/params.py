"""Aggregation parameters and the conversion of raw tokens into them."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Dict, Optional


class InvalidArgument(ValueError):
    """Raised when a selection parameter is missing or not recognised."""


class Granularity(str, Enum):
    """Time unit used to form bucket keys."""

    hour = "hour"
    day = "day"
    month = "month"


class Window(str, Enum):
    """Relative, now-anchored ranges."""

    last_12_hours = "last12hours"
    last_day = "lastday"
    last_week = "lastweek"
    last_month = "lastmonth"
    last_year = "lastyear"

    @property
    def granularity(self) -> Granularity:
        return _WINDOW_GRANULARITY[self]


class SeriesField(str, Enum):
    temperature = "temperature"
    humidity = "humidity"


_WINDOW_GRANULARITY: Dict[Window, Granularity] = {
    Window.last_12_hours: Granularity.hour,
    Window.last_day: Granularity.hour,
    Window.last_week: Granularity.day,
    Window.last_month: Granularity.day,
    Window.last_year: Granularity.day,
}

_GRANULARITY_TOKENS: Dict[str, Granularity] = {
    "hour": Granularity.hour,
    "hours": Granularity.hour,
    "0": Granularity.hour,
    "day": Granularity.day,
    "days": Granularity.day,
    "1": Granularity.day,
    "month": Granularity.month,
    "months": Granularity.month,
    "2": Granularity.month,
}

# Legacy step names and their numeric values are still accepted for windows.
_WINDOW_TOKENS: Dict[str, Window] = {
    **{window.value: window for window in Window},
    "hours": Window.last_12_hours,
    "0": Window.last_12_hours,
    "day": Window.last_day,
    "1": Window.last_day,
    "months": Window.last_month,
    "2": Window.last_month,
    "week": Window.last_week,
    "3": Window.last_week,
    "year": Window.last_year,
    "4": Window.last_year,
}

_SERIES_TOKENS: Dict[str, SeriesField] = {field.value: field for field in SeriesField}


def _normalize(token: Optional[str], name: str) -> str:
    if token is None:
        raise InvalidArgument(f"{name} is required.")
    candidate = token.strip().lower()
    if not candidate:
        raise InvalidArgument(f"{name} is required.")
    return candidate


def parse_granularity(token: Optional[str]) -> Granularity:
    candidate = _normalize(token, "step")
    try:
        return _GRANULARITY_TOKENS[candidate]
    except KeyError as exc:
        raise InvalidArgument(f"Unrecognized step: {token!r}.") from exc


def parse_window(token: Optional[str]) -> Window:
    candidate = _normalize(token, "param").replace("-", "").replace("_", "")
    try:
        return _WINDOW_TOKENS[candidate]
    except KeyError as exc:
        raise InvalidArgument(f"Unrecognized window: {token!r}.") from exc


def parse_series_field(token: Optional[str]) -> SeriesField:
    candidate = _normalize(token, "field")
    try:
        return _SERIES_TOKENS[candidate]
    except KeyError as exc:
        raise InvalidArgument(f"Unrecognized series field: {token!r}.") from exc


def parse_date(value: Optional[str], name: str = "date") -> date:
    """Parse an ISO-8601 date/datetime or a ``dd/MM/yyyy`` label into a date."""
    if value is None or not value.strip():
        raise InvalidArgument(f"{name} is required.")

    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(candidate).date()
    except ValueError:
        pass

    try:
        return datetime.strptime(candidate, "%d/%m/%Y").date()
    except ValueError as exc:
        raise InvalidArgument(f"Invalid {name}: {value!r}.") from exc
