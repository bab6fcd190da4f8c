"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import IndicatorDto, SimpleIndicator
from datasource.readings import ReadingSource, build_default_source
from services.aggregator import (
    Aggregator,
    InvalidArgument,
    SeriesField,
    build_default_aggregator,
)
from services.params import parse_date, parse_granularity, parse_window

logger = logging.getLogger(__name__)

router = APIRouter()


def get_source() -> ReadingSource:
    return build_default_source()


def get_aggregator() -> Aggregator:
    return build_default_aggregator()


def _bad_request(exc: InvalidArgument, **context: object) -> HTTPException:
    logger.warning("Rejected indicator query", extra={"reason": str(exc), **context})
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _series(
    source: ReadingSource, aggregator: Aggregator, field: SeriesField
) -> List[SimpleIndicator]:
    points = aggregator.project_series(source.get_all_readings(), field)
    return [SimpleIndicator.from_point(point) for point in points]


@router.get(
    "/indicators",
    response_model=List[IndicatorDto],
    summary="Average readings between two dates, grouped by hour, day or month.",
)
async def get_indicators(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    step: Optional[str] = Query(None, description="hour, day or month."),
    source: ReadingSource = Depends(get_source),
    aggregator: Aggregator = Depends(get_aggregator),
) -> List[IndicatorDto]:
    try:
        buckets = aggregator.select_by_range(
            source.get_all_readings(),
            parse_date(start_date, "startDate"),
            parse_date(end_date, "endDate"),
            parse_granularity(step),
        )
    except InvalidArgument as exc:
        raise _bad_request(
            exc, start_date=start_date, end_date=end_date, granularity=step
        ) from exc
    return [IndicatorDto.from_bucket(bucket) for bucket in buckets]


@router.get(
    "/indicators/GetAllTemperatureData",
    response_model=List[SimpleIndicator],
    summary="Every raw temperature sample.",
)
async def get_all_temperature_data(
    source: ReadingSource = Depends(get_source),
    aggregator: Aggregator = Depends(get_aggregator),
) -> List[SimpleIndicator]:
    return _series(source, aggregator, SeriesField.temperature)


@router.get(
    "/indicators/GetAllHumidityData",
    response_model=List[SimpleIndicator],
    summary="Every raw humidity sample.",
)
async def get_all_humidity_data(
    source: ReadingSource = Depends(get_source),
    aggregator: Aggregator = Depends(get_aggregator),
) -> List[SimpleIndicator]:
    return _series(source, aggregator, SeriesField.humidity)


@router.get(
    "/indicators/GetData",
    response_model=List[IndicatorDto],
    summary="Average readings over the last 12 hours, day, week, month or year.",
)
async def get_window_data(
    param: Optional[str] = Query(None, description="Window name, e.g. lastweek."),
    source: ReadingSource = Depends(get_source),
    aggregator: Aggregator = Depends(get_aggregator),
) -> List[IndicatorDto]:
    try:
        buckets = aggregator.select_by_window(source.get_all_readings(), parse_window(param))
    except InvalidArgument as exc:
        raise _bad_request(exc, window=param) from exc
    return [IndicatorDto.from_bucket(bucket) for bucket in buckets]


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
