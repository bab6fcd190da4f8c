"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from models.records import BucketResult, SeriesPoint


class IndicatorDto(BaseModel):
    """One averaged bucket as consumed by chart clients."""

    model_config = ConfigDict(populate_by_name=True)

    date_time: str = Field(
        ...,
        alias="DateTime",
        description="Bucket label: 'dd/MM/yyyy, h:H', 'dd/MM/yyyy' or the month number.",
    )
    temperature: float = Field(..., alias="Temperature")
    humidity: float = Field(..., alias="Humidity")

    @classmethod
    def from_bucket(cls, bucket: BucketResult) -> "IndicatorDto":
        return cls(
            date_time=bucket.label,
            temperature=bucket.avg_temperature,
            humidity=bucket.avg_humidity,
        )


class SimpleIndicator(BaseModel):
    """A single raw sample of one measured field."""

    model_config = ConfigDict(populate_by_name=True)

    date_time: datetime = Field(..., alias="DateTime")
    value: float = Field(..., alias="Value")

    @classmethod
    def from_point(cls, point: SeriesPoint) -> "SimpleIndicator":
        return cls(date_time=point.timestamp, value=point.value)
