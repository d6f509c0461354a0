"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.records import SunEvent, SunTimes, TimestampAnalysis
from models.weather import WeatherStation, WeatherStationData
from services.observations import ObservationSummary


class SunTimesResponse(BaseModel):
    """Sun times for one civil day in the requested zone."""

    sunrise: datetime
    sunset: datetime
    day_length_seconds: float = Field(..., ge=0)
    day_length: str = Field(..., description="Day length formatted as e.g. '12h 06m'.")
    is_daylight: bool = Field(..., description="Whether it is currently between sunrise and sunset.")

    @classmethod
    def from_sun_times(cls, sun_times: SunTimes, is_daylight: bool) -> "SunTimesResponse":
        return cls(
            sunrise=sun_times.sunrise,
            sunset=sun_times.sunset,
            day_length_seconds=sun_times.day_length.total_seconds(),
            day_length=sun_times.format_day_length(),
            is_daylight=is_daylight,
        )


class SunEventResponse(BaseModel):
    event: str
    time: datetime
    is_daylight: bool

    @classmethod
    def from_event(cls, event: SunEvent) -> "SunEventResponse":
        return cls(event=event.name, time=event.time, is_daylight=event.is_daylight)


class TimestampParseRequest(BaseModel):
    token: str
    known_offset_years: int = 0


class TimestampParseResponse(BaseModel):
    token: str
    parsed: Optional[datetime] = None


class ObservationRequest(BaseModel):
    station: WeatherStation
    payload: WeatherStationData


class ObservationSummaryResponse(BaseModel):
    """Normalized freshness and day/night state for one payload."""

    station: str
    recorded_at: datetime
    valid_timestamp_count: int = Field(..., ge=0)
    degraded: bool = Field(
        ..., description="True when no token parsed and a synthetic recent time was used."
    )
    data_age: str
    is_fresh: bool
    sun_times: Optional[SunTimesResponse] = None

    @classmethod
    def from_summary(cls, summary: ObservationSummary) -> "ObservationSummaryResponse":
        sun_times = None
        if summary.sun_times is not None:
            sun_times = SunTimesResponse.from_sun_times(
                summary.sun_times, bool(summary.is_daylight)
            )
        return cls(
            station=summary.station,
            recorded_at=summary.recorded_at,
            valid_timestamp_count=summary.valid_timestamp_count,
            degraded=summary.degraded,
            data_age=summary.data_age,
            is_fresh=summary.is_fresh,
            sun_times=sun_times,
        )


class AnalysisRequest(BaseModel):
    payload: WeatherStationData


class TimestampAnalysisRow(BaseModel):
    group: str
    index: int = Field(..., ge=0)
    token: str
    parsed: Optional[datetime] = None

    @classmethod
    def from_analysis(cls, row: TimestampAnalysis) -> "TimestampAnalysisRow":
        return cls(group=row.group, index=row.index, token=row.token, parsed=row.parsed)


class AnalysisResponse(BaseModel):
    rows: List[TimestampAnalysisRow] = Field(default_factory=list)
    valid_count: int = Field(..., ge=0)
