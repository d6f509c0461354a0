"""Value types shared across the ephemeris and timestamp services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional


@dataclass(frozen=True, slots=True)
class GeoTimeQuery:
    """A calendar date at a point on Earth, rendered in an IANA time zone."""

    date: date
    latitude: float
    longitude: float
    time_zone: str


@dataclass(frozen=True, slots=True)
class SunTimes:
    """Sunrise, sunset and day length for one civil day.

    ``sunset >= sunrise`` except for polar night, where both are local
    midnight and ``day_length`` is zero. Polar day spans a full 24 hours.
    """

    sunrise: datetime
    sunset: datetime
    day_length: timedelta

    def is_daylight_at(self, moment: datetime) -> bool:
        return self.sunrise <= moment <= self.sunset

    def format_day_length(self) -> str:
        total_seconds = int(self.day_length.total_seconds())
        hours, remainder = divmod(total_seconds, 3600)
        return f"{hours}h {remainder // 60:02d}m"


@dataclass(frozen=True, slots=True)
class SunEvent:
    """The next sunrise or sunset relative to "now"."""

    name: str
    time: datetime
    is_daylight: bool


@dataclass(slots=True)
class TimestampAnalysis:
    """Diagnostic row describing how one raw token was interpreted."""

    group: str
    index: int
    token: str
    parsed: Optional[datetime]
