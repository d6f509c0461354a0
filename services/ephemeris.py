"""Sunrise, sunset and day length for a point, date and time zone."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from models.records import GeoTimeQuery, SunEvent, SunTimes
from services.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

# Standard refraction plus the solar disk radius.
ZENITH_DEGREES = 90.833
DECLINATION_AMPLITUDE = 0.4095

_MAX_DAY_SHIFTS = 3

DateLike = Union[date, datetime]


class InvalidInputError(ValueError):
    """Raised when coordinates, dates or time zones cannot produce sun times."""


def resolve_zone(name: str) -> ZoneInfo:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("Time zone must be a non-empty IANA identifier.")
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidInputError(f"Unknown time zone {name!r}.") from exc


def _validate_coordinate(value: float, label: str, limit: float) -> float:
    try:
        candidate = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{label} must be a number.") from exc
    if not math.isfinite(candidate) or not -limit <= candidate <= limit:
        raise InvalidInputError(f"{label} must be within [-{limit:g}, {limit:g}], got {value!r}.")
    return candidate


def _civil_date(value: DateLike, zone: ZoneInfo) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(zone).date()
    if isinstance(value, date):
        return value
    raise InvalidInputError(f"Expected a date or datetime, got {type(value).__name__}.")


def _shift(moment: datetime, delta: timedelta, zone: ZoneInfo) -> datetime:
    """Move ``moment`` by an absolute duration and express it in ``zone``."""

    return (moment.astimezone(timezone.utc) + delta).astimezone(zone)


def _align_to_day(moment: datetime, day: date, zone: ZoneInfo) -> datetime:
    for _ in range(_MAX_DAY_SHIFTS):
        difference = (day - moment.astimezone(zone).date()).days
        if difference == 0:
            break
        moment = _shift(moment, timedelta(days=difference), zone)
    return moment


class SolarEphemerisCalculator:
    """Stateless sun-times calculator; the clock only matters for "now" queries."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock = clock or SystemClock()

    def compute(self, query: GeoTimeQuery) -> SunTimes:
        return self.compute_sun_times(
            query.date, query.latitude, query.longitude, query.time_zone
        )

    def compute_sun_times(
        self,
        day: DateLike,
        latitude: float,
        longitude: float,
        time_zone: str,
    ) -> SunTimes:
        zone = resolve_zone(time_zone)
        lat = _validate_coordinate(latitude, "Latitude", 90.0)
        lon = _validate_coordinate(longitude, "Longitude", 180.0)
        civil_day = _civil_date(day, zone)
        start_of_day = datetime.combine(civil_day, time.min, tzinfo=zone)

        n = civil_day.timetuple().tm_yday
        declination = DECLINATION_AMPLITUDE * math.sin(2 * math.pi / 365 * (n - 80))

        b = 2 * math.pi * (n - 81) / 365
        equation_of_time = 9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)

        lat_rad = math.radians(lat)
        zenith = math.radians(ZENITH_DEGREES)
        cos_h = (math.cos(zenith) - math.sin(lat_rad) * math.sin(declination)) / (
            math.cos(lat_rad) * math.cos(declination)
        )

        if cos_h < -1.0:
            logger.debug(
                "Polar day",
                extra={"latitude": lat, "longitude": lon, "time_zone": zone.key},
            )
            return SunTimes(
                sunrise=start_of_day,
                sunset=_shift(start_of_day, timedelta(hours=24), zone),
                day_length=timedelta(hours=24),
            )
        if cos_h > 1.0:
            logger.debug(
                "Polar night",
                extra={"latitude": lat, "longitude": lon, "time_zone": zone.key},
            )
            return SunTimes(sunrise=start_of_day, sunset=start_of_day, day_length=timedelta(0))

        hour_angle = math.degrees(math.acos(cos_h))
        ut_sunrise = 12 - hour_angle / 15 - lon / 15 - equation_of_time / 60
        ut_sunset = 12 + hour_angle / 15 - lon / 15 - equation_of_time / 60

        # The decimal hours are UT, so they are added to UTC midnight and the
        # zone rules in force at that instant decide the local offset.
        utc_midnight = datetime.combine(civil_day, time.min, tzinfo=timezone.utc)
        sunrise = _align_to_day(
            (utc_midnight + timedelta(hours=ut_sunrise)).astimezone(zone),
            civil_day,
            zone,
        )
        sunset = _align_to_day(
            (utc_midnight + timedelta(hours=ut_sunset)).astimezone(zone),
            civil_day,
            zone,
        )
        logger.debug(
            "Computed sun times sunrise=%s sunset=%s ut_sunrise=%.2f ut_sunset=%.2f",
            sunrise.isoformat(),
            sunset.isoformat(),
            ut_sunrise,
            ut_sunset,
            extra={"latitude": lat, "longitude": lon, "time_zone": zone.key},
        )

        day_length = max(sunset - sunrise, timedelta(0))
        return SunTimes(sunrise=sunrise, sunset=sunset, day_length=day_length)

    def is_currently_daylight(self, sun_times: SunTimes) -> bool:
        return sun_times.is_daylight_at(self.clock.now())

    def next_sun_event(self, latitude: float, longitude: float, time_zone: str) -> SunEvent:
        """Return the next sunrise or sunset after "now".

        Falls back to an ``"Unknown"`` event at the current instant when the
        inputs cannot produce sun times.
        """
        now = self.clock.now()
        try:
            zone = resolve_zone(time_zone)
            today = self.compute_sun_times(now, latitude, longitude, time_zone)
        except InvalidInputError as exc:
            logger.warning(
                "Sun event unavailable",
                extra={
                    "latitude": latitude,
                    "longitude": longitude,
                    "time_zone": time_zone,
                    "reason": str(exc),
                },
            )
            return SunEvent(name="Unknown", time=now, is_daylight=False)

        if now < today.sunrise:
            return SunEvent(name="Sunrise", time=today.sunrise, is_daylight=False)
        if now < today.sunset:
            return SunEvent(name="Sunset", time=today.sunset, is_daylight=True)

        tomorrow = now.astimezone(zone).date() + timedelta(days=1)
        upcoming = self.compute_sun_times(tomorrow, latitude, longitude, time_zone)
        return SunEvent(name="Sunrise", time=upcoming.sunrise, is_daylight=False)


@lru_cache
def build_default_calculator() -> SolarEphemerisCalculator:
    return SolarEphemerisCalculator(clock=SystemClock())
