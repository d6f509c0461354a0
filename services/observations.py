"""Composition of the timestamp and ephemeris services for one station."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional

from models.records import SunTimes
from models.weather import WeatherStation, WeatherStationData
from services.ephemeris import SolarEphemerisCalculator, build_default_calculator
from services.timestamps import TimestampNormalizer, build_default_normalizer
from settings import get_settings


@dataclass
class ObservationSummary:
    """What a dashboard tile needs to show freshness and day/night state."""

    station: str
    recorded_at: datetime
    valid_timestamp_count: int
    degraded: bool
    data_age: str
    is_fresh: bool
    sun_times: Optional[SunTimes] = None
    is_daylight: Optional[bool] = None


class ObservationService:
    """Collects results from both services; owns no algorithm of its own."""

    def __init__(
        self,
        normalizer: TimestampNormalizer,
        calculator: SolarEphemerisCalculator,
        freshness: timedelta = timedelta(minutes=5),
        default_time_zone: str = "UTC",
    ) -> None:
        self.normalizer = normalizer
        self.calculator = calculator
        self.freshness = freshness
        self.default_time_zone = default_time_zone

    def summarize(self, station: WeatherStation, payload: WeatherStationData) -> ObservationSummary:
        now = self.normalizer.clock.now()
        valid = self.normalizer.collect_timestamps(payload)
        valid_count = len(valid)
        recorded_at = self.normalizer.most_recent(valid)

        summary = ObservationSummary(
            station=station.name,
            recorded_at=recorded_at,
            valid_timestamp_count=valid_count,
            degraded=valid_count == 0,
            data_age=self.normalizer.format_data_age(recorded_at, now=now),
            is_fresh=self.normalizer.is_data_fresh(recorded_at, self.freshness, now=now),
        )

        if station.has_location:
            zone = station.zone(self.default_time_zone)
            sun_times = self.calculator.compute_sun_times(
                now, station.latitude, station.longitude, zone.key
            )
            summary.sun_times = sun_times
            summary.is_daylight = sun_times.is_daylight_at(now)

        return summary


@lru_cache
def build_default_observation_service() -> ObservationService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    return ObservationService(
        normalizer=build_default_normalizer(),
        calculator=build_default_calculator(),
        freshness=timedelta(seconds=settings.freshness_seconds),
        default_time_zone=settings.default_time_zone,
    )
