"""Weather station payload models.

Each sensor group knows which of its measurements carry a recorded-at token
and exposes them through ``all_timestamps`` so the normalizer can treat the
groups uniformly.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class TimestampSource(Protocol):
    def all_timestamps(self) -> List[str]:
        ...


class _Group(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Measurement(BaseModel):
    """A single reading as reported by the station API."""

    time: str = ""
    unit: str = ""
    value: str = ""


class OutdoorData(_Group):
    temperature: Measurement
    feels_like: Measurement
    app_temp: Measurement
    dew_point: Measurement
    vpd: Measurement
    humidity: Measurement

    def all_timestamps(self) -> List[str]:
        return [
            self.temperature.time,
            self.feels_like.time,
            self.app_temp.time,
            self.dew_point.time,
            self.vpd.time,
            self.humidity.time,
        ]


class IndoorData(_Group):
    temperature: Measurement
    humidity: Measurement
    dew_point: Measurement
    feels_like: Measurement
    app_temp_in: Measurement = Field(..., alias="app_tempin")

    def all_timestamps(self) -> List[str]:
        return [
            self.temperature.time,
            self.humidity.time,
            self.dew_point.time,
            self.feels_like.time,
            self.app_temp_in.time,
        ]


class SolarAndUVIData(_Group):
    solar: Measurement
    uvi: Measurement

    def all_timestamps(self) -> List[str]:
        return [self.solar.time, self.uvi.time]


class RainfallData(_Group):
    """Traditional tipping-bucket gauge."""

    rain_rate: Measurement
    daily: Measurement
    event: Measurement
    one_hour: Measurement = Field(..., alias="1_hour")
    twenty_four_hours: Measurement = Field(..., alias="24_hours")
    weekly: Measurement
    monthly: Measurement
    yearly: Measurement

    def all_timestamps(self) -> List[str]:
        return [
            self.rain_rate.time,
            self.daily.time,
            self.event.time,
            self.one_hour.time,
            self.twenty_four_hours.time,
            self.weekly.time,
            self.monthly.time,
            self.yearly.time,
        ]


class RainfallPiezoData(_Group):
    rain_rate: Measurement
    daily: Measurement
    state: Measurement
    event: Measurement
    one_hour: Measurement = Field(..., alias="1_hour")
    twenty_four_hours: Measurement = Field(..., alias="24_hours")
    weekly: Measurement
    monthly: Measurement
    yearly: Measurement

    def all_timestamps(self) -> List[str]:
        return [
            self.rain_rate.time,
            self.daily.time,
            self.state.time,
            self.event.time,
            self.one_hour.time,
            self.twenty_four_hours.time,
            self.weekly.time,
            self.monthly.time,
            self.yearly.time,
        ]


class WindData(_Group):
    wind_speed: Measurement
    wind_gust: Measurement
    wind_direction: Measurement
    ten_minute_average_wind_direction: Measurement = Field(
        ..., alias="10_minute_average_wind_direction"
    )

    def all_timestamps(self) -> List[str]:
        return [
            self.wind_speed.time,
            self.wind_gust.time,
            self.wind_direction.time,
            self.ten_minute_average_wind_direction.time,
        ]


class PressureData(_Group):
    relative: Measurement
    absolute: Measurement

    def all_timestamps(self) -> List[str]:
        return [self.relative.time, self.absolute.time]


class LightningData(_Group):
    distance: Measurement
    count: Measurement

    def all_timestamps(self) -> List[str]:
        return [self.distance.time, self.count.time]


class PM25Data(_Group):
    real_time_aqi: Measurement
    pm25: Measurement
    twenty_four_hours_aqi: Measurement = Field(..., alias="24_hours_aqi")

    def all_timestamps(self) -> List[str]:
        return [
            self.real_time_aqi.time,
            self.pm25.time,
            self.twenty_four_hours_aqi.time,
        ]


class TempHumidityData(_Group):
    temperature: Measurement
    humidity: Optional[Measurement] = None

    def all_timestamps(self) -> List[str]:
        timestamps = [self.temperature.time]
        if self.humidity is not None:
            timestamps.append(self.humidity.time)
        return timestamps


class BatteryData(_Group):
    console: Optional[Measurement] = None
    haptic_array_battery: Optional[Measurement] = None
    haptic_array_capacitor: Optional[Measurement] = None
    rainfall_sensor: Optional[Measurement] = None
    lightning_sensor: Optional[Measurement] = None
    pm25_sensor_ch1: Optional[Measurement] = None
    pm25_sensor_ch2: Optional[Measurement] = None
    temp_humidity_sensor_ch1: Optional[Measurement] = None
    temp_humidity_sensor_ch2: Optional[Measurement] = None
    temp_humidity_sensor_ch3: Optional[Measurement] = None

    def all_timestamps(self) -> List[str]:
        sensors = (
            self.console,
            self.haptic_array_battery,
            self.haptic_array_capacitor,
            self.rainfall_sensor,
            self.lightning_sensor,
            self.pm25_sensor_ch1,
            self.pm25_sensor_ch2,
            self.temp_humidity_sensor_ch1,
            self.temp_humidity_sensor_ch2,
            self.temp_humidity_sensor_ch3,
        )
        return [sensor.time for sensor in sensors if sensor is not None]


_REQUIRED_GROUPS = (
    "outdoor",
    "indoor",
    "solar_and_uvi",
    "wind",
    "pressure",
    "rainfall_piezo",
    "lightning",
    "pm25_ch1",
    "temp_and_humidity_ch1",
    "temp_and_humidity_ch2",
    "battery",
)

_OPTIONAL_GROUPS = (
    "rainfall",
    "pm25_ch2",
    "pm25_ch3",
    "temp_and_humidity_ch3",
)


class WeatherStationData(_Group):
    """Real-time sensor groups for one station."""

    outdoor: OutdoorData
    indoor: IndoorData
    solar_and_uvi: SolarAndUVIData
    rainfall: Optional[RainfallData] = None
    rainfall_piezo: RainfallPiezoData
    wind: WindData
    pressure: PressureData
    lightning: LightningData
    pm25_ch1: PM25Data
    pm25_ch2: Optional[PM25Data] = None
    pm25_ch3: Optional[PM25Data] = None
    temp_and_humidity_ch1: TempHumidityData
    temp_and_humidity_ch2: TempHumidityData
    temp_and_humidity_ch3: Optional[TempHumidityData] = None
    battery: BatteryData

    def timestamp_sources(self) -> List[Tuple[str, TimestampSource]]:
        """Return ``(group_name, group)`` for every group present in the payload."""

        sources: List[Tuple[str, TimestampSource]] = []
        for name in _REQUIRED_GROUPS + _OPTIONAL_GROUPS:
            group = getattr(self, name)
            if group is not None:
                sources.append((name, group))
        return sources


class WeatherStationResponse(BaseModel):
    """Envelope returned by the station real-time endpoint."""

    code: int = 0
    msg: str = ""
    time: str = ""
    data: WeatherStationData


class WeatherStation(BaseModel):
    """A configured station and the location used for sun calculations."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    mac_address: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    time_zone_id: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def zone(self, default: str = "UTC") -> ZoneInfo:
        """Resolve the station's zone, falling back to ``default`` if unset or unknown."""

        if self.time_zone_id:
            try:
                return ZoneInfo(self.time_zone_id)
            except (ZoneInfoNotFoundError, ValueError):
                logger.warning(
                    "Unknown station time zone, using default",
                    extra={"station": self.name, "time_zone": self.time_zone_id},
                )
        return ZoneInfo(default)
