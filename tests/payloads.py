"""Builders for station payload dictionaries used across the tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

GROUP_FIELDS: Dict[str, tuple[str, ...]] = {
    "outdoor": ("temperature", "feels_like", "app_temp", "dew_point", "vpd", "humidity"),
    "indoor": ("temperature", "humidity", "dew_point", "feels_like", "app_tempin"),
    "solar_and_uvi": ("solar", "uvi"),
    "rainfall_piezo": (
        "rain_rate",
        "daily",
        "state",
        "event",
        "1_hour",
        "24_hours",
        "weekly",
        "monthly",
        "yearly",
    ),
    "wind": ("wind_speed", "wind_gust", "wind_direction", "10_minute_average_wind_direction"),
    "pressure": ("relative", "absolute"),
    "lightning": ("distance", "count"),
    "pm25_ch1": ("real_time_aqi", "pm25", "24_hours_aqi"),
    "temp_and_humidity_ch1": ("temperature", "humidity"),
    "temp_and_humidity_ch2": ("temperature",),
    "battery": ("console", "haptic_array_battery"),
}

TOKEN_COUNT = sum(len(fields) for fields in GROUP_FIELDS.values())


def build_payload(
    token: str = "0",
    overrides: Optional[Dict[tuple[str, str], str]] = None,
) -> Dict[str, Any]:
    """Build a minimal station payload where every measurement carries ``token``.

    ``overrides`` maps ``(group, field)`` to a replacement token.
    """

    overrides = overrides or {}
    payload: Dict[str, Any] = {}
    for group, fields in GROUP_FIELDS.items():
        payload[group] = {
            field: {
                "time": overrides.get((group, field), token),
                "unit": "",
                "value": "1",
            }
            for field in fields
        }
    return payload
