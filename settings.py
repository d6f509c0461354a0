from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


_FRESHNESS_ENV = "STATION_FRESHNESS_SECONDS"
_DEFAULT_TZ_ENV = "STATION_DEFAULT_TIMEZONE"
_OUT_OF_RANGE_POLICY_ENV = "TIMESTAMP_OUT_OF_RANGE_POLICY"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_POLICIES = ("reject", "substitute_now")


@dataclass(frozen=True)
class Settings:
    freshness_seconds: float
    default_time_zone: str
    out_of_range_policy: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_freshness(default: float) -> float:
    value = os.getenv(_FRESHNESS_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_policy(default: str) -> str:
    candidate = _read_str_env(_OUT_OF_RANGE_POLICY_ENV, default).lower()
    return candidate if candidate in _POLICIES else default


def _read_timezone(default: str) -> str:
    candidate = _read_str_env(_DEFAULT_TZ_ENV, default)
    try:
        ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError):
        return default
    return candidate


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        freshness_seconds=_read_freshness(300.0),
        default_time_zone=_read_timezone("UTC"),
        out_of_range_policy=_read_policy("reject"),
        log_level=_read_log_level("INFO"),
    )
