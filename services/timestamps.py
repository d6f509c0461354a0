"""Parsing and reconciliation of per-sensor recorded-at tokens."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import List, Optional

from models.records import TimestampAnalysis
from models.weather import WeatherStation, WeatherStationData
from services.clock import Clock, SystemClock
from settings import get_settings

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MIN_PLAUSIBLE_YEAR = 2020
MILLISECONDS_THRESHOLD = 1_000_000_000_000
SECONDS_PER_YEAR = 31_536_000
NO_DATA_FALLBACK = timedelta(seconds=30)

# Order matters: several layouts are ambiguous for the same input.
DATE_LAYOUTS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
)

_EMPTY_TOKENS = {"", "0"}


class OutOfRangePolicy(str, Enum):
    """What ``parse_timestamp`` does with an epoch that is neither plausible seconds nor ms."""

    reject = "reject"
    substitute_now = "substitute_now"


class TimestampOutOfRangeError(ValueError):
    """Raised when an epoch value is implausible as both seconds and milliseconds."""

    def __init__(self, value: float) -> None:
        super().__init__(f"Epoch value {value!r} is outside the plausible range.")
        self.value = value


def _parse_number(token: str) -> Optional[float]:
    try:
        value = float(token)
    except ValueError:
        return None
    return value


def _from_epoch(seconds: float) -> Optional[datetime]:
    try:
        return EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        return None


class TimestampNormalizer:
    """Turns unreliable station tokens into a best-effort recorded-at instant."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        out_of_range_policy: OutOfRangePolicy = OutOfRangePolicy.reject,
    ) -> None:
        self.clock = clock or SystemClock()
        self.out_of_range_policy = OutOfRangePolicy(out_of_range_policy)

    def _is_plausible(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        current_year = self.clock.now().year
        return MIN_PLAUSIBLE_YEAR <= moment.year <= current_year + 1

    def parse_epoch(self, value: float) -> datetime:
        """Interpret ``value`` as epoch seconds, retrying as milliseconds.

        Raises:
            TimestampOutOfRangeError: if neither reading lands in a plausible year.
        """
        moment = _from_epoch(value)
        if self._is_plausible(moment):
            return moment

        if value > MILLISECONDS_THRESHOLD:
            moment = _from_epoch(value / 1000)
            if self._is_plausible(moment):
                logger.debug("Interpreted epoch as milliseconds", extra={"token": value})
                return moment

        raise TimestampOutOfRangeError(value)

    def parse_timestamp(self, token: str) -> Optional[datetime]:
        candidate = (token or "").strip()
        if candidate in _EMPTY_TOKENS:
            return None

        number = _parse_number(candidate)
        if number is not None:
            if not math.isfinite(number):
                logger.debug("Non-finite numeric timestamp", extra={"token": candidate})
                return None
            try:
                return self.parse_epoch(number)
            except TimestampOutOfRangeError:
                if self.out_of_range_policy is OutOfRangePolicy.substitute_now:
                    logger.warning(
                        "Implausible epoch timestamp, substituting current time",
                        extra={"token": candidate},
                    )
                    return self.clock.now()
                logger.warning("Implausible epoch timestamp dropped", extra={"token": candidate})
                return None

        for layout in DATE_LAYOUTS:
            try:
                parsed = datetime.strptime(candidate, layout)
            except ValueError:
                continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)

        logger.debug("Could not parse timestamp", extra={"token": candidate})
        return None

    def collect_timestamps(self, payload: WeatherStationData) -> List[datetime]:
        valid: List[datetime] = []
        for group, source in payload.timestamp_sources():
            tokens = source.all_timestamps()
            parsed = [moment for moment in map(self.parse_timestamp, tokens) if moment is not None]
            if tokens and not parsed:
                logger.debug(
                    "No valid timestamps in sensor group",
                    extra={"group": group, "timestamp_count": len(tokens)},
                )
            valid.extend(parsed)
        return valid

    def extract_most_recent_timestamp(self, payload: WeatherStationData) -> datetime:
        """Return the newest parsed token, or ``now - 30s`` when none parse."""

        return self.most_recent(self.collect_timestamps(payload))

    def most_recent(self, valid: List[datetime]) -> datetime:
        if not valid:
            logger.warning(
                "No valid timestamps in weather data; check the API timestamp format",
                extra={"timestamp_count": 0},
            )
            return self.clock.now() - NO_DATA_FALLBACK

        newest = max(set(valid))
        logger.debug(
            "Most recent data timestamp %s",
            newest.isoformat(),
            extra={"timestamp_count": len(valid)},
        )
        return newest

    def analyze_timestamps(self, payload: WeatherStationData) -> List[TimestampAnalysis]:
        rows: List[TimestampAnalysis] = []
        for group, source in payload.timestamp_sources():
            for index, token in enumerate(source.all_timestamps()):
                rows.append(
                    TimestampAnalysis(
                        group=group,
                        index=index,
                        token=token,
                        parsed=self.parse_timestamp(token),
                    )
                )
        return rows

    def correct_timestamp(self, token: str, known_offset_years: int = 0) -> Optional[datetime]:
        """Apply a known whole-year skew to an epoch token before validating it."""

        number = _parse_number((token or "").strip())
        if number is None or not math.isfinite(number):
            return self.parse_timestamp(token)

        corrected = _from_epoch(number - known_offset_years * SECONDS_PER_YEAR)
        if self._is_plausible(corrected):
            return corrected
        return self.parse_timestamp(token)

    def format_data_age(self, recorded: datetime, now: Optional[datetime] = None) -> str:
        reference = now or self.clock.now()
        age = (reference - recorded).total_seconds()
        if age < 60:
            return f"{int(age)}s ago"
        if age < 3600:
            return f"{int(age / 60)}m ago"
        if age < 86400:
            return f"{int(age / 3600)}h ago"
        return f"{int(age / 86400)}d ago"

    def is_data_fresh(
        self,
        recorded: datetime,
        freshness: timedelta,
        now: Optional[datetime] = None,
    ) -> bool:
        reference = now or self.clock.now()
        return reference - recorded < freshness

    @staticmethod
    def format_timestamp(
        moment: datetime,
        station: WeatherStation,
        fmt: str = "%Y-%m-%d %H:%M:%S %Z",
        default_zone: str = "UTC",
    ) -> str:
        """Render ``moment`` in the station's local time zone."""

        return moment.astimezone(station.zone(default_zone)).strftime(fmt)


@lru_cache
def build_default_normalizer() -> TimestampNormalizer:
    settings = get_settings()
    return TimestampNormalizer(
        clock=SystemClock(),
        out_of_range_policy=OutOfRangePolicy(settings.out_of_range_policy),
    )
