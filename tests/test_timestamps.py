from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from models.weather import WeatherStation, WeatherStationData
from services.clock import FixedClock, SystemClock
from services.timestamps import (
    OutOfRangePolicy,
    TimestampNormalizer,
    TimestampOutOfRangeError,
)
from tests.payloads import NOW, TOKEN_COUNT, build_payload

EXPECTED_2023 = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


@pytest.fixture()
def normalizer(clock: FixedClock) -> TimestampNormalizer:
    return TimestampNormalizer(clock=clock)


@pytest.mark.parametrize("token", ["", "0", "  ", " 0 "])
def test_empty_tokens_mean_no_data(normalizer: TimestampNormalizer, token: str) -> None:
    assert normalizer.parse_timestamp(token) is None


def test_epoch_seconds(normalizer: TimestampNormalizer) -> None:
    assert normalizer.parse_timestamp("1700000000") == EXPECTED_2023


def test_epoch_milliseconds_are_corrected(normalizer: TimestampNormalizer) -> None:
    assert normalizer.parse_timestamp("1700000000000") == EXPECTED_2023


def test_fractional_epoch_seconds(normalizer: TimestampNormalizer) -> None:
    assert normalizer.parse_timestamp("1700000000.5") == EXPECTED_2023 + timedelta(milliseconds=500)


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("2023-10-26 14:30:25", datetime(2023, 10, 26, 14, 30, 25, tzinfo=timezone.utc)),
        ("2023-10-26T14:30:25Z", datetime(2023, 10, 26, 14, 30, 25, tzinfo=timezone.utc)),
        ("2023-10-26T14:30:25+02:00", datetime(2023, 10, 26, 12, 30, 25, tzinfo=timezone.utc)),
        ("2023-10-26T14:30:25", datetime(2023, 10, 26, 14, 30, 25, tzinfo=timezone.utc)),
        ("10/26/2023 14:30:25", datetime(2023, 10, 26, 14, 30, 25, tzinfo=timezone.utc)),
        ("26/10/2023 14:30:25", datetime(2023, 10, 26, 14, 30, 25, tzinfo=timezone.utc)),
    ],
)
def test_formatted_layouts(normalizer: TimestampNormalizer, token: str, expected: datetime) -> None:
    parsed = normalizer.parse_timestamp(token)

    assert parsed == expected
    assert parsed.tzinfo is not None


def test_ambiguous_slash_dates_prefer_us_layout(normalizer: TimestampNormalizer) -> None:
    parsed = normalizer.parse_timestamp("03/04/2024 10:00:00")

    assert parsed == datetime(2024, 3, 4, 10, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("token", ["not a date", "2023/10/26", "nan", "inf", "-inf"])
def test_unparseable_tokens_return_none(normalizer: TimestampNormalizer, token: str) -> None:
    assert normalizer.parse_timestamp(token) is None


@pytest.mark.parametrize(
    "token",
    [
        "123",  # 1970
        "1800000000",  # 2027, beyond next year
        "99999999999999",  # neither seconds nor milliseconds land in range
        "-5",
    ],
)
def test_implausible_epochs_are_rejected_by_default(
    normalizer: TimestampNormalizer, token: str, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="services.timestamps"):
        assert normalizer.parse_timestamp(token) is None

    assert any("Implausible epoch" in record.getMessage() for record in caplog.records)


def test_implausible_epoch_can_substitute_now(clock: FixedClock) -> None:
    normalizer = TimestampNormalizer(clock=clock, out_of_range_policy=OutOfRangePolicy.substitute_now)

    assert normalizer.parse_timestamp("123") == NOW


def test_policy_accepts_plain_strings(clock: FixedClock) -> None:
    normalizer = TimestampNormalizer(clock=clock, out_of_range_policy="substitute_now")

    assert normalizer.out_of_range_policy is OutOfRangePolicy.substitute_now


def test_parse_epoch_raises_for_out_of_range(normalizer: TimestampNormalizer) -> None:
    with pytest.raises(TimestampOutOfRangeError) as excinfo:
        normalizer.parse_epoch(123.0)

    assert excinfo.value.value == 123.0
    assert isinstance(excinfo.value, ValueError)


def test_year_window_follows_clock() -> None:
    normalizer = TimestampNormalizer(clock=FixedClock(datetime(2027, 1, 1, tzinfo=timezone.utc)))

    assert normalizer.parse_timestamp("1800000000") == datetime(
        2027, 1, 15, 8, 0, tzinfo=timezone.utc
    )


def test_all_zero_payload_falls_back_to_recent_time(
    normalizer: TimestampNormalizer, caplog: pytest.LogCaptureFixture
) -> None:
    payload = WeatherStationData.model_validate(build_payload("0"))

    with caplog.at_level(logging.WARNING, logger="services.timestamps"):
        result = normalizer.extract_most_recent_timestamp(payload)

    assert result == NOW - timedelta(seconds=30)
    assert any("No valid timestamps" in record.getMessage() for record in caplog.records)


def test_fallback_is_thirty_seconds_before_wall_clock() -> None:
    normalizer = TimestampNormalizer(clock=SystemClock())
    payload = WeatherStationData.model_validate(build_payload("0"))

    result = normalizer.extract_most_recent_timestamp(payload)

    age = datetime.now(timezone.utc) - result
    assert result is not None
    assert timedelta(seconds=30) <= age <= timedelta(seconds=31)


def test_most_recent_of_collected_list(normalizer: TimestampNormalizer) -> None:
    older = EXPECTED_2023 - timedelta(hours=1)

    assert normalizer.most_recent([older, EXPECTED_2023, older]) == EXPECTED_2023
    assert normalizer.most_recent([]) == NOW - timedelta(seconds=30)


def test_single_valid_token_wins(normalizer: TimestampNormalizer) -> None:
    payload = WeatherStationData.model_validate(
        build_payload(
            "garbage",
            overrides={
                ("wind", "wind_gust"): "1700000000",
                ("pressure", "relative"): "0",
                ("lightning", "count"): "",
            },
        )
    )

    assert normalizer.extract_most_recent_timestamp(payload) == EXPECTED_2023


def test_most_recent_across_groups(normalizer: TimestampNormalizer) -> None:
    payload = WeatherStationData.model_validate(
        build_payload(
            "1700000000",
            overrides={
                ("indoor", "humidity"): "1700000060",
                ("battery", "console"): "2023-11-14 22:14:00",
            },
        )
    )

    assert normalizer.extract_most_recent_timestamp(payload) == EXPECTED_2023 + timedelta(minutes=1)


def test_collect_keeps_every_parsed_token(normalizer: TimestampNormalizer) -> None:
    payload = WeatherStationData.model_validate(build_payload("1700000000"))

    collected = normalizer.collect_timestamps(payload)

    assert len(collected) == TOKEN_COUNT
    assert set(collected) == {EXPECTED_2023}


def test_analysis_lists_every_token(normalizer: TimestampNormalizer) -> None:
    payload = WeatherStationData.model_validate(
        build_payload("0", overrides={("outdoor", "humidity"): "1700000000"})
    )

    rows = normalizer.analyze_timestamps(payload)

    assert len(rows) == TOKEN_COUNT
    assert rows[0].group == "outdoor"
    parsed = [row for row in rows if row.parsed is not None]
    assert len(parsed) == 1
    assert (parsed[0].group, parsed[0].index, parsed[0].parsed) == ("outdoor", 5, EXPECTED_2023)


def test_correct_timestamp_applies_year_offset(normalizer: TimestampNormalizer) -> None:
    skewed = str(1700000000 + 10 * 31_536_000)

    assert normalizer.parse_timestamp(skewed) is None
    assert normalizer.correct_timestamp(skewed, known_offset_years=10) == EXPECTED_2023


def test_correct_timestamp_falls_back_to_standard_parsing(normalizer: TimestampNormalizer) -> None:
    assert normalizer.correct_timestamp("2023-10-26 14:30:25", known_offset_years=3) == datetime(
        2023, 10, 26, 14, 30, 25, tzinfo=timezone.utc
    )
    assert normalizer.correct_timestamp("1700000000000", known_offset_years=0) == EXPECTED_2023
    assert normalizer.correct_timestamp("123", known_offset_years=1) is None


@pytest.mark.parametrize(
    ("age_seconds", "expected"),
    [(45, "45s ago"), (200, "3m ago"), (7500, "2h ago"), (90000, "1d ago")],
)
def test_format_data_age(normalizer: TimestampNormalizer, age_seconds: int, expected: str) -> None:
    recorded = NOW - timedelta(seconds=age_seconds)

    assert normalizer.format_data_age(recorded, now=NOW) == expected
    assert normalizer.format_data_age(recorded) == expected


@pytest.mark.parametrize(("age_seconds", "fresh"), [(119, True), (120, False), (121, False)])
def test_is_data_fresh_is_strict(normalizer: TimestampNormalizer, age_seconds: int, fresh: bool) -> None:
    recorded = NOW - timedelta(seconds=age_seconds)

    assert normalizer.is_data_fresh(recorded, timedelta(seconds=120), now=NOW) is fresh


def test_format_timestamp_uses_station_zone() -> None:
    station = WeatherStation(name="Backyard", time_zone_id="America/Chicago")

    rendered = TimestampNormalizer.format_timestamp(EXPECTED_2023, station)

    assert rendered == "2023-11-14 16:13:20 CST"


def test_format_timestamp_falls_back_to_default_zone() -> None:
    station = WeatherStation(name="Roof", time_zone_id="Not/AZone")

    rendered = TimestampNormalizer.format_timestamp(EXPECTED_2023, station, fmt="%H:%M")

    assert rendered == "22:13"
