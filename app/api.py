"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    ObservationRequest,
    ObservationSummaryResponse,
    SunEventResponse,
    SunTimesResponse,
    TimestampAnalysisRow,
    TimestampParseRequest,
    TimestampParseResponse,
)
from services.ephemeris import InvalidInputError, SolarEphemerisCalculator, build_default_calculator
from services.observations import ObservationService, build_default_observation_service
from services.timestamps import TimestampNormalizer, build_default_normalizer

router = APIRouter()


def get_calculator() -> SolarEphemerisCalculator:
    return build_default_calculator()


def get_normalizer() -> TimestampNormalizer:
    return build_default_normalizer()


def get_observation_service() -> ObservationService:
    return build_default_observation_service()


@router.get(
    "/sun-times",
    response_model=SunTimesResponse,
    summary="Sunrise, sunset and day length for a location and date.",
)
async def get_sun_times(
    latitude: float = Query(..., description="Decimal degrees, north positive."),
    longitude: float = Query(..., description="Decimal degrees, east positive."),
    timezone: str = Query("UTC", description="IANA time zone identifier."),
    day: Optional[date] = Query(None, alias="date", description="Civil date; defaults to today."),
    calculator: SolarEphemerisCalculator = Depends(get_calculator),
) -> SunTimesResponse:
    target = day if day is not None else calculator.clock.now()
    try:
        sun_times = calculator.compute_sun_times(target, latitude, longitude, timezone)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return SunTimesResponse.from_sun_times(
        sun_times, calculator.is_currently_daylight(sun_times)
    )


@router.get(
    "/sun-times/next-event",
    response_model=SunEventResponse,
    summary="The next sunrise or sunset at a location.",
)
async def get_next_sun_event(
    latitude: float = Query(...),
    longitude: float = Query(...),
    timezone: str = Query("UTC"),
    calculator: SolarEphemerisCalculator = Depends(get_calculator),
) -> SunEventResponse:
    event = calculator.next_sun_event(latitude, longitude, timezone)
    return SunEventResponse.from_event(event)


@router.post(
    "/timestamps/parse",
    response_model=TimestampParseResponse,
    summary="Parse a single raw sensor timestamp token.",
)
async def parse_timestamp(
    request: TimestampParseRequest,
    normalizer: TimestampNormalizer = Depends(get_normalizer),
) -> TimestampParseResponse:
    if request.known_offset_years:
        parsed = normalizer.correct_timestamp(request.token, request.known_offset_years)
    else:
        parsed = normalizer.parse_timestamp(request.token)
    return TimestampParseResponse(token=request.token, parsed=parsed)


@router.post(
    "/observations/summary",
    response_model=ObservationSummaryResponse,
    summary="Normalize a station payload into a recorded-at instant and day/night state.",
)
async def summarize_observation(
    request: ObservationRequest,
    service: ObservationService = Depends(get_observation_service),
) -> ObservationSummaryResponse:
    try:
        summary = service.summarize(request.station, request.payload)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return ObservationSummaryResponse.from_summary(summary)


@router.post(
    "/observations/analysis",
    response_model=AnalysisResponse,
    summary="Show how every timestamp token in a payload was interpreted.",
)
async def analyze_observation(
    request: AnalysisRequest,
    normalizer: TimestampNormalizer = Depends(get_normalizer),
) -> AnalysisResponse:
    rows = [TimestampAnalysisRow.from_analysis(row) for row in normalizer.analyze_timestamps(request.payload)]
    return AnalysisResponse(rows=rows, valid_count=sum(row.parsed is not None for row in rows))


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
