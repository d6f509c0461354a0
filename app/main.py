from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.ephemeris import build_default_calculator
from services.observations import build_default_observation_service
from services.timestamps import build_default_normalizer


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_observation_service()
    try:
        yield
    finally:
        build_default_observation_service.cache_clear()
        build_default_normalizer.cache_clear()
        build_default_calculator.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Station Normalizer",
        description="Sun times and recorded-at normalization for weather station payloads.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
