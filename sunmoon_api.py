"""FastAPI application exposing sun events and moon data."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime, time as dt_time
from typing import Annotated, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api_models import (
    ErrorResponse,
    HealthResponse,
    MoonQueryParams,
    MoonResponse,
    SunEventOut,
    SunQueryParams,
    SunResponse,
)
from sunmoon import (
    InvalidArgumentError,
    default_table,
    get_moon_illumination,
    get_moon_position,
    get_moon_times,
    get_sun_position,
    get_sun_times,
)

LOG_LEVEL = os.environ.get("SUNMOON_LOG_LEVEL", "INFO").upper()
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.environ.get("SUNMOON_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

logging.basicConfig(level=LOG_LEVEL, format="%(message)s")
LOGGER = logging.getLogger("sunmoon-api")

APP_DESCRIPTION = "Sun positions, twilight times, moonrise/moonset and moon phases"


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - exercised in integration tests
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "twilight_events": len(default_table()),
                "cors_origins": CORS_ORIGINS,
            }
        )
    )
    yield


app = FastAPI(
    title="Sunmoon API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _format_utc(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, twilight_events=sorted(default_table().event_names()))


@app.get(
    "/sun",
    response_model=SunResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def sun_endpoint(params: Annotated[SunQueryParams, Query()]) -> SunResponse:
    start_time = time.perf_counter()
    instant = datetime.combine(params.date_utc, dt_time(0), tzinfo=UTC)
    try:
        times = get_sun_times(
            instant,
            params.lat,
            params.lon,
            height=params.elev_m,
            include_deprecated=params.deprecated,
            use_utc=True,
        )
        noon = get_sun_position(times["solarNoon"].value, params.lat, params.lon)
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    selected = params.events.split(",") if params.events else None
    if selected is not None:
        unknown = [name for name in selected if name not in times]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown events: {', '.join(unknown)}")

    events = [
        SunEventOut(
            name=name,
            time_utc=_format_utc(record.value),
            valid=record.valid,
            elevation_deg=record.elevation,
            position=record.position,
            deprecated=record.deprecated,
        )
        for name, record in times.items()
        if selected is None or name in selected
    ]

    response = SunResponse(
        date_utc=params.date_utc,
        latitude=params.lat,
        longitude=params.lon,
        elevation_m=params.elev_m,
        noon_altitude_deg=noon.altitude_degrees,
        noon_azimuth_deg=noon.azimuth_degrees,
        events=events,
    )

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": "sun",
                "lat": params.lat,
                "lon": params.lon,
                "date": params.date_utc.isoformat(),
                "events": len(events),
                "invalid": sum(1 for event in events if not event.valid),
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get(
    "/moon",
    response_model=MoonResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def moon_endpoint(params: Annotated[MoonQueryParams, Query()]) -> MoonResponse:
    start_time = time.perf_counter()
    instant = datetime.combine(params.date_utc, dt_time(0), tzinfo=UTC)
    try:
        times = get_moon_times(instant, params.lat, params.lon, use_utc=True)
        position = get_moon_position(instant, params.lat, params.lon)
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    illumination = get_moon_illumination(instant)

    response = MoonResponse(
        date_utc=params.date_utc,
        latitude=params.lat,
        longitude=params.lon,
        rise_utc=_format_utc(times.rise),
        set_utc=_format_utc(times.set),
        highest_utc=_format_utc(times.highest),
        always_up=times.always_up,
        always_down=times.always_down,
        fraction=illumination.fraction,
        phase_value=illumination.phase_value,
        phase=illumination.phase.id,
        phase_name=illumination.phase.name,
        next_phase=illumination.next.type,
        next_phase_utc=_format_utc(illumination.next.value),
        distance_km=position.distance,
    )

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": "moon",
                "lat": params.lat,
                "lon": params.lon,
                "date": params.date_utc.isoformat(),
                "phase": response.phase,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response
