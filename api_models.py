"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _DayQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    date_utc: date = Field(..., alias="date", description="UTC calendar date (YYYY-MM-DD)")


class SunQueryParams(_DayQuery):
    """Validated query parameters for the ``/sun`` endpoint."""

    elev_m: float = Field(0.0, ge=0.0, description="Observer height above the horizon in meters")
    deprecated: bool = Field(False, description="Also return deprecated event names")
    events: Optional[str] = Field(
        None,
        description="Comma-separated event names to return; all events when omitted",
    )

    @field_validator("events")
    def validate_events(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        names = [name.strip() for name in value.split(",") if name.strip()]
        if not names:
            raise ValueError("events must name at least one event")
        return ",".join(names)


class MoonQueryParams(_DayQuery):
    """Validated query parameters for the ``/moon`` endpoint."""


class SunEventOut(BaseModel):
    name: str
    time_utc: str = Field(..., description="Event time in UTC (ISO-8601)")
    valid: bool = Field(..., description="False when the sun never reaches the event altitude")
    elevation_deg: Optional[float] = Field(None, description="Solar altitude defining the event")
    position: int
    deprecated: bool = False


class SunResponse(BaseModel):
    """Successful sun events payload."""

    ok: bool = True
    date_utc: date
    latitude: float
    longitude: float
    elevation_m: float
    noon_altitude_deg: float = Field(..., description="Solar altitude at solar noon")
    noon_azimuth_deg: float = Field(..., description="Solar azimuth at solar noon")
    events: List[SunEventOut]


class MoonResponse(BaseModel):
    """Successful moon payload."""

    ok: bool = True
    date_utc: date
    latitude: float
    longitude: float
    rise_utc: Optional[str] = None
    set_utc: Optional[str] = None
    highest_utc: Optional[str] = None
    always_up: bool
    always_down: bool
    fraction: float = Field(..., ge=0.0, le=1.0, description="Illuminated fraction at 00:00 UTC")
    phase_value: float
    phase: str = Field(..., description="Phase bucket identifier")
    phase_name: str
    next_phase: str
    next_phase_utc: str
    distance_km: float


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    twilight_events: List[str]


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
