"""Conversions between instants, epoch milliseconds and Julian days."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
from typing import Union

import numpy as np

from .errors import InvalidArgumentError

__all__ = [
    "DAY_MS",
    "DEG",
    "FloatArray",
    "Instant",
    "J1970",
    "J2000",
    "RAD",
    "as_datetime",
    "from_julian_day",
    "from_timestamp_ms",
    "hours_later",
    "julian_to_datetime",
    "localize",
    "snap_to_hour",
    "to_days",
    "to_julian_day",
    "to_timestamp_ms",
]

Instant = Union[datetime, int, float]
FloatArray = Union[float, np.ndarray]

DAY_MS = 86_400_000
J1970 = 2440587.5  # Julian day of 1970-01-01T00:00:00Z.
J2000 = 2451545.0  # Julian day of 2000-01-01T12:00:00Z.

RAD = math.pi / 180.0
DEG = 180.0 / math.pi

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


def to_timestamp_ms(instant: Instant) -> float:
    """Return *instant* as milliseconds since the Unix epoch.

    Naive datetimes are read as UTC; numbers are taken to already be epoch
    milliseconds.
    """

    if isinstance(instant, datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        return (instant - _EPOCH) / _ONE_MS
    if isinstance(instant, bool) or not isinstance(instant, (int, float)):
        raise InvalidArgumentError(f"unsupported instant: {instant!r}")
    return float(instant)


def from_timestamp_ms(value: float) -> datetime:
    """Return an aware UTC datetime for epoch milliseconds *value*."""

    return _EPOCH + timedelta(milliseconds=value)


def as_datetime(instant: Instant) -> datetime:
    """Return *instant* as an aware datetime, keeping any tzinfo it carries."""

    if isinstance(instant, datetime):
        return instant if instant.tzinfo is not None else instant.replace(tzinfo=UTC)
    return from_timestamp_ms(to_timestamp_ms(instant))


def to_julian_day(timestamp_ms: FloatArray) -> FloatArray:
    return timestamp_ms / DAY_MS + J1970


def from_julian_day(julian: FloatArray) -> FloatArray:
    return (julian - J1970) * DAY_MS


def to_days(timestamp_ms: FloatArray) -> FloatArray:
    """Days (fractional) elapsed since J2000 for epoch milliseconds."""

    return to_julian_day(timestamp_ms) - J2000


def julian_to_datetime(julian: float) -> datetime:
    """Aware UTC datetime for a Julian day, floored to the millisecond."""

    return from_timestamp_ms(math.floor(from_julian_day(julian)))


def hours_later(timestamp_ms: FloatArray, hours: FloatArray) -> FloatArray:
    return timestamp_ms + hours * DAY_MS / 24


def localize(instant: Instant, use_utc: bool = False) -> datetime:
    """Return *instant* as a datetime in the zone used for calendar-day snapping.

    With ``use_utc`` the zone is UTC. Otherwise an aware datetime keeps its
    own zone, while naive datetimes and epoch numbers move to the host's
    local zone.
    """

    moment = as_datetime(instant)
    if use_utc:
        return moment.astimezone(UTC)
    if isinstance(instant, datetime) and instant.tzinfo is not None:
        return moment
    return moment.astimezone()


def snap_to_hour(instant: Instant, hour: int, use_utc: bool = False) -> float:
    """Epoch milliseconds of *hour*:00 on the calendar day of *instant*."""

    local = localize(instant, use_utc)
    snapped = local.replace(hour=hour, minute=0, second=0, microsecond=0)
    return to_timestamp_ms(snapped)
