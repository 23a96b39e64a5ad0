"""Moonrise, moonset and lunar transit."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import numpy as np

from .errors import require_number
from .illumination import MoonIllumination, get_moon_illumination
from .position import MoonPosition, get_moon_position, moon_altitudes
from .timeutil import RAD, Instant, from_timestamp_ms, hours_later, localize, snap_to_hour

__all__ = [
    "MoonData",
    "MoonTimes",
    "MoonTransit",
    "get_moon_data",
    "get_moon_times",
    "get_moon_transit",
]

# Mean lunar parallax less semi-diameter and refraction, radians.
HORIZON_CORRECTION = 0.133 * RAD
SAMPLE_HOURS = np.arange(27)


@dataclass(frozen=True)
class MoonTimes:
    """Moon horizon crossings during one calendar day.

    ``always_up``/``always_down`` are only meaningful when neither ``rise``
    nor ``set`` was found.
    """

    rise: Optional[datetime]
    set: Optional[datetime]
    always_up: bool
    always_down: bool
    highest: Optional[datetime] = None


@dataclass(frozen=True)
class MoonTransit:
    main: Optional[datetime]
    invert: Optional[datetime]


@dataclass(frozen=True)
class MoonData:
    position: MoonPosition
    illumination: MoonIllumination
    zenith_angle: float


def get_moon_data(instant: Instant, lat: float, lng: float) -> MoonData:
    """Moon position and illumination together with the bright limb's zenith angle."""

    position = get_moon_position(instant, lat, lng)
    illumination = get_moon_illumination(instant)
    return MoonData(
        position=position,
        illumination=illumination,
        zenith_angle=illumination.angle - position.parallactic_angle,
    )


def get_moon_times(instant: Instant, lat: float, lng: float, use_utc: bool = False) -> MoonTimes:
    """Find moonrise and moonset for the calendar day of *instant*.

    Altitudes are sampled hourly from midnight and every three consecutive
    samples are fitted with a parabola whose roots in ``[-1, 1]`` mark
    horizon crossings. Scanning stops once both a rise and a set are known.
    """

    lat = require_number(lat, "latitude")
    lng = require_number(lng, "longitude")
    start = snap_to_hour(instant, 0, use_utc)
    heights = moon_altitudes(hours_later(start, SAMPLE_HOURS), lat, lng) - HORIZON_CORRECTION

    rise: Optional[float] = None
    set_: Optional[float] = None
    ye = 0.0
    h0 = heights[0]

    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(1, len(SAMPLE_HOURS) - 1, 2):
            h1 = heights[i]
            h2 = heights[i + 1]

            a = (h0 + h2) / 2 - h1
            b = (h2 - h0) / 2
            xe = -b / (2 * a)
            ye = (a * xe + b) * xe + h1
            discriminant = b * b - 4 * a * h1
            roots = 0

            if discriminant >= 0:
                dx = np.sqrt(discriminant) / (abs(a) * 2)
                x1 = xe - dx
                x2 = xe + dx
                if abs(x1) <= 1:
                    roots += 1
                if abs(x2) <= 1:
                    roots += 1
                if x1 < -1:
                    x1 = x2

                if roots == 1:
                    if h0 < 0:
                        rise = i + x1
                    else:
                        set_ = i + x1
                elif roots == 2:
                    rise = i + (x2 if ye < 0 else x1)
                    set_ = i + (x1 if ye < 0 else x2)

            if rise is not None and set_ is not None:
                break
            h0 = h2

    def at(hours: Optional[float]) -> Optional[datetime]:
        return None if hours is None else from_timestamp_ms(hours_later(start, float(hours)))

    if rise is None and set_ is None:
        return MoonTimes(rise=None, set=None, always_up=bool(ye > 0), always_down=bool(ye <= 0))

    highest = None
    if rise is not None and set_ is not None:
        highest = at(min(rise, set_) + abs(set_ - rise) / 2)
    return MoonTimes(rise=at(rise), set=at(set_), always_up=False, always_down=False, highest=highest)


def _midpoint(first: datetime, second: datetime) -> datetime:
    return min(first, second) + abs(second - first) / 2


def get_moon_transit(
    rise: Optional[Instant],
    set: Optional[Instant],
    lat: float,
    lng: float,
) -> MoonTransit:
    """Estimate the upper (``main``) and lower (``invert``) lunar transits.

    Transits are midpoints between a rise and a set. When the pair given
    straddles midnight, the neighbouring day's set (after *rise*) or rise
    (before *set*) is fetched and the midpoint kept only if it falls on the
    calendar day of *set*, in *set*'s timezone.
    """

    lat = require_number(lat, "latitude")
    lng = require_number(lng, "longitude")
    rise_at = localize(rise) if rise is not None else None
    set_at = localize(set) if set is not None else None

    main: Optional[datetime] = None
    invert: Optional[datetime] = None

    if rise_at is not None and set_at is not None:
        if rise_at < set_at:
            main = _midpoint(rise_at, set_at)
        else:
            invert = _midpoint(rise_at, set_at)

    reference = set_at if set_at is not None else rise_at
    if reference is None:
        return MoonTransit(main=None, invert=None)
    day = reference.date()

    def on_day(moment: datetime) -> bool:
        return moment.astimezone(reference.tzinfo).date() == day

    if rise_at is not None:
        following_set = get_moon_times(reference + timedelta(days=1), lat, lng).set
        if following_set is not None:
            transit = _midpoint(rise_at, following_set)
            if on_day(transit):
                if main is not None:
                    invert = transit
                else:
                    main = transit

    if set_at is not None:
        preceding_rise = get_moon_times(reference - timedelta(days=1), lat, lng).rise
        if preceding_rise is not None:
            transit = _midpoint(set_at, preceding_rise)
            if on_day(transit):
                main = transit

    return MoonTransit(main=main, invert=invert)
