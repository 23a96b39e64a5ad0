"""Horizontal (azimuth/altitude) positions of the Sun and Moon."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .ephemeris import EquatorialCoordinates, moon_coords, sidereal_time, sun_coords
from .errors import require_number
from .timeutil import DEG, RAD, FloatArray, Instant, to_days, to_timestamp_ms

__all__ = [
    "MoonPosition",
    "SunPosition",
    "altitude",
    "astro_refraction",
    "azimuth",
    "get_moon_position",
    "get_sun_position",
    "moon_altitudes",
    "parallactic_angle",
]


@dataclass(frozen=True)
class SunPosition:
    """Sun position seen from the observer. Angles are radians unless noted."""

    azimuth: float
    altitude: float
    zenith: float
    azimuth_degrees: float
    altitude_degrees: float
    zenith_degrees: float
    declination: float


@dataclass(frozen=True)
class MoonPosition:
    """Moon position seen from the observer, altitude corrected for refraction."""

    azimuth: float
    altitude: float
    azimuth_degrees: float
    altitude_degrees: float
    distance: float  # kilometres
    parallactic_angle: float
    parallactic_angle_degrees: float


def azimuth(hour_angle: FloatArray, phi: float, dec: FloatArray) -> FloatArray:
    """Azimuth measured from north, clockwise."""

    return (
        np.arctan2(np.sin(hour_angle), np.cos(hour_angle) * np.sin(phi) - np.tan(dec) * np.cos(phi))
        + np.pi
    )


def altitude(hour_angle: FloatArray, phi: float, dec: FloatArray) -> FloatArray:
    return np.arcsin(np.sin(phi) * np.sin(dec) + np.cos(phi) * np.cos(dec) * np.cos(hour_angle))


def parallactic_angle(hour_angle: FloatArray, phi: float, dec: FloatArray) -> FloatArray:
    return np.arctan2(np.sin(hour_angle), np.tan(phi) * np.cos(dec) - np.sin(dec) * np.cos(hour_angle))


def astro_refraction(h: FloatArray) -> FloatArray:
    """Atmospheric refraction in radians for apparent altitude *h* (Meeus 16.4).

    Altitudes below the horizon are evaluated at 0 so the formula stays finite.
    """

    h = np.maximum(h, 0.0)
    return 0.0002967 / np.tan(h + 0.00312536 / (h + 0.08901179))


def _observer(lat: float, lng: float) -> tuple[float, float]:
    lat = require_number(lat, "latitude")
    lng = require_number(lng, "longitude")
    return RAD * lat, RAD * -lng


def _moon_horizontal(
    d: FloatArray, phi: float, lw: float
) -> tuple[EquatorialCoordinates, FloatArray, FloatArray]:
    coords = moon_coords(d)
    hour_angle = sidereal_time(d, lw) - coords.ra
    h = altitude(hour_angle, phi, coords.dec)
    return coords, hour_angle, h + astro_refraction(h)


def get_sun_position(instant: Instant, lat: float, lng: float) -> SunPosition:
    """Return the sun's azimuth, altitude and zenith for *instant* at *lat*/*lng*.

    Raises
    ------
    InvalidArgumentError
        If latitude or longitude is missing or not a number.
    """

    phi, lw = _observer(lat, lng)
    d = to_days(to_timestamp_ms(instant))
    coords = sun_coords(d)
    hour_angle = sidereal_time(d, lw) - coords.ra
    az = float(azimuth(hour_angle, phi, coords.dec))
    alt = float(altitude(hour_angle, phi, coords.dec))

    return SunPosition(
        azimuth=az,
        altitude=alt,
        zenith=np.pi / 2 - alt,
        azimuth_degrees=DEG * az,
        altitude_degrees=DEG * alt,
        zenith_degrees=90.0 - DEG * alt,
        declination=float(coords.dec),
    )


def get_moon_position(instant: Instant, lat: float, lng: float) -> MoonPosition:
    """Return the moon's position, distance and parallactic angle.

    Raises
    ------
    InvalidArgumentError
        If latitude or longitude is missing or not a number.
    """

    phi, lw = _observer(lat, lng)
    d = to_days(to_timestamp_ms(instant))
    coords, hour_angle, alt = _moon_horizontal(d, phi, lw)
    az = float(azimuth(hour_angle, phi, coords.dec))
    pa = float(parallactic_angle(hour_angle, phi, coords.dec))
    alt = float(alt)

    return MoonPosition(
        azimuth=az,
        altitude=alt,
        azimuth_degrees=DEG * az,
        altitude_degrees=DEG * alt,
        distance=float(coords.dist),
        parallactic_angle=pa,
        parallactic_angle_degrees=DEG * pa,
    )


def moon_altitudes(timestamps_ms: np.ndarray, lat: float, lng: float) -> np.ndarray:
    """Refraction-corrected lunar altitudes for an array of epoch milliseconds."""

    phi, lw = _observer(lat, lng)
    _, _, alt = _moon_horizontal(to_days(np.asarray(timestamps_ms, dtype=float)), phi, lw)
    return alt
