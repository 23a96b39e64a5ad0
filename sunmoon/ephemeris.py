"""Low-precision solar and lunar coordinate series.

Every function is a composition of numpy ufuncs, so it accepts a scalar day
count as well as an array of them. Angles are radians, days are counted from
J2000 (see :func:`sunmoon.timeutil.to_days`).
"""

from __future__ import annotations

from typing import NamedTuple, Optional

import numpy as np

from .timeutil import RAD, FloatArray

__all__ = [
    "OBLIQUITY",
    "EquatorialCoordinates",
    "declination",
    "ecliptic_longitude",
    "moon_coords",
    "right_ascension",
    "sidereal_time",
    "solar_mean_anomaly",
    "sun_coords",
]

OBLIQUITY = RAD * 23.4397  # Obliquity of the ecliptic at J2000.
PERIHELION = RAD * 102.9372  # Ecliptic longitude of Earth's perihelion.


class EquatorialCoordinates(NamedTuple):
    ra: FloatArray
    dec: FloatArray
    dist: Optional[FloatArray] = None  # kilometres, moon only


def right_ascension(l: FloatArray, b: FloatArray) -> FloatArray:
    return np.arctan2(np.sin(l) * np.cos(OBLIQUITY) - np.tan(b) * np.sin(OBLIQUITY), np.cos(l))


def declination(l: FloatArray, b: FloatArray) -> FloatArray:
    return np.arcsin(np.sin(b) * np.cos(OBLIQUITY) + np.cos(b) * np.sin(OBLIQUITY) * np.sin(l))


def sidereal_time(d: FloatArray, lw: float) -> FloatArray:
    """Local sidereal time for west longitude *lw* (radians)."""

    return RAD * (280.16 + 360.9856235 * d) - lw


def solar_mean_anomaly(d: FloatArray) -> FloatArray:
    return RAD * (357.5291 + 0.98560028 * d)


def ecliptic_longitude(mean_anomaly: FloatArray) -> FloatArray:
    m = mean_anomaly
    center = RAD * (1.9148 * np.sin(m) + 0.02 * np.sin(2 * m) + 0.0003 * np.sin(3 * m))
    return m + center + PERIHELION + np.pi


def sun_coords(d: FloatArray) -> EquatorialCoordinates:
    longitude = ecliptic_longitude(solar_mean_anomaly(d))
    return EquatorialCoordinates(
        ra=right_ascension(longitude, 0.0),
        dec=declination(longitude, 0.0),
    )


def moon_coords(d: FloatArray) -> EquatorialCoordinates:
    """Geocentric lunar coordinates with the two main perturbation terms."""

    mean_longitude = RAD * (218.316 + 13.176396 * d)
    mean_anomaly = RAD * (134.963 + 13.064993 * d)
    argument_of_latitude = RAD * (93.272 + 13.229350 * d)

    longitude = mean_longitude + RAD * 6.289 * np.sin(mean_anomaly)
    latitude = RAD * 5.128 * np.sin(argument_of_latitude)
    distance = 385001 - 20905 * np.cos(mean_anomaly)

    return EquatorialCoordinates(
        ra=right_ascension(longitude, latitude),
        dec=declination(longitude, latitude),
        dist=distance,
    )
