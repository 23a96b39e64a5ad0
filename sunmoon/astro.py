"""Sun event computations: twilight table, single-angle events, azimuth search, solar time."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

import numpy as np

from .ephemeris import declination, ecliptic_longitude, sidereal_time, solar_mean_anomaly, sun_coords
from .errors import require_number
from .events import SunEventTable, default_table
from .position import azimuth as azimuth_at
from .timeutil import (
    DAY_MS,
    J2000,
    RAD,
    FloatArray,
    Instant,
    from_julian_day,
    from_timestamp_ms,
    julian_to_datetime,
    localize,
    snap_to_hour,
    to_days,
)

__all__ = [
    "SunTime",
    "SunTimePair",
    "get_solar_clock_time",
    "get_sun_time_at_angle",
    "get_sun_time_at_azimuth",
    "get_sun_times",
    "observer_angle",
]

J0 = 0.0009
SUNRISE_ANGLE = -0.833  # Refraction plus solar semi-diameter, degrees.
AZIMUTH_SEARCH_RESOLUTION_MS = 200


@dataclass(frozen=True)
class SunTime:
    """A named sun event.

    ``value`` always holds a usable instant. When the sun never reaches the
    event's altitude that day, ``valid`` is false and ``value`` falls back to
    nadir (set events) or its mirror about solar noon (rise events).
    """

    name: str
    value: datetime
    ts: float
    julian: float
    valid: bool
    position: int
    elevation: Optional[float] = None
    deprecated: bool = False
    original_name: Optional[str] = None
    original_position: Optional[int] = None


@dataclass(frozen=True)
class SunTimePair:
    rise: SunTime
    set: SunTime


@dataclass(frozen=True)
class _SolarDay:
    lw: float
    phi: float
    n: float
    mean_anomaly: float
    longitude: float
    dec: float
    noon: float


def observer_angle(height: float) -> float:
    """Horizon depression in degrees for an observer *height* metres up."""

    if height <= 0:
        return 0.0
    return -2.076 * math.sqrt(height) / 60


def julian_cycle(d: FloatArray, lw: float) -> FloatArray:
    # Half-way cases round up.
    return np.floor(d - J0 - lw / (2 * np.pi) + 0.5)


def approx_transit(hour_angle: FloatArray, lw: float, n: FloatArray) -> FloatArray:
    return J0 + (hour_angle + lw) / (2 * np.pi) + n


def solar_transit_j(ds: FloatArray, mean_anomaly: FloatArray, longitude: FloatArray) -> FloatArray:
    return J2000 + ds + 0.0053 * np.sin(mean_anomaly) - 0.0069 * np.sin(2 * longitude)


def hour_angle(h: FloatArray, phi: float, dec: FloatArray) -> FloatArray:
    """Hour angle at altitude *h*; NaN when the sun never reaches *h*."""

    with np.errstate(invalid="ignore", divide="ignore"):
        return np.arccos((np.sin(h) - np.sin(phi) * np.sin(dec)) / (np.cos(phi) * np.cos(dec)))


def _solar_day(instant: Instant, lat: float, lng: float, use_utc: bool) -> _SolarDay:
    lw = RAD * -lng
    d = to_days(snap_to_hour(instant, 12, use_utc))
    n = julian_cycle(d, lw)
    ds = approx_transit(0, lw, n)
    mean_anomaly = solar_mean_anomaly(ds)
    longitude = ecliptic_longitude(mean_anomaly)
    return _SolarDay(
        lw=lw,
        phi=RAD * lat,
        n=float(n),
        mean_anomaly=float(mean_anomaly),
        longitude=float(longitude),
        dec=float(declination(longitude, 0.0)),
        noon=float(solar_transit_j(ds, mean_anomaly, longitude)),
    )


def _set_julian(day: _SolarDay, h0: FloatArray) -> FloatArray:
    """Julian days of the evening crossing of altitude(s) *h0* (radians)."""

    w = hour_angle(h0, day.phi, day.dec)
    return solar_transit_j(approx_transit(w, day.lw, day.n), day.mean_anomaly, day.longitude)


def _sun_time(
    name: str,
    julian: float,
    valid: bool,
    position: int,
    elevation: Optional[float] = None,
) -> SunTime:
    ts = from_julian_day(julian)
    return SunTime(
        name=name,
        value=julian_to_datetime(julian),
        ts=ts,
        julian=julian,
        valid=valid,
        position=position,
        elevation=elevation,
    )


def get_sun_times(
    instant: Instant,
    lat: float,
    lng: float,
    height: float = 0.0,
    include_deprecated: bool = False,
    use_utc: bool = False,
    table: Optional[SunEventTable] = None,
) -> Dict[str, SunTime]:
    """Compute solar noon, nadir and every event of *table* for one day.

    Parameters
    ----------
    instant:
        Any instant on the requested day.
    lat, lng:
        Geographic coordinates in degrees (east-positive longitude).
    height:
        Observer height above the horizon in metres.
    include_deprecated:
        Also emit records under the table's deprecated alias names.
    use_utc:
        Take the calendar day in UTC instead of the instant's local zone.
    table:
        Event table to use; defaults to :func:`sunmoon.events.default_table`.

    Returns
    -------
    dict
        Event name to :class:`SunTime`, ordered by ordinal position, with
        deprecated aliases (if requested) last.
    """

    lat = require_number(lat, "latitude")
    lng = require_number(lng, "longitude")
    table = table if table is not None else default_table()
    events = table.events
    count = len(events)

    day = _solar_day(instant, lat, lng, use_utc)
    dh = observer_angle(height)

    results = [
        _sun_time("solarNoon", day.noon, not math.isnan(day.noon), count),
        _sun_time("nadir", day.noon + 0.5, not math.isnan(day.noon), count * 2 + 1),
    ]

    angles = np.array([event.angle for event in events], dtype=float)
    j_set = _set_julian(day, (angles + dh) * RAD)
    valid = ~np.isnan(j_set)
    j_set = np.where(valid, j_set, day.noon + 0.5)
    j_rise = day.noon - (j_set - day.noon)

    for i, event in enumerate(events):
        set_pos = event.set_pos if event.set_pos is not None else count + i + 1
        rise_pos = event.rise_pos if event.rise_pos is not None else count - i - 1
        results.append(
            _sun_time(event.set_name, float(j_set[i]), bool(valid[i]), set_pos, event.angle)
        )
        results.append(
            _sun_time(event.rise_name, float(j_rise[i]), bool(valid[i]), rise_pos, event.angle)
        )

    times = {record.name: record for record in sorted(results, key=lambda r: r.position)}

    if include_deprecated:
        for alias, canonical in table.deprecated_names:
            original = times.get(canonical)
            if original is None or original.deprecated:
                continue
            times[alias] = dataclasses.replace(
                original,
                name=alias,
                deprecated=True,
                original_name=canonical,
                original_position=original.position,
                position=-2,
            )

    return times


def get_sun_time_at_angle(
    instant: Instant,
    lat: float,
    lng: float,
    elevation_angle: float,
    height: float = 0.0,
    degree: bool = False,
    use_utc: bool = False,
) -> SunTimePair:
    """Rise and set instants of the sun at an arbitrary altitude.

    The altitude is measured like sunrise, i.e. shifted by the -0.833°
    refraction/semi-diameter correction. Radians unless ``degree`` is set.
    """

    lat = require_number(lat, "latitude")
    lng = require_number(lng, "longitude")
    elevation_angle = require_number(elevation_angle, "elevationAngle")
    angle_deg = elevation_angle if degree else math.degrees(elevation_angle)

    day = _solar_day(instant, lat, lng, use_utc)
    j_set = float(_set_julian(day, (angle_deg + SUNRISE_ANGLE + observer_angle(height)) * RAD))
    valid = not math.isnan(j_set)
    if not valid:
        j_set = day.noon + 0.5
    j_rise = day.noon - (j_set - day.noon)

    return SunTimePair(
        rise=_sun_time("rise", j_rise, valid, 1, angle_deg),
        set=_sun_time("set", j_set, valid, 0, angle_deg),
    )


def get_sun_time_at_azimuth(
    instant: Instant,
    lat: float,
    lng: float,
    azimuth: float,
    degree: bool = False,
) -> datetime:
    """Find when the sun passes *azimuth* by bisecting from the next local midnight.

    The search moves a probe by a step that starts at one day and halves on
    every iteration, forwards while the solar azimuth is below the target and
    backwards otherwise, until the step drops below 200 ms.
    """

    azimuth = require_number(azimuth, "azimuth")
    lat = require_number(lat, "latitude")
    lng = require_number(lng, "longitude")
    target = azimuth * RAD if degree else azimuth
    lw = RAD * -lng
    phi = RAD * lat

    step = float(DAY_MS)
    probe = snap_to_hour(instant, 0) + step
    while step > AZIMUTH_SEARCH_RESOLUTION_MS:
        d = to_days(probe)
        coords = sun_coords(d)
        current = azimuth_at(sidereal_time(d, lw) - coords.ra, phi, coords.dec)
        step /= 2
        if current < target:
            probe += step
        else:
            probe -= step

    return from_timestamp_ms(math.floor(probe))


def get_solar_clock_time(instant: Instant, lng: float, utc_offset: float) -> datetime:
    """Local apparent solar time for the clock time of *instant*.

    ``utc_offset`` is the zone offset in hours that the clock time is kept
    in. The result is a naive datetime on the instant's local calendar day
    with the minutes offset from midnight truncated toward zero, so 10.7
    minutes before midnight reads 23:50. It may roll over into the
    neighbouring day.
    """

    lng = require_number(lng, "longitude")
    utc_offset = require_number(utc_offset, "utcOffset")
    local = localize(instant)

    b = 360 / 365 * (local.timetuple().tm_yday - 81) * RAD
    equation_of_time = 9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)
    correction = equation_of_time + 4 * (lng - 15 * utc_offset)
    solar_hours = local.hour + correction / 60 + local.minute / 60

    midnight = datetime(local.year, local.month, local.day)
    return midnight + timedelta(minutes=int(solar_hours * 60))
