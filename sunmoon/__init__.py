"""Sun and moon positions, twilight times, moon phases."""

from .astro import (
    SunTime,
    SunTimePair,
    get_solar_clock_time,
    get_sun_time_at_angle,
    get_sun_time_at_azimuth,
    get_sun_times,
)
from .errors import InvalidArgumentError
from .events import (
    DEFAULT_DEPRECATED_NAMES,
    DEFAULT_SUN_EVENTS,
    SunEventDefinition,
    SunEventTable,
    default_table,
    register_deprecated_alias,
    register_twilight_event,
)
from .illumination import MOON_PHASES, MoonIllumination, MoonPhase, get_moon_illumination, phase_bucket
from .moon import MoonData, MoonTimes, MoonTransit, get_moon_data, get_moon_times, get_moon_transit
from .position import MoonPosition, SunPosition, get_moon_position, get_sun_position

__all__ = [
    "DEFAULT_DEPRECATED_NAMES",
    "DEFAULT_SUN_EVENTS",
    "InvalidArgumentError",
    "MOON_PHASES",
    "MoonData",
    "MoonIllumination",
    "MoonPhase",
    "MoonPosition",
    "MoonTimes",
    "MoonTransit",
    "SunEventDefinition",
    "SunEventTable",
    "SunPosition",
    "SunTime",
    "SunTimePair",
    "default_table",
    "get_moon_data",
    "get_moon_illumination",
    "get_moon_position",
    "get_moon_times",
    "get_moon_transit",
    "get_solar_clock_time",
    "get_sun_position",
    "get_sun_time_at_angle",
    "get_sun_time_at_azimuth",
    "get_sun_times",
    "phase_bucket",
    "register_deprecated_alias",
    "register_twilight_event",
]
