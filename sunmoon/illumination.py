"""Moon illumination, phase classification and next-phase prediction."""

from __future__ import annotations

import math
from bisect import bisect_left
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

import numpy as np

from .ephemeris import moon_coords, sun_coords
from .errors import InvalidArgumentError
from .timeutil import Instant, from_timestamp_ms, to_days, to_timestamp_ms

__all__ = [
    "LUNAR_DAYS_MS",
    "MOON_PHASES",
    "MoonIllumination",
    "MoonPhase",
    "NextMoonPhase",
    "PhaseInstant",
    "get_moon_illumination",
    "phase_bucket",
]

SUN_DISTANCE_KM = 149598000
LUNAR_DAYS_MS = 2551442778  # Mean synodic month.
FIRST_NEW_MOON_2000_MS = 947178840000  # 2000-01-06T18:14:00Z


@dataclass(frozen=True)
class MoonPhase:
    """Named slice ``(start, end]`` of the lunar cycle (the first one includes 0)."""

    id: str
    name: str
    emoji: str
    code: str
    weight: float
    css: str
    start: float
    end: float


MOON_PHASES: Tuple[MoonPhase, ...] = (
    MoonPhase("newMoon", "New Moon", "\U0001F31A", ":new_moon_with_face:", 1, "wi-moon-new",
              0.0, 0.033863193308711),
    MoonPhase("waxingCrescentMoon", "Waxing Crescent", "\U0001F312", ":waxing_crescent_moon:", 6.3825,
              "wi-moon-wax-cres", 0.033863193308711, 0.216136806691289),
    MoonPhase("firstQuarterMoon", "First Quarter", "\U0001F313", ":first_quarter_moon:", 1,
              "wi-moon-first-quart", 0.216136806691289, 0.283863193308711),
    MoonPhase("waxingGibbousMoon", "Waxing Gibbous", "\U0001F314", ":waxing_gibbous_moon:", 6.3825,
              "wi-moon-wax-gibb", 0.283863193308711, 0.466136806691289),
    MoonPhase("fullMoon", "Full Moon", "\U0001F31D", ":full_moon_with_face:", 1, "wi-moon-full",
              0.466136806691289, 0.533863193308711),
    MoonPhase("waningGibbousMoon", "Waning Gibbous", "\U0001F316", ":waning_gibbous_moon:", 6.3825,
              "wi-moon-wan-gibb", 0.533863193308711, 0.716136806691289),
    MoonPhase("thirdQuarterMoon", "Third Quarter", "\U0001F317", ":last_quarter_moon:", 1,
              "wi-moon-third-quart", 0.716136806691289, 0.783863193308711),
    MoonPhase("waningCrescentMoon", "Waning Crescent", "\U0001F318", ":waning_crescent_moon:", 6.3825,
              "wi-moon-wan-cres", 0.783863193308711, 0.966136806691289),
    MoonPhase("newMoon", "New Moon", "\U0001F31A", ":new_moon_with_face:", 1, "wi-moon-new",
              0.966136806691289, 1.0),
)

_PHASE_ENDS = [phase.end for phase in MOON_PHASES]


@dataclass(frozen=True)
class PhaseInstant:
    value: datetime
    ts: float


@dataclass(frozen=True)
class NextMoonPhase:
    type: str
    value: datetime
    ts: float
    new_moon: PhaseInstant
    first_quarter: PhaseInstant
    full_moon: PhaseInstant
    third_quarter: PhaseInstant


@dataclass(frozen=True)
class MoonIllumination:
    fraction: float
    phase_value: float
    phase: MoonPhase
    angle: float
    next: NextMoonPhase


def phase_bucket(phase_value: float) -> MoonPhase:
    """Return the :data:`MOON_PHASES` entry whose range holds *phase_value*.

    A value sitting exactly on a boundary belongs to the earlier bucket.
    """

    if not 0.0 <= phase_value <= 1.0:
        raise InvalidArgumentError(f"phase value out of range: {phase_value!r}")
    return MOON_PHASES[bisect_left(_PHASE_ENDS, phase_value)]


def _next_phases(timestamp: float) -> NextMoonPhase:
    cycle = (timestamp - FIRST_NEW_MOON_2000_MS) % LUNAR_DAYS_MS
    quarter = LUNAR_DAYS_MS / 4

    def upcoming(offset: float) -> float:
        value = offset - cycle + timestamp
        return value + LUNAR_DAYS_MS if value < timestamp else value

    candidates = {
        "newMoon": LUNAR_DAYS_MS - cycle + timestamp,
        "firstQuarter": upcoming(quarter),
        "fullMoon": upcoming(LUNAR_DAYS_MS / 2),
        "thirdQuarter": upcoming(LUNAR_DAYS_MS - quarter),
    }
    kind = min(candidates, key=candidates.__getitem__)
    instants = {
        key: PhaseInstant(value=from_timestamp_ms(value), ts=value)
        for key, value in candidates.items()
    }

    return NextMoonPhase(
        type=kind,
        value=instants[kind].value,
        ts=candidates[kind],
        new_moon=instants["newMoon"],
        first_quarter=instants["firstQuarter"],
        full_moon=instants["fullMoon"],
        third_quarter=instants["thirdQuarter"],
    )


def get_moon_illumination(instant: Instant) -> MoonIllumination:
    """Illuminated fraction, phase and upcoming quarter phases of the moon.

    ``phase_value`` runs from 0 (new) through 0.5 (full) back to 1 (new);
    ``angle`` is the midpoint angle of the illuminated limb in radians,
    negative while waxing.
    """

    timestamp = to_timestamp_ms(instant)
    d = to_days(timestamp)
    sun = sun_coords(d)
    moon = moon_coords(d)

    # Rounding can push the cosine just past 1 near conjunction.
    elongation = np.arccos(
        np.clip(
            np.sin(sun.dec) * np.sin(moon.dec)
            + np.cos(sun.dec) * np.cos(moon.dec) * np.cos(sun.ra - moon.ra),
            -1.0,
            1.0,
        )
    )
    inc = float(
        np.arctan2(SUN_DISTANCE_KM * np.sin(elongation), moon.dist - SUN_DISTANCE_KM * np.cos(elongation))
    )
    angle = float(
        np.arctan2(
            np.cos(sun.dec) * np.sin(sun.ra - moon.ra),
            np.sin(sun.dec) * np.cos(moon.dec) - np.cos(sun.dec) * np.sin(moon.dec) * np.cos(sun.ra - moon.ra),
        )
    )
    phase_value = 0.5 + 0.5 * inc * (-1 if angle < 0 else 1) / math.pi

    return MoonIllumination(
        fraction=(1 + math.cos(inc)) / 2,
        phase_value=phase_value,
        phase=phase_bucket(phase_value),
        angle=angle,
        next=_next_phases(timestamp),
    )
