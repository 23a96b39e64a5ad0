from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta

import pytest

from conftest import REFERENCE_INSTANT
from sunmoon import MOON_PHASES, InvalidArgumentError, get_moon_illumination, phase_bucket
from sunmoon import illumination
from sunmoon.ephemeris import EquatorialCoordinates, sun_coords
from sunmoon.illumination import LUNAR_DAYS_MS


def test_moon_illumination_reference():
    illumination = get_moon_illumination(REFERENCE_INSTANT)
    assert illumination.fraction == pytest.approx(0.4848068202456373, rel=1e-9)
    assert illumination.phase_value == pytest.approx(0.7548368838538762, rel=1e-9)
    assert illumination.angle == pytest.approx(1.6732942678578346, rel=1e-9)
    assert illumination.phase.id == "thirdQuarterMoon"


def test_next_phase_prediction():
    upcoming = get_moon_illumination(REFERENCE_INSTANT).next
    assert upcoming.type == "newMoon"
    assert upcoming.value == datetime(2013, 3, 12, 4, 53, 32, 814000, tzinfo=UTC)
    assert upcoming.ts == 1363064012814
    assert upcoming.new_moon.value == upcoming.value
    for instant in (upcoming.first_quarter, upcoming.full_moon, upcoming.third_quarter):
        assert upcoming.value < instant.value <= REFERENCE_INSTANT + timedelta(milliseconds=LUNAR_DAYS_MS)


def test_next_phases_are_a_quarter_cycle_apart():
    upcoming = get_moon_illumination(REFERENCE_INSTANT).next
    quarter = LUNAR_DAYS_MS / 4
    assert upcoming.first_quarter.ts - upcoming.new_moon.ts == pytest.approx(quarter)
    assert upcoming.full_moon.ts - upcoming.first_quarter.ts == pytest.approx(quarter)
    assert upcoming.third_quarter.ts - upcoming.full_moon.ts == pytest.approx(quarter)


@pytest.mark.parametrize("days", range(0, 30, 2))
def test_illumination_ranges(days: int):
    illumination = get_moon_illumination(REFERENCE_INSTANT + timedelta(days=days))
    assert 0.0 <= illumination.fraction <= 1.0
    assert 0.0 <= illumination.phase_value <= 1.0
    assert illumination.phase is phase_bucket(illumination.phase_value)
    assert illumination.next.value > REFERENCE_INSTANT + timedelta(days=days)


def test_phase_buckets_partition_cycle():
    assert MOON_PHASES[0].start == 0.0
    assert MOON_PHASES[-1].end == 1.0
    for previous, current in zip(MOON_PHASES, MOON_PHASES[1:]):
        assert previous.end == current.start
    assert MOON_PHASES[0].id == MOON_PHASES[-1].id == "newMoon"


def test_phase_boundaries_claimed_once():
    for index, phase in enumerate(MOON_PHASES[:-1]):
        assert phase_bucket(phase.end) is phase
        assert phase_bucket(math.nextafter(phase.end, 2.0)) is MOON_PHASES[index + 1]
    assert phase_bucket(0.0) is MOON_PHASES[0]
    assert phase_bucket(1.0) is MOON_PHASES[-1]


def test_phase_bucket_grid():
    for step in range(1000):
        value = step / 1000
        owners = [
            phase
            for index, phase in enumerate(MOON_PHASES)
            if phase.start < value <= phase.end or (index == 0 and value == 0.0)
        ]
        assert owners == [phase_bucket(value)]


def test_quarter_buckets_are_narrow():
    widths = {phase.id: phase.end - phase.start for phase in MOON_PHASES[1:-1]}
    assert widths["firstQuarterMoon"] == pytest.approx(2 * 0.033863193308711)
    assert widths["waxingCrescentMoon"] == pytest.approx(0.18227361338257798)


@pytest.mark.parametrize("value", [-0.01, 1.01, float("nan")])
def test_phase_bucket_rejects_out_of_range(value: float):
    with pytest.raises(InvalidArgumentError):
        phase_bucket(value)


@pytest.mark.parametrize("days", [0, 3, 7, 11, 19, 23])
def test_illumination_at_exact_conjunction(monkeypatch: pytest.MonkeyPatch, days: int):
    def conjunct_moon(d):
        sun = sun_coords(d)
        return EquatorialCoordinates(ra=sun.ra, dec=sun.dec, dist=384400.0)

    monkeypatch.setattr(illumination, "moon_coords", conjunct_moon)
    result = get_moon_illumination(REFERENCE_INSTANT + timedelta(days=days))
    assert result.fraction == pytest.approx(0.0, abs=1e-9)
    assert result.phase.id == "newMoon"
