from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta, timezone

import erfa
import pytest

from sunmoon import InvalidArgumentError
from sunmoon.timeutil import (
    DAY_MS,
    J2000,
    as_datetime,
    from_julian_day,
    from_timestamp_ms,
    julian_to_datetime,
    localize,
    snap_to_hour,
    to_days,
    to_julian_day,
    to_timestamp_ms,
)


def _erfa_julian_day(dt: datetime) -> float:
    utc1, utc2 = erfa.dtf2d(
        "UTC",
        dt.year,
        dt.month,
        dt.day,
        dt.hour,
        dt.minute,
        dt.second + dt.microsecond / 1_000_000,
    )
    return utc1 + utc2


@pytest.mark.parametrize(
    "timestamp",
    [0, 1, 946728000000, 1362441600000, 1362441600123, 4102444799999, -86400001, 253402300799999],
)
def test_julian_round_trip(timestamp: int):
    assert round(from_julian_day(to_julian_day(timestamp))) == timestamp


def test_julian_epochs():
    assert to_julian_day(0) == 2440587.5
    assert to_julian_day(to_timestamp_ms(datetime(2000, 1, 1, 12, tzinfo=UTC))) == J2000
    assert to_days(946728000000) == 0.0


@pytest.mark.parametrize(
    "moment",
    [
        datetime(1999, 12, 31, 23, 59, 59, tzinfo=UTC),
        datetime(2013, 3, 5, 10, 10, 57, tzinfo=UTC),
        datetime(2025, 10, 21, 6, 30, 0, 250000, tzinfo=UTC),
    ],
)
def test_julian_day_matches_erfa(moment: datetime):
    assert to_julian_day(to_timestamp_ms(moment)) == pytest.approx(_erfa_julian_day(moment), abs=1e-8)


def test_julian_to_datetime():
    assert julian_to_datetime(J2000) == datetime(2000, 1, 1, 12, tzinfo=UTC)
    # 0.75 ms past J2000 floors to the millisecond.
    assert julian_to_datetime(J2000 + 0.75 / DAY_MS) == datetime(2000, 1, 1, 12, tzinfo=UTC)
    assert julian_to_datetime(J2000 - 0.25 / DAY_MS) == datetime(2000, 1, 1, 11, 59, 59, 999000, tzinfo=UTC)


def test_timestamp_conversions():
    aware = datetime(2013, 3, 5, 2, tzinfo=timezone(timedelta(hours=2)))
    assert to_timestamp_ms(aware) == 1362441600000
    assert to_timestamp_ms(datetime(2013, 3, 5)) == 1362441600000
    assert to_timestamp_ms(1362441600000) == 1362441600000.0
    assert from_timestamp_ms(1362441600000) == datetime(2013, 3, 5, tzinfo=UTC)
    assert as_datetime(1362441600000) == datetime(2013, 3, 5, tzinfo=UTC)
    assert as_datetime(aware) is aware


@pytest.mark.parametrize("value", ["2013-03-05", None, True])
def test_timestamp_rejects_other_types(value: object):
    with pytest.raises(InvalidArgumentError):
        to_timestamp_ms(value)  # type: ignore[arg-type]


def test_nan_propagates():
    assert math.isnan(to_julian_day(float("nan")))


def test_snap_to_hour():
    plus_two = timezone(timedelta(hours=2))
    moment = datetime(2013, 3, 5, 1, 30, tzinfo=plus_two)
    assert snap_to_hour(moment, 12) == to_timestamp_ms(datetime(2013, 3, 5, 12, tzinfo=plus_two))
    assert snap_to_hour(moment, 12, use_utc=True) == to_timestamp_ms(datetime(2013, 3, 4, 12, tzinfo=UTC))
    assert snap_to_hour(moment, 0, use_utc=True) == to_timestamp_ms(datetime(2013, 3, 4, tzinfo=UTC))


def test_localize_keeps_aware_zone():
    plus_two = timezone(timedelta(hours=2))
    moment = datetime(2013, 3, 5, 1, 30, tzinfo=plus_two)
    assert localize(moment).tzinfo is plus_two
    assert localize(moment, use_utc=True).tzinfo is UTC
    assert localize(1362441600000).tzinfo is not None
