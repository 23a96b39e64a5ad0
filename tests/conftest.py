from __future__ import annotations

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sunmoon import SunEventTable  # noqa: E402
from sunmoon import events  # noqa: E402

KYIV_LAT = 50.5
KYIV_LNG = 30.5
REFERENCE_INSTANT = datetime(2013, 3, 5, tzinfo=UTC)


def utc(text: str) -> datetime:
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def assert_close_in_time(actual: datetime, expected: datetime, tolerance: timedelta) -> None:
    assert abs(actual - expected) <= tolerance, f"{actual.isoformat()} != {expected.isoformat()}"


@pytest.fixture
def isolated_default_table(monkeypatch: pytest.MonkeyPatch) -> SunEventTable:
    """Swap the process-wide event table for a fresh one during a test."""

    table = SunEventTable()
    monkeypatch.setattr(events, "_DEFAULT_TABLE", table)
    return table
