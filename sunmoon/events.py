"""Named sun events driven by solar altitude angles."""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from threading import Lock
from typing import Iterable, Optional, Tuple

__all__ = [
    "DEFAULT_DEPRECATED_NAMES",
    "DEFAULT_SUN_EVENTS",
    "SunEventDefinition",
    "SunEventTable",
    "default_table",
    "register_deprecated_alias",
    "register_twilight_event",
]

LOGGER = logging.getLogger(__name__)

_EVENT_NAME = re.compile(r"(?![0-9])[a-zA-Z0-9$_]+")


@dataclass(frozen=True)
class SunEventDefinition:
    """Solar altitude (degrees) and the names of its morning/evening crossings."""

    angle: float
    rise_name: str
    set_name: str
    rise_pos: Optional[int] = None
    set_pos: Optional[int] = None


DEFAULT_SUN_EVENTS: Tuple[SunEventDefinition, ...] = (
    SunEventDefinition(6.0, "goldenHourDawnEnd", "goldenHourDuskStart"),
    SunEventDefinition(-0.3, "sunriseEnd", "sunsetStart"),
    SunEventDefinition(-0.833, "sunriseStart", "sunsetEnd"),
    SunEventDefinition(-1.0, "goldenHourDawnStart", "goldenHourDuskEnd"),
    SunEventDefinition(-4.0, "blueHourDawnEnd", "blueHourDuskStart"),
    SunEventDefinition(-6.0, "civilDawn", "civilDusk"),
    SunEventDefinition(-8.0, "blueHourDawnStart", "blueHourDuskEnd"),
    SunEventDefinition(-12.0, "nauticalDawn", "nauticalDusk"),
    SunEventDefinition(-15.0, "amateurDawn", "amateurDusk"),
    SunEventDefinition(-18.0, "astronomicalDawn", "astronomicalDusk"),
)

# (alias, canonical event name)
DEFAULT_DEPRECATED_NAMES: Tuple[Tuple[str, str], ...] = (
    ("dawn", "civilDawn"),
    ("dusk", "civilDusk"),
    ("nightEnd", "astronomicalDawn"),
    ("night", "astronomicalDusk"),
    ("nightStart", "astronomicalDusk"),
    ("goldenHour", "goldenHourDuskStart"),
    ("sunrise", "sunriseStart"),
    ("sunset", "sunsetEnd"),
    ("goldenHourEnd", "goldenHourDawnEnd"),
    ("goldenHourStart", "goldenHourDuskStart"),
)


def _valid_name(name: object) -> bool:
    return isinstance(name, str) and _EVENT_NAME.fullmatch(name) is not None


class SunEventTable:
    """Ordered sun event definitions plus deprecated aliases for their names.

    Reads return snapshots; writes are serialised by an internal lock.
    """

    def __init__(
        self,
        events: Iterable[SunEventDefinition] = DEFAULT_SUN_EVENTS,
        deprecated_names: Iterable[Tuple[str, str]] = DEFAULT_DEPRECATED_NAMES,
    ) -> None:
        self._events: Tuple[SunEventDefinition, ...] = tuple(events)
        self._deprecated: Tuple[Tuple[str, str], ...] = tuple(deprecated_names)
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"SunEventTable(events={len(self._events)}, deprecated={len(self._deprecated)})"

    @property
    def events(self) -> Tuple[SunEventDefinition, ...]:
        return self._events

    @property
    def deprecated_names(self) -> Tuple[Tuple[str, str], ...]:
        return self._deprecated

    def event_names(self) -> set[str]:
        names: set[str] = set()
        for event in self._events:
            names.update((event.rise_name, event.set_name))
        return names

    def add_time(
        self,
        angle: float,
        rise_name: str,
        set_name: str,
        rise_pos: Optional[int] = None,
        set_pos: Optional[int] = None,
        degree: bool = True,
    ) -> bool:
        """Append a new altitude event.

        Parameters
        ----------
        angle:
            Solar altitude of the event, degrees unless ``degree`` is false.
        rise_name, set_name:
            Names of the morning and evening crossings. Both must be
            identifiers (letters, digits, ``$`` or ``_``, not starting with a
            digit) and unused by any existing event.
        rise_pos, set_pos:
            Optional ordinal positions overriding the computed ones.

        Returns
        -------
        bool
            ``True`` when the event was added.
        """

        if (
            isinstance(angle, bool)
            or not isinstance(angle, (int, float))
            or math.isnan(angle)
            or not _valid_name(rise_name)
            or not _valid_name(set_name)
            or rise_name == set_name
        ):
            self._log_rejected("twilight_event_rejected", rise_name, set_name, "invalid")
            return False

        with self._lock:
            taken = self.event_names()
            if rise_name in taken or set_name in taken:
                self._log_rejected("twilight_event_rejected", rise_name, set_name, "duplicate")
                return False

            angle_deg = float(angle) if degree else math.degrees(angle)
            self._events = self._events + (
                SunEventDefinition(angle_deg, rise_name, set_name, rise_pos, set_pos),
            )
            self._deprecated = tuple(
                pair for pair in self._deprecated if pair[0] not in (rise_name, set_name)
            )

        LOGGER.info(
            json.dumps(
                {
                    "event": "twilight_event_registered",
                    "angle": angle_deg,
                    "rise": rise_name,
                    "set": set_name,
                }
            )
        )
        return True

    def add_deprecated_name(self, alias: str, canonical: str) -> bool:
        """Let *alias* resolve to the existing event named *canonical*."""

        if not _valid_name(alias) or not isinstance(canonical, str) or not canonical:
            self._log_rejected("deprecated_alias_rejected", alias, canonical, "invalid")
            return False

        with self._lock:
            names = self.event_names()
            if alias in names or canonical not in names:
                self._log_rejected("deprecated_alias_rejected", alias, canonical, "unknown")
                return False
            self._deprecated = self._deprecated + ((alias, canonical),)

        LOGGER.info(
            json.dumps({"event": "deprecated_alias_registered", "alias": alias, "canonical": canonical})
        )
        return True

    @staticmethod
    def _log_rejected(event: str, first: object, second: object, reason: str) -> None:
        LOGGER.warning(
            json.dumps({"event": event, "names": [str(first), str(second)], "reason": reason})
        )


_DEFAULT_TABLE = SunEventTable()


def default_table() -> SunEventTable:
    """Return the process-wide table used when no table is passed explicitly."""

    return _DEFAULT_TABLE


def register_twilight_event(
    angle: float,
    rise_name: str,
    set_name: str,
    rise_pos: Optional[int] = None,
    set_pos: Optional[int] = None,
    degree: bool = True,
) -> bool:
    return _DEFAULT_TABLE.add_time(angle, rise_name, set_name, rise_pos, set_pos, degree)


def register_deprecated_alias(alias: str, canonical: str) -> bool:
    return _DEFAULT_TABLE.add_deprecated_name(alias, canonical)
