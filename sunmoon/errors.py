"""Exceptions raised by the sun and moon calculations."""

from __future__ import annotations

import math
from numbers import Real

__all__ = ["InvalidArgumentError", "require_number"]


class InvalidArgumentError(ValueError):
    """Raised when a coordinate or angle argument is missing or not a number."""


def require_number(value: object, name: str) -> float:
    """Return *value* as a float or raise :class:`InvalidArgumentError`."""

    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgumentError(f"{name} missing")
    number = float(value)
    if math.isnan(number):
        raise InvalidArgumentError(f"{name} missing")
    return number
