"""Lenient numeric parsing for upstream payloads."""

from __future__ import annotations

import math
from typing import Any


def parse_float(value: Any) -> float:
    """Parse an upstream number (often a string) into a finite float.

    Missing, empty, malformed or non-finite values yield ``0.0``: the upstream
    occasionally emits empty strings and callers aggregate over the result.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def finite_or_zero(value: float) -> float:
    """Clamp a derived value that overflowed (or went NaN) back to ``0.0``."""

    return value if math.isfinite(value) else 0.0
