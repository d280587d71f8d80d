# File: utils/math_utils.py
"""Math and calculation utilities for Quest Board.

Pure Python math functions with no package-internal imports.

Functions:
    - round_half_up: Round to nearest integer, ties away from negative infinity
    - round_to_tenth: Half-up rounding to one decimal place
    - clamp: Bound a value to a closed range
    - clamp_int: Coerce, round and bound to an integer range
    - to_number: Lenient numeric coercion with a fallback
"""

from __future__ import annotations

import logging
import math
from typing import Any

# Module-level logger
_LOGGER = logging.getLogger(__name__)


# ==============================================================================
# Rounding
# ==============================================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Python's built-in round() uses banker's rounding, which would turn an
    award of 212.5 into 212. All XP arithmetic goes through this helper.

    Examples:
        round_half_up(212.5) → 213
        round_half_up(2.4) → 2
        round_half_up(-0.5) → 0
    """
    return math.floor(value + 0.5)


def round_to_tenth(value: float) -> float:
    """Round to one decimal place with halves rounded up.

    Examples:
        round_to_tenth(3.25) → 3.3
        round_to_tenth(1.04) → 1.0
    """
    return round_half_up(value * 10) / 10


# ==============================================================================
# Bounds
# ==============================================================================


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    return max(min_val, min(value, max_val))


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce loose input (str, int, float, None) to a finite float.

    Returns default for anything that cannot be read as a finite number.

    Examples:
        to_number("12") → 12.0
        to_number(None, 1) → 1
        to_number("abc", 5) → 5
    """
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        if value is not None:
            _LOGGER.debug("Non-numeric value %r, using %s", value, default)
        return default
    if not math.isfinite(number):
        _LOGGER.debug("Non-finite value %r, using %s", value, default)
        return default
    return number


def clamp_int(value: Any, min_val: int, max_val: int | None = None) -> int:
    """Coerce to a number, round half-up and clamp to [min_val, max_val].

    Non-numeric input collapses to min_val.

    Examples:
        clamp_int("7.5", 1, 7) → 7
        clamp_int(None, 1) → 1
        clamp_int(0.4, 1) → 1
    """
    number = to_number(value, default=float(min_val))
    rounded = round_half_up(number)
    if max_val is not None:
        rounded = min(max_val, rounded)
    return max(min_val, rounded)
