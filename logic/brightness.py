"""Lux to backlight brightness curve."""

from __future__ import annotations

import math
from typing import Optional

from config.constants import BRIGHTNESS_SCALE, LOWER_BACKLIGHT

LUX_UNIT = "lux"


def calculate_brightness(level: float, unit: str) -> float:
    """Map an ambient light reading to a normalized brightness.

    Follows the Windows lux interpretation table: ``log10(lux + 1) / 5``,
    so 0 lux gives 0.0, 9 lux gives 0.2 and ~100000 lux reaches 1.0.
    Negative readings count as 0 lux.
    Readings in any unit other than lux yield 0.0; the caller is expected
    to report the unknown unit.
    """
    if unit != LUX_UNIT:
        return 0.0
    return math.log10(max(level, 0.0) + 1) / 5.0


def backlight_setpoint(
    brightness: float,
    lower: float = LOWER_BACKLIGHT,
    scale: float = BRIGHTNESS_SCALE,
    upper: Optional[float] = None,
) -> float:
    """Scale a normalized brightness into the backlight range.

    The result is ``brightness * scale + lower``. It is only clamped to
    ``[lower, upper]`` when ``upper`` is given.
    """
    value = brightness * scale + lower
    if upper is not None:
        value = max(lower, min(upper, value))
    return value
