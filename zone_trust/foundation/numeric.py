"""Numeric guards shared by the scoring code.

Upstream data is not trusted to be finite.  Every score that leaves this
package passes through one of these helpers first.
"""

from __future__ import annotations

import math


def clamp(value: float, low: float, high: float) -> float:
    """Clamp *value* into [low, high], mapping NaN to *low*."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's built-in round() uses banker's rounding; ranked totals must
    round 72.5 to 73 every time.
    """
    return int(math.floor(value + 0.5))


def round_to(value: float, places: int = 1) -> float:
    """Half-up rounding to a fixed number of decimal places."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor
