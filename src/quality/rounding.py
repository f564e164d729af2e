"""Half-up rounding shared by every scoring stage.

Python's ``round`` rounds half to even; DQI scores, ratios and weights
round half up so that 0.125 -> 0.13 and 72.5 -> 73.
"""

from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round ``value`` half up to ``ndigits`` decimals.

    Values too large to scale, or already non-finite, come back unchanged.
    """
    factor = 10**ndigits
    scaled = value * factor
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled + 0.5) / factor


def round_int(value: float) -> int:
    """Round half up to the nearest integer."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round half up and clamp into [0, 100]."""
    return max(0, min(100, round_int(value)))
