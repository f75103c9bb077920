"""Rounding, clamping and currency helpers shared by the scoring engine."""

from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with .5 always going up (2.5 -> 3), unlike Python's round()."""
    if ndigits == 0:
        return int(math.floor(value + 0.5))
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def clamp_score(raw: float) -> int:
    """Clamp a raw dimension score to 0-100 and round it."""
    return int(round_half_up(clamp(raw)))


def format_currency(amount: float) -> str:
    """Whole-dollar USD: 1234.5 -> '$1,235', -20 -> '-$20'."""
    rounded = int(round_half_up(abs(amount)))
    sign = "-" if amount < 0 and rounded else ""
    return f"{sign}${rounded:,}"


def format_thousands(amount: float) -> str:
    """Compact thousands: 1200000 -> '$1200K'."""
    return f"${int(round_half_up(amount / 1000))}K"
