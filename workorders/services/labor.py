"""Labor hours derived from time-in / time-out."""

from __future__ import annotations

from datetime import time

_SECONDS_PER_DAY = 24 * 3600


def _seconds(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


def compute_labor_hours(time_in: time | None, time_out: time | None) -> float | None:
    """Hours between time_in and time_out, or None until both are recorded.

    A time_out earlier than time_in is an overnight shift and wraps past
    midnight (22:00 -> 02:00 is 4.0). Equal times give 0.0.
    """
    if time_in is None or time_out is None:
        return None
    diff = _seconds(time_out) - _seconds(time_in)
    if diff < 0:
        diff += _SECONDS_PER_DAY
    return diff / 3600
