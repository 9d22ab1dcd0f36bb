"""Small helpers for comparing points in time."""

from __future__ import annotations

from datetime import datetime

__all__ = ["time_is_same_day", "time_is_within_range"]


def time_is_same_day(t1: datetime, t2: datetime) -> bool:
    """Return True when both times fall on the same calendar day.

    Each time is read in its own time zone, so the calendar dates are
    compared as they would be shown on a local clock.
    """
    return t1.date() == t2.date()


def time_is_within_range(t: datetime, t1: datetime, t2: datetime) -> bool:
    """Return True when ``t`` lies between ``t1`` and ``t2``, both inclusive."""
    if t1 == t2:
        return t == t1
    return t == t1 or t == t2 or t1 < t < t2