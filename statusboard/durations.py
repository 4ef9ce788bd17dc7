"""Fixed-width countdown strings for the dashboard."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

DurationLike = Union[timedelta, int, float]


def _total_seconds(duration: DurationLike) -> int:
    """Whole seconds of a duration, clamped at zero."""
    if isinstance(duration, timedelta):
        seconds = int(duration.total_seconds())
    else:
        seconds = int(duration)
    return max(seconds, 0)


def format_short(duration: DurationLike) -> str:
    """
    Format a duration as HH:MM.

    Hours are not wrapped at 24, so 25 hours renders as ``25:00``.
    Negative durations render as ``00:00``.
    """
    seconds = _total_seconds(duration)
    hours = seconds // 3600
    minutes = (seconds // 60) % 60
    return f"{hours:02d}:{minutes:02d}"


def format_long(duration: DurationLike) -> str:
    """Format a duration as DD:HH:MM. Negative durations render as ``00:00:00``."""
    seconds = _total_seconds(duration)
    days = (seconds // 3600) // 24
    hours = (seconds // 3600) % 24
    minutes = (seconds // 60) % 60
    return f"{days:02d}:{hours:02d}:{minutes:02d}"


def time_until(end: Optional[Union[datetime, int, float]], now: Optional[datetime] = None) -> timedelta:
    """
    Remaining time until ``end``, never negative.

    ``end`` may be an aware datetime or epoch seconds. A missing end
    (unknown rotation) yields a zero duration.
    """
    if end is None:
        return timedelta(0)
    if now is None:
        now = datetime.now(timezone.utc)
    if not isinstance(end, datetime):
        end = datetime.fromtimestamp(end, tz=timezone.utc)
    remaining = end - now
    if remaining < timedelta(0):
        return timedelta(0)
    return remaining
