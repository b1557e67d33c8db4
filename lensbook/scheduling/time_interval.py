"""
Half-open interval helpers shared by slots and bookings.

Slots use ``datetime.time`` and bookings use ``datetime.datetime``; every
function here accepts either, as long as both ends of a comparison are the
same kind.
"""

import math
from datetime import date, datetime, time, timedelta
from typing import Optional, TypeVar, Union

T = TypeVar("T", time, datetime)

TimeLike = Union[time, datetime]

_PARSE_FORMATS = ("%H:%M:%S", "%H:%M")


def overlaps(a_start: T, a_end: T, b_start: T, b_end: T) -> bool:
    """True iff ``[a_start, a_end)`` and ``[b_start, b_end)`` share an instant.

    Intervals that only touch at an endpoint do not overlap.
    """
    return a_start < b_end and b_start < a_end


def _elapsed(start: TimeLike, end: TimeLike) -> timedelta:
    if isinstance(start, datetime) and isinstance(end, datetime):
        return end - start
    if isinstance(start, time) and isinstance(end, time):
        anchor = date(2000, 1, 1)
        return datetime.combine(anchor, end) - datetime.combine(anchor, start)
    raise TypeError(
        f"Cannot measure between {type(start).__name__} and {type(end).__name__}"
    )


def duration_minutes(start: TimeLike, end: TimeLike) -> int:
    """Whole minutes from start to end, or 0 when end is not after start."""
    elapsed = _elapsed(start, end)
    if elapsed <= timedelta(0):
        return 0
    return int(elapsed.total_seconds() // 60)


def duration_hours(start: TimeLike, end: TimeLike) -> float:
    """Hours from start to end as a float, or 0.0 when end is not after start."""
    elapsed = _elapsed(start, end)
    if elapsed <= timedelta(0):
        return 0.0
    return elapsed.total_seconds() / 3600


def parse_time_of_day(value: Union[time, str, None]) -> Optional[time]:
    """Parse ``HH:MM`` or ``HH:MM:SS``. Returns None when missing or malformed."""
    if value is None:
        return None
    if isinstance(value, time):
        return value.replace(microsecond=0)
    text = value.strip()
    for fmt in _PARSE_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def format_time_of_day(value: time) -> str:
    """Wire form of a slot time: ``HH:MM:SS``."""
    return value.strftime("%H:%M:%S")


def format_clock(value: TimeLike) -> str:
    """Display form: ``HH:MM``."""
    return value.strftime("%H:%M")


def minutes_since_midnight(value: TimeLike) -> int:
    return value.hour * 60 + value.minute


def time_from_minutes(minutes: int) -> time:
    """Inverse of ``minutes_since_midnight``; 1440 is clamped to 23:59:59."""
    if minutes >= 24 * 60:
        return time(23, 59, 59)
    return time(minutes // 60, minutes % 60)


def round_up(value: datetime, granularity_minutes: int) -> datetime:
    """Round a datetime up to the next multiple of ``granularity_minutes``.

    Values already on a boundary (with zero seconds) are returned unchanged.
    """
    if granularity_minutes <= 0:
        raise ValueError(f"granularity_minutes must be > 0, got {granularity_minutes}")
    midnight = value.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = (value - midnight).total_seconds() / 60
    steps = math.ceil(elapsed / granularity_minutes)
    return midnight + timedelta(minutes=steps * granularity_minutes)
