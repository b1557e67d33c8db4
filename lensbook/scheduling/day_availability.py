"""
Dated availability: expands a weekday's recurring slots into bookable units.

The weekly schedule says when a photographer works; bookings say which of
those hours are already taken on a given date. This module combines the
two into the grid a customer picks from. A unit is "booked" when it
overlaps any interval returned by ``booked_intervals``; slots themselves
only ever carry AVAILABLE or UNAVAILABLE.
"""

import logging
from datetime import date, time
from typing import Iterable, Optional

from lensbook.config import settings
from lensbook.schemas.availability_schema import HourSlot, Slot, SlotStatus
from lensbook.schemas.booking_schema import Booking, BookingStatus
from lensbook.scheduling.time_interval import (
    format_clock,
    minutes_since_midnight,
    time_from_minutes,
)

logger = logging.getLogger(__name__)

Interval = tuple[time, time]

# A booking holds its hours until it reaches a terminal status.
HOLDING_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.IN_PROGRESS,
    BookingStatus.UNDER_REVIEW,
})


def _available(slots: Iterable[Slot]) -> list[Slot]:
    return sorted(
        (s for s in slots if s.status == SlotStatus.AVAILABLE),
        key=lambda s: (s.start_time, s.end_time),
    )


def _is_booked(start_min: int, end_min: int, booked: Iterable[Interval]) -> bool:
    return any(
        start_min < _end_minutes(b_end) and minutes_since_midnight(b_start) < end_min
        for b_start, b_end in booked
    )


def _end_minutes(value: time) -> int:
    # 23:59:59 is the wire form of midnight at the end of the day
    if value == time(23, 59, 59):
        return 24 * 60
    return minutes_since_midnight(value)


def booked_intervals(bookings: Iterable[Booking], on_date: date) -> list[Interval]:
    """Time-of-day intervals taken by non-terminal bookings on ``on_date``.

    A booking spilling past midnight is clipped to the end of the day.
    """
    intervals: list[Interval] = []
    for booking in bookings:
        if booking.status not in HOLDING_STATUSES:
            continue
        if booking.start_datetime.date() != on_date:
            continue
        end = booking.end_datetime.time()
        if booking.end_datetime.date() != on_date:
            end = time(23, 59, 59)
        intervals.append((booking.start_datetime.time(), end))
    intervals.sort()
    return intervals


def expand_hourly_slots(
    slots: Iterable[Slot],
    booked: Iterable[Interval] = (),
    granularity_minutes: Optional[int] = None,
) -> list[HourSlot]:
    """Break AVAILABLE slots into fixed-length units, marking booked ones.

    Units that would run past the end of their slot are dropped. Units
    covered by more than one slot appear once. Output is ordered by time.
    """
    step = granularity_minutes or settings.schedule.slot_granularity_minutes
    booked = list(booked)
    units: dict[int, HourSlot] = {}

    for slot in _available(slots):
        start_min = minutes_since_midnight(slot.start_time)
        end_min = _end_minutes(slot.end_time)
        for unit_start in range(start_min, end_min - step + 1, step):
            if unit_start in units:
                continue
            is_booked = _is_booked(unit_start, unit_start + step, booked)
            unit_time = time_from_minutes(unit_start)
            units[unit_start] = HourSlot(
                time=format_clock(unit_time),
                hour=unit_time.hour,
                minute=unit_time.minute,
                is_available=not is_booked,
                is_booked=is_booked,
                status="booked" if is_booked else "available",
            )

    return [units[key] for key in sorted(units)]


def available_start_times(
    slots: Iterable[Slot],
    booked: Iterable[Interval] = (),
    granularity_minutes: Optional[int] = None,
) -> list[str]:
    """``HH:MM`` labels of every unit a booking may start in."""
    return [
        unit.time
        for unit in expand_hourly_slots(slots, booked, granularity_minutes)
        if unit.is_available
    ]


def end_times_for_start(
    slots: Iterable[Slot],
    booked: Iterable[Interval],
    start: time,
    granularity_minutes: Optional[int] = None,
) -> list[str]:
    """End times reachable from ``start`` without crossing a booked unit.

    Only the AVAILABLE slot containing ``start`` is considered, and the
    list stops at the first booked unit after it.
    """
    step = granularity_minutes or settings.schedule.slot_granularity_minutes
    booked = list(booked)
    start_min = minutes_since_midnight(start)

    containing = next(
        (
            s for s in _available(slots)
            if minutes_since_midnight(s.start_time) <= start_min < _end_minutes(s.end_time)
        ),
        None,
    )
    if containing is None:
        return []

    end_times: list[str] = []
    for unit_end in range(start_min + step, _end_minutes(containing.end_time) + 1, step):
        if _is_booked(unit_end - step, unit_end, booked):
            break
        end_times.append(format_clock(time_from_minutes(unit_end)))
    return end_times


def availability_range(slots: Iterable[Slot]) -> Optional[tuple[str, str]]:
    """Earliest start and latest end among AVAILABLE slots, as ``HH:MM``."""
    available = _available(slots)
    if not available:
        return None
    earliest = min(s.start_time for s in available)
    latest = max(s.end_time for s in available)
    return format_clock(earliest), format_clock(latest)


def is_interval_available(
    slots: Iterable[Slot],
    booked: Iterable[Interval],
    start: time,
    end: time,
) -> bool:
    """True iff ``[start, end)`` lies inside AVAILABLE slots and hits no booking.

    Back-to-back slots are treated as one continuous span.
    """
    start_min, end_min = minutes_since_midnight(start), _end_minutes(end)
    if end_min <= start_min:
        return False
    if _is_booked(start_min, end_min, booked):
        return False

    covered_until = start_min
    for slot in _available(slots):
        slot_start = minutes_since_midnight(slot.start_time)
        slot_end = _end_minutes(slot.end_time)
        if slot_start > covered_until:
            break
        covered_until = max(covered_until, slot_end)
        if covered_until >= end_min:
            return True
    return False
