"""
Weekly schedule model: groups a photographer's slots into a seven-day grid.

The schedule is derived data. It is rebuilt from the slot store whenever a
slot is created, edited or deleted and is never persisted itself.
"""

import logging
from datetime import time
from typing import Iterable, Optional

from lensbook.schemas.availability_schema import (
    AvailabilityStats,
    DayOfWeek,
    DaySchedule,
    Slot,
    SlotStatus,
    WeeklySchedule,
)

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _sort_key(slot: Slot):
    return (slot.start_time, slot.end_time)


def build_weekly_schedule(photographer_id: int, slots: Iterable[Slot]) -> WeeklySchedule:
    """Group slots by day and sort each day by start time.

    All seven days are always present. A day is enabled when it holds at
    least one slot. Slots owned by other photographers are skipped. The
    sort is stable, so equal start times keep their input order.
    """
    days = {day: DaySchedule(day_of_week=day) for day in DayOfWeek}
    skipped = 0

    for slot in slots:
        if slot.photographer_id != photographer_id:
            skipped += 1
            continue
        days[slot.day_of_week].slots.append(slot)

    for day_schedule in days.values():
        day_schedule.slots.sort(key=_sort_key)
        day_schedule.is_enabled = len(day_schedule.slots) > 0

    if skipped:
        logger.debug(
            "Skipped %d slots not owned by photographer %s", skipped, photographer_id
        )
    return WeeklySchedule(photographer_id=photographer_id, days=days)


def compute_stats(slots: Iterable[Slot]) -> AvailabilityStats:
    """Tally slots by status in a single pass.

    ``utilization_rate`` is the share of slots currently marked unavailable,
    as a rounded percentage.
    """
    stats = AvailabilityStats()
    for slot in slots:
        stats.total_slots += 1
        if slot.status == SlotStatus.AVAILABLE:
            stats.available_slots += 1
        else:
            stats.unavailable_slots += 1

    if stats.total_slots:
        stats.utilization_rate = _round_half_up(
            100 * stats.unavailable_slots / stats.total_slots
        )
    return stats


def slots_for_day(
    slots: Iterable[Slot], photographer_id: int, day_of_week: DayOfWeek
) -> list[Slot]:
    """The slots a new slot on ``day_of_week`` must not overlap."""
    return sorted(
        (
            s for s in slots
            if s.photographer_id == photographer_id and s.day_of_week == day_of_week
        ),
        key=_sort_key,
    )


def find_slot(
    slots: Iterable[Slot], day_of_week: DayOfWeek, start_time: time, end_time: time
) -> Optional[Slot]:
    """Exact-match lookup by day and bounds."""
    for slot in slots:
        if (
            slot.day_of_week == day_of_week
            and slot.start_time == start_time
            and slot.end_time == end_time
        ):
            return slot
    return None
