"""
Slot validation: format rules plus the no-overlap rule per photographer/day.

Validators never raise for bad input and never touch a store. They return
every problem found so a caller can show them all at once; an empty list
means the candidate may be persisted. Any non-empty list means do not write.

Usage:
    errors = validate_slot(draft, slots_for_day(current, pid, draft.day_of_week))
    if errors:
        ...  # reject, show errors
"""

import logging
from datetime import time
from typing import Iterable, Mapping, Optional, Union

from lensbook.errors import ErrorKind, ValidationError
from lensbook.schemas.availability_schema import (
    BulkScheduleDay,
    BulkScheduleForm,
    DayOfWeek,
    Slot,
    SlotDraft,
)
from lensbook.scheduling.time_interval import (
    format_clock,
    format_time_of_day,
    overlaps,
    parse_time_of_day,
)

logger = logging.getLogger(__name__)


def _check_time_field(
    value: Union[time, str, None],
    field_name: str,
    label: str,
    day: Optional[DayOfWeek],
    errors: list[ValidationError],
) -> Optional[time]:
    """Parse one bound, appending an InvalidRange error when it is unusable."""
    parsed = parse_time_of_day(value)
    if parsed is not None:
        return parsed

    prefix = f"{day.label}: " if day is not None else ""
    if value is None or (isinstance(value, str) and not value.strip()):
        message = f"{prefix}{label} is required"
    else:
        message = f"{prefix}{label} {value!r} is not a valid HH:MM[:SS] time"
    errors.append(
        ValidationError(
            kind=ErrorKind.INVALID_RANGE,
            message=message,
            field=field_name,
            day_of_week=int(day) if day is not None else None,
        )
    )
    return None


def _check_order(
    start: time, end: time, day: Optional[DayOfWeek], errors: list[ValidationError]
) -> bool:
    if end > start:
        return True
    prefix = f"{day.label}: " if day is not None else ""
    errors.append(
        ValidationError(
            kind=ErrorKind.INVALID_RANGE,
            message=f"{prefix}end time {format_clock(end)} must be after start time {format_clock(start)}",
            field="end_time",
            day_of_week=int(day) if day is not None else None,
        )
    )
    return False


def validate_slot(
    candidate: SlotDraft,
    existing_slots_for_same_day: Iterable[Slot],
    editing_slot_id: Optional[int] = None,
) -> list[ValidationError]:
    """Check one candidate slot against format rules and its day's slots.

    Args:
        candidate: The slot being created, or the merged result of an edit.
        existing_slots_for_same_day: Current slots for the same photographer
            and day. Slots for other days or photographers are ignored.
        editing_slot_id: Id of the slot being edited, excluded from the
            overlap scan so a slot never conflicts with its old self.

    Returns:
        All validation errors; empty when the candidate is admissible.
    """
    errors: list[ValidationError] = []
    day = candidate.day_of_week

    if candidate.photographer_id is None:
        errors.append(
            ValidationError(
                kind=ErrorKind.INVALID_RANGE,
                message="photographer is required",
                field="photographer_id",
            )
        )
    if day is None:
        errors.append(
            ValidationError(
                kind=ErrorKind.INVALID_RANGE,
                message="day of week is required",
                field="day_of_week",
            )
        )

    start = _check_time_field(candidate.start_time, "start_time", "start time", day, errors)
    end = _check_time_field(candidate.end_time, "end_time", "end time", day, errors)
    if start is None or end is None or not _check_order(start, end, day, errors):
        return errors

    for slot in existing_slots_for_same_day:
        if editing_slot_id is not None and slot.id == editing_slot_id:
            continue
        if day is not None and slot.day_of_week != day:
            continue
        if candidate.photographer_id is not None and slot.photographer_id != candidate.photographer_id:
            continue
        if overlaps(start, end, slot.start_time, slot.end_time):
            errors.append(
                ValidationError(
                    kind=ErrorKind.TIME_OVERLAP,
                    message=(
                        f"{format_clock(start)}-{format_clock(end)} overlaps existing slot "
                        f"{format_clock(slot.start_time)}-{format_clock(slot.end_time)}"
                    ),
                    field="start_time",
                    day_of_week=int(slot.day_of_week),
                )
            )

    if errors:
        logger.debug("Slot candidate rejected with %d errors", len(errors))
    return errors


def validate_bulk_schedule(
    photographer_id: Optional[int],
    per_day_slot_lists: Mapping[DayOfWeek, BulkScheduleDay],
) -> list[ValidationError]:
    """Check a whole-week submission.

    Each enabled day is checked for ordering and for overlaps among its own
    submitted slots (pairwise). Disabled days are ignored. At least one
    enabled day with a slot is required.
    """
    errors: list[ValidationError] = []

    if photographer_id is None:
        errors.append(
            ValidationError(
                kind=ErrorKind.INVALID_RANGE,
                message="photographer is required",
                field="photographer_id",
            )
        )

    has_enabled_day = any(
        day_schedule.is_enabled and day_schedule.slots
        for day_schedule in per_day_slot_lists.values()
    )
    if not has_enabled_day:
        errors.append(
            ValidationError(
                kind=ErrorKind.EMPTY_SCHEDULE,
                message="at least one working day with a time slot is required",
            )
        )

    for raw_day, day_schedule in sorted(per_day_slot_lists.items()):
        if not day_schedule.is_enabled:
            continue
        day = DayOfWeek(raw_day)

        intervals: list[tuple[time, time]] = []
        for entry in day_schedule.slots:
            start = _check_time_field(entry.start_time, "start_time", "start time", day, errors)
            end = _check_time_field(entry.end_time, "end_time", "end time", day, errors)
            if start is None or end is None:
                continue
            if _check_order(start, end, day, errors):
                intervals.append((start, end))

        for i, (a_start, a_end) in enumerate(intervals):
            for b_start, b_end in intervals[i + 1:]:
                if overlaps(a_start, a_end, b_start, b_end):
                    errors.append(
                        ValidationError(
                            kind=ErrorKind.TIME_OVERLAP,
                            message=(
                                f"{day.label}: {format_clock(a_start)}-{format_clock(a_end)} "
                                f"overlaps {format_clock(b_start)}-{format_clock(b_end)}"
                            ),
                            day_of_week=int(day),
                        )
                    )

    if errors:
        logger.debug(
            "Bulk schedule for photographer %s rejected with %d errors",
            photographer_id, len(errors),
        )
    return errors


def build_bulk_request(form: BulkScheduleForm) -> list[SlotDraft]:
    """Flatten enabled days of a bulk form into per-slot drafts.

    Parseable times are normalized to ``HH:MM:SS``; anything else is passed
    through untouched for the validator to report.
    """
    drafts: list[SlotDraft] = []
    for day, day_schedule in sorted(form.schedule.items()):
        if not day_schedule.is_enabled:
            continue
        for entry in day_schedule.slots:
            start = parse_time_of_day(entry.start_time)
            end = parse_time_of_day(entry.end_time)
            drafts.append(
                SlotDraft(
                    photographer_id=form.photographer_id,
                    day_of_week=DayOfWeek(day),
                    start_time=format_time_of_day(start) if start is not None else entry.start_time,
                    end_time=format_time_of_day(end) if end is not None else entry.end_time,
                    status=entry.status,
                )
            )
    return drafts
