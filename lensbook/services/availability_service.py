"""
Availability service: validate-then-persist flows for weekly slots.

Each write takes the photographer's lock, reads that photographer's current
slots, validates, and only then writes. Validation failures raise
``SlotValidationFailed`` carrying every error, and nothing is written.
"""

from contextlib import nullcontext
from datetime import date, time
from typing import Iterable, Optional, Union

from lensbook.errors import SlotValidationFailed, ValidationError
from lensbook.logging_context import get_request_logger
from lensbook.schemas.availability_schema import (
    AvailabilityStats,
    BulkScheduleForm,
    DayOfWeek,
    HourSlot,
    Slot,
    SlotDraft,
    SlotStatus,
    SlotUpdate,
    WeeklySchedule,
)
from lensbook.schemas.booking_schema import Booking
from lensbook.scheduling.day_availability import booked_intervals, expand_hourly_slots
from lensbook.scheduling.slot_validator import (
    build_bulk_request,
    validate_bulk_schedule,
    validate_slot,
)
from lensbook.scheduling.time_interval import parse_time_of_day
from lensbook.scheduling.weekly_schedule import (
    build_weekly_schedule,
    compute_stats,
    find_slot,
    slots_for_day,
)
from lensbook.stores.base import SlotStore

logger = get_request_logger(__name__)


class AvailabilityService:
    """Weekly schedule management for photographers."""

    def __init__(self, slot_store: SlotStore) -> None:
        self._store = slot_store

    def _lock(self, photographer_id: Optional[int]):
        if photographer_id is None:
            return nullcontext()
        return self._store.photographer_lock(photographer_id)

    def _reject(self, errors: list[ValidationError], what: str) -> None:
        logger.warning("%s rejected: %s", what, "; ".join(e.message for e in errors))
        raise SlotValidationFailed(errors)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def create_slot(self, draft: SlotDraft) -> Slot:
        """Validate a single slot against its day and persist it."""
        with self._lock(draft.photographer_id):
            existing: list[Slot] = []
            if draft.photographer_id is not None and draft.day_of_week is not None:
                existing = slots_for_day(
                    self._store.list_slots(draft.photographer_id),
                    draft.photographer_id,
                    draft.day_of_week,
                )
            errors = validate_slot(draft, existing)
            if errors:
                self._reject(errors, "Slot")

            return self._store.create_slot(
                Slot(
                    photographer_id=draft.photographer_id,
                    day_of_week=draft.day_of_week,
                    start_time=parse_time_of_day(draft.start_time),
                    end_time=parse_time_of_day(draft.end_time),
                    status=draft.status,
                )
            )

    def create_bulk(self, form: BulkScheduleForm, replace_existing: bool = False) -> list[Slot]:
        """
        Validate and persist a whole-week submission in one write.

        Submitted slots are checked against each other and, unless
        ``replace_existing`` is set, against the photographer's current
        slots. With ``replace_existing`` the current slots are deleted first.
        """
        with self._lock(form.photographer_id):
            errors = validate_bulk_schedule(form.photographer_id, form.schedule)
            drafts = build_bulk_request(form)

            if not errors and not replace_existing:
                current = self._store.list_slots(form.photographer_id)
                for draft in drafts:
                    errors.extend(
                        validate_slot(
                            draft,
                            slots_for_day(current, form.photographer_id, draft.day_of_week),
                        )
                    )
            if errors:
                self._reject(errors, "Bulk schedule")

            if replace_existing:
                self._store.delete_all_for_photographer(form.photographer_id)
            created = self._store.create_slots(
                Slot(
                    photographer_id=d.photographer_id,
                    day_of_week=d.day_of_week,
                    start_time=parse_time_of_day(d.start_time),
                    end_time=parse_time_of_day(d.end_time),
                    status=d.status,
                )
                for d in drafts
            )
        logger.info(
            "Bulk schedule saved for photographer %s: %d slots", form.photographer_id, len(created)
        )
        return created

    def update_slot(self, slot_id: int, update: SlotUpdate) -> Slot:
        """Apply a partial edit. The edited slot is excluded from the overlap scan."""
        current = self._store.get_slot(slot_id)
        with self._lock(current.photographer_id):
            current = self._store.get_slot(slot_id)
            merged = SlotDraft(
                photographer_id=current.photographer_id,
                day_of_week=update.day_of_week if update.day_of_week is not None else current.day_of_week,
                start_time=update.start_time if update.start_time is not None else current.start_time,
                end_time=update.end_time if update.end_time is not None else current.end_time,
                status=update.status if update.status is not None else current.status,
            )
            errors = validate_slot(
                merged,
                slots_for_day(
                    self._store.list_slots(current.photographer_id),
                    current.photographer_id,
                    merged.day_of_week,
                ),
                editing_slot_id=slot_id,
            )
            if errors:
                self._reject(errors, f"Slot {slot_id} edit")

            return self._store.update_slot(
                current.model_copy(update={
                    "day_of_week": merged.day_of_week,
                    "start_time": parse_time_of_day(merged.start_time),
                    "end_time": parse_time_of_day(merged.end_time),
                    "status": merged.status,
                })
            )

    def update_slot_status(self, slot_id: int, status: Union[SlotStatus, str]) -> Slot:
        """Open or close a slot. Bounds are unchanged so no overlap check applies."""
        current = self._store.get_slot(slot_id)
        return self._store.update_slot(current.model_copy(update={"status": SlotStatus(status)}))

    def delete_slot(self, slot_id: int) -> None:
        self._store.delete_slot(slot_id)

    def delete_all_for_photographer(self, photographer_id: int) -> int:
        with self._lock(photographer_id):
            return self._store.delete_all_for_photographer(photographer_id)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def weekly_schedule(self, photographer_id: int) -> WeeklySchedule:
        return build_weekly_schedule(photographer_id, self._store.list_slots(photographer_id))

    def stats(self, photographer_id: int) -> AvailabilityStats:
        return compute_stats(self._store.list_slots(photographer_id))

    def find_slot(
        self, photographer_id: int, day_of_week: DayOfWeek, start_time: time, end_time: time
    ) -> Optional[Slot]:
        return find_slot(self._store.list_slots(photographer_id), day_of_week, start_time, end_time)

    def hourly_availability(
        self, photographer_id: int, on_date: date, bookings: Iterable[Booking] = ()
    ) -> list[HourSlot]:
        """Bookable units for a concrete date, with booked units marked."""
        day = DayOfWeek.from_date(on_date)
        slots = slots_for_day(self._store.list_slots(photographer_id), photographer_id, day)
        return expand_hourly_slots(slots, booked_intervals(bookings, on_date))
