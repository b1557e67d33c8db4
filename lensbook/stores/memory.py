"""
In-memory slot and booking stores.

In production these would be backed by the booking platform's API or a
database. Records are copied on the way in and out so callers can never
mutate stored state without going through the store.
"""

import itertools
import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional

from lensbook.errors import ConflictError, NotFoundError
from lensbook.schemas.availability_schema import Slot
from lensbook.schemas.booking_schema import Booking, BookingStatus

logger = logging.getLogger(__name__)


class _PhotographerLocks:
    """One re-entrant lock per photographer."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.RLock] = defaultdict(threading.RLock)

    @contextmanager
    def hold(self, photographer_id: int) -> Iterator[None]:
        with self._guard:
            lock = self._locks[photographer_id]
        with lock:
            yield


class InMemorySlotStore:
    """Slot store holding records in a dict keyed by id."""

    def __init__(self) -> None:
        self._slots: dict[int, Slot] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._photographer_locks = _PhotographerLocks()

    def photographer_lock(self, photographer_id: int):
        return self._photographer_locks.hold(photographer_id)

    def list_slots(self, photographer_id: int) -> list[Slot]:
        with self._lock:
            return [
                s.model_copy() for s in self._slots.values()
                if s.photographer_id == photographer_id
            ]

    def get_slot(self, slot_id: int) -> Slot:
        with self._lock:
            slot = self._slots.get(slot_id)
            if slot is None:
                raise NotFoundError(f"Slot {slot_id} not found")
            return slot.model_copy()

    def _insert(self, slot: Slot, now: datetime) -> Slot:
        stored = slot.model_copy(update={
            "id": next(self._ids),
            "created_at": now,
            "updated_at": now,
        })
        self._slots[stored.id] = stored
        return stored.model_copy()

    def create_slot(self, slot: Slot) -> Slot:
        with self._lock:
            created = self._insert(slot, datetime.now(timezone.utc))
        logger.info(
            "Slot created: %s for photographer %s on %s",
            created.id, created.photographer_id, created.day_of_week.label,
        )
        return created

    def create_slots(self, slots: Iterable[Slot]) -> list[Slot]:
        slots = list(slots)
        now = datetime.now(timezone.utc)
        with self._lock:
            created = [self._insert(slot, now) for slot in slots]
        logger.info("Bulk created %d slots", len(created))
        return created

    def update_slot(self, slot: Slot) -> Slot:
        with self._lock:
            if slot.id not in self._slots:
                raise NotFoundError(f"Slot {slot.id} not found")
            stored = slot.model_copy(update={"updated_at": datetime.now(timezone.utc)})
            self._slots[slot.id] = stored
        logger.info("Slot updated: %s", slot.id)
        return stored.model_copy()

    def delete_slot(self, slot_id: int) -> None:
        with self._lock:
            if self._slots.pop(slot_id, None) is None:
                raise NotFoundError(f"Slot {slot_id} not found")
        logger.info("Slot deleted: %s", slot_id)

    def delete_all_for_photographer(self, photographer_id: int) -> int:
        with self._lock:
            doomed = [
                slot_id for slot_id, s in self._slots.items()
                if s.photographer_id == photographer_id
            ]
            for slot_id in doomed:
                del self._slots[slot_id]
        logger.info("Deleted %d slots for photographer %s", len(doomed), photographer_id)
        return len(doomed)

    def reset(self) -> None:
        """Clear all slots. Used by test fixtures for isolation."""
        with self._lock:
            self._slots.clear()
            self._ids = itertools.count(1)


class InMemoryBookingStore:
    """Booking store with compare-and-set status updates."""

    def __init__(self) -> None:
        self._bookings: dict[int, Booking] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._photographer_locks = _PhotographerLocks()

    def photographer_lock(self, photographer_id: int):
        return self._photographer_locks.hold(photographer_id)

    def list_bookings_for_photographer(
        self,
        photographer_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Booking]:
        """Bookings for a photographer, optionally only those touching ``[start, end)``."""
        with self._lock:
            found = [
                b.model_copy(deep=True) for b in self._bookings.values()
                if b.photographer_id == photographer_id
                and (start is None or b.end_datetime > start)
                and (end is None or b.start_datetime < end)
            ]
        return sorted(found, key=lambda b: b.start_datetime)

    def get_booking(self, booking_id: int) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise NotFoundError(f"Booking {booking_id} not found")
            return booking.model_copy(deep=True)

    def create_booking(self, booking: Booking) -> Booking:
        now = datetime.now(timezone.utc)
        with self._lock:
            stored = booking.model_copy(deep=True, update={
                "id": next(self._ids),
                "created_at": booking.created_at or now,
                "updated_at": now,
            })
            self._bookings[stored.id] = stored
        logger.info(
            "Booking created: %s for photographer %s at %s",
            stored.id, stored.photographer_id, stored.start_datetime.isoformat(),
        )
        return stored.model_copy(deep=True)

    def update_booking_status(
        self,
        booking_id: int,
        status: BookingStatus,
        expected_status: Optional[BookingStatus] = None,
    ) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise NotFoundError(f"Booking {booking_id} not found")
            if expected_status is not None and booking.status != expected_status:
                raise ConflictError(
                    f"Booking {booking_id} is '{booking.status.value}', "
                    f"expected '{expected_status.value}'"
                )
            booking.status = status
            booking.updated_at = datetime.now(timezone.utc)
            stored = booking.model_copy(deep=True)
        logger.info("Booking %s status -> %s", booking_id, status.value)
        return stored

    def update_booking(self, booking: Booking) -> Booking:
        with self._lock:
            current = self._bookings.get(booking.id)
            if current is None:
                raise NotFoundError(f"Booking {booking.id} not found")
            if current.status != booking.status:
                raise ConflictError(
                    f"Booking {booking.id} changed status to '{current.status.value}' "
                    "while being edited"
                )
            stored = booking.model_copy(deep=True, update={
                "updated_at": datetime.now(timezone.utc),
            })
            self._bookings[booking.id] = stored
        logger.info("Booking updated: %s", booking.id)
        return stored.model_copy(deep=True)

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        with self._lock:
            self._bookings.clear()
            self._ids = itertools.count(1)
