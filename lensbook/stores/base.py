"""
Interfaces the engine expects from its collaborators.

The engine never persists anything itself. Slot and booking stores own
persistence and must serialize validate-then-write per photographer; the
geodistance provider answers travel questions; the transition hook is where
an external wallet reacts to CANCELLED and COMPLETED.
"""

from datetime import datetime
from typing import Callable, ContextManager, Iterable, Optional, Protocol

from lensbook.schemas.availability_schema import Slot
from lensbook.schemas.booking_schema import (
    Booking,
    BookingStatus,
    LocationRef,
    TravelEstimate,
)

TransitionHook = Callable[[Booking, BookingStatus, BookingStatus], None]


class SlotStore(Protocol):
    def photographer_lock(self, photographer_id: int) -> ContextManager[None]: ...

    def list_slots(self, photographer_id: int) -> list[Slot]: ...

    def get_slot(self, slot_id: int) -> Slot:
        """Raises ``NotFoundError`` when the id is unknown."""
        ...

    def create_slot(self, slot: Slot) -> Slot: ...

    def create_slots(self, slots: Iterable[Slot]) -> list[Slot]:
        """All-or-nothing insert used by bulk schedule submission."""
        ...

    def update_slot(self, slot: Slot) -> Slot: ...

    def delete_slot(self, slot_id: int) -> None: ...

    def delete_all_for_photographer(self, photographer_id: int) -> int: ...


class BookingStore(Protocol):
    def photographer_lock(self, photographer_id: int) -> ContextManager[None]: ...

    def list_bookings_for_photographer(
        self,
        photographer_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Booking]: ...

    def get_booking(self, booking_id: int) -> Booking: ...

    def create_booking(self, booking: Booking) -> Booking: ...

    def update_booking_status(
        self,
        booking_id: int,
        status: BookingStatus,
        expected_status: Optional[BookingStatus] = None,
    ) -> Booking:
        """Raises ``ConflictError`` when the stored status is not ``expected_status``."""
        ...

    def update_booking(self, booking: Booking) -> Booking: ...


class GeodistanceProvider(Protocol):
    """Travel estimate between two locations.

    Raises ``TravelEstimateUnavailable`` when no estimate can be made.
    """

    def distance_and_travel_time(self, a: LocationRef, b: LocationRef) -> TravelEstimate: ...
