"""Shared test fixtures and helpers."""

from datetime import datetime, time
from typing import Optional, Union

import pytest

from lensbook.schemas.availability_schema import DayOfWeek, Slot, SlotDraft, SlotStatus
from lensbook.schemas.booking_schema import (
    Booking,
    BookingStatus,
    ExternalLocation,
    TravelEstimate,
)
from lensbook.scheduling.distance_conflict import DistanceConflictDetector, StaticGeodistance
from lensbook.services.availability_service import AvailabilityService
from lensbook.services.booking_service import BookingService
from lensbook.stores.memory import InMemoryBookingStore, InMemorySlotStore

PHOTOGRAPHER_ID = 7
OTHER_PHOTOGRAPHER_ID = 8
CUSTOMER_ID = 42


def t(value: str) -> time:
    """Parse ``HH:MM`` into a time."""
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def dt(day: int, value: str) -> datetime:
    """A datetime in March 2025 (the 17th is a Monday)."""
    clock = t(value)
    return datetime(2025, 3, day, clock.hour, clock.minute)


def make_slot(
    start: str,
    end: str,
    day: DayOfWeek = DayOfWeek.MONDAY,
    slot_id: Optional[int] = None,
    photographer_id: int = PHOTOGRAPHER_ID,
    status: SlotStatus = SlotStatus.AVAILABLE,
) -> Slot:
    """Helper to create a persisted-looking Slot."""
    return Slot(
        id=slot_id,
        photographer_id=photographer_id,
        day_of_week=day,
        start_time=t(start),
        end_time=t(end),
        status=status,
    )


def make_draft(
    start: Union[str, None],
    end: Union[str, None],
    day: Optional[DayOfWeek] = DayOfWeek.MONDAY,
    photographer_id: Optional[int] = PHOTOGRAPHER_ID,
    status: SlotStatus = SlotStatus.AVAILABLE,
) -> SlotDraft:
    return SlotDraft(
        photographer_id=photographer_id,
        day_of_week=day,
        start_time=start,
        end_time=end,
        status=status,
    )


def make_booking(
    start: datetime,
    end: datetime,
    status: BookingStatus = BookingStatus.CONFIRMED,
    location_id: Optional[int] = 1,
    location_name: Optional[str] = "Riverside Park",
    booking_id: Optional[int] = None,
    photographer_id: int = PHOTOGRAPHER_ID,
    external_location: Optional[ExternalLocation] = None,
    created_at: Optional[datetime] = None,
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    if external_location is not None:
        location_id = None
    return Booking(
        id=booking_id,
        user_id=CUSTOMER_ID,
        photographer_id=photographer_id,
        location_id=location_id,
        location_name=location_name if location_id is not None else None,
        external_location=external_location,
        start_datetime=start,
        end_datetime=end,
        status=status,
        created_at=created_at,
    )


@pytest.fixture
def slot_store():
    store = InMemorySlotStore()
    yield store
    store.reset()


@pytest.fixture
def booking_store():
    store = InMemoryBookingStore()
    yield store
    store.reset()


@pytest.fixture
def geodistance():
    return StaticGeodistance({
        ("venue:1", "venue:2"): TravelEstimate(km=8.0, minutes=25),
        ("venue:1", "venue:3"): TravelEstimate(km=1.0, minutes=5),
    })


@pytest.fixture
def detector(geodistance):
    return DistanceConflictDetector(geodistance, travel_speed_kmh=30.0, granularity_minutes=5)


@pytest.fixture
def availability_service(slot_store):
    return AvailabilityService(slot_store)


@pytest.fixture
def transition_log():
    return []


@pytest.fixture
def booking_service(booking_store, detector, transition_log):
    def hook(booking, from_status, to_status):
        transition_log.append((booking.id, from_status, to_status))

    return BookingService(booking_store, detector, on_transition=hook, service_fee_rate=0.0)
