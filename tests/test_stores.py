"""Tests for the in-memory reference stores."""

import threading

import pytest

from lensbook.errors import ConflictError, NotFoundError
from lensbook.schemas.booking_schema import BookingStatus
from tests.conftest import PHOTOGRAPHER_ID, dt, make_booking, make_slot


class TestInMemorySlotStore:
    def test_assigns_ids_and_timestamps(self, slot_store):
        created = slot_store.create_slot(make_slot("09:00", "10:00"))
        assert created.id == 1
        assert created.created_at is not None

    def test_returns_copies(self, slot_store):
        created = slot_store.create_slot(make_slot("09:00", "10:00"))
        created.photographer_id = 999
        assert slot_store.get_slot(created.id).photographer_id == PHOTOGRAPHER_ID

    def test_missing_slot(self, slot_store):
        with pytest.raises(NotFoundError):
            slot_store.get_slot(42)
        with pytest.raises(NotFoundError):
            slot_store.update_slot(make_slot("09:00", "10:00", slot_id=42))

    def test_reset(self, slot_store):
        slot_store.create_slot(make_slot("09:00", "10:00"))
        slot_store.reset()
        assert slot_store.list_slots(PHOTOGRAPHER_ID) == []
        assert slot_store.create_slot(make_slot("09:00", "10:00")).id == 1


class TestInMemoryBookingStore:
    def test_range_filter(self, booking_store):
        booking_store.create_booking(make_booking(dt(17, "09:00"), dt(17, "10:00")))
        booking_store.create_booking(make_booking(dt(18, "09:00"), dt(18, "10:00")))
        found = booking_store.list_bookings_for_photographer(
            PHOTOGRAPHER_ID, dt(17, "00:00"), dt(18, "00:00")
        )
        assert [b.start_datetime for b in found] == [dt(17, "09:00")]

    def test_compare_and_set_status(self, booking_store):
        booking = booking_store.create_booking(
            make_booking(dt(17, "09:00"), dt(17, "10:00"), status=BookingStatus.PENDING)
        )
        updated = booking_store.update_booking_status(
            booking.id, BookingStatus.CONFIRMED, expected_status=BookingStatus.PENDING
        )
        assert updated.status == BookingStatus.CONFIRMED
        with pytest.raises(ConflictError):
            booking_store.update_booking_status(
                booking.id, BookingStatus.CANCELLED, expected_status=BookingStatus.PENDING
            )

    def test_edit_conflicts_when_status_moved(self, booking_store):
        booking = booking_store.create_booking(
            make_booking(dt(17, "09:00"), dt(17, "10:00"), status=BookingStatus.PENDING)
        )
        booking_store.update_booking_status(booking.id, BookingStatus.CONFIRMED)
        booking.special_requests = "golden hour"
        with pytest.raises(ConflictError):
            booking_store.update_booking(booking)

    def test_missing_booking(self, booking_store):
        with pytest.raises(NotFoundError):
            booking_store.update_booking_status(1, BookingStatus.CONFIRMED)


class TestPhotographerLock:
    def test_reentrant(self, booking_store):
        with booking_store.photographer_lock(PHOTOGRAPHER_ID):
            with booking_store.photographer_lock(PHOTOGRAPHER_ID):
                pass

    def test_serializes_same_photographer(self, slot_store):
        order = []
        inside = threading.Event()
        release = threading.Event()

        def holder():
            with slot_store.photographer_lock(PHOTOGRAPHER_ID):
                inside.set()
                release.wait(timeout=5)
                order.append("holder")

        def waiter():
            inside.wait(timeout=5)
            with slot_store.photographer_lock(PHOTOGRAPHER_ID):
                order.append("waiter")

        threads = [threading.Thread(target=holder), threading.Thread(target=waiter)]
        for thread in threads:
            thread.start()
        inside.wait(timeout=5)
        release.set()
        for thread in threads:
            thread.join(timeout=5)
        assert order == ["holder", "waiter"]
