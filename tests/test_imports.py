"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_availability_schema(self):
        from lensbook.schemas.availability_schema import DayOfWeek, SlotStatus
        assert DayOfWeek.SUNDAY == 0
        assert SlotStatus.UNAVAILABLE == "unavailable"

    def test_import_booking_schema(self):
        from lensbook.schemas.booking_schema import BookingStatus
        assert BookingStatus.UNDER_REVIEW == "Under_Review"


class TestSchedulingImports:
    def test_package_reexports(self):
        from lensbook.scheduling import (
            BookingLifecycle, DistanceConflictDetector, RetryPolicy,
            build_weekly_schedule, calculate_price, overlaps, validate_slot,
        )
        assert callable(overlaps)
        assert callable(validate_slot)
        assert BookingLifecycle is not None
        assert DistanceConflictDetector is not None
        assert RetryPolicy().max_attempts >= 1
        assert callable(build_weekly_schedule)
        assert callable(calculate_price)

    def test_all_names_resolve(self):
        import lensbook.scheduling as scheduling

        for name in scheduling.__all__:
            assert hasattr(scheduling, name), name


class TestServiceImports:
    def test_services_and_stores(self):
        from lensbook.services.availability_service import AvailabilityService
        from lensbook.services.booking_service import BookingService
        from lensbook.stores.memory import InMemoryBookingStore, InMemorySlotStore

        assert AvailabilityService(InMemorySlotStore()) is not None
        assert BookingService is not None
        assert InMemoryBookingStore().list_bookings_for_photographer(1) == []

    def test_version(self):
        import lensbook

        assert lensbook.__version__


class TestModuleHomes:
    def test_bulk_request_lives_with_the_validator(self):
        from lensbook.scheduling import slot_validator, weekly_schedule

        assert callable(slot_validator.build_bulk_request)
        assert not hasattr(weekly_schedule, "build_bulk_request")
