"""
Booking service: pricing, travel checks and status changes for bookings.

Creation holds the photographer's lock for the whole read-check-write so
two customers cannot both take the same hours. Status changes are checked
by ``BookingLifecycle`` first, then written with the status they were
computed from; the transition hook fires only after the write succeeds.
"""

from datetime import datetime, time, timedelta
from typing import Optional

from lensbook.config import settings
from lensbook.errors import ConflictError, IllegalTransitionError, TravelEstimateUnavailable
from lensbook.logging_context import get_request_logger
from lensbook.schemas.booking_schema import (
    Booking,
    BookingStatus,
    CreateBookingRequest,
    DistanceConflict,
    LocationRef,
    PriceCalculation,
    RescheduleRequest,
)
from lensbook.scheduling.booking_lifecycle import BookingLifecycle, settlement_for
from lensbook.scheduling.cleanup_policy import expired_pending_bookings
from lensbook.scheduling.day_availability import HOLDING_STATUSES
from lensbook.scheduling.distance_conflict import DistanceConflictDetector
from lensbook.scheduling.pricing import apply_service_fee, calculate_price
from lensbook.scheduling.time_interval import overlaps
from lensbook.stores.base import BookingStore, TransitionHook

logger = get_request_logger(__name__)


def _day_bounds(value: datetime) -> tuple[datetime, datetime]:
    start = datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)
    return start, start + timedelta(days=1)


class BookingService:
    """Creates bookings and drives them through their lifecycle."""

    def __init__(
        self,
        booking_store: BookingStore,
        detector: DistanceConflictDetector,
        on_transition: Optional[TransitionHook] = None,
        service_fee_rate: Optional[float] = None,
    ) -> None:
        self._store = booking_store
        self._detector = detector
        self._on_transition = on_transition
        self._service_fee_rate = (
            settings.pricing.service_fee_rate if service_fee_rate is None else service_fee_rate
        )

    # ------------------------------------------------------------------ #
    # Quotes and advisories
    # ------------------------------------------------------------------ #

    def quote(
        self,
        photographer_rate: float,
        location_rate: Optional[float],
        start: datetime,
        end: datetime,
    ) -> PriceCalculation:
        """Price an interval, including the configured service fee."""
        return apply_service_fee(
            calculate_price(photographer_rate, location_rate, start, end),
            self._service_fee_rate,
        )

    def check_distance(
        self,
        photographer_id: int,
        start: datetime,
        end: datetime,
        location: LocationRef,
        exclude_booking_id: Optional[int] = None,
    ) -> DistanceConflict:
        """Travel advisory for an interval. Inconclusive when no estimate is available."""
        day_start, day_end = _day_bounds(start)
        bookings = self._store.list_bookings_for_photographer(photographer_id, day_start, day_end)
        try:
            return self._detector.detect(start, end, location, bookings, exclude_booking_id)
        except TravelEstimateUnavailable as exc:
            logger.warning("Travel check skipped for %s: %s", location.key, exc)
            return DistanceConflict()

    def _ensure_free(
        self,
        photographer_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> None:
        for other in self._store.list_bookings_for_photographer(photographer_id, start, end):
            if other.id == exclude_booking_id or other.status not in HOLDING_STATUSES:
                continue
            if overlaps(start, end, other.start_datetime, other.end_datetime):
                raise ConflictError(
                    f"Photographer {photographer_id} is already booked "
                    f"{other.start_datetime.isoformat()} - {other.end_datetime.isoformat()} "
                    f"(booking {other.id}, {other.status.value})"
                )

    # ------------------------------------------------------------------ #
    # Creation and edits
    # ------------------------------------------------------------------ #

    def create_booking(
        self,
        user_id: int,
        request: CreateBookingRequest,
        photographer_rate: float,
        location_rate: Optional[float] = None,
    ) -> tuple[Booking, DistanceConflict]:
        """
        Price and persist a PENDING booking.

        Returns:
            The stored booking and the travel advisory for it. A travel
            conflict never blocks creation.

        Raises:
            InvalidDurationError: If the interval is empty.
            ConflictError: If the photographer already holds an overlapping booking.
        """
        price = self.quote(
            photographer_rate, location_rate, request.start_datetime, request.end_datetime
        )
        with self._store.photographer_lock(request.photographer_id):
            self._ensure_free(request.photographer_id, request.start_datetime, request.end_datetime)
            advisory = self.check_distance(
                request.photographer_id,
                request.start_datetime,
                request.end_datetime,
                request.location_ref(),
            )
            booking = self._store.create_booking(
                Booking(
                    user_id=user_id,
                    photographer_id=request.photographer_id,
                    location_id=request.location_id,
                    location_name=request.location_name,
                    location_latitude=request.location_latitude,
                    location_longitude=request.location_longitude,
                    external_location=request.external_location,
                    start_datetime=request.start_datetime,
                    end_datetime=request.end_datetime,
                    special_requests=request.special_requests,
                    status=BookingStatus.PENDING,
                    total_price=price.total_price,
                )
            )
        if advisory.has_conflict:
            logger.warning("Booking %s created despite travel conflict", booking.id)
        return booking, advisory

    def reschedule_booking(
        self,
        booking_id: int,
        request: RescheduleRequest,
        photographer_rate: float,
        location_rate: Optional[float] = None,
    ) -> tuple[Booking, DistanceConflict]:
        """Move a PENDING booking to a new interval and re-price it."""
        booking = self._store.get_booking(booking_id)
        price = self.quote(
            photographer_rate, location_rate, request.start_datetime, request.end_datetime
        )
        with self._store.photographer_lock(booking.photographer_id):
            booking = self._store.get_booking(booking_id)
            BookingLifecycle(booking).reschedule(request.start_datetime, request.end_datetime)
            self._ensure_free(
                booking.photographer_id,
                request.start_datetime,
                request.end_datetime,
                exclude_booking_id=booking_id,
            )
            advisory = self.check_distance(
                booking.photographer_id,
                request.start_datetime,
                request.end_datetime,
                booking.location_ref(),
                exclude_booking_id=booking_id,
            )
            booking.total_price = price.total_price
            if request.special_requests is not None:
                booking.special_requests = request.special_requests
            stored = self._store.update_booking(booking)
        logger.info("Booking %s rescheduled", booking_id)
        return stored, advisory

    # ------------------------------------------------------------------ #
    # Status changes
    # ------------------------------------------------------------------ #

    def _transition(self, booking_id: int, to_status: BookingStatus) -> Booking:
        booking = self._store.get_booking(booking_id)
        from_status = booking.status
        BookingLifecycle(booking).transition_to(to_status)

        stored = self._store.update_booking_status(
            booking_id, to_status, expected_status=from_status
        )
        settlement = settlement_for(to_status)
        if settlement is not None:
            logger.info("Booking %s requires escrow %s", booking_id, settlement.value)
        if self._on_transition is not None:
            self._on_transition(stored, from_status, to_status)
        return stored

    def confirm_booking(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.CONFIRMED)

    def start_booking(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.IN_PROGRESS)

    def complete_booking(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.COMPLETED)

    def cancel_booking(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.CANCELLED)

    def expire_booking(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.EXPIRED)

    def file_complaint(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.UNDER_REVIEW)

    def resolve_complaint_with_refund(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.CANCELLED)

    def expire_stale_bookings(
        self, photographer_id: int, now: Optional[datetime] = None
    ) -> list[Booking]:
        """Expire this photographer's PENDING bookings older than the configured TTL.

        Bookings that changed status in the meantime are skipped.
        """
        now = now or datetime.now().astimezone()
        stale = expired_pending_bookings(
            self._store.list_bookings_for_photographer(photographer_id), now
        )
        expired: list[Booking] = []
        for booking in stale:
            try:
                expired.append(self.expire_booking(booking.id))
            except (ConflictError, IllegalTransitionError):
                logger.info("Booking %s changed before it could expire", booking.id)
        if expired:
            logger.info(
                "Expired %d stale bookings for photographer %s", len(expired), photographer_id
            )
        return expired
