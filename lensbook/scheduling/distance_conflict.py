"""
Back-to-back travel check for a candidate booking.

Looks for the photographer's latest committed booking that ends before the
candidate starts on the same day at another location, and asks whether the
gap between them is long enough to travel. The result is advisory: callers
may let a customer proceed anyway.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Iterable, Optional

from lensbook.config import settings
from lensbook.errors import TravelEstimateUnavailable
from lensbook.schemas.booking_schema import (
    Booking,
    DistanceConflict,
    LocationRef,
    TravelEstimate,
)
from lensbook.scheduling.booking_lifecycle import ACTIVE_STATUSES
from lensbook.scheduling.time_interval import format_clock, round_up

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class HaversineGeodistance:
    """Great-circle distance between two coordinate pairs.

    Returns no travel time, so the detector falls back to its configured
    average speed.
    """

    def distance_and_travel_time(self, a: LocationRef, b: LocationRef) -> TravelEstimate:
        if not (a.has_coordinates and b.has_coordinates):
            raise TravelEstimateUnavailable(
                f"Coordinates missing for {a.key if not a.has_coordinates else b.key}"
            )
        lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
        lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
        h = (
            math.sin((lat2 - lat1) / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
        )
        km = 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))
        return TravelEstimate(km=round(km, 3))


class StaticGeodistance:
    """Fixed lookup table of travel estimates keyed by location pair.

    Pairs are unordered. Used by the console walkthrough and tests where a
    real maps provider is not available.
    """

    def __init__(self, table: Optional[dict[tuple[str, str], TravelEstimate]] = None) -> None:
        self._table: dict[frozenset, TravelEstimate] = {}
        for (a, b), estimate in (table or {}).items():
            self.add(a, b, estimate)

    def add(self, a: str, b: str, estimate: TravelEstimate) -> None:
        self._table[frozenset((a, b))] = estimate

    def distance_and_travel_time(self, a: LocationRef, b: LocationRef) -> TravelEstimate:
        try:
            return self._table[frozenset((a.key, b.key))]
        except KeyError:
            raise TravelEstimateUnavailable(
                f"No travel estimate between {a.key} and {b.key}"
            ) from None


class DistanceConflictDetector:
    """Decides whether a candidate leaves enough time to travel from the prior booking."""

    def __init__(
        self,
        provider,
        travel_speed_kmh: Optional[float] = None,
        granularity_minutes: Optional[int] = None,
    ) -> None:
        self.provider = provider
        self.travel_speed_kmh = (
            settings.travel.travel_speed_kmh if travel_speed_kmh is None else travel_speed_kmh
        )
        self.granularity_minutes = (
            settings.travel.suggestion_granularity_minutes
            if granularity_minutes is None
            else granularity_minutes
        )
        if self.travel_speed_kmh <= 0:
            raise ValueError(f"travel_speed_kmh must be > 0, got {self.travel_speed_kmh}")
        if self.granularity_minutes < 1:
            raise ValueError(
                f"granularity_minutes must be >= 1, got {self.granularity_minutes}"
            )

    def travel_minutes(self, estimate: TravelEstimate) -> int:
        """Provider minutes when given, otherwise derived from the average speed."""
        if estimate.minutes is not None:
            return estimate.minutes
        return math.ceil(estimate.km * 60 / self.travel_speed_kmh)

    def find_prior_booking(
        self,
        candidate_start: datetime,
        candidate_location: LocationRef,
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[int] = None,
    ) -> Optional[Booking]:
        """The committed booking ending latest at or before ``candidate_start``."""
        prior: Optional[Booking] = None
        for booking in bookings:
            if exclude_booking_id is not None and booking.id == exclude_booking_id:
                continue
            if booking.status not in ACTIVE_STATUSES:
                continue
            if booking.end_datetime.date() != candidate_start.date():
                continue
            if booking.end_datetime > candidate_start:
                continue
            if booking.location_ref().key == candidate_location.key:
                continue
            if prior is None or booking.end_datetime > prior.end_datetime:
                prior = booking
        return prior

    def detect(
        self,
        candidate_start: datetime,
        candidate_end: datetime,
        candidate_location: LocationRef,
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[int] = None,
    ) -> DistanceConflict:
        """
        Check travel feasibility for a candidate interval.

        Args:
            candidate_start: Start of the proposed booking.
            candidate_end: End of the proposed booking.
            candidate_location: Where the proposed booking happens.
            bookings: The photographer's bookings around that day.
            exclude_booking_id: Booking being rescheduled, if any.

        Returns:
            ``has_conflict=False`` with empty fields when no prior booking
            qualifies. Otherwise the travel figures, and on conflict a
            suggested start rounded up to the configured granularity.
        """
        if candidate_end <= candidate_start:
            raise ValueError("candidate end must be after candidate start")

        prior = self.find_prior_booking(
            candidate_start, candidate_location, bookings, exclude_booking_id
        )
        if prior is None:
            return DistanceConflict()

        prior_location = prior.location_ref()
        estimate = self.provider.distance_and_travel_time(prior_location, candidate_location)
        travel = self.travel_minutes(estimate)
        gap_minutes = (candidate_start - prior.end_datetime).total_seconds() / 60
        feasible = gap_minutes >= travel

        result = DistanceConflict(
            has_conflict=not feasible,
            previous_location_name=prior_location.name,
            distance_in_km=estimate.km,
            travel_time_estimate_minutes=travel,
            previous_booking_end_time=prior.end_datetime,
            is_travel_time_feasible=feasible,
        )
        if feasible:
            return result

        suggested = round_up(
            prior.end_datetime + timedelta(minutes=travel), self.granularity_minutes
        )
        result.suggested_start_time = suggested
        result.message = (
            f"Previous booking at {prior_location.name or prior_location.key} ends at "
            f"{format_clock(prior.end_datetime)}. Travelling {estimate.km:.1f} km takes "
            f"about {travel} minutes, so the earliest realistic start is "
            f"{format_clock(suggested)}."
        )
        logger.warning(
            "Travel conflict for photographer %s: gap %.0f min < travel %d min",
            prior.photographer_id, gap_minutes, travel,
        )
        return result
