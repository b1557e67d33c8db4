"""
Offline console walkthrough of the scheduling engine.

Runs the engine end to end against the in-memory stores: weekly slots,
overlap rejection, the booking lifecycle, travel conflicts and pricing. No
network, no database. Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario travel
    python console_demo.py --scenario pricing
"""

import argparse
from datetime import date, datetime, time
from typing import Callable, Optional

from lensbook.config import settings
from lensbook.errors import IllegalTransitionError, SlotValidationFailed
from lensbook.logging_context import new_request_id
from lensbook.schemas.availability_schema import (
    BulkScheduleDay,
    BulkScheduleForm,
    BulkSlotEntry,
    DayOfWeek,
    SlotDraft,
)
from lensbook.schemas.booking_schema import (
    Booking,
    BookingStatus,
    CreateBookingRequest,
    TravelEstimate,
)
from lensbook.scheduling.distance_conflict import DistanceConflictDetector, StaticGeodistance
from lensbook.services.availability_service import AvailabilityService
from lensbook.services.booking_service import BookingService
from lensbook.stores.memory import InMemoryBookingStore, InMemorySlotStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

PHOTOGRAPHER_ID = 7
CUSTOMER_ID = 42
DEMO_DAY = date(2025, 3, 17)  # a Monday


class ConsoleWalkthrough:
    """Scripted engine scenarios printed to the terminal."""

    def __init__(self) -> None:
        self.slot_store = InMemorySlotStore()
        self.booking_store = InMemoryBookingStore()
        self.geodistance = StaticGeodistance({
            ("venue:1", "venue:2"): TravelEstimate(km=8.0, minutes=25),
        })
        self.transitions: list[tuple[int, str, str]] = []
        self.availability = AvailabilityService(self.slot_store)
        self.bookings = BookingService(
            self.booking_store,
            DistanceConflictDetector(self.geodistance),
            on_transition=self._record_transition,
        )
        self.scenarios: dict[str, Callable[[], dict]] = {
            "schedule": self.scenario_schedule,
            "booking": self.scenario_booking,
            "travel": self.scenario_travel,
            "pricing": self.scenario_pricing,
        }

    def _record_transition(
        self, booking: Booking, from_status: BookingStatus, to_status: BookingStatus
    ) -> None:
        self.transitions.append((booking.id, from_status.value, to_status.value))
        self.system_log(f"Hook: booking {booking.id} {from_status.value} -> {to_status.value}")

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def warn(self, text: str) -> None:
        print(f"{YELLOW}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.app_name.upper()} - {title}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    def scenario_schedule(self) -> dict:
        """Touching slots are accepted; an overlapping one is rejected."""
        self._banner("Weekly schedule")
        self.availability.create_slot(SlotDraft(
            photographer_id=PHOTOGRAPHER_ID, day_of_week=DayOfWeek.MONDAY,
            start_time="09:00", end_time="10:00",
        ))
        self.say("Monday 09:00-10:00 saved")
        self.availability.create_slot(SlotDraft(
            photographer_id=PHOTOGRAPHER_ID, day_of_week=DayOfWeek.MONDAY,
            start_time="10:00", end_time="11:00",
        ))
        self.say("Monday 10:00-11:00 saved (touching, not overlapping)")

        rejected: list[str] = []
        try:
            self.availability.create_slot(SlotDraft(
                photographer_id=PHOTOGRAPHER_ID, day_of_week=DayOfWeek.MONDAY,
                start_time="09:30", end_time="10:30",
            ))
        except SlotValidationFailed as exc:
            rejected = [e.kind.value for e in exc.errors]
            self.warn(f"Monday 09:30-10:30 rejected: {exc.message}")

        self.availability.create_bulk(BulkScheduleForm(
            photographer_id=PHOTOGRAPHER_ID,
            schedule={
                DayOfWeek.WEDNESDAY: BulkScheduleDay(slots=[
                    BulkSlotEntry(start_time="13:00", end_time="17:00"),
                ]),
                DayOfWeek.SATURDAY: BulkScheduleDay(slots=[
                    BulkSlotEntry(start_time="08:00", end_time="12:00", status="unavailable"),
                ]),
            },
        ))
        schedule = self.availability.weekly_schedule(PHOTOGRAPHER_ID)
        stats = self.availability.stats(PHOTOGRAPHER_ID)
        for day in schedule.enabled_days:
            slots = ", ".join(
                f"{s.start_time:%H:%M}-{s.end_time:%H:%M} ({s.status.value})"
                for s in schedule.day(day).slots
            )
            self.system_log(f"{day.label}: {slots}")
        self.system_log(
            f"Stats: {stats.total_slots} slots, {stats.utilization_rate}% unavailable"
        )
        return {
            "rejected": rejected,
            "enabled_days": [d.label for d in schedule.enabled_days],
            "stats": stats,
        }

    def scenario_booking(self) -> dict:
        """Confirm once, then show that a second confirm is refused."""
        self._banner("Booking lifecycle")
        booking, _ = self.bookings.create_booking(
            CUSTOMER_ID,
            CreateBookingRequest(
                photographer_id=PHOTOGRAPHER_ID,
                location_id=1,
                location_name="Riverside Park",
                start_datetime=datetime.combine(DEMO_DAY, time(9)),
                end_datetime=datetime.combine(DEMO_DAY, time(11)),
            ),
            photographer_rate=200000,
        )
        self.say(f"Booking {booking.id} created: {booking.status.value}, {booking.total_price:,.0f}")
        booking = self.bookings.confirm_booking(booking.id)
        self.say(f"Booking {booking.id} is now {booking.status.value}")

        refused: Optional[str] = None
        try:
            self.bookings.confirm_booking(booking.id)
        except IllegalTransitionError as exc:
            refused = exc.kind.value
            self.warn(f"Second confirm refused: {exc.message}")

        self.bookings.start_booking(booking.id)
        booking = self.bookings.complete_booking(booking.id)
        self.say(f"Booking {booking.id} finished as {booking.status.value}")
        return {"booking": booking, "refused": refused, "transitions": list(self.transitions)}

    def scenario_travel(self) -> dict:
        """A booking 10 minutes after another one 25 minutes away."""
        self._banner("Travel conflict")
        first, _ = self.bookings.create_booking(
            CUSTOMER_ID,
            CreateBookingRequest(
                photographer_id=PHOTOGRAPHER_ID,
                location_id=1,
                location_name="Riverside Park",
                start_datetime=datetime.combine(DEMO_DAY, time(12)),
                end_datetime=datetime.combine(DEMO_DAY, time(14)),
            ),
            photographer_rate=200000,
        )
        self.bookings.confirm_booking(first.id)

        _, advisory = self.bookings.create_booking(
            CUSTOMER_ID + 1,
            CreateBookingRequest(
                photographer_id=PHOTOGRAPHER_ID,
                location_id=2,
                location_name="Old Town Square",
                start_datetime=datetime.combine(DEMO_DAY, time(14, 10)),
                end_datetime=datetime.combine(DEMO_DAY, time(15, 10)),
            ),
            photographer_rate=200000,
        )
        if advisory.has_conflict:
            self.warn(advisory.message)
        else:
            self.say("No travel conflict")
        return {"advisory": advisory}

    def scenario_pricing(self) -> dict:
        """Two hours of photographer plus venue time."""
        self._banner("Pricing")
        price = self.bookings.quote(
            200000,
            50000,
            datetime.combine(DEMO_DAY, time(13)),
            datetime.combine(DEMO_DAY, time(15)),
        )
        self.say(
            f"{price.duration:g}h: photographer {price.photographer_fee:,.0f} + "
            f"venue {price.location_fee:,.0f} = {price.total_price:,.0f}"
        )
        return {"price": price}

    def run_scenario(self, scenario: str) -> dict:
        """Run one named scenario under its own request id."""
        runner = self.scenarios.get(scenario)
        if runner is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return {}
        request_id = new_request_id()
        self.system_log(f"Request {request_id}")
        return runner()

    def run(self) -> dict[str, dict]:
        return {name: self.run_scenario(name) for name in self.scenarios}


def main(argv: Optional[list[str]] = None) -> dict:
    parser = argparse.ArgumentParser(description="Offline scheduling engine walkthrough")
    parser.add_argument(
        "--scenario",
        choices=["schedule", "booking", "travel", "pricing"],
        default=None,
        help="Run one scenario instead of all of them",
    )
    args = parser.parse_args(argv)

    walkthrough = ConsoleWalkthrough()
    if args.scenario:
        return walkthrough.run_scenario(args.scenario)
    return walkthrough.run()


if __name__ == "__main__":
    main()
