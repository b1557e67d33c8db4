"""
Finite state machine for booking status changes.

Every legal status change is listed in ``TRANSITIONS`` with the event that
triggers it. Anything not listed fails with ``IllegalTransitionError``, so
a booking can never skip confirmation, be completed twice, or come back
from a terminal state.

Usage:
    lifecycle = BookingLifecycle(booking, on_transition=wallet_hook)
    lifecycle.confirm()
    assert lifecycle.status == BookingStatus.CONFIRMED
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from lensbook.errors import IllegalTransitionError
from lensbook.schemas.booking_schema import Booking, BookingStatus, SettlementAction

logger = logging.getLogger(__name__)

TransitionHook = Callable[[Booking, BookingStatus, BookingStatus], None]


class TransitionTrigger(str, Enum):
    """Events that move a booking between statuses."""
    PROVIDER_CONFIRMED = "provider_confirmed"
    CANCELLED = "cancelled"
    CONFIRMATION_TIMEOUT = "confirmation_timeout"
    SESSION_STARTED = "session_started"
    COMPLAINT_FILED = "complaint_filed"
    DELIVERY_CONFIRMED = "delivery_confirmed"
    REVIEW_REFUNDED = "review_refunded"


@dataclass(frozen=True)
class Transition:
    """A single legal status change."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: TransitionTrigger


@dataclass
class StatusEntry:
    """Recorded history entry for a status change."""
    status: BookingStatus
    entered_at: datetime
    trigger: Optional[TransitionTrigger] = None


TRANSITIONS: list[Transition] = [
    # --- Awaiting the photographer ---
    Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED,
               TransitionTrigger.PROVIDER_CONFIRMED),
    Transition(BookingStatus.PENDING, BookingStatus.CANCELLED,
               TransitionTrigger.CANCELLED),
    Transition(BookingStatus.PENDING, BookingStatus.EXPIRED,
               TransitionTrigger.CONFIRMATION_TIMEOUT),

    # --- Confirmed ---
    Transition(BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS,
               TransitionTrigger.SESSION_STARTED),
    Transition(BookingStatus.CONFIRMED, BookingStatus.UNDER_REVIEW,
               TransitionTrigger.COMPLAINT_FILED),
    Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED,
               TransitionTrigger.CANCELLED),

    # --- Shooting / delivering ---
    Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED,
               TransitionTrigger.DELIVERY_CONFIRMED),
    Transition(BookingStatus.IN_PROGRESS, BookingStatus.UNDER_REVIEW,
               TransitionTrigger.COMPLAINT_FILED),

    # --- Complaint review ---
    Transition(BookingStatus.UNDER_REVIEW, BookingStatus.CANCELLED,
               TransitionTrigger.REVIEW_REFUNDED),
]

_LEGAL: dict[tuple[BookingStatus, BookingStatus], Transition] = {
    (t.from_status, t.to_status): t for t in TRANSITIONS
}

TERMINAL_STATUSES = frozenset(
    {BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.EXPIRED}
)

# Statuses during which the photographer is committed to the time slot.
ACTIVE_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS})


def is_legal_transition(from_status: BookingStatus, to_status: BookingStatus) -> bool:
    return (BookingStatus(from_status), BookingStatus(to_status)) in _LEGAL


def transition(from_status: BookingStatus, to_status: BookingStatus) -> Transition:
    """Look up the transition from one status to another.

    Raises:
        IllegalTransitionError: If the pair is not in ``TRANSITIONS``.
    """
    from_status, to_status = BookingStatus(from_status), BookingStatus(to_status)
    found = _LEGAL.get((from_status, to_status))
    if found is None:
        raise IllegalTransitionError(
            from_status.value,
            to_status.value,
            f"Cannot move booking from '{from_status.value}' to '{to_status.value}'. "
            f"Allowed: {[s.value for s in allowed_next_statuses(from_status)]}",
        )
    return found


def allowed_next_statuses(status: BookingStatus) -> list[BookingStatus]:
    return [t.to_status for t in TRANSITIONS if t.from_status == status]


def is_terminal(status: BookingStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_cancel(status: BookingStatus) -> bool:
    return status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)


def can_complete(status: BookingStatus) -> bool:
    return status in (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS)


def can_confirm(status: BookingStatus) -> bool:
    return status == BookingStatus.PENDING


def can_file_complaint(status: BookingStatus) -> bool:
    return status in (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS)


def can_cancel_with_refund(status: BookingStatus) -> bool:
    """Only the status half of the rule; an approved complaint is checked elsewhere."""
    return status == BookingStatus.UNDER_REVIEW


def can_reschedule(status: BookingStatus) -> bool:
    return status == BookingStatus.PENDING


def settlement_for(to_status: BookingStatus) -> Optional[SettlementAction]:
    """Which escrow movement the wallet should perform after entering ``to_status``."""
    if to_status == BookingStatus.CANCELLED:
        return SettlementAction.REFUND
    if to_status == BookingStatus.COMPLETED:
        return SettlementAction.RELEASE
    return None


class BookingLifecycle:
    """
    Status controller for a single booking.

    Wraps a ``Booking`` and applies legal transitions to it in place,
    recording history and firing ``on_transition`` after each change. The
    hook is where an external wallet refunds or releases escrow.
    """

    def __init__(self, booking: Booking, on_transition: Optional[TransitionHook] = None) -> None:
        self._booking = booking
        self._on_transition = on_transition
        self._history: list[StatusEntry] = [
            StatusEntry(status=booking.status, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def booking(self) -> Booking:
        return self._booking

    @property
    def status(self) -> BookingStatus:
        return self._booking.status

    def transition_to(self, to_status: BookingStatus) -> BookingStatus:
        """
        Move the booking to ``to_status``.

        Returns:
            The new status.

        Raises:
            IllegalTransitionError: If the move is not in the transition table.
        """
        step = transition(self._booking.status, to_status)
        old_status = self._booking.status
        self._booking.status = step.to_status
        self._booking.updated_at = datetime.now(timezone.utc)

        self._history.append(StatusEntry(
            status=step.to_status,
            entered_at=self._booking.updated_at,
            trigger=step.trigger,
        ))
        logger.debug(
            "Booking %s: %s -> %s (trigger: %s)",
            self._booking.id, old_status.value, step.to_status.value, step.trigger.value,
        )

        if self._on_transition is not None:
            self._on_transition(self._booking, old_status, step.to_status)
        return step.to_status

    # ------------------------------------------------------------------ #
    # Named actions
    # ------------------------------------------------------------------ #

    def confirm(self) -> BookingStatus:
        return self.transition_to(BookingStatus.CONFIRMED)

    def start(self) -> BookingStatus:
        return self.transition_to(BookingStatus.IN_PROGRESS)

    def complete(self) -> BookingStatus:
        return self.transition_to(BookingStatus.COMPLETED)

    def cancel(self) -> BookingStatus:
        return self.transition_to(BookingStatus.CANCELLED)

    def expire(self) -> BookingStatus:
        return self.transition_to(BookingStatus.EXPIRED)

    def file_complaint(self) -> BookingStatus:
        return self.transition_to(BookingStatus.UNDER_REVIEW)

    def resolve_with_refund(self) -> BookingStatus:
        return self.transition_to(BookingStatus.CANCELLED)

    def reschedule(self, start: datetime, end: datetime) -> Booking:
        """Move a PENDING booking to a new interval. Other statuses are locked."""
        if not can_reschedule(self._booking.status):
            raise IllegalTransitionError(
                self._booking.status.value,
                self._booking.status.value,
                f"Booking in status '{self._booking.status.value}' can no longer be rescheduled",
            )
        if end <= start:
            raise ValueError("new end must be after new start")
        self._booking.start_datetime = start
        self._booking.end_datetime = end
        self._booking.updated_at = datetime.now(timezone.utc)
        logger.debug("Booking %s rescheduled to %s - %s", self._booking.id, start, end)
        return self._booking

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_history(self) -> list[StatusEntry]:
        return list(self._history)

    def get_status_trace(self) -> list[str]:
        return [entry.status.value for entry in self._history]

    def is_terminal(self) -> bool:
        return is_terminal(self._booking.status)
