"""
Error kinds shared by the scheduling engine.

Validators return lists of ``ValidationError`` so every problem can be shown
at once. State-machine, pricing and store failures raise a single typed
``SchedulingError`` subclass.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_RANGE = "InvalidRange"
    TIME_OVERLAP = "TimeOverlap"
    EMPTY_SCHEDULE = "EmptySchedule"
    ILLEGAL_TRANSITION = "IllegalTransition"
    INVALID_DURATION = "InvalidDuration"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"


@dataclass(frozen=True)
class ValidationError:
    """One reason a slot or schedule submission was rejected."""

    kind: ErrorKind
    message: str
    field: Optional[str] = None
    day_of_week: Optional[int] = None


class SchedulingError(Exception):
    """Base class for engine failures. ``kind`` classifies the failure."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class IllegalTransitionError(SchedulingError):
    """A booking status change is not allowed from the current status."""

    kind = ErrorKind.ILLEGAL_TRANSITION

    def __init__(self, from_status: str, to_status: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Illegal booking transition '{from_status}' -> '{to_status}'"
        )
        self.from_status = from_status
        self.to_status = to_status


class InvalidDurationError(SchedulingError):
    """An interval has zero or negative length where a positive one is required."""

    kind = ErrorKind.INVALID_DURATION


class NotFoundError(SchedulingError):
    """A slot or booking id could not be resolved by the store."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(SchedulingError):
    """The store detected a concurrent write. Safe to re-fetch and retry."""

    kind = ErrorKind.CONFLICT


class SlotValidationFailed(SchedulingError):
    """Raised by the service layer when validation reports any error."""

    kind = ErrorKind.INVALID_RANGE

    def __init__(self, errors: list[ValidationError]) -> None:
        summary = "; ".join(e.message for e in errors) or "validation failed"
        super().__init__(summary)
        self.errors = list(errors)
        if errors:
            self.kind = errors[0].kind

    @property
    def kinds(self) -> set[ErrorKind]:
        return {e.kind for e in self.errors}


class TravelEstimateUnavailable(ValueError):
    """A geodistance provider cannot estimate travel between two locations."""
