"""
Housekeeping policy for stale pending bookings.

Stale PENDING bookings block hours on the availability grid until someone
expires them. Callers own when that happens: they pass in when the last
cleanup ran and get a decision back, and they wrap store writes that may
hit a concurrent change in a ``RetryPolicy``. Nothing here keeps state
between calls.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Iterator, Optional, TypeVar

from lensbook.config import settings
from lensbook.errors import ConflictError
from lensbook.schemas.booking_schema import Booking, BookingStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CleanupDecision:
    """Whether a cleanup may run now, and if not, when it may."""

    allowed: bool
    next_allowed_at: Optional[datetime] = None

    def retry_after_seconds(self, now: datetime) -> float:
        if self.allowed or self.next_allowed_at is None:
            return 0.0
        return max(0.0, (self.next_allowed_at - now).total_seconds())


def decide_cleanup(
    last_cleanup_at: Optional[datetime],
    now: datetime,
    cooldown: Optional[timedelta] = None,
) -> CleanupDecision:
    """Rate-limit cleanups to one per ``cooldown`` (5 minutes by default)."""
    if cooldown is None:
        cooldown = timedelta(seconds=settings.schedule.cleanup_cooldown_seconds)
    if last_cleanup_at is None:
        return CleanupDecision(allowed=True)
    next_allowed_at = last_cleanup_at + cooldown
    if now >= next_allowed_at:
        return CleanupDecision(allowed=True)
    return CleanupDecision(allowed=False, next_allowed_at=next_allowed_at)


def can_cleanup(
    last_cleanup_at: Optional[datetime],
    now: datetime,
    cooldown: Optional[timedelta] = None,
) -> bool:
    return decide_cleanup(last_cleanup_at, now, cooldown).allowed


def _as_aware(value: datetime) -> datetime:
    """Naive datetimes are read as local time."""
    return value if value.tzinfo is not None else value.astimezone()


def expired_pending_bookings(
    bookings: Iterable[Booking],
    now: datetime,
    pending_ttl: Optional[timedelta] = None,
) -> list[Booking]:
    """PENDING bookings created more than ``pending_ttl`` before ``now``.

    Bookings without a creation time are never considered expired. Naive
    and aware timestamps may be mixed; naive ones count as local time.
    """
    if pending_ttl is None:
        pending_ttl = timedelta(minutes=settings.schedule.pending_booking_ttl_minutes)
    cutoff = _as_aware(now) - pending_ttl
    return [
        b for b in bookings
        if b.status == BookingStatus.PENDING
        and b.created_at is not None
        and _as_aware(b.created_at) <= cutoff
    ]


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for operations that may hit a ``ConflictError``.

    The first retry waits ``base_delay_seconds``; each later one doubles,
    capped at ``max_delay_seconds``.
    """

    max_attempts: int = 3
    base_delay_seconds: float = 1.5
    max_delay_seconds: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_seconds < 0:
            raise ValueError(f"base_delay_seconds must be >= 0, got {self.base_delay_seconds}")

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry.max_attempts,
            base_delay_seconds=settings.retry.base_delay_seconds,
            max_delay_seconds=settings.retry.max_delay_seconds,
        )

    def delays(self) -> Iterator[float]:
        """Sleep before each retry; one fewer value than ``max_attempts``."""
        delay = self.base_delay_seconds
        for _ in range(self.max_attempts - 1):
            yield delay
            delay = min(self.max_delay_seconds, delay * 2)

    def run(
        self,
        operation: Callable[[], T],
        sleep: Callable[[float], None] = time.sleep,
        before_retry: Optional[Callable[[], None]] = None,
    ) -> T:
        """
        Call ``operation`` until it succeeds or attempts run out.

        Only ``ConflictError`` is retried; anything else propagates at once.
        ``before_retry`` runs after each sleep, e.g. to expire stale
        bookings before trying again.

        Raises:
            ConflictError: From the last attempt when every attempt conflicted.
        """
        delays = self.delays()
        attempt = 0
        while True:
            attempt += 1
            try:
                return operation()
            except ConflictError as exc:
                delay = next(delays, None)
                if delay is None:
                    raise
                logger.warning(
                    "Retrying after conflict: %s (attempt %s/%s, delay %.1fs)",
                    exc.message, attempt, self.max_attempts, delay,
                )
                sleep(delay)
                if before_retry is not None:
                    before_retry()
