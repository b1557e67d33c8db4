from lensbook.scheduling.booking_lifecycle import BookingLifecycle, TransitionTrigger
from lensbook.scheduling.cleanup_policy import RetryPolicy, can_cleanup, decide_cleanup
from lensbook.scheduling.distance_conflict import (
    DistanceConflictDetector,
    HaversineGeodistance,
    StaticGeodistance,
)
from lensbook.scheduling.pricing import apply_service_fee, calculate_price
from lensbook.scheduling.slot_validator import validate_bulk_schedule, validate_slot
from lensbook.scheduling.time_interval import duration_hours, duration_minutes, overlaps
from lensbook.scheduling.weekly_schedule import build_weekly_schedule, compute_stats

__all__ = [
    "BookingLifecycle", "TransitionTrigger",
    "RetryPolicy", "can_cleanup", "decide_cleanup",
    "DistanceConflictDetector", "HaversineGeodistance", "StaticGeodistance",
    "calculate_price", "apply_service_fee",
    "validate_slot", "validate_bulk_schedule",
    "overlaps", "duration_minutes", "duration_hours",
    "build_weekly_schedule", "compute_stats",
]
