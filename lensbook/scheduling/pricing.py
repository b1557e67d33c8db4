"""Booking price from hourly rates and the booked interval."""

import logging
from datetime import datetime
from typing import Optional

from lensbook.errors import InvalidDurationError
from lensbook.schemas.booking_schema import FeeLineItem, PriceBreakdown, PriceCalculation
from lensbook.scheduling.time_interval import duration_hours

logger = logging.getLogger(__name__)

SERVICE_FEE_LABEL = "Service fee"


def calculate_price(
    photographer_hourly_rate: float,
    location_hourly_rate: Optional[float],
    start: datetime,
    end: datetime,
) -> PriceCalculation:
    """
    Price a booking as rate times duration, photographer plus venue.

    No rounding is applied; currency rounding belongs to the caller.

    Raises:
        InvalidDurationError: If ``end`` is not after ``start``.
        ValueError: If a rate is negative.
    """
    if photographer_hourly_rate < 0:
        raise ValueError(f"photographer_hourly_rate must be >= 0, got {photographer_hourly_rate}")
    if location_hourly_rate is not None and location_hourly_rate < 0:
        raise ValueError(f"location_hourly_rate must be >= 0, got {location_hourly_rate}")

    duration = duration_hours(start, end)
    if duration <= 0:
        raise InvalidDurationError(
            f"Booking must end after it starts (got {start.isoformat()} - {end.isoformat()})"
        )

    photographer_fee = photographer_hourly_rate * duration
    location_fee = location_hourly_rate * duration if location_hourly_rate else 0.0

    return PriceCalculation(
        total_price=photographer_fee + location_fee,
        photographer_fee=photographer_fee,
        location_fee=location_fee,
        duration=duration,
        breakdown=PriceBreakdown(
            base_rate=photographer_hourly_rate,
            location_rate=location_hourly_rate,
        ),
    )


def apply_service_fee(calculation: PriceCalculation, rate: float) -> PriceCalculation:
    """Return a copy of ``calculation`` with a percentage surcharge on its total.

    A rate of 0 returns an unchanged copy.
    """
    if not 0.0 <= rate <= 1.0:
        raise ValueError(f"service fee rate must be between 0.0 and 1.0, got {rate}")

    updated = calculation.model_copy(deep=True)
    if rate == 0:
        return updated

    fee = calculation.total_price * rate
    updated.service_fee = fee
    updated.total_price = calculation.total_price + fee
    updated.breakdown.additional_fees.append(FeeLineItem(name=SERVICE_FEE_LABEL, amount=fee))
    logger.debug("Applied %.1f%% service fee: %.2f", rate * 100, fee)
    return updated
