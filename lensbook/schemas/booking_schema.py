"""Booking, distance conflict and pricing data models."""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    Field,
    field_serializer,
    model_validator,
)

from lensbook.schemas.availability_schema import TIME_FORMAT, WIRE_CONFIG


class BookingStatus(str, Enum):
    """Booking lifecycle states, valued with the labels deployed clients send."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    EXPIRED = "Expired"
    UNDER_REVIEW = "Under_Review"

    @classmethod
    def _missing_(cls, value: object) -> Optional["BookingStatus"]:
        if isinstance(value, str):
            key = re.sub(r"[^a-z]", "", value.lower())
            for member in cls:
                if re.sub(r"[^a-z]", "", member.value.lower()) == key:
                    return member
        return None


class SettlementAction(str, Enum):
    """Money movement an external wallet performs after a transition."""

    REFUND = "refund"
    RELEASE = "release"


class ExternalLocation(BaseModel):
    """A free-form place picked from a maps search rather than a listed venue."""

    model_config = WIRE_CONFIG

    place_id: str
    name: str
    address: str
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class LocationRef(BaseModel):
    """Normalized identity of where a booking happens."""

    model_config = WIRE_CONFIG

    key: str
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


def _location_ref(
    location_id: Optional[int],
    external_location: Optional[ExternalLocation],
    location_name: Optional[str],
    latitude: Optional[float],
    longitude: Optional[float],
) -> LocationRef:
    if external_location is not None:
        return LocationRef(
            key=f"place:{external_location.place_id}",
            name=external_location.name,
            latitude=external_location.latitude,
            longitude=external_location.longitude,
        )
    return LocationRef(
        key=f"venue:{location_id}",
        name=location_name,
        latitude=latitude,
        longitude=longitude,
    )


def _check_single_location(location_id: Optional[int], external: Optional[ExternalLocation]) -> None:
    if (location_id is None) == (external is None):
        raise ValueError("exactly one of locationId or externalLocation is required")


def _coerce_booking_status(value: Any) -> Any:
    if isinstance(value, str):
        return BookingStatus(value)
    return value


BookingStatusField = Annotated[BookingStatus, BeforeValidator(_coerce_booking_status)]


class Booking(BaseModel):
    """A dated reservation of a photographer."""

    model_config = WIRE_CONFIG

    id: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("id", "bookingId", "booking_id"),
        serialization_alias="id",
    )
    user_id: int
    photographer_id: int
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    location_latitude: Optional[float] = None
    location_longitude: Optional[float] = None
    external_location: Optional[ExternalLocation] = None
    start_datetime: datetime
    end_datetime: datetime
    special_requests: Optional[str] = None
    status: BookingStatusField = BookingStatus.PENDING
    total_price: float = Field(
        default=0.0,
        validation_alias=AliasChoices("totalPrice", "totalAmount", "total_price"),
        serialization_alias="totalPrice",
    )
    escrow_balance: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "Booking":
        if self.end_datetime <= self.start_datetime:
            raise ValueError("endDatetime must be after startDatetime")
        _check_single_location(self.location_id, self.external_location)
        return self

    def location_ref(self) -> LocationRef:
        return _location_ref(
            self.location_id,
            self.external_location,
            self.location_name,
            self.location_latitude,
            self.location_longitude,
        )


class CreateBookingRequest(BaseModel):
    """What a customer submits. Interval ordering is checked by pricing."""

    model_config = WIRE_CONFIG

    photographer_id: int
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    location_latitude: Optional[float] = None
    location_longitude: Optional[float] = None
    external_location: Optional[ExternalLocation] = None
    start_datetime: datetime
    end_datetime: datetime
    special_requests: Optional[str] = None

    @model_validator(mode="after")
    def _check_location(self) -> "CreateBookingRequest":
        _check_single_location(self.location_id, self.external_location)
        return self

    def location_ref(self) -> LocationRef:
        return _location_ref(
            self.location_id,
            self.external_location,
            self.location_name,
            self.location_latitude,
            self.location_longitude,
        )


class RescheduleRequest(BaseModel):
    model_config = WIRE_CONFIG

    start_datetime: datetime
    end_datetime: datetime
    special_requests: Optional[str] = None


class TravelEstimate(BaseModel):
    """Distance between two locations and, if the provider knows it, drive time."""

    km: float = Field(ge=0)
    minutes: Optional[int] = Field(default=None, ge=0)


class DistanceConflict(BaseModel):
    """Advisory result of a back-to-back travel check.

    ``suggested_start_time`` is kept as a datetime but goes over the wire as
    a ``HH:MM:SS`` time of day, the form deployed clients read.
    """

    model_config = WIRE_CONFIG

    has_conflict: bool = False
    previous_location_name: Optional[str] = None
    distance_in_km: Optional[float] = None
    travel_time_estimate_minutes: Optional[int] = None
    previous_booking_end_time: Optional[datetime] = None
    suggested_start_time: Optional[datetime] = None
    is_travel_time_feasible: Optional[bool] = None
    message: Optional[str] = None

    @field_serializer("suggested_start_time")
    def _serialize_suggested_start(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return value.strftime(TIME_FORMAT)

    @property
    def suggested_start_label(self) -> Optional[str]:
        if self.suggested_start_time is None:
            return None
        return self.suggested_start_time.strftime("%H:%M")


class FeeLineItem(BaseModel):
    name: str
    amount: float


class PriceBreakdown(BaseModel):
    model_config = WIRE_CONFIG

    base_rate: float
    location_rate: Optional[float] = None
    additional_fees: list[FeeLineItem] = Field(default_factory=list)


class PriceCalculation(BaseModel):
    model_config = WIRE_CONFIG

    total_price: float
    photographer_fee: float
    location_fee: float = 0.0
    service_fee: float = 0.0
    duration: float
    breakdown: PriceBreakdown
