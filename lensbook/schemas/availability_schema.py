"""Weekly availability data models.

Field names are snake_case in Python and camelCase on the wire. Legacy
aliases used by older API responses (``availabilityId``) are accepted on
input and normalized here, so nothing downstream has to care.
"""

from datetime import date, datetime, time
from enum import Enum, IntEnum
from typing import Annotated, Any, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel

WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)

TIME_FORMAT = "%H:%M:%S"


class DayOfWeek(IntEnum):
    """Day partition key, Sunday first to match deployed clients."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def short_label(self) -> str:
        return self.name[:3].capitalize()

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        # datetime.weekday() is Monday=0
        return cls((value.weekday() + 1) % 7)


class SlotStatus(str, Enum):
    AVAILABLE = "Available"
    UNAVAILABLE = "unavailable"

    @classmethod
    def _missing_(cls, value: object) -> Optional["SlotStatus"]:
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value.lower() == normalized:
                    return member
        return None


def _coerce_status(value: Any) -> Any:
    if isinstance(value, str):
        return SlotStatus(value)
    return value


SlotStatusField = Annotated[SlotStatus, BeforeValidator(_coerce_status)]


class Slot(BaseModel):
    """A persisted recurring weekly slot."""

    model_config = WIRE_CONFIG

    id: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("id", "availabilityId", "availability_id"),
        serialization_alias="id",
    )
    photographer_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    status: SlotStatusField = SlotStatus.AVAILABLE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_order(self) -> "Slot":
        if self.end_time <= self.start_time:
            raise ValueError(
                f"endTime {self.end_time} must be after startTime {self.start_time}"
            )
        return self

    @field_serializer("start_time", "end_time")
    def _serialize_time(self, value: time) -> str:
        return value.strftime(TIME_FORMAT)


class SlotDraft(BaseModel):
    """An unvalidated slot as submitted by a caller.

    Times stay raw so the validator can report missing or malformed values
    instead of failing at construction.
    """

    model_config = WIRE_CONFIG

    photographer_id: Optional[int] = None
    day_of_week: Optional[DayOfWeek] = None
    start_time: Union[time, str, None] = None
    end_time: Union[time, str, None] = None
    status: SlotStatusField = SlotStatus.AVAILABLE


class SlotUpdate(BaseModel):
    """Partial slot edit. ``id`` and ``photographer_id`` are immutable."""

    model_config = WIRE_CONFIG

    day_of_week: Optional[DayOfWeek] = None
    start_time: Union[time, str, None] = None
    end_time: Union[time, str, None] = None
    status: Optional[SlotStatusField] = None


class DaySchedule(BaseModel):
    model_config = WIRE_CONFIG

    day_of_week: DayOfWeek
    slots: list[Slot] = Field(default_factory=list)
    is_enabled: bool = False


class WeeklySchedule(BaseModel):
    """All seven days of one photographer's slots, each day sorted by start."""

    model_config = WIRE_CONFIG

    photographer_id: int
    days: dict[DayOfWeek, DaySchedule]

    def day(self, day_of_week: DayOfWeek) -> DaySchedule:
        return self.days[DayOfWeek(day_of_week)]

    @property
    def enabled_days(self) -> list[DayOfWeek]:
        return [d for d, schedule in sorted(self.days.items()) if schedule.is_enabled]


class AvailabilityStats(BaseModel):
    model_config = WIRE_CONFIG

    total_slots: int = 0
    available_slots: int = 0
    unavailable_slots: int = 0
    utilization_rate: int = 0


class BulkSlotEntry(BaseModel):
    model_config = WIRE_CONFIG

    start_time: Union[time, str, None] = None
    end_time: Union[time, str, None] = None
    status: SlotStatusField = SlotStatus.AVAILABLE


class BulkScheduleDay(BaseModel):
    model_config = WIRE_CONFIG

    slots: list[BulkSlotEntry] = Field(default_factory=list)
    is_enabled: bool = True


class BulkScheduleForm(BaseModel):
    """A whole-week submission, keyed by day."""

    model_config = WIRE_CONFIG

    photographer_id: int
    schedule: dict[DayOfWeek, BulkScheduleDay] = Field(default_factory=dict)


class HourSlot(BaseModel):
    """One bookable unit of a concrete date's availability grid."""

    model_config = WIRE_CONFIG

    time: str
    hour: int
    minute: int = 0
    is_available: bool
    is_booked: bool
    status: str
