from datetime import date
from enum import Enum
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, Field, model_validator

from salon_booking.utils.time_of_day import parse_hhmm


class SalonStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    BOOKINGS_DISABLED = "bookings-disabled"


class CalendarIndicator(str, Enum):
    HOLIDAY = "holiday"
    TUESDAY_CLOSURE = "tuesday-closure"
    BOOKINGS_DISABLED = "bookings-disabled"
    CLOSED = "closed"
    OPEN = "open"


def _check_hhmm(v: str) -> str:
    parse_hhmm(v)
    return v


# "HH:mm" string validated at the boundary
HHMM = Annotated[str, AfterValidator(_check_hhmm)]


class DaySchedule(BaseModel):
    open_time: HHMM = Field(..., examples=["08:30"])
    close_time: HHMM = Field(..., examples=["21:00"])
    is_closed: bool = False

    @model_validator(mode="after")
    def validate_hours_order(self):
        if not self.is_closed and parse_hhmm(self.open_time) >= parse_hhmm(
            self.close_time
        ):
            raise ValueError("Open time must be before close time")
        return self


# Sunday-based weekday (0=Sunday .. 6=Saturday) -> DaySchedule
WeeklySchedule = Dict[int, DaySchedule]


class DateOverride(BaseModel):
    """Per-date override. A field left as None falls back to the weekly default."""

    open_time: Optional[HHMM] = None
    close_time: Optional[HHMM] = None
    is_closed: Optional[bool] = None
    is_holiday: Optional[bool] = None
    disable_bookings: Optional[bool] = None
    is_tuesday_override: Optional[bool] = None
    notes: Optional[str] = None


class EffectiveDayStatus(BaseModel):
    date: date
    day_of_week: int = Field(..., ge=0, le=6)
    day_name: str
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    is_closed: bool
    is_holiday: bool = False
    disable_bookings: bool = False
    is_tuesday_override: bool = False
    notes: str = ""
    is_specific: bool = False


class DayStatusResponse(EffectiveDayStatus):
    status: SalonStatus
    message: str
    indicator: CalendarIndicator


class CalendarResponse(BaseModel):
    start_date: date
    end_date: date
    days: Dict[str, DayStatusResponse]


class ServiceSnapshot(BaseModel):
    """Immutable view of a service for the duration of one booking attempt."""

    id: Optional[int] = None
    name: str = ""
    duration_minutes: int = Field(..., gt=0)

    model_config = {"frozen": True}


class DateBookability(BaseModel):
    bookable: bool
    reason: str


class SlotValidation(BaseModel):
    valid: bool
    reason: Optional[str] = None


class TimeOption(BaseModel):
    time: str
    display_time: str
    valid: bool
    reason: Optional[str] = None


class TimeSlot(BaseModel):
    time: str
    display_time: str
    end_time: str
    is_available: bool


class CandidateBooking(BaseModel):
    date: date
    time: HHMM
    duration_minutes: int = Field(..., gt=0)


class AvailabilityMode(str, Enum):
    PICKER = "picker"
    SLOTS = "slots"


class AvailabilityResponse(BaseModel):
    date: date
    service_id: Optional[int] = None
    day: DayStatusResponse
    bookability: DateBookability
    mode: AvailabilityMode
    time_options: List[TimeOption] = Field(default_factory=list)
    time_slots: List[TimeSlot] = Field(default_factory=list)


class SlotValidationRequest(BaseModel):
    date: date
    time: HHMM
    service_id: int


class WeeklyScheduleResponse(BaseModel):
    days: Dict[int, DaySchedule]
    is_default: bool = False


class DateOverrideResponse(DateOverride):
    date: date


class HolidaySeedResponse(BaseModel):
    year: int
    country: str
    created: List[date] = Field(default_factory=list)
    skipped: List[date] = Field(default_factory=list)
