from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

# Import enums from the model to avoid duplication
from salon_booking.models.booking import BookingStatus
from salon_booking.utils.time_of_day import parse_hhmm


class BookingAttemptState(str, Enum):
    IDLE = "idle"
    DATE_SELECTED = "date_selected"
    TIME_SELECTED = "time_selected"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    REJECTED = "rejected"
    FAILED = "failed"


class BookingBase(BaseModel):
    customer_id: str = Field(..., min_length=1, max_length=128)
    service_id: int
    date: date
    time: str = Field(..., examples=["10:30"])
    customer_name: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        parse_hhmm(v)
        return v


class BookingCreate(BookingBase):
    pass


class BookingRecord(BaseModel):
    """Fields written by the commit protocol when persisting a booking."""

    customer_id: str
    customer_name: Optional[str] = None
    service_id: Optional[int] = None
    service_name: str = ""
    date: date
    time: str
    service_duration: int = Field(..., gt=0)
    status: BookingStatus = BookingStatus.PENDING
    notes: Optional[str] = None


class Booking(BaseModel):
    id: int
    uuid: UUID
    customer_id: str
    customer_name: Optional[str] = None
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    date: date
    time: str
    service_duration: Optional[int] = None
    status: BookingStatus
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    reschedule_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    admin_notes: Optional[str] = None


class CustomerBookingList(BaseModel):
    customer_id: str
    bookings: List[Booking]
    total_count: int


class BookingList(BaseModel):
    date: date
    bookings: List[Booking]
    total_count: int


class BookingAttemptResult(BaseModel):
    state: BookingAttemptState
    message: Optional[str] = None
    booking: Optional[Booking] = None
    refresh_slots: bool = False
    slot_taken: bool = False
    availability_check_failed: bool = False
