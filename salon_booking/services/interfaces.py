"""Store interfaces consumed by the scheduling core.

Implementations raise ``StoreReadError`` for infrastructure failures on reads
and ``BookingWriteError`` when a booking cannot be written.
"""

from datetime import date
from typing import List, Optional, Protocol, Sequence

from salon_booking.schemas.booking import Booking, BookingRecord
from salon_booking.schemas.scheduling import (
    DateOverride,
    DateOverrideResponse,
    WeeklySchedule,
)


class HoursStore(Protocol):
    async def get_override(self, day: date) -> Optional[DateOverride]: ...

    async def get_override_range(
        self, start_date: date, end_date: date
    ) -> List[DateOverrideResponse]: ...

    async def get_weekly_schedule(self) -> Optional[WeeklySchedule]: ...

    async def save_override(
        self, day: date, fields: DateOverride
    ) -> DateOverrideResponse: ...


class BookingStore(Protocol):
    async def get_bookings_for_date(self, day: date) -> Sequence[Booking]: ...

    async def create_booking(self, booking_data: BookingRecord) -> Booking: ...
