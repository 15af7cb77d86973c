from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from salon_booking.core.config import settings


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in the salon's local timezone, returned as a naive datetime.

    Booking dates and times are stored as salon-local wall-clock values, so
    "now" must be compared in the same frame.
    """

    def __init__(self, timezone: str = None):
        self.tz = ZoneInfo(timezone or settings.SALON_TIMEZONE)

    def now(self) -> datetime:
        return datetime.now(self.tz).replace(tzinfo=None)


class FixedClock:
    """Clock frozen at a given instant. Used by tests and scripts."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return SystemClock()
