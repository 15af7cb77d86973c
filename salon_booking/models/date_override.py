from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from salon_booking.core.database import Base

# Columns that may override the weekly default for a date. NULL means "not set".
OVERRIDE_FIELDS = (
    "open_time",
    "close_time",
    "is_closed",
    "is_holiday",
    "disable_bookings",
    "is_tuesday_override",
    "notes",
)


class DateOverride(Base):
    """Admin override of the weekly schedule for one calendar date."""

    __tablename__ = "date_overrides"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, unique=True, index=True)

    # Override details
    open_time = Column(String(5), nullable=True)
    close_time = Column(String(5), nullable=True)
    is_closed = Column(Boolean, nullable=True)
    is_holiday = Column(Boolean, nullable=True)
    disable_bookings = Column(Boolean, nullable=True)
    is_tuesday_override = Column(Boolean, nullable=True)
    notes = Column(Text, nullable=True)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def present_fields(self) -> dict:
        """Return only the override fields that are set."""
        return {
            name: getattr(self, name)
            for name in OVERRIDE_FIELDS
            if getattr(self, name) is not None
        }

    def __repr__(self):
        return f"<DateOverride(id={self.id}, date={self.date}, fields={self.present_fields()})>"
