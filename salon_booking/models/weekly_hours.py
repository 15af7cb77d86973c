import enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from salon_booking.core.database import Base


class WeekDay(enum.Enum):
    """Sunday-based weekday numbering used throughout the scheduling core."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


class WeeklyHours(Base):
    """Default opening hours for one day of the week."""

    __tablename__ = "weekly_hours"

    id = Column(Integer, primary_key=True, index=True)
    day_of_week = Column(Integer, nullable=False, unique=True)

    # "HH:mm" salon-local
    open_time = Column(String(5), nullable=False)
    close_time = Column(String(5), nullable=False)
    is_closed = Column(Boolean, default=False, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "day_of_week >= 0 AND day_of_week <= 6", name="check_day_of_week_range"
        ),
    )

    def __repr__(self):
        weekday_str = WeekDay(self.day_of_week).name if self.day_of_week is not None else "?"
        closed = ", closed" if self.is_closed else ""
        return (
            f"<WeeklyHours(id={self.id}, "
            f"{weekday_str}: {self.open_time}-{self.close_time}{closed})>"
        )
