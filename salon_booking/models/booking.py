import enum
import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from salon_booking.core.database import Base


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"


# Duration assumed for legacy bookings stored without a snapshot
DEFAULT_BOOKING_DURATION_MINUTES = 30


class Booking(Base):
    """Customer booking for one service at a salon-local date and time."""

    __tablename__ = "bookings"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True
    )

    # Participants
    customer_id = Column(String(128), nullable=False, index=True)
    customer_name = Column(String(255), nullable=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)
    service_name = Column(String(255), nullable=True)

    # Scheduling details (salon-local wall clock)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)
    service_duration = Column(Integer, nullable=True)  # snapshot of Service.duration_minutes

    # Status management
    status = Column(
        String(20), nullable=False, default=BookingStatus.PENDING.value, index=True
    )

    notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    reschedule_count = Column(Integer, default=0, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "service_duration IS NULL OR service_duration > 0",
            name="check_positive_service_duration",
        ),
        Index("ix_bookings_date_time", "date", "time"),
    )

    service = relationship("Service", back_populates="bookings")

    def __repr__(self):
        return (
            f"<Booking(id={self.id}, status='{self.status}', "
            f"date='{self.date}', time='{self.time}', "
            f"duration={self.service_duration}, customer_id='{self.customer_id}')>"
        )
