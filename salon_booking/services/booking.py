from datetime import date
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salon_booking.core.exceptions import (
    BookingWriteError,
    InvalidStatusTransitionError,
    StoreReadError,
)
from salon_booking.models.booking import Booking as BookingModel
from salon_booking.models.booking import BookingStatus
from salon_booking.schemas.booking import Booking, BookingRecord

logger = structlog.get_logger(__name__)


# Admin decisions apply to pending requests only; cancelling is always allowed
# unless the booking is already cancelled.
ALLOWED_TRANSITIONS = {
    BookingStatus.ACCEPTED: {BookingStatus.PENDING},
    BookingStatus.REJECTED: {BookingStatus.PENDING},
    BookingStatus.CANCELLED: set(BookingStatus) - {BookingStatus.CANCELLED},
}


def can_transition(current: BookingStatus, requested: BookingStatus) -> bool:
    return current in ALLOWED_TRANSITIONS.get(requested, set())


class BookingService:
    """Booking records stored in the database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_bookings_for_date(self, day: date) -> List[Booking]:
        """All bookings on ``day``, cancelled ones included, ordered by time."""
        try:
            result = await self.db.execute(
                select(BookingModel)
                .filter(BookingModel.date == day)
                .order_by(BookingModel.time, BookingModel.id)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreReadError(f"Failed to load bookings for {day}: {e}") from e
        return [Booking.model_validate(row) for row in rows]

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        try:
            row = await self.db.get(BookingModel, booking_id)
        except SQLAlchemyError as e:
            raise StoreReadError(f"Failed to load booking {booking_id}: {e}") from e
        return Booking.model_validate(row) if row else None

    async def create_booking(self, booking_data: BookingRecord) -> Booking:
        """Persist a booking. Nothing is kept if the write fails."""
        data = booking_data.model_dump()
        data["status"] = booking_data.status.value

        db_booking = BookingModel(**data)
        self.db.add(db_booking)
        try:
            await self.db.commit()
            await self.db.refresh(db_booking)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Booking write rolled back",
                date=booking_data.date.isoformat(),
                time=booking_data.time,
                error=str(e),
            )
            raise BookingWriteError(f"Failed to save booking: {e}") from e

        return Booking.model_validate(db_booking)

    async def get_bookings_for_customer(self, customer_id: str) -> List[Booking]:
        """A customer's bookings, newest first."""
        try:
            result = await self.db.execute(
                select(BookingModel)
                .filter(BookingModel.customer_id == customer_id)
                .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreReadError(
                f"Failed to load bookings for customer {customer_id}: {e}"
            ) from e
        return [Booking.model_validate(row) for row in rows]

    async def update_status(
        self,
        booking_id: int,
        status: BookingStatus,
        admin_notes: Optional[str] = None,
    ) -> Optional[Booking]:
        """Accept, reject or cancel a booking. Returns None if it does not exist.

        A cancelled booking stops occupying its slot immediately.
        """
        try:
            row = await self.db.get(BookingModel, booking_id)
        except SQLAlchemyError as e:
            raise StoreReadError(f"Failed to load booking {booking_id}: {e}") from e
        if row is None:
            return None

        current = BookingStatus(row.status)
        if not can_transition(current, status):
            raise InvalidStatusTransitionError(current.value, status.value)

        row.status = status.value
        if admin_notes is not None:
            row.admin_notes = admin_notes

        try:
            await self.db.commit()
            await self.db.refresh(row)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Booking status update rolled back",
                booking_id=booking_id,
                status=status.value,
                error=str(e),
            )
            raise BookingWriteError(f"Failed to update booking {booking_id}: {e}") from e

        logger.info(
            "Booking status changed",
            booking_id=booking_id,
            from_status=current.value,
            to_status=status.value,
        )
        return Booking.model_validate(row)
