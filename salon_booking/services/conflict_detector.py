from datetime import datetime, timedelta
from typing import Iterable, List

import structlog

from salon_booking.models.booking import DEFAULT_BOOKING_DURATION_MINUTES, BookingStatus
from salon_booking.schemas.scheduling import CandidateBooking
from salon_booking.utils.time_of_day import combine, parse_hhmm

logger = structlog.get_logger(__name__)


# Protected gap kept around every existing booking
BUFFER_MINUTES = 20


def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def booking_span(booking) -> tuple[datetime, datetime]:
    """Occupied ``[start, end)`` of an existing booking, without buffer."""
    start = combine(booking.date, parse_hhmm(booking.time))
    duration = booking.service_duration or DEFAULT_BOOKING_DURATION_MINUTES
    return start, start + timedelta(minutes=duration)


def find_conflicts(
    candidate: CandidateBooking,
    existing_bookings: Iterable,
    buffer_minutes: int = BUFFER_MINUTES,
) -> List:
    """Return the existing bookings whose buffered span overlaps the candidate.

    The buffer widens each existing booking on both sides; the candidate's
    own span is not widened. Cancelled bookings never conflict.
    """
    cand_start = combine(candidate.date, parse_hhmm(candidate.time))
    cand_end = cand_start + timedelta(minutes=candidate.duration_minutes)
    buffer = timedelta(minutes=buffer_minutes)

    conflicts = []
    for booking in existing_bookings or ():
        if _status_value(booking.status) == BookingStatus.CANCELLED.value:
            continue

        ex_start, ex_end = booking_span(booking)
        if cand_start < ex_end + buffer and cand_end > ex_start - buffer:
            conflicts.append(booking)

    if conflicts:
        logger.debug(
            "Candidate overlaps existing bookings",
            date=candidate.date.isoformat(),
            time=candidate.time,
            conflicts=len(conflicts),
        )
    return conflicts


def has_conflict(
    candidate: CandidateBooking,
    existing_bookings: Iterable,
    buffer_minutes: int = BUFFER_MINUTES,
) -> bool:
    return bool(find_conflicts(candidate, existing_bookings, buffer_minutes))
