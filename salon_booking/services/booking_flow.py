"""Customer booking attempt: pick a date, pick a time, submit.

The slot picked by the customer may have been taken while they were filling
in the form, so ``submit`` never trusts what was shown earlier: it re-reads
the day's bookings, re-runs the in-hours checks against the current clock
and only then writes a pending booking. There is no lock between the check
and the write.
"""

from datetime import date
from typing import List, Optional, Sequence

import structlog

from salon_booking.core.clock import Clock, SystemClock
from salon_booking.core.config import settings
from salon_booking.core.exceptions import (
    BookingWriteError,
    InvalidBookingStateError,
    StoreReadError,
)
from salon_booking.models.booking import BookingStatus
from salon_booking.schemas.booking import (
    BookingAttemptResult,
    BookingAttemptState,
    BookingRecord,
)
from salon_booking.schemas.scheduling import (
    AvailabilityMode,
    AvailabilityResponse,
    CandidateBooking,
    DateBookability,
    EffectiveDayStatus,
    ServiceSnapshot,
    SlotValidation,
    TimeOption,
)
from salon_booking.services.conflict_detector import find_conflicts
from salon_booking.services.interfaces import BookingStore, HoursStore
from salon_booking.services.schedule_resolver import (
    ScheduleResolverService,
    describe_day,
)
from salon_booking.services.slot_validator import (
    availability_mode,
    enumerate_start_times,
    generate_time_slots,
    is_date_bookable,
    is_time_slot_valid,
)

logger = structlog.get_logger(__name__)


CONFLICT_MESSAGE = (
    "This time slot was just booked by someone else. Please choose another time."
)
AVAILABILITY_UNVERIFIED_MESSAGE = (
    "We couldn't check availability right now. Please try again."
)
WRITE_FAILED_MESSAGE = "We couldn't save your booking. Please try again."
COMMITTED_MESSAGE = "Your booking request has been received."

# States from which a customer may (re)pick a date or a time
_DATE_SELECTABLE = (
    BookingAttemptState.IDLE,
    BookingAttemptState.DATE_SELECTED,
    BookingAttemptState.TIME_SELECTED,
    BookingAttemptState.REJECTED,
    BookingAttemptState.FAILED,
)
_TIME_SELECTABLE = (
    BookingAttemptState.DATE_SELECTED,
    BookingAttemptState.TIME_SELECTED,
    BookingAttemptState.REJECTED,
    BookingAttemptState.FAILED,
)


class BookingAttempt:
    """State of one customer's attempt to book a service."""

    def __init__(
        self,
        service: ServiceSnapshot,
        customer_id: str,
        customer_name: Optional[str] = None,
        notes: Optional[str] = None,
    ):
        # Snapshot taken once; catalog edits during the attempt are not seen
        self.service = service
        self.customer_id = customer_id
        self.customer_name = customer_name
        self.notes = notes

        self.state = BookingAttemptState.IDLE
        self.date: Optional[date] = None
        self.day_status: Optional[EffectiveDayStatus] = None
        self.bookability: Optional[DateBookability] = None
        self.time: Optional[str] = None
        self.reason: Optional[str] = None

    def _require(self, *states: BookingAttemptState):
        if self.state not in states:
            raise InvalidBookingStateError(self.state, states)

    def __repr__(self):
        return (
            f"<BookingAttempt(state='{self.state.value}', date={self.date}, "
            f"time={self.time}, service_id={self.service.id})>"
        )


class BookingCommitService:
    """Drives ``BookingAttempt`` objects through the commit protocol."""

    def __init__(
        self,
        hours_store: HoursStore,
        booking_store: BookingStore,
        clock: Clock = None,
        fail_open: bool = None,
    ):
        self.booking_store = booking_store
        self.resolver = ScheduleResolverService(hours_store)
        self.clock = clock or SystemClock()
        self.fail_open = (
            settings.FAIL_OPEN_CONFLICT_CHECK if fail_open is None else fail_open
        )

    def start(
        self,
        service: ServiceSnapshot,
        customer_id: str,
        customer_name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BookingAttempt:
        return BookingAttempt(service, customer_id, customer_name, notes)

    async def select_date(self, attempt: BookingAttempt, day: date) -> DateBookability:
        """Resolve the day and check it can take this service.

        The attempt moves to ``date_selected`` either way; when the date is
        not bookable the reason is kept and no time can be selected.
        """
        attempt._require(*_DATE_SELECTABLE)

        status = await self.resolver.get_effective_day(day)
        bookability = is_date_bookable(day, status, attempt.service, self.clock.now())

        attempt.state = BookingAttemptState.DATE_SELECTED
        attempt.date = day
        attempt.day_status = status
        attempt.bookability = bookability
        attempt.time = None
        attempt.reason = None if bookability.bookable else bookability.reason

        logger.info(
            "Booking date selected",
            date=day.isoformat(),
            service_id=attempt.service.id,
            bookable=bookability.bookable,
            reason=bookability.reason,
        )
        return bookability

    def select_time(self, attempt: BookingAttempt, time: str) -> SlotValidation:
        """Validate a start time; only a valid one advances the attempt."""
        attempt._require(*_TIME_SELECTABLE)

        if not attempt.bookability or not attempt.bookability.bookable:
            reason = attempt.bookability.reason if attempt.bookability else None
            result = SlotValidation(valid=False, reason=reason)
        else:
            result = is_time_slot_valid(
                attempt.date,
                time,
                attempt.day_status,
                attempt.service,
                self.clock.now(),
            )

        if result.valid:
            attempt.state = BookingAttemptState.TIME_SELECTED
            attempt.time = time
            attempt.reason = None
        else:
            attempt.state = BookingAttemptState.DATE_SELECTED
            attempt.time = None
            attempt.reason = result.reason
        return result

    async def submit(self, attempt: BookingAttempt) -> BookingAttemptResult:
        """Re-check the selected slot against fresh data and write it."""
        attempt._require(BookingAttemptState.TIME_SELECTED)
        attempt.state = BookingAttemptState.SUBMITTING

        availability_check_failed = False
        try:
            existing = await self.booking_store.get_bookings_for_date(attempt.date)
        except StoreReadError as e:
            if not self.fail_open:
                logger.error(
                    "Could not load bookings for conflict check",
                    date=attempt.date.isoformat(),
                    error=str(e),
                )
                return self._fail(attempt, AVAILABILITY_UNVERIFIED_MESSAGE)

            logger.warning(
                "Could not load bookings for conflict check, proceeding without it",
                date=attempt.date.isoformat(),
                error=str(e),
            )
            existing = []
            availability_check_failed = True

        now = self.clock.now()
        bookability = is_date_bookable(
            attempt.date, attempt.day_status, attempt.service, now
        )
        if not bookability.bookable:
            return self._reject(attempt, bookability.reason, availability_check_failed)

        fit = is_time_slot_valid(
            attempt.date, attempt.time, attempt.day_status, attempt.service, now
        )
        if not fit.valid:
            return self._reject(attempt, fit.reason, availability_check_failed)

        candidate = CandidateBooking(
            date=attempt.date,
            time=attempt.time,
            duration_minutes=attempt.service.duration_minutes,
        )
        conflicts = find_conflicts(candidate, existing)
        if conflicts:
            logger.info(
                "Booking rejected, slot taken",
                date=attempt.date.isoformat(),
                time=attempt.time,
                conflicts=len(conflicts),
            )
            return self._reject(
                attempt, CONFLICT_MESSAGE, availability_check_failed, slot_taken=True
            )

        record = BookingRecord(
            customer_id=attempt.customer_id,
            customer_name=attempt.customer_name,
            service_id=attempt.service.id,
            service_name=attempt.service.name,
            date=attempt.date,
            time=attempt.time,
            service_duration=attempt.service.duration_minutes,
            status=BookingStatus.PENDING,
            notes=attempt.notes,
        )
        try:
            booking = await self.booking_store.create_booking(record)
        except BookingWriteError as e:
            logger.error(
                "Failed to write booking",
                date=attempt.date.isoformat(),
                time=attempt.time,
                error=str(e),
            )
            result = self._fail(attempt, WRITE_FAILED_MESSAGE)
            result.availability_check_failed = availability_check_failed
            return result

        attempt.state = BookingAttemptState.COMMITTED
        attempt.reason = None
        logger.info(
            "Booking committed",
            booking_id=booking.id,
            date=attempt.date.isoformat(),
            time=attempt.time,
            duration=attempt.service.duration_minutes,
        )
        return BookingAttemptResult(
            state=attempt.state,
            message=COMMITTED_MESSAGE,
            booking=booking,
            availability_check_failed=availability_check_failed,
        )

    def _reject(
        self,
        attempt: BookingAttempt,
        reason: str,
        availability_check_failed: bool,
        slot_taken: bool = False,
    ) -> BookingAttemptResult:
        attempt.state = BookingAttemptState.REJECTED
        attempt.time = None
        attempt.reason = reason
        return BookingAttemptResult(
            state=attempt.state,
            message=reason,
            refresh_slots=True,
            slot_taken=slot_taken,
            availability_check_failed=availability_check_failed,
        )

    def _fail(self, attempt: BookingAttempt, message: str) -> BookingAttemptResult:
        # Selected time is kept so the customer can retry with select_time
        attempt.state = BookingAttemptState.FAILED
        attempt.reason = message
        return BookingAttemptResult(state=attempt.state, message=message)

    async def book(
        self,
        service: ServiceSnapshot,
        customer_id: str,
        day: date,
        time: str,
        customer_name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BookingAttemptResult:
        """Run the whole protocol in one call, as a single HTTP request does.

        A date or time that does not pass validation leaves the attempt in
        ``date_selected`` and the result carries the reason.
        """
        attempt = self.start(service, customer_id, customer_name, notes)

        bookability = await self.select_date(attempt, day)
        if not bookability.bookable:
            return BookingAttemptResult(state=attempt.state, message=attempt.reason)

        validation = self.select_time(attempt, time)
        if not validation.valid:
            return BookingAttemptResult(state=attempt.state, message=attempt.reason)

        return await self.submit(attempt)


class AvailabilityService:
    """What a customer sees after picking a date for a service."""

    def __init__(
        self,
        hours_store: HoursStore,
        booking_store: BookingStore,
        clock: Clock = None,
    ):
        self.booking_store = booking_store
        self.resolver = ScheduleResolverService(hours_store)
        self.clock = clock or SystemClock()

    async def _bookings_or_empty(self, day: date) -> Sequence:
        try:
            return await self.booking_store.get_bookings_for_date(day)
        except StoreReadError as e:
            logger.warning(
                "Bookings unavailable, showing all in-hours times",
                date=day.isoformat(),
                error=str(e),
            )
            return []

    async def get_availability(
        self, day: date, service: ServiceSnapshot
    ) -> AvailabilityResponse:
        now = self.clock.now()
        status = await self.resolver.get_effective_day(day)
        bookability = is_date_bookable(day, status, service, now)

        time_options: List[TimeOption] = []
        time_slots = []
        mode = AvailabilityMode.PICKER
        if bookability.bookable:
            existing = await self._bookings_or_empty(day)
            mode = availability_mode(existing)
            if mode == AvailabilityMode.SLOTS:
                time_slots = generate_time_slots(
                    day, status, service.duration_minutes, existing, now
                )
            else:
                time_options = enumerate_start_times(day, status, service, now)

        return AvailabilityResponse(
            date=day,
            service_id=service.id,
            day=describe_day(status),
            bookability=bookability,
            mode=mode,
            time_options=time_options,
            time_slots=time_slots,
        )

    async def validate_slot(
        self, day: date, time: str, service: ServiceSnapshot
    ) -> SlotValidation:
        """Date and time checks combined, without touching bookings."""
        now = self.clock.now()
        status = await self.resolver.get_effective_day(day)
        bookability = is_date_bookable(day, status, service, now)
        if not bookability.bookable:
            return SlotValidation(valid=False, reason=bookability.reason)
        return is_time_slot_valid(day, time, status, service, now)
