"""In-hours checks for dates and start times.

Two closing-time rules coexist on purpose:

* the same-day cutoff in ``is_date_bookable`` requires ``now + duration +
  BUFFER_MINUTES`` to fit before closing;
* ``is_time_slot_valid`` only requires ``start + duration`` to fit, because
  the buffer protects the next booking, not the closing time.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional

from salon_booking.schemas.scheduling import (
    AvailabilityMode,
    CandidateBooking,
    DateBookability,
    EffectiveDayStatus,
    SlotValidation,
    TimeOption,
    TimeSlot,
)
from salon_booking.services.conflict_detector import BUFFER_MINUTES, has_conflict
from salon_booking.utils.time_of_day import (
    MINUTES_PER_DAY,
    format_12h,
    format_hhmm,
    minutes_of,
    parse_hhmm,
    round_up_to_interval,
)

# Granularity of selectable start times
SLOT_INTERVAL_MINUTES = 15

REASON_AVAILABLE = "available"
REASON_PAST_DATE = "past date"
REASON_CLOSED = "closed"
REASON_HOLIDAY = "holiday"
REASON_BOOKINGS_DISABLED = "bookings disabled"
REASON_TOO_LATE_TODAY = "too late to book today"
REASON_HOURS_UNAVAILABLE = "salon hours not available"
REASON_OUTSIDE_HOURS = "outside salon hours"
REASON_EXCEEDS_CLOSING = "service duration exceeds closing time"


def _has_hours(status: Optional[EffectiveDayStatus]) -> bool:
    return bool(status and status.open_time and status.close_time)


def earliest_valid_time(now: datetime) -> datetime:
    """First selectable start time today: ``now`` rounded up to the next 15 minutes."""
    return round_up_to_interval(now, SLOT_INTERVAL_MINUTES)


def is_date_bookable(
    day: date,
    status: EffectiveDayStatus,
    service,
    now: datetime,
    buffer_minutes: int = BUFFER_MINUTES,
) -> DateBookability:
    """Decide whether ``day`` can take a booking for ``service``.

    Rules are evaluated in order and the first failing rule gives the reason.
    """
    today = now.date()

    if day < today:
        return DateBookability(bookable=False, reason=REASON_PAST_DATE)

    if status.is_holiday:
        return DateBookability(bookable=False, reason=REASON_HOLIDAY)

    if status.is_closed:
        return DateBookability(bookable=False, reason=REASON_CLOSED)

    if status.disable_bookings:
        return DateBookability(bookable=False, reason=REASON_BOOKINGS_DISABLED)

    if not _has_hours(status):
        return DateBookability(bookable=False, reason=REASON_HOURS_UNAVAILABLE)

    if day == today:
        service_end = minutes_of(now) + service.duration_minutes + buffer_minutes
        if service_end > parse_hhmm(status.close_time):
            return DateBookability(bookable=False, reason=REASON_TOO_LATE_TODAY)

    return DateBookability(bookable=True, reason=REASON_AVAILABLE)


def is_time_slot_valid(
    day: date,
    time: str,
    status: Optional[EffectiveDayStatus],
    service,
    now: Optional[datetime] = None,
) -> SlotValidation:
    """Check that a service starting at ``time`` fits inside the day's hours.

    When ``now`` is given and ``day`` is today, start times before the
    earliest valid time are rejected as well.
    """
    if status is None or not _has_hours(status):
        return SlotValidation(valid=False, reason=REASON_HOURS_UNAVAILABLE)
    if status.is_closed:
        return SlotValidation(valid=False, reason=REASON_CLOSED)

    start = parse_hhmm(time)
    open_at = parse_hhmm(status.open_time)
    close_at = parse_hhmm(status.close_time)

    if start < open_at or start >= close_at:
        return SlotValidation(valid=False, reason=REASON_OUTSIDE_HOURS)

    if now is not None and day == now.date():
        earliest = earliest_valid_time(now)
        if earliest.date() > day or start < minutes_of(earliest):
            return SlotValidation(
                valid=False,
                reason=f"Please select a time after {format_12h(minutes_of(earliest))}",
            )

    if start + service.duration_minutes > close_at:
        return SlotValidation(valid=False, reason=REASON_EXCEEDS_CLOSING)

    return SlotValidation(valid=True)


def enumerate_start_times(
    day: date,
    status: Optional[EffectiveDayStatus],
    service,
    now: Optional[datetime] = None,
    interval: int = SLOT_INTERVAL_MINUTES,
) -> List[TimeOption]:
    """Every ``interval`` minutes from opening, each checked independently."""
    if status is None or status.is_closed or not _has_hours(status):
        return []

    options = []
    current = parse_hhmm(status.open_time)
    close_at = parse_hhmm(status.close_time)
    while current < close_at:
        time = format_hhmm(current)
        result = is_time_slot_valid(day, time, status, service, now)
        options.append(
            TimeOption(
                time=time,
                display_time=format_12h(current),
                valid=result.valid,
                reason=result.reason,
            )
        )
        current += interval
    return options


def generate_time_slots(
    day: date,
    status: Optional[EffectiveDayStatus],
    duration_minutes: int,
    existing_bookings: Iterable,
    now: Optional[datetime] = None,
    buffer_minutes: int = BUFFER_MINUTES,
) -> List[TimeSlot]:
    """Fixed slots for a day that already has bookings.

    Slots step by the service duration (15 minutes for very short services),
    must end by closing time, and are flagged unavailable when they hit an
    existing booking's buffered span. Past slots are skipped for today.
    """
    if status is None or status.is_closed or not _has_hours(status):
        return []

    existing_bookings = list(existing_bookings or ())
    interval = (
        SLOT_INTERVAL_MINUTES
        if duration_minutes < SLOT_INTERVAL_MINUTES
        else duration_minutes
    )

    earliest = None
    if now is not None and day == now.date():
        earliest_dt = earliest_valid_time(now)
        earliest = (
            MINUTES_PER_DAY if earliest_dt.date() > day else minutes_of(earliest_dt)
        )

    slots = []
    current = parse_hhmm(status.open_time)
    close_at = parse_hhmm(status.close_time)
    while current < close_at:
        if earliest is not None and current < earliest:
            current += interval
            continue

        end = current + duration_minutes
        if end <= close_at:
            candidate = CandidateBooking(
                date=day, time=format_hhmm(current), duration_minutes=duration_minutes
            )
            slots.append(
                TimeSlot(
                    time=candidate.time,
                    display_time=format_12h(current),
                    end_time=format_hhmm(end),
                    is_available=not has_conflict(
                        candidate, existing_bookings, buffer_minutes
                    ),
                )
            )
        current += interval
    return slots


def availability_mode(existing_bookings: Iterable) -> AvailabilityMode:
    """Free-form picker for an empty day, fixed slots once anything is booked."""
    if any(True for _ in existing_bookings or ()):
        return AvailabilityMode.SLOTS
    return AvailabilityMode.PICKER
