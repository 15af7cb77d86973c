from datetime import date, timedelta
from typing import Dict, Mapping, Optional

import structlog

from salon_booking.core.config import settings
from salon_booking.core.exceptions import InvalidScheduleError, StoreReadError
from salon_booking.models.weekly_hours import WeekDay
from salon_booking.schemas.scheduling import (
    CalendarIndicator,
    DateOverride,
    DaySchedule,
    DayStatusResponse,
    EffectiveDayStatus,
    SalonStatus,
    WeeklySchedule,
)
from salon_booking.services.interfaces import HoursStore
from salon_booking.utils.time_of_day import sunday_based_weekday

logger = structlog.get_logger(__name__)


TUESDAY = WeekDay.TUESDAY.value

# Used whenever no weekly schedule is configured or it cannot be read.
# Both single-day and range resolution go through this one table.
DEFAULT_WEEKLY_SCHEDULE: Dict[int, DaySchedule] = {
    WeekDay.SUNDAY.value: DaySchedule(open_time="10:00", close_time="18:00"),
    WeekDay.MONDAY.value: DaySchedule(open_time="08:30", close_time="21:00"),
    WeekDay.TUESDAY.value: DaySchedule(
        open_time="08:30", close_time="21:00", is_closed=True
    ),
    WeekDay.WEDNESDAY.value: DaySchedule(open_time="08:30", close_time="21:00"),
    WeekDay.THURSDAY.value: DaySchedule(open_time="08:30", close_time="21:00"),
    WeekDay.FRIDAY.value: DaySchedule(open_time="08:30", close_time="21:00"),
    WeekDay.SATURDAY.value: DaySchedule(open_time="09:00", close_time="20:00"),
}


def day_name(day_of_week: int) -> str:
    return WeekDay(day_of_week).name.capitalize()


def base_schedule_for(
    day_of_week: int, weekly_schedule: Optional[Mapping[int, DaySchedule]]
) -> DaySchedule:
    """Weekly entry for a weekday, falling back to the default table."""
    if weekly_schedule and day_of_week in weekly_schedule:
        return weekly_schedule[day_of_week]
    return DEFAULT_WEEKLY_SCHEDULE[day_of_week]


def _pick(override_value, base_value):
    return base_value if override_value is None else override_value


def resolve_day(
    day: date,
    weekly_schedule: Optional[WeeklySchedule] = None,
    override: Optional[DateOverride] = None,
) -> EffectiveDayStatus:
    """Merge the weekly default for ``day`` with its optional override.

    Fields are merged one by one: a field set on the override wins, an unset
    field falls back to the weekly default. Tuesdays are closed unless the
    override gives an explicit opening time or sets ``is_tuesday_override``.
    """
    day_of_week = sunday_based_weekday(day)
    base = base_schedule_for(day_of_week, weekly_schedule)

    if override is None:
        return EffectiveDayStatus(
            date=day,
            day_of_week=day_of_week,
            day_name=day_name(day_of_week),
            open_time=base.open_time,
            close_time=base.close_time,
            is_closed=base.is_closed or day_of_week == TUESDAY,
            is_specific=False,
        )

    is_tuesday_override = bool(override.is_tuesday_override)
    is_closed = _pick(override.is_closed, base.is_closed)

    if (
        day_of_week == TUESDAY
        and override.open_time is None
        and not is_tuesday_override
    ):
        is_closed = True

    return EffectiveDayStatus(
        date=day,
        day_of_week=day_of_week,
        day_name=day_name(day_of_week),
        open_time=_pick(override.open_time, base.open_time),
        close_time=_pick(override.close_time, base.close_time),
        is_closed=is_closed,
        is_holiday=bool(override.is_holiday),
        disable_bookings=bool(override.disable_bookings),
        is_tuesday_override=is_tuesday_override,
        notes=override.notes or "",
        is_specific=True,
    )


def resolve_range(
    start_date: date,
    end_date: date,
    weekly_schedule: Optional[WeeklySchedule] = None,
    overrides_by_date: Optional[Mapping[date, DateOverride]] = None,
) -> Dict[date, EffectiveDayStatus]:
    """Resolve every date in ``[start_date, end_date]``. Reversed ranges are empty."""
    overrides_by_date = overrides_by_date or {}
    resolved = {}
    current = start_date
    while current <= end_date:
        resolved[current] = resolve_day(
            current, weekly_schedule, overrides_by_date.get(current)
        )
        current += timedelta(days=1)
    return resolved


def salon_status(status: EffectiveDayStatus) -> SalonStatus:
    if status.is_closed or status.is_holiday:
        return SalonStatus.CLOSED
    if status.disable_bookings:
        return SalonStatus.BOOKINGS_DISABLED
    return SalonStatus.OPEN


def _is_weekly_tuesday_closure(status: EffectiveDayStatus) -> bool:
    return (
        status.day_of_week == TUESDAY
        and status.is_closed
        and not status.is_tuesday_override
    )


def status_message(status: EffectiveDayStatus) -> str:
    label = salon_status(status)
    if label == SalonStatus.CLOSED:
        if _is_weekly_tuesday_closure(status):
            return "Tuesday is our weekly closure day"
        return "Salon is closed today"
    if label == SalonStatus.BOOKINGS_DISABLED:
        return "Salon is open but bookings are disabled"
    return "Salon is open for business"


def calendar_indicator(status: EffectiveDayStatus) -> CalendarIndicator:
    if status.is_holiday:
        return CalendarIndicator.HOLIDAY
    if _is_weekly_tuesday_closure(status):
        return CalendarIndicator.TUESDAY_CLOSURE
    if status.disable_bookings:
        return CalendarIndicator.BOOKINGS_DISABLED
    if status.is_closed:
        return CalendarIndicator.CLOSED
    return CalendarIndicator.OPEN


def describe_day(status: EffectiveDayStatus) -> DayStatusResponse:
    """Attach the display labels used by calendar legends."""
    return DayStatusResponse(
        **status.model_dump(),
        status=salon_status(status),
        message=status_message(status),
        indicator=calendar_indicator(status),
    )


class ScheduleResolverService:
    """Reads hours from a store and resolves effective day status.

    Store failures never block: an unreadable weekly schedule falls back to
    the default table and unreadable overrides are treated as absent.
    """

    def __init__(self, hours_store: HoursStore, max_range_days: int = None):
        self.hours_store = hours_store
        self.max_range_days = max_range_days or settings.MAX_CALENDAR_RANGE_DAYS

    async def _load_weekly_schedule(self) -> Optional[WeeklySchedule]:
        try:
            return await self.hours_store.get_weekly_schedule()
        except StoreReadError as e:
            logger.warning(
                "Weekly schedule unavailable, using default hours", error=str(e)
            )
            return None

    async def get_effective_day(self, day: date) -> EffectiveDayStatus:
        weekly_schedule = await self._load_weekly_schedule()
        try:
            override = await self.hours_store.get_override(day)
        except StoreReadError as e:
            logger.warning(
                "Date override unavailable, using weekly hours",
                date=day.isoformat(),
                error=str(e),
            )
            override = None

        status = resolve_day(day, weekly_schedule, override)
        logger.debug(
            "Resolved effective day",
            date=day.isoformat(),
            is_closed=status.is_closed,
            is_specific=status.is_specific,
        )
        return status

    async def get_effective_range(
        self, start_date: date, end_date: date
    ) -> Dict[date, EffectiveDayStatus]:
        if end_date < start_date:
            raise InvalidScheduleError("end_date must not be before start_date")
        span = (end_date - start_date).days + 1
        if span > self.max_range_days:
            raise InvalidScheduleError(
                f"Date range too long: {span} days (max {self.max_range_days})"
            )

        weekly_schedule = await self._load_weekly_schedule()
        try:
            overrides = {
                override.date: override
                for override in await self.hours_store.get_override_range(
                    start_date, end_date
                )
            }
        except StoreReadError as e:
            logger.warning(
                "Date overrides unavailable for range, using weekly hours",
                start_date=start_date.isoformat(),
                end_date=end_date.isoformat(),
                error=str(e),
            )
            overrides = {}

        resolved = resolve_range(start_date, end_date, weekly_schedule, overrides)
        logger.info(
            "Resolved calendar range",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            days=len(resolved),
            overrides=len(overrides),
        )
        return resolved
