from datetime import date

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from salon_booking.api.deps.database import get_db
from salon_booking.core.exceptions import InvalidScheduleError, StoreReadError
from salon_booking.schemas.scheduling import (
    CalendarResponse,
    DateOverride,
    DateOverrideResponse,
    DaySchedule,
    DayStatusResponse,
    HolidaySeedResponse,
    WeeklyScheduleResponse,
)
from salon_booking.services.salon_hours import SalonHoursService
from salon_booking.services.schedule_resolver import (
    DEFAULT_WEEKLY_SCHEDULE,
    ScheduleResolverService,
    describe_day,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/weekly", response_model=WeeklyScheduleResponse)
async def get_weekly_schedule(db: AsyncSession = Depends(get_db)):
    """Get the weekly opening hours (the default table when none is stored)."""
    try:
        weekly = await SalonHoursService(db).get_weekly_schedule()
    except StoreReadError as e:
        logger.warning(
            "Weekly schedule unavailable, returning default hours", error=str(e)
        )
        weekly = None

    if weekly is None:
        return WeeklyScheduleResponse(days=DEFAULT_WEEKLY_SCHEDULE, is_default=True)
    return WeeklyScheduleResponse(days={**DEFAULT_WEEKLY_SCHEDULE, **weekly})


@router.put("/weekly/{day_of_week}", response_model=DaySchedule)
async def set_weekly_day(
    schedule: DaySchedule,
    day_of_week: int = Path(..., ge=0, le=6, description="0=Sunday .. 6=Saturday"),
    db: AsyncSession = Depends(get_db),
):
    """Set the default hours for one day of the week."""
    try:
        return await SalonHoursService(db).save_weekly_day(day_of_week, schedule)
    except InvalidScheduleError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )


@router.get("/days/{day}", response_model=DayStatusResponse)
async def get_day_status(day: date, db: AsyncSession = Depends(get_db)):
    """
    Get the effective status of one date.

    Combines the weekly default with the date's override and adds the labels
    used by the calendar legend (open / closed / bookings disabled).
    """
    resolver = ScheduleResolverService(SalonHoursService(db))
    status_ = await resolver.get_effective_day(day)
    return describe_day(status_)


@router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(
    start_date: date = Query(..., description="First date, inclusive"),
    end_date: date = Query(..., description="Last date, inclusive"),
    db: AsyncSession = Depends(get_db),
):
    """Get the effective status of every date in a range."""
    resolver = ScheduleResolverService(SalonHoursService(db))
    try:
        resolved = await resolver.get_effective_range(start_date, end_date)
    except InvalidScheduleError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )

    return CalendarResponse(
        start_date=start_date,
        end_date=end_date,
        days={day.isoformat(): describe_day(s) for day, s in resolved.items()},
    )


@router.put("/overrides/{day}", response_model=DateOverrideResponse)
async def save_date_override(
    day: date, override: DateOverride, db: AsyncSession = Depends(get_db)
):
    """Create or update the override for a date. Only the sent fields change."""
    try:
        return await SalonHoursService(db).save_override(day, override)
    except InvalidScheduleError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )


@router.post(
    "/overrides/holidays",
    response_model=HolidaySeedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def seed_holidays(
    year: int = Query(..., ge=1900, le=2100),
    country: str = Query(None, description="ISO country code, defaults to settings"),
    db: AsyncSession = Depends(get_db),
):
    """Mark the public holidays of a year as holiday overrides."""
    try:
        return await SalonHoursService(db).seed_public_holidays(year, country)
    except InvalidScheduleError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )
