from datetime import date
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salon_booking.core.config import settings
from salon_booking.core.exceptions import InvalidScheduleError, StoreReadError
from salon_booking.models.date_override import OVERRIDE_FIELDS
from salon_booking.models.date_override import DateOverride as DateOverrideModel
from salon_booking.models.weekly_hours import WeeklyHours
from salon_booking.schemas.scheduling import (
    DateOverride,
    DateOverrideResponse,
    DaySchedule,
    HolidaySeedResponse,
    WeeklySchedule,
)
from salon_booking.services.holidays import HolidayService
from salon_booking.services.schedule_resolver import base_schedule_for
from salon_booking.utils.time_of_day import sunday_based_weekday
from salon_booking.utils.validation import HoursValidationError, validate_and_raise

logger = structlog.get_logger(__name__)


def _to_override_schema(row: DateOverrideModel) -> DateOverrideResponse:
    return DateOverrideResponse(
        date=row.date, **{name: getattr(row, name) for name in OVERRIDE_FIELDS}
    )


class SalonHoursService:
    """Weekly hours and date overrides stored in the database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_weekly_schedule(self) -> Optional[WeeklySchedule]:
        """Return the stored weekly schedule, or None when nothing is stored."""
        try:
            result = await self.db.execute(
                select(WeeklyHours).order_by(WeeklyHours.day_of_week)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreReadError(f"Failed to load weekly schedule: {e}") from e

        if not rows:
            return None

        return {
            row.day_of_week: DaySchedule(
                open_time=row.open_time,
                close_time=row.close_time,
                is_closed=row.is_closed,
            )
            for row in rows
        }

    async def save_weekly_day(self, day_of_week: int, schedule: DaySchedule) -> DaySchedule:
        """Create or replace the weekly hours for one weekday."""
        if not 0 <= day_of_week <= 6:
            raise InvalidScheduleError("day_of_week must be between 0 (Sunday) and 6")

        result = await self.db.execute(
            select(WeeklyHours).filter(WeeklyHours.day_of_week == day_of_week)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = WeeklyHours(day_of_week=day_of_week)
            self.db.add(row)

        row.open_time = schedule.open_time
        row.close_time = schedule.close_time
        row.is_closed = schedule.is_closed

        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(
            "Weekly hours saved",
            day_of_week=day_of_week,
            open_time=schedule.open_time,
            close_time=schedule.close_time,
            is_closed=schedule.is_closed,
        )
        return schedule

    async def _weekly_schedule_or_none(self) -> Optional[WeeklySchedule]:
        try:
            return await self.get_weekly_schedule()
        except StoreReadError as e:
            logger.warning(
                "Weekly schedule unavailable, validating against default hours",
                error=str(e),
            )
            return None

    async def _get_override_row(self, day: date) -> Optional[DateOverrideModel]:
        result = await self.db.execute(
            select(DateOverrideModel).filter(DateOverrideModel.date == day)
        )
        return result.scalar_one_or_none()

    async def get_override(self, day: date) -> Optional[DateOverrideResponse]:
        try:
            row = await self._get_override_row(day)
        except SQLAlchemyError as e:
            raise StoreReadError(f"Failed to load override for {day}: {e}") from e
        return _to_override_schema(row) if row else None

    async def get_override_range(
        self, start_date: date, end_date: date
    ) -> List[DateOverrideResponse]:
        try:
            result = await self.db.execute(
                select(DateOverrideModel)
                .filter(
                    DateOverrideModel.date >= start_date,
                    DateOverrideModel.date <= end_date,
                )
                .order_by(DateOverrideModel.date)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreReadError(
                f"Failed to load overrides for {start_date}..{end_date}: {e}"
            ) from e
        return [_to_override_schema(row) for row in rows]

    async def save_override(self, day: date, fields: DateOverride) -> DateOverrideResponse:
        """Merge the given fields into the override for ``day``.

        Only fields explicitly present in ``fields`` are written; an explicit
        ``None`` clears a field back to the weekly default. Changing opening
        or closing time on a date marked closed re-opens it, unless the same
        call sets ``is_closed`` itself.
        """
        updates = fields.model_dump(exclude_unset=True)

        row = await self._get_override_row(day)
        current = (
            {name: getattr(row, name) for name in OVERRIDE_FIELDS} if row else {}
        )
        merged = {**current, **updates}

        hours_changed = "open_time" in updates or "close_time" in updates
        if hours_changed and "is_closed" not in updates and merged.get("is_closed"):
            merged["is_closed"] = False

        # A single overridden time must still fit the weekday's other time
        base = base_schedule_for(
            sunday_based_weekday(day), await self._weekly_schedule_or_none()
        )
        effective_hours = {
            **merged,
            "open_time": merged.get("open_time") or base.open_time,
            "close_time": merged.get("close_time") or base.close_time,
        }

        try:
            validate_and_raise(effective_hours)
        except HoursValidationError as e:
            raise InvalidScheduleError("; ".join(e.errors)) from e

        if row is None:
            row = DateOverrideModel(date=day)
            self.db.add(row)
        for name in OVERRIDE_FIELDS:
            setattr(row, name, merged.get(name))

        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(row)

        logger.info("Date override saved", date=day.isoformat(), fields=row.present_fields())
        return _to_override_schema(row)

    async def seed_public_holidays(
        self, year: int, country: str = None
    ) -> HolidaySeedResponse:
        """Mark each public holiday of ``year`` as a holiday override.

        Dates that already carry an override are left untouched.
        """
        country = country or settings.HOLIDAY_COUNTRY
        if not country:
            raise InvalidScheduleError("HOLIDAY_COUNTRY is not configured")

        try:
            public_holidays = HolidayService.holidays_for_year(country, year)
        except NotImplementedError as e:
            raise InvalidScheduleError(f"Unsupported holiday country: {country}") from e

        existing = {
            override.date
            for override in await self.get_override_range(
                date(year, 1, 1), date(year, 12, 31)
            )
        }

        created, skipped = [], []
        for holiday_date, name in public_holidays.items():
            if holiday_date in existing:
                skipped.append(holiday_date)
                continue
            self.db.add(
                DateOverrideModel(date=holiday_date, is_holiday=True, notes=name)
            )
            created.append(holiday_date)

        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(
            "Public holidays seeded",
            year=year,
            country=country,
            created=len(created),
            skipped=len(skipped),
        )
        return HolidaySeedResponse(
            year=year, country=country, created=created, skipped=skipped
        )
