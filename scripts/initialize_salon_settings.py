#!/usr/bin/env python3
"""
Script to initialize the salon's weekly opening hours.
Creates the tables if needed and stores the default weekly schedule when
no weekly hours exist yet. Existing hours are never overwritten.
"""

import asyncio
import sys

from salon_booking.core.database import AsyncSessionLocal, close_db, init_db
from salon_booking.services.salon_hours import SalonHoursService
from salon_booking.services.schedule_resolver import (
    DEFAULT_WEEKLY_SCHEDULE,
    day_name,
)


async def initialize_salon_settings() -> bool:
    """Seed the default weekly schedule. Returns True if anything was written."""
    await init_db()

    async with AsyncSessionLocal() as session:
        hours_service = SalonHoursService(session)
        if await hours_service.get_weekly_schedule() is not None:
            print("Weekly hours already configured, nothing to do")
            return False

        for day_of_week, schedule in sorted(DEFAULT_WEEKLY_SCHEDULE.items()):
            await hours_service.save_weekly_day(day_of_week, schedule)
            closed = " (closed)" if schedule.is_closed else ""
            print(
                f"{day_name(day_of_week)}: "
                f"{schedule.open_time}-{schedule.close_time}{closed}"
            )

    print("✅ Salon weekly hours initialized")
    return True


async def main():
    try:
        await initialize_salon_settings()
    except Exception as e:
        print(f"❌ Error initializing salon settings: {e}")
        sys.exit(1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
