from datetime import date
from functools import lru_cache
from typing import Dict

import holidays


class HolidayService:
    """Public holiday lookup for the salon's country.

    Uses the `holidays` library; the country code comes from the caller
    (usually ``settings.HOLIDAY_COUNTRY``).
    """

    @staticmethod
    @lru_cache(maxsize=16)
    def _country_holidays(country: str, year: int) -> holidays.HolidayBase:
        return holidays.country_holidays(country, years=year)

    @classmethod
    def holidays_for_year(cls, country: str, year: int) -> Dict[date, str]:
        """Return ``{date: name}`` for every public holiday in ``year``."""
        cal = cls._country_holidays(country, year)
        return dict(sorted(cal.items()))
