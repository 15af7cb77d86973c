"""Minutes-since-midnight helpers.

Opening hours and booking times travel as "HH:mm" strings. They are parsed
into integer minutes once, at the boundary, and every comparison in the
scheduling core is done on those integers.
"""

import re
from datetime import date, datetime, timedelta

MINUTES_PER_DAY = 24 * 60

_HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> int:
    """Parse "HH:mm" into minutes since midnight."""
    if not isinstance(value, str):
        raise ValueError(f"Time must be a 'HH:mm' string, got {value!r}")
    match = _HHMM_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time '{value}', expected 'HH:mm'")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    """Format minutes since midnight as "HH:mm"."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range for a single day: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_12h(minutes: int) -> str:
    """Format minutes since midnight for display, e.g. 870 -> "2:30 PM"."""
    hours, mins = divmod(minutes % MINUTES_PER_DAY, 60)
    ampm = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{mins:02d} {ampm}"


def minutes_of(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def round_up_to_interval(moment: datetime, interval: int = 15) -> datetime:
    """Round a datetime's minute up to the next interval mark.

    Seconds are dropped first, so 10:00:40 stays 10:00 and 10:01 becomes 10:15.
    """
    base = moment.replace(second=0, microsecond=0)
    remainder = base.minute % interval
    if remainder == 0:
        return base
    return base + timedelta(minutes=interval - remainder)


def combine(day: date, minutes: int) -> datetime:
    """Compose a naive datetime from a date and minutes since midnight."""
    return datetime(day.year, day.month, day.day) + timedelta(minutes=minutes)


def sunday_based_weekday(day: date) -> int:
    """Day of week with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7
