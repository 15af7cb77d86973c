from typing import Any, Dict, List, Optional

from salon_booking.utils.time_of_day import parse_hhmm


def validate_time_format(value: Optional[str]) -> bool:
    """Validate "HH:mm" 24-hour time format."""
    if value is None:
        return True  # Allow empty/null

    try:
        parse_hhmm(value)
    except ValueError:
        return False
    return True


def validate_opening_hours(open_time: Optional[str], close_time: Optional[str]) -> List[str]:
    """Validate an opening/closing pair."""
    errors = []

    if not validate_time_format(open_time):
        errors.append("open_time must be a valid time (HH:mm)")
    if not validate_time_format(close_time):
        errors.append("close_time must be a valid time (HH:mm)")

    if errors or open_time is None or close_time is None:
        return errors

    if parse_hhmm(open_time) >= parse_hhmm(close_time):
        errors.append("Open time must be before close time")

    return errors


def validate_override_fields(fields: Dict[str, Any]) -> List[str]:
    """Validate a merged date override before it is stored."""
    errors = validate_opening_hours(fields.get("open_time"), fields.get("close_time"))

    for flag in ("is_closed", "is_holiday", "disable_bookings", "is_tuesday_override"):
        value = fields.get(flag)
        if value is not None and not isinstance(value, bool):
            errors.append(f"{flag} must be a boolean")

    notes = fields.get("notes")
    if notes is not None and len(notes) > 1000:
        errors.append("notes must be at most 1000 characters")

    return errors


class HoursValidationError(ValueError):
    """Custom exception for opening-hours validation errors."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Hours validation failed: {'; '.join(errors)}")


def validate_and_raise(fields: Dict[str, Any]) -> None:
    """Validate override fields and raise exception if errors found."""
    errors = validate_override_fields(fields)
    if errors:
        raise HoursValidationError(errors)
