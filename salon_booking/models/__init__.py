# Import all models to ensure they are registered with SQLAlchemy
from . import (
    booking,
    date_override,
    service,
    weekly_hours,
)

__all__ = [
    "booking",
    "date_override",
    "service",
    "weekly_hours",
]
