from fastapi import APIRouter

from salon_booking.api.v1.endpoints import bookings, hours, services

api_router = APIRouter()

# Salon hours and date override endpoints
api_router.include_router(hours.router, prefix="/hours", tags=["hours"])

# Service catalog endpoints
api_router.include_router(services.router, prefix="/services", tags=["services"])

# Customer booking endpoints
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
