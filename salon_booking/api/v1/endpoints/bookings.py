from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from salon_booking.api.deps.database import get_db
from salon_booking.core.clock import Clock, get_clock
from salon_booking.core.exceptions import (
    BookingWriteError,
    InvalidStatusTransitionError,
    StoreReadError,
)
from salon_booking.schemas.booking import (
    Booking,
    BookingAttemptState,
    BookingCreate,
    BookingList,
    BookingStatusUpdate,
    CustomerBookingList,
)
from salon_booking.schemas.scheduling import (
    AvailabilityResponse,
    ServiceSnapshot,
    SlotValidation,
    SlotValidationRequest,
)
from salon_booking.services.booking import BookingService
from salon_booking.services.booking_flow import (
    AvailabilityService,
    BookingCommitService,
)
from salon_booking.services.salon_hours import SalonHoursService
from salon_booking.services.service import ServiceCatalogService

router = APIRouter()


async def _service_snapshot(db: AsyncSession, service_id: int) -> ServiceSnapshot:
    snapshot = await ServiceCatalogService.get_snapshot(db, service_id)
    if not snapshot:
        raise HTTPException(status_code=404, detail="Service not found")
    return snapshot


@router.get("/", response_model=BookingList)
async def get_bookings(
    day: date = Query(..., alias="date", description="Salon-local date"),
    db: AsyncSession = Depends(get_db),
):
    """Get all bookings on a date, cancelled ones included."""
    try:
        bookings = await BookingService(db).get_bookings_for_date(day)
    except StoreReadError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to load bookings",
        )
    return BookingList(date=day, bookings=bookings, total_count=len(bookings))


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    day: date = Query(..., alias="date", description="Salon-local date"),
    service_id: int = Query(..., description="Catalog service ID"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Get what a customer can pick on a date for a service.

    Returns whether the date is bookable and, if so, either free-form start
    times (empty day) or fixed slots flagged against existing bookings.
    """
    snapshot = await _service_snapshot(db, service_id)
    availability = AvailabilityService(
        SalonHoursService(db), BookingService(db), clock
    )
    return await availability.get_availability(day, snapshot)


@router.post("/validate", response_model=SlotValidation)
async def validate_time_slot(
    request: SlotValidationRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Check a date and start time against salon hours for a service."""
    snapshot = await _service_snapshot(db, request.service_id)
    availability = AvailabilityService(
        SalonHoursService(db), BookingService(db), clock
    )
    return await availability.validate_slot(request.date, request.time, snapshot)


@router.post("/", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Book a service.

    The slot is re-checked against the bookings stored right now:
    - 409 when someone else took the slot in the meantime
    - 422 when the date or time is not bookable, including when the
      re-check at submit finds it no longer fits (e.g. too late today)
    - 503 when the booking could not be stored
    """
    snapshot = await _service_snapshot(db, booking_data.service_id)
    commit_service = BookingCommitService(
        SalonHoursService(db), BookingService(db), clock
    )
    result = await commit_service.book(
        snapshot,
        booking_data.customer_id,
        booking_data.date,
        booking_data.time,
        customer_name=booking_data.customer_name,
        notes=booking_data.notes,
    )

    if result.state == BookingAttemptState.COMMITTED:
        return result.booking
    if result.state == BookingAttemptState.REJECTED and result.slot_taken:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.message)
    if result.state == BookingAttemptState.FAILED:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result.message
        )
    raise HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=result.message
    )


@router.get("/customers/{customer_id}", response_model=CustomerBookingList)
async def get_customer_bookings(customer_id: str, db: AsyncSession = Depends(get_db)):
    """Get one customer's bookings, newest first."""
    try:
        bookings = await BookingService(db).get_bookings_for_customer(customer_id)
    except StoreReadError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to load bookings",
        )
    return CustomerBookingList(
        customer_id=customer_id, bookings=bookings, total_count=len(bookings)
    )


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    """Get booking by ID."""
    booking = await BookingService(db).get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.patch("/{booking_id}/status", response_model=Booking)
async def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Change a booking's status.

    Pending requests can be accepted or rejected; any booking that is not
    already cancelled can be cancelled, which frees its slot.
    """
    try:
        booking = await BookingService(db).update_status(
            booking_id, update.status, update.admin_notes
        )
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (StoreReadError, BookingWriteError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to update booking",
        )
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking
