from fastapi import APIRouter, Query, Request, status

from venuebook.dependencies import CurrentUser, OptionalUser
from venuebook.models import Booking, BookingCreate, BookingStatus, BookingStatusUpdate
from venuebook.rate_limit import PUBLIC, limiter
from venuebook.routers.venues import parse_date_param
from venuebook.services import bookings

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=Booking,
    status_code=status.HTTP_201_CREATED,
    operation_id="createBooking",
    summary="Book a venue slot",
)
@limiter.limit(PUBLIC)
async def create_booking(request: Request, body: BookingCreate, current_user: OptionalUser) -> Booking:
    """
    Public booking submission.

    A signed-in owner (or the superadmin) booking their own venue is
    recorded as a manual entry.
    """
    return await bookings.create_booking(body, user=current_user)


@router.get(
    "",
    response_model=list[Booking],
    operation_id="listBookings",
    summary="List bookings of the caller's venues",
)
async def list_bookings(
    current_user: CurrentUser,
    owner_email: str | None = Query(None),
    pool_id: str | None = Query(None),
    tennis_court_id: str | None = Query(None),
    pickleball_court_id: str | None = Query(None),
    status_filter: BookingStatus | None = Query(None, alias="status"),
    customer_email: str | None = Query(None),
    date_param: str | None = Query(None, alias="date", description="YYYY-MM-DD"),
) -> list[Booking]:
    refs = {
        name: value
        for name, value in (
            ("pool_id", pool_id),
            ("tennis_court_id", tennis_court_id),
            ("pickleball_court_id", pickleball_court_id),
        )
        if value
    }
    return await bookings.list_bookings(
        current_user,
        owner_email=owner_email,
        venue_refs=refs,
        status=status_filter,
        customer_email=customer_email,
        on_date=parse_date_param(date_param) if date_param else None,
    )


@router.get(
    "/{booking_id}",
    response_model=Booking,
    operation_id="getBooking",
    summary="Get one booking",
)
async def get_booking(booking_id: str, current_user: CurrentUser) -> Booking:
    return await bookings.get_booking(current_user, booking_id)


@router.patch(
    "/{booking_id}",
    response_model=Booking,
    operation_id="updateBookingStatus",
    summary="Confirm or cancel a booking",
)
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    current_user: CurrentUser,
) -> Booking:
    return await bookings.update_status(current_user, booking_id, body.status)
