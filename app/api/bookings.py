from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from app.api.deps import get_booking_service, get_dispatcher, get_status_service
from app.core.errors import storage_errors
from app.core.security import require_admin
from app.models.api_models import (
    BookingCreateRequest,
    BookingCreatedResponse,
    BookingOut,
    DashboardSummary,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from app.services.booking_service import BookingQueryService
from app.services.notification_service import NotificationDispatcher
from app.services.status_service import BookingStatusService

router = APIRouter()


@router.get("/dashboard-summary", response_model=DashboardSummary, dependencies=[Depends(require_admin)])
def dashboard_summary(bookings: BookingQueryService = Depends(get_booking_service)):
    with storage_errors("Failed to fetch dashboard summary."):
        return bookings.dashboard_summary()


@router.get("/bookings", response_model=List[BookingOut], dependencies=[Depends(require_admin)])
def list_bookings(
    search: Optional[str] = None,
    service: Optional[str] = None,
    status: Optional[str] = None,
    date: Optional[str] = None,
    limit: Optional[str] = None,
    bookings: BookingQueryService = Depends(get_booking_service),
):
    # Empty query params (the admin panel sends `?search=&service=`) mean "no filter"
    with storage_errors("Failed to fetch bookings."):
        rows = bookings.list_bookings(search=search, service_type=service, status=status, on_date=date, limit=limit)
    return [BookingOut.from_booking(row) for row in rows]


@router.get("/bookings/{booking_id}", response_model=BookingOut, dependencies=[Depends(require_admin)])
def get_booking(booking_id: int, bookings: BookingQueryService = Depends(get_booking_service)):
    with storage_errors("Failed to fetch booking details."):
        booking = bookings.get_booking(booking_id)
    return BookingOut.from_booking(booking)


@router.put("/bookings/{booking_id}", response_model=StatusUpdateResponse, dependencies=[Depends(require_admin)])
def update_booking_status(
    booking_id: int,
    req: StatusUpdateRequest,
    statuses: BookingStatusService = Depends(get_status_service),
):
    with storage_errors("Failed to update booking status."):
        statuses.set_status(booking_id, req.status)
    return {"success": True, "message": "Booking status updated successfully."}


@router.post("/bookings", status_code=201, response_model=BookingCreatedResponse)
def create_booking(
    req: BookingCreateRequest,
    background_tasks: BackgroundTasks,
    bookings: BookingQueryService = Depends(get_booking_service),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    with storage_errors("Failed to create booking."):
        booking = bookings.create_booking(req.model_dump())

    # Emails go out after the response; their outcome never reaches the caller
    background_tasks.add_task(dispatcher.dispatch_booking_created, booking)
    return {"message": "Booking created successfully.", "bookingId": booking.booking_id}
