from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from app.models.db_models import Booking

# --- Incoming Request Models ---

class LoginRequest(BaseModel):
    # Optional so a missing field is an auth failure, not a payload error
    username: Optional[str] = None
    password: Optional[str] = None

class BookingCreateRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    service_type: Optional[str] = None
    message: Optional[str] = None
    booking_date: Optional[str] = None

class StatusUpdateRequest(BaseModel):
    status: Optional[str] = None


# --- Outgoing Response Models ---

class MessageResponse(BaseModel):
    message: str

class BookingCreatedResponse(BaseModel):
    message: str
    bookingId: int

class StatusUpdateResponse(BaseModel):
    success: bool
    message: str

class DashboardSummary(BaseModel):
    totalBookings: int
    pendingBookings: int
    completedBookings: int

class BookingOut(BaseModel):
    """A booking as the admin panel sees it: date and status are the effective values."""
    booking_id: int
    first_name: str
    last_name: Optional[str] = None
    email: str
    phone_number: str
    address: Optional[str] = None
    service_type: str
    message: Optional[str] = None
    booking_date: Union[datetime, date]
    status: str
    created_at: datetime

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingOut":
        return cls(
            booking_id=booking.booking_id,
            first_name=booking.first_name,
            last_name=booking.last_name,
            email=booking.email,
            phone_number=booking.phone_number,
            address=booking.address,
            service_type=booking.service_type,
            message=booking.message,
            booking_date=booking.effective_date,
            status=booking.effective_status,
            created_at=booking.created_at,
        )
