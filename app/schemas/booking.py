"""Booking schemas."""
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from typing import Annotated, Literal, Optional, List
from datetime import datetime, date, time
from decimal import Decimal

from app.schemas.ground import GroundSummary
from app.schemas.payment import PaymentSummary
from app.schemas.user import CustomerSummary

BookingType = Literal["practice", "match", "training", "session"]
BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]


def ensure_wall_clock(value: time) -> time:
    """Reject times with a UTC offset; booking times are local to the ground."""
    if value.tzinfo is not None:
        raise ValueError("Booking times must not carry a UTC offset")
    return value


WallClockTime = Annotated[time, AfterValidator(ensure_wall_clock)]


class BookingCreate(BaseModel):
    """
    Schema for creating a booking.

    Required fields are checked by the booking service so that a missing
    field is reported as a booking validation error.
    """

    customer_id: Optional[int] = None
    ground_id: Optional[int] = None
    ground_slot: Optional[int] = Field(default=None, ge=1)
    booking_date: Optional[date] = None
    start_time: Optional[WallClockTime] = None
    end_time: Optional[WallClockTime] = None
    duration: Optional[int] = Field(default=None, ge=1)
    booking_type: Optional[BookingType] = None
    special_requirements: Optional[List[str]] = None
    notes: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)


class BookingUpdate(BaseModel):
    """Schema for updating a booking. Only supplied fields are applied."""

    customer_id: Optional[int] = None
    ground_id: Optional[int] = None
    ground_slot: Optional[int] = Field(default=None, ge=1)
    booking_date: Optional[date] = None
    start_time: Optional[WallClockTime] = None
    end_time: Optional[WallClockTime] = None
    duration: Optional[int] = Field(default=None, ge=1)
    booking_type: Optional[BookingType] = None
    special_requirements: Optional[List[str]] = None
    notes: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)
    status: Optional[BookingStatus] = None


class BookingConfirm(BaseModel):
    """Schema for confirming a booking."""

    payment_id: Optional[int] = None


class BookingCancel(BaseModel):
    """Schema for cancelling a booking."""

    reason: Optional[str] = None


class BookingInDB(BaseModel):
    """Schema for booking from database."""

    id: int
    customer_id: int
    ground_id: int
    ground_slot: int
    booking_date: date
    start_time: time
    end_time: time
    duration: int
    booking_type: str
    status: str
    amount: Decimal
    payment_id: Optional[int] = None
    notes: str = ""
    special_requirements: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    ground: Optional[GroundSummary] = None
    customer: Optional[CustomerSummary] = None
    payment: Optional[PaymentSummary] = None

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    """Pagination block of list responses."""

    page: int
    limit: int
    total: int
    pages: int


class BookingPage(BaseModel):
    """A page of bookings."""

    data: List[BookingInDB]
    pagination: Pagination


class ConflictSummary(BaseModel):
    """An existing booking that overlaps a requested interval."""

    booking_id: int
    customer_name: Optional[str] = None
    start_time: time
    end_time: time
    booking_type: str
    status: str


class AvailabilityResponse(BaseModel):
    """Schema for availability check response."""

    available: bool
    message: str
    conflicts: Optional[List[ConflictSummary]] = None
    alternative_message: Optional[str] = None
