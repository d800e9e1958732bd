"""Booking endpoints."""
import logging
import math
from datetime import date, time
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import BookingError, ValidationError
from app.schemas.booking import (
    AvailabilityResponse,
    BookingCancel,
    BookingConfirm,
    BookingCreate,
    BookingInDB,
    BookingPage,
    BookingStatus,
    BookingType,
    BookingUpdate,
    Pagination,
)
from app.services.availability_service import availability_service
from app.services.booking_service import BookingFilters, booking_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


def page_count(total: int, limit: int) -> int:
    """Number of pages needed to show ``total`` items ``limit`` at a time."""
    return math.ceil(total / limit) if limit else 0


def _page(bookings, total: int, page: int, limit: int) -> BookingPage:
    return BookingPage(
        data=[BookingInDB.model_validate(booking) for booking in bookings],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=page_count(total, limit),
        ),
    )


@router.post("", response_model=BookingInDB, status_code=201)
async def create_booking(
    booking: BookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new ground booking.

    The booking starts as pending. It is rejected when the slot overlaps a
    non-cancelled booking (409 with the conflicting booking and suggestions)
    or when it starts in the past or within the minimum lead time.

    Args:
        booking: Booking data
        db: Database session

    Returns:
        Created booking with ground and customer details
    """
    try:
        return await booking_service.create_booking(db, booking)
    except BookingError:
        raise
    except Exception as e:
        logger.error(f"Error creating booking: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create booking: {str(e)}")


@router.get("", response_model=BookingPage)
async def list_bookings(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    status: Optional[BookingStatus] = None,
    booking_type: Optional[BookingType] = None,
    customer_id: Optional[int] = None,
    ground_id: Optional[int] = None,
    start_date: Optional[date] = Query(default=None, description="Inclusive; requires end_date"),
    end_date: Optional[date] = Query(default=None, description="Inclusive; requires start_date"),
    db: AsyncSession = Depends(get_db),
):
    """
    List bookings, newest first.

    Args:
        page: 1-based page number
        limit: Page size
        status: Filter by status
        booking_type: Filter by booking type
        customer_id: Filter by customer
        ground_id: Filter by ground
        start_date: Start of the booking date range
        end_date: End of the booking date range
        db: Database session

    Returns:
        Page of bookings with pagination info
    """
    filters = BookingFilters(
        status=status,
        booking_type=booking_type,
        customer_id=customer_id,
        ground_id=ground_id,
        start_date=start_date,
        end_date=end_date,
    )
    try:
        bookings, total = await booking_service.list_bookings(db, filters, page=page, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching bookings: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch bookings: {str(e)}")

    return _page(bookings, total, page, limit)


@router.get("/check-availability", response_model=AvailabilityResponse, response_model_exclude_none=True)
async def check_availability(
    ground_id: Optional[int] = None,
    ground_slot: Optional[int] = Query(default=None, ge=1),
    booking_date: Optional[date] = None,
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Check whether a ground slot is free for a time range.

    Args:
        ground_id: Ground ID
        ground_slot: Slot of the ground (defaults to 1)
        booking_date: Date to check
        start_time: Start of the range
        end_time: End of the range
        db: Database session

    Returns:
        Availability flag and the conflicting bookings, if any
    """
    params = {
        "ground_id": ground_id,
        "booking_date": booking_date,
        "start_time": start_time,
        "end_time": end_time,
    }
    missing = [name for name, value in params.items() if value is None]
    if missing:
        raise ValidationError(
            f"Missing required parameters: {', '.join(missing)}",
            {"missing_fields": missing},
        )
    if start_time.tzinfo is not None or end_time.tzinfo is not None:
        raise ValidationError("Booking times must not carry a UTC offset")
    if start_time >= end_time:
        raise ValidationError("Start time must be before end time")

    try:
        result = await availability_service.check_availability(
            db, ground_id, ground_slot, booking_date, start_time, end_time
        )
    except Exception as e:
        logger.error(f"Error checking availability: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to check ground availability: {str(e)}",
        )

    if not result.available:
        return AvailabilityResponse(
            available=False,
            message="This time slot is already booked",
            conflicts=result.conflicts,
            alternative_message="Please select a different time slot or date",
        )

    return AvailabilityResponse(available=True, message="Time slot is available for booking")


@router.get("/user/{user_id}", response_model=BookingPage)
async def list_user_bookings(
    user_id: int,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    status: Optional[BookingStatus] = None,
    booking_type: Optional[BookingType] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    List one customer's bookings, newest first.

    Args:
        user_id: Customer ID
        page: 1-based page number
        limit: Page size
        status: Filter by status
        booking_type: Filter by booking type
        db: Database session

    Returns:
        Page of bookings with pagination info
    """
    try:
        bookings, total = await booking_service.list_user_bookings(
            db, user_id, status=status, booking_type=booking_type, page=page, limit=limit
        )
    except Exception as e:
        logger.error(f"Error fetching bookings for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch user bookings: {str(e)}")

    return _page(bookings, total, page, limit)


@router.get("/{booking_id}", response_model=BookingInDB)
async def get_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a booking with ground, customer and payment details."""
    return await booking_service.get_booking(db, booking_id)


@router.put("/{booking_id}", response_model=BookingInDB)
async def update_booking(
    booking_id: int,
    booking_update: BookingUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a booking.

    Completed and cancelled bookings cannot be modified. Schedule changes are
    checked for lead time and overlaps; status changes must follow
    pending -> confirmed -> completed, with cancellation from either.

    Args:
        booking_id: Booking ID
        booking_update: Fields to update
        db: Database session

    Returns:
        Updated booking
    """
    try:
        return await booking_service.update_booking(db, booking_id, booking_update)
    except BookingError:
        raise
    except Exception as e:
        logger.error(f"Error updating booking {booking_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update booking: {str(e)}")


@router.delete("/{booking_id}", status_code=204)
async def delete_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a booking permanently (admin).

    Args:
        booking_id: Booking ID
        db: Database session
    """
    await booking_service.delete_booking(db, booking_id)


@router.put("/{booking_id}/confirm", response_model=BookingInDB)
async def confirm_booking(
    booking_id: int,
    confirmation: Optional[BookingConfirm] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm a booking and link its payment.

    Args:
        booking_id: Booking ID
        confirmation: Optional payment reference; the payment must be successful
        db: Database session

    Returns:
        Confirmed booking
    """
    payment_id = confirmation.payment_id if confirmation else None
    try:
        return await booking_service.confirm_booking(db, booking_id, payment_id)
    except BookingError:
        raise
    except Exception as e:
        logger.error(f"Error confirming booking {booking_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to confirm booking: {str(e)}")


@router.put("/{booking_id}/cancel", response_model=BookingInDB)
async def cancel_booking(
    booking_id: int,
    cancellation: Optional[BookingCancel] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Cancel a booking.

    Confirmed bookings cannot be cancelled within the cancellation cutoff
    before their start time; pending bookings can always be cancelled.

    Args:
        booking_id: Booking ID
        cancellation: Optional cancellation reason
        db: Database session

    Returns:
        Cancelled booking
    """
    reason = cancellation.reason if cancellation else None
    try:
        return await booking_service.cancel_booking(db, booking_id, reason)
    except BookingError:
        raise
    except Exception as e:
        logger.error(f"Error cancelling booking {booking_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to cancel booking: {str(e)}")
