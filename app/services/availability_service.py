"""Availability service for detecting booking overlaps on a ground slot."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from datetime import date, time as dt_time
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.booking import Booking, STATUS_CANCELLED
from app.schemas.booking import ConflictSummary

logger = logging.getLogger(__name__)

DEFAULT_GROUND_SLOT = 1


@dataclass
class AvailabilityResult:
    """Outcome of an availability check."""

    available: bool
    conflicts: List[ConflictSummary] = field(default_factory=list)
    bookings: List[Booking] = field(default_factory=list)


class AvailabilityService:
    """Service for checking whether a ground slot is free for a time range."""

    async def find_conflicts(
        self,
        db: AsyncSession,
        ground_id: int,
        ground_slot: Optional[int],
        booking_date: date,
        start_time: dt_time,
        end_time: dt_time,
        exclude_booking_id: Optional[int] = None,
    ) -> List[Booking]:
        """
        Find non-cancelled bookings that overlap a requested interval.

        Intervals are half-open, so a booking ending at 09:30 does not
        overlap one starting at 09:30.

        Args:
            db: Database session
            ground_id: Ground ID
            ground_slot: Slot of the ground (defaults to 1)
            booking_date: Calendar date of the booking
            start_time: Requested start
            end_time: Requested end
            exclude_booking_id: Booking to leave out (the one being edited)

        Returns:
            Overlapping bookings ordered by start time
        """
        conditions = [
            Booking.ground_id == ground_id,
            Booking.ground_slot == (ground_slot or DEFAULT_GROUND_SLOT),
            Booking.booking_date == booking_date,
            Booking.status != STATUS_CANCELLED,
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        ]
        if exclude_booking_id is not None:
            conditions.append(Booking.id != exclude_booking_id)

        result = await db.execute(
            select(Booking)
            .options(selectinload(Booking.customer))
            .where(and_(*conditions))
            .order_by(Booking.start_time)
        )
        return list(result.scalars().all())

    async def check_availability(
        self,
        db: AsyncSession,
        ground_id: int,
        ground_slot: Optional[int],
        booking_date: date,
        start_time: dt_time,
        end_time: dt_time,
        exclude_booking_id: Optional[int] = None,
    ) -> AvailabilityResult:
        """
        Check whether a ground slot is free for the requested interval.

        Args:
            db: Database session
            ground_id: Ground ID
            ground_slot: Slot of the ground (defaults to 1)
            booking_date: Calendar date of the booking
            start_time: Requested start
            end_time: Requested end
            exclude_booking_id: Booking to leave out of the check

        Returns:
            AvailabilityResult with a summary of each conflicting booking
        """
        bookings = await self.find_conflicts(
            db,
            ground_id,
            ground_slot,
            booking_date,
            start_time,
            end_time,
            exclude_booking_id=exclude_booking_id,
        )

        conflicts = [self._summarize(booking) for booking in bookings]
        if conflicts:
            logger.debug(
                f"Ground {ground_id} slot {ground_slot or DEFAULT_GROUND_SLOT} on {booking_date}: "
                f"{len(conflicts)} conflict(s) for {start_time}-{end_time}"
            )

        return AvailabilityResult(
            available=len(conflicts) == 0,
            conflicts=conflicts,
            bookings=bookings,
        )

    def _summarize(self, booking: Booking) -> ConflictSummary:
        """Build the public summary of a conflicting booking."""
        return ConflictSummary(
            booking_id=booking.id,
            customer_name=booking.customer.display_name if booking.customer else None,
            start_time=booking.start_time,
            end_time=booking.end_time,
            booking_type=booking.booking_type,
            status=booking.status,
        )


# Singleton instance
availability_service = AvailabilityService()
