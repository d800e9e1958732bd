"""Booking lifecycle service: creation, confirmation, cancellation and edits."""
import asyncio
import logging
import weakref
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import select, func, and_, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.core.time_utils import booking_start, minutes_between, now_local
from app.models.booking import (
    Booking,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    TERMINAL_STATUSES,
)
from app.models.ground import Ground
from app.models.payment import Payment, PAYMENT_SUCCESS
from app.models.user import User
from app.schemas.booking import BookingCreate, BookingUpdate
from app.services.availability_service import (
    availability_service,
    DEFAULT_GROUND_SLOT,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("customer_id", "ground_id", "booking_date", "start_time", "end_time", "amount")
SCHEDULE_FIELDS = ("ground_id", "ground_slot", "booking_date", "start_time", "end_time")

ALLOWED_TRANSITIONS = {
    STATUS_PENDING: {STATUS_CONFIRMED, STATUS_CANCELLED},
    STATUS_CONFIRMED: {STATUS_COMPLETED, STATUS_CANCELLED},
    STATUS_COMPLETED: set(),
    STATUS_CANCELLED: set(),
}

CONFLICT_SUGGESTIONS = [
    "Try booking for a different time on the same date",
    "Select a different date",
    "Choose a different ground if available",
]


@dataclass
class BookingFilters:
    """Filters for listing bookings."""

    status: Optional[str] = None
    booking_type: Optional[str] = None
    customer_id: Optional[int] = None
    ground_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class SlotLocks:
    """
    Per (ground, slot, date) asyncio locks.

    Holding the lock around the availability check and the insert keeps two
    requests in this process from both passing the check for the same slot.
    Locks are dropped once no request holds them.
    """

    def __init__(self):
        self._locks = weakref.WeakValueDictionary()

    def lock_for(self, ground_id: int, ground_slot: int, booking_date: date) -> asyncio.Lock:
        key = (ground_id, ground_slot, booking_date)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


class BookingService:
    """Service enforcing the booking lifecycle rules."""

    def __init__(self):
        self.slot_locks = SlotLocks()

    async def get_booking(self, db: AsyncSession, booking_id: int) -> Booking:
        """
        Get a booking with its ground, customer and payment loaded.

        Raises:
            NotFoundError: If the booking does not exist
        """
        result = await db.execute(
            select(Booking)
            .options(
                selectinload(Booking.ground),
                selectinload(Booking.customer),
                selectinload(Booking.payment),
            )
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()

        if not booking:
            raise NotFoundError("Booking not found")

        return booking

    async def list_bookings(
        self,
        db: AsyncSession,
        filters: BookingFilters,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Booking], int]:
        """
        List bookings matching the filters, newest first.

        The date range applies only when both ends are given; both are
        inclusive.

        Returns:
            Tuple of (bookings on the requested page, total matching)
        """
        conditions = []
        if filters.status:
            conditions.append(Booking.status == filters.status)
        if filters.booking_type:
            conditions.append(Booking.booking_type == filters.booking_type)
        if filters.customer_id is not None:
            conditions.append(Booking.customer_id == filters.customer_id)
        if filters.ground_id is not None:
            conditions.append(Booking.ground_id == filters.ground_id)
        if filters.start_date and filters.end_date:
            conditions.append(Booking.booking_date >= filters.start_date)
            conditions.append(Booking.booking_date <= filters.end_date)

        count_result = await db.execute(
            select(func.count(Booking.id)).where(and_(true(), *conditions))
        )
        total = count_result.scalar_one()

        result = await db.execute(
            select(Booking)
            .options(
                selectinload(Booking.ground),
                selectinload(Booking.customer),
                selectinload(Booking.payment),
            )
            .where(and_(true(), *conditions))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def list_user_bookings(
        self,
        db: AsyncSession,
        user_id: int,
        status: Optional[str] = None,
        booking_type: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Booking], int]:
        """List one customer's bookings, newest first."""
        filters = BookingFilters(status=status, booking_type=booking_type, customer_id=user_id)
        return await self.list_bookings(db, filters, page=page, limit=limit)

    async def create_booking(
        self,
        db: AsyncSession,
        data: BookingCreate,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Create a pending booking after validating it against the rules.

        Args:
            db: Database session
            data: Booking fields from the caller
            now: Current local time (defaults to the facility clock)

        Returns:
            The created booking with ground and customer loaded

        Raises:
            ValidationError: Missing fields, bad interval or too little lead time
            NotFoundError: Ground or customer does not exist
            ConflictError: The interval overlaps a non-cancelled booking
        """
        missing = [name for name in REQUIRED_FIELDS if getattr(data, name) is None]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                {"missing_fields": missing},
            )

        self._ensure_interval(data.start_time, data.end_time)

        ground_slot = data.ground_slot or DEFAULT_GROUND_SLOT
        ground = await self._get_ground(db, data.ground_id, lock=True)
        await self._get_customer(db, data.customer_id)
        self._ensure_slot_in_range(ground, ground_slot)

        now = now or now_local()

        async with self.slot_locks.lock_for(ground.id, ground_slot, data.booking_date):
            await self._ensure_available(
                db, ground.id, ground_slot, data.booking_date, data.start_time, data.end_time
            )
            self._ensure_lead_time(data.booking_date, data.start_time, now)

            booking = Booking(
                customer_id=data.customer_id,
                ground_id=ground.id,
                ground_slot=ground_slot,
                booking_date=data.booking_date,
                start_time=data.start_time,
                end_time=data.end_time,
                duration=int(data.duration or minutes_between(data.start_time, data.end_time)),
                booking_type=data.booking_type or "practice",
                special_requirements=list(data.special_requirements or []),
                notes=data.notes or "",
                amount=Decimal(str(data.amount)),
                status=STATUS_PENDING,
            )
            db.add(booking)
            await self._commit_schedule_change(db)

        logger.info(
            f"Booking {booking.id} created for ground {ground.id} slot {ground_slot} "
            f"on {booking.booking_date} {booking.start_time}-{booking.end_time}"
        )
        return await self.get_booking(db, booking.id)

    async def confirm_booking(
        self,
        db: AsyncSession,
        booking_id: int,
        payment_id: Optional[int] = None,
    ) -> Booking:
        """
        Confirm a booking, optionally attaching a successful payment.

        Confirming an already confirmed booking succeeds and may attach a
        payment; cancelled and completed bookings cannot be confirmed.

        Raises:
            NotFoundError: Booking or payment does not exist
            InvalidStateError: Terminal booking or unsuccessful payment
        """
        booking = await self.get_booking(db, booking_id)

        if booking.status in TERMINAL_STATUSES:
            raise InvalidStateError(f"Cannot confirm a {booking.status} booking")

        if payment_id is not None:
            payment = await db.get(Payment, payment_id)
            if not payment:
                raise NotFoundError("Payment not found")
            if payment.status != PAYMENT_SUCCESS:
                raise InvalidStateError("Payment is not successful")
            booking.payment_id = payment.id

        if booking.status == STATUS_CONFIRMED:
            logger.info(f"Booking {booking.id} is already confirmed")
        booking.status = STATUS_CONFIRMED
        await db.commit()

        logger.info(f"Booking {booking.id} confirmed (payment: {booking.payment_id})")
        return await self.get_booking(db, booking.id)

    async def cancel_booking(
        self,
        db: AsyncSession,
        booking_id: int,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Cancel a booking and record the reason in its notes.

        Confirmed bookings cannot be cancelled inside the cancellation
        cutoff; pending bookings can be cancelled at any time.

        Raises:
            NotFoundError: Booking does not exist
            InvalidStateError: Already terminal or too close to start time
        """
        booking = await self.get_booking(db, booking_id)

        if booking.status == STATUS_CANCELLED:
            raise InvalidStateError("Booking is already cancelled")
        if booking.status == STATUS_COMPLETED:
            raise InvalidStateError("Cannot cancel a completed booking")

        self._ensure_cancellable(booking, now or now_local())

        booking.status = STATUS_CANCELLED
        booking.notes = self._append_cancellation_note(booking.notes, reason)
        await db.commit()

        logger.info(f"Booking {booking.id} cancelled: {reason}")
        return await self.get_booking(db, booking.id)

    async def update_booking(
        self,
        db: AsyncSession,
        booking_id: int,
        patch: BookingUpdate,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Apply a partial update to a non-terminal booking.

        Schedule changes are re-validated like a new booking (lead time and
        overlap, ignoring the booking itself). A status change must follow
        the booking state machine.

        Raises:
            NotFoundError: Booking, ground or customer does not exist
            InvalidStateError: Booking is terminal or the status change is illegal
            ValidationError: A required field is cleared or the interval is bad
            ConflictError: The new interval overlaps another booking
        """
        booking = await self.get_booking(db, booking_id)

        if booking.status in TERMINAL_STATUSES:
            raise InvalidStateError("Cannot modify completed or cancelled bookings")

        changes: Dict[str, Any] = patch.model_dump(exclude_unset=True)
        new_status = changes.pop("status", None)

        cleared = [name for name in REQUIRED_FIELDS if name in changes and changes[name] is None]
        if cleared:
            raise ValidationError(
                f"Missing required fields: {', '.join(cleared)}",
                {"missing_fields": cleared},
            )
        if "ground_slot" in changes and changes["ground_slot"] is None:
            changes["ground_slot"] = DEFAULT_GROUND_SLOT

        merged = {name: changes.get(name, getattr(booking, name)) for name in SCHEDULE_FIELDS}
        self._ensure_interval(merged["start_time"], merged["end_time"])

        schedule_changed = any(merged[name] != getattr(booking, name) for name in SCHEDULE_FIELDS)
        times_changed = (
            merged["start_time"] != booking.start_time or merged["end_time"] != booking.end_time
        )

        ground = booking.ground
        if schedule_changed:
            # Ground row stays locked until commit, as in create_booking
            ground = await self._get_ground(db, merged["ground_id"], lock=True)
        if "customer_id" in changes and changes["customer_id"] != booking.customer_id:
            await self._get_customer(db, changes["customer_id"])
        self._ensure_slot_in_range(ground, merged["ground_slot"])

        now = now or now_local()
        if new_status is not None and new_status != booking.status:
            if new_status not in ALLOWED_TRANSITIONS[booking.status]:
                raise InvalidStateError(
                    f"Cannot change booking status from {booking.status} to {new_status}"
                )
            if new_status == STATUS_CANCELLED:
                self._ensure_cancellable(booking, now)

        lock = self.slot_locks.lock_for(
            merged["ground_id"], merged["ground_slot"], merged["booking_date"]
        )
        async with lock:
            if schedule_changed:
                self._ensure_lead_time(merged["booking_date"], merged["start_time"], now)
                await self._ensure_available(
                    db,
                    merged["ground_id"],
                    merged["ground_slot"],
                    merged["booking_date"],
                    merged["start_time"],
                    merged["end_time"],
                    exclude_booking_id=booking.id,
                )

            for name, value in changes.items():
                if name == "amount":
                    value = Decimal(str(value))
                elif name == "duration" and value is not None:
                    value = int(value)
                elif name == "special_requirements":
                    value = list(value or [])
                elif name == "notes":
                    value = value or ""
                setattr(booking, name, value)

            if times_changed and changes.get("duration") is None:
                booking.duration = minutes_between(booking.start_time, booking.end_time)
            if new_status == STATUS_CANCELLED and booking.status != STATUS_CANCELLED:
                booking.notes = self._append_cancellation_note(booking.notes, None)
            if new_status is not None:
                booking.status = new_status

            await self._commit_schedule_change(db)

        logger.info(f"Booking {booking.id} updated: {sorted(changes)} status={booking.status}")
        return await self.get_booking(db, booking.id)

    async def delete_booking(self, db: AsyncSession, booking_id: int) -> None:
        """
        Physically delete a booking (administrative).

        Raises:
            NotFoundError: Booking does not exist
        """
        booking = await db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")

        await db.delete(booking)
        await db.commit()
        logger.info(f"Booking {booking_id} deleted")

    async def complete_finished_bookings(
        self, db: AsyncSession, now: Optional[datetime] = None
    ) -> int:
        """
        Mark confirmed bookings whose end time has passed as completed.

        Args:
            db: Database session
            now: Current local time (defaults to the facility clock)

        Returns:
            Number of bookings completed
        """
        now = now or now_local()

        result = await db.execute(
            select(Booking).where(
                and_(
                    Booking.status == STATUS_CONFIRMED,
                    Booking.booking_date <= now.date(),
                )
            )
        )
        completed = 0
        for booking in result.scalars().all():
            if datetime.combine(booking.booking_date, booking.end_time) <= now:
                booking.status = STATUS_COMPLETED
                completed += 1

        if completed:
            await db.commit()
            logger.info(f"Marked {completed} booking(s) as completed")

        return completed

    async def _get_ground(self, db: AsyncSession, ground_id: int, lock: bool = False) -> Ground:
        """Load a ground, locking its row for the rest of the transaction when asked."""
        statement = select(Ground).where(Ground.id == ground_id)
        if lock:
            statement = statement.with_for_update()
        result = await db.execute(statement)
        ground = result.scalar_one_or_none()

        if not ground:
            raise NotFoundError("Ground not found")

        return ground

    async def _get_customer(self, db: AsyncSession, customer_id: int) -> User:
        customer = await db.get(User, customer_id)
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    async def _ensure_available(
        self,
        db: AsyncSession,
        ground_id: int,
        ground_slot: int,
        booking_date: date,
        start_time,
        end_time,
        exclude_booking_id: Optional[int] = None,
    ) -> None:
        """Raise ConflictError with the first overlapping booking's details."""
        availability = await availability_service.check_availability(
            db,
            ground_id,
            ground_slot,
            booking_date,
            start_time,
            end_time,
            exclude_booking_id=exclude_booking_id,
        )
        if availability.available:
            return

        existing = availability.conflicts[0]
        logger.info(
            f"Conflict for ground {ground_id} slot {ground_slot} on {booking_date} "
            f"{start_time}-{end_time}: booking {existing.booking_id}"
        )
        raise ConflictError(
            f"This time slot ({start_time:%H:%M} - {end_time:%H:%M}) is already booked "
            f"by another customer. Please choose a different time or date.",
            {
                "conflict_details": {
                    "existing_booking": {
                        "start_time": existing.start_time.isoformat(),
                        "end_time": existing.end_time.isoformat(),
                        "booking_type": existing.booking_type,
                        "booked_by": existing.customer_name,
                    },
                    "suggestions": CONFLICT_SUGGESTIONS,
                }
            },
        )

    async def _commit_schedule_change(self, db: AsyncSession) -> None:
        """Commit, translating a unique index violation into a conflict."""
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(
                "This time slot is already booked. Please choose a different time."
            )

    def _ensure_interval(self, start_time, end_time) -> None:
        if start_time >= end_time:
            raise ValidationError("Start time must be before end time")

    def _ensure_slot_in_range(self, ground: Ground, ground_slot: int) -> None:
        if ground_slot < 1 or ground_slot > (ground.slot_count or 1):
            raise ValidationError(
                f"Ground slot must be between 1 and {ground.slot_count or 1}"
            )

    def _ensure_lead_time(self, booking_date: date, start_time, now: datetime) -> None:
        starts_at = booking_start(booking_date, start_time)

        if starts_at <= now:
            raise ValidationError(
                "Cannot book ground for past dates or times. "
                "Please select a future date and time."
            )

        if starts_at < now + timedelta(minutes=settings.MIN_LEAD_TIME_MINUTES):
            raise ValidationError(
                f"Ground must be booked at least {self._describe_minutes(settings.MIN_LEAD_TIME_MINUTES)} "
                f"in advance. Please select a later time."
            )

    def _ensure_cancellable(self, booking: Booking, now: datetime) -> None:
        if booking.status != STATUS_CONFIRMED:
            return

        starts_at = booking_start(booking.booking_date, booking.start_time)
        if starts_at - now < timedelta(minutes=settings.CANCELLATION_CUTOFF_MINUTES):
            raise InvalidStateError(
                f"Cannot cancel booking less than "
                f"{self._describe_minutes(settings.CANCELLATION_CUTOFF_MINUTES)} before start time"
            )

    @staticmethod
    def _append_cancellation_note(notes: Optional[str], reason: Optional[str]) -> str:
        note = f"Cancellation reason: {reason or 'not specified'}"
        return f"{notes}\n{note}" if notes else note

    @staticmethod
    def _describe_minutes(minutes: int) -> str:
        if minutes % 60 == 0:
            hours = minutes // 60
            return f"{hours} hour" if hours == 1 else f"{hours} hours"
        return f"{minutes} minutes"


# Singleton instance
booking_service = BookingService()
