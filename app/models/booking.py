"""Booking model."""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Time,
    Numeric,
    JSON,
    Index,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

BOOKING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_COMPLETED, STATUS_CANCELLED)
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)
BOOKING_TYPES = ("practice", "match", "training", "session")


class Booking(Base):
    """Represents a booking of one ground slot for a time range on a date."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    ground_id = Column(Integer, ForeignKey("grounds.id", ondelete="CASCADE"), nullable=False, index=True)
    ground_slot = Column(Integer, nullable=False, default=1)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration = Column(Integer, nullable=False)  # Minutes
    booking_type = Column(String, nullable=False, default="practice")
    status = Column(String, nullable=False, default=STATUS_PENDING, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_id = Column(Integer, ForeignKey("payments.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=False, default="")
    special_requirements = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    ground = relationship("Ground", back_populates="bookings")
    customer = relationship("User", back_populates="bookings")
    payment = relationship("Payment")

    __table_args__ = (
        Index("ix_bookings_ground_slot_date", "ground_id", "ground_slot", "booking_date"),
        # Two active bookings can never start at the same moment on one slot
        Index(
            "uq_bookings_active_slot_start",
            "ground_id",
            "ground_slot",
            "booking_date",
            "start_time",
            unique=True,
            postgresql_where=text("status != 'cancelled'"),
            sqlite_where=text("status != 'cancelled'"),
        ),
    )

    def __repr__(self):
        return (
            f"<Booking(id={self.id}, ground={self.ground_id}/{self.ground_slot}, "
            f"date={self.booking_date}, {self.start_time}-{self.end_time}, status={self.status})>"
        )
