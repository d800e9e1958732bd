"""Ground model."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Ground(Base):
    """Represents a bookable ground (facility)."""

    __tablename__ = "grounds"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    location = Column(String, nullable=True)
    price_per_slot = Column(Numeric(10, 2), nullable=False, default=0)  # Hourly rate
    slot_count = Column(Integer, nullable=False, default=1)  # Independently bookable lanes
    facilities = Column(JSON, nullable=True)  # e.g. ["floodlights", "nets"]
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    bookings = relationship("Booking", back_populates="ground", cascade="all, delete-orphan")
