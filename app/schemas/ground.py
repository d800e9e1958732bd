"""Ground schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class GroundBase(BaseModel):
    """Base ground schema."""

    name: str
    location: Optional[str] = None
    price_per_slot: Decimal = Field(default=Decimal("0"), ge=0)
    slot_count: int = Field(default=1, ge=1)
    facilities: Optional[List[str]] = None


class GroundCreate(GroundBase):
    """Schema for registering a ground."""

    pass


class GroundUpdate(BaseModel):
    """Schema for updating a ground."""

    name: Optional[str] = None
    location: Optional[str] = None
    price_per_slot: Optional[Decimal] = Field(default=None, ge=0)
    slot_count: Optional[int] = Field(default=None, ge=1)
    facilities: Optional[List[str]] = None


class GroundInDB(GroundBase):
    """Schema for ground from database."""

    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GroundSummary(BaseModel):
    """Ground fields embedded in booking responses."""

    id: int
    name: str
    location: Optional[str] = None
    price_per_slot: Decimal

    model_config = ConfigDict(from_attributes=True)
