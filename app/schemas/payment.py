"""Payment schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional
from datetime import datetime
from decimal import Decimal

PaymentStatus = Literal["pending", "success", "failed", "refunded"]


class PaymentCreate(BaseModel):
    """Schema for recording a payment."""

    amount: Decimal = Field(ge=0)
    status: PaymentStatus = "pending"
    payment_date: Optional[datetime] = None


class PaymentUpdate(BaseModel):
    """Schema for a payment status callback."""

    status: PaymentStatus
    payment_date: Optional[datetime] = None


class PaymentInDB(PaymentCreate):
    """Schema for payment from database."""

    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentSummary(BaseModel):
    """Payment fields embedded in booking responses."""

    id: int
    amount: Decimal
    status: str
    payment_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
