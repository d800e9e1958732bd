"""User schemas."""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class UserCreate(BaseModel):
    """Schema for registering a customer."""

    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None


class UserInDB(UserCreate):
    """Schema for user from database."""

    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerSummary(BaseModel):
    """Customer fields embedded in booking responses."""

    id: int
    first_name: str
    last_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)
