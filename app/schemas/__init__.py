"""API schemas."""
from app.schemas.ground import (
    GroundCreate,
    GroundUpdate,
    GroundInDB,
    GroundSummary,
)
from app.schemas.user import (
    UserCreate,
    UserInDB,
    CustomerSummary,
)
from app.schemas.payment import (
    PaymentCreate,
    PaymentUpdate,
    PaymentInDB,
    PaymentSummary,
)
from app.schemas.booking import (
    BookingCreate,
    BookingUpdate,
    BookingConfirm,
    BookingCancel,
    BookingInDB,
    BookingPage,
    Pagination,
    ConflictSummary,
    AvailabilityResponse,
)

__all__ = [
    "GroundCreate",
    "GroundUpdate",
    "GroundInDB",
    "GroundSummary",
    "UserCreate",
    "UserInDB",
    "CustomerSummary",
    "PaymentCreate",
    "PaymentUpdate",
    "PaymentInDB",
    "PaymentSummary",
    "BookingCreate",
    "BookingUpdate",
    "BookingConfirm",
    "BookingCancel",
    "BookingInDB",
    "BookingPage",
    "Pagination",
    "ConflictSummary",
    "AvailabilityResponse",
]
