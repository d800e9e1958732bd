"""Database models."""
from app.models.ground import Ground
from app.models.user import User
from app.models.payment import Payment
from app.models.booking import Booking

__all__ = ["Ground", "User", "Payment", "Booking"]
