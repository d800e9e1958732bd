"""Booking domain errors.

Services raise these; ``app.main`` renders them as JSON with the error kind,
the message and any structured details.
"""
from typing import Any, Dict, Optional


class BookingError(Exception):
    """Base class for booking errors surfaced to API callers."""

    kind = "booking_error"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {"detail": self.message, "error": self.kind}
        payload.update(self.details)
        return payload


class ValidationError(BookingError):
    """Missing or malformed input."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(BookingError):
    """An id did not resolve to a record."""

    kind = "not_found"
    status_code = 404


class ConflictError(BookingError):
    """The requested interval overlaps an existing booking."""

    kind = "conflict"
    status_code = 409


class InvalidStateError(BookingError):
    """The operation is not allowed from the booking's current status."""

    kind = "invalid_state"
    status_code = 400
