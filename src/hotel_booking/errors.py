"""Exceptions raised by the booking workflow."""
from __future__ import annotations

from datetime import date
from typing import Optional


class BookingError(RuntimeError):
    """Base class for booking domain failures."""


class NormalizationError(BookingError):
    """Raised when a hotel payload cannot be mapped to the canonical model."""


class InvalidDateRangeError(BookingError):
    """Raised when a stay does not end strictly after it starts."""

    def __init__(
        self,
        message: str,
        *,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
    ) -> None:
        super().__init__(message)
        self.check_in = check_in
        self.check_out = check_out


class RoomNotFoundError(BookingError):
    """Raised when the selected room type is missing from the hotel."""

    def __init__(self, room_id: str | None, hotel_id: object = None) -> None:
        super().__init__(f"Room '{room_id}' not found for hotel {hotel_id}")
        self.room_id = room_id
        self.hotel_id = hotel_id


class SubmissionError(BookingError):
    """Raised when a booking could not be handed to persistence."""


class DuplicateReferenceError(BookingError):
    """Raised by a repository when a booking reference is already taken."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Booking reference {reference} already exists")
        self.reference = reference
