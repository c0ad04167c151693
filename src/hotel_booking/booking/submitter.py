"""Assemble booking records and hand them to persistence."""
from __future__ import annotations

import copy
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from hotel_booking.errors import (
    BookingError,
    DuplicateReferenceError,
    RoomNotFoundError,
    SubmissionError,
)
from hotel_booking.hotels.models import CanonicalHotel, Money, RoomOffering, RoomPrice
from hotel_booking.pricing import compute_nights, compute_total

from .form import BookingFormState
from .models import STATUS_PENDING, BookingRecord, RoomSnapshot, StayDates
from .reference import DEFAULT_PREFIX, generate_booking_reference

logger = logging.getLogger(__name__)

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class BookingRepository(Protocol):
    """Persistence collaborator: stores a record and returns its id."""

    async def save_booking(self, record: BookingRecord) -> str: ...


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime(ISO_FORMAT)


class BookingSubmitter:
    """Builds a :class:`BookingRecord` from wizard state and persists it.

    Repository errors propagate unchanged with one exception:
    :class:`DuplicateReferenceError` is absorbed and a fresh reference is
    minted, up to ``max_reference_attempts`` times. Only the last duplicate
    reaches the caller. Repositories that do not enforce reference uniqueness
    never raise it, so for them no retry happens.
    """

    def __init__(
        self,
        repository: BookingRepository,
        *,
        reference_prefix: str = DEFAULT_PREFIX,
        max_reference_attempts: int = 3,
        reference_factory: Optional[Callable[[], str]] = None,
        clock: Callable[[], str] = _utc_now,
    ) -> None:
        self._repository = repository
        self._reference_prefix = reference_prefix
        self._max_reference_attempts = max(1, max_reference_attempts)
        self._reference_factory = reference_factory or (
            lambda: generate_booking_reference(self._reference_prefix)
        )
        self._clock = clock

    def build_record(
        self,
        hotel: CanonicalHotel,
        room: RoomOffering,
        form: BookingFormState,
        user_id: str,
        *,
        booking_reference: str,
    ) -> BookingRecord:
        nights = compute_nights(form.check_in_date, form.check_out_date)
        total = compute_total(room.price.amount, nights, form.number_of_rooms)
        return BookingRecord(
            hotel_id=hotel.hotel_id,
            hotel_name=hotel.property.name,
            booking_reference=booking_reference,
            total_price=Money(amount=total, currency=room.price.currency),
            status=STATUS_PENDING,
            created_at=self._clock(),
            user_id=user_id,
            room=RoomSnapshot(
                id=room.id,
                name=room.name or "Standard Room",
                description=room.description,
                amenities=tuple(room.amenities),
                price=RoomPrice(amount=room.price.amount, currency=room.price.currency, per_night=True),
            ),
            location=hotel.property.location,
            dates=StayDates(
                check_in=form.check_in_date,
                check_out=form.check_out_date,
                number_of_nights=nights,
            ),
            form=copy.deepcopy(form),
        )

    async def submit(
        self,
        hotel: CanonicalHotel,
        room: Optional[RoomOffering],
        form: BookingFormState,
        user_id: str,
    ) -> BookingRecord:
        selected = hotel.room(form.room_type)
        if selected is None:
            raise RoomNotFoundError(form.room_type, hotel.hotel_id)
        room = room or selected

        attempts = 0
        while True:
            attempts += 1
            reference = self._reference_factory()
            record = self.build_record(hotel, room, form, user_id, booking_reference=reference)
            try:
                record_id = await self._repository.save_booking(record)
            except DuplicateReferenceError:
                if attempts >= self._max_reference_attempts:
                    raise
                logger.warning("Booking reference %s already taken; minting another", reference)
                continue
            logger.info(
                "Booking %s saved with id %s (hotel=%s, total=%s %s)",
                reference,
                record_id,
                hotel.hotel_id,
                record.total_price.amount,
                record.total_price.currency,
            )
            return replace(record, id=record_id)

    def wizard_callback(self, hotel: CanonicalHotel, user_id: str):
        """Adapt :meth:`submit` to the wizard's submission callback."""

        async def _submit(form: BookingFormState) -> BookingRecord:
            try:
                return await self.submit(hotel, None, form, user_id)
            except BookingError:
                raise
            except Exception as exc:
                raise SubmissionError(f"Failed to create booking: {exc}") from exc

        return _submit
