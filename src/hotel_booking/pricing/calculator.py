"""Stay length and price arithmetic."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Union

from hotel_booking.errors import InvalidDateRangeError

if TYPE_CHECKING:  # pragma: no cover
    from hotel_booking.booking.form import BookingFormState
    from hotel_booking.hotels.models import RoomOffering

DateLike = Union[date, datetime, str]

ONE_DAY = timedelta(days=1)


def as_date(value: DateLike) -> date:
    """Coerce ``value`` to a calendar date, dropping any time component."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError as exc:
            raise InvalidDateRangeError(f"Unrecognised date '{value}'") from exc
    raise InvalidDateRangeError(f"Unsupported date value {value!r}")


def compute_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Return the number of nights between two calendar dates.

    Raises :class:`InvalidDateRangeError` unless ``check_out`` is strictly
    after ``check_in``.
    """
    start = as_date(check_in)
    end = as_date(check_out)
    if end <= start:
        raise InvalidDateRangeError(
            f"Check-out {end.isoformat()} must be after check-in {start.isoformat()}",
            check_in=start,
            check_out=end,
        )
    return math.ceil((end - start) / ONE_DAY)


def compute_total(price_per_night: float, nights: int, rooms: int) -> float:
    """Total stay cost; ``nights`` and ``rooms`` are validated by the caller."""
    return price_per_night * nights * rooms


@dataclass(slots=True, frozen=True)
class PriceQuote:
    """Price breakdown shown on the review step and stored on the booking."""

    price_per_night: float
    nights: int
    rooms: int
    total: float
    currency: str

    def to_dict(self) -> dict[str, object]:
        return {
            "price_per_night": self.price_per_night,
            "nights": self.nights,
            "rooms": self.rooms,
            "total": self.total,
            "currency": self.currency,
        }


def quote_stay(room: "RoomOffering", form: "BookingFormState") -> PriceQuote:
    nights = compute_nights(form.check_in_date, form.check_out_date)
    total = compute_total(room.price.amount, nights, form.number_of_rooms)
    return PriceQuote(
        price_per_night=room.price.amount,
        nights=nights,
        rooms=form.number_of_rooms,
        total=total,
        currency=room.price.currency,
    )
