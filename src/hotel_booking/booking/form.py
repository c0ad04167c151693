"""In-progress booking form data collected by the wizard."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date, timedelta
from typing import Any, List, Mapping, Optional

from hotel_booking.errors import InvalidDateRangeError
from hotel_booking.hotels.models import CanonicalHotel
from hotel_booking.pricing import as_date, compute_nights


@dataclass(slots=True)
class GuestRecord:
    """Identity details for one occupant."""

    full_name: str = ""
    date_of_birth: str = ""
    nationality: str = ""
    id_number: str = ""
    id_expiry: str = ""

    def is_blank(self) -> bool:
        return not any(getattr(self, item.name) for item in fields(self))

    def to_dict(self) -> dict[str, object]:
        return {
            "full_name": self.full_name,
            "date_of_birth": self.date_of_birth,
            "nationality": self.nationality,
            "id_number": self.id_number,
            "id_expiry": self.id_expiry,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GuestRecord":
        return cls(
            full_name=str(data.get("full_name") or ""),
            date_of_birth=str(data.get("date_of_birth") or ""),
            nationality=str(data.get("nationality") or ""),
            id_number=str(data.get("id_number") or ""),
            id_expiry=str(data.get("id_expiry") or ""),
        )


def resize_guests(guests: List[GuestRecord], count: int) -> List[GuestRecord]:
    """Return ``guests`` truncated or padded with blank records to ``count``."""
    resized = [replace(guest) for guest in guests[: max(count, 0)]]
    while len(resized) < count:
        resized.append(GuestRecord())
    return resized


@dataclass(slots=True)
class BookingFormState:
    """Mutable form data owned by a single :class:`BookingWizard`."""

    check_in_date: str
    check_out_date: str
    number_of_rooms: int = 1
    number_of_guests: int = 1
    number_of_nights: int = 1
    room_type: str = ""
    guests: List[GuestRecord] = field(default_factory=lambda: [GuestRecord()])
    contact_name: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    special_requests: Optional[str] = ""

    def contact_missing(self) -> bool:
        return not (self.contact_name and self.contact_email and self.contact_phone)

    def to_dict(self) -> dict[str, object]:
        return {
            "check_in_date": self.check_in_date,
            "check_out_date": self.check_out_date,
            "number_of_rooms": self.number_of_rooms,
            "number_of_guests": self.number_of_guests,
            "number_of_nights": self.number_of_nights,
            "room_type": self.room_type,
            "guests": [guest.to_dict() for guest in self.guests],
            "contact_name": self.contact_name,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "special_requests": self.special_requests,
        }


def checkout_for_nights(check_in: str, nights: int) -> str:
    """ISO check-out date ``nights`` after ``check_in``."""
    return (as_date(check_in) + timedelta(days=nights)).isoformat()


def _positive_int(value: object, default: int) -> int:
    try:
        number = int(str(value))
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def seed_form_state(
    hotel: CanonicalHotel,
    params: Optional[Mapping[str, str]] = None,
    *,
    today: Optional[date] = None,
) -> BookingFormState:
    """Build the initial form from URL-style query parameters.

    Recognised keys are ``checkIn``, ``checkOut`` and ``adults``. Missing
    dates default to today and tomorrow.
    """
    params = params or {}
    today = today or date.today()
    check_in = params.get("checkIn") or today.isoformat()
    check_out = params.get("checkOut") or (today + timedelta(days=1)).isoformat()
    try:
        nights = compute_nights(check_in, check_out)
    except InvalidDateRangeError:
        nights = 1
    return BookingFormState(
        check_in_date=check_in,
        check_out_date=check_out,
        number_of_rooms=1,
        number_of_guests=_positive_int(params.get("adults"), 1),
        number_of_nights=nights,
        room_type=hotel.first_room_id(),
        guests=[GuestRecord()],
    )
