"""Finalised booking documents handed to persistence."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from hotel_booking.hotels.models import HotelLocation, Money, RoomPrice

from .form import BookingFormState, GuestRecord

STATUS_PENDING = "pending"
BOOKING_STATUSES = frozenset({"pending", "confirmed", "cancelled"})


@dataclass(slots=True, frozen=True)
class RoomSnapshot:
    """Copy of the booked room as it was priced at submission time."""

    id: str
    name: str
    description: str
    price: RoomPrice
    amenities: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "amenities": list(self.amenities),
            "price": self.price.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class StayDates:
    check_in: str
    check_out: str
    number_of_nights: int

    def to_dict(self) -> dict[str, object]:
        return {
            "check_in": self.check_in,
            "check_out": self.check_out,
            "number_of_nights": self.number_of_nights,
        }


@dataclass(slots=True, frozen=True)
class BookingRecord:
    """A submitted reservation; immutable once built."""

    hotel_id: str
    hotel_name: str
    booking_reference: str
    total_price: Money
    created_at: str
    user_id: str
    room: RoomSnapshot
    location: HotelLocation
    dates: StayDates
    form: BookingFormState
    status: str = STATUS_PENDING
    type: str = "hotel"
    id: Optional[str] = None

    @property
    def guests(self) -> List[GuestRecord]:
        return list(self.form.guests)

    def to_dict(self) -> dict[str, object]:
        document: dict[str, object] = dict(self.form.to_dict())
        document.update(
            {
                "id": self.id,
                "hotel_id": self.hotel_id,
                "hotel_name": self.hotel_name,
                "booking_reference": self.booking_reference,
                "total_price": self.total_price.to_dict(),
                "status": self.status,
                "created_at": self.created_at,
                "user_id": self.user_id,
                "type": self.type,
                "room": self.room.to_dict(),
                "location": self.location.to_dict(),
                "dates": self.dates.to_dict(),
            }
        )
        return document

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BookingRecord":
        room: Mapping[str, Any] = data.get("room") or {}
        room_price: Mapping[str, Any] = room.get("price") or {}
        total: Mapping[str, Any] = data.get("total_price") or {}
        location: Mapping[str, Any] = data.get("location") or {}
        dates: Mapping[str, Any] = data.get("dates") or {}
        form = BookingFormState(
            check_in_date=data.get("check_in_date") or "",
            check_out_date=data.get("check_out_date") or "",
            number_of_rooms=int(data.get("number_of_rooms") or 1),
            number_of_guests=int(data.get("number_of_guests") or 1),
            number_of_nights=int(data.get("number_of_nights") or 1),
            room_type=data.get("room_type") or "",
            guests=[GuestRecord.from_dict(guest) for guest in data.get("guests") or []],
            contact_name=data.get("contact_name") or "",
            contact_email=data.get("contact_email") or "",
            contact_phone=data.get("contact_phone") or "",
            special_requests=data.get("special_requests") or "",
        )
        return cls(
            id=data.get("id"),
            hotel_id=str(data.get("hotel_id") or ""),
            hotel_name=data.get("hotel_name") or "",
            booking_reference=data.get("booking_reference") or "",
            total_price=Money(
                amount=float(total.get("amount") or 0.0),
                currency=total.get("currency") or "",
            ),
            status=data.get("status") or STATUS_PENDING,
            created_at=data.get("created_at") or "",
            user_id=data.get("user_id") or "",
            type=data.get("type") or "hotel",
            room=RoomSnapshot(
                id=room.get("id") or "",
                name=room.get("name") or "",
                description=room.get("description") or "",
                amenities=tuple(room.get("amenities") or ()),
                price=RoomPrice(
                    amount=float(room_price.get("amount") or 0.0),
                    currency=room_price.get("currency") or "",
                    per_night=bool(room_price.get("per_night", True)),
                ),
            ),
            location=HotelLocation(
                address=location.get("address") or "",
                city=location.get("city") or "",
                country=location.get("country") or "",
            ),
            dates=StayDates(
                check_in=dates.get("check_in") or "",
                check_out=dates.get("check_out") or "",
                number_of_nights=int(dates.get("number_of_nights") or 0),
            ),
            form=form,
        )
