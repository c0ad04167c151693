"""Dataclasses for the canonical hotel model produced by the normaliser."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(slots=True, frozen=True)
class Money:
    """An amount paired with its ISO currency code."""

    amount: float
    currency: str

    def to_dict(self) -> dict[str, object]:
        return {"amount": self.amount, "currency": self.currency}


@dataclass(slots=True, frozen=True)
class RoomPrice:
    """Derived nightly price of a room offering."""

    amount: float
    currency: str
    per_night: bool = True

    def to_dict(self) -> dict[str, object]:
        return {
            "amount": self.amount,
            "currency": self.currency,
            "per_night": self.per_night,
        }


@dataclass(slots=True, frozen=True)
class RoomCapacity:
    adults: int = 1
    children: int = 0

    def to_dict(self) -> dict[str, object]:
        return {"adults": self.adults, "children": self.children}


@dataclass(slots=True, frozen=True)
class RoomOffering:
    """One bookable room type with its derived per-night price."""

    id: str
    name: str
    price: RoomPrice
    capacity: RoomCapacity = field(default_factory=RoomCapacity)
    amenities: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()
    meal_plan: Optional[str] = None
    surface_m2: Optional[float] = None
    breakfast_included: bool = False
    available: bool = True

    @property
    def description(self) -> str:
        if not self.amenities:
            return "No description available"
        return ", ".join(self.amenities)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price.to_dict(),
            "capacity": self.capacity.to_dict(),
            "amenities": list(self.amenities),
            "images": list(self.images),
            "meal_plan": self.meal_plan,
            "surface_m2": self.surface_m2,
            "breakfast_included": self.breakfast_included,
            "available": self.available,
        }


@dataclass(slots=True, frozen=True)
class TimeWindow:
    from_time: str
    until_time: str

    def to_dict(self) -> dict[str, object]:
        return {"from_time": self.from_time, "until_time": self.until_time}


@dataclass(slots=True, frozen=True)
class HotelLocation:
    address: str = ""
    city: str = ""
    country: str = ""

    def to_dict(self) -> dict[str, object]:
        return {"address": self.address, "city": self.city, "country": self.country}


@dataclass(slots=True, frozen=True)
class HotelProperty:
    """Property-level metadata shown on the hotel page."""

    id: str
    name: str
    review_score: Optional[float]
    review_count: Optional[int]
    review_score_word: Optional[str]
    property_class: Optional[float]
    latitude: Optional[float]
    longitude: Optional[float]
    currency: Optional[str]
    location: HotelLocation
    checkin: TimeWindow
    checkout: TimeWindow
    photo_urls: Tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "review_score": self.review_score,
            "review_count": self.review_count,
            "review_score_word": self.review_score_word,
            "property_class": self.property_class,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "currency": self.currency,
            "location": self.location.to_dict(),
            "checkin": self.checkin.to_dict(),
            "checkout": self.checkout.to_dict(),
            "photo_urls": list(self.photo_urls),
        }


@dataclass(slots=True)
class CanonicalHotel:
    """Normalised hotel details, independent of the upstream API shape."""

    hotel_id: str
    property: HotelProperty
    rooms: Dict[str, RoomOffering] = field(default_factory=dict)
    facilities: List[str] = field(default_factory=list)
    gross_amount: Optional[Money] = None

    def room(self, room_id: str | None) -> Optional[RoomOffering]:
        if room_id is None:
            return None
        return self.rooms.get(room_id)

    def first_room_id(self) -> str:
        return next(iter(self.rooms), "")

    def to_dict(self) -> dict[str, object]:
        return {
            "hotel_id": self.hotel_id,
            "property": self.property.to_dict(),
            "rooms": {room_id: room.to_dict() for room_id, room in self.rooms.items()},
            "facilities": list(self.facilities),
            "gross_amount": self.gross_amount.to_dict() if self.gross_amount else None,
        }


@dataclass(slots=True)
class HotelSummary:
    """One hotel entry from a destination search."""

    hotel_id: str
    name: str
    review_score: Optional[float]
    review_count: Optional[int]
    review_score_word: Optional[str]
    property_class: Optional[float]
    latitude: Optional[float]
    longitude: Optional[float]
    gross_price: Optional[Money]
    checkin_date: Optional[str] = None
    checkout_date: Optional[str] = None
    location: Optional[HotelLocation] = None
    photo_urls: List[str] = field(default_factory=list)
    benefit_badges: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "hotel_id": self.hotel_id,
            "name": self.name,
            "review_score": self.review_score,
            "review_count": self.review_count,
            "review_score_word": self.review_score_word,
            "property_class": self.property_class,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "gross_price": self.gross_price.to_dict() if self.gross_price else None,
            "checkin_date": self.checkin_date,
            "checkout_date": self.checkout_date,
            "location": self.location.to_dict() if self.location else None,
            "photo_urls": list(self.photo_urls),
            "benefit_badges": list(self.benefit_badges),
        }

    @classmethod
    def from_iterable(cls, records: Iterable["HotelSummary"]) -> List[dict[str, object]]:
        return [record.to_dict() for record in records]
