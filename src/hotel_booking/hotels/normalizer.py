"""Utilities to transform raw hotel API payloads into canonical records."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from hotel_booking.errors import NormalizationError

from .models import (
    CanonicalHotel,
    HotelLocation,
    HotelProperty,
    HotelSummary,
    Money,
    RoomCapacity,
    RoomOffering,
    RoomPrice,
    TimeWindow,
)

logger = logging.getLogger(__name__)

# The details endpoint does not report check-in/out windows.
DEFAULT_CHECKIN = TimeWindow(from_time="14:00", until_time="23:00")
DEFAULT_CHECKOUT = TimeWindow(from_time="00:00", until_time="12:00")
DEFAULT_ROOM_NAME = "Standard Room"


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _require_data(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise NormalizationError("Hotel payload must be a mapping")
    if "status" in raw and not raw.get("status"):
        message = raw.get("message") or "upstream reported failure"
        raise NormalizationError(f"Hotel payload not usable: {message}")
    data = raw.get("data")
    if not data or not isinstance(data, Mapping):
        raise NormalizationError("No hotel data in response")
    return dict(data)


def _photo_urls(photos: Optional[Iterable[dict[str, Any]]]) -> Tuple[str, ...]:
    if not photos:
        return ()
    return tuple(photo["url_max1280"] for photo in photos if photo.get("url_max1280"))


def _facility_names(facilities: Optional[Iterable[dict[str, Any]]]) -> Tuple[str, ...]:
    if not facilities:
        return ()
    return tuple(item["name"] for item in facilities if item.get("name"))


def _parse_gross_amount(data: Dict[str, Any]) -> Optional[Money]:
    breakdown: Dict[str, Any] = data.get("composite_price_breakdown") or {}
    gross: Dict[str, Any] = breakdown.get("gross_amount") or {}
    value = _to_float(gross.get("value"))
    if value is None:
        return None
    return Money(amount=value, currency=gross.get("currency") or "")


def _build_room(room_id: str, room: Dict[str, Any], price: RoomPrice) -> RoomOffering:
    adults = _to_int(room.get("nr_adults"))
    children = _to_int(room.get("nr_children"))
    return RoomOffering(
        id=room_id,
        name=room.get("room_name") or DEFAULT_ROOM_NAME,
        price=price,
        capacity=RoomCapacity(
            adults=adults if adults is not None else 1,
            children=children if children is not None else 0,
        ),
        amenities=_facility_names(room.get("facilities")),
        images=_photo_urls(room.get("photos")),
        meal_plan=room.get("mealplan"),
        surface_m2=_to_float(room.get("room_surface_in_m2")),
        breakfast_included=bool(room.get("breakfast_included")),
    )


def _build_rooms(rooms_payload: Dict[str, Any], gross: Optional[Money]) -> Dict[str, RoomOffering]:
    rooms: Dict[str, RoomOffering] = {}
    if not rooms_payload:
        return rooms
    if gross is None:
        raise NormalizationError("Hotel payload has rooms but no gross amount")
    room_count = len(rooms_payload)
    # Aggregate stay price shared evenly across room types; kept unrounded.
    amount = gross.amount / room_count
    for room_id, room in rooms_payload.items():
        price = RoomPrice(amount=amount, currency=gross.currency, per_night=True)
        rooms[str(room_id)] = _build_room(str(room_id), room or {}, price)
    return rooms


def normalize_hotel(raw: Mapping[str, Any]) -> CanonicalHotel:
    """Map a raw hotel-details payload onto :class:`CanonicalHotel`.

    The function is pure: identical payloads produce equal results and the
    input is never mutated.
    """
    data = _require_data(raw)
    rooms_payload: Dict[str, Any] = data.get("rooms") or {}
    gross = _parse_gross_amount(data)
    rooms = _build_rooms(rooms_payload, gross)

    photo_urls: List[str] = []
    for room in rooms_payload.values():
        photo_urls.extend(_photo_urls((room or {}).get("photos")))

    facilities_block: Dict[str, Any] = data.get("facilities_block") or {}
    hotel_id = str(data.get("hotel_id") or "")

    prop = HotelProperty(
        id=hotel_id,
        name=data.get("hotel_name") or "",
        review_score=_to_float(data.get("review_score")),
        review_count=_to_int(data.get("review_nr")),
        review_score_word=data.get("reviewScoreWord"),
        property_class=_to_float(data.get("propertyClass")),
        latitude=_to_float(data.get("latitude")),
        longitude=_to_float(data.get("longitude")),
        currency=gross.currency if gross else None,
        location=HotelLocation(
            address=data.get("address") or "",
            city=data.get("city") or "",
            country=data.get("country_trans") or "",
        ),
        checkin=DEFAULT_CHECKIN,
        checkout=DEFAULT_CHECKOUT,
        photo_urls=tuple(photo_urls),
    )
    logger.debug("Normalised hotel %s with %d room types", hotel_id, len(rooms))
    return CanonicalHotel(
        hotel_id=hotel_id,
        property=prop,
        rooms=rooms,
        facilities=list(_facility_names(facilities_block.get("facilities"))),
        gross_amount=gross,
    )


def _build_summary(entry: Dict[str, Any]) -> Optional[HotelSummary]:
    prop: Dict[str, Any] = entry.get("property") or {}
    if not prop:
        return None
    breakdown: Dict[str, Any] = prop.get("priceBreakdown") or {}
    gross: Dict[str, Any] = breakdown.get("grossPrice") or {}
    gross_value = _to_float(gross.get("value"))
    location_raw: Dict[str, Any] = prop.get("location") or {}
    location = None
    if location_raw:
        location = HotelLocation(
            address=location_raw.get("address") or "",
            city=location_raw.get("city") or "",
            country=location_raw.get("country") or "",
        )
    hotel_id = entry.get("hotel_id", prop.get("id"))
    return HotelSummary(
        hotel_id=str(hotel_id) if hotel_id is not None else "",
        name=prop.get("name") or "",
        review_score=_to_float(prop.get("reviewScore")),
        review_count=_to_int(prop.get("reviewCount")),
        review_score_word=prop.get("reviewScoreWord"),
        property_class=_to_float(prop.get("propertyClass")),
        latitude=_to_float(prop.get("latitude")),
        longitude=_to_float(prop.get("longitude")),
        gross_price=(
            Money(amount=gross_value, currency=gross.get("currency") or prop.get("currency") or "")
            if gross_value is not None
            else None
        ),
        checkin_date=prop.get("checkinDate"),
        checkout_date=prop.get("checkoutDate"),
        location=location,
        photo_urls=list(prop.get("photoUrls") or []),
        benefit_badges=[
            badge.get("text") for badge in breakdown.get("benefitBadges", []) if badge.get("text")
        ],
    )


def normalize_search_results(raw: Mapping[str, Any]) -> List[HotelSummary]:
    """Map a destination search payload onto a list of :class:`HotelSummary`."""
    data = _require_data(raw)
    summaries: List[HotelSummary] = []
    for entry in data.get("hotels") or []:
        summary = _build_summary(entry or {})
        if summary is None:
            logger.debug("Skipping search entry without property block: %s", entry)
            continue
        summaries.append(summary)
    return summaries
