"""Canonical hotel models and normalisation helpers."""

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
from .normalizer import normalize_hotel, normalize_search_results

__all__ = [
    "CanonicalHotel",
    "HotelLocation",
    "HotelProperty",
    "HotelSummary",
    "Money",
    "RoomCapacity",
    "RoomOffering",
    "RoomPrice",
    "TimeWindow",
    "normalize_hotel",
    "normalize_search_results",
]
