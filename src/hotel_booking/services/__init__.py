"""Service clients for the hotel data source."""

from .hotel_client import HotelApiClient

__all__ = [
    "HotelApiClient",
]
