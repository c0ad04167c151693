"""Client for the RapidAPI booking.com hotel endpoints."""
from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Dict, Optional

import httpx

from hotel_booking.errors import NormalizationError

logger = logging.getLogger(__name__)

BASE_URL = "https://booking-com15.p.rapidapi.com/api/v1"
DEFAULT_HOST = "booking-com15.p.rapidapi.com"
SEARCH_PAGE_SIZE = 12


class HotelApiClient(AbstractAsyncContextManager["HotelApiClient"]):
    """Thin async wrapper around the hotel details and search endpoints.

    Responses are returned as decoded JSON; shaping them is the
    normaliser's job.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str = BASE_URL,
        api_host: str = DEFAULT_HOST,
        timeout: float = 15.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        default_headers = {
            "x-rapidapi-host": api_host,
            "Accept": "application/json",
            "User-Agent": "hotel-booking/0.1.0",
        }
        if api_key:
            default_headers["x-rapidapi-key"] = api_key
        if headers:
            default_headers.update(headers)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=default_headers,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, **kwargs: Any) -> "HotelApiClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.api_base_url,
            api_host=settings.api_host,
            timeout=settings.api_timeout_s,
            **kwargs,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aexit__(self, exc_type, exc, exc_tb) -> None:
        await self.aclose()

    async def _get(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        logger.debug("GET %s params=%s", path, params)
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise NormalizationError(f"{path} returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise NormalizationError(f"{path} returned {type(payload).__name__}, expected an object")
        return payload

    async def get_hotel_details(
        self,
        hotel_id: str,
        *,
        arrival_date: str,
        departure_date: str,
        adults: int = 1,
        room_qty: int = 1,
        currency_code: str = "USD",
        languagecode: str = "en-us",
    ) -> Dict[str, Any]:
        params = {
            "hotel_id": str(hotel_id),
            "arrival_date": arrival_date,
            "departure_date": departure_date,
            "adults": str(adults),
            "children_age": "",
            "room_qty": str(room_qty),
            "units": "metric",
            "temperature_unit": "c",
            "languagecode": languagecode,
            "currency_code": currency_code,
        }
        payload = await self._get("/hotels/getHotelDetails", params)
        return {
            "status": payload.get("status"),
            "message": payload.get("message"),
            "data": payload.get("data"),
        }

    async def search_hotels(
        self,
        dest_id: str,
        *,
        search_type: str,
        arrival_date: str,
        departure_date: str,
        adults: int = 1,
        room_qty: int = 1,
        page_number: int = 1,
        currency_code: str = "USD",
        languagecode: str = "en-us",
    ) -> Dict[str, Any]:
        page = max(page_number, 1)
        params = {
            "dest_id": dest_id,
            "search_type": search_type,
            "arrival_date": arrival_date,
            "departure_date": departure_date,
            "adults": str(adults),
            "room_qty": str(room_qty),
            "page_number": str(page),
            "limit": str(SEARCH_PAGE_SIZE),
            "offset": str((page - 1) * SEARCH_PAGE_SIZE),
            "maxResults": str(SEARCH_PAGE_SIZE),
            "units": "metric",
            "temperature_unit": "c",
            "languagecode": languagecode,
            "currency_code": currency_code,
        }
        logger.info("Searching hotels for destination %s (%s → %s)", dest_id, arrival_date, departure_date)
        return await self._get("/hotels/searchHotels", params)

    async def search_destination(self, query: str) -> Dict[str, Any]:
        return await self._get("/hotels/searchDestination", {"query": query})
