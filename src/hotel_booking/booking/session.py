"""Page-level controller wiring hotel loading, autofill and the wizard."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx

from hotel_booking.errors import NormalizationError, SubmissionError
from hotel_booking.hotels import CanonicalHotel, normalize_hotel

from .autofill import AuthSession, ProfileAutofill, UserProfile
from .form import BookingFormState, seed_form_state
from .submitter import BookingSubmitter
from .wizard import BookingWizard

logger = logging.getLogger(__name__)


class HotelDataSource(Protocol):
    async def get_hotel_details(
        self,
        hotel_id: str,
        *,
        arrival_date: str,
        departure_date: str,
        adults: int = 1,
    ) -> Dict[str, Any]: ...


class ProfileSource(Protocol):
    async def fetch_profile(self, user_id: str) -> Optional[UserProfile]: ...


class BookingSession:
    """One hotel view: fetch, normalise, then drive a :class:`BookingWizard`.

    Results of suspended calls are dropped once :meth:`dispose` has been
    called; the underlying requests are not cancelled.
    """

    def __init__(
        self,
        source: HotelDataSource,
        submitter: BookingSubmitter,
        *,
        auth: Optional[AuthSession] = None,
        profiles: Optional[ProfileSource] = None,
        today: Optional[date] = None,
    ) -> None:
        self._source = source
        self._submitter = submitter
        self._auth = auth
        self._profiles = profiles
        self._today = today
        self.hotel: Optional[CanonicalHotel] = None
        self.wizard: Optional[BookingWizard] = None
        self.error: Optional[str] = None
        self.disposed = False

    def dispose(self) -> None:
        self.disposed = True

    async def open(self, hotel_id: str, params: Optional[Mapping[str, str]] = None) -> Optional[BookingWizard]:
        params = dict(params or {})
        today = self._today or date.today()
        arrival = params.get("checkIn") or today.isoformat()
        departure = params.get("checkOut") or (today + timedelta(days=1)).isoformat()
        try:
            payload = await self._source.get_hotel_details(
                hotel_id,
                arrival_date=arrival,
                departure_date=departure,
                adults=int(params.get("adults") or 1),
            )
        except (httpx.HTTPError, NormalizationError, ValueError):
            # ValueError covers JSON decode failures from file-backed sources.
            logger.exception("Error fetching hotel details for %s", hotel_id)
            return self._fail("Failed to load hotel details")
        if self.disposed:
            logger.debug("Session disposed while fetching hotel %s; ignoring result", hotel_id)
            return None
        try:
            hotel = normalize_hotel(payload)
        except NormalizationError:
            logger.exception("Hotel %s payload could not be normalised", hotel_id)
            return self._fail("Failed to load hotel details")

        profile = await self._load_profile()
        if self.disposed:
            logger.debug("Session disposed while loading profile; ignoring result")
            return None

        self.hotel = hotel
        form = seed_form_state(hotel, params, today=today)
        self.wizard = BookingWizard(
            hotel,
            form,
            self._submit_callback(hotel),
            autofill=ProfileAutofill(self._auth, profile) if self._auth else None,
        )
        self.wizard.mount()
        return self.wizard

    def _fail(self, message: str) -> None:
        if not self.disposed:
            self.error = message
        return None

    async def _load_profile(self) -> Optional[UserProfile]:
        if self._auth is None or self._profiles is None:
            return None
        try:
            return await self._profiles.fetch_profile(self._auth.user_id)
        except Exception:  # noqa: BLE001 - autofill is optional
            logger.exception("Error fetching user profile for %s", self._auth.user_id)
            return None

    def _submit_callback(self, hotel: CanonicalHotel):
        if self._auth is None:

            async def _anonymous(_form: BookingFormState) -> None:
                raise SubmissionError("Sign in to complete a booking")

            return _anonymous
        return self._submitter.wizard_callback(hotel, self._auth.user_id)
