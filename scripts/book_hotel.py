"""Entry point for manual bookings driven by a TOML request file."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from hotel_booking.booking import BookingSession, BookingSubmitter, BookingWizard, Step
from hotel_booking.config.booking_request import BookingRequest
from hotel_booking.config.settings import Settings
from hotel_booking.core.logging import configure_logging
from hotel_booking.services import HotelApiClient
from hotel_booking.storage import SqliteStore

logger = logging.getLogger(__name__)


class _ApiSource:
    """Hotel details from the live API, using the configured currency and language."""

    def __init__(self, client: HotelApiClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def get_hotel_details(
        self,
        hotel_id: str,
        *,
        arrival_date: str,
        departure_date: str,
        adults: int = 1,
    ) -> Dict[str, Any]:
        return await self._client.get_hotel_details(
            hotel_id,
            arrival_date=arrival_date,
            departure_date=departure_date,
            adults=adults,
            currency_code=self._settings.currency_code,
            languagecode=self._settings.language_code,
        )


class _FileSource:
    """Hotel details read from a captured JSON payload."""

    def __init__(self, path: Path) -> None:
        self._path = path

    async def get_hotel_details(self, hotel_id: str, **_: Any) -> Dict[str, Any]:
        logger.info("Reading hotel %s details from %s", hotel_id, self._path)
        return json.loads(self._path.read_text())


def _apply_request(wizard: BookingWizard, request: BookingRequest) -> None:
    stay = request.stay
    guest_count = max(len(request.guests), stay.adults)
    changes: Dict[str, Any] = {
        "number_of_rooms": stay.rooms,
        "number_of_guests": guest_count,
    }
    if stay.room_type:
        changes["room_type"] = stay.room_type
    wizard.update(**changes)

    for index, guest in enumerate(request.guests):
        values = {key: value for key, value in guest.model_dump().items() if value}
        if values:
            wizard.set_guest(index, **values)

    contact = request.contact
    contact_changes = {
        "contact_name": contact.name,
        "contact_email": contact.email,
        "contact_phone": contact.phone,
        "special_requests": contact.special_requests,
    }
    contact_changes = {key: value for key, value in contact_changes.items() if value}
    if contact_changes:
        wizard.update(**contact_changes)


def _print_review(wizard: BookingWizard) -> None:
    review = wizard.render(Step.REVIEW)
    print(json.dumps(review, indent=2, default=str))


async def run(settings: Settings, request: BookingRequest, *, payload_path: Optional[Path], dry_run: bool) -> int:
    async with SqliteStore.from_settings(settings) as store:
        auth = request.user.session() if request.user else None
        if request.user:
            profile = request.user.profile()
            if profile is not None:
                await store.save_profile(request.user.user_id, profile)

        submitter = BookingSubmitter(
            store,
            reference_prefix=settings.reference_prefix,
            max_reference_attempts=settings.reference_max_attempts,
        )

        client: Optional[HotelApiClient] = None
        if payload_path is not None:
            source: Any = _FileSource(payload_path)
        else:
            client = HotelApiClient.from_settings(settings)
            source = _ApiSource(client, settings)

        session = BookingSession(source, submitter, auth=auth, profiles=store)
        try:
            wizard = await session.open(request.stay.hotel_id, request.query_params())
        finally:
            if client is not None:
                await client.aclose()
            session.dispose()

        if wizard is None:
            logger.error("%s (hotel %s)", session.error, request.stay.hotel_id)
            return 1

        _apply_request(wizard, request)

        while not wizard.is_last_step:
            problems = wizard.validate()
            if problems:
                logger.error("Step '%s' incomplete: %s", wizard.current_step.label, "; ".join(problems))
                return 1
            await wizard.next()

        _print_review(wizard)
        if dry_run:
            logger.info("Dry run requested; booking not submitted")
            return 0

        await wizard.next()
        if wizard.state.error:
            logger.error("Booking failed: %s", wizard.state.error)
            return 1
        record = wizard.state.result
        print(f"Booking confirmed: {record.booking_reference} (id {record.id})")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Book a hotel room from a TOML request file")
    parser.add_argument(
        "request",
        type=Path,
        help="Path to a TOML booking request",
    )
    parser.add_argument(
        "--payload",
        type=Path,
        default=None,
        help="Read hotel details from a captured JSON payload instead of calling the API",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the review summary without submitting",
    )
    parser.add_argument(
        "--override",
        action="append",
        metavar="KEY=VALUE",
        help="Override a Settings attribute (repeatable). Values accept JSON literals.",
    )
    return parser


def _decode_override(value: str) -> object:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _apply_overrides(settings: Settings, overrides: dict[str, object]) -> None:
    for key, raw in overrides.items():
        if not hasattr(settings, key):
            logger.warning("Ignoring unknown override '%s'", key)
            continue
        setattr(settings, key, raw)
        logger.info("Override: set %s=%r", key, raw)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    settings = Settings()

    request_path: Path = args.request
    if not request_path.exists():
        parser.error(f"Booking request {request_path} not found")
    request = BookingRequest.load(request_path)
    request.apply_to(settings, base_dir=request_path.parent)

    overrides: dict[str, object] = {}
    for entry in args.override or []:
        if "=" not in entry:
            parser.error(f"Override must be in KEY=VALUE form (got '{entry}')")
        key, value = entry.split("=", 1)
        overrides[key.strip()] = _decode_override(value.strip())
    if overrides:
        _apply_overrides(settings, overrides)

    configure_logging(settings.log_level, settings.log_dir)
    settings.ensure_directories()

    payload_path = args.payload or request.resolve_payload_path(request_path.parent)
    suffix = f" ({request.title})" if request.title else ""
    logger.info("Loaded booking request for hotel %s%s", request.stay.hotel_id, suffix)

    sys.exit(asyncio.run(run(settings, request, payload_path=payload_path, dry_run=args.dry_run)))


if __name__ == "__main__":
    main()
