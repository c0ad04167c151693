"""TOML booking request loader for manual runs."""
from __future__ import annotations

import re
import tomllib
from datetime import date, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from hotel_booking.booking.autofill import AuthSession, UserProfile
from hotel_booking.booking.form import GuestRecord

if TYPE_CHECKING:  # pragma: no cover
    from hotel_booking.config.settings import Settings

_RELATIVE_CHECK_IN = re.compile(r"^(?P<count>\d+)\s*(?P<unit>[dDwW])$")


class StaySection(BaseModel):
    """Which hotel, when, and for how many."""

    hotel_id: str
    check_in: str = Field(description="ISO 8601 date or relative offset such as '+14d'")
    check_out: Optional[str] = None
    nights: Optional[int] = Field(default=None, ge=1)
    adults: int = Field(default=1, ge=1)
    rooms: int = Field(default=1, ge=1)
    room_type: Optional[str] = None

    @field_validator("hotel_id", mode="before")
    @classmethod
    def _coerce_hotel_id(cls, value: object) -> str:
        return str(value).strip()

    @model_validator(mode="after")
    def _validate_length(self) -> "StaySection":
        if self.check_out is None and self.nights is None:
            raise ValueError("stay requires either 'check_out' or 'nights'")
        return self

    def check_in_date(self) -> date:
        return _parse_check_in(self.check_in)

    def check_out_date(self) -> date:
        if self.check_out:
            return _parse_check_in(self.check_out)
        return self.check_in_date() + timedelta(days=self.nights or 1)


class GuestSection(BaseModel):
    full_name: str = ""
    date_of_birth: str = ""
    nationality: str = ""
    id_number: str = ""
    id_expiry: str = ""

    def to_record(self) -> GuestRecord:
        return GuestRecord(**self.model_dump())


class ContactSection(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    special_requests: str = ""


class UserSection(BaseModel):
    """Signed-in user on whose behalf the booking is made."""

    user_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None
    id_number: Optional[str] = None
    id_expiry: Optional[str] = None

    def session(self) -> AuthSession:
        return AuthSession(
            user_id=self.user_id,
            display_name=self.display_name,
            email=self.email,
            phone_number=self.phone_number,
        )

    def profile(self) -> Optional[UserProfile]:
        profile = UserProfile(
            date_of_birth=self.date_of_birth,
            nationality=self.nationality,
            id_number=self.id_number,
            id_expiry=self.id_expiry,
            phone_number=self.phone_number,
        )
        if not any(profile.to_dict().values()):
            return None
        return profile


class StorageSection(BaseModel):
    sqlite_path: Optional[str] = None
    sqlite_journal_mode: Optional[str] = None
    sqlite_synchronous: Optional[str] = None


class BookingRequest(BaseModel):
    """Top-level booking request decoded from TOML."""

    title: Optional[str] = None
    payload_path: Optional[str] = Field(
        default=None, description="Read hotel details from this JSON file instead of the API"
    )
    stay: StaySection
    guests: list[GuestSection] = Field(default_factory=list)
    contact: ContactSection = Field(default_factory=ContactSection)
    user: Optional[UserSection] = None
    storage: Optional[StorageSection] = None

    @classmethod
    def load(cls, path: Path) -> "BookingRequest":
        """Load a booking request from a TOML file."""
        data = tomllib.loads(path.read_text())
        return cls.model_validate(data)

    def query_params(self) -> dict[str, str]:
        """URL-style defaults used to seed the booking form."""
        return {
            "checkIn": self.stay.check_in_date().isoformat(),
            "checkOut": self.stay.check_out_date().isoformat(),
            "adults": str(self.stay.adults),
        }

    def resolve_payload_path(self, base_dir: Optional[Path]) -> Optional[Path]:
        if not self.payload_path:
            return None
        return _resolve_path(self.payload_path, base_dir)

    def apply_to(self, settings: "Settings", *, base_dir: Optional[Path] = None) -> None:
        """Apply storage overrides to an existing Settings instance."""
        storage = self.storage
        if not storage:
            return
        if storage.sqlite_path:
            settings.sqlite_path = _resolve_path(storage.sqlite_path, base_dir)
        if storage.sqlite_journal_mode is not None:
            settings.sqlite_journal_mode = storage.sqlite_journal_mode
        if storage.sqlite_synchronous is not None:
            settings.sqlite_synchronous = storage.sqlite_synchronous


def _resolve_path(raw: str, base_dir: Optional[Path]) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute() and base_dir:
        return (base_dir / path).resolve()
    return path


def _parse_check_in(value: str) -> date:
    text = value.strip()
    lowered = text.lower()
    if lowered == "today":
        return date.today()
    if lowered.startswith("today+"):
        lowered = f"+{lowered.split('+', 1)[1]}"
    if lowered.startswith("+"):
        match = _RELATIVE_CHECK_IN.match(lowered[1:])
        if not match:
            raise ValueError(f"Unsupported relative date '{value}'. Use forms like '+14d' or '+2w'.")
        count = int(match.group("count"))
        if match.group("unit").lower() == "w":
            return date.today() + timedelta(weeks=count)
        return date.today() + timedelta(days=count)
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(
            f"Invalid date '{value}'. Provide ISO format (YYYY-MM-DD) or a relative offset."
        ) from exc


__all__ = ["BookingRequest"]
