"""Autofill capability backed by the signed-in user's stored profile."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional, Protocol

from .form import GuestRecord

logger = logging.getLogger(__name__)

ContactField = Literal["name", "email", "phone"]
CONTACT_FIELDS: tuple[ContactField, ...] = ("name", "email", "phone")


class AutofillProvider(Protocol):
    """Capability injected into the wizard; either hook may be absent."""

    def auto_fill_guest(self) -> Optional[GuestRecord]: ...

    def auto_fill_contact(self, field: ContactField) -> str: ...


@dataclass(slots=True, frozen=True)
class AuthSession:
    """Identity fields exposed by the auth provider for the current user."""

    user_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None


@dataclass(slots=True, frozen=True)
class UserProfile:
    """Optional travel-document details stored against a user."""

    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None
    id_number: Optional[str] = None
    id_expiry: Optional[str] = None
    phone_number: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "date_of_birth": self.date_of_birth,
            "nationality": self.nationality,
            "id_number": self.id_number,
            "id_expiry": self.id_expiry,
            "phone_number": self.phone_number,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProfile":
        return cls(
            date_of_birth=data.get("date_of_birth"),
            nationality=data.get("nationality"),
            id_number=data.get("id_number"),
            id_expiry=data.get("id_expiry"),
            phone_number=data.get("phone_number"),
        )


class ProfileAutofill:
    """Fills guest and contact fields from an auth session and profile.

    Both hooks return empty values until a profile has been loaded.
    """

    def __init__(self, session: Optional[AuthSession], profile: Optional[UserProfile] = None) -> None:
        self.session = session
        self.profile = profile

    @property
    def available(self) -> bool:
        return self.session is not None

    def auto_fill_guest(self) -> Optional[GuestRecord]:
        if self.session is None or self.profile is None:
            return None
        return GuestRecord(
            full_name=self.session.display_name or "",
            date_of_birth=self.profile.date_of_birth or "",
            nationality=self.profile.nationality or "",
            id_number=self.profile.id_number or "",
            id_expiry=self.profile.id_expiry or "",
        )

    def auto_fill_contact(self, field: ContactField) -> str:
        if self.session is None or self.profile is None:
            return ""
        if field == "name":
            return self.session.display_name or ""
        if field == "email":
            return self.session.email or ""
        if field == "phone":
            return self.profile.phone_number or self.session.phone_number or ""
        logger.debug("Unknown contact autofill field %s", field)
        return ""
