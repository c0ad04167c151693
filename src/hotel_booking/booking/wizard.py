"""Three-step booking wizard over :class:`BookingFormState`.

Steps run ``GUEST_INFO -> CONTACT_DETAILS -> REVIEW``. Navigation is lax:
``next()`` never blocks on incomplete data, but ``submit()`` refuses to hand
the form over while any step still reports problems. Calling ``next()`` on
the review step submits instead of moving.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from hotel_booking.errors import BookingError, RoomNotFoundError
from hotel_booking.hotels.models import CanonicalHotel
from hotel_booking.pricing import PriceQuote, compute_nights, quote_stay

from .autofill import CONTACT_FIELDS, AutofillProvider
from .form import BookingFormState, GuestRecord, checkout_for_nights, resize_guests

logger = logging.getLogger(__name__)

SubmitCallback = Callable[[BookingFormState], Awaitable[Any]]

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

_FORM_FIELDS = frozenset(item.name for item in fields(BookingFormState))
_GUEST_FIELDS = frozenset(item.name for item in fields(GuestRecord))
_CONTACT_ATTRS = {
    "name": "contact_name",
    "email": "contact_email",
    "phone": "contact_phone",
}


class Step(IntEnum):
    GUEST_INFO = 0
    CONTACT_DETAILS = 1
    REVIEW = 2

    @property
    def label(self) -> str:
        return STEP_LABELS[self]

    @classmethod
    def last(cls) -> "Step":
        return max(cls)


STEP_LABELS: Dict[Step, str] = {
    Step.GUEST_INFO: "Guest Information",
    Step.CONTACT_DETAILS: "Contact Details",
    Step.REVIEW: "Review & Book",
}


def _validate_guest_info(hotel: CanonicalHotel, form: BookingFormState) -> List[str]:
    problems: List[str] = []
    if not form.room_type:
        problems.append("room type is required")
    elif hotel.room(form.room_type) is None:
        problems.append(f"room type '{form.room_type}' is not offered by this hotel")
    if form.number_of_rooms < 1:
        problems.append("number of rooms must be at least 1")
    if form.number_of_guests < 1:
        problems.append("number of guests must be at least 1")
    if form.number_of_nights < 1:
        problems.append("number of nights must be at least 1")
    if len(form.guests) != form.number_of_guests:
        problems.append(
            f"expected details for {form.number_of_guests} guest(s), got {len(form.guests)}"
        )
    for index, guest in enumerate(form.guests, start=1):
        if not guest.full_name.strip():
            problems.append(f"guest {index} full name is required")
    return problems


def _validate_contact(hotel: CanonicalHotel, form: BookingFormState) -> List[str]:
    problems: List[str] = []
    if not form.contact_name.strip():
        problems.append("contact name is required")
    if not form.contact_email.strip():
        problems.append("contact email is required")
    elif not EMAIL_PATTERN.match(form.contact_email.strip()):
        problems.append("contact email is not a valid address")
    if not form.contact_phone.strip():
        problems.append("contact phone is required")
    return problems


def _validate_review(hotel: CanonicalHotel, form: BookingFormState) -> List[str]:
    problems = _validate_guest_info(hotel, form) + _validate_contact(hotel, form)
    try:
        compute_nights(form.check_in_date, form.check_out_date)
    except BookingError as exc:
        problems.append(str(exc))
    return problems


def _render_guest_info(hotel: CanonicalHotel, form: BookingFormState) -> Dict[str, Any]:
    return {
        "rooms": [room.to_dict() for room in hotel.rooms.values()],
        "room_type": form.room_type,
        "number_of_rooms": form.number_of_rooms,
        "number_of_guests": form.number_of_guests,
        "number_of_nights": form.number_of_nights,
        "guests": [guest.to_dict() for guest in form.guests],
        "can_add_guest": len(form.guests) < form.number_of_guests,
    }


def _render_contact(hotel: CanonicalHotel, form: BookingFormState) -> Dict[str, Any]:
    return {
        "contact_name": form.contact_name,
        "contact_email": form.contact_email,
        "contact_phone": form.contact_phone,
        "special_requests": form.special_requests,
    }


def _render_review(hotel: CanonicalHotel, form: BookingFormState) -> Dict[str, Any]:
    room = hotel.room(form.room_type)
    quote: Optional[PriceQuote] = None
    if room is not None:
        try:
            quote = quote_stay(room, form)
        except BookingError:
            quote = None
    return {
        "hotel_name": hotel.property.name,
        "location": hotel.property.location.to_dict(),
        "room": room.to_dict() if room else None,
        "check_in_date": form.check_in_date,
        "check_out_date": form.check_out_date,
        "guests": [guest.to_dict() for guest in form.guests],
        "contact": _render_contact(hotel, form),
        "quote": quote.to_dict() if quote else None,
    }


StepHandler = Callable[[CanonicalHotel, BookingFormState], Any]


def step_handlers(step: Step) -> tuple[StepHandler, StepHandler]:
    """Return the ``(render, validate)`` pair for ``step``."""
    if step is Step.GUEST_INFO:
        return _render_guest_info, _validate_guest_info
    if step is Step.CONTACT_DETAILS:
        return _render_contact, _validate_contact
    if step is Step.REVIEW:
        return _render_review, _validate_review
    raise ValueError(f"Unhandled wizard step {step!r}")


@dataclass(slots=True)
class AutofillState:
    filled: bool = False


@dataclass(slots=True)
class WizardState:
    form: BookingFormState
    current_step: Step = Step.GUEST_INFO
    autofill: AutofillState = field(default_factory=AutofillState)
    submitting: bool = False
    error: Optional[str] = None
    result: Any = None


class BookingWizard:
    """Finite-state controller for one booking attempt."""

    def __init__(
        self,
        hotel: CanonicalHotel,
        form: BookingFormState,
        on_submit: SubmitCallback,
        *,
        autofill: Optional[AutofillProvider] = None,
    ) -> None:
        self.hotel = hotel
        self._on_submit = on_submit
        self._autofill = autofill
        self.state = WizardState(form=form)

    @property
    def form(self) -> BookingFormState:
        return self.state.form

    @property
    def current_step(self) -> Step:
        return self.state.current_step

    @property
    def is_last_step(self) -> bool:
        return self.state.current_step is Step.last()

    # ------------------------------------------------------------------
    # navigation

    async def next(self) -> Step:
        """Advance one step, or submit when already on the review step."""
        if self.is_last_step:
            await self.submit()
            return self.state.current_step
        self.state.current_step = Step(min(self.state.current_step + 1, Step.last()))
        return self.state.current_step

    def back(self) -> Step:
        self.state.current_step = Step(max(self.state.current_step - 1, 0))
        return self.state.current_step

    def render(self, step: Optional[Step] = None) -> Dict[str, Any]:
        render, _ = step_handlers(step if step is not None else self.state.current_step)
        return render(self.hotel, self.form)

    def validate(self, step: Optional[Step] = None) -> List[str]:
        _, validate = step_handlers(step if step is not None else self.state.current_step)
        return validate(self.hotel, self.form)

    def validate_all(self) -> Dict[Step, List[str]]:
        problems: Dict[Step, List[str]] = {}
        for step in Step:
            found = self.validate(step)
            if found:
                problems[step] = found
        return problems

    def review(self) -> PriceQuote:
        room = self.hotel.room(self.form.room_type)
        if room is None:
            raise RoomNotFoundError(self.form.room_type, self.hotel.hotel_id)
        return quote_stay(room, self.form)

    # ------------------------------------------------------------------
    # submission

    async def submit(self) -> Any:
        """Hand the form to the submission callback.

        Failures are recorded on ``state.error``; the step index and the form
        are left untouched so the user can edit and retry.
        """
        if self.state.submitting:
            logger.debug("Submission already in flight; ignoring duplicate request")
            return None
        problems = self.validate(Step.REVIEW)
        if problems:
            self.state.error = "; ".join(problems)
            logger.info("Booking form incomplete: %s", self.state.error)
            return None
        self.state.submitting = True
        self.state.error = None
        try:
            result = await self._on_submit(self.form)
        except Exception as exc:  # noqa: BLE001 - reported to the user, form kept for retry
            logger.exception("Error submitting booking form")
            self.state.error = str(exc) or exc.__class__.__name__
            return None
        finally:
            self.state.submitting = False
        self.state.result = result
        return result

    # ------------------------------------------------------------------
    # form mutation

    def update(self, **changes: Any) -> BookingFormState:
        unknown = set(changes) - _FORM_FIELDS
        if unknown:
            raise AttributeError(f"Unknown booking form field(s): {', '.join(sorted(unknown))}")
        for name in ("number_of_rooms", "number_of_guests", "number_of_nights"):
            if name in changes:
                changes[name] = int(changes[name])
                if changes[name] < 1:
                    raise ValueError(f"{name} must be at least 1")
        form = self.form
        if "guests" in changes:
            form.guests = [
                guest if isinstance(guest, GuestRecord) else GuestRecord.from_dict(guest)
                for guest in changes.pop("guests")
            ]
            if "number_of_guests" not in changes:
                form.guests = resize_guests(form.guests, form.number_of_guests)
        if "number_of_guests" in changes:
            count = changes.pop("number_of_guests")
            form.number_of_guests = count
            form.guests = resize_guests(form.guests, count)
        if "number_of_nights" in changes:
            nights = changes.pop("number_of_nights")
            form.number_of_nights = nights
            check_in = changes.get("check_in_date", form.check_in_date)
            form.check_out_date = checkout_for_nights(check_in, nights)
        for name, value in changes.items():
            setattr(form, name, value)
        return form

    def set_guest(self, index: int, **values: str) -> GuestRecord:
        unknown = set(values) - _GUEST_FIELDS
        if unknown:
            raise AttributeError(f"Unknown guest field(s): {', '.join(sorted(unknown))}")
        guest = self.form.guests[index]
        for name, value in values.items():
            setattr(guest, name, value)
        return guest

    @property
    def can_add_guest(self) -> bool:
        return len(self.form.guests) < self.form.number_of_guests

    def add_guest(self) -> bool:
        if not self.can_add_guest:
            return False
        self.form.guests.append(GuestRecord())
        return True

    # ------------------------------------------------------------------
    # autofill

    @property
    def autofill_available(self) -> bool:
        provider = self._autofill
        if provider is None:
            return False
        return bool(getattr(provider, "available", True))

    def mount(self) -> bool:
        """Run the one-shot autofill; returns True when it filled anything."""
        if self.state.autofill.filled or not self.autofill_available:
            return False
        guest_empty = not self.form.guests or not self.form.guests[0].full_name
        if not guest_empty and not self.form.contact_missing():
            return False
        changed = self._apply_autofill(only_empty=True)
        self.state.autofill.filled = True
        return changed

    def auto_fill(self) -> bool:
        """Manual trigger; always overwrites guest 0 and the contact fields."""
        if not self.autofill_available:
            return False
        return self._apply_autofill(only_empty=False)

    def _apply_autofill(self, *, only_empty: bool) -> bool:
        provider = self._autofill
        form = self.form
        changed = False

        fill_guest = getattr(provider, "auto_fill_guest", None)
        if fill_guest is not None:
            guest_empty = not form.guests or not form.guests[0].full_name
            if guest_empty or not only_empty:
                guest = fill_guest()
                if guest is not None:
                    if form.guests:
                        form.guests[0] = guest
                    else:
                        form.guests.append(guest)
                    changed = True

        fill_contact = getattr(provider, "auto_fill_contact", None)
        if fill_contact is not None:
            for contact_field in CONTACT_FIELDS:
                attr = _CONTACT_ATTRS[contact_field]
                if only_empty and getattr(form, attr):
                    continue
                value = fill_contact(contact_field)
                if only_empty and not value:
                    continue
                setattr(form, attr, value)
                changed = True
        return changed
