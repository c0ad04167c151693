"""Booking wizard, reference minting and submission."""

from .autofill import AuthSession, AutofillProvider, ProfileAutofill, UserProfile
from .form import BookingFormState, GuestRecord, resize_guests, seed_form_state
from .models import BookingRecord, RoomSnapshot, StayDates
from .reference import REFERENCE_PATTERN, generate_booking_reference, is_booking_reference
from .session import BookingSession
from .submitter import BookingRepository, BookingSubmitter
from .wizard import AutofillState, BookingWizard, Step, WizardState

__all__ = [
    "AuthSession",
    "AutofillProvider",
    "AutofillState",
    "BookingFormState",
    "BookingRecord",
    "BookingRepository",
    "BookingSession",
    "BookingSubmitter",
    "BookingWizard",
    "GuestRecord",
    "ProfileAutofill",
    "REFERENCE_PATTERN",
    "RoomSnapshot",
    "StayDates",
    "Step",
    "UserProfile",
    "WizardState",
    "generate_booking_reference",
    "is_booking_reference",
    "resize_guests",
    "seed_form_state",
]
