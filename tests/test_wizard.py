from __future__ import annotations

import asyncio

import pytest

from hotel_booking.booking import (
    AuthSession,
    BookingWizard,
    GuestRecord,
    ProfileAutofill,
    Step,
    UserProfile,
    seed_form_state,
)
from hotel_booking.errors import RoomNotFoundError, SubmissionError
from hotel_booking.hotels import normalize_hotel

_PARAMS = {"checkIn": "2025-06-10", "checkOut": "2025-06-13"}


class _DummySubmit:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self.forms = []
        self._error = error

    async def __call__(self, form):
        self.calls += 1
        self.forms.append(form)
        if self._error is not None:
            raise self._error
        return {"booking_reference": "ADMAS-2506-ABC123"}


def _wizard(hotel_payload, submit=None, autofill=None) -> BookingWizard:
    hotel = normalize_hotel(hotel_payload)
    form = seed_form_state(hotel, _PARAMS)
    return BookingWizard(hotel, form, submit or _DummySubmit(), autofill=autofill)


def _complete(wizard: BookingWizard) -> None:
    wizard.set_guest(0, full_name="Ada Lovelace")
    wizard.update(
        contact_name="Ada Lovelace",
        contact_email="ada@example.com",
        contact_phone="+44 20 7946 0000",
    )


def _autofill() -> ProfileAutofill:
    session = AuthSession(
        user_id="user-1",
        display_name="Grace Hopper",
        email="grace@example.com",
        phone_number="+1 555 0100",
    )
    profile = UserProfile(
        date_of_birth="1906-12-09",
        nationality="US",
        id_number="P1234567",
        id_expiry="2030-01-01",
        phone_number="+1 555 0199",
    )
    return ProfileAutofill(session, profile)


def test_seeded_form_uses_query_params_and_first_room(hotel_payload):
    wizard = _wizard(hotel_payload)

    assert wizard.current_step is Step.GUEST_INFO
    assert wizard.form.check_in_date == "2025-06-10"
    assert wizard.form.check_out_date == "2025-06-13"
    assert wizard.form.number_of_nights == 3
    assert wizard.form.room_type == "101"
    assert len(wizard.form.guests) == 1


@pytest.mark.asyncio
async def test_step_index_stays_within_bounds(hotel_payload):
    wizard = _wizard(hotel_payload)

    assert wizard.back() is Step.GUEST_INFO
    assert await wizard.next() is Step.CONTACT_DETAILS
    assert await wizard.next() is Step.REVIEW
    assert wizard.is_last_step
    assert await wizard.next() is Step.REVIEW
    assert wizard.back() is Step.CONTACT_DETAILS


@pytest.mark.asyncio
async def test_next_on_review_submits_complete_form(hotel_payload):
    submit = _DummySubmit()
    wizard = _wizard(hotel_payload, submit)
    _complete(wizard)

    await wizard.next()
    await wizard.next()
    await wizard.next()

    assert submit.calls == 1
    assert wizard.current_step is Step.REVIEW
    assert wizard.state.result == {"booking_reference": "ADMAS-2506-ABC123"}
    assert wizard.state.error is None


@pytest.mark.asyncio
async def test_incomplete_form_is_not_submitted(hotel_payload):
    submit = _DummySubmit()
    wizard = _wizard(hotel_payload, submit)

    result = await wizard.submit()

    assert result is None
    assert submit.calls == 0
    assert "guest 1 full name is required" in wizard.state.error
    assert "contact email is required" in wizard.state.error


def test_invalid_email_is_reported(hotel_payload):
    wizard = _wizard(hotel_payload)
    _complete(wizard)
    wizard.update(contact_email="not-an-email")

    assert wizard.validate(Step.CONTACT_DETAILS) == ["contact email is not a valid address"]


@pytest.mark.asyncio
async def test_submission_failure_keeps_step_and_form(hotel_payload):
    submit = _DummySubmit(SubmissionError("Failed to create booking: offline"))
    wizard = _wizard(hotel_payload, submit)
    _complete(wizard)
    await wizard.next()
    await wizard.next()
    before = wizard.form.to_dict()

    await wizard.next()

    assert submit.calls == 1
    assert wizard.current_step is Step.REVIEW
    assert wizard.state.error == "Failed to create booking: offline"
    assert wizard.state.submitting is False
    assert wizard.state.result is None
    assert wizard.form.to_dict() == before


@pytest.mark.asyncio
async def test_duplicate_submit_is_ignored_while_in_flight(hotel_payload):
    release = asyncio.Event()
    calls = []

    async def _slow_submit(form):
        calls.append(form)
        await release.wait()
        return "done"

    wizard = _wizard(hotel_payload, _slow_submit)
    _complete(wizard)

    first = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)
    assert wizard.state.submitting is True
    assert await wizard.submit() is None
    release.set()

    assert await first == "done"
    assert len(calls) == 1
    assert wizard.state.submitting is False


def test_guest_list_follows_guest_count(hotel_payload):
    wizard = _wizard(hotel_payload)
    wizard.set_guest(0, full_name="Ada Lovelace", nationality="GB")

    wizard.update(number_of_guests=3)
    assert [guest.full_name for guest in wizard.form.guests] == ["Ada Lovelace", "", ""]
    assert wizard.form.guests[0].nationality == "GB"

    wizard.set_guest(2, full_name="Charles Babbage")
    wizard.update(number_of_guests=1)
    assert len(wizard.form.guests) == 1
    assert wizard.form.guests[0].full_name == "Ada Lovelace"


def test_add_guest_respects_guest_count(hotel_payload):
    wizard = _wizard(hotel_payload)
    wizard.form.number_of_guests = 2

    assert wizard.can_add_guest
    assert wizard.add_guest() is True
    assert wizard.add_guest() is False
    assert len(wizard.form.guests) == 2


def test_updating_nights_moves_check_out(hotel_payload):
    wizard = _wizard(hotel_payload)

    wizard.update(number_of_nights=5)

    assert wizard.form.check_out_date == "2025-06-15"
    assert wizard.review().nights == 5


def test_update_rejects_unknown_fields_and_non_positive_counts(hotel_payload):
    wizard = _wizard(hotel_payload)

    with pytest.raises(AttributeError):
        wizard.update(hotel_name="Elsewhere")
    with pytest.raises(ValueError):
        wizard.update(number_of_rooms=0)


def test_review_quotes_selected_room(hotel_payload):
    wizard = _wizard(hotel_payload)
    wizard.update(number_of_rooms=2)

    quote = wizard.review()

    assert quote.price_per_night == pytest.approx(100.0)
    assert quote.total == pytest.approx(600.0)
    rendered = wizard.render(Step.REVIEW)
    assert rendered["hotel_name"] == "Harbour View Hotel"


def test_review_raises_for_unknown_room(hotel_payload):
    wizard = _wizard(hotel_payload)
    wizard.update(room_type="999")

    with pytest.raises(RoomNotFoundError):
        wizard.review()
    assert "room type '999' is not offered by this hotel" in wizard.validate(Step.GUEST_INFO)


def test_mount_autofills_once(hotel_payload):
    wizard = _wizard(hotel_payload, autofill=_autofill())

    assert wizard.mount() is True
    assert wizard.form.guests[0].full_name == "Grace Hopper"
    assert wizard.form.guests[0].id_number == "P1234567"
    assert wizard.form.contact_name == "Grace Hopper"
    assert wizard.form.contact_email == "grace@example.com"
    assert wizard.form.contact_phone == "+1 555 0199"
    assert wizard.state.autofill.filled is True

    wizard.set_guest(0, full_name="")
    wizard.update(contact_email="")
    assert wizard.mount() is False
    assert wizard.form.guests[0].full_name == ""
    assert wizard.form.contact_email == ""


def test_mount_keeps_values_already_entered(hotel_payload):
    wizard = _wizard(hotel_payload, autofill=_autofill())
    wizard.update(contact_email="me@example.org")

    wizard.mount()

    assert wizard.form.contact_email == "me@example.org"
    assert wizard.form.contact_name == "Grace Hopper"


def test_manual_autofill_overwrites(hotel_payload):
    wizard = _wizard(hotel_payload, autofill=_autofill())
    _complete(wizard)

    assert wizard.auto_fill() is True
    assert wizard.form.guests[0].full_name == "Grace Hopper"
    assert wizard.form.contact_email == "grace@example.com"


def test_autofill_unavailable_without_session(hotel_payload):
    wizard = _wizard(hotel_payload, autofill=ProfileAutofill(None))

    assert wizard.autofill_available is False
    assert wizard.mount() is False
    assert wizard.auto_fill() is False
    assert wizard.form.guests[0].full_name == ""


def test_replacing_guests_keeps_guest_count(hotel_payload):
    wizard = _wizard(hotel_payload)
    assert wizard.form.number_of_guests == 1

    wizard.update(guests=[GuestRecord("Ada"), GuestRecord("Grace"), GuestRecord("Alan")])

    assert [guest.full_name for guest in wizard.form.guests] == ["Ada"]

    wizard.update(number_of_guests=2, guests=[{"full_name": "Ada"}, {"full_name": "Grace"}, {"full_name": "Alan"}])
    assert wizard.form.number_of_guests == 2
    assert [guest.full_name for guest in wizard.form.guests] == ["Ada", "Grace"]


def test_count_fields_are_stored_as_integers(hotel_payload):
    wizard = _wizard(hotel_payload)

    wizard.update(number_of_rooms="2", number_of_guests="2", number_of_nights="3")

    assert wizard.form.number_of_rooms == 2
    assert wizard.form.number_of_guests == 2
    assert wizard.form.number_of_nights == 3
    assert wizard.review().total == pytest.approx(600.0)


def test_rejected_count_leaves_form_untouched(hotel_payload):
    wizard = _wizard(hotel_payload)
    before = wizard.form.to_dict()

    with pytest.raises(ValueError):
        wizard.update(guests=[GuestRecord("Ada")], number_of_rooms="0")

    assert wizard.form.to_dict() == before
