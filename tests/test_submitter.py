from __future__ import annotations

import pytest

from hotel_booking.booking import BookingSubmitter, seed_form_state
from hotel_booking.errors import DuplicateReferenceError, RoomNotFoundError, SubmissionError
from hotel_booking.hotels import normalize_hotel


class _DummyRepository:
    def __init__(self, taken: set[str] | None = None, error: Exception | None = None) -> None:
        self.saved = []
        self._taken = set(taken or ())
        self._error = error

    async def save_booking(self, record) -> str:
        if self._error is not None:
            raise self._error
        if record.booking_reference in self._taken:
            raise DuplicateReferenceError(record.booking_reference)
        self._taken.add(record.booking_reference)
        self.saved.append(record)
        return f"booking-{len(self.saved)}"


def _references(*values: str):
    pending = list(values)
    return lambda: pending.pop(0)


def _filled_form(hotel):
    form = seed_form_state(hotel, {"checkIn": "2025-06-10", "checkOut": "2025-06-13"})
    form.number_of_rooms = 2
    form.guests[0].full_name = "Ada Lovelace"
    form.contact_name = "Ada Lovelace"
    form.contact_email = "ada@example.com"
    form.contact_phone = "+44 20 7946 0000"
    return form


@pytest.mark.asyncio
async def test_submit_builds_and_saves_record(hotel_payload):
    hotel = normalize_hotel(hotel_payload)
    repository = _DummyRepository()
    submitter = BookingSubmitter(
        repository,
        reference_factory=_references("ADMAS-2506-ABC123"),
        clock=lambda: "2025-06-01T10:00:00.000000Z",
    )
    form = _filled_form(hotel)

    record = await submitter.submit(hotel, None, form, "user-1")

    assert record.id == "booking-1"
    assert record.booking_reference == "ADMAS-2506-ABC123"
    assert record.total_price.amount == pytest.approx(600.0)
    assert record.total_price.currency == "USD"
    assert record.status == "pending"
    assert record.type == "hotel"
    assert record.created_at == "2025-06-01T10:00:00.000000Z"
    assert record.room.id == "101"
    assert record.room.name == "Deluxe King"
    assert record.room.description == "Air conditioning, Minibar"
    assert record.room.price.per_night is True
    assert record.location.city == "Auckland"
    assert record.dates.number_of_nights == 3
    assert record.guests[0].full_name == "Ada Lovelace"

    document = record.to_dict()
    assert document["contact_email"] == "ada@example.com"
    assert document["number_of_rooms"] == 2
    assert document["hotel_id"] == "191605"


@pytest.mark.asyncio
async def test_record_is_a_snapshot_of_the_form(hotel_payload):
    hotel = normalize_hotel(hotel_payload)
    submitter = BookingSubmitter(_DummyRepository(), reference_factory=_references("ADMAS-2506-ABC123"))
    form = _filled_form(hotel)

    record = await submitter.submit(hotel, None, form, "user-1")
    form.guests[0].full_name = "Someone Else"
    form.contact_email = "other@example.com"

    assert record.guests[0].full_name == "Ada Lovelace"
    assert record.form.contact_email == "ada@example.com"


@pytest.mark.asyncio
async def test_submit_rejects_unknown_room(hotel_payload):
    hotel = normalize_hotel(hotel_payload)
    repository = _DummyRepository()
    submitter = BookingSubmitter(repository)
    form = _filled_form(hotel)
    form.room_type = "999"

    with pytest.raises(RoomNotFoundError):
        await submitter.submit(hotel, None, form, "user-1")
    assert repository.saved == []


@pytest.mark.asyncio
async def test_duplicate_reference_is_reminted(hotel_payload):
    hotel = normalize_hotel(hotel_payload)
    repository = _DummyRepository(taken={"ADMAS-2506-AAA111"})
    submitter = BookingSubmitter(
        repository,
        reference_factory=_references("ADMAS-2506-AAA111", "ADMAS-2506-BBB222"),
    )

    record = await submitter.submit(hotel, None, _filled_form(hotel), "user-1")

    assert record.booking_reference == "ADMAS-2506-BBB222"
    assert len(repository.saved) == 1


@pytest.mark.asyncio
async def test_duplicate_reference_gives_up_after_max_attempts(hotel_payload):
    hotel = normalize_hotel(hotel_payload)
    repository = _DummyRepository(taken={"ADMAS-2506-AAA111"})
    submitter = BookingSubmitter(
        repository,
        max_reference_attempts=2,
        reference_factory=lambda: "ADMAS-2506-AAA111",
    )

    with pytest.raises(DuplicateReferenceError):
        await submitter.submit(hotel, None, _filled_form(hotel), "user-1")


@pytest.mark.asyncio
async def test_wizard_callback_wraps_repository_failures(hotel_payload):
    hotel = normalize_hotel(hotel_payload)
    submitter = BookingSubmitter(_DummyRepository(error=OSError("disk full")))
    callback = submitter.wizard_callback(hotel, "user-1")

    with pytest.raises(SubmissionError) as excinfo:
        await callback(_filled_form(hotel))
    assert "disk full" in str(excinfo.value)
