from __future__ import annotations

import sqlite3

import pytest

from hotel_booking.booking import BookingSubmitter, BookingWizard, UserProfile, seed_form_state
from hotel_booking.errors import DuplicateReferenceError
from hotel_booking.hotels import normalize_hotel
from hotel_booking.storage import SqliteStore
from hotel_booking.storage.sqlite_store import SCHEMA_VERSION

_SYNCHRONOUS_MAP = {0: "off", 1: "normal", 2: "full", 3: "extra"}


async def _submit(store: SqliteStore, hotel_payload, reference: str):
    hotel = normalize_hotel(hotel_payload)
    form = seed_form_state(hotel, {"checkIn": "2025-06-10", "checkOut": "2025-06-13"})
    submitter = BookingSubmitter(store, reference_factory=lambda: reference)
    wizard = BookingWizard(hotel, form, submitter.wizard_callback(hotel, "user-1"))
    wizard.update(
        number_of_rooms=2,
        contact_name="Ada Lovelace",
        contact_email="ada@example.com",
        contact_phone="+44 20 7946 0000",
    )
    wizard.set_guest(0, full_name="Ada Lovelace")
    await wizard.next()
    await wizard.next()
    await wizard.next()
    return wizard


@pytest.mark.asyncio
async def test_sqlite_store_persists_booking_end_to_end(tmp_path, hotel_payload) -> None:
    store = SqliteStore(tmp_path / "bookings.sqlite")
    await store.initialize()

    wizard = await _submit(store, hotel_payload, "ADMAS-2506-ABC123")

    assert wizard.state.error is None
    record = wizard.state.result
    assert record.id

    stored = await store.fetch_booking(record.id)
    assert stored is not None
    assert stored.booking_reference == "ADMAS-2506-ABC123"
    assert stored.total_price.amount == pytest.approx(600.0)
    assert stored.dates.number_of_nights == 3
    assert stored.room.id == "101"
    assert stored.guests[0].full_name == "Ada Lovelace"
    assert stored.status == "pending"
    assert stored.type == "hotel"

    by_reference = await store.fetch_booking_by_reference("admas-2506-abc123")
    assert by_reference is not None
    assert by_reference.id == record.id

    rows = await store.list_user_bookings("user-1")
    assert [row.booking_reference for row in rows] == ["ADMAS-2506-ABC123"]
    assert rows[0].total_amount == pytest.approx(600.0)
    assert rows[0].hotel_name == "Harbour View Hotel"

    await store.close()


@pytest.mark.asyncio
async def test_sqlite_store_rejects_duplicate_reference(tmp_path, hotel_payload) -> None:
    async with SqliteStore(tmp_path / "bookings.sqlite") as store:
        first = await _submit(store, hotel_payload, "ADMAS-2506-ABC123")
        record = first.state.result

        with pytest.raises(DuplicateReferenceError):
            await store.save_booking(record)

        second = await _submit(store, hotel_payload, "ADMAS-2506-ABC123")
        assert second.state.result is None
        assert "already exists" in second.state.error
        assert len(await store.list_user_bookings("user-1")) == 1


@pytest.mark.asyncio
async def test_sqlite_store_updates_status(tmp_path, hotel_payload) -> None:
    async with SqliteStore(tmp_path / "bookings.sqlite") as store:
        wizard = await _submit(store, hotel_payload, "ADMAS-2506-ABC123")
        booking_id = wizard.state.result.id

        assert await store.update_booking_status(booking_id, "confirmed") is True
        assert await store.update_booking_status("missing", "confirmed") is False
        with pytest.raises(ValueError):
            await store.update_booking_status(booking_id, "teleported")

        stored = await store.fetch_booking(booking_id)
        assert stored is not None
        assert stored.status == "confirmed"


@pytest.mark.asyncio
async def test_sqlite_store_round_trips_profiles(tmp_path) -> None:
    async with SqliteStore(tmp_path / "bookings.sqlite") as store:
        assert await store.fetch_profile("user-1") is None

        await store.save_profile("user-1", UserProfile(nationality="NZ", phone_number="+64 9 000"))
        await store.save_profile("user-1", UserProfile(nationality="AU", phone_number="+61 2 000"))

        profile = await store.fetch_profile("user-1")
        assert profile == UserProfile(nationality="AU", phone_number="+61 2 000")


@pytest.mark.asyncio
async def test_sqlite_store_applies_pragmas_and_schema_version(tmp_path) -> None:
    db_path = tmp_path / "bookings.sqlite"
    store = SqliteStore(db_path, journal_mode="delete", synchronous="full")
    await store.initialize()
    await store.close()

    conn = sqlite3.connect(db_path)
    try:
        journal_mode = conn.execute("PRAGMA journal_mode;").fetchone()[0]
        version = conn.execute("SELECT value FROM meta WHERE key='schema_version'").fetchone()[0]
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    finally:
        conn.close()

    assert journal_mode.lower() == "delete"
    assert int(version) == SCHEMA_VERSION
    assert {"bookings", "user_profiles"} <= tables


@pytest.mark.asyncio
async def test_sqlite_store_uses_requested_synchronous_mode(tmp_path) -> None:
    store = SqliteStore(tmp_path / "bookings.sqlite", synchronous="full")
    await store.initialize()
    conn = store._require_connection()
    value = conn.execute("PRAGMA synchronous;").fetchone()[0]
    await store.close()

    assert _SYNCHRONOUS_MAP[int(value)] == "full"


def test_sqlite_store_rejects_unknown_journal_mode(tmp_path) -> None:
    with pytest.raises(ValueError):
        SqliteStore(tmp_path / "bookings.sqlite", journal_mode="sideways")
