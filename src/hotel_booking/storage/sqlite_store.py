"""SQLite-backed persistence for booking records and user profiles."""
from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

from hotel_booking.booking.autofill import UserProfile
from hotel_booking.booking.models import BOOKING_STATUSES, BookingRecord
from hotel_booking.errors import DuplicateReferenceError

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
SCHEMA_VERSION = 2

VALID_JOURNAL_MODES = frozenset({"delete", "truncate", "persist", "memory", "wal", "off"})
VALID_SYNCHRONOUS_MODES = frozenset({"off", "normal", "full", "extra"})


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime(ISO_FORMAT)


def _json_dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), default=str)


@dataclass(frozen=True)
class BookingSummaryRow:
    """Lightweight view of a booking row for listings."""

    id: str
    booking_reference: str
    user_id: str
    hotel_id: str
    hotel_name: str
    status: str
    check_in: str
    check_out: str
    total_amount: float
    currency: str
    created_at: str


logger = logging.getLogger(__name__)


class SqliteStore:
    """Thin async wrapper over sqlite3 acting as the booking repository.

    Booking references carry a unique index; inserting a taken reference
    raises :class:`DuplicateReferenceError`.
    """

    def __init__(
        self,
        db_path: Path,
        *,
        busy_timeout_ms: int = 2000,
        journal_mode: str | None = "wal",
        synchronous: str | None = "normal",
    ) -> None:
        self._path = db_path
        self._busy_timeout_ms = busy_timeout_ms
        self._journal_mode = self._normalize_journal_mode(journal_mode)
        self._synchronous = self._normalize_synchronous(synchronous)
        self._connection: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings) -> "SqliteStore":
        return cls(
            settings.sqlite_path,
            busy_timeout_ms=settings.sqlite_busy_timeout_ms,
            journal_mode=settings.sqlite_journal_mode,
            synchronous=settings.sqlite_synchronous,
        )

    # ------------------------------------------------------------------
    # lifecycle

    async def initialize(self) -> None:
        if self._connection is not None:
            return
        async with self._lock:
            if self._connection is None:
                conn = await asyncio.to_thread(self._open_connection)
                self._connection = conn

    async def close(self) -> None:
        if self._connection is None:
            return
        conn = self._connection
        self._connection = None
        await asyncio.to_thread(conn.close)

    async def __aenter__(self) -> "SqliteStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _open_connection(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(f"PRAGMA busy_timeout = {int(max(self._busy_timeout_ms, 0))};")
        if self._journal_mode:
            conn.execute(f"PRAGMA journal_mode = {self._journal_mode.upper()};")
        if self._synchronous:
            conn.execute(f"PRAGMA synchronous = {self._synchronous.upper()};")
        try:
            self._apply_migrations(conn)
        except sqlite3.OperationalError as exc:
            conn.close()
            logger.error(
                "SQLite migration failed (path=%s, timeout_ms=%s): %s",
                self._path,
                self._busy_timeout_ms,
                exc,
            )
            raise
        return conn

    @staticmethod
    def _normalize_journal_mode(value: str | None) -> str | None:
        if value is None:
            return None
        mode = value.strip().lower()
        if not mode:
            return None
        if mode not in VALID_JOURNAL_MODES:
            raise ValueError(
                f"Unsupported SQLite journal_mode '{value}'. Expected one of: {sorted(VALID_JOURNAL_MODES)}"
            )
        return mode

    @staticmethod
    def _normalize_synchronous(value: str | None) -> str | None:
        if value is None:
            return None
        mode = value.strip().lower()
        if not mode:
            return None
        if mode not in VALID_SYNCHRONOUS_MODES:
            raise ValueError(
                f"Unsupported SQLite synchronous mode '{value}'. Expected one of: {sorted(VALID_SYNCHRONOUS_MODES)}"
            )
        return mode

    def _apply_migrations(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
            """
        )
        current = self._get_schema_version(conn)
        if current >= SCHEMA_VERSION:
            return
        for version in range(current + 1, SCHEMA_VERSION + 1):
            script = MIGRATIONS.get(version)
            if not script:
                raise RuntimeError(f"Missing migration script for version {version}")
            conn.executescript(script)
            conn.execute(
                "INSERT INTO meta(key, value) VALUES('schema_version', ?)\n"
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (str(version),),
            )
        conn.commit()

    def _get_schema_version(self, conn: sqlite3.Connection) -> int:
        cursor = conn.execute("SELECT value FROM meta WHERE key='schema_version'")
        row = cursor.fetchone()
        if not row:
            return 0
        try:
            return int(row[0])
        except (TypeError, ValueError):
            return 0

    def _require_connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise RuntimeError("SQLite store has not been initialised")
        return self._connection

    @staticmethod
    def _row_to_summary(row: Sequence[Any]) -> BookingSummaryRow:
        return BookingSummaryRow(
            id=row[0],
            booking_reference=row[1],
            user_id=row[2],
            hotel_id=row[3],
            hotel_name=row[4],
            status=row[5],
            check_in=row[6],
            check_out=row[7],
            total_amount=float(row[8] or 0.0),
            currency=row[9],
            created_at=row[10],
        )

    # ------------------------------------------------------------------
    # bookings

    async def save_booking(self, record: BookingRecord) -> str:
        """Insert ``record`` and return the generated booking id."""

        def _op() -> str:
            conn = self._require_connection()
            booking_id = uuid.uuid4().hex
            now = _utc_now()
            document = record.to_dict()
            document["id"] = booking_id
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO bookings(
                            id,
                            booking_reference,
                            user_id,
                            hotel_id,
                            hotel_name,
                            room_id,
                            status,
                            check_in,
                            check_out,
                            nights,
                            rooms,
                            guests,
                            total_amount,
                            currency,
                            contact_email,
                            document_json,
                            created_at,
                            updated_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            booking_id,
                            record.booking_reference,
                            record.user_id,
                            record.hotel_id,
                            record.hotel_name,
                            record.room.id,
                            record.status,
                            record.dates.check_in,
                            record.dates.check_out,
                            record.dates.number_of_nights,
                            record.form.number_of_rooms,
                            record.form.number_of_guests,
                            record.total_price.amount,
                            record.total_price.currency,
                            record.form.contact_email,
                            _json_dumps(document),
                            record.created_at or now,
                            now,
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                if "booking_reference" in str(exc):
                    raise DuplicateReferenceError(record.booking_reference) from exc
                raise
            return booking_id

        async with self._lock:
            return await asyncio.to_thread(_op)

    async def fetch_booking(self, booking_id: str) -> Optional[BookingRecord]:
        def _op() -> Optional[BookingRecord]:
            conn = self._require_connection()
            row = conn.execute(
                "SELECT document_json, status FROM bookings WHERE id=?",
                (booking_id,),
            ).fetchone()
            if not row:
                return None
            document = json.loads(row[0])
            document["status"] = row[1]
            return BookingRecord.from_dict(document)

        async with self._lock:
            return await asyncio.to_thread(_op)

    async def fetch_booking_by_reference(self, reference: str) -> Optional[BookingRecord]:
        def _op() -> Optional[str]:
            conn = self._require_connection()
            row = conn.execute(
                "SELECT id FROM bookings WHERE booking_reference=?",
                (reference.upper(),),
            ).fetchone()
            return row[0] if row else None

        async with self._lock:
            booking_id = await asyncio.to_thread(_op)
        if booking_id is None:
            return None
        return await self.fetch_booking(booking_id)

    async def list_user_bookings(self, user_id: str) -> list[BookingSummaryRow]:
        def _op() -> list[BookingSummaryRow]:
            conn = self._require_connection()
            cursor = conn.execute(
                """
                SELECT id, booking_reference, user_id, hotel_id, hotel_name, status,
                       check_in, check_out, total_amount, currency, created_at
                FROM bookings
                WHERE user_id=?
                ORDER BY created_at DESC
                """,
                (user_id,),
            )
            return [self._row_to_summary(row) for row in cursor.fetchall()]

        async with self._lock:
            return await asyncio.to_thread(_op)

    async def update_booking_status(self, booking_id: str, status: str) -> bool:
        if status not in BOOKING_STATUSES:
            raise ValueError(f"Unsupported booking status '{status}'. Expected one of: {sorted(BOOKING_STATUSES)}")

        def _op() -> bool:
            conn = self._require_connection()
            with conn:
                cursor = conn.execute(
                    "UPDATE bookings SET status=?, updated_at=? WHERE id=?",
                    (status, _utc_now(), booking_id),
                )
            return cursor.rowcount > 0

        async with self._lock:
            return await asyncio.to_thread(_op)

    # ------------------------------------------------------------------
    # user profiles

    async def save_profile(self, user_id: str, profile: UserProfile) -> None:
        def _op() -> None:
            conn = self._require_connection()
            now = _utc_now()
            with conn:
                conn.execute(
                    """
                    INSERT INTO user_profiles(user_id, profile_json, created_at, updated_at)
                    VALUES(?, ?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        profile_json=excluded.profile_json,
                        updated_at=excluded.updated_at
                    """,
                    (user_id, _json_dumps(profile.to_dict()), now, now),
                )

        async with self._lock:
            await asyncio.to_thread(_op)

    async def fetch_profile(self, user_id: str) -> Optional[UserProfile]:
        def _op() -> Optional[UserProfile]:
            conn = self._require_connection()
            row = conn.execute(
                "SELECT profile_json FROM user_profiles WHERE user_id=?",
                (user_id,),
            ).fetchone()
            if not row:
                return None
            return UserProfile.from_dict(json.loads(row[0]))

        async with self._lock:
            return await asyncio.to_thread(_op)


MIGRATIONS: dict[int, str] = {
    1: """
        CREATE TABLE IF NOT EXISTS bookings (
            id TEXT PRIMARY KEY,
            booking_reference TEXT NOT NULL,
            user_id TEXT NOT NULL,
            hotel_id TEXT NOT NULL,
            hotel_name TEXT,
            room_id TEXT,
            status TEXT NOT NULL,
            check_in TEXT NOT NULL,
            check_out TEXT NOT NULL,
            nights INTEGER NOT NULL,
            rooms INTEGER NOT NULL,
            guests INTEGER NOT NULL,
            total_amount REAL NOT NULL,
            currency TEXT,
            contact_email TEXT,
            document_json TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        CREATE UNIQUE INDEX IF NOT EXISTS idx_bookings_reference ON bookings(booking_reference);
        CREATE INDEX IF NOT EXISTS idx_bookings_user ON bookings(user_id);
        CREATE INDEX IF NOT EXISTS idx_bookings_status ON bookings(status);
    """,
    2: """
        CREATE TABLE IF NOT EXISTS user_profiles (
            user_id TEXT PRIMARY KEY,
            profile_json TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
    """,
}
