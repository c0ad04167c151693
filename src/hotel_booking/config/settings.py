"""Runtime configuration for the booking tools.

Relies on pydantic-settings so that environment variables (prefixed with ``BOOKING_``)
can override defaults.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hotel_booking.services.hotel_client import BASE_URL, DEFAULT_HOST
from hotel_booking.storage.sqlite_store import VALID_JOURNAL_MODES, VALID_SYNCHRONOUS_MODES


class Settings(BaseSettings):
    """Captures runtime configuration for hotel lookups and bookings."""

    api_base_url: str = Field(default=BASE_URL, description="Hotel data source base URL")
    api_key: Optional[str] = Field(default=None, description="RapidAPI key for the hotel data source")
    api_host: str = Field(default=DEFAULT_HOST, description="Value sent as x-rapidapi-host")
    api_timeout_s: float = Field(default=15.0, description="HTTP timeout in seconds")
    currency_code: str = Field(default="USD")
    language_code: str = Field(default="en-us")

    reference_prefix: str = Field(default="ADMAS", description="Prefix of minted booking references")
    reference_max_attempts: int = Field(
        default=3, description="Fresh references to try when a reference is already stored"
    )

    sqlite_path: Path = Field(default=Path("data/bookings.sqlite3"))
    sqlite_busy_timeout_ms: int = Field(default=2000)
    sqlite_journal_mode: Optional[str] = Field(default="wal")
    sqlite_synchronous: Optional[str] = Field(default="normal")

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    @field_validator("sqlite_path", "log_dir", mode="before")
    def _expand_path(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        return Path(value).expanduser()

    @field_validator("reference_prefix")
    def _validate_prefix(cls, value: str) -> str:
        prefix = value.strip().upper()
        if not prefix.isascii() or not prefix.isalpha():
            raise ValueError("reference_prefix must contain letters only")
        return prefix

    @field_validator("reference_max_attempts")
    def _validate_attempts(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("reference_max_attempts must be positive")
        return value

    @field_validator("sqlite_journal_mode", mode="before")
    def _validate_journal_mode(cls, value: str | None) -> Optional[str]:
        if value in (None, ""):
            return None
        mode = str(value).strip().lower()
        if mode not in VALID_JOURNAL_MODES:
            raise ValueError(f"sqlite_journal_mode must be one of {sorted(VALID_JOURNAL_MODES)}")
        return mode

    @field_validator("sqlite_synchronous", mode="before")
    def _validate_synchronous(cls, value: str | None) -> Optional[str]:
        if value in (None, ""):
            return None
        mode = str(value).strip().lower()
        if mode not in VALID_SYNCHRONOUS_MODES:
            raise ValueError(f"sqlite_synchronous must be one of {sorted(VALID_SYNCHRONOUS_MODES)}")
        return mode

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(parents=True, exist_ok=True)
