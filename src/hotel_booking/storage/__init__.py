"""Persistence backends."""

from .sqlite_store import BookingSummaryRow, SqliteStore

__all__ = [
    "BookingSummaryRow",
    "SqliteStore",
]
