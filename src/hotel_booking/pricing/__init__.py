"""Stay pricing helpers."""

from .calculator import PriceQuote, as_date, compute_nights, compute_total, quote_stay

__all__ = [
    "PriceQuote",
    "as_date",
    "compute_nights",
    "compute_total",
    "quote_stay",
]
