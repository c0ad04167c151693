"""Human-readable booking reference codes."""
from __future__ import annotations

import random
import re
import string
from datetime import datetime, timezone
from typing import Optional

DEFAULT_PREFIX = "ADMAS"
REFERENCE_PATTERN = re.compile(r"^[A-Z]+-\d{4}-[A-Z0-9]{3}\d{3}$")

_BASE36 = string.digits + string.ascii_uppercase


def generate_booking_reference(
    prefix: str = DEFAULT_PREFIX,
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Return ``{PREFIX}-{YY}{MM}-{3 base-36 chars}{3 digits}``.

    Uniqueness is probabilistic (36**3 * 1000 codes per month); callers that
    need a guarantee must check against storage.
    """
    code = prefix.strip().upper()
    if not code.isascii() or not code.isalpha():
        raise ValueError(f"Booking reference prefix must be alphabetic, got '{prefix}'")
    now = now or datetime.now(timezone.utc)
    rng = rng or random.SystemRandom()
    chars = "".join(rng.choice(_BASE36) for _ in range(3))
    sequence = rng.randrange(1000)
    return f"{code}-{now:%y%m}-{chars}{sequence:03d}"


def is_booking_reference(value: str) -> bool:
    return bool(REFERENCE_PATTERN.match(value))
