"""
Core Utilities

Shared helpers used across the application.
"""
import re
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")

CENT = Decimal("0.01")


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Use this instead of datetime.utcnow() which returns naive datetime.
    """
    return datetime.now(timezone.utc)


def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim dashes."""
    return _SLUG_INVALID.sub("-", value.lower()).strip("-")


def to_money(amount: Union[int, float, str, Decimal, None]) -> Decimal:
    """Convert a price to a Decimal rounded to cents."""
    if amount is None:
        return Decimal("0.00")
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_float(amount: Decimal) -> float:
    return float(amount.quantize(CENT, rounding=ROUND_HALF_UP))
