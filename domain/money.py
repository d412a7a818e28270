"""
Domain: monetary amounts.

Amounts are `Decimal` values with at most two decimal places. Floats coming
from Supabase (numeric columns serialized as JSON numbers) are converted via
their string form so 39.99 stays 39.99.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Convert a numeric value to a Decimal without float artifacts."""

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a monetary amount")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid monetary amount: {value!r}") from None


def round_money(value: Decimal) -> Decimal:
    """Round half-up to cents."""

    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def require_money(name: str, value: Decimal) -> None:
    """
    Invariants:
    - Amount must be a Decimal.
    - Amount must be >= 0.
    - Amount must have at most two decimal places.
    """

    if not isinstance(value, Decimal):
        raise ValueError(f"{name} must be a Decimal")
    if value < 0:
        raise ValueError(f"{name} must be >= 0")
    if value != value.quantize(CENTS):
        raise ValueError(f"{name} must have at most two decimal places")
