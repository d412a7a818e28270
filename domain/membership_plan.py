"""
Domain: Membership plans and renewal date arithmetic.

Rules implemented here:
- duration_days > 0, price >= 0.
- Renewal: if the current membership is still running (expiration strictly
  after as_of) the new period starts the day after it ends; otherwise it
  starts on as_of. The new expiration is start + duration_days.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from .money import require_money
from .time import DayLike, as_day


@dataclass(frozen=True, slots=True)
class MembershipPlan:
    plan_id: str
    name: str
    duration_days: int
    price: Decimal
    description: Optional[str] = None
    giveaway_item_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.duration_days <= 0:
            raise ValueError("duration_days must be > 0")
        require_money("price", self.price)


@dataclass(frozen=True, slots=True)
class RenewalDates:
    start_date: date
    expiration_date: date


def calculate_renewal_dates(
    current_expiration: Optional[date],
    duration_days: int,
    as_of: DayLike,
) -> RenewalDates:
    """
    Compute the start and expiration dates for a renewal.

    Example:
        calculate_renewal_dates(date(2024, 10, 31), 30, date(2024, 10, 22))
        # RenewalDates(start_date=2024-11-01, expiration_date=2024-12-01)
    """

    if duration_days <= 0:
        raise ValueError("duration_days must be > 0")

    today = as_day(as_of)
    start = today
    if current_expiration is not None and current_expiration > today:
        start = current_expiration + timedelta(days=1)

    return RenewalDates(start_date=start, expiration_date=start + timedelta(days=duration_days))
