"""
Domain: Gym member records.

Rules implemented here:
- A Member is uniquely identified by member_id.
- expiration_date must not precede start_date.
- Status transitions (renewal, expiry) happen outside this module; a member
  only reports its stored status and, for reporting, an effective status that
  treats an Active member past its expiration date as Expired.

Dates are compared at day granularity. last_check_in is a UTC timestamp.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .time import DayLike, as_day, require_utc_timestamp


class MemberStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    PENDING = "Pending"


@dataclass(frozen=True, slots=True)
class Member:
    """
    Immutable snapshot of a member profile.

    Only the fields the dashboard and enrollment rules read are modeled;
    contact details are carried through for display.
    """

    member_id: str
    name: str
    status: MemberStatus
    start_date: date
    expiration_date: date
    last_check_in: Optional[datetime] = None
    total_check_ins: int = 0
    plan_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.member_id:
            raise ValueError("member_id is required")
        if self.expiration_date < self.start_date:
            raise ValueError("expiration_date must be >= start_date")
        if self.total_check_ins < 0:
            raise ValueError("total_check_ins must be >= 0")
        if self.last_check_in is not None:
            require_utc_timestamp("last_check_in", self.last_check_in)

    def is_active(self) -> bool:
        return self.status is MemberStatus.ACTIVE

    def days_until_expiration(self, as_of: DayLike) -> int:
        """Whole days from as_of to expiration_date (negative once expired)."""

        return (self.expiration_date - as_day(as_of)).days

    def effective_status(self, as_of: DayLike) -> MemberStatus:
        """
        Status as it should be reported on as_of.

        An Active member whose expiration date is not in the future counts as
        Expired, even if the stored status has not been updated yet.
        """

        if self.status is MemberStatus.ACTIVE and self.expiration_date <= as_day(as_of):
            return MemberStatus.EXPIRED
        return self.status

    def checked_in_on(self, day: DayLike) -> bool:
        if self.last_check_in is None:
            return False
        return self.last_check_in.date() == as_day(day)
