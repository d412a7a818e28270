"""
Domain: Point-of-sale and membership transactions.

Rules implemented here:
- A Transaction is created at checkout and is immutable thereafter.
- amount is a monetary value >= 0 with two-decimal precision.
- A Transaction without a member_id is a guest transaction.
- items holds the cart lines charged at checkout, kept so a void can put
  inventory back on the shelf. Transactions recorded before items were
  stored have none.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from .money import require_money
from .time import require_utc_timestamp

GUEST_MEMBER_ID = "GUEST"

ITEM_KINDS = ("inventory", "membership")


class TransactionType(str, Enum):
    MEMBERSHIP = "Membership"
    POS_SALE = "POS Sale"
    MIXED_SALE = "Mixed Sale"


class PaymentMethod(str, Enum):
    CARD = "Card"
    CASH = "Cash"
    TRANSFER = "Transfer"


@dataclass(frozen=True, slots=True)
class TransactionItem:
    """One cart line as stored with its transaction."""
    source_id: str
    name: str
    kind: str  # "inventory" or "membership"
    quantity: int
    price: Decimal
    is_giveaway: bool = False

    def __post_init__(self) -> None:
        if self.kind not in ITEM_KINDS:
            raise ValueError(f"kind must be one of {ITEM_KINDS}, got {self.kind!r}")
        if self.quantity < 0:
            raise ValueError("quantity must be >= 0")
        require_money("price", self.price)

    @property
    def returns_to_stock(self) -> bool:
        """Paid inventory lines; giveaways never left the stock count."""

        return self.kind == "inventory" and self.quantity > 0 and not self.is_giveaway


@dataclass(frozen=True, slots=True)
class Transaction:
    transaction_id: str
    member_id: Optional[str]
    type: TransactionType
    amount: Decimal
    date: date
    payment_method: PaymentMethod
    member_name: Optional[str] = None
    item_description: Optional[str] = None
    created_at: Optional[datetime] = None
    items: Tuple[TransactionItem, ...] = ()

    def __post_init__(self) -> None:
        require_money("amount", self.amount)
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)

    @property
    def is_guest(self) -> bool:
        """Guest transactions carry no member reference."""

        return self.member_id is None

    def in_month_of(self, day: date) -> bool:
        return self.date.year == day.year and self.date.month == day.month
