"""
Domain: Retail inventory for the front desk.

Rules implemented here:
- stock is never negative; a sale larger than the stock on hand is rejected.
- An item is low on stock when 0 < stock < LOW_STOCK_THRESHOLD.
- An item with stock == 0 is out of stock; it is reported separately and is
  never part of the low-stock set.
- Items are immutable; restock and sale return new instances.

This module contains only pure domain entities: no I/O, no database.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from .money import require_money

LOW_STOCK_THRESHOLD: int = 10


class InventoryCategory(str, Enum):
    APPAREL = "Apparel"
    SUPPLEMENTS = "Supplements"
    EQUIPMENT = "Equipment"


@dataclass(frozen=True, slots=True)
class InventoryItem:
    """
    Immutable snapshot of a sellable item.

    Notes:
    - Stock changes are modeled by returning a new instance (restocked/sold).
    - Persisted stock decrements go through the database RPC; this type only
      mirrors the rule locally.
    """

    item_id: str
    name: str
    category: InventoryCategory
    stock: int
    price: Decimal
    last_restock: Optional[date] = None
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValueError("stock must be >= 0")
        require_money("price", self.price)

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock == 0

    @property
    def is_low_stock(self) -> bool:
        """Low stock excludes out-of-stock items."""

        return 0 < self.stock < LOW_STOCK_THRESHOLD

    def restocked(self, quantity: int, on: date) -> "InventoryItem":
        if quantity <= 0:
            raise ValueError("restock quantity must be > 0")
        return replace(self, stock=self.stock + quantity, last_restock=on)

    def sold(self, quantity: int) -> "InventoryItem":
        """
        Return a new InventoryItem with quantity removed from stock.

        Raises if the sale would drive stock negative.
        """

        if quantity <= 0:
            raise ValueError("sale quantity must be > 0")
        if quantity > self.stock:
            raise ValueError(
                f"Insufficient stock for {self.name}. Required: {quantity}, Available: {self.stock}"
            )
        return replace(self, stock=self.stock - quantity)
