"""
Checkout service for point-of-sale carts.

Calculates the amount to charge for a cart at the front desk:
- Giveaway lines are free and excluded from every total
- A cart-wide discount percentage applies to the whole subtotal
- Sales tax applies only to the discounted inventory portion
- Manual price overrides are restricted by staff role
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Sequence

from domain.money import ZERO, require_money, round_money, to_money
from domain.role import StaffRole
from domain.transaction import TransactionType

logger = logging.getLogger(__name__)

TAX_RATE = Decimal("0.08")
# Allowed deviation between paid and catalog price before it counts as an override.
PRICE_TOLERANCE = Decimal("0.01")


class CheckoutAuthorizationError(Exception):
    """Raised when the staff role may not perform a checkout action."""
    pass


class PriceOverrideError(CheckoutAuthorizationError):
    """Raised when a role without override rights changes a catalog price."""
    pass


class CartLineKind(str, Enum):
    INVENTORY = "inventory"
    MEMBERSHIP = "membership"


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One line of a checkout cart.

    price is what the customer pays per unit; original_price is the catalog
    price. They differ only when staff applied a manual override.
    """
    source_id: str
    name: str
    kind: CartLineKind
    quantity: int
    price: Decimal
    original_price: Decimal
    is_giveaway: bool = False

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValueError("quantity must be > 0")
        require_money("price", self.price)
        require_money("original_price", self.original_price)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @property
    def has_price_override(self) -> bool:
        return not self.is_giveaway and abs(self.price - self.original_price) > PRICE_TOLERANCE


@dataclass(frozen=True, slots=True)
class CheckoutTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax: Decimal
    total: Decimal
    transaction_type: TransactionType
    item_description: str


def determine_transaction_type(lines: Sequence[CartLine]) -> TransactionType:
    has_membership = any(line.kind is CartLineKind.MEMBERSHIP for line in lines)
    has_inventory = any(line.kind is CartLineKind.INVENTORY for line in lines)

    if has_membership and has_inventory:
        return TransactionType.MIXED_SALE
    if has_membership:
        return TransactionType.MEMBERSHIP
    return TransactionType.POS_SALE


def calculate_checkout_totals(
    lines: Sequence[CartLine],
    discount_percent: Decimal | int | str,
    role: StaffRole,
) -> CheckoutTotals:
    """
    Calculate the amount to charge for a cart.

    Args:
        lines: Cart lines
        discount_percent: Cart-wide discount, 0 to 100
        role: Role of the staff member ringing up the sale

    Returns:
        CheckoutTotals with the final total rounded to cents

    Raises:
        ValueError: Empty cart, invalid discount, or paid price above catalog price
        CheckoutAuthorizationError: The role may not use the point of sale
        PriceOverrideError: A line has a manual override and the role may not override

    Example:
        totals = calculate_checkout_totals(lines, Decimal("10"), StaffRole.MANAGER)
        print(f"Charge {totals.total}")
    """

    if not role.can_use_pos():
        raise CheckoutAuthorizationError(f"Role '{role.value}' is not authorized to use the point of sale")

    if not lines:
        raise ValueError("Cart cannot be empty")

    discount_pct = to_money(discount_percent)
    if discount_pct < 0 or discount_pct > 100:
        raise ValueError("discount_percent must be between 0 and 100")

    for line in lines:
        if not line.is_giveaway and line.price > line.original_price + PRICE_TOLERANCE:
            raise ValueError(f"Price validation failed for {line.name}. Paid price too high.")

    if any(line.has_price_override for line in lines) and not role.can_override_prices():
        logger.warning(
            "Manual price override rejected for role %s",
            role.value,
            extra={"role": role.value, "items": [line.source_id for line in lines if line.has_price_override]},
        )
        raise PriceOverrideError(
            f"Role '{role.value}' is not authorized to apply manual price overrides"
        )

    payable: List[CartLine] = [line for line in lines if not line.is_giveaway]
    discount_factor = discount_pct / Decimal(100)

    subtotal = sum((line.line_total for line in payable), ZERO)
    discount_amount = subtotal * discount_factor

    taxable_subtotal = sum(
        (line.line_total for line in payable if line.kind is CartLineKind.INVENTORY), ZERO
    )
    tax = taxable_subtotal * (1 - discount_factor) * TAX_RATE

    total = round_money(subtotal - discount_amount + tax)

    return CheckoutTotals(
        subtotal=round_money(subtotal),
        discount_amount=round_money(discount_amount),
        tax=round_money(tax),
        total=total,
        transaction_type=determine_transaction_type(lines),
        item_description=", ".join(f"{line.name} x{line.quantity}" for line in lines),
    )


__all__ = [
    "TAX_RATE",
    "CheckoutAuthorizationError",
    "PriceOverrideError",
    "CartLineKind",
    "CartLine",
    "CheckoutTotals",
    "determine_transaction_type",
    "calculate_checkout_totals",
]
