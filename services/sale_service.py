"""
Sale service for completing front-desk checkouts.

Handles:
- Re-validating cart prices and stock against the catalog in Supabase
- Pricing the cart with checkout_service (role checks included)
- Stock decrements through the decrement_inventory_stock() PostgreSQL function
- Membership renewal for the selected member
- Recording the final transaction, with its cart lines
- Voiding a recorded transaction: stock goes back on the shelf, membership
  changes are flagged for staff to reverse by hand
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Optional, Sequence

from domain.inventory import InventoryItem
from domain.member import Member, MemberStatus
from domain.membership_plan import MembershipPlan, calculate_renewal_dates
from domain.role import StaffRole
from domain.time import utc_today
from domain.transaction import PaymentMethod, Transaction, TransactionItem, TransactionType
from repositories.inventory_repository import (
    get_inventory_item,
    reduce_inventory_stock,
    restore_inventory_stock,
)
from repositories.member_repository import get_member_by_code, update_membership
from repositories.plan_repository import get_plan_by_id
from repositories.transaction_repository import delete_transaction, get_transaction, record_transaction
from services.checkout_service import (
    PRICE_TOLERANCE,
    CartLine,
    CartLineKind,
    CheckoutAuthorizationError,
    CheckoutTotals,
    calculate_checkout_totals,
)

logger = logging.getLogger(__name__)

GUEST_NAME = "Guest Customer"


class CheckoutError(str, Enum):
    INVALID_CART = "INVALID_CART"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    CATALOG_MISMATCH = "CATALOG_MISMATCH"
    WRITE_FAILED = "WRITE_FAILED"


@dataclass(frozen=True, slots=True)
class CheckoutRequest:
    """
    A cart ready to be charged.

    member_code: Member buying (None for a guest sale)
    is_initial_registration: The membership in the cart was already set up
        when the member was created, so no renewal is applied
    """
    lines: Sequence[CartLine]
    payment_method: PaymentMethod
    role: StaffRole
    discount_percent: Decimal = Decimal("0")
    member_code: Optional[str] = None
    is_initial_registration: bool = False


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    """
    Result of a checkout attempt.

    success: True if the transaction was recorded
    transaction: The recorded Transaction (None on failure)
    totals: Amounts charged (None if validation failed before pricing)
    error_code: Failure reason (None on success)
    error_message: Human-readable failure reason
    """
    success: bool
    transaction: Optional[Transaction]
    totals: Optional[CheckoutTotals]
    error_code: Optional[CheckoutError] = None
    error_message: Optional[str] = None

    @staticmethod
    def failed(
        error_code: CheckoutError, message: str, totals: Optional[CheckoutTotals] = None
    ) -> "CheckoutResult":
        return CheckoutResult(
            success=False, transaction=None, totals=totals, error_code=error_code, error_message=message
        )


def _validate_against_catalog(lines: Sequence[CartLine]) -> tuple[Dict[str, InventoryItem], Dict[str, MembershipPlan]]:
    """
    Check every paid line against the stored catalog.

    Giveaway lines are not looked up. Raises ValueError with a message that
    can be shown at the register.
    """

    inventory: Dict[str, InventoryItem] = {}
    plans: Dict[str, MembershipPlan] = {}

    for line in lines:
        if line.is_giveaway:
            continue

        if line.kind is CartLineKind.INVENTORY:
            item = inventory.get(line.source_id) or get_inventory_item(line.source_id)
            if item is None:
                raise ValueError(f"Item ID {line.source_id} not found in database.")
            inventory[line.source_id] = item
            catalog_price = item.price
        else:
            plan = plans.get(line.source_id) or get_plan_by_id(line.source_id)
            if plan is None:
                raise ValueError(f"Item ID {line.source_id} not found in database.")
            plans[line.source_id] = plan
            catalog_price = plan.price

        if abs(line.original_price - catalog_price) > PRICE_TOLERANCE:
            logger.warning(
                "Original price mismatch for %s: cart %s, catalog %s",
                line.name,
                line.original_price,
                catalog_price,
            )
            raise ValueError(f"Price validation failed for {line.name}. Original price mismatch.")

        if line.kind is CartLineKind.INVENTORY:
            # Raises "Insufficient stock for ..." when the shelf cannot cover it.
            inventory[line.source_id].sold(line.quantity)

    return inventory, plans


def _renew_membership(member: Member, plans: Sequence[MembershipPlan], as_of: date) -> None:
    """Apply each purchased plan in cart order, extending from the previous expiration."""

    expiration = member.expiration_date
    start: Optional[date] = None
    for plan in plans:
        dates = calculate_renewal_dates(expiration, plan.duration_days, as_of)
        if start is None:
            start = dates.start_date
        expiration = dates.expiration_date

    update_membership(member.member_id, MemberStatus.ACTIVE, plans[-1].name, start, expiration)
    logger.info("Renewed member %s on %s until %s", member.member_id, plans[-1].name, expiration.isoformat())


def _stored_items(lines: Sequence[CartLine]) -> tuple[TransactionItem, ...]:
    return tuple(
        TransactionItem(
            source_id=line.source_id,
            name=line.name,
            kind=line.kind.value,
            quantity=line.quantity,
            price=line.price,
            is_giveaway=line.is_giveaway,
        )
        for line in lines
    )


def execute_checkout(request: CheckoutRequest, clock: Callable[[], date] = utc_today) -> CheckoutResult:
    """
    Charge a cart and record the sale.

    Process:
    1. Price the cart (role checks, discount, tax)
    2. Look up the member, if any
    3. Re-validate prices and stock against the catalog
    4. Decrement stock for each paid inventory line
    5. Renew the member's plan for each membership line
    6. Record the transaction

    Steps 4-6 are separate writes; a failure part-way is logged and reported
    but earlier writes are not rolled back.

    Args:
        request: CheckoutRequest with cart, payment method and staff role
        clock: Returns the transaction day (UTC today by default)

    Returns:
        CheckoutResult with the recorded transaction or the failure reason

    Raises:
        CheckoutAuthorizationError: The role may not use the register or
            may not override prices

    Example:
        result = execute_checkout(CheckoutRequest(lines, PaymentMethod.CARD, StaffRole.CASHIER))
        if not result.success:
            print(result.error_message)
    """

    # 1. Price the cart (authorization errors propagate)
    try:
        totals = calculate_checkout_totals(request.lines, request.discount_percent, request.role)
    except ValueError as e:
        return CheckoutResult.failed(CheckoutError.INVALID_CART, str(e))

    # 2. Member
    member: Optional[Member] = None
    if request.member_code:
        member = get_member_by_code(request.member_code)
        if member is None:
            return CheckoutResult.failed(CheckoutError.MEMBER_NOT_FOUND, "Selected member not found.", totals)

    # 3. Catalog validation
    try:
        _, plans = _validate_against_catalog(request.lines)
    except ValueError as e:
        return CheckoutResult.failed(CheckoutError.CATALOG_MISMATCH, str(e), totals)

    today = clock()

    # 4. Stock
    for line in request.lines:
        if line.kind is not CartLineKind.INVENTORY or line.is_giveaway:
            continue
        try:
            reduce_inventory_stock(line.source_id, line.quantity)
        except RuntimeError:
            logger.exception("Stock update failed for %s", line.source_id)
            return CheckoutResult.failed(CheckoutError.WRITE_FAILED, f"Failed to update stock for {line.name}.", totals)

    # 5. Renewal
    if member is not None and not request.is_initial_registration:
        purchased_plans = [
            plans[line.source_id]
            for line in request.lines
            if line.kind is CartLineKind.MEMBERSHIP and not line.is_giveaway
            for _ in range(line.quantity)
        ]
        if purchased_plans:
            try:
                _renew_membership(member, purchased_plans, today)
            except RuntimeError:
                logger.exception("Renewal failed for member %s", member.member_id)
                return CheckoutResult.failed(CheckoutError.WRITE_FAILED, f"Failed to renew membership for {member.name}.", totals)

    # 6. Transaction
    try:
        transaction = record_transaction(
            member_id=member.member_id if member else None,
            member_name=member.name if member else GUEST_NAME,
            transaction_type=totals.transaction_type,
            amount=totals.total,
            payment_method=request.payment_method,
            item_description=totals.item_description,
            transaction_date=today,
            items=_stored_items(request.lines),
        )
    except RuntimeError:
        logger.exception("Transaction insert failed")
        return CheckoutResult.failed(CheckoutError.WRITE_FAILED, "Failed to record final transaction.", totals)

    logger.info(
        "Recorded %s %s for %s",
        transaction.type.value,
        transaction.amount,
        transaction.member_id or "guest",
    )
    return CheckoutResult(success=True, transaction=transaction, totals=totals)


class VoidError(str, Enum):
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"
    WRITE_FAILED = "WRITE_FAILED"


@dataclass(frozen=True, slots=True)
class VoidResult:
    """
    Result of voiding a transaction.

    requires_manual_membership_reversal: The voided sale renewed a
        membership; staff must restore the member's previous dates by hand
    """
    success: bool
    transaction_id: str
    requires_manual_membership_reversal: bool = False
    error_code: Optional[VoidError] = None
    error_message: Optional[str] = None

    @staticmethod
    def failed(transaction_id: str, error_code: VoidError, message: str) -> "VoidResult":
        return VoidResult(
            success=False, transaction_id=transaction_id, error_code=error_code, error_message=message
        )


def void_transaction(transaction_id: str, role: StaffRole) -> VoidResult:
    """
    Cancel a recorded sale.

    Process:
    1. Check the role may void sales
    2. Load the transaction with its stored items
    3. For POS and mixed sales, put each paid inventory line back in stock
    4. Flag membership and mixed sales for manual membership reversal
    5. Delete the transaction

    Stock already restored is not taken back out if a later step fails.

    Raises:
        CheckoutAuthorizationError: The role may not void transactions
    """

    if not role.can_void_transactions():
        raise CheckoutAuthorizationError(f"Role {role.value} may not void transactions")

    transaction = get_transaction(transaction_id)
    if transaction is None:
        return VoidResult.failed(
            transaction_id, VoidError.TRANSACTION_NOT_FOUND, f"Transaction {transaction_id} not found."
        )

    if transaction.type in (TransactionType.POS_SALE, TransactionType.MIXED_SALE):
        if not transaction.items:
            logger.warning(
                "Transaction %s has no stored items; stock was not restored",
                transaction_id,
                extra={"transaction_id": transaction_id, "anomaly_type": "void_without_items"},
            )
        for item in transaction.items:
            if not item.returns_to_stock:
                continue
            try:
                restore_inventory_stock(item.source_id, item.quantity)
            except RuntimeError:
                logger.exception("Stock reversal failed for %s", item.source_id)
                return VoidResult.failed(
                    transaction_id,
                    VoidError.WRITE_FAILED,
                    f"Failed to reverse stock for item ID {item.source_id}.",
                )

    requires_manual_reversal = transaction.type in (TransactionType.MEMBERSHIP, TransactionType.MIXED_SALE)

    try:
        delete_transaction(transaction_id)
    except RuntimeError:
        logger.exception("Transaction delete failed for %s", transaction_id)
        return VoidResult.failed(transaction_id, VoidError.WRITE_FAILED, "Failed to delete transaction record.")

    logger.info(
        "Voided %s %s (%s)",
        transaction.type.value,
        transaction_id,
        "membership needs manual reversal" if requires_manual_reversal else "no membership change",
    )
    return VoidResult(
        success=True,
        transaction_id=transaction_id,
        requires_manual_membership_reversal=requires_manual_reversal,
    )


__all__ = [
    "CheckoutError",
    "CheckoutRequest",
    "CheckoutResult",
    "execute_checkout",
    "VoidError",
    "VoidResult",
    "void_transaction",
]
