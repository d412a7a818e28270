"""
Tests for `services/sale_service.py`.

Repository calls are replaced with an in-memory fake, so these tests cover
the checkout flow only:
- Cart prices and stock are re-checked against the catalog.
- Stock is decremented for paid inventory lines only.
- Membership lines renew the selected member, chaining multiple periods.
- The final transaction carries the computed total and type.
- Failures stop the flow before later writes.
- Voiding restores stock for paid inventory lines and flags membership sales.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest

from domain.inventory import InventoryCategory, InventoryItem
from domain.member import Member, MemberStatus
from domain.membership_plan import MembershipPlan
from domain.role import StaffRole
from domain.transaction import PaymentMethod, Transaction, TransactionItem, TransactionType
from services import sale_service
from services.checkout_service import CartLine, CartLineKind, CheckoutAuthorizationError, PriceOverrideError
from services.sale_service import CheckoutError, CheckoutRequest, VoidError, execute_checkout, void_transaction

TODAY = date(2024, 10, 22)


@dataclass
class FakeBackend:
    inventory: Dict[str, InventoryItem] = field(default_factory=dict)
    plans: Dict[str, MembershipPlan] = field(default_factory=dict)
    members: Dict[str, Member] = field(default_factory=dict)
    stock_updates: List[tuple] = field(default_factory=list)
    renewals: List[tuple] = field(default_factory=list)
    transactions: List[Dict[str, Any]] = field(default_factory=list)
    fail_stock_update: bool = False
    recorded: Dict[str, Transaction] = field(default_factory=dict)
    restored: List[tuple] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    fail_restore_for: Optional[str] = None

    def reduce_inventory_stock(self, item_id: str, quantity: int) -> None:
        if self.fail_stock_update:
            raise RuntimeError("Failed to reduce inventory stock: insufficient stock")
        self.stock_updates.append((item_id, quantity))

    def update_membership(self, member_code, status, plan_name, start_date, expiration_date) -> None:
        self.renewals.append((member_code, status, plan_name, start_date, expiration_date))

    def record_transaction(self, **kwargs: Any) -> Transaction:
        self.transactions.append(kwargs)
        transaction = Transaction(
            transaction_id=f"T{100 + len(self.transactions)}",
            member_id=kwargs["member_id"],
            member_name=kwargs["member_name"],
            type=kwargs["transaction_type"],
            amount=kwargs["amount"],
            date=kwargs["transaction_date"],
            payment_method=kwargs["payment_method"],
            item_description=kwargs["item_description"],
            items=tuple(kwargs.get("items", ())),
        )
        self.recorded[transaction.transaction_id] = transaction
        return transaction

    def restore_inventory_stock(self, item_id: str, quantity: int) -> None:
        if item_id == self.fail_restore_for:
            raise RuntimeError("Failed to restore inventory stock: item locked")
        self.restored.append((item_id, quantity))

    def delete_transaction(self, transaction_id: str) -> None:
        self.deleted.append(transaction_id)
        self.recorded.pop(transaction_id, None)


@pytest.fixture
def backend(monkeypatch) -> FakeBackend:
    fake = FakeBackend(
        inventory={
            "INV001": InventoryItem("INV001", "Protein Powder (Vanilla)", InventoryCategory.SUPPLEMENTS, 45, Decimal("39.99")),
            "INV004": InventoryItem("INV004", "Pre-Workout Mix", InventoryCategory.SUPPLEMENTS, 5, Decimal("29.99")),
        },
        plans={"plan-monthly": MembershipPlan("plan-monthly", "Monthly Subscription", 30, Decimal("99.99"))},
        members={
            "M001": Member(
                member_id="M001",
                name="Alice Johnson",
                status=MemberStatus.ACTIVE,
                start_date=date(2024, 10, 1),
                expiration_date=date(2024, 10, 31),
            )
        },
    )
    monkeypatch.setattr(sale_service, "get_inventory_item", fake.inventory.get)
    monkeypatch.setattr(sale_service, "get_plan_by_id", fake.plans.get)
    monkeypatch.setattr(sale_service, "get_member_by_code", fake.members.get)
    monkeypatch.setattr(sale_service, "reduce_inventory_stock", fake.reduce_inventory_stock)
    monkeypatch.setattr(sale_service, "update_membership", fake.update_membership)
    monkeypatch.setattr(sale_service, "record_transaction", fake.record_transaction)
    monkeypatch.setattr(sale_service, "get_transaction", fake.recorded.get)
    monkeypatch.setattr(sale_service, "restore_inventory_stock", fake.restore_inventory_stock)
    monkeypatch.setattr(sale_service, "delete_transaction", fake.delete_transaction)
    return fake


def _inventory_line(
    source_id: str = "INV001",
    quantity: int = 1,
    price: str = "39.99",
    original: Optional[str] = None,
    giveaway: bool = False,
) -> CartLine:
    return CartLine(
        source_id=source_id,
        name="Protein Powder (Vanilla)" if source_id == "INV001" else "Pre-Workout Mix",
        kind=CartLineKind.INVENTORY,
        quantity=quantity,
        price=Decimal(price),
        original_price=Decimal(original if original is not None else price),
        is_giveaway=giveaway,
    )


def _plan_line(quantity: int = 1) -> CartLine:
    return CartLine(
        source_id="plan-monthly",
        name="Monthly Subscription",
        kind=CartLineKind.MEMBERSHIP,
        quantity=quantity,
        price=Decimal("99.99"),
        original_price=Decimal("99.99"),
    )


def _checkout(lines, role=StaffRole.CASHIER, **kwargs):
    request = CheckoutRequest(lines=lines, payment_method=PaymentMethod.CARD, role=role, **kwargs)
    return execute_checkout(request, clock=lambda: TODAY)


def test_guest_pos_sale(backend: FakeBackend) -> None:
    result = _checkout([_inventory_line(quantity=2)])

    assert result.success
    assert result.error_code is None
    assert backend.stock_updates == [("INV001", 2)]
    assert backend.renewals == []
    (recorded,) = backend.transactions
    assert recorded["member_id"] is None
    assert recorded["member_name"] == "Guest Customer"
    assert recorded["amount"] == Decimal("86.38")
    assert recorded["transaction_type"] is TransactionType.POS_SALE
    assert recorded["transaction_date"] == TODAY
    assert result.transaction.transaction_id == "T101"


def test_member_renewal_extends_running_membership(backend: FakeBackend) -> None:
    result = _checkout([_plan_line()], member_code="M001")

    assert result.success
    assert backend.renewals == [
        ("M001", MemberStatus.ACTIVE, "Monthly Subscription", date(2024, 11, 1), date(2024, 12, 1))
    ]
    assert backend.transactions[0]["member_id"] == "M001"
    assert backend.transactions[0]["member_name"] == "Alice Johnson"
    assert backend.transactions[0]["transaction_type"] is TransactionType.MEMBERSHIP


def test_multiple_periods_chain(backend: FakeBackend) -> None:
    result = _checkout([_plan_line(quantity=2)], member_code="M001")

    assert result.success
    assert backend.renewals == [
        ("M001", MemberStatus.ACTIVE, "Monthly Subscription", date(2024, 11, 1), date(2025, 1, 1))
    ]


def test_initial_registration_skips_renewal(backend: FakeBackend) -> None:
    result = _checkout([_plan_line(), _inventory_line()], member_code="M001", is_initial_registration=True)

    assert result.success
    assert backend.renewals == []
    assert backend.transactions[0]["transaction_type"] is TransactionType.MIXED_SALE


def test_insufficient_stock_stops_before_writes(backend: FakeBackend) -> None:
    result = _checkout([_inventory_line("INV004", quantity=6, price="29.99")])

    assert not result.success
    assert result.error_code is CheckoutError.CATALOG_MISMATCH
    assert "Insufficient stock for Pre-Workout Mix" in result.error_message
    assert backend.stock_updates == []
    assert backend.transactions == []


def test_original_price_mismatch_is_rejected(backend: FakeBackend) -> None:
    result = _checkout([_inventory_line(price="35.00", original="35.00")])

    assert result.error_code is CheckoutError.CATALOG_MISMATCH
    assert "Original price mismatch" in result.error_message
    assert backend.transactions == []


def test_unknown_item_is_rejected(backend: FakeBackend) -> None:
    result = _checkout([_inventory_line("INV999")])

    assert result.error_code is CheckoutError.CATALOG_MISMATCH
    assert "INV999" in result.error_message


def test_unknown_member_is_rejected(backend: FakeBackend) -> None:
    result = _checkout([_plan_line()], member_code="M404")

    assert result.error_code is CheckoutError.MEMBER_NOT_FOUND
    assert backend.renewals == []


def test_stock_failure_is_reported_and_nothing_recorded(backend: FakeBackend) -> None:
    backend.fail_stock_update = True

    result = _checkout([_inventory_line()])

    assert result.error_code is CheckoutError.WRITE_FAILED
    assert result.error_message == "Failed to update stock for Protein Powder (Vanilla)."
    assert result.totals is not None
    assert backend.transactions == []


def test_giveaway_is_neither_validated_nor_decremented(backend: FakeBackend) -> None:
    lines = [_plan_line(), _inventory_line("INV-GIFT", price="0.00", original="15.00", giveaway=True)]

    result = _checkout(lines, member_code="M001")

    assert result.success
    assert backend.stock_updates == []
    assert backend.transactions[0]["amount"] == Decimal("99.99")


def test_empty_cart_is_invalid(backend: FakeBackend) -> None:
    result = _checkout([])

    assert result.error_code is CheckoutError.INVALID_CART
    assert result.totals is None


def test_cashier_override_raises(backend: FakeBackend) -> None:
    with pytest.raises(PriceOverrideError):
        _checkout([_inventory_line(price="30.00", original="39.99")])

    assert backend.transactions == []


def test_checkout_stores_cart_lines(backend: FakeBackend) -> None:
    lines = [_plan_line(), _inventory_line("INV-GIFT", price="0.00", original="15.00", giveaway=True)]

    _checkout(lines, member_code="M001")

    assert backend.transactions[0]["items"] == (
        TransactionItem("plan-monthly", "Monthly Subscription", "membership", 1, Decimal("99.99")),
        TransactionItem("INV-GIFT", "Pre-Workout Mix", "inventory", 1, Decimal("0.00"), is_giveaway=True),
    )


def _recorded(backend: FakeBackend, transaction_type: TransactionType, *items: TransactionItem) -> Transaction:
    transaction = Transaction(
        transaction_id="T200",
        member_id="M001",
        type=transaction_type,
        amount=Decimal("0.00"),
        date=TODAY,
        payment_method=PaymentMethod.CASH,
        items=items,
    )
    backend.recorded[transaction.transaction_id] = transaction
    return transaction


def test_void_pos_sale_restores_stock(backend: FakeBackend) -> None:
    result = _checkout([_inventory_line(quantity=2)])

    voided = void_transaction(result.transaction.transaction_id, StaffRole.CASHIER)

    assert voided.success
    assert not voided.requires_manual_membership_reversal
    assert backend.restored == [("INV001", 2)]
    assert backend.deleted == [result.transaction.transaction_id]


def test_void_mixed_sale_restores_paid_stock_and_flags_membership(backend: FakeBackend) -> None:
    _recorded(
        backend,
        TransactionType.MIXED_SALE,
        TransactionItem("plan-monthly", "Monthly Subscription", "membership", 1, Decimal("99.99")),
        TransactionItem("INV004", "Pre-Workout Mix", "inventory", 1, Decimal("29.99")),
        TransactionItem("INV-GIFT", "Water Bottle", "inventory", 1, Decimal("0.00"), is_giveaway=True),
    )

    voided = void_transaction("T200", StaffRole.MANAGER)

    assert voided.success
    assert voided.requires_manual_membership_reversal
    assert backend.restored == [("INV004", 1)]
    assert backend.deleted == ["T200"]


def test_void_membership_sale_touches_no_stock(backend: FakeBackend) -> None:
    _recorded(
        backend,
        TransactionType.MEMBERSHIP,
        TransactionItem("plan-monthly", "Monthly Subscription", "membership", 1, Decimal("99.99")),
    )

    voided = void_transaction("T200", StaffRole.OWNER)

    assert voided.requires_manual_membership_reversal
    assert backend.restored == []
    assert backend.deleted == ["T200"]


def test_void_without_stored_items_logs_and_deletes(backend: FakeBackend, caplog) -> None:
    _recorded(backend, TransactionType.POS_SALE)

    with caplog.at_level("WARNING", logger="services.sale_service"):
        voided = void_transaction("T200", StaffRole.CASHIER)

    assert voided.success
    assert backend.deleted == ["T200"]
    assert caplog.records[0].anomaly_type == "void_without_items"


def test_void_unknown_transaction(backend: FakeBackend) -> None:
    voided = void_transaction("T404", StaffRole.CASHIER)

    assert not voided.success
    assert voided.error_code is VoidError.TRANSACTION_NOT_FOUND
    assert backend.deleted == []


def test_void_stops_when_stock_reversal_fails(backend: FakeBackend) -> None:
    _recorded(
        backend,
        TransactionType.POS_SALE,
        TransactionItem("INV001", "Protein Powder (Vanilla)", "inventory", 1, Decimal("39.99")),
        TransactionItem("INV004", "Pre-Workout Mix", "inventory", 1, Decimal("29.99")),
    )
    backend.fail_restore_for = "INV004"

    voided = void_transaction("T200", StaffRole.CASHIER)

    assert voided.error_code is VoidError.WRITE_FAILED
    assert voided.error_message == "Failed to reverse stock for item ID INV004."
    assert backend.restored == [("INV001", 1)]
    assert backend.deleted == []


@pytest.mark.parametrize("role", [StaffRole.CO_OWNER, StaffRole.MEMBER])
def test_void_requires_front_desk_role(backend: FakeBackend, role: StaffRole) -> None:
    _recorded(backend, TransactionType.POS_SALE)

    with pytest.raises(CheckoutAuthorizationError):
        void_transaction("T200", role)

    assert backend.deleted == []
