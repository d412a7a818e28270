"""
Pytest configuration.

This file adds the project root to the Python path so that tests
can import from the domain, repositories, services and api packages.
"""

import sys
from pathlib import Path

# Add the project root directory to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List

import pytest

from domain.inventory import InventoryCategory, InventoryItem
from domain.member import Member, MemberStatus
from domain.transaction import PaymentMethod, Transaction, TransactionType

# Reference day for the demo snapshot (a Tuesday).
DEMO_AS_OF = date(2024, 10, 22)


@pytest.fixture
def demo_as_of() -> date:
    return DEMO_AS_OF


@pytest.fixture
def demo_members() -> List[Member]:
    return [
        Member(
            member_id="M001",
            name="Alice Johnson",
            status=MemberStatus.ACTIVE,
            start_date=date(2024, 10, 1),
            expiration_date=date(2024, 10, 31),
            last_check_in=datetime(2024, 10, 22, 7, 15, tzinfo=timezone.utc),
            total_check_ins=15,
            plan_name="Monthly Subscription",
        ),
        Member(
            member_id="M002",
            name="Bob Smith",
            status=MemberStatus.ACTIVE,
            start_date=date(2024, 1, 1),
            expiration_date=date(2025, 1, 1),
            last_check_in=datetime(2024, 10, 22, 18, 0, tzinfo=timezone.utc),
            total_check_ins=120,
            plan_name="Annual Membership",
        ),
        Member(
            member_id="M003",
            name="Charlie Brown",
            status=MemberStatus.EXPIRED,
            start_date=date(2024, 9, 20),
            expiration_date=date(2024, 9, 21),
            last_check_in=datetime(2024, 9, 20, 9, 0, tzinfo=timezone.utc),
            total_check_ins=1,
            plan_name="Daily Pass",
        ),
    ]


def _tx(tx_id: str, member_id: str, tx_type: TransactionType, amount: str, day: date, method: PaymentMethod) -> Transaction:
    return Transaction(
        transaction_id=tx_id,
        member_id=member_id,
        type=tx_type,
        amount=Decimal(amount),
        date=day,
        payment_method=method,
    )


@pytest.fixture
def demo_transactions() -> List[Transaction]:
    membership = TransactionType.MEMBERSHIP
    pos = TransactionType.POS_SALE
    return [
        _tx("T001", "M001", membership, "99.99", date(2024, 10, 22), PaymentMethod.CARD),
        _tx("T002", "M005", pos, "59.98", date(2024, 10, 22), PaymentMethod.CASH),
        _tx("T003", "M002", membership, "999.99", date(2024, 10, 21), PaymentMethod.TRANSFER),
        _tx("T004", "M010", pos, "9.50", date(2024, 10, 21), PaymentMethod.CARD),
        _tx("T005", "M015", membership, "10.00", date(2024, 10, 20), PaymentMethod.CASH),
        _tx("T006", "M016", membership, "35.00", date(2024, 10, 20), PaymentMethod.CARD),
        _tx("T007", "M001", pos, "29.99", date(2024, 10, 19), PaymentMethod.CARD),
        _tx("T008", "M020", membership, "99.99", date(2024, 10, 18), PaymentMethod.TRANSFER),
        _tx("T009", "M021", pos, "39.99", date(2024, 10, 18), PaymentMethod.CASH),
        _tx("T010", "M022", membership, "999.99", date(2024, 10, 17), PaymentMethod.CARD),
    ]


@pytest.fixture
def demo_inventory() -> List[InventoryItem]:
    return [
        InventoryItem("INV001", "Protein Powder (Vanilla)", InventoryCategory.SUPPLEMENTS, 45, Decimal("39.99")),
        InventoryItem("INV002", "Gym Towel (Logo)", InventoryCategory.APPAREL, 120, Decimal("9.50")),
        InventoryItem("INV003", "Water Bottle (Insulated)", InventoryCategory.EQUIPMENT, 15, Decimal("19.99")),
        InventoryItem("INV004", "Pre-Workout Mix", InventoryCategory.SUPPLEMENTS, 5, Decimal("29.99")),
    ]
