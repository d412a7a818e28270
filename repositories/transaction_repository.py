"""
Transaction repository (persistence).

This module provides *only* persistence operations for the Transaction
domain entity. Transactions are immutable once recorded; there is no update
function. A voided transaction is deleted.

The charged cart is stored in the `items_data` JSON column using the same
camelCase keys the front-end cart uses (sourceId, type, isGiveaway).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from domain.money import to_money
from domain.time import parse_day, parse_utc_datetime
from domain.transaction import (
    GUEST_MEMBER_ID,
    PaymentMethod,
    Transaction,
    TransactionItem,
    TransactionType,
)
from repositories.client import get_supabase

# Supabase table name for transactions.
# Keep this aligned with your database schema.
_TRANSACTIONS_TABLE: str = "transactions"


def _item_to_json(item: TransactionItem) -> Dict[str, Any]:
    return {
        "sourceId": item.source_id,
        "name": item.name,
        "type": item.kind,
        "quantity": item.quantity,
        "price": str(item.price),
        "isGiveaway": item.is_giveaway,
    }


def _json_to_item(data: Mapping[str, Any]) -> TransactionItem:
    return TransactionItem(
        source_id=str(data["sourceId"]),
        name=str(data.get("name") or data["sourceId"]),
        kind=str(data["type"]),
        quantity=int(data.get("quantity") or 0),
        price=to_money(data.get("price") or 0),
        is_giveaway=bool(data.get("isGiveaway", False)),
    )


def _row_to_transaction(row: Mapping[str, Any]) -> Transaction:
    """Convert a Supabase row into a Transaction."""

    member_id = row.get("member_id")
    # Guest sales are stored with the GUEST sentinel.
    if member_id in (None, "", GUEST_MEMBER_ID):
        member_id = None

    created_at_val = row.get("created_at")
    date_val = row.get("transaction_date") or created_at_val

    return Transaction(
        transaction_id=str(row["id"]),
        member_id=member_id,
        member_name=row.get("member_name"),
        type=TransactionType(str(row["type"])),
        item_description=row.get("item_description"),
        amount=to_money(row["amount"]),
        date=parse_day(date_val),
        payment_method=PaymentMethod(str(row["payment_method"])),
        created_at=parse_utc_datetime(created_at_val) if created_at_val is not None else None,
        items=tuple(_json_to_item(item) for item in row.get("items_data") or ()),
    )


def list_transactions() -> List[Transaction]:
    """
    Fetch all transactions, newest first.

    Returns:
        List[Transaction] (possibly empty)
    """

    response = (
        get_supabase()
        .table(_TRANSACTIONS_TABLE)
        .select("*")
        .order("transaction_date", desc=True)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list transactions: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_transaction(row) for row in rows]


def list_transactions_by_member(member_id: str) -> List[Transaction]:
    """
    Retrieve all transactions for a given member (purchase history).

    Returns:
        List[Transaction] (possibly empty)
    """

    response = (
        get_supabase()
        .table(_TRANSACTIONS_TABLE)
        .select("*")
        .eq("member_id", member_id)
        .order("transaction_date", desc=True)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list member transactions: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_transaction(row) for row in rows]


def record_transaction(
    member_id: Optional[str],
    member_name: Optional[str],
    transaction_type: TransactionType,
    amount: Decimal,
    payment_method: PaymentMethod,
    item_description: Optional[str] = None,
    transaction_date: Optional[date] = None,
    items: Sequence[TransactionItem] = (),
) -> Transaction:
    """
    Insert a new transaction into Supabase.

    Args:
        member_id: Member code, or None for a guest sale
        member_name: Display name stored with the transaction
        transaction_type: Membership, POS Sale or Mixed Sale
        amount: Amount charged
        payment_method: Card, Cash or Transfer
        item_description: Human-readable list of items
        transaction_date: Day of the sale (default: today in UTC)
        items: Cart lines charged, stored as items_data

    Returns:
        Transaction domain model with the recorded transaction
    """

    now = datetime.now(timezone.utc)
    day = transaction_date or now.date()

    payload: dict[str, Any] = {
        "member_id": member_id or GUEST_MEMBER_ID,
        "member_name": member_name or "Guest Customer",
        "type": transaction_type.value,
        "item_description": item_description,
        "amount": str(amount),
        "payment_method": payment_method.value,
        "transaction_date": day.isoformat(),
        "items_data": [_item_to_json(item) for item in items],
    }

    response = get_supabase().table(_TRANSACTIONS_TABLE).insert(payload).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to record transaction: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        raise RuntimeError("Failed to record transaction: no row returned")
    return _row_to_transaction(rows[0])


def get_transaction(transaction_id: str) -> Optional[Transaction]:
    """
    Retrieve a single transaction with its stored items.

    Returns:
        Transaction or None if not found
    """

    response = (
        get_supabase()
        .table(_TRANSACTIONS_TABLE)
        .select("*")
        .eq("id", transaction_id)
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get transaction: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return None
    return _row_to_transaction(rows[0])


def delete_transaction(transaction_id: str) -> None:
    response = get_supabase().table(_TRANSACTIONS_TABLE).delete().eq("id", transaction_id).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to delete transaction: {error}")


__all__ = [
    "list_transactions",
    "list_transactions_by_member",
    "record_transaction",
    "get_transaction",
    "delete_transaction",
]
