"""
Inventory repository (persistence).

This module provides *only* persistence operations for the InventoryItem
domain entity. Stock decrements after a sale go through the
`decrement_inventory_stock` PostgreSQL function so concurrent sales cannot
drive stock negative. A voided sale puts stock back through
`increment_inventory_stock`.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from domain.inventory import InventoryCategory, InventoryItem
from domain.money import to_money
from domain.time import parse_day
from repositories.client import get_supabase

# Supabase table name for inventory items.
# Keep this aligned with your database schema.
_INVENTORY_TABLE: str = "inventory_items"


def _row_to_inventory_item(row: Mapping[str, Any]) -> InventoryItem:
    """Convert a Supabase row into an InventoryItem."""

    last_restock_val = row.get("last_restock")
    return InventoryItem(
        item_id=str(row["id"]),
        name=str(row["name"]),
        category=InventoryCategory(str(row["category"])),
        stock=int(row["stock"]),
        price=to_money(row["price"]),
        last_restock=parse_day(last_restock_val) if last_restock_val is not None else None,
        image_url=row.get("image_url"),
    )


def list_inventory_items() -> List[InventoryItem]:
    """
    Fetch all inventory items.

    Returns:
        List[InventoryItem] (possibly empty)
    """

    response = get_supabase().table(_INVENTORY_TABLE).select("*").order("name").execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch inventory items: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_inventory_item(row) for row in rows]


def get_inventory_item(item_id: str) -> Optional[InventoryItem]:
    response = (
        get_supabase()
        .table(_INVENTORY_TABLE)
        .select("*")
        .eq("id", item_id)
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get inventory item: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return None
    return _row_to_inventory_item(rows[0])


def create_inventory_item(
    name: str,
    category: InventoryCategory,
    initial_stock: int,
    price: Decimal,
    stocked_on: date,
    image_url: Optional[str] = None,
) -> InventoryItem:
    """
    Insert a new inventory item into Supabase.

    Returns:
        InventoryItem as stored (with its generated id)
    """

    if initial_stock < 0:
        raise ValueError("initial_stock must be >= 0")

    payload: dict[str, Any] = {
        "name": name,
        "category": category.value,
        "stock": initial_stock,
        "price": str(price),
        "last_restock": stocked_on.isoformat(),
        "image_url": image_url,
    }

    response = get_supabase().table(_INVENTORY_TABLE).insert(payload).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to create inventory item: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        raise RuntimeError("Failed to create inventory item: no row returned")
    return _row_to_inventory_item(rows[0])


def save_restock(item: InventoryItem) -> None:
    """
    Persist the stock level and restock date of an item returned by
    InventoryItem.restocked().
    """

    payload: dict[str, Any] = {
        "stock": item.stock,
        "last_restock": item.last_restock.isoformat() if item.last_restock else None,
    }
    response = (
        get_supabase()
        .table(_INVENTORY_TABLE)
        .update(payload)
        .eq("id", item.item_id)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to restock inventory item: {error}")

    updated_rows = getattr(response, "data", None) or []
    if not updated_rows:
        raise ValueError(f"Inventory item {item.item_id} not found")


def reduce_inventory_stock(item_id: str, quantity: int) -> None:
    """
    Decrement stock after a sale via the `decrement_inventory_stock` RPC.

    The database function refuses to go below zero.
    """

    if quantity <= 0:
        raise ValueError("quantity must be > 0")

    from postgrest.exceptions import APIError

    try:
        response = get_supabase().rpc(
            "decrement_inventory_stock",
            {"item_id": item_id, "quantity_to_decrement": quantity},
        ).execute()
    except APIError as e:
        # supabase-py raises instead of returning an error when the function aborts
        raise RuntimeError(f"Failed to reduce inventory stock: {e.message}") from e

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to reduce inventory stock: {error}")


def restore_inventory_stock(item_id: str, quantity: int) -> None:
    """Put stock back after a voided sale via the `increment_inventory_stock` RPC."""

    if quantity <= 0:
        raise ValueError("quantity must be > 0")

    from postgrest.exceptions import APIError

    try:
        response = get_supabase().rpc(
            "increment_inventory_stock",
            {"item_id": item_id, "quantity_to_increment": quantity},
        ).execute()
    except APIError as e:
        raise RuntimeError(f"Failed to restore inventory stock: {e.message}") from e

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to restore inventory stock: {error}")


def delete_inventory_item(item_id: str) -> None:
    response = get_supabase().table(_INVENTORY_TABLE).delete().eq("id", item_id).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to delete inventory item: {error}")


__all__ = [
    "list_inventory_items",
    "get_inventory_item",
    "create_inventory_item",
    "save_restock",
    "reduce_inventory_stock",
    "restore_inventory_stock",
    "delete_inventory_item",
]
