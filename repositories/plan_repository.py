"""
Membership plan repository (persistence).

Plans are created and edited by the owner; permission checks happen before
these functions are called.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Mapping, Optional

from domain.membership_plan import MembershipPlan
from domain.money import to_money
from repositories.client import get_supabase

# Supabase table name for membership plans.
# Keep this aligned with your database schema.
_PLANS_TABLE: str = "membership_plans"


def _row_to_plan(row: Mapping[str, Any]) -> MembershipPlan:
    """Convert a Supabase row into a MembershipPlan."""

    giveaway = row.get("giveaway_item_id")
    return MembershipPlan(
        plan_id=str(row["id"]),
        name=str(row["name"]),
        duration_days=int(row["duration_days"]),
        price=to_money(row["price"]),
        description=row.get("description"),
        giveaway_item_id=str(giveaway) if giveaway is not None else None,
    )


def list_plans() -> List[MembershipPlan]:
    """
    Fetch all membership plans, shortest first.

    Returns:
        List[MembershipPlan] (possibly empty)
    """

    response = get_supabase().table(_PLANS_TABLE).select("*").order("duration_days").execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list membership plans: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_plan(row) for row in rows]


def get_plan_by_id(plan_id: str) -> Optional[MembershipPlan]:
    response = (
        get_supabase()
        .table(_PLANS_TABLE)
        .select("*")
        .eq("id", plan_id)
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get membership plan: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return None
    return _row_to_plan(rows[0])


def create_plan(
    name: str,
    duration_days: int,
    price: Decimal,
    description: Optional[str] = None,
    giveaway_item_id: Optional[str] = None,
) -> MembershipPlan:
    """
    Insert a new membership plan into Supabase.

    Returns:
        MembershipPlan as stored (with its generated id)
    """

    if duration_days <= 0:
        raise ValueError("duration_days must be > 0")

    payload: dict[str, Any] = {
        "name": name,
        "duration_days": duration_days,
        "price": str(price),
        "description": description,
        "giveaway_item_id": giveaway_item_id,
    }

    response = get_supabase().table(_PLANS_TABLE).insert(payload).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to create membership plan: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        raise RuntimeError("Failed to create membership plan: no row returned")
    return _row_to_plan(rows[0])


def update_plan(plan: MembershipPlan) -> None:
    payload: dict[str, Any] = {
        "name": plan.name,
        "duration_days": plan.duration_days,
        "price": str(plan.price),
        "description": plan.description,
        "giveaway_item_id": plan.giveaway_item_id,
    }
    response = get_supabase().table(_PLANS_TABLE).update(payload).eq("id", plan.plan_id).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to update membership plan: {error}")


__all__ = [
    "list_plans",
    "get_plan_by_id",
    "create_plan",
    "update_plan",
]
