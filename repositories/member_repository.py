"""
Member repository (persistence).

Members live in the Supabase `profiles` table alongside staff accounts. This
module only maps rows to Member entities and back; membership rules live in
the domain and services.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, List, Mapping, Optional

from domain.member import Member, MemberStatus
from domain.role import StaffRole
from domain.time import parse_day, parse_utc_datetime, to_iso_utc
from repositories.client import get_supabase

logger = logging.getLogger(__name__)

# Supabase table name for member profiles.
# Keep this aligned with your database schema.
_PROFILES_TABLE: str = "profiles"


def _display_name(row: Mapping[str, Any]) -> str:
    parts = [row.get("first_name") or "", row.get("last_name") or ""]
    name = " ".join(p for p in parts if p).strip()
    return name or str(row.get("email") or row["id"])


def _row_to_member(row: Mapping[str, Any]) -> Member:
    """Convert a Supabase profile row into a Member."""

    start = parse_day(row["start_date"])
    # Profiles without an expiration date have no running plan.
    expiration_val = row.get("expiration_date")
    expiration = parse_day(expiration_val) if expiration_val is not None else start
    last_check_in_val = row.get("last_check_in")

    return Member(
        member_id=str(row.get("member_code") or row["id"]),
        name=_display_name(row),
        status=MemberStatus(str(row.get("status") or MemberStatus.PENDING.value)),
        start_date=start,
        expiration_date=expiration,
        last_check_in=parse_utc_datetime(last_check_in_val) if last_check_in_val is not None else None,
        total_check_ins=int(row.get("total_check_ins") or 0),
        plan_name=row.get("plan_name"),
        email=row.get("email"),
        phone=row.get("phone"),
    )


def _is_member_row(row: Mapping[str, Any]) -> bool:
    try:
        role = StaffRole.parse(row.get("role"))
    except ValueError:
        logger.warning(
            "Skipping profile %s with unknown role %r",
            row.get("id"),
            row.get("role"),
            extra={"profile_id": row.get("id"), "anomaly_type": "unknown_profile_role"},
        )
        return False
    return row.get("start_date") is not None and role in (None, StaffRole.MEMBER)


def list_members() -> List[Member]:
    """
    Fetch all member profiles.

    Staff accounts and profiles that never started a plan are skipped.
    A profile with an unrecognized role is logged and skipped.

    Returns:
        List[Member] (possibly empty)
    """

    response = get_supabase().table(_PROFILES_TABLE).select("*").execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list members: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_member(row) for row in rows if _is_member_row(row)]


def get_member_by_code(member_code: str) -> Optional[Member]:
    """
    Retrieve a single member by member code (e.g. "M001").

    Returns:
        Member or None if not found
    """

    response = (
        get_supabase()
        .table(_PROFILES_TABLE)
        .select("*")
        .eq("member_code", member_code)
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get member: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return None
    return _row_to_member(rows[0])


def record_check_in(member_code: str, checked_in_at: datetime) -> None:
    """
    Stamp a member's last check-in and bump the check-in counter.

    Args:
        member_code: Member code
        checked_in_at: UTC timestamp of the check-in
    """

    member = get_member_by_code(member_code)
    if member is None:
        raise ValueError(f"Member {member_code} not found")

    payload: dict[str, Any] = {
        "last_check_in": to_iso_utc(checked_in_at, name="checked_in_at"),
        "total_check_ins": member.total_check_ins + 1,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    response = (
        get_supabase()
        .table(_PROFILES_TABLE)
        .update(payload)
        .eq("member_code", member_code)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to record check-in: {error}")


def update_membership(
    member_code: str,
    status: MemberStatus,
    plan_name: str,
    start_date: date,
    expiration_date: date,
) -> None:
    """Persist a renewal or status change for a member."""

    payload: dict[str, Any] = {
        "status": status.value,
        "plan_name": plan_name,
        "start_date": start_date.isoformat(),
        "expiration_date": expiration_date.isoformat(),
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    response = (
        get_supabase()
        .table(_PROFILES_TABLE)
        .update(payload)
        .eq("member_code", member_code)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to update membership: {error}")


__all__ = [
    "list_members",
    "get_member_by_code",
    "record_check_in",
    "update_membership",
]
