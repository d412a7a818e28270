"""
Class schedule repository (persistence).

Loads group classes and their enrollments from Supabase so the enrollment
service can work on an in-memory snapshot, and writes roster changes back.
Each roster change (enrollment row plus class counter) is one call to a
PostgreSQL function defined in `sql/class_enrollment_functions.sql`.
Capacity rules are not enforced here.
"""

from __future__ import annotations

from typing import Any, List, Mapping

from domain.gym_class import Enrollment, GymClass
from domain.time import parse_day
from repositories.client import get_supabase
from repositories.enrollment_store import InMemoryEnrollmentStore

# Supabase table names for the class schedule.
# Keep these aligned with your database schema.
_CLASSES_TABLE: str = "gym_classes"
_ENROLLMENTS_TABLE: str = "class_enrollments"


def _row_to_class(row: Mapping[str, Any]) -> GymClass:
    """Convert a Supabase row into a GymClass."""

    return GymClass(
        class_id=str(row["id"]),
        name=str(row["name"]),
        capacity=int(row["capacity"]),
        current_enrollment=int(row.get("current_enrollment") or 0),
        trainer=row.get("trainer"),
        day=row.get("day"),
        time=row.get("time"),
    )


def _row_to_enrollment(row: Mapping[str, Any]) -> Enrollment:
    """Convert a Supabase row into an Enrollment."""

    return Enrollment(
        member_id=str(row["member_id"]),
        class_id=str(row["class_id"]),
        enrollment_date=parse_day(row["enrollment_date"]),
        member_name=row.get("member_name"),
    )


def list_classes() -> List[GymClass]:
    response = get_supabase().table(_CLASSES_TABLE).select("*").execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list classes: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_class(row) for row in rows]


def list_enrollments() -> List[Enrollment]:
    response = get_supabase().table(_ENROLLMENTS_TABLE).select("*").execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list enrollments: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_enrollment(row) for row in rows]


class SupabaseEnrollmentStore(InMemoryEnrollmentStore):
    """
    In-memory store that writes every roster change through to Supabase.

    The database write happens first; the in-memory state only changes if it
    succeeded.
    """

    def add_enrollment(self, enrollment: Enrollment, updated_class: GymClass) -> None:
        save_enrollment(enrollment, updated_class)
        super().add_enrollment(enrollment, updated_class)

    def remove_enrollment(self, member_id: str, class_id: str, updated_class: GymClass) -> None:
        delete_enrollment(member_id, class_id, updated_class)
        super().remove_enrollment(member_id, class_id, updated_class)


def load_enrollment_store() -> SupabaseEnrollmentStore:
    """
    Build a write-through store from the current class schedule and rosters.

    Returns:
        SupabaseEnrollmentStore seeded with every class and enrollment
    """

    return SupabaseEnrollmentStore(classes=list_classes(), enrollments=list_enrollments())


def save_enrollment(enrollment: Enrollment, updated_class: GymClass) -> None:
    """
    Persist a new enrollment and its class counter in one database call.

    The `enroll_member_in_class` function inserts the enrollment row and sets
    `gym_classes.current_enrollment` inside a single transaction, so either
    both writes land or neither does.

    Raises:
        ValueError: The (member_id, class_id) pair is already enrolled
        RuntimeError: Any other database failure
    """

    params: dict[str, Any] = {
        "p_member_id": enrollment.member_id,
        "p_class_id": enrollment.class_id,
        "p_enrollment_date": enrollment.enrollment_date.isoformat(),
        "p_member_name": enrollment.member_name,
        "p_current_enrollment": updated_class.current_enrollment,
    }
    error = _call_roster_function("enroll_member_in_class", params)

    if error:
        # 23505: unique_violation on (member_id, class_id)
        if str(getattr(error, "code", None)) == "23505":
            raise ValueError("Enrollment already exists for (member_id, class_id)") from None
        raise RuntimeError(f"Failed to save enrollment: {_error_message(error)}")


def delete_enrollment(member_id: str, class_id: str, updated_class: GymClass) -> None:
    """Remove an enrollment and set the class counter in one database call."""

    params: dict[str, Any] = {
        "p_member_id": member_id,
        "p_class_id": class_id,
        "p_current_enrollment": updated_class.current_enrollment,
    }
    error = _call_roster_function("unenroll_member_from_class", params)
    if error:
        raise RuntimeError(f"Failed to delete enrollment: {_error_message(error)}")


def _call_roster_function(name: str, params: Mapping[str, Any]) -> Any:
    """Run a roster function; return the error (raised or returned) or None."""

    from postgrest.exceptions import APIError

    try:
        response = get_supabase().rpc(name, dict(params)).execute()
    except APIError as e:
        # supabase-py raises instead of returning an error when the function aborts
        return e
    return getattr(response, "error", None)


def _error_message(error: Any) -> str:
    return str(getattr(error, "message", None) or error)


__all__ = [
    "SupabaseEnrollmentStore",
    "list_classes",
    "list_enrollments",
    "load_enrollment_store",
    "save_enrollment",
    "delete_enrollment",
]
