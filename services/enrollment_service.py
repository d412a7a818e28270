"""
Enrollment service for class rosters.

Handles:
- Capacity checks before a member joins a class
- Keeping GymClass.current_enrollment equal to the number of enrollments
- Per-class serialization of enroll/unenroll so two requests racing on the
  same class cannot both take the last spot

Failures are returned as EnrollmentResult values, never raised, so callers
can show a message without unwinding.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional

from domain.gym_class import Enrollment
from domain.time import utc_today
from repositories.enrollment_store import EnrollmentStore

logger = logging.getLogger(__name__)


class EnrollmentError(str, Enum):
    CLASS_NOT_FOUND = "CLASS_NOT_FOUND"
    CLASS_FULL = "CLASS_FULL"
    ALREADY_ENROLLED = "ALREADY_ENROLLED"


@dataclass(frozen=True, slots=True)
class EnrollmentResult:
    """
    Result of an enrollment attempt.

    success: True if the member was added to the roster
    enrollment: The new Enrollment (None on failure)
    error_code: Failure reason (None on success)
    error_message: Human-readable failure reason
    """
    success: bool
    enrollment: Optional[Enrollment]
    error_code: Optional[EnrollmentError]
    error_message: Optional[str]

    @staticmethod
    def ok(enrollment: Enrollment) -> "EnrollmentResult":
        return EnrollmentResult(success=True, enrollment=enrollment, error_code=None, error_message=None)

    @staticmethod
    def failed(error_code: EnrollmentError, error_message: str) -> "EnrollmentResult":
        return EnrollmentResult(
            success=False, enrollment=None, error_code=error_code, error_message=error_message
        )


@dataclass(frozen=True, slots=True)
class EnrollmentCountMismatch:
    """A class whose stored counter disagrees with its enrollment records."""
    class_id: str
    current_enrollment: int
    enrollment_records: int


class EnrollmentManager:
    """
    Owns every mutation of GymClass.current_enrollment.

    Args:
        store: Where classes and enrollments live
        clock: Returns the date new enrollments are stamped with (UTC today by default)
    """

    def __init__(self, store: EnrollmentStore, clock: Callable[[], date] = utc_today) -> None:
        self._store = store
        self._clock = clock
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def store(self) -> EnrollmentStore:
        return self._store

    def _class_lock(self, class_id: str) -> Optional[threading.Lock]:
        """Lock for an existing class, or None when the store has no such class."""

        with self._locks_guard:
            lock = self._locks.get(class_id)
            if lock is None:
                if self._store.get_class(class_id) is None:
                    return None
                lock = threading.Lock()
                self._locks[class_id] = lock
            return lock

    def enroll(self, member_id: str, class_id: str, member_name: Optional[str] = None) -> EnrollmentResult:
        """
        Add a member to a class roster.

        Checks, in order: class exists, class has room, member not already
        enrolled. On success the enrollment and the counter increment are
        written together.

        Example:
            result = manager.enroll("M001", "yoga-mon", member_name="Alice Johnson")
            if not result.success:
                print(result.error_message)
        """

        not_found = EnrollmentResult.failed(EnrollmentError.CLASS_NOT_FOUND, f"Class {class_id} not found")

        lock = self._class_lock(class_id)
        if lock is None:
            return not_found

        with lock:
            gym_class = self._store.get_class(class_id)
            if gym_class is None:
                return not_found

            if gym_class.is_full:
                return EnrollmentResult.failed(
                    EnrollmentError.CLASS_FULL,
                    f"Class {class_id} is full ({gym_class.current_enrollment}/{gym_class.capacity})",
                )

            if self._store.get_enrollment(member_id, class_id) is not None:
                return EnrollmentResult.failed(
                    EnrollmentError.ALREADY_ENROLLED,
                    f"Member {member_id} is already enrolled in class {class_id}",
                )

            enrollment = Enrollment(
                member_id=member_id,
                class_id=class_id,
                enrollment_date=self._clock(),
                member_name=member_name,
            )
            updated_class, _ = gym_class.with_enrollment_delta(1)
            self._store.add_enrollment(enrollment, updated_class)

        logger.info("Enrolled member %s in class %s", member_id, class_id)
        return EnrollmentResult.ok(enrollment)

    def unenroll(self, member_id: str, class_id: str) -> bool:
        """
        Remove a member from a class roster.

        Returns True if an enrollment was removed. The counter is decremented
        but never below zero; hitting that floor means the counter and the
        roster had already drifted apart, which is logged and left as is.
        """

        lock = self._class_lock(class_id)
        if lock is None:
            if self._store.get_enrollment(member_id, class_id) is not None:
                # Orphaned enrollment; there is no counter to keep in sync.
                logger.warning(
                    "Enrollment for member %s references missing class %s", member_id, class_id
                )
            return False

        with lock:
            if self._store.get_enrollment(member_id, class_id) is None:
                return False

            gym_class = self._store.get_class(class_id)
            if gym_class is None:
                return False

            updated_class, clamped = gym_class.with_enrollment_delta(-1)
            if clamped:
                logger.warning(
                    "Enrollment count for class %s would drop below zero when removing member %s; "
                    "clamped at 0. Counter and roster are out of sync.",
                    class_id,
                    member_id,
                    extra={
                        "class_id": class_id,
                        "member_id": member_id,
                        "anomaly_type": "enrollment_count_underflow",
                    },
                )
            self._store.remove_enrollment(member_id, class_id, updated_class)

        logger.info("Removed member %s from class %s", member_id, class_id)
        return True

    def roster(self, class_id: str) -> List[Enrollment]:
        return self._store.list_enrollments(class_id)

    def audit_enrollment_counts(self) -> List[EnrollmentCountMismatch]:
        """
        Compare every class counter with its enrollment records.

        Mismatches are reported and logged, never corrected.
        """

        counts: Dict[str, int] = {}
        for enrollment in self._store.list_enrollments():
            counts[enrollment.class_id] = counts.get(enrollment.class_id, 0) + 1

        mismatches: List[EnrollmentCountMismatch] = []
        for gym_class in self._store.list_classes():
            actual = counts.get(gym_class.class_id, 0)
            if actual != gym_class.current_enrollment:
                mismatches.append(
                    EnrollmentCountMismatch(
                        class_id=gym_class.class_id,
                        current_enrollment=gym_class.current_enrollment,
                        enrollment_records=actual,
                    )
                )

        for mismatch in mismatches:
            logger.warning(
                "Class %s counter is %d but has %d enrollment records",
                mismatch.class_id,
                mismatch.current_enrollment,
                mismatch.enrollment_records,
            )
        return mismatches


__all__ = [
    "EnrollmentError",
    "EnrollmentResult",
    "EnrollmentCountMismatch",
    "EnrollmentManager",
]
