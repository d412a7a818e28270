"""
Enrollment store (in-memory persistence).

Holds the GymClass and Enrollment records the enrollment service works on.
The store enforces only persistence constraints: uniqueness of
(member_id, class_id) and that an enrollment write and its class counter
update are applied together. Capacity rules live in the enrollment service.

Readers take the same lock as writers, so no reader can observe an
enrollment without its counter update (or the reverse).
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from domain.gym_class import Enrollment, GymClass


class EnrollmentStore(Protocol):
    """Read/write operations the enrollment service relies on."""

    def get_class(self, class_id: str) -> Optional[GymClass]: ...

    def list_classes(self) -> List[GymClass]: ...

    def get_enrollment(self, member_id: str, class_id: str) -> Optional[Enrollment]: ...

    def list_enrollments(self, class_id: Optional[str] = None) -> List[Enrollment]: ...

    def add_enrollment(self, enrollment: Enrollment, updated_class: GymClass) -> None: ...

    def remove_enrollment(self, member_id: str, class_id: str, updated_class: GymClass) -> None: ...


class InMemoryEnrollmentStore:
    """
    Thread-safe in-memory EnrollmentStore.

    Seed it from snapshots (e.g. rows loaded by class_repository). Enrollment
    order is preserved in insertion order.
    """

    def __init__(
        self,
        classes: Iterable[GymClass] = (),
        enrollments: Iterable[Enrollment] = (),
    ) -> None:
        self._lock = threading.RLock()
        self._classes: Dict[str, GymClass] = {c.class_id: c for c in classes}
        self._enrollments: Dict[Tuple[str, str], Enrollment] = {}
        for enrollment in enrollments:
            if enrollment.key in self._enrollments:
                raise ValueError(
                    f"Duplicate enrollment for (member_id={enrollment.member_id}, class_id={enrollment.class_id})"
                )
            self._enrollments[enrollment.key] = enrollment

    def get_class(self, class_id: str) -> Optional[GymClass]:
        with self._lock:
            return self._classes.get(class_id)

    def list_classes(self) -> List[GymClass]:
        with self._lock:
            return list(self._classes.values())

    def put_class(self, gym_class: GymClass) -> None:
        with self._lock:
            self._classes[gym_class.class_id] = gym_class

    def get_enrollment(self, member_id: str, class_id: str) -> Optional[Enrollment]:
        with self._lock:
            return self._enrollments.get((member_id, class_id))

    def list_enrollments(self, class_id: Optional[str] = None) -> List[Enrollment]:
        with self._lock:
            return [
                e for e in self._enrollments.values() if class_id is None or e.class_id == class_id
            ]

    def add_enrollment(self, enrollment: Enrollment, updated_class: GymClass) -> None:
        """
        Insert an enrollment and replace its class record in one step.

        Raises:
        - ValueError if the (member_id, class_id) pair already exists or the
          class is unknown / does not match the enrollment.
        """

        if updated_class.class_id != enrollment.class_id:
            raise ValueError("updated_class does not match enrollment.class_id")

        with self._lock:
            if enrollment.class_id not in self._classes:
                raise ValueError(f"Unknown class_id: {enrollment.class_id}")
            if enrollment.key in self._enrollments:
                raise ValueError("Enrollment already exists for (member_id, class_id)")
            self._enrollments[enrollment.key] = enrollment
            self._classes[updated_class.class_id] = updated_class

    def remove_enrollment(self, member_id: str, class_id: str, updated_class: GymClass) -> None:
        """
        Delete an enrollment and replace its class record in one step.

        Raises:
        - ValueError if no such enrollment exists.
        """

        if updated_class.class_id != class_id:
            raise ValueError("updated_class does not match class_id")

        with self._lock:
            if (member_id, class_id) not in self._enrollments:
                raise ValueError("Enrollment not found for (member_id, class_id)")
            del self._enrollments[(member_id, class_id)]
            self._classes[class_id] = updated_class


__all__ = [
    "EnrollmentStore",
    "InMemoryEnrollmentStore",
]
