"""
Domain: Group classes and class enrollments.

Rules implemented here:
- capacity > 0 and 0 <= current_enrollment <= capacity.
- Enrollment records are unique per (member_id, class_id).
- current_enrollment only changes through with_enrollment_delta, which clamps
  at zero and reports when it had to.

Keeping current_enrollment equal to the number of Enrollment records is the
job of the enrollment service; this module only models the values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class GymClass:
    class_id: str
    name: str
    capacity: int
    current_enrollment: int = 0
    trainer: Optional[str] = None
    day: Optional[str] = None  # e.g. "Monday"
    time: Optional[str] = None  # e.g. "07:00 AM"

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("capacity must be > 0")
        if self.current_enrollment < 0:
            raise ValueError("current_enrollment must be >= 0")
        if self.current_enrollment > self.capacity:
            raise ValueError("current_enrollment must be <= capacity")

    @property
    def is_full(self) -> bool:
        return self.current_enrollment >= self.capacity

    @property
    def spots_left(self) -> int:
        return self.capacity - self.current_enrollment

    def with_enrollment_delta(self, delta: int) -> Tuple["GymClass", bool]:
        """
        Return (updated class, clamped).

        clamped is True when the new count would have gone below zero and was
        held at zero instead.
        """

        new_count = self.current_enrollment + delta
        clamped = new_count < 0
        if clamped:
            new_count = 0
        return replace(self, current_enrollment=new_count), clamped


@dataclass(frozen=True, slots=True)
class Enrollment:
    member_id: str
    class_id: str
    enrollment_date: date
    member_name: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.member_id, self.class_id)
