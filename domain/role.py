"""
Domain: Staff and member roles.

Roles form a closed set. Every capability check below handles each role
explicitly; adding a role means revisiting each match statement.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class StaffRole(str, Enum):
    OWNER = "owner"
    CO_OWNER = "co owner"
    MANAGER = "manager"
    CASHIER = "cashier"
    MEMBER = "member"

    @staticmethod
    def parse(value: Optional[str]) -> Optional["StaffRole"]:
        """
        Parse a profile role column.

        None (no role assigned) stays None; unknown strings raise ValueError.
        """

        if value is None:
            return None
        return StaffRole(value.strip().lower())

    def is_staff(self) -> bool:
        """Front-desk staff: managers and cashiers."""

        match self:
            case StaffRole.MANAGER | StaffRole.CASHIER:
                return True
            case StaffRole.OWNER | StaffRole.CO_OWNER | StaffRole.MEMBER:
                return False
        raise ValueError(f"Unhandled role: {self!r}")

    def can_edit_members(self) -> bool:
        match self:
            case StaffRole.OWNER | StaffRole.CO_OWNER | StaffRole.MANAGER | StaffRole.CASHIER:
                return True
            case StaffRole.MEMBER:
                return False
        raise ValueError(f"Unhandled role: {self!r}")

    def can_manage_plans(self) -> bool:
        match self:
            case StaffRole.OWNER:
                return True
            case StaffRole.CO_OWNER | StaffRole.MANAGER | StaffRole.CASHIER | StaffRole.MEMBER:
                return False
        raise ValueError(f"Unhandled role: {self!r}")

    def can_manage_roles(self) -> bool:
        match self:
            case StaffRole.OWNER:
                return True
            case StaffRole.CO_OWNER | StaffRole.MANAGER | StaffRole.CASHIER | StaffRole.MEMBER:
                return False
        raise ValueError(f"Unhandled role: {self!r}")

    def can_use_pos(self) -> bool:
        """Roles allowed to ring up sales at checkout."""

        match self:
            case StaffRole.OWNER | StaffRole.MANAGER | StaffRole.CASHIER:
                return True
            case StaffRole.CO_OWNER | StaffRole.MEMBER:
                return False
        raise ValueError(f"Unhandled role: {self!r}")

    def can_override_prices(self) -> bool:
        """Cashiers may only charge catalog prices."""

        match self:
            case StaffRole.OWNER | StaffRole.MANAGER:
                return True
            case StaffRole.CO_OWNER | StaffRole.CASHIER | StaffRole.MEMBER:
                return False
        raise ValueError(f"Unhandled role: {self!r}")

    def can_void_transactions(self) -> bool:
        match self:
            case StaffRole.OWNER | StaffRole.MANAGER | StaffRole.CASHIER:
                return True
            case StaffRole.CO_OWNER | StaffRole.MEMBER:
                return False
        raise ValueError(f"Unhandled role: {self!r}")
