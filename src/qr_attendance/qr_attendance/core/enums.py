from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceType(str, Enum):
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"

    @classmethod
    def after(cls, previous: Optional["AttendanceType"]) -> "AttendanceType":
        """Alternation rule: next type given the user's most recent one."""
        if previous is None or previous == cls.CHECK_OUT:
            return cls.CHECK_IN
        return cls.CHECK_OUT

    @property
    def label(self) -> str:
        return "Check-in" if self == AttendanceType.CHECK_IN else "Check-out"


class AttendanceStatus(str, Enum):
    """Validity of a scan as stored in the database."""

    VALID = "valid"
    SUSPICIOUS = "suspicious"
    INVALID = "invalid"


class DayStatus(str, Enum):
    """Derived per-day attendance state (never stored)."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"
    INCOMPLETE = "Incomplete"


class TokenState(str, Enum):
    VALID = "valid"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
