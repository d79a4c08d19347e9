from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; no database access code here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    reset_token_hash: Optional[str] = None
    reset_token_expires: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
            "position": self.position,
            "active": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller, as decoded from the JWT."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class UserPatch:
    """Partial update. ``None`` means "leave unchanged"."""

    name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    password: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        """Changed columns, excluding the password (hashed by the service)."""
        out = {k: v for k, v in asdict(self).items() if v is not None and k != "password"}
        if "role" in out:
            out["role"] = self.role.value
        return out

    def is_empty(self) -> bool:
        return not self.changes() and self.password is None
