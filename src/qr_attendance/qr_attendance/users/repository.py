from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User, UserPatch


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, *, patch: UserPatch, password_hash: Optional[str] = None) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_users(self, *, limit: int, offset: int, search: str = "") -> Sequence[User]:
        raise NotImplementedError

    def list_active(self, *, department: Optional[str] = None) -> Sequence[User]:
        raise NotImplementedError

    def list_admin_emails(self) -> Sequence[str]:
        raise NotImplementedError

    def set_reset_token(self, user_id: int, *, token_hash: Optional[str], expires_at: Optional[datetime]) -> bool:
        raise NotImplementedError

    def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        raise NotImplementedError
