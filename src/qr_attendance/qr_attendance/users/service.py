from __future__ import annotations

import hashlib
import secrets
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_email, require_min_length, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PASSWORD_MIN_LENGTH, PASSWORD_RESET_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..notifications.port import Notifier
from .model import CurrentUser, User, UserPatch
from .repository import UserRepository


def _hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """Use cases: register, login, password reset."""

    def __init__(
        self,
        users: UserRepository,
        notifier: Notifier,
        *,
        reset_url_base: str = "http://localhost:5000",
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._notifier = notifier
        self._reset_url_base = reset_url_base.rstrip("/")
        self._clock = clock

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> User:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", PASSWORD_MIN_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("A user with this email already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.EMPLOYEE,
            department=optional_text(department, "Department"),
            position=optional_text(position, "Position"),
        )
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found after registration")

        self._notifier.send_welcome(user)
        return user

    def authenticate(self, email: str, password: str) -> User:
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthenticationError("Invalid email or password")
        user = self._users.get_by_email(email.strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return user

    def forgot_password(self, email: str) -> str:
        """Store a one-time reset token and email the link. Returns the raw token."""
        user = self._users.get_by_email(require_email(email))
        if not user:
            raise NotFoundError("There is no user with that email")

        token = secrets.token_hex(20)
        expires_at = self._clock() + timedelta(minutes=PASSWORD_RESET_MINUTES)
        self._users.set_reset_token(user.user_id, token_hash=_hash_reset_token(token), expires_at=expires_at)

        self._notifier.send_password_reset(user, f"{self._reset_url_base}/reset-password/{token}")
        return token

    def reset_password(self, token: str, new_password: str) -> User:
        require_min_length(new_password, "Password", PASSWORD_MIN_LENGTH)
        if not isinstance(token, str) or not token:
            raise ValidationError("Invalid or expired reset token")

        user = self._users.get_by_reset_token(_hash_reset_token(token))
        if not user or not user.reset_token_expires or self._clock() > user.reset_token_expires:
            raise ValidationError("Invalid or expired reset token")

        self._users.update_user(user.user_id, patch=UserPatch(), password_hash=generate_password_hash(new_password))
        self._users.set_reset_token(user.user_id, token_hash=None, expires_at=None)
        return user


class UserService:
    """Use cases: profile and (admin) user management."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, *, page: int = 1, limit: int = DEFAULT_PAGE_SIZE, search: str = "") -> Sequence[User]:
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_PAGE_SIZE)
        return self._users.list_users(limit=limit, offset=(page - 1) * limit, search=(search or "").strip())

    def update_profile(self, user_id: int, patch: UserPatch) -> User:
        """Self-service update: name, department, position, password only."""
        if patch.email is not None or patch.role is not None or patch.is_active is not None:
            raise AuthorizationError("Only admins can change email, role or active status")
        return self._apply(user_id, patch)

    def update_user(self, actor: CurrentUser, user_id: int, patch: UserPatch) -> User:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can update other users")
        if actor.user_id == int(user_id) and (patch.role not in (None, Role.ADMIN) or patch.is_active is False):
            raise ValidationError("You cannot demote or deactivate your own account")
        return self._apply(user_id, patch)

    def delete_user(self, actor: CurrentUser, user_id: int) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can delete users")
        if actor.user_id == int(user_id):
            raise ValidationError("You cannot delete your own account")

        self.get_user(user_id)
        if not self._users.delete_by_id(int(user_id)):
            raise ValidationError("Failed to delete user")

    def _apply(self, user_id: int, patch: UserPatch) -> User:
        current = self.get_user(user_id)
        if patch.is_empty():
            raise ValidationError("Nothing to update")

        if patch.name is not None:
            patch = replace(patch, name=require_non_empty(patch.name, "Name"))
        if patch.email is not None:
            email = require_email(patch.email)
            other = self._users.get_by_email(email)
            if other and other.user_id != current.user_id:
                raise ValidationError("A user with this email already exists")
            patch = replace(patch, email=email)
        if patch.department is not None:
            patch = replace(patch, department=optional_text(patch.department, "Department") or "")
        if patch.position is not None:
            patch = replace(patch, position=optional_text(patch.position, "Position") or "")

        password_hash = None
        if patch.password is not None:
            require_min_length(patch.password, "Password", PASSWORD_MIN_LENGTH)
            password_hash = generate_password_hash(patch.password)

        self._users.update_user(current.user_id, patch=replace(patch, password=None), password_hash=password_hash)
        return self.get_user(current.user_id)
