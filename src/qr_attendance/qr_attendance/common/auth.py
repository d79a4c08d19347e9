from __future__ import annotations

from functools import wraps
from typing import Optional

from flask_jwt_extended import JWTManager, create_access_token, get_current_user, verify_jwt_in_request

from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import CurrentUser, User
from ..users.repository import UserRepository


def issue_token(user: User) -> str:
    """JWT whose identity is the user id (as string) with the role as an extra claim.

    The claim is informational only: every request reloads the user row and
    takes the role from there.
    """
    return create_access_token(identity=str(user.user_id), additional_claims={"role": user.role.value})


def register_user_loader(jwt: JWTManager, users: UserRepository) -> None:
    @jwt.user_lookup_loader
    def load_user(jwt_header, jwt_data) -> Optional[User]:
        try:
            user_id = int(jwt_data["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        return users.get_by_id(user_id)


def _active_user() -> User:
    user = get_current_user()
    if user is None:
        raise AuthenticationError("User no longer exists")
    if not user.is_active:
        raise AuthenticationError("Your account is deactivated")
    return user


def current_user() -> CurrentUser:
    user = _active_user()
    return CurrentUser(user_id=user.user_id, role=user.role)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        _active_user()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if not current_user().is_admin:
            raise AuthorizationError("Admin access required")
        return view(*args, **kwargs)

    return wrapper
