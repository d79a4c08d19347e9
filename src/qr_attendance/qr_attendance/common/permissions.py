from __future__ import annotations

from ..core.exceptions import AuthorizationError
from ..users.model import CurrentUser


def require_admin(actor: CurrentUser, message: str = "Admin access required") -> None:
    if not actor.is_admin:
        raise AuthorizationError(message)


def require_self_or_admin(actor: CurrentUser, user_id: int) -> None:
    if int(user_id) != actor.user_id and not actor.is_admin:
        raise AuthorizationError("You can only access your own attendance records")
