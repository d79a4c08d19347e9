from __future__ import annotations

import re
from typing import Any, Optional

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _require_text(value: Any, field_name: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None:
        raise ValidationError(f"{field_name} is required")
    _require_text(value, field_name)
    if not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is not None:
        _require_text(value, field_name)
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: Optional[str]) -> str:
    email = require_non_empty(value, "Email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Email is not valid")
    return email


def optional_text(value: Optional[str], field_name: str = "Value") -> Optional[str]:
    if value is None:
        return None
    _require_text(value, field_name)
    value = value.strip()
    return value or None
