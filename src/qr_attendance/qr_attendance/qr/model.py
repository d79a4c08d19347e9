from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import TokenState


@dataclass(frozen=True)
class QRToken:
    """Short-lived QR session; lives in memory only."""

    id: str
    created_at: datetime
    expires_at: datetime
    created_by: int


@dataclass(frozen=True)
class TokenValidation:
    state: TokenState
    token: Optional[QRToken] = None

    @property
    def created_by(self) -> Optional[int]:
        return self.token.created_by if self.token else None

    @property
    def valid(self) -> bool:
        return self.state == TokenState.VALID


@dataclass(frozen=True)
class IssuedQRCode:
    qr_id: str
    qr_image: str
    expires_at: datetime
