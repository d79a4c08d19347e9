from __future__ import annotations

import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_QR_TOKEN_TTL_MS, QR_TOKEN_BYTES
from ..core.enums import TokenState
from .model import QRToken, TokenValidation


class QRSessionStore:
    """In-memory registry of live QR tokens.

    One instance is built per process by the container and shared by the
    issuing and scanning request threads; every accessor holds ``_lock``.
    A token is expired only when ``now > expires_at``.
    """

    def __init__(
        self,
        *,
        ttl_ms: int = DEFAULT_QR_TOKEN_TTL_MS,
        clock: Callable[[], datetime] = now_local,
        token_factory: Callable[[], str] | None = None,
    ):
        self._ttl = timedelta(milliseconds=int(ttl_ms))
        self._clock = clock
        self._token_factory = token_factory or (lambda: secrets.token_hex(QR_TOKEN_BYTES))
        self._tokens: Dict[str, QRToken] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def issue(self, admin_id: int) -> QRToken:
        with self._lock:
            token_id = self._token_factory()
            while token_id in self._tokens:
                token_id = self._token_factory()

            created_at = self._clock()
            token = QRToken(
                id=token_id,
                created_at=created_at,
                expires_at=created_at + self._ttl,
                created_by=int(admin_id),
            )
            self._tokens[token_id] = token
            return token

    def validate(self, token_id: str) -> TokenValidation:
        with self._lock:
            return self._check(token_id, consume=False)

    def consume(self, token_id: str) -> TokenValidation:
        """Validate and, when valid, remove the token in the same critical section."""
        with self._lock:
            return self._check(token_id, consume=True)

    def restore(self, token: QRToken) -> None:
        """Put back a consumed token whose scan could not be stored.

        An id that was re-issued in the meantime is left alone; expiry is still
        checked on the next lookup.
        """
        with self._lock:
            self._tokens.setdefault(token.id, token)

    def sweep_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [tid for tid, t in self._tokens.items() if now > t.expires_at]
            for tid in expired:
                del self._tokens[tid]
            return len(expired)

    def _check(self, token_id: str, *, consume: bool) -> TokenValidation:
        token = self._tokens.get(token_id)
        if token is None:
            return TokenValidation(state=TokenState.NOT_FOUND)

        if self._clock() > token.expires_at:
            del self._tokens[token_id]
            return TokenValidation(state=TokenState.EXPIRED)

        if consume:
            del self._tokens[token_id]
        return TokenValidation(state=TokenState.VALID, token=token)
