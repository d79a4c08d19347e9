from __future__ import annotations

import logging
from typing import Callable

from ..common.permissions import require_admin
from ..users.model import CurrentUser
from .image import render_data_url
from .model import IssuedQRCode
from .store import QRSessionStore

logger = logging.getLogger(__name__)


class QRCodeService:
    """Use case: admin issues a scannable attendance QR code."""

    def __init__(self, store: QRSessionStore, *, renderer: Callable[[str], str] = render_data_url):
        self._store = store
        self._render = renderer

    def generate(self, actor: CurrentUser) -> IssuedQRCode:
        require_admin(actor, "Only admins can generate QR codes")

        token = self._store.issue(actor.user_id)
        image = self._render(token.id)

        swept = self._store.sweep_expired()
        if swept:
            logger.debug("Swept %d expired QR tokens", swept)
        logger.info("QR token issued by user %s, expires at %s", actor.user_id, token.expires_at.isoformat())

        return IssuedQRCode(qr_id=token.id, qr_image=image, expires_at=token.expires_at)
