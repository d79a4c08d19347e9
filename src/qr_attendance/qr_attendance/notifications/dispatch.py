from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any, Callable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..users.model import User
from .port import Notifier

logger = logging.getLogger(__name__)


class NotificationDispatcher(Notifier):
    """Best-effort wrapper around another notifier.

    Each send runs on ``executor`` (inline when None). Failures are logged and
    never reach the caller, so a broken mail relay cannot fail a request or
    undo a committed attendance record.
    """

    def __init__(self, inner: Notifier, *, executor: Optional[Executor] = None):
        self._inner = inner
        self._executor = executor

    def send_welcome(self, user: User) -> None:
        self._submit(self._inner.send_welcome, user)

    def send_attendance_confirmation(self, user: User, record: AttendanceRecord) -> None:
        self._submit(self._inner.send_attendance_confirmation, user, record)

    def send_location_alert(self, admin_emails: Sequence[str], user: User, record: AttendanceRecord) -> None:
        self._submit(self._inner.send_location_alert, list(admin_emails), user, record)

    def send_password_reset(self, user: User, reset_url: str) -> None:
        self._submit(self._inner.send_password_reset, user, reset_url)

    def _submit(self, send: Callable[..., None], *args: Any) -> None:
        if self._executor is None:
            self._run(send, *args)
            return
        self._executor.submit(self._run, send, *args)

    @staticmethod
    def _run(send: Callable[..., None], *args: Any) -> None:
        try:
            send(*args)
        except Exception:
            logger.exception("Notification %s failed", getattr(send, "__name__", send))
