from __future__ import annotations

import logging
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..core.constants import PASSWORD_RESET_MINUTES
from ..users.model import User
from . import templates
from .port import Notifier

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):
    """Used when no SMTP host is configured (development, CI)."""

    def send_welcome(self, user: User) -> None:
        self._log([user.email], templates.welcome(user)[0])

    def send_attendance_confirmation(self, user: User, record: AttendanceRecord) -> None:
        self._log([user.email], templates.attendance_confirmation(user, record)[0])

    def send_location_alert(self, admin_emails: Sequence[str], user: User, record: AttendanceRecord) -> None:
        self._log(admin_emails, templates.location_alert(user, record)[0])

    def send_password_reset(self, user: User, reset_url: str) -> None:
        subject = templates.password_reset(user, reset_url, expires_minutes=PASSWORD_RESET_MINUTES)[0]
        self._log([user.email], f"{subject} ({reset_url})")

    def _log(self, recipients: Sequence[str], subject: str) -> None:
        logger.info("email to=%s subject=%r", ",".join(recipients), subject)
