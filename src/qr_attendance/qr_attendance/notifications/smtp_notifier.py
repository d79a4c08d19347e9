from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..core.constants import PASSWORD_RESET_MINUTES
from ..core.exceptions import NotificationError
from ..users.model import User
from . import templates
from .port import Notifier


@dataclass(frozen=True)
class SMTPConfig:
    host: str
    port: int = 587
    use_tls: bool = True
    user: Optional[str] = None
    password: Optional[str] = None
    from_name: str = "Attendance System"
    from_address: str = "no-reply@localhost"
    timeout: float = 10.0


class SMTPNotifier(Notifier):
    """Sends HTML emails through a plain SMTP relay. One connection per message."""

    def __init__(self, config: SMTPConfig):
        self._config = config

    def send_welcome(self, user: User) -> None:
        self._send([user.email], *templates.welcome(user))

    def send_attendance_confirmation(self, user: User, record: AttendanceRecord) -> None:
        self._send([user.email], *templates.attendance_confirmation(user, record))

    def send_location_alert(self, admin_emails: Sequence[str], user: User, record: AttendanceRecord) -> None:
        if not admin_emails:
            return
        self._send(list(admin_emails), *templates.location_alert(user, record))

    def send_password_reset(self, user: User, reset_url: str) -> None:
        self._send([user.email], *templates.password_reset(user, reset_url, expires_minutes=PASSWORD_RESET_MINUTES))

    def build_message(self, recipients: Sequence[str], subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((self._config.from_name, self._config.from_address))
        msg["To"] = ", ".join(recipients)
        msg.set_content("This message requires an HTML capable email client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _send(self, recipients: Sequence[str], subject: str, html: str) -> None:
        msg = self.build_message(recipients, subject, html)
        cfg = self._config
        try:
            with smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout) as smtp:
                if cfg.use_tls:
                    smtp.starttls()
                if cfg.user:
                    smtp.login(cfg.user, cfg.password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Email '{subject}' to {', '.join(recipients)} failed: {e}") from e
