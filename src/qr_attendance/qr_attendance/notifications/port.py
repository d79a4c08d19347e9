from __future__ import annotations

from typing import Protocol, Sequence

from ..attendance.model import AttendanceRecord
from ..users.model import User


class Notifier(Protocol):
    """Outbound notification port. Email delivery lives behind it."""

    def send_welcome(self, user: User) -> None:
        raise NotImplementedError

    def send_attendance_confirmation(self, user: User, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def send_location_alert(self, admin_emails: Sequence[str], user: User, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def send_password_reset(self, user: User, reset_url: str) -> None:
        raise NotImplementedError
