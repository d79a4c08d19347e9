from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.qr_attendance.qr_attendance.attendance.model import AttendanceRecord, HistoryFilter, NewScan
from src.qr_attendance.qr_attendance.common.datetime_utils import end_of_day, start_of_day
from src.qr_attendance.qr_attendance.common.geo import GeoFence, GeoPoint
from src.qr_attendance.qr_attendance.container import assemble
from src.qr_attendance.qr_attendance.core.enums import AttendanceStatus, AttendanceType, Role
from src.qr_attendance.qr_attendance.core.exceptions import NotFoundError, NotificationError
from src.qr_attendance.qr_attendance.notifications.dispatch import NotificationDispatcher
from src.qr_attendance.qr_attendance.qr.store import QRSessionStore
from src.qr_attendance.qr_attendance.users.model import User, UserPatch


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class InMemoryUsers:
    def __init__(self):
        self.users: Dict[int, User] = {}
        self._id = 0

    def add(
        self,
        *,
        name: str = "Alice",
        email: Optional[str] = None,
        password: str = "secret1",
        role: Role = Role.EMPLOYEE,
        department: Optional[str] = None,
        position: Optional[str] = None,
        is_active: bool = True,
    ) -> User:
        user_id = self.create_user(
            name=name,
            email=email or f"{name.lower()}@example.com",
            password_hash=generate_password_hash(password),
            role=role,
            department=department,
            position=position,
        )
        if not is_active:
            self.users[user_id] = replace(self.users[user_id], is_active=False)
        return self.users[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, name, email, password_hash, role, department=None, position=None) -> int:
        self._id += 1
        self.users[self._id] = User(
            user_id=self._id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            department=department,
            position=position,
            created_at=datetime(2024, 1, 1, 8, 0),
        )
        return self._id

    def update_user(self, user_id: int, *, patch: UserPatch, password_hash: Optional[str] = None) -> bool:
        changes = patch.changes()
        if "role" in changes:
            changes["role"] = Role(changes["role"])
        if password_hash is not None:
            changes["password_hash"] = password_hash
        self.users[user_id] = replace(self.users[user_id], **changes)
        return True

    def delete_by_id(self, user_id: int) -> bool:
        return self.users.pop(user_id, None) is not None

    def list_users(self, *, limit: int, offset: int, search: str = ""):
        needle = search.lower()
        found = [
            u
            for u in sorted(self.users.values(), key=lambda u: u.user_id)
            if not needle or needle in u.name.lower() or needle in u.email.lower()
        ]
        return found[offset : offset + limit]

    def list_active(self, *, department: Optional[str] = None):
        return [
            u
            for u in sorted(self.users.values(), key=lambda u: u.user_id)
            if u.is_active and (department is None or u.department == department)
        ]

    def list_admin_emails(self):
        return [u.email for u in self.users.values() if u.is_admin and u.is_active]

    def set_reset_token(self, user_id: int, *, token_hash, expires_at) -> bool:
        self.users[user_id] = replace(self.users[user_id], reset_token_hash=token_hash, reset_token_expires=expires_at)
        return True

    def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.reset_token_hash == token_hash), None)


class InMemoryAttendance:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.records: List[AttendanceRecord] = []

    def _last_for_user(self, user_id: int) -> Optional[AttendanceRecord]:
        mine = [r for r in self.records if r.user_id == user_id]
        return mine[-1] if mine else None

    def append_scan(self, scan: NewScan) -> AttendanceRecord:
        if not self._users.get_by_id(scan.user_id):
            raise NotFoundError("User not found")
        last = self._last_for_user(scan.user_id)
        record = AttendanceRecord(
            attendance_id=len(self.records) + 1,
            user_id=scan.user_id,
            type=AttendanceType.after(last.type if last else None),
            timestamp=scan.timestamp,
            qr_id=scan.qr_id,
            status=scan.status,
            location=scan.location,
            ip_address=scan.ip_address,
            device_info=scan.device_info,
            notes=scan.notes,
        )
        self.records.append(record)
        return record

    def add(self, user_id: int, type: AttendanceType, timestamp: datetime, **kwargs) -> AttendanceRecord:
        record = AttendanceRecord(
            attendance_id=len(self.records) + 1,
            user_id=user_id,
            type=type,
            timestamp=timestamp,
            qr_id=kwargs.pop("qr_id", f"qr-{len(self.records) + 1}"),
            status=kwargs.pop("status", AttendanceStatus.VALID),
            **kwargs,
        )
        self.records.append(record)
        return record

    def get_history(self, user_id: int, filters: HistoryFilter):
        out = [r for r in self.records if r.user_id == user_id]
        if filters.start_date is not None:
            out = [r for r in out if r.timestamp >= start_of_day(filters.start_date)]
        if filters.end_date is not None:
            out = [r for r in out if r.timestamp <= end_of_day(filters.end_date)]
        if filters.type is not None:
            out = [r for r in out if r.type == filters.type]
        if filters.status is not None:
            out = [r for r in out if r.status == filters.status]
        return sorted(out, key=lambda r: (r.timestamp, r.attendance_id), reverse=True)

    def list_between(self, *, start: datetime, end: datetime, user_ids=None):
        ids = None if user_ids is None else set(user_ids)
        out = [r for r in self.records if start <= r.timestamp <= end and (ids is None or r.user_id in ids)]
        return sorted(out, key=lambda r: (r.timestamp, r.attendance_id))


class RecordingNotifier:
    def __init__(self):
        self.sent: List[tuple] = []

    def send_welcome(self, user):
        self.sent.append(("welcome", user.email))

    def send_attendance_confirmation(self, user, record):
        self.sent.append(("confirmation", user.email, record.type))

    def send_location_alert(self, admin_emails, user, record):
        self.sent.append(("location_alert", tuple(admin_emails), user.email))

    def send_password_reset(self, user, reset_url):
        self.sent.append(("password_reset", user.email, reset_url))

    def kinds(self) -> List[str]:
        return [s[0] for s in self.sent]


class FailingNotifier:
    def _fail(self, *args):
        raise NotificationError("SMTP relay unavailable")

    send_welcome = _fail
    send_attendance_confirmation = _fail
    send_location_alert = _fail
    send_password_reset = _fail


@pytest.fixture
def clock():
    return Clock(datetime(2024, 6, 10, 8, 55))


@pytest.fixture
def users():
    return InMemoryUsers()


@pytest.fixture
def attendance(users):
    return InMemoryAttendance(users)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def qr_store(clock):
    return QRSessionStore(ttl_ms=30_000, clock=clock)


@pytest.fixture
def office():
    return GeoFence(center=GeoPoint(latitude=0.0, longitude=0.0), max_distance_meters=100)


@pytest.fixture
def container(users, attendance, notifier, qr_store, office, clock):
    return assemble(
        users_repo=users,
        attendance_repo=attendance,
        notifier=NotificationDispatcher(notifier),
        qr_store=qr_store,
        fence=office,
        reset_url_base="http://testserver",
        clock=clock,
    )


@pytest.fixture
def admin(users):
    return users.add(name="Admin", email="admin@example.com", role=Role.ADMIN, department="Administration")


@pytest.fixture
def employee(users):
    return users.add(name="Bob", email="bob@example.com", department="Engineering")
