from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .common.geo import GeoFence, GeoPoint
from .core.constants import DEFAULT_QR_TOKEN_TTL_MS
from .database.connection import DatabaseConnection, DBConfig
from .notifications.dispatch import NotificationDispatcher
from .notifications.logging_notifier import LoggingNotifier
from .notifications.port import Notifier
from .notifications.smtp_notifier import SMTPConfig, SMTPNotifier
from .qr.service import QRCodeService
from .qr.store import QRSessionStore
from .reports.service import AttendanceReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    qr_store: QRSessionStore
    notifier: Notifier

    auth_service: AuthService
    user_service: UserService
    qr_service: QRCodeService
    attendance_service: AttendanceService
    report_service: AttendanceReportService

    conn: Optional[DatabaseConnection] = None


def office_fence(settings: Any) -> Optional[GeoFence]:
    """Geofence from settings; None (every location trusted) unless both office coordinates are set."""
    center = GeoPoint.from_mapping(
        {
            "latitude": getattr(settings, "OFFICE_LATITUDE", None),
            "longitude": getattr(settings, "OFFICE_LONGITUDE", None),
        }
    )
    if center is None:
        return None
    return GeoFence(center=center, max_distance_meters=float(getattr(settings, "MAX_DISTANCE_METERS", 100)))


def build_notifier(email_config: Mapping[str, Any], *, executor=None) -> Notifier:
    host = str(email_config.get("host") or "").strip()
    if host:
        inner: Notifier = SMTPNotifier(
            SMTPConfig(
                host=host,
                port=int(email_config.get("port", 587)),
                use_tls=bool(email_config.get("use_tls", True)),
                user=email_config.get("user") or None,
                password=email_config.get("password") or None,
                from_name=str(email_config.get("from_name") or "Attendance System"),
                from_address=str(email_config.get("from_address") or "no-reply@localhost"),
            )
        )
    else:
        inner = LoggingNotifier()
    return NotificationDispatcher(inner, executor=executor)


def assemble(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    notifier: Notifier,
    qr_store: Optional[QRSessionStore] = None,
    fence: Optional[GeoFence] = None,
    reset_url_base: str = "http://localhost:5000",
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    if qr_store is None:
        qr_store = QRSessionStore(clock=clock)

    return Container(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        qr_store=qr_store,
        notifier=notifier,
        auth_service=AuthService(users_repo, notifier, reset_url_base=reset_url_base, clock=clock),
        user_service=UserService(users_repo),
        qr_service=QRCodeService(qr_store),
        attendance_service=AttendanceService(
            attendance_repo,
            users_repo,
            qr_store,
            notifier,
            fence=fence,
            strategy_factory=AttendanceStrategyFactory(),
            clock=clock,
        ),
        report_service=AttendanceReportService(attendance_repo, users_repo, clock=clock),
        conn=conn,
    )


def build_container(*, db_config: Mapping[str, Any], settings: Any) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="notify")

    return assemble(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notifier=build_notifier(getattr(settings, "EMAIL_CONFIG", {}) or {}, executor=executor),
        qr_store=QRSessionStore(ttl_ms=int(getattr(settings, "QR_TOKEN_TTL_MS", DEFAULT_QR_TOKEN_TTL_MS))),
        fence=office_fence(settings),
        reset_url_base=str(getattr(settings, "APP_BASE_URL", "http://localhost:5000")),
        conn=conn,
    )
