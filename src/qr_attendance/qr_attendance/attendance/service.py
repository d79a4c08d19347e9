from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from ..common.datetime_utils import now_local
from ..common.geo import GeoFence, GeoPoint
from ..common.permissions import require_self_or_admin
from ..common.validators import optional_text
from ..core.enums import AttendanceStatus, TokenState
from ..core.exceptions import AuthorizationError, NotFoundError, TokenError
from ..notifications.port import Notifier
from ..qr.store import QRSessionStore
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, HistoryFilter, NewScan, ScanResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

LocationInput = Union[GeoPoint, Mapping[str, Any], None]


class AttendanceService:
    """Use case: record QR scans and read a user's attendance history."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        qr_store: QRSessionStore,
        notifier: Notifier,
        *,
        fence: Optional[GeoFence] = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._qr_store = qr_store
        self._notifier = notifier
        self._fence = fence
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock

    def record_scan(
        self,
        *,
        user_id: int,
        token_id: Optional[str],
        location: LocationInput = None,
        device_info: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> ScanResult:
        token_id = token_id.strip() if isinstance(token_id, str) else ""
        if not token_id:
            raise TokenError("QR code ID is required")

        validation = self._qr_store.consume(token_id)
        if validation.state == TokenState.NOT_FOUND:
            raise TokenError("Invalid or expired QR code")
        if validation.state == TokenState.EXPIRED:
            raise TokenError("QR code has expired")

        point = location if isinstance(location, GeoPoint) else GeoPoint.from_mapping(location)

        # The token is spent only once the scan is stored.
        try:
            user = self._users.get_by_id(int(user_id))
            if not user:
                raise NotFoundError("User not found")
            if not user.is_active:
                raise AuthorizationError("Your account is deactivated")

            strategy = self._factory.for_scan(location=point, fence=self._fence)
            decision = strategy.decide(location=point, fence=self._fence)

            admin_emails: Sequence[str] = ()
            if decision.status == AttendanceStatus.SUSPICIOUS:
                admin_emails = self._users.list_admin_emails()

            record = self._attendance.append_scan(
                NewScan(
                    user_id=user.user_id,
                    timestamp=self._clock(),
                    qr_id=token_id,
                    status=decision.status,
                    location=point,
                    ip_address=client_ip,
                    device_info=optional_text(device_info, "deviceInfo"),
                    notes=decision.note,
                )
            )
        except Exception:
            self._qr_store.restore(validation.token)
            raise

        if record.status == AttendanceStatus.SUSPICIOUS:
            logger.warning(
                "Suspicious %s by user %s at %s (record %s)",
                record.type.value,
                user.user_id,
                point.to_dict() if point else None,
                record.attendance_id,
            )
            if admin_emails:
                self._notifier.send_location_alert(admin_emails, user, record)

        self._notifier.send_attendance_confirmation(user, record)

        return ScanResult(record=record, message=f"{record.type.label} successful")

    def get_history(
        self,
        actor: CurrentUser,
        user_id: Optional[int] = None,
        filters: Optional[HistoryFilter] = None,
    ) -> Sequence[AttendanceRecord]:
        target = actor.user_id if user_id is None else int(user_id)
        require_self_or_admin(actor, target)

        if target != actor.user_id and not self._users.get_by_id(target):
            raise NotFoundError("User not found")

        return self._attendance.get_history(target, filters or HistoryFilter())
