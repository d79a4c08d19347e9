from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..common.geo import GeoPoint
from ..core.enums import AttendanceStatus, AttendanceType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: a single check-in or check-out scan. Immutable once stored."""

    attendance_id: int
    user_id: int
    type: AttendanceType
    timestamp: datetime
    qr_id: str
    status: AttendanceStatus
    location: Optional[GeoPoint] = None
    ip_address: Optional[str] = None
    device_info: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.attendance_id,
            "userId": self.user_id,
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "qrId": self.qr_id,
            "location": self.location.to_dict() if self.location else None,
            "ipAddress": self.ip_address,
            "deviceInfo": self.device_info,
            "status": self.status.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class NewScan:
    """Everything needed to insert a scan except its type, which the repository decides."""

    user_id: int
    timestamp: datetime
    qr_id: str
    status: AttendanceStatus
    location: Optional[GeoPoint] = None
    ip_address: Optional[str] = None
    device_info: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class HistoryFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type: Optional[AttendanceType] = None
    status: Optional[AttendanceStatus] = None


@dataclass(frozen=True)
class ScanResult:
    record: AttendanceRecord
    message: str
