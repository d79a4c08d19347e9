from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Sequence

from ..common.datetime_utils import end_of_day, start_of_day
from ..common.geo import GeoPoint
from ..core.enums import AttendanceStatus, AttendanceType
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, HistoryFilter, NewScan
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, user_id, type, timestamp, qr_id, location, ip_address, device_info, status, notes"


def _parse_location(value: Any) -> Optional[GeoPoint]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value)
    return GeoPoint.from_mapping(value)


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        type=AttendanceType(r["type"]),
        timestamp=r["timestamp"],
        qr_id=r["qr_id"],
        status=AttendanceStatus(r["status"]),
        location=_parse_location(r.get("location")),
        ip_address=r.get("ip_address"),
        device_info=r.get("device_info"),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append_scan(self, scan: NewScan) -> AttendanceRecord:
        location_json = json.dumps(scan.location.to_dict()) if scan.location else None

        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock serializes concurrent scans by the same user until commit.
            cur.execute("SELECT last_attendance_type FROM users WHERE user_id=%s FOR UPDATE", (scan.user_id,))
            user_row = fetchone(cur)
            if not user_row:
                raise NotFoundError("User not found")

            previous_value = user_row.get("last_attendance_type")
            if previous_value is None:
                cur.execute(
                    "SELECT type FROM attendance WHERE user_id=%s ORDER BY timestamp DESC, attendance_id DESC LIMIT 1",
                    (scan.user_id,),
                )
                last = fetchone(cur)
                previous_value = last["type"] if last else None

            previous = AttendanceType(previous_value) if previous_value else None
            record_type = AttendanceType.after(previous)

            cur.execute(
                """
                INSERT INTO attendance(user_id, type, timestamp, qr_id, location, ip_address, device_info, status, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    scan.user_id,
                    record_type.value,
                    scan.timestamp,
                    scan.qr_id,
                    location_json,
                    scan.ip_address,
                    scan.device_info,
                    scan.status.value,
                    scan.notes,
                ),
            )
            attendance_id = int(cur.lastrowid)

            cur.execute(
                "UPDATE users SET last_attendance_type=%s WHERE user_id=%s",
                (record_type.value, scan.user_id),
            )

        return AttendanceRecord(
            attendance_id=attendance_id,
            user_id=scan.user_id,
            type=record_type,
            timestamp=scan.timestamp,
            qr_id=scan.qr_id,
            status=scan.status,
            location=scan.location,
            ip_address=scan.ip_address,
            device_info=scan.device_info,
            notes=scan.notes,
        )

    def get_history(self, user_id: int, filters: HistoryFilter) -> Sequence[AttendanceRecord]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]

        if filters.start_date is not None:
            clauses.append("timestamp >= %s")
            params.append(start_of_day(filters.start_date))
        if filters.end_date is not None:
            clauses.append("timestamp <= %s")
            params.append(end_of_day(filters.end_date))
        if filters.type is not None:
            clauses.append("type=%s")
            params.append(filters.type.value)
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE {where}
                ORDER BY timestamp DESC, attendance_id DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_between(
        self,
        *,
        start: datetime,
        end: datetime,
        user_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["timestamp BETWEEN %s AND %s"]
        params: list[object] = [start, end]

        if user_ids is not None:
            ids = [int(u) for u in user_ids]
            if not ids:
                return []
            clauses.append(f"user_id IN ({', '.join(['%s'] * len(ids))})")
            params.extend(ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE {where}
                ORDER BY timestamp ASC, attendance_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
