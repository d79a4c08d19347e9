from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..common.numbers import round_half_up
from ..core.enums import DayStatus


@dataclass(frozen=True)
class DailySummary:
    """Read-model for one calendar day of one user; rebuilt on every query."""

    date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: DayStatus
    work_hours: float = 0.0
    early_departure: bool = False

    @property
    def is_present(self) -> bool:
        return self.status in (DayStatus.PRESENT, DayStatus.LATE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "checkIn": self.check_in.isoformat() if self.check_in else None,
            "checkOut": self.check_out.isoformat() if self.check_out else None,
            "status": self.status.value,
            "workDurationHours": round_half_up(self.work_hours, 1),
            "earlyDeparture": self.early_departure,
        }


@dataclass(frozen=True)
class DayTally:
    present_days: int = 0
    late_days: int = 0
    early_departures: int = 0
    incomplete_days: int = 0
    work_hours: float = 0.0

    @classmethod
    def of(cls, days: List[DailySummary]) -> "DayTally":
        return cls(
            present_days=sum(1 for d in days if d.is_present),
            late_days=sum(1 for d in days if d.status == DayStatus.LATE),
            early_departures=sum(1 for d in days if d.is_present and d.early_departure),
            incomplete_days=sum(1 for d in days if d.status == DayStatus.INCOMPLETE),
            work_hours=sum(d.work_hours for d in days),
        )


@dataclass(frozen=True)
class MonthlySummary:
    month: int
    year: int
    total_days: int
    working_days: int
    present_days: int
    absent_days: int
    late_days: int
    early_departures: int
    incomplete_days: int
    total_work_hours: float
    attendance_rate: int
    daily: List[DailySummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "totalDays": self.total_days,
            "workingDays": self.working_days,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "lateDays": self.late_days,
            "earlyDepartures": self.early_departures,
            "incompleteDays": self.incomplete_days,
            "totalWorkHours": self.total_work_hours,
            "attendanceRate": self.attendance_rate,
            "dailySummary": [d.to_dict() for d in self.daily],
        }


@dataclass(frozen=True)
class UserStats:
    user_id: int
    name: str
    department: Optional[str]
    present_days: int
    absent_days: int
    late_days: int
    early_departures: int
    total_work_hours: float
    attendance_rate: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "name": self.name,
            "department": self.department,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "lateDays": self.late_days,
            "earlyDepartures": self.early_departures,
            "totalWorkHours": self.total_work_hours,
            "attendanceRate": self.attendance_rate,
        }


@dataclass(frozen=True)
class DepartmentStats:
    total_users: int
    present_days: int
    absent_days: int
    late_days: int
    attendance_rate: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalUsers": self.total_users,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "lateDays": self.late_days,
            "attendanceRate": self.attendance_rate,
        }


@dataclass(frozen=True)
class StatsReport:
    start_date: date
    end_date: date
    working_days: int
    total_users: int
    present_days: int
    absent_days: int
    attendance_rate: int
    departments: Dict[str, DepartmentStats]
    users: List[UserStats]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": {
                "startDate": self.start_date.isoformat(),
                "endDate": self.end_date.isoformat(),
                "workingDays": self.working_days,
            },
            "overall": {
                "totalUsers": self.total_users,
                "attendanceRate": self.attendance_rate,
                "presentDays": self.present_days,
                "absentDays": self.absent_days,
            },
            "departments": {name: d.to_dict() for name, d in self.departments.items()},
            "users": [u.to_dict() for u in self.users],
        }
