from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import iter_days
from ..core.constants import WORK_END, WORK_START_LATE_AFTER
from ..core.enums import AttendanceType, DayStatus
from .calculator.base import WorkHoursCalculator
from .model import DailySummary


def _is_late(check_in: datetime) -> bool:
    # Minute resolution: 09:15:59 is still on time.
    return check_in.time().replace(second=0, microsecond=0) > WORK_START_LATE_AFTER


def summarize_day(day: date, records: List[AttendanceRecord], calculator: WorkHoursCalculator) -> DailySummary:
    """Classify one day from its records (oldest first)."""
    check_ins = [r.timestamp for r in records if r.type == AttendanceType.CHECK_IN]
    check_outs = [r.timestamp for r in records if r.type == AttendanceType.CHECK_OUT]

    first_in = check_ins[0] if check_ins else None
    last_out = check_outs[-1] if check_outs else None

    if first_in is not None and last_out is not None:
        return DailySummary(
            date=day,
            check_in=first_in,
            check_out=last_out,
            status=DayStatus.LATE if _is_late(first_in) else DayStatus.PRESENT,
            work_hours=calculator.work_hours(first_in, last_out),
            early_departure=last_out.time() < WORK_END,
        )

    if first_in is not None:
        return DailySummary(date=day, check_in=first_in, check_out=None, status=DayStatus.INCOMPLETE)

    return DailySummary(date=day, check_in=None, check_out=last_out, status=DayStatus.ABSENT)


def summarize_days(
    records: Iterable[AttendanceRecord],
    *,
    start: date,
    end: date,
    calculator: WorkHoursCalculator,
) -> List[DailySummary]:
    """One DailySummary per calendar day in [start, end]."""
    by_day: Dict[date, List[AttendanceRecord]] = defaultdict(list)
    for r in sorted(records, key=lambda r: (r.timestamp, r.attendance_id)):
        by_day[r.timestamp.date()].append(r)

    return [summarize_day(day, by_day.get(day, []), calculator) for day in iter_days(start, end)]
