from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import count_working_days, end_of_day, month_bounds, now_local, start_of_day
from ..common.numbers import percentage, round_half_up
from ..common.permissions import require_admin, require_self_or_admin
from ..core.constants import UNASSIGNED_DEPARTMENT
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .calculator.base import WorkHoursCalculator
from .calculator.capped_calculator import CappedWorkHoursCalculator
from .daily import summarize_days
from .model import DayTally, DepartmentStats, MonthlySummary, StatsReport, UserStats


class AttendanceReportService:
    """Monthly summaries and period statistics, recomputed from stored scans.

    Read-only: identical inputs over an unchanged record set give identical output.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        calculator: Optional[WorkHoursCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._calculator = calculator or CappedWorkHoursCalculator()
        self._clock = clock

    def summarize(
        self,
        user_id: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
        *,
        actor: Optional[CurrentUser] = None,
    ) -> MonthlySummary:
        if actor is not None:
            require_self_or_admin(actor, user_id)

        today = self._clock().date()
        month = int(month) if month is not None else today.month
        year = int(year) if year is not None else today.year
        start, end = month_bounds(year, month)

        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("User not found")

        records = self._attendance.list_between(
            start=start_of_day(start),
            end=end_of_day(end),
            user_ids=[int(user_id)],
        )
        daily = summarize_days(records, start=start, end=end, calculator=self._calculator)
        tally = DayTally.of(daily)
        working_days = count_working_days(start, end)

        return MonthlySummary(
            month=month,
            year=year,
            total_days=end.day,
            working_days=working_days,
            present_days=tally.present_days,
            absent_days=max(working_days - tally.present_days, 0),
            late_days=tally.late_days,
            early_departures=tally.early_departures,
            incomplete_days=tally.incomplete_days,
            total_work_hours=round_half_up(tally.work_hours, 1),
            attendance_rate=percentage(tally.present_days, working_days),
            daily=daily,
        )

    def stats_for_period(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        department: Optional[str] = None,
        *,
        actor: Optional[CurrentUser] = None,
    ) -> StatsReport:
        if actor is not None:
            require_admin(actor, "Only admins can access attendance statistics")

        today = self._clock().date()
        month_start, month_end = month_bounds(today.year, today.month)
        start = start_date or month_start
        end = end_date or month_end
        if start > end:
            raise ValidationError("startDate must not be after endDate")

        users = list(self._users.list_active(department=department or None))
        records = self._attendance.list_between(
            start=start_of_day(start),
            end=end_of_day(end),
            user_ids=[u.user_id for u in users],
        )
        working_days = count_working_days(start, end)

        by_user: Dict[int, List[AttendanceRecord]] = defaultdict(list)
        for r in records:
            by_user[r.user_id].append(r)

        user_stats: List[UserStats] = []
        for user in users:
            daily = summarize_days(by_user.get(user.user_id, []), start=start, end=end, calculator=self._calculator)
            tally = DayTally.of(daily)
            user_stats.append(
                UserStats(
                    user_id=user.user_id,
                    name=user.name,
                    department=user.department,
                    present_days=tally.present_days,
                    absent_days=max(working_days - tally.present_days, 0),
                    late_days=tally.late_days,
                    early_departures=tally.early_departures,
                    total_work_hours=round_half_up(tally.work_hours, 1),
                    attendance_rate=percentage(tally.present_days, working_days),
                )
            )

        grouped: Dict[str, List[UserStats]] = defaultdict(list)
        for s in user_stats:
            grouped[s.department or UNASSIGNED_DEPARTMENT].append(s)

        departments = {
            name: DepartmentStats(
                total_users=len(members),
                present_days=sum(m.present_days for m in members),
                absent_days=sum(m.absent_days for m in members),
                late_days=sum(m.late_days for m in members),
                attendance_rate=percentage(sum(m.present_days for m in members), len(members) * working_days),
            )
            for name, members in sorted(grouped.items())
        }

        total_present = sum(s.present_days for s in user_stats)
        return StatsReport(
            start_date=start,
            end_date=end,
            working_days=working_days,
            total_users=len(users),
            present_days=total_present,
            absent_days=sum(s.absent_days for s in user_stats),
            attendance_rate=percentage(total_present, len(users) * working_days),
            departments=departments,
            users=user_stats,
        )
