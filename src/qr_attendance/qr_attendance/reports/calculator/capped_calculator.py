from __future__ import annotations

from datetime import datetime

from ...core.constants import MAX_DAILY_WORK_HOURS
from .base import WorkHoursCalculator


class CappedWorkHoursCalculator(WorkHoursCalculator):
    """Standard rule: (out - in), kept within [0, cap_hours]."""

    def __init__(self, cap_hours: float = MAX_DAILY_WORK_HOURS):
        self.cap_hours = float(cap_hours)

    def work_hours(self, check_in: datetime, check_out: datetime) -> float:
        hours = (check_out - check_in).total_seconds() / 3600
        return max(0.0, min(hours, self.cap_hours))
