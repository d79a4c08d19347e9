from __future__ import annotations

import csv
import io

from .model import StatsReport

STATS_CSV_FIELDS = [
    "user_id",
    "name",
    "department",
    "present_days",
    "absent_days",
    "late_days",
    "early_departures",
    "total_work_hours",
    "attendance_rate",
]


def stats_to_csv(report: StatsReport) -> bytes:
    """Per-user statistics as CSV (UTF-8 with BOM so Excel detects the encoding)."""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=STATS_CSV_FIELDS)
    writer.writeheader()
    for u in report.users:
        writer.writerow(
            {
                "user_id": u.user_id,
                "name": u.name,
                "department": u.department or "",
                "present_days": u.present_days,
                "absent_days": u.absent_days,
                "late_days": u.late_days,
                "early_departures": u.early_departures,
                "total_work_hours": u.total_work_hours,
                "attendance_rate": u.attendance_rate,
            }
        )
    return out.getvalue().encode("utf-8-sig")
