from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from flask import Flask, jsonify, request

from ..common.auth import current_user, login_required
from ..common.datetime_utils import parse_optional_date
from ..core.enums import AttendanceStatus, AttendanceType
from ..core.exceptions import ValidationError
from ..container import Container
from ..reports.export import stats_to_csv
from .model import HistoryFilter

E = TypeVar("E", AttendanceType, AttendanceStatus)


def _client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def _enum_arg(name: str, enum_cls: Type[E]) -> Optional[E]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{name} must be one of: {allowed}")


def _int_arg(name: str) -> Optional[int]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/qrcode", methods=["GET"], endpoint="attendance_qrcode")
    @login_required
    def attendance_qrcode():
        issued = container.qr_service.generate(current_user())
        return jsonify(
            {
                "success": True,
                "qrId": issued.qr_id,
                "qrImage": issued.qr_image,
                "expiresAt": issued.expires_at.isoformat(),
            }
        )

    @app.route("/attendance/scan", methods=["POST"], endpoint="attendance_scan")
    @login_required
    def attendance_scan():
        data = request.get_json(silent=True)
        data = data if isinstance(data, dict) else {}
        location: Any = data.get("location")

        result = container.attendance_service.record_scan(
            user_id=current_user().user_id,
            token_id=data.get("qrId"),
            location=location if isinstance(location, dict) else None,
            device_info=data.get("deviceInfo") or request.headers.get("User-Agent"),
            client_ip=_client_ip(),
        )
        return jsonify({"success": True, "message": result.message, "attendance": result.record.to_dict()})

    @app.route("/attendance/history", methods=["GET"], endpoint="attendance_history")
    @app.route("/attendance/history/<int:user_id>", methods=["GET"], endpoint="attendance_history_user")
    @login_required
    def attendance_history(user_id: Optional[int] = None):
        filters = HistoryFilter(
            start_date=parse_optional_date(request.args.get("startDate")),
            end_date=parse_optional_date(request.args.get("endDate")),
            type=_enum_arg("type", AttendanceType),
            status=_enum_arg("status", AttendanceStatus),
        )
        records = container.attendance_service.get_history(current_user(), user_id, filters)
        return jsonify({"success": True, "count": len(records), "data": [r.to_dict() for r in records]})

    @app.route("/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @app.route("/attendance/summary/<int:user_id>", methods=["GET"], endpoint="attendance_summary_user")
    @login_required
    def attendance_summary(user_id: Optional[int] = None):
        actor = current_user()
        summary = container.report_service.summarize(
            actor.user_id if user_id is None else user_id,
            month=_int_arg("month"),
            year=_int_arg("year"),
            actor=actor,
        )
        return jsonify({"success": True, "summary": summary.to_dict()})

    def _stats():
        return container.report_service.stats_for_period(
            start_date=parse_optional_date(request.args.get("startDate")),
            end_date=parse_optional_date(request.args.get("endDate")),
            department=(request.args.get("department") or "").strip() or None,
            actor=current_user(),
        )

    @app.route("/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def attendance_stats():
        return jsonify({"success": True, "stats": _stats().to_dict()})

    @app.route("/attendance/stats.csv", methods=["GET"], endpoint="attendance_stats_csv")
    @login_required
    def attendance_stats_csv():
        report = _stats()
        filename = f"attendance_stats_{report.start_date.strftime('%Y%m%d')}_{report.end_date.strftime('%Y%m%d')}.csv"
        return app.response_class(
            stats_to_csv(report),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
