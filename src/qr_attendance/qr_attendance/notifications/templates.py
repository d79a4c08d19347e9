"""Subjects and HTML bodies for transactional emails."""
from __future__ import annotations

from html import escape

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus
from ..users.model import User

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'

_STATUS_COLORS = {
    AttendanceStatus.VALID: "green",
    AttendanceStatus.SUSPICIOUS: "orange",
    AttendanceStatus.INVALID: "red",
}


def _fmt_time(record: AttendanceRecord) -> str:
    return record.timestamp.strftime("%Y-%m-%d %H:%M:%S")


def welcome(user: User) -> tuple[str, str]:
    body = f"""
        <h2>Welcome to the Attendance System!</h2>
        <p>Hello {escape(user.name)},</p>
        <p>Your account has been created successfully.</p>
        <p>With the system you can:</p>
        <ul>
          <li>Check in and out using QR codes</li>
          <li>View your attendance history and monthly summary</li>
        </ul>
        <p>Best regards,<br>The Attendance System Team</p>
    """
    return "Welcome to Attendance System", _WRAPPER.format(body=body)


def attendance_confirmation(user: User, record: AttendanceRecord) -> tuple[str, str]:
    label = record.type.label
    color = _STATUS_COLORS.get(record.status, "black")
    notes = f"<p><strong>Notes:</strong> {escape(record.notes)}</p>" if record.notes else ""
    body = f"""
        <h2>Attendance {label} Confirmation</h2>
        <p>Hello {escape(user.name)},</p>
        <p>Your {label.lower()} has been recorded successfully.</p>
        <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px;">
          <p><strong>Type:</strong> {label}</p>
          <p><strong>Time:</strong> {_fmt_time(record)}</p>
          <p><strong>Status:</strong> <span style="color: {color};">{record.status.value}</span></p>
          {notes}
        </div>
        <p>If you did not perform this action, please contact your administrator immediately.</p>
    """
    return f"Attendance {label} Confirmation", _WRAPPER.format(body=body)


def location_alert(user: User, record: AttendanceRecord) -> tuple[str, str]:
    if record.location:
        lat, lng = record.location.latitude, record.location.longitude
        location = f"Latitude: {lat}, Longitude: {lng}"
        map_link = f'<p><a href="https://www.google.com/maps?q={lat},{lng}">View on map</a></p>'
    else:
        location, map_link = "Unknown", ""
    body = f"""
        <h2 style="color: #d9534f;">Suspicious Location Alert</h2>
        <p><strong>User:</strong> {escape(user.name)} ({escape(user.email)})</p>
        <p><strong>Action:</strong> {record.type.label}</p>
        <p><strong>Time:</strong> {_fmt_time(record)}</p>
        <p><strong>Location:</strong> {location}</p>
        {map_link}
        <p><strong>IP Address:</strong> {escape(record.ip_address or "Unknown")}</p>
        <p><strong>Device Info:</strong> {escape(record.device_info or "Not provided")}</p>
        <p>This location is outside the allowed radius for attendance.</p>
    """
    return f"Suspicious Location Alert - {user.name}", _WRAPPER.format(body=body)


def password_reset(user: User, reset_url: str, *, expires_minutes: int) -> tuple[str, str]:
    body = f"""
        <h2>Password Reset</h2>
        <p>Hello {escape(user.name)},</p>
        <p>You requested a password reset. Click the link below to choose a new password:</p>
        <p><a href="{escape(reset_url, quote=True)}">Reset Password</a></p>
        <p>This link will expire in {expires_minutes} minutes.</p>
        <p>If you did not request this, please ignore this email.</p>
    """
    return "Password Reset", _WRAPPER.format(body=body)
