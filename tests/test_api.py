from __future__ import annotations

import pytest

from src.qr_attendance.qr_attendance.core.enums import Role
from src.qr_attendance.qr_attendance.main import create_app
from src.qr_attendance.qr_attendance.users.model import UserPatch


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email: str, password: str = "secret1") -> dict:
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def admin_headers(client, admin):
    return _login(client, admin.email)


@pytest.fixture
def employee_headers(client, employee):
    return _login(client, employee.email)


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_missing_token_is_401(client):
    resp = client.get("/attendance/history")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_garbage_token_is_401(client):
    resp = client.get("/attendance/history", headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_unknown_route_is_json_404(client):
    resp = client.get("/nope")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_unexpected_error_is_hidden(app, client):
    def boom():
        raise RuntimeError("database exploded")

    app.add_url_rule("/boom", "boom", boom)
    resp = client.get("/boom")

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Server error"}


def test_register_returns_token(client, notifier):
    resp = client.post(
        "/auth/register",
        json={"name": "Alice", "email": "alice@example.com", "password": "secret1", "department": "Sales"},
    )

    body = resp.get_json()
    assert resp.status_code == 201
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["role"] == "employee"
    assert body["user"]["department"] == "Sales"
    assert "password_hash" not in body["user"]

    again = client.post("/auth/register", json={"name": "A", "email": "alice@example.com", "password": "secret1"})
    assert again.status_code == 400


def test_login_with_bad_password(client, employee):
    resp = client.post("/auth/login", json={"email": employee.email, "password": "nope-nope"})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def test_profile(client, employee_headers):
    resp = client.get("/auth/profile", headers=employee_headers)

    assert resp.status_code == 200
    assert resp.get_json()["user"]["email"] == "bob@example.com"


def test_profile_update_cannot_change_role(client, employee_headers):
    resp = client.put("/auth/profile", json={"role": "admin"}, headers=employee_headers)

    assert resp.status_code == 403


def test_profile_update(client, employee_headers):
    resp = client.put("/auth/profile", json={"position": "QA"}, headers=employee_headers)

    assert resp.status_code == 200
    assert resp.get_json()["user"]["position"] == "QA"


def test_employee_cannot_generate_qr(client, employee_headers):
    resp = client.get("/attendance/qrcode", headers=employee_headers)

    assert resp.status_code == 403
    assert resp.get_json() == {"success": False, "message": "Only admins can generate QR codes"}


def test_qr_then_scan_flow(client, admin_headers, employee_headers):
    qr = client.get("/attendance/qrcode", headers=admin_headers).get_json()
    assert qr["success"] is True
    assert qr["qrImage"].startswith("data:image/png;base64,")

    resp = client.post(
        "/attendance/scan",
        json={"qrId": qr["qrId"], "location": {"latitude": 0, "longitude": 0.0005}, "deviceInfo": "Pixel 8"},
        headers={**employee_headers, "X-Forwarded-For": "203.0.113.5, 10.0.0.1"},
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["message"] == "Check-in successful"
    assert body["attendance"]["type"] == "check-in"
    assert body["attendance"]["status"] == "valid"
    assert body["attendance"]["ipAddress"] == "203.0.113.5"
    assert body["attendance"]["location"] == {"latitude": 0.0, "longitude": 0.0005}
    assert set(body["attendance"]) == {
        "id", "userId", "type", "timestamp", "qrId", "location", "ipAddress", "deviceInfo", "status", "notes"
    }

    replay = client.post("/attendance/scan", json={"qrId": qr["qrId"]}, headers=employee_headers)
    assert replay.status_code == 400


def test_scan_without_token(client, employee_headers):
    resp = client.post("/attendance/scan", json={}, headers=employee_headers)

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "QR code ID is required"


def test_scan_with_expired_token(client, qr_store, clock, admin, employee_headers):
    token = qr_store.issue(admin_id=admin.user_id)
    clock.advance(seconds=31)

    resp = client.post("/attendance/scan", json={"qrId": token.id}, headers=employee_headers)

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "QR code has expired"


def test_history(client, qr_store, admin, employee_headers):
    token = qr_store.issue(admin_id=admin.user_id)
    client.post("/attendance/scan", json={"qrId": token.id}, headers=employee_headers)

    resp = client.get("/attendance/history?type=check-in", headers=employee_headers)

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["count"] == 1
    assert body["data"][0]["type"] == "check-in"


def test_history_rejects_bad_filter(client, employee_headers):
    resp = client.get("/attendance/history?status=weird", headers=employee_headers)

    assert resp.status_code == 400


def test_history_of_other_user_requires_admin(client, admin, employee_headers):
    resp = client.get(f"/attendance/history/{admin.user_id}", headers=employee_headers)

    assert resp.status_code == 403


def test_admin_reads_other_history(client, employee, admin_headers):
    resp = client.get(f"/attendance/history/{employee.user_id}", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.get_json()["count"] == 0


def test_summary(client, employee_headers):
    resp = client.get("/attendance/summary?month=6&year=2024", headers=employee_headers)

    summary = resp.get_json()["summary"]
    assert resp.status_code == 200
    assert summary["workingDays"] == 20
    assert summary["absentDays"] == 20
    assert summary["attendanceRate"] == 0
    assert len(summary["dailySummary"]) == 30


def test_summary_rejects_bad_month(client, employee_headers):
    resp = client.get("/attendance/summary?month=june", headers=employee_headers)

    assert resp.status_code == 400


def test_stats_require_admin(client, employee_headers):
    assert client.get("/attendance/stats", headers=employee_headers).status_code == 403
    assert client.get("/attendance/stats.csv", headers=employee_headers).status_code == 403


def test_stats(client, admin_headers, employee):
    resp = client.get("/attendance/stats?startDate=2024-06-01&endDate=2024-06-30", headers=admin_headers)

    stats = resp.get_json()["stats"]
    assert resp.status_code == 200
    assert stats["period"] == {"startDate": "2024-06-01", "endDate": "2024-06-30", "workingDays": 20}
    assert stats["overall"]["totalUsers"] == 2
    assert set(stats["departments"]) == {"Administration", "Engineering"}


def test_stats_csv(client, admin_headers, employee):
    resp = client.get("/attendance/stats.csv?startDate=2024-06-01&endDate=2024-06-30", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attendance_stats_20240601_20240630.csv" in resp.headers["Content-Disposition"]
    assert b"Bob" in resp.data


def test_stats_bad_date(client, admin_headers):
    resp = client.get("/attendance/stats?startDate=06/01/2024", headers=admin_headers)

    assert resp.status_code == 400


def test_users_admin_only(client, employee_headers):
    resp = client.get("/auth/users", headers=employee_headers)

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Admin access required"


def test_users_crud(client, admin_headers, employee):
    listing = client.get("/auth/users?page=1&limit=10&search=bob", headers=admin_headers).get_json()
    assert listing["count"] == 1

    updated = client.put(
        f"/auth/users/{employee.user_id}", json={"department": "QA", "active": False}, headers=admin_headers
    )
    assert updated.status_code == 200
    assert updated.get_json()["user"]["department"] == "QA"
    assert updated.get_json()["user"]["active"] is False

    deleted = client.delete(f"/auth/users/{employee.user_id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert client.get(f"/auth/users/{employee.user_id}", headers=admin_headers).status_code == 404


def test_users_update_rejects_unknown_role(client, admin_headers, employee):
    resp = client.put(f"/auth/users/{employee.user_id}", json={"role": "owner"}, headers=admin_headers)

    assert resp.status_code == 400


def test_forgot_and_reset_password(client, notifier, employee):
    assert client.post("/auth/forgot-password", json={"email": "ghost@example.com"}).status_code == 404

    resp = client.post("/auth/forgot-password", json={"email": employee.email})
    assert resp.status_code == 200
    reset_url = notifier.sent[-1][2]
    token = reset_url.rsplit("/", 1)[1]

    reset = client.post(f"/auth/reset-password/{token}", json={"password": "brand-new"})
    assert reset.status_code == 200
    assert reset.get_json()["token"]
    _login(client, employee.email, "brand-new")


def test_register_rejects_numeric_password(client, users):
    resp = client.post("/auth/register", json={"name": "Dan", "email": "dan@example.com", "password": 12345678})

    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "message": "Password must be a string"}
    assert users.get_by_email("dan@example.com") is None


def test_register_rejects_non_string_department(client):
    resp = client.post(
        "/auth/register",
        json={"name": "Dan", "email": "dan@example.com", "password": "secret1", "department": ["Sales"]},
    )

    assert resp.status_code == 400


def test_login_with_non_string_credentials(client, employee):
    resp = client.post("/auth/login", json={"email": employee.email, "password": 1234567})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"

    resp = client.post("/auth/login", json={"email": ["bob@example.com"], "password": "secret1"})
    assert resp.status_code == 401


def test_deactivated_user_token_is_rejected(client, users, qr_store, admin, employee, employee_headers, attendance):
    users.update_user(employee.user_id, patch=UserPatch(is_active=False))
    token = qr_store.issue(admin_id=admin.user_id)

    resp = client.post("/attendance/scan", json={"qrId": token.id}, headers=employee_headers)

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Your account is deactivated"}
    assert attendance.records == []
    assert qr_store.validate(token.id).valid


def test_demoted_admin_loses_admin_routes(client, users, admin, admin_headers):
    users.update_user(admin.user_id, patch=UserPatch(role=Role.EMPLOYEE))

    assert client.get("/attendance/qrcode", headers=admin_headers).status_code == 403
    assert client.get("/auth/users", headers=admin_headers).status_code == 403


def test_promoted_employee_gains_admin_routes(client, users, employee, employee_headers):
    users.update_user(employee.user_id, patch=UserPatch(role=Role.ADMIN))

    resp = client.get("/attendance/qrcode", headers=employee_headers)

    assert resp.status_code == 200
    assert resp.get_json()["success"] is True


def test_deleted_user_token_is_rejected(client, users, employee, employee_headers):
    users.delete_by_id(employee.user_id)

    resp = client.get("/auth/profile", headers=employee_headers)

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "User no longer exists"}
