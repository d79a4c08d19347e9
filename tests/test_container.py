from datetime import timedelta
from types import SimpleNamespace

from src.qr_attendance.qr_attendance.container import assemble, build_container, office_fence
from src.qr_attendance.qr_attendance.notifications.dispatch import NotificationDispatcher


def _settings(**overrides):
    values = dict(
        QR_TOKEN_TTL_MS=5000,
        OFFICE_LATITUDE=None,
        OFFICE_LONGITUDE=None,
        MAX_DISTANCE_METERS=100,
        EMAIL_CONFIG={"host": ""},
        APP_BASE_URL="http://testserver",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_build_container_uses_configured_qr_ttl():
    container = build_container(db_config={}, settings=_settings())

    assert container.qr_store.ttl == timedelta(milliseconds=5000)


def test_assemble_keeps_injected_empty_store(users, attendance, notifier, qr_store):
    container = assemble(users_repo=users, attendance_repo=attendance, notifier=notifier, qr_store=qr_store)

    assert len(qr_store) == 0
    assert container.qr_store is qr_store


def test_office_fence_requires_both_coordinates():
    assert office_fence(_settings()) is None
    assert office_fence(_settings(OFFICE_LATITUDE=0.0)) is None

    fence = office_fence(_settings(OFFICE_LATITUDE=0.0, OFFICE_LONGITUDE=0.0, MAX_DISTANCE_METERS=50))
    assert fence.max_distance_meters == 50


def test_notifier_is_wrapped_in_dispatcher():
    container = build_container(db_config={}, settings=_settings())

    assert isinstance(container.notifier, NotificationDispatcher)
