"""
Тесты настроек и сборки приложения.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from hotel_inventory.bootstrap import bootstrap_app
from hotel_inventory.booking.infrastructure import HotelUnitOfWork
from hotel_inventory.config import Settings
from hotel_inventory.notifications.infrastructure import (
    CeleryNotifier,
    NullNotifier,
    SmtpEmailSender,
)
from hotel_inventory.notifications.tasks import get_email_sender


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("HOTEL_CURRENCY", raising=False)
    settings = Settings()

    assert settings.currency == "INR"
    assert settings.storage_backend == "memory"
    assert settings.booking_list_limit == 10
    assert settings.celery_task_always_eager is True


def test_settings_from_environment(monkeypatch):
    """Тест чтения настроек из переменных окружения с префиксом HOTEL_."""
    monkeypatch.setenv("HOTEL_CURRENCY", "USD")
    monkeypatch.setenv("HOTEL_STORAGE_BACKEND", "json")
    monkeypatch.setenv("HOTEL_NOTIFICATIONS_ENABLED", "false")

    settings = Settings()

    assert settings.currency == "USD"
    assert settings.storage_backend == "json"
    assert settings.notifications_enabled is False


def test_settings_validation():
    with pytest.raises(ValueError):
        Settings(storage_backend="redis")


def test_bootstrap_components():
    app = bootstrap_app(Settings(notifications_enabled=False))

    assert isinstance(app["uow"], HotelUnitOfWork)
    assert isinstance(app["notifier"], NullNotifier)
    for name in ("room_catalog", "bookings", "availability", "statistics"):
        assert app[name] is not None


def test_bootstrap_default_notifier_uses_celery(celery_eager):
    app = bootstrap_app(
        Settings(
            notifications_enabled=True,
            email_backend="smtp",
            smtp_host="smtp.hotel.com",
            celery_broker_url="memory://",
            celery_task_always_eager=False,
        )
    )

    assert isinstance(app["notifier"], CeleryNotifier)
    assert isinstance(get_email_sender(), SmtpEmailSender)
    assert celery_eager.conf.task_always_eager is False
    assert celery_eager.conf.broker_url == "memory://"


def test_end_to_end_flow(ctx, notifier):
    """Тест полного сценария: номер, бронь, подтверждение, статистика."""
    app = bootstrap_app(
        Settings(currency="INR", notifications_enabled=False),
        notifier=notifier,
        clock=lambda: datetime(2024, 6, 2, 12, 0),
    )

    room = app["room_catalog"].create_room(
        ctx,
        {"number": "101", "type": "standard", "floor": 1, "capacity": 4,
         "price_per_night": "2500"},
    )
    booking = app["bookings"].create_booking(
        ctx,
        {
            "room_id": room.id,
            "guest_name": "Иван Иванов",
            "guest_email": "guest@hotel.com",
            "guest_phone": "+79101234567",
            "check_in": "2024-06-01",
            "check_out": "2024-06-03",
            "number_of_guests": 2,
        },
    )
    app["bookings"].confirm_booking(ctx, booking.id)

    stats = app["statistics"].get_dashboard(ctx)
    available = app["availability"].list_available_rooms(ctx, date(2024, 6, 2), date(2024, 6, 3))

    assert booking.total_price == Decimal("5000")
    assert stats.occupied_rooms == 1
    assert stats.monthly_revenue == Decimal("5000")
    assert available == []
    assert [b.status for b in notifier.confirmations] == ["pending", "confirmed"]


def test_json_backend_persists_between_apps(tmp_path, ctx):
    settings = Settings(
        storage_backend="json", data_dir=str(tmp_path), notifications_enabled=False
    )

    room = bootstrap_app(settings)["room_catalog"].create_room(
        ctx,
        {"number": "101", "type": "suite", "floor": 3, "capacity": 2,
         "price_per_night": "7000"},
    )

    reloaded = bootstrap_app(settings)["room_catalog"].get_room(ctx, room.id)

    assert reloaded.number == "101"
    assert (tmp_path / "rooms.json").exists()
