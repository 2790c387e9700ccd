"""
Конфигурация тестов для pytest.
Добавляет каталог src в PYTHONPATH и собирает общие фикстуры.
"""
import sys
from datetime import date, datetime
from functools import partial
from pathlib import Path

import pytest

# Добавляем каталог с исходным кодом в PYTHONPATH
src_dir = str(Path(__file__).parent.parent / "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from hotel_inventory.booking.application import (  # noqa: E402
    BookingApplicationService,
    RoomAvailabilityService,
)
from hotel_inventory.booking.domain import (  # noqa: E402
    BookingCancelled,
    BookingConfirmed,
    BookingCreated,
)
from hotel_inventory.booking.infrastructure import HotelUnitOfWork  # noqa: E402
from hotel_inventory.catalog.application import RoomCatalogService  # noqa: E402
from hotel_inventory.celery import app as celery_app  # noqa: E402
from hotel_inventory.notifications.event_handlers import (  # noqa: E402
    on_booking_cancelled,
    on_booking_confirmed,
    on_booking_created,
)
from hotel_inventory.notifications.tasks import set_email_sender  # noqa: E402
from hotel_inventory.reporting.application import StatisticsService  # noqa: E402
from hotel_inventory.shared_kernel import StaffContext  # noqa: E402


class FrozenClock:
    """Управляемые тестом часы."""

    def __init__(self, current: datetime):
        self.current = current

    def __call__(self) -> datetime:
        return self.current

    def set_date(self, day: date, hour: int = 10) -> None:
        self.current = datetime(day.year, day.month, day.day, hour)


class RecordingNotifier:
    """Уведомитель, запоминающий вызовы."""

    def __init__(self):
        self.confirmations = []
        self.rejections = []

    def notify_confirmation(self, booking) -> None:
        self.confirmations.append(booking)

    def notify_rejection(self, booking, reason: str) -> None:
        self.rejections.append((booking, reason))


@pytest.fixture(autouse=True)
def celery_eager():
    """Задачи Celery выполняются сразу, в процессе теста."""
    celery_app.conf.update(task_always_eager=True, task_eager_propagates=False)
    yield celery_app
    set_email_sender(None)


@pytest.fixture
def clock():
    """Часы, остановленные на 2 июня 2024 года."""
    return FrozenClock(datetime(2024, 6, 2, 10, 0))


@pytest.fixture
def ctx():
    return StaffContext(account_id="account-1", staff_id="staff-1")


@pytest.fixture
def other_ctx():
    return StaffContext(account_id="account-2", staff_id="staff-2")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def uow(notifier):
    """Unit of Work в памяти с подписанными обработчиками уведомлений."""
    uow = HotelUnitOfWork()
    uow.event_bus.subscribe(BookingCreated, partial(on_booking_created, notifier=notifier))
    uow.event_bus.subscribe(BookingConfirmed, partial(on_booking_confirmed, notifier=notifier))
    uow.event_bus.subscribe(BookingCancelled, partial(on_booking_cancelled, notifier=notifier))
    return uow


@pytest.fixture
def catalog(uow, clock):
    return RoomCatalogService(uow, clock=clock)


@pytest.fixture
def booking_service(uow, clock):
    return BookingApplicationService(uow, clock=clock)


@pytest.fixture
def availability(uow):
    return RoomAvailabilityService(uow)


@pytest.fixture
def statistics(uow, clock):
    return StatisticsService(
        rooms=uow.rooms, bookings=uow.bookings, clock=clock, recent_limit=5
    )


@pytest.fixture
def make_room(catalog, ctx):
    """Фабрика номеров в каталоге тестового аккаунта."""
    counter = {"n": 100}

    def _make_room(context=None, **overrides):
        counter["n"] += 1
        data = {
            "number": str(counter["n"]),
            "type": "standard",
            "floor": 1,
            "capacity": 4,
            "price_per_night": "2500",
            "amenities": {"TV", "Wi-Fi"},
        }
        data.update(overrides)
        return catalog.create_room(context or ctx, data)

    return _make_room


@pytest.fixture
def make_booking(booking_service, ctx):
    """Фабрика бронирований тестового аккаунта."""

    def _make_booking(room_id, check_in, check_out, context=None, **overrides):
        data = {
            "room_id": room_id,
            "guest_name": "Иван Иванов",
            "guest_email": "ivan.ivanov@mail.com",
            "guest_phone": "+79101234567",
            "check_in": check_in,
            "check_out": check_out,
            "number_of_guests": 2,
        }
        data.update(overrides)
        return booking_service.create_booking(context or ctx, data)

    return _make_booking
