from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .booking.application import BookingApplicationService, RoomAvailabilityService
from .booking.domain import BookingCancelled, BookingConfirmed, BookingCreated
from .booking.infrastructure import (
    HotelUnitOfWork,
    InMemoryBookingRepository,
    InMemoryEventBus,
    JsonFileBookingRepository,
)
from .catalog.application import RoomCatalogService
from .catalog.infrastructure import InMemoryRoomRepository, JsonFileRoomRepository
from .celery import configure_celery
from .config import Settings, get_settings
from .log import configure_logging, get_logger
from .notifications.event_handlers import (
    on_booking_cancelled,
    on_booking_confirmed,
    on_booking_created,
)
from .notifications.infrastructure import CeleryNotifier, NullNotifier, create_email_sender
from .notifications.tasks import set_email_sender
from .reporting.application import StatisticsService
from .shared_kernel import now


def _create_repositories(settings: Settings):
    if settings.storage_backend == "json":
        data_dir = Path(settings.data_dir)
        return (
            JsonFileRoomRepository(str(data_dir / "rooms.json")),
            JsonFileBookingRepository(str(data_dir / "bookings.json")),
        )
    return InMemoryRoomRepository(), InMemoryBookingRepository()


def _create_notifier(settings: Settings):
    if not settings.notifications_enabled:
        return NullNotifier()
    configure_celery(settings)
    set_email_sender(create_email_sender(settings))
    return CeleryNotifier()


def bootstrap_app(
    settings: Optional[Settings] = None,
    notifier: Any = None,
    clock: Callable[[], datetime] = now,
) -> Dict[str, Any]:
    """Создает и настраивает все компоненты приложения."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("hotel_inventory.bootstrap")

    # 1. Создаем хранилища и Unit of Work
    rooms_repo, bookings_repo = _create_repositories(settings)
    uow = HotelUnitOfWork(
        bookings_repo=bookings_repo,
        rooms_repo=rooms_repo,
        event_bus=InMemoryEventBus(),
    )

    # 2. Подписываем обработчики уведомлений на события
    notifier = notifier or _create_notifier(settings)
    uow.event_bus.subscribe(BookingCreated, partial(on_booking_created, notifier=notifier))
    uow.event_bus.subscribe(BookingConfirmed, partial(on_booking_confirmed, notifier=notifier))
    uow.event_bus.subscribe(BookingCancelled, partial(on_booking_cancelled, notifier=notifier))

    # 3. Создаем сервисы, передавая им зависимости
    components = {
        "settings": settings,
        "uow": uow,
        "notifier": notifier,
        "room_catalog": RoomCatalogService(uow, currency=settings.currency, clock=clock),
        "bookings": BookingApplicationService(
            uow, clock=clock, list_limit=settings.booking_list_limit
        ),
        "availability": RoomAvailabilityService(uow),
        "statistics": StatisticsService(
            rooms=rooms_repo,
            bookings=bookings_repo,
            clock=clock,
            recent_limit=settings.recent_bookings_limit,
            currency=settings.currency,
        ),
    }
    logger.info(
        "Application bootstrapped",
        storage=settings.storage_backend,
        notifications=settings.notifications_enabled,
    )
    return components
