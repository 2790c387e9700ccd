"""
Инфраструктурный слой контекста бронирования.

Содержит реализации репозиториев, шины событий, блокировок номеров
и единицы работы, зависимые от конкретных технологий.
"""

import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type

from ..catalog.infrastructure import InMemoryRoomRepository
from ..catalog.interfaces import IRoomRepository
from ..log import ILogger, get_logger
from ..shared_kernel import BookingStatus, DomainEvent, EntityId
from ..shared_kernel.infrastructure import InMemoryRepository, JsonFileRepository
from . import interfaces as ports
from .domain import Booking, BookingFilter


class _BookingQueries:
    """Запросы к бронированиям поверх базового хранилища."""

    def get_by_id(self, booking_id: EntityId) -> Optional[Booking]:
        return self._get(booking_id)

    def add(self, booking: Booking) -> None:
        self._insert(booking.id, booking)

    def update(self, booking: Booking) -> None:
        self._replace(booking.id, booking)

    def find_by_room(
        self, room_id: EntityId, exclude_cancelled: bool = True
    ) -> List[Booking]:
        return self._select(
            lambda booking: booking.room_id == room_id
            and not (exclude_cancelled and booking.status == BookingStatus.CANCELLED)
        )

    def find_by_account(
        self,
        account_id: EntityId,
        filters: Optional[BookingFilter] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Booking]:
        filters = filters or BookingFilter()
        bookings = self._select(
            lambda booking: booking.account_id == account_id and filters.matches(booking)
        )
        bookings.sort(key=lambda booking: booking.created_at, reverse=descending)
        return bookings[:limit] if limit is not None else bookings

    def find_all(self) -> List[Booking]:
        return self._select(lambda booking: True)


class InMemoryBookingRepository(
    _BookingQueries, InMemoryRepository[Booking], ports.IBookingRepository
):
    """Реализация репозитория бронирований в памяти."""

    def __init__(self) -> None:
        InMemoryRepository.__init__(self)


class JsonFileBookingRepository(
    _BookingQueries, JsonFileRepository[Booking], ports.IBookingRepository
):
    """Репозиторий бронирований, сохраняющий данные в JSON-файл."""

    def __init__(self, file_path: str):
        JsonFileRepository.__init__(self, file_path, Booking)


class InMemoryEventBus(ports.IEventBus):
    """Реализация шины событий в памяти."""

    def __init__(self, logger: Optional[ILogger] = None):
        self._subscribers: Dict[Type[DomainEvent], List[Callable[[Any], None]]] = {}
        self._subscriber_lock = threading.Lock()
        self._logger = logger or get_logger(__name__)

    def publish(self, event: DomainEvent) -> None:
        """Публикует событие. Ошибка одного обработчика не мешает остальным."""
        event_type = type(event)
        with self._subscriber_lock:
            handlers = list(self._subscribers.get(event_type, []))

        if not handlers:
            self._logger.debug(f"No subscribers for event type {event_type.__name__}")
            return

        self._logger.debug(
            f"Publishing event: {event_type.__name__}", event_id=event.event_id
        )

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    f"Error in event handler for {event_type.__name__}",
                    error=str(e),
                    event_id=event.event_id,
                )

    def subscribe(self, event_type: Type[DomainEvent], handler) -> None:
        """Подписывает обработчик на события указанного типа."""
        with self._subscriber_lock:
            self._subscribers.setdefault(event_type, []).append(handler)
        self._logger.debug(f"Subscribed handler to {event_type.__name__} events")


class _RoomLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class RoomLockRegistry:
    """
    Реестр блокировок по номерам.

    Проверка доступности и запись бронирования выполняются под блокировкой
    своего номера, поэтому две параллельные брони на пересекающиеся даты
    одного номера не могут обе пройти проверку. Блокировка живет, пока ее
    держит или ждет хотя бы один поток.
    """

    def __init__(self) -> None:
        self._locks: Dict[EntityId, _RoomLock] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, room_id: EntityId) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(room_id)
            if entry is None:
                entry = self._locks[room_id] = _RoomLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[room_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class _JournaledRepository:
    """Обертка над репозиторием, записывающая прежние версии в журнал транзакции."""

    def __init__(self, repository: Any, uow: "HotelUnitOfWork"):
        self._repository = repository
        self._uow = uow

    def _write(self, entity_id: EntityId, action: Callable[[], None]) -> None:
        if self._uow._record(self._repository, entity_id):
            action()
            return
        # Запись вне транзакции фиксируется сразу
        with self._uow._transaction_lock:
            action()
            self._repository.flush()

    def add(self, entity: Any) -> None:
        self._write(entity.id, lambda: self._repository.add(entity))

    def update(self, entity: Any) -> None:
        self._write(entity.id, lambda: self._repository.update(entity))

    def delete(self, entity_id: EntityId) -> None:
        self._write(entity_id, lambda: self._repository.delete(entity_id))

    def __getattr__(self, name: str) -> Any:
        return getattr(self._repository, name)


class HotelUnitOfWork(ports.IHotelUnitOfWork):
    """
    Единица работы для номеров и бронирований.

    Транзакции привязаны к потоку: каждая запись внутри `with uow:`
    попадает в журнал, при исключении журнал откатывается, при успехе
    репозитории сбрасываются во внешнее хранилище.

    Транзакции выполняются по одной: внешний `with uow:` держит общую
    блокировку хранилища до фиксации или отката, поэтому во внешнее
    хранилище попадают только зафиксированные записи. Блокировка номера
    берется раньше блокировки хранилища.
    """

    def __init__(
        self,
        bookings_repo: Optional[ports.IBookingRepository] = None,
        rooms_repo: Optional[IRoomRepository] = None,
        event_bus: Optional[ports.IEventBus] = None,
        locks: Optional[RoomLockRegistry] = None,
        logger: Optional[ILogger] = None,
    ):
        self._bookings = (
            bookings_repo if bookings_repo is not None else InMemoryBookingRepository()
        )
        self._rooms = rooms_repo if rooms_repo is not None else InMemoryRoomRepository()
        self._logger = logger or get_logger(__name__)
        self._event_bus = event_bus or InMemoryEventBus(self._logger)
        self._locks = locks or RoomLockRegistry()
        self._transaction_lock = threading.RLock()
        self._local = threading.local()

    @property
    def bookings(self) -> ports.IBookingRepository:
        return _JournaledRepository(self._bookings, self)

    @property
    def rooms(self) -> IRoomRepository:
        return _JournaledRepository(self._rooms, self)

    @property
    def event_bus(self) -> ports.IEventBus:
        return self._event_bus

    def lock_room(self, room_id: EntityId):
        """Блокировка номера на время проверки и записи."""
        return self._locks.hold(room_id)

    def _journal(self) -> Optional[List[Tuple[Any, EntityId, Any]]]:
        return getattr(self._local, "journal", None)

    def _record(self, repository: Any, entity_id: EntityId) -> bool:
        journal = self._journal()
        if journal is None:
            return False
        journal.append((repository, entity_id, repository.snapshot(entity_id)))
        return True

    def commit(self) -> None:
        """Фиксирует все изменения."""
        journal = self._journal() or []
        touched = list({id(repo): repo for repo, _, _ in journal}.values())
        try:
            for repository in touched:
                repository.flush()
        except Exception:
            self.rollback()
            # Часть хранилищ могла успеть записать изменения
            self._restore_storage(touched)
            raise
        if journal:
            self._logger.debug("HotelUnitOfWork committed", changes=len(journal))
        self._local.journal = []

    def _restore_storage(self, repositories: List[Any]) -> None:
        for repository in repositories:
            try:
                repository.flush()
            except Exception as e:
                self._logger.error(
                    "Failed to restore storage after rollback",
                    repository=type(repository).__name__,
                    error=str(e),
                )

    def rollback(self) -> None:
        """Откатывает все изменения."""
        journal = self._journal() or []
        for repository, entity_id, previous in reversed(journal):
            repository.restore(entity_id, previous)
        if journal:
            self._logger.warning("HotelUnitOfWork rolled back", changes=len(journal))
        self._local.journal = []

    def __enter__(self) -> "HotelUnitOfWork":
        depth = getattr(self._local, "depth", 0)
        if depth == 0:
            self._transaction_lock.acquire()
            self._local.journal = []
        self._local.depth = depth + 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self._local.depth -= 1
        if self._local.depth == 0:
            try:
                if exc_type is None:
                    self.commit()
                else:
                    self.rollback()
            finally:
                self._local.journal = None
                self._transaction_lock.release()
        return False  # Пробрасываем исключение дальше, если оно было
