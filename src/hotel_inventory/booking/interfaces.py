"""
Интерфейсы (порты) для контекста бронирования.
"""

from __future__ import annotations

from typing import Any, Callable, ContextManager, List, Optional, Protocol, Type, TypeVar

from ..catalog.interfaces import IRoomRepository
from ..shared_kernel import DomainEvent, EntityId
from .domain import Booking, BookingFilter

T_Event = TypeVar("T_Event", bound=DomainEvent)


class IEventBus(Protocol):
    """Интерфейс для шины событий."""

    def publish(self, event: DomainEvent) -> None: ...
    def subscribe(
        self, event_type: Type[T_Event], handler: Callable[[T_Event], None]
    ) -> None: ...


class IBookingRepository(Protocol):
    """Интерфейс репозитория для бронирований."""

    def add(self, booking: Booking) -> None: ...
    def get_by_id(self, booking_id: EntityId) -> Optional[Booking]: ...
    def update(self, booking: Booking) -> None: ...
    def find_by_room(
        self, room_id: EntityId, exclude_cancelled: bool = True
    ) -> List[Booking]: ...
    def find_by_account(
        self,
        account_id: EntityId,
        filters: Optional[BookingFilter] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Booking]: ...
    def find_all(self) -> List[Booking]: ...


class INotifier(Protocol):
    """
    Интерфейс отправки уведомлений гостю.

    Вызовы не блокируют и не выбрасывают исключений: ошибки доставки
    только записываются в журнал.
    """

    def notify_confirmation(self, booking: Booking) -> None: ...
    def notify_rejection(self, booking: Booking, reason: str) -> None: ...


class IHotelUnitOfWork(Protocol):
    """Интерфейс Unit of Work для номеров и бронирований."""

    @property
    def bookings(self) -> IBookingRepository: ...
    @property
    def rooms(self) -> IRoomRepository: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def lock_room(self, room_id: EntityId) -> ContextManager[None]: ...
    def __enter__(self) -> IHotelUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
