"""
Интерфейсы (порты) для каталога номеров.
"""

from __future__ import annotations

from typing import Any, ContextManager, List, Optional, Protocol

from ..shared_kernel import EntityId
from .domain import Room, RoomFilter


class IRoomRepository(Protocol):
    """Интерфейс репозитория для номеров."""

    def get_by_id(self, room_id: EntityId) -> Optional[Room]: ...
    def find_by_account(
        self, account_id: EntityId, filters: Optional[RoomFilter] = None
    ) -> List[Room]: ...
    def find_by_number(self, account_id: EntityId, number: str) -> Optional[Room]: ...
    def find_all(self) -> List[Room]: ...
    def add(self, room: Room) -> None: ...
    def update(self, room: Room) -> None: ...
    def delete(self, room_id: EntityId) -> None: ...


class IBookingLookup(Protocol):
    """Часть репозитория бронирований, нужная каталогу для проверки удаления."""

    def find_by_room(
        self, room_id: EntityId, exclude_cancelled: bool = True
    ) -> List[Any]: ...


class ICatalogUnitOfWork(Protocol):
    """Интерфейс Unit of Work, с которым работает каталог."""

    @property
    def rooms(self) -> IRoomRepository: ...
    @property
    def bookings(self) -> IBookingLookup: ...

    def lock_room(self, room_id: EntityId) -> ContextManager[None]: ...
    def __enter__(self) -> ICatalogUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
