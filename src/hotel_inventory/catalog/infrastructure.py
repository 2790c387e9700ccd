"""
Инфраструктурный слой каталога номеров.

Содержит реализации репозитория номеров в памяти и поверх JSON-файла.
"""

from typing import List, Optional

from ..shared_kernel import EntityId
from ..shared_kernel.infrastructure import InMemoryRepository, JsonFileRepository
from . import interfaces as ports
from .domain import Room, RoomFilter


class _RoomQueries:
    """Запросы к номерам поверх базового хранилища."""

    def get_by_id(self, room_id: EntityId) -> Optional[Room]:
        return self._get(room_id)

    def find_by_account(
        self, account_id: EntityId, filters: Optional[RoomFilter] = None
    ) -> List[Room]:
        filters = filters or RoomFilter()
        rooms = self._select(
            lambda room: room.account_id == account_id and filters.matches(room)
        )
        return sorted(rooms, key=lambda room: (room.floor, room.number))

    def find_by_number(self, account_id: EntityId, number: str) -> Optional[Room]:
        number = number.strip()
        found = self._select(
            lambda room: room.account_id == account_id and room.number == number
        )
        return found[0] if found else None

    def find_all(self) -> List[Room]:
        return self._select(lambda room: True)

    def add(self, room: Room) -> None:
        with self._lock:
            # Номер комнаты уникален в пределах аккаунта
            if self.find_by_number(room.account_id, room.number) is not None:
                raise ValueError(f"Номер {room.number} уже существует")
            self._insert(room.id, room)

    def update(self, room: Room) -> None:
        with self._lock:
            existing = self.find_by_number(room.account_id, room.number)
            if existing is not None and existing.id != room.id:
                raise ValueError(f"Номер {room.number} уже существует")
            self._replace(room.id, room)

    def delete(self, room_id: EntityId) -> None:
        self._remove(room_id)


class InMemoryRoomRepository(_RoomQueries, InMemoryRepository[Room], ports.IRoomRepository):
    """Реализация репозитория номеров в памяти."""

    def __init__(self) -> None:
        InMemoryRepository.__init__(self)


class JsonFileRoomRepository(_RoomQueries, JsonFileRepository[Room], ports.IRoomRepository):
    """Репозиторий номеров, сохраняющий данные в JSON-файл."""

    def __init__(self, file_path: str):
        JsonFileRepository.__init__(self, file_path, Room)
