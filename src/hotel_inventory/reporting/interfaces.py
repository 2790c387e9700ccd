"""
Интерфейсы (порты) для отчетности: только чтение.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from ..booking.domain import Booking
from ..catalog.domain import Room
from ..shared_kernel import EntityId


class IRoomReader(Protocol):
    """Чтение номеров."""

    def get_by_id(self, room_id: EntityId) -> Optional[Room]: ...
    def find_by_account(self, account_id: EntityId) -> List[Room]: ...
    def find_all(self) -> List[Room]: ...


class IBookingReader(Protocol):
    """Чтение бронирований."""

    def find_by_account(self, account_id: EntityId) -> List[Booking]: ...
    def find_all(self) -> List[Booking]: ...
