"""
Доменная модель каталога номеров и правило статуса занятости номера.
"""

from datetime import date
from typing import TYPE_CHECKING, Iterable, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..shared_kernel import EntityId, Money, RoomStatus, RoomType, generate_id

if TYPE_CHECKING:
    from ..booking.domain import Booking


def _normalize_room_type(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


class Room(BaseModel):
    """Номер в отеле."""

    model_config = ConfigDict(validate_assignment=True)

    id: EntityId = Field(default_factory=generate_id)
    account_id: EntityId
    number: str = Field(..., min_length=1)  # Номер комнаты (например, "101", "202A")
    type: RoomType
    floor: int
    capacity: int = Field(..., ge=1)
    price_per_night: Money
    amenities: Set[str] = Field(default_factory=set)  # Удобства в номере
    # Кэш производного состояния: пересчитывается при переходах бронирований
    status: RoomStatus = RoomStatus.AVAILABLE

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return _normalize_room_type(v)

    @field_validator("number")
    @classmethod
    def strip_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Номер комнаты не может быть пустым")
        return v

    @property
    def is_occupied(self) -> bool:
        return self.status == RoomStatus.OCCUPIED

    @property
    def in_maintenance(self) -> bool:
        return self.status == RoomStatus.MAINTENANCE


class RoomFilter(BaseModel):
    """Параметры отбора номеров в каталоге."""

    type: Optional[RoomType] = None
    status: Optional[RoomStatus] = None
    floor: Optional[int] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return _normalize_room_type(v)

    def matches(self, room: Room) -> bool:
        return (
            (self.type is None or room.type == self.type)
            and (self.status is None or room.status == self.status)
            and (self.floor is None or room.floor == self.floor)
        )


class RoomOccupancyPolicy:
    """Правило вычисления кэшированного статуса номера."""

    @staticmethod
    def derive_status(
        current: RoomStatus, bookings: Iterable["Booking"], day: date
    ) -> RoomStatus:
        """
        Номер занят тогда и только тогда, когда его сутки покрывает
        хотя бы одно подтвержденное бронирование. Статус обслуживания
        выставляется персоналом и пересчетом не снимается.
        """
        if current == RoomStatus.MAINTENANCE:
            return current
        if any(booking.occupies(day) for booking in bookings):
            return RoomStatus.OCCUPIED
        return RoomStatus.AVAILABLE
