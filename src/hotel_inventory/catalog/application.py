"""
Прикладной слой каталога номеров.

Содержит сервис приложения, через который персонал ведет
номерной фонд своего аккаунта.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional, Set, Union

from pydantic import BaseModel, Field, field_validator

from ..log import ILogger, get_logger
from ..shared_kernel import (
    ConflictException,
    EntityId,
    Money,
    NotFoundException,
    RoomStatus,
    RoomType,
    StaffContext,
    ValidationException,
    now,
)
from ..shared_kernel.application import parse_request
from . import interfaces as ports
from .domain import Room, RoomFilter, RoomOccupancyPolicy

# DTO (Data Transfer Objects) для входящих данных


class CreateRoomRequest(BaseModel):
    """Запрос на создание номера."""

    number: str = Field(..., min_length=1)
    type: RoomType
    floor: int
    capacity: int = Field(..., ge=1)
    price_per_night: Decimal = Field(..., ge=0)
    amenities: Set[str] = Field(default_factory=set)
    status: RoomStatus = RoomStatus.AVAILABLE

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class UpdateRoomRequest(BaseModel):
    """Запрос на изменение номера. Не переданные поля не меняются."""

    number: Optional[str] = Field(None, min_length=1)
    type: Optional[RoomType] = None
    floor: Optional[int] = None
    capacity: Optional[int] = Field(None, ge=1)
    price_per_night: Optional[Decimal] = Field(None, ge=0)
    amenities: Optional[Set[str]] = None
    status: Optional[RoomStatus] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


# DTO для исходящих данных


class RoomDTO(BaseModel):
    """DTO для представления номера."""

    id: EntityId
    number: str
    type: str
    floor: int
    capacity: int
    price_per_night: Decimal
    currency: str
    amenities: List[str]
    status: str

    @classmethod
    def from_domain(cls, room: Room) -> "RoomDTO":
        """Создает DTO из доменной модели."""
        return cls(
            id=room.id,
            number=room.number,
            type=room.type.value,
            floor=room.floor,
            capacity=room.capacity,
            price_per_night=room.price_per_night.amount,
            currency=room.price_per_night.currency,
            amenities=sorted(room.amenities),
            status=room.status.value,
        )


# Сервисы приложения


class RoomCatalogService:
    """Сервис приложения для работы с каталогом номеров."""

    def __init__(
        self,
        uow: ports.ICatalogUnitOfWork,
        currency: str = "INR",
        clock: Callable[[], datetime] = now,
        logger: Optional[ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._currency = currency
        self._clock = clock
        self._logger = logger or get_logger(__name__)

    def _load_room(self, ctx: StaffContext, room_id: EntityId) -> Room:
        room = self._uow.rooms.get_by_id(room_id)
        # Номера чужого аккаунта не видны
        if room is None or room.account_id != ctx.account_id:
            raise NotFoundException("Номер", room_id)
        return room

    def _derive_status(self, room: Room, requested: RoomStatus) -> RoomStatus:
        bookings = self._uow.bookings.find_by_room(room.id, exclude_cancelled=True)
        status = RoomOccupancyPolicy.derive_status(requested, bookings, self._clock().date())
        if status != requested:
            self._logger.info(
                "Room status derived from bookings",
                room_id=room.id,
                requested=requested.value,
                to_status=status.value,
            )
        return status

    def create_room(
        self, ctx: StaffContext, request: Union[CreateRoomRequest, Mapping[str, Any]]
    ) -> RoomDTO:
        """Создает номер в каталоге аккаунта."""
        request = parse_request(CreateRoomRequest, request)
        if request.status == RoomStatus.OCCUPIED:
            raise ValidationException(
                "Статус 'occupied' устанавливается только подтверждением бронирования"
            )

        room = Room(
            account_id=ctx.account_id,
            number=request.number,
            type=request.type,
            floor=request.floor,
            capacity=request.capacity,
            price_per_night=Money(amount=request.price_per_night, currency=self._currency),
            amenities=request.amenities,
            status=request.status,
        )

        with self._uow:
            if self._uow.rooms.find_by_number(ctx.account_id, room.number) is not None:
                raise ConflictException(f"Номер {room.number} уже существует")
            try:
                self._uow.rooms.add(room)
            except ValueError as e:
                # Параллельное создание номера с тем же номером комнаты
                raise ConflictException(str(e)) from e

        self._logger.info(
            "Room created", room_id=room.id, number=room.number, account_id=ctx.account_id
        )
        return RoomDTO.from_domain(room)

    def get_room(self, ctx: StaffContext, room_id: EntityId) -> RoomDTO:
        """Возвращает информацию о номере."""
        return RoomDTO.from_domain(self._load_room(ctx, room_id))

    def list_rooms(
        self,
        ctx: StaffContext,
        filters: Union[RoomFilter, Mapping[str, Any], None] = None,
    ) -> List[RoomDTO]:
        """Возвращает номера аккаунта с фильтрацией по типу, статусу и этажу."""
        filters = parse_request(RoomFilter, filters or {})
        rooms = self._uow.rooms.find_by_account(ctx.account_id, filters)
        return [RoomDTO.from_domain(room) for room in rooms]

    def update_room(
        self,
        ctx: StaffContext,
        room_id: EntityId,
        request: Union[UpdateRoomRequest, Mapping[str, Any]],
        override: bool = False,
    ) -> RoomDTO:
        """
        Обновляет атрибуты номера.

        Статус 'occupied' производный: переводить номер в него или из него
        напрямую нельзя. С override=True правка применяется как
        административная и записывается в журнал как расходящаяся с бронированиями.
        Номер, выведенный из обслуживания, получает статус по подтвержденным
        бронированиям на текущие сутки.
        """
        request = parse_request(UpdateRoomRequest, request)
        changes = request.model_dump(exclude_unset=True)

        with self._uow.lock_room(room_id), self._uow:
            room = self._load_room(ctx, room_id)

            new_status = changes.pop("status", None)
            if new_status is not None and new_status != room.status:
                touches_occupied = RoomStatus.OCCUPIED in (new_status, room.status)
                if touches_occupied and not override:
                    raise ValidationException(
                        f"Нельзя напрямую сменить статус {room.status.value} -> "
                        f"{new_status.value}: статус 'occupied' выводится из бронирований"
                    )
                if touches_occupied:
                    self._logger.warning(
                        "Administrative room status override, inconsistent with booking state",
                        room_id=room.id,
                        from_status=room.status.value,
                        to_status=new_status.value,
                        staff_id=ctx.staff_id,
                    )
                elif room.in_maintenance:
                    # После обслуживания статус снова выводится из бронирований
                    new_status = self._derive_status(room, new_status)
                room.status = new_status

            new_price = changes.pop("price_per_night", None)
            if new_price is not None:
                # Цена уже созданных бронирований зафиксирована и не меняется
                room.price_per_night = Money(
                    amount=new_price, currency=room.price_per_night.currency
                )
            if "number" in changes:
                existing = self._uow.rooms.find_by_number(ctx.account_id, changes["number"])
                if existing is not None and existing.id != room.id:
                    raise ConflictException(f"Номер {changes['number']} уже существует")

            for field, value in changes.items():
                if value is not None:
                    setattr(room, field, value)

            try:
                self._uow.rooms.update(room)
            except ValueError as e:
                # Параллельное переименование другого номера в тот же номер комнаты
                raise ConflictException(str(e)) from e

        self._logger.info("Room updated", room_id=room.id, fields=sorted(request.model_fields_set))
        return RoomDTO.from_domain(room)

    def delete_room(self, ctx: StaffContext, room_id: EntityId) -> None:
        """Удаляет номер, если на него не ссылается ни одно неотмененное бронирование."""
        with self._uow.lock_room(room_id), self._uow:
            room = self._load_room(ctx, room_id)
            active = self._uow.bookings.find_by_room(room.id, exclude_cancelled=True)
            if active:
                raise ConflictException(
                    f"Номер {room.number} нельзя удалить: на него ссылаются неотмененные "
                    f"бронирования ({len(active)})"
                )
            self._uow.rooms.delete(room.id)

        self._logger.info("Room deleted", room_id=room_id, account_id=ctx.account_id)
