"""
Прикладной слой контекста бронирования.

Содержит сервисы приложения, которые координируют взаимодействие
внешних интерфейсов с доменной моделью: жизненный цикл бронирования
и проверку доступности номеров.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..catalog.application import RoomDTO
from ..catalog.domain import Room, RoomOccupancyPolicy
from ..log import ILogger, get_logger
from ..shared_kernel import (
    BookingStatus,
    ConflictException,
    DateRange,
    DomainEvent,
    EntityId,
    NotFoundException,
    RoomType,
    StaffContext,
    ValidationException,
    now,
)
from ..shared_kernel.application import parse_request
from . import interfaces as ports
from .domain import AvailabilityIndex, Booking, BookingFilter


def _date_only(v):
    # Время суток не участвует в сравнении диапазонов
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, str) and "T" in v:
        return datetime.fromisoformat(v).date()
    return v


# DTO (Data Transfer Objects) для входящих данных


class CreateBookingRequest(BaseModel):
    """Запрос на создание бронирования."""

    model_config = ConfigDict(str_strip_whitespace=True)

    room_id: EntityId
    guest_name: str = Field(..., min_length=1)
    guest_email: EmailStr
    guest_phone: str = Field(..., min_length=1)
    check_in: date
    check_out: date
    number_of_guests: int = Field(..., ge=1)
    special_requests: Optional[str] = None
    booking_source: str = "website"

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return _date_only(v)

    @model_validator(mode="after")
    def check_out_after_check_in(self) -> "CreateBookingRequest":
        if self.check_out <= self.check_in:
            raise ValueError("Дата выезда должна быть позже даты заезда")
        return self


class UpdateBookingRequest(BaseModel):
    """Запрос на изменение бронирования. Не переданные поля не меняются."""

    model_config = ConfigDict(str_strip_whitespace=True)

    check_in: Optional[date] = None
    check_out: Optional[date] = None
    number_of_guests: Optional[int] = Field(None, ge=1)
    special_requests: Optional[str] = None

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return _date_only(v)


class BookingQuery(BaseModel):
    """Параметры выборки бронирований аккаунта."""

    status: Optional[BookingStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sort: Literal["asc", "desc"] = "desc"
    limit: Optional[int] = Field(None, ge=1)


# DTO для исходящих данных


class BookingDTO(BaseModel):
    """DTO для представления бронирования."""

    id: EntityId
    room_id: EntityId
    room: Optional[RoomDTO] = None
    guest_name: str
    guest_email: str
    guest_phone: str
    check_in: date
    check_out: date
    nights: int
    number_of_guests: int
    total_price: Decimal
    currency: str
    status: BookingStatus
    payment_status: str
    special_requests: Optional[str]
    booking_source: str
    verified_by: Optional[EntityId]
    verification_date: Optional[datetime]
    cancellation_reason: Optional[str]
    created_at: datetime

    @classmethod
    def from_domain(cls, booking: Booking, room: Optional[Room] = None) -> "BookingDTO":
        """Создает DTO из доменной модели."""
        return cls(
            id=booking.id,
            room_id=booking.room_id,
            room=RoomDTO.from_domain(room) if room is not None else None,
            guest_name=booking.guest_name,
            guest_email=booking.guest_email,
            guest_phone=booking.guest_phone,
            check_in=booking.period.check_in,
            check_out=booking.period.check_out,
            nights=booking.nights,
            number_of_guests=booking.number_of_guests,
            total_price=booking.total_price.amount,
            currency=booking.total_price.currency,
            status=booking.status,
            payment_status=booking.payment_status.value,
            special_requests=booking.special_requests,
            booking_source=booking.booking_source,
            verified_by=booking.verified_by,
            verification_date=booking.verification_date,
            cancellation_reason=booking.cancellation_reason,
            created_at=booking.created_at,
        )


class AvailabilityDTO(BaseModel):
    """Результат проверки доступности номера."""

    room_id: EntityId
    check_in: date
    check_out: date
    is_available: bool
    conflicting_booking_ids: List[EntityId] = Field(default_factory=list)


def _make_period(check_in: Any, check_out: Any) -> DateRange:
    try:
        return DateRange(check_in=_date_only(check_in), check_out=_date_only(check_out))
    except ValueError as e:
        raise ValidationException(str(e)) from e


# Сервисы приложения


class BookingApplicationService:
    """
    Сервис приложения для жизненного цикла бронирований.

    Проверка доступности и запись выполняются под блокировкой номера
    внутри одной транзакции. События публикуются только после фиксации.
    """

    def __init__(
        self,
        uow: ports.IHotelUnitOfWork,
        clock: Callable[[], datetime] = now,
        list_limit: int = 10,
        logger: Optional[ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._clock = clock
        self._list_limit = list_limit
        self._logger = logger or get_logger(__name__)

    # Вспомогательные методы

    def _load_room(self, ctx: StaffContext, room_id: EntityId) -> Room:
        room = self._uow.rooms.get_by_id(room_id)
        if room is None or room.account_id != ctx.account_id:
            raise NotFoundException("Номер", room_id)
        return room

    def _load_booking(self, ctx: StaffContext, booking_id: EntityId) -> Booking:
        booking = self._uow.bookings.get_by_id(booking_id)
        # Бронирования чужого аккаунта не видны
        if booking is None or booking.account_id != ctx.account_id:
            raise NotFoundException("Бронирование", booking_id)
        return booking

    def _refresh_room_status(self, room_id: EntityId) -> Optional[Room]:
        """Пересчитывает кэшированный статус номера по оставшимся бронированиям."""
        room = self._uow.rooms.get_by_id(room_id)
        if room is None:
            return None
        bookings = self._uow.bookings.find_by_room(room_id, exclude_cancelled=True)
        status = RoomOccupancyPolicy.derive_status(
            room.status, bookings, self._clock().date()
        )
        if status != room.status:
            self._logger.info(
                "Room status recomputed",
                room_id=room.id,
                from_status=room.status.value,
                to_status=status.value,
            )
            room.status = status
            self._uow.rooms.update(room)
        return room

    def _publish(self, events: List[DomainEvent]) -> None:
        for event in events:
            self._uow.event_bus.publish(event)

    # Операции

    def create_booking(
        self,
        ctx: StaffContext,
        request: Union[CreateBookingRequest, Mapping[str, Any]],
    ) -> BookingDTO:
        """Создает новое бронирование в статусе pending."""
        request = parse_request(CreateBookingRequest, request)
        period = _make_period(request.check_in, request.check_out)

        with self._uow.lock_room(request.room_id), self._uow:
            room = self._load_room(ctx, request.room_id)

            booking = Booking.create(
                account_id=ctx.account_id,
                room=room,
                guest_name=request.guest_name,
                guest_email=request.guest_email,
                guest_phone=request.guest_phone,
                period=period,
                number_of_guests=request.number_of_guests,
                special_requests=request.special_requests,
                booking_source=request.booking_source,
                created_at=self._clock(),
            )

            # Проверяем доступность номера на выбранные даты
            availability = AvailabilityIndex(self._uow.bookings)
            if not availability.is_available(room.id, period):
                raise ConflictException(
                    f"Номер {room.number} уже забронирован на выбранные даты"
                )

            events = booking.pull_domain_events()
            self._uow.bookings.add(booking)

        self._logger.info(
            "Booking created",
            booking_id=booking.id,
            room_id=room.id,
            check_in=period.check_in,
            check_out=period.check_out,
            total_price=booking.total_price.amount,
        )
        self._publish(events)
        return BookingDTO.from_domain(booking, room)

    def confirm_booking(self, ctx: StaffContext, booking_id: EntityId) -> BookingDTO:
        """Подтверждает бронирование (только из статуса pending)."""
        room_id = self._load_booking(ctx, booking_id).room_id

        with self._uow.lock_room(room_id), self._uow:
            # Перечитываем под блокировкой: статус мог измениться параллельно
            booking = self._load_booking(ctx, booking_id)
            booking.confirm(verifier_id=ctx.staff_id, at=self._clock())
            events = booking.pull_domain_events()
            self._uow.bookings.update(booking)
            room = self._refresh_room_status(room_id)

        self._logger.info(
            "Booking confirmed", booking_id=booking.id, verified_by=ctx.staff_id
        )
        self._publish(events)
        return BookingDTO.from_domain(booking, room)

    def reject_booking(
        self, ctx: StaffContext, booking_id: EntityId, reason: str
    ) -> BookingDTO:
        """Отклоняет бронирование с указанием причины."""
        return self._cancel(ctx, booking_id, reason, action="rejected")

    def cancel_booking(
        self, ctx: StaffContext, booking_id: EntityId, reason: str
    ) -> BookingDTO:
        """Отменяет бронирование с указанием причины."""
        return self._cancel(ctx, booking_id, reason, action="cancelled")

    def _cancel(
        self, ctx: StaffContext, booking_id: EntityId, reason: str, action: str
    ) -> BookingDTO:
        if reason is None or not str(reason).strip():
            raise ValidationException("Необходимо указать причину отмены")
        room_id = self._load_booking(ctx, booking_id).room_id

        with self._uow.lock_room(room_id), self._uow:
            booking = self._load_booking(ctx, booking_id)
            booking.cancel(reason, at=self._clock())
            events = booking.pull_domain_events()
            self._uow.bookings.update(booking)
            # Номер освобождается, только если сегодня его не занимает другое бронирование
            room = self._refresh_room_status(room_id)

        self._logger.info(
            f"Booking {action}", booking_id=booking.id, reason=booking.cancellation_reason
        )
        self._publish(events)
        return BookingDTO.from_domain(booking, room)

    def update_booking(
        self,
        ctx: StaffContext,
        booking_id: EntityId,
        request: Union[UpdateBookingRequest, Mapping[str, Any]],
    ) -> BookingDTO:
        """Меняет даты, число гостей или пожелания активного бронирования."""
        request = parse_request(UpdateBookingRequest, request)
        room_id = self._load_booking(ctx, booking_id).room_id

        with self._uow.lock_room(room_id), self._uow:
            booking = self._load_booking(ctx, booking_id)
            room = self._load_room(ctx, room_id)

            period = _make_period(
                request.check_in or booking.period.check_in,
                request.check_out or booking.period.check_out,
            )
            booking.reschedule(
                period=period,
                number_of_guests=request.number_of_guests or booking.number_of_guests,
                room_capacity=room.capacity,
                special_requests=request.special_requests,
                at=self._clock(),
            )

            # Само бронирование не считается конфликтом
            availability = AvailabilityIndex(self._uow.bookings)
            if not availability.is_available(room.id, period, exclude_booking_id=booking.id):
                raise ConflictException(
                    f"Номер {room.number} недоступен на выбранные даты"
                )

            events = booking.pull_domain_events()
            self._uow.bookings.update(booking)
            room = self._refresh_room_status(room_id) or room

        self._logger.info(
            "Booking updated",
            booking_id=booking.id,
            check_in=booking.period.check_in,
            check_out=booking.period.check_out,
        )
        self._publish(events)
        return BookingDTO.from_domain(booking, room)

    def get_booking(self, ctx: StaffContext, booking_id: EntityId) -> BookingDTO:
        """Возвращает информацию о бронировании вместе с номером."""
        booking = self._load_booking(ctx, booking_id)
        return BookingDTO.from_domain(booking, self._uow.rooms.get_by_id(booking.room_id))

    def list_bookings(
        self,
        ctx: StaffContext,
        query: Union[BookingQuery, Mapping[str, Any], None] = None,
    ) -> List[BookingDTO]:
        """Возвращает бронирования аккаунта с фильтрацией, сортировкой и лимитом."""
        query = parse_request(BookingQuery, query or {})
        bookings = self._uow.bookings.find_by_account(
            ctx.account_id,
            filters=BookingFilter(
                status=query.status, start_date=query.start_date, end_date=query.end_date
            ),
            descending=query.sort == "desc",
            limit=query.limit or self._list_limit,
        )
        rooms = {}
        result = []
        for booking in bookings:
            if booking.room_id not in rooms:
                rooms[booking.room_id] = self._uow.rooms.get_by_id(booking.room_id)
            result.append(BookingDTO.from_domain(booking, rooms[booking.room_id]))
        return result

    def refresh_room_statuses(self, ctx: StaffContext) -> List[RoomDTO]:
        """
        Пересчитывает статусы всех номеров аккаунта на текущую дату.

        Нужен при смене суток: заезды и выезды меняют занятость без
        каких-либо переходов бронирований.
        """
        refreshed = []
        for room in self._uow.rooms.find_by_account(ctx.account_id):
            with self._uow.lock_room(room.id), self._uow:
                updated = self._refresh_room_status(room.id)
            if updated is not None:
                refreshed.append(RoomDTO.from_domain(updated))
        return refreshed


class RoomAvailabilityService:
    """Сервис приложения для проверки доступности номеров."""

    def __init__(self, uow: ports.IHotelUnitOfWork):
        """Инициализирует сервис."""
        self._uow = uow

    def _load_room(self, ctx: StaffContext, room_id: EntityId) -> Room:
        room = self._uow.rooms.get_by_id(room_id)
        if room is None or room.account_id != ctx.account_id:
            raise NotFoundException("Номер", room_id)
        return room

    def check_availability(
        self, ctx: StaffContext, room_id: EntityId, check_in: Any, check_out: Any
    ) -> AvailabilityDTO:
        """Проверяет, свободен ли номер на период [check_in, check_out)."""
        period = _make_period(check_in, check_out)
        room = self._load_room(ctx, room_id)
        conflicts = AvailabilityIndex(self._uow.bookings).conflicts(room.id, period)
        return AvailabilityDTO(
            room_id=room.id,
            check_in=period.check_in,
            check_out=period.check_out,
            is_available=not conflicts,
            conflicting_booking_ids=[booking.id for booking in conflicts],
        )

    def list_available_rooms(
        self,
        ctx: StaffContext,
        check_in: Any,
        check_out: Any,
        room_type: Optional[Union[RoomType, str]] = None,
        min_capacity: Optional[int] = None,
    ) -> List[RoomDTO]:
        """Возвращает номера аккаунта, свободные на весь период."""
        period = _make_period(check_in, check_out)
        if isinstance(room_type, str):
            room_type = room_type.strip().lower()

        availability = AvailabilityIndex(self._uow.bookings)
        available_rooms = []
        for room in self._uow.rooms.find_by_account(ctx.account_id):
            if room_type is not None and room.type != room_type:
                continue
            if min_capacity is not None and room.capacity < min_capacity:
                continue
            if availability.is_available(room.id, period):
                available_rooms.append(room)

        return [RoomDTO.from_domain(room) for room in available_rooms]
