"""
Доменная модель контекста бронирования.

Содержит агрегат бронирования, его события и индекс доступности.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PrivateAttr, field_validator

from ..shared_kernel import (
    BookingStatus,
    DateRange,
    DomainEvent,
    EntityId,
    InvalidTransitionException,
    Money,
    PaymentStatus,
    ValidationException,
    generate_id,
    now,
)

if TYPE_CHECKING:
    from ..catalog.domain import Room
    from .interfaces import IBookingRepository


class Booking(BaseModel):
    """Бронирование номера в отеле."""

    model_config = ConfigDict(validate_assignment=True)

    id: EntityId = Field(default_factory=generate_id)
    account_id: EntityId  # Аккаунт, создавший бронирование
    room_id: EntityId
    guest_name: str = Field(..., min_length=1)
    guest_email: EmailStr
    guest_phone: str = Field(..., min_length=1)
    period: DateRange
    number_of_guests: int = Field(..., ge=1)
    # Цена за ночь на момент создания: последующие изменения цены номера не влияют
    nightly_rate: Money
    total_price: Money
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    special_requests: Optional[str] = None
    booking_source: str = "website"
    verified_by: Optional[EntityId] = None
    verification_date: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)

    _domain_events: List[DomainEvent] = PrivateAttr(default_factory=list)

    @field_validator("guest_name", "guest_phone")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Поле не может быть пустым")
        return v

    @property
    def nights(self) -> int:
        return self.period.nights

    @property
    def is_active(self) -> bool:
        """Активное бронирование учитывается при проверке доступности и занятости."""
        return self.status.is_active

    def occupies(self, day: date) -> bool:
        """Проверяет, что подтвержденное бронирование занимает номер в указанные сутки."""
        return self.status == BookingStatus.CONFIRMED and self.period.covers(day)

    def pull_domain_events(self) -> List[DomainEvent]:
        """Возвращает накопленные доменные события и очищает список."""
        events = list(self._domain_events)
        self._domain_events.clear()
        return events

    def _snapshot(self) -> "Booking":
        snapshot = self.model_copy(deep=True)
        snapshot._domain_events = []
        return snapshot

    @staticmethod
    def price_for(nightly_rate: Money, period: DateRange) -> Money:
        """Стоимость проживания: количество ночей на цену за ночь."""
        return nightly_rate * period.nights

    @classmethod
    def create(
        cls,
        account_id: EntityId,
        room: "Room",
        guest_name: str,
        guest_email: str,
        guest_phone: str,
        period: DateRange,
        number_of_guests: int,
        special_requests: Optional[str] = None,
        booking_source: str = "website",
        created_at: Optional[datetime] = None,
    ) -> "Booking":
        """Создает новое бронирование в статусе pending."""
        if number_of_guests > room.capacity:
            raise ValidationException(
                f"Превышена вместимость номера {room.number} "
                f"(макс. {room.capacity} человек)"
            )

        created_at = created_at or now()
        booking = cls(
            account_id=account_id,
            room_id=room.id,
            guest_name=guest_name,
            guest_email=guest_email,
            guest_phone=guest_phone,
            period=period,
            number_of_guests=number_of_guests,
            nightly_rate=room.price_per_night,
            total_price=cls.price_for(room.price_per_night, period),
            special_requests=special_requests,
            booking_source=booking_source,
            created_at=created_at,
            updated_at=created_at,
        )
        booking._domain_events.append(BookingCreated(booking=booking._snapshot()))
        return booking

    def confirm(self, verifier_id: EntityId, at: Optional[datetime] = None) -> None:
        """Подтверждает бронирование."""
        if self.status != BookingStatus.PENDING:
            raise InvalidTransitionException(
                f"Невозможно подтвердить бронирование в статусе {self.status.value}"
            )

        at = at or now()
        self.status = BookingStatus.CONFIRMED
        self.verified_by = verifier_id
        self.verification_date = at
        self.updated_at = at
        self._domain_events.append(BookingConfirmed(booking=self._snapshot()))

    def cancel(self, reason: str, at: Optional[datetime] = None) -> None:
        """Отменяет (или отклоняет) бронирование."""
        if reason is None or not reason.strip():
            raise ValidationException("Необходимо указать причину отмены")
        if self.status.is_terminal:
            raise InvalidTransitionException(
                f"Невозможно отменить бронирование в статусе {self.status.value}"
            )

        reason = reason.strip()
        self.status = BookingStatus.CANCELLED
        self.cancellation_reason = reason
        self.updated_at = at or now()
        self._domain_events.append(
            BookingCancelled(booking=self._snapshot(), reason=reason)
        )

    def reschedule(
        self,
        period: DateRange,
        number_of_guests: int,
        room_capacity: int,
        special_requests: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> None:
        """Меняет даты и состав проживания активного бронирования."""
        if not self.is_active:
            raise InvalidTransitionException(
                f"Невозможно изменить бронирование в статусе {self.status.value}"
            )
        if number_of_guests > room_capacity:
            raise ValidationException(
                f"Превышена вместимость номера (макс. {room_capacity} человек)"
            )

        self.period = period
        self.number_of_guests = number_of_guests
        # Пересчет по цене, зафиксированной при создании
        self.total_price = self.price_for(self.nightly_rate, period)
        if special_requests is not None:
            self.special_requests = special_requests
        self.updated_at = at or now()
        self._domain_events.append(BookingUpdated(booking=self._snapshot()))


class BookingCreated(DomainEvent):
    """Событие создания бронирования."""

    booking: Booking


class BookingConfirmed(DomainEvent):
    """Событие подтверждения бронирования."""

    booking: Booking


class BookingCancelled(DomainEvent):
    """Событие отмены бронирования."""

    booking: Booking
    reason: str


class BookingUpdated(DomainEvent):
    """Событие изменения дат или состава бронирования."""

    booking: Booking


class BookingFilter(BaseModel):
    """Параметры отбора бронирований."""

    status: Optional[BookingStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def matches(self, booking: Booking) -> bool:
        if self.status is not None and booking.status != self.status:
            return False
        # Бронирование должно целиком попадать в окно [start_date, end_date]
        if self.start_date is not None and booking.period.check_in < self.start_date:
            return False
        if self.end_date is not None and booking.period.check_out > self.end_date:
            return False
        return True


class AvailabilityIndex:
    """
    Индекс доступности номеров.

    Номер доступен на период, если ни одно неотмененное бронирование этого
    номера не пересекается с периодом. Интервалы полуоткрытые, поэтому
    выезд одного гостя в день заезда другого конфликтом не считается.
    """

    def __init__(self, booking_repository: "IBookingRepository"):
        self.booking_repository = booking_repository

    def conflicts(
        self,
        room_id: EntityId,
        period: DateRange,
        exclude_booking_id: Optional[EntityId] = None,
    ) -> List[Booking]:
        """Возвращает бронирования номера, пересекающиеся с периодом."""
        # Выборка ограничена одним номером
        bookings = self.booking_repository.find_by_room(room_id, exclude_cancelled=True)
        return [
            booking
            for booking in bookings
            if booking.id != exclude_booking_id and booking.period.overlaps(period)
        ]

    def is_available(
        self,
        room_id: EntityId,
        period: DateRange,
        exclude_booking_id: Optional[EntityId] = None,
    ) -> bool:
        """Проверяет, доступен ли номер на указанные даты."""
        return not self.conflicts(room_id, period, exclude_booking_id)
