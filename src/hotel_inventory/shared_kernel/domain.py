"""
Основные доменные типы и утилиты общего ядра.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Идентификаторы непрозрачны для ядра: это стабильные строки
EntityId = str


def generate_id() -> EntityId:
    """Генерирует новый идентификатор."""
    return uuid4().hex


class Money(BaseModel):
    """Денежная сумма с валютой."""

    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(..., ge=0, description="Сумма денег")
    currency: str = Field(
        default="INR", max_length=3, description="Код валюты (ISO 4217)"
    )

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            raise TypeError("Можно складывать только объекты Money")
        if self.currency != other.currency:
            raise ValueError("Нельзя складывать разные валюты")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __mul__(self, multiplier: int) -> "Money":
        if not isinstance(multiplier, (int, Decimal)):
            raise TypeError("Множитель должен быть целым числом или Decimal")
        if multiplier < 0:
            raise ValueError("Множитель не может быть отрицательным")
        return Money(amount=self.amount * multiplier, currency=self.currency)


class DateRange(BaseModel):
    """
    Период проживания.

    Интервал полуоткрытый: [check_in, check_out). День выезда
    не считается занятым, поэтому брони "встык" не пересекаются.
    """

    model_config = ConfigDict(frozen=True)

    check_in: date
    check_out: date

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def drop_time_of_day(cls, v):
        # Время суток не участвует в сравнении диапазонов
        if isinstance(v, datetime):
            return v.date()
        return v

    @model_validator(mode="after")
    def check_out_after_check_in(self) -> "DateRange":
        if self.check_out <= self.check_in:
            raise ValueError("Дата выезда должна быть позже даты заезда")
        return self

    @property
    def nights(self) -> int:
        """Количество ночей в бронировании."""
        return (self.check_out - self.check_in).days

    def overlaps(self, other: "DateRange") -> bool:
        """Проверяет пересечение двух периодов."""
        return self.check_in < other.check_out and self.check_out > other.check_in

    def covers(self, day: date) -> bool:
        """Проверяет, что указанные сутки входят в период."""
        return self.check_in <= day < self.check_out


class StaffContext(BaseModel):
    """
    Контекст вызова: от чьего имени выполняется операция.

    Ядро доверяет этим данным, проверка токенов выполняется снаружи.
    """

    model_config = ConfigDict(frozen=True)

    account_id: EntityId
    staff_id: EntityId


class DomainEvent(BaseModel):
    """Базовый класс для всех доменных событий."""

    event_id: EntityId = Field(default_factory=generate_id)
    occurred_on: datetime = Field(default_factory=lambda: now())


# Общие перечисления
class RoomType(str, Enum):
    """Типы номеров в отеле."""

    STANDARD = "standard"
    DELUXE = "deluxe"
    SUITE = "suite"


class BookingStatus(str, Enum):
    """Статусы бронирования."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_active(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.CANCELLED, BookingStatus.COMPLETED)


class PaymentStatus(str, Enum):
    """Статусы оплаты."""

    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class RoomStatus(str, Enum):
    """Статусы номеров."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    pass


class ValidationException(DomainException):
    """Некорректные или неполные входные данные."""

    pass


class NotFoundException(DomainException):
    """Запрошенный номер или бронирование не существует."""

    def __init__(self, entity: str, entity_id: Optional[EntityId]):
        super().__init__(f"{entity} с id {entity_id} не найден(о)")
        self.entity = entity
        self.entity_id = entity_id


class ConflictException(DomainException):
    """Операция противоречит текущему состоянию хранилища."""

    pass


class InvalidTransitionException(DomainException):
    """Переход статуса бронирования из текущего состояния запрещен."""

    pass


class DependencyException(DomainException):
    """Сбой внешней зависимости (например, отправки уведомления)."""

    pass


# Общие утилиты
def now() -> datetime:
    """
    Возвращает текущее местное время отеля.

    Единственный источник времени: текущая дата для статусов номеров
    и статистики берется как now().date().
    """
    return datetime.now()
