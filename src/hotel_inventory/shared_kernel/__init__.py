"""
Общее ядро (Shared Kernel) учета номерного фонда.

Содержит общие типы данных и утилиты, используемые в различных ограниченных контекстах.
"""

from .domain import (
    BookingStatus,
    ConflictException,
    DateRange,
    DependencyException,
    DomainEvent,
    # Исключения
    DomainException,
    # Базовые типы
    EntityId,
    InvalidTransitionException,
    # Основные классы
    Money,
    NotFoundException,
    PaymentStatus,
    RoomStatus,
    # Перечисления
    RoomType,
    StaffContext,
    ValidationException,
    generate_id,
    # Утилиты
    now,
)

__all__ = [
    # Базовые типы
    "EntityId",
    "generate_id",
    # Основные классы
    "Money",
    "DateRange",
    "StaffContext",
    "DomainEvent",
    # Перечисления
    "RoomType",
    "BookingStatus",
    "PaymentStatus",
    "RoomStatus",
    # Исключения
    "DomainException",
    "ValidationException",
    "NotFoundException",
    "ConflictException",
    "InvalidTransitionException",
    "DependencyException",
    # Утилиты
    "now",
]
