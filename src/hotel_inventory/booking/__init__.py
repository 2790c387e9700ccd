"""
Модуль контекста бронирования (Booking Context).

Отвечает за бронирование номеров в отеле, включая:
- Создание, подтверждение, отклонение и отмену бронирований
- Проверку доступности номеров на период
- Поддержание статуса занятости номеров
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
