"""
Модуль каталога номеров (Room Catalog).

Отвечает за номерной фонд аккаунта:
- Создание, изменение и удаление номеров
- Отбор номеров по типу, статусу и этажу
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
