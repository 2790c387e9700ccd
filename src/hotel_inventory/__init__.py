"""
Учет номерного фонда отеля и бронирований.

Ограниченные контексты:
- catalog: каталог номеров
- booking: доступность и жизненный цикл бронирований
- notifications: письма гостям
- reporting: статистика для панели управления
"""

from .celery import app as celery_app

__version__ = "0.1.0"

__all__ = ("celery_app",)
