"""
Модуль отчетности (Reporting).

Считает показатели панели управления: занятость, бронирования,
гостей и выручку. Ничего не изменяет.
"""

from . import application, interfaces

__all__ = [
    "application",
    "interfaces",
]
