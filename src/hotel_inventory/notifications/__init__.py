"""
Модуль уведомлений (Notifications).

Отправляет гостю письма о принятии, подтверждении и отклонении
бронирования. Доставка идет задачами Celery и не влияет на исход операций.
"""

from . import domain, event_handlers, infrastructure, interfaces, tasks

__all__ = [
    "domain",
    "event_handlers",
    "infrastructure",
    "interfaces",
    "tasks",
]
