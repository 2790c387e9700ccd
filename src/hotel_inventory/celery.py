"""
Celery-приложение для фоновой отправки писем гостям.

Воркер запускается командой `celery -A hotel_inventory worker`. Брокер и
режим выполнения задач берутся из настроек (HOTEL_CELERY_*).
"""

from typing import Optional

from celery import Celery

from .config import Settings, get_settings

app = Celery("hotel_inventory")

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    task_ignore_result=True,
)

# Задачи контекстов, которые выполняются в воркере
app.autodiscover_tasks(["hotel_inventory.notifications"])


def configure_celery(settings: Optional[Settings] = None) -> Celery:
    """Применяет настройки брокера и режима выполнения задач."""
    settings = settings or get_settings()
    app.conf.update(
        broker_url=settings.celery_broker_url,
        task_always_eager=settings.celery_task_always_eager,
    )
    return app


configure_celery()
