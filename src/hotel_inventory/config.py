"""
Настройки приложения.

Читаются из переменных окружения с префиксом HOTEL_ и, при наличии, из файла .env.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Настройки учета номерного фонда."""

    model_config = SettingsConfigDict(
        env_prefix="HOTEL_", env_file=".env", extra="ignore"
    )

    # Базовые настройки
    app_name: str = "hotel-inventory"
    log_level: str = "INFO"
    currency: str = Field(default="INR", max_length=3)

    # Хранилище
    storage_backend: Literal["memory", "json"] = "memory"
    data_dir: str = "./data"

    # Выборки
    booking_list_limit: int = Field(default=10, ge=1)
    recent_bookings_limit: int = Field(default=10, ge=1)

    # Уведомления
    notifications_enabled: bool = True
    email_backend: Literal["log", "smtp"] = "log"
    email_sender: str = "reservations@hotel.local"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True

    # Celery: для локального запуска задачи выполняются синхронно, без воркера
    celery_broker_url: str = "memory://"
    celery_task_always_eager: bool = True


@lru_cache()
def get_settings() -> Settings:
    """Возвращает настройки процесса (читаются один раз)."""
    return Settings()
