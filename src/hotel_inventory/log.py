"""
Логирование.

Сервисы получают порт ILogger (сообщение + именованный контекст),
а StdLibLogger переводит вызовы в стандартный модуль logging.
"""

import json
import logging
from typing import Any, Optional, Protocol

PACKAGE_LOGGER = "hotel_inventory"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class ILogger(Protocol):
    """Интерфейс для логгера."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...


class StdLibLogger(ILogger):
    """Адаптер ILogger поверх logging.Logger."""

    def __init__(self, name: str = PACKAGE_LOGGER):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, context: dict) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if context:
            message = f"{message} | {json.dumps(context, default=str, ensure_ascii=False)}"
        self._logger.log(level, message)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)


def get_logger(name: Optional[str] = None) -> ILogger:
    """Возвращает логгер для модуля пакета."""
    return StdLibLogger(name or PACKAGE_LOGGER)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Настраивает корневой логгер пакета (повторный вызов безопасен)."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())
    if not any(getattr(h, "_hotel_inventory", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._hotel_inventory = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
