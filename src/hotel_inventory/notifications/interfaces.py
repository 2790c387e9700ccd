"""
Интерфейсы (порты) для контекста уведомлений.
"""

from __future__ import annotations

from typing import Protocol

from .domain import EmailMessage


class IEmailSender(Protocol):
    """Интерфейс для отправки email-сообщений. Ошибки выбрасываются наружу."""

    def send(self, message: EmailMessage) -> None: ...
