# hotel_inventory/notifications/tasks.py - Celery задачи

from typing import Any, Dict, Optional

from celery import shared_task

from ..log import get_logger
from ..shared_kernel import DependencyException
from .domain import EmailMessage
from .interfaces import IEmailSender

logger = get_logger(__name__)

_sender: Optional[IEmailSender] = None


def set_email_sender(sender: Optional[IEmailSender]) -> None:
    """Задает отправителя писем для задач этого процесса (None - по настройкам)."""
    global _sender
    _sender = sender


def get_email_sender() -> IEmailSender:
    """Возвращает отправителя писем, при первом вызове собирая его из настроек."""
    global _sender
    if _sender is None:
        from ..config import get_settings
        from .infrastructure import create_email_sender

        _sender = create_email_sender(get_settings())
    return _sender


@shared_task(name="hotel_inventory.notifications.send_guest_email")
def send_guest_email(payload: Dict[str, Any]) -> bool:
    """Отправка письма гостю. Ошибки доставки записываются в журнал, повторов нет."""
    message = EmailMessage.model_validate(payload)
    try:
        get_email_sender().send(message)
    except DependencyException as e:
        logger.error(
            "Notification delivery failed",
            booking_id=message.booking_id,
            to=message.to,
            error=str(e),
        )
        return False
    except Exception as e:
        logger.error(
            "Unexpected notification sender error",
            booking_id=message.booking_id,
            to=message.to,
            error=str(e),
        )
        return False

    logger.debug("Notification delivered", booking_id=message.booking_id)
    return True
