"""
Инфраструктурный слой уведомлений.

Письма отправляются задачами Celery: операции бронирования никогда
не ждут сетевого ввода-вывода и не падают из-за ошибок доставки.
"""

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING, Callable, Optional

from ..config import Settings
from ..log import ILogger, get_logger
from ..shared_kernel import DependencyException, EntityId
from .domain import EmailMessage, confirmation_message, rejection_message
from .interfaces import IEmailSender
from .tasks import send_guest_email

if TYPE_CHECKING:
    from ..booking.domain import Booking


class LoggingEmailSender(IEmailSender):
    """Отправитель для разработки: письмо только записывается в журнал."""

    def __init__(self, logger: Optional[ILogger] = None):
        self._logger = logger or get_logger(__name__)

    def send(self, message: EmailMessage) -> None:
        self._logger.info(
            f"=== Email: {message.subject} ===",
            to=message.to,
            booking_id=message.booking_id,
            body=message.body,
        )


class SmtpEmailSender(IEmailSender):
    """Отправка писем через SMTP-сервер."""

    def __init__(
        self,
        smtp_host: str = "localhost",
        smtp_port: int = 587,
        smtp_user: str = "",
        smtp_password: Optional[str] = None,
        sender_email: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password or ""
        self.sender_email = sender_email or smtp_user
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, message: EmailMessage) -> None:
        msg = MIMEMultipart()
        msg["From"] = self.sender_email
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg.attach(MIMEText(message.body, "plain", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.smtp_user:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DependencyException(
                f"Не удалось отправить письмо на {message.to}: {e}"
            ) from e


def create_email_sender(settings: Settings) -> IEmailSender:
    """Создает отправителя писем по настройкам (log или smtp)."""
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_user=settings.smtp_user,
            smtp_password=settings.smtp_password,
            sender_email=settings.email_sender,
            use_tls=settings.smtp_use_tls,
        )
    return LoggingEmailSender()


class CeleryNotifier:
    """
    Уведомитель, ставящий письма в очередь задач Celery.

    notify_* только отправляют задачу брокеру. Ошибки подготовки письма
    и постановки задачи записываются в журнал и не возвращаются вызывающему
    коду, повторных попыток нет.
    """

    def __init__(self, logger: Optional[ILogger] = None):
        self._logger = logger or get_logger(__name__)

    def notify_confirmation(self, booking: "Booking") -> None:
        self._dispatch(lambda: confirmation_message(booking), booking.id)

    def notify_rejection(self, booking: "Booking", reason: str) -> None:
        self._dispatch(lambda: rejection_message(booking, reason), booking.id)

    def _dispatch(self, build: Callable[[], EmailMessage], booking_id: EntityId) -> None:
        try:
            message = build()
            send_guest_email.delay(message.model_dump(mode="json"))
        except Exception as e:
            self._logger.error(
                "Failed to enqueue notification", booking_id=booking_id, error=str(e)
            )
        else:
            self._logger.debug("Notification enqueued", booking_id=booking_id)


class NullNotifier:
    """Уведомитель для выключенных уведомлений."""

    def __init__(self, logger: Optional[ILogger] = None):
        self._logger = logger or get_logger(__name__)

    def notify_confirmation(self, booking: "Booking") -> None:
        self._logger.debug("Notifications disabled, confirmation skipped", booking_id=booking.id)

    def notify_rejection(self, booking: "Booking", reason: str) -> None:
        self._logger.debug("Notifications disabled, rejection skipped", booking_id=booking.id)
