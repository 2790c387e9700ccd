from ..booking.domain import BookingCancelled, BookingConfirmed, BookingCreated
from ..booking.interfaces import INotifier


def on_booking_created(event: BookingCreated, notifier: "INotifier") -> None:
    """Обработчик события создания бронирования."""
    notifier.notify_confirmation(event.booking)


def on_booking_confirmed(event: BookingConfirmed, notifier: "INotifier") -> None:
    """Обработчик события подтверждения бронирования."""
    notifier.notify_confirmation(event.booking)


def on_booking_cancelled(event: BookingCancelled, notifier: "INotifier") -> None:
    """Обработчик события отмены бронирования."""
    notifier.notify_rejection(event.booking, event.reason)
