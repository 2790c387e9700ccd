"""
Доменная модель уведомлений: письма гостю о состоянии бронирования.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from ..shared_kernel import BookingStatus, EntityId, generate_id

if TYPE_CHECKING:
    from ..booking.domain import Booking


class EmailMessage(BaseModel):
    """Письмо, поставленное в очередь на отправку."""

    id: EntityId = Field(default_factory=generate_id)
    booking_id: EntityId
    to: str
    subject: str
    body: str


def _stay_details(booking: "Booking") -> str:
    return (
        f"  Заезд: {booking.period.check_in.isoformat()}\n"
        f"  Выезд: {booking.period.check_out.isoformat()}\n"
        f"  Количество гостей: {booking.number_of_guests}\n"
        f"  Стоимость: {booking.total_price.amount} {booking.total_price.currency}\n"
    )


def confirmation_message(booking: "Booking") -> EmailMessage:
    """Письмо о принятом или подтвержденном бронировании."""
    if booking.status == BookingStatus.CONFIRMED:
        headline = "Ваше бронирование подтверждено."
    else:
        headline = "Ваше бронирование получено и ожидает подтверждения."
    body = (
        f"Уважаемый(ая) {booking.guest_name},\n\n"
        f"{headline} Детали:\n"
        f"{_stay_details(booking)}\n"
        "Если у вас есть вопросы, свяжитесь с нами.\n"
        "Спасибо, что выбрали наш отель!\n"
    )
    return EmailMessage(
        booking_id=booking.id,
        to=booking.guest_email,
        subject="Подтверждение бронирования",
        body=body,
    )


def rejection_message(booking: "Booking", reason: str) -> EmailMessage:
    """Письмо об отклонении или отмене бронирования."""
    body = (
        f"Уважаемый(ая) {booking.guest_name},\n\n"
        "К сожалению, мы не можем сохранить ваше бронирование по следующей причине:\n"
        f"  {reason}\n\n"
        f"{_stay_details(booking)}\n"
        "Попробуйте выбрать другие даты или свяжитесь с нами напрямую.\n"
        "Приносим извинения за неудобства.\n"
    )
    return EmailMessage(
        booking_id=booking.id,
        to=booking.guest_email,
        subject="Изменение статуса бронирования",
        body=body,
    )
