"""
Прикладной слой отчетности.

Сводка для панели управления вычисляется по текущему состоянию номеров
и бронирований при каждом запросе, без кэширования.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel, Field

from ..booking.application import BookingDTO
from ..booking.domain import Booking
from ..catalog.domain import Room
from ..shared_kernel import BookingStatus, StaffContext, now
from . import interfaces as ports


class StatsScope(str, Enum):
    """Область, по которой считается статистика."""

    ACCOUNT = "account"  # Только номера и бронирования аккаунта вызывающего
    GLOBAL = "global"  # Все данные хранилища


class DashboardStats(BaseModel):
    """Сводные показатели для панели управления."""

    total_rooms: int = 0
    occupied_rooms: int = 0
    available_rooms: int = 0
    total_bookings: int = 0
    pending_bookings: int = 0
    confirmed_bookings: int = 0
    total_guests: int = 0
    current_guests: int = 0
    monthly_revenue: Decimal = Decimal("0")
    yearly_revenue: Decimal = Decimal("0")
    currency: str = "INR"
    recent_bookings: List[BookingDTO] = Field(default_factory=list)


def _revenue(bookings: Iterable[Booking], since: datetime) -> Decimal:
    # Выручка - подтвержденные бронирования, созданные в периоде
    return sum(
        (
            booking.total_price.amount
            for booking in bookings
            if booking.status == BookingStatus.CONFIRMED and booking.created_at >= since
        ),
        Decimal("0"),
    )


class StatisticsService:
    """Сервис приложения для расчета статистики."""

    def __init__(
        self,
        rooms: ports.IRoomReader,
        bookings: ports.IBookingReader,
        clock: Callable[[], datetime] = now,
        recent_limit: int = 10,
        currency: str = "INR",
    ):
        """Инициализирует сервис."""
        self._rooms = rooms
        self._bookings = bookings
        self._clock = clock
        self._recent_limit = recent_limit
        self._currency = currency

    def _load(self, ctx: StaffContext, scope: StatsScope):
        if scope == StatsScope.GLOBAL:
            return self._rooms.find_all(), self._bookings.find_all()
        return (
            self._rooms.find_by_account(ctx.account_id),
            self._bookings.find_by_account(ctx.account_id),
        )

    def get_dashboard(
        self,
        ctx: StaffContext,
        scope: StatsScope = StatsScope.ACCOUNT,
        recent_limit: Optional[int] = None,
    ) -> DashboardStats:
        """Возвращает сводку по номерам, бронированиям, гостям и выручке."""
        scope = StatsScope(scope)
        rooms, bookings = self._load(ctx, scope)

        current = self._clock()
        today: date = current.date()
        month_start = datetime(current.year, current.month, 1)
        year_start = datetime(current.year, 1, 1)

        occupied = sum(1 for room in rooms if room.is_occupied)

        rooms_by_id = {room.id: room for room in rooms}
        recent = sorted(bookings, key=lambda booking: booking.created_at, reverse=True)
        recent = recent[: recent_limit or self._recent_limit]

        return DashboardStats(
            total_rooms=len(rooms),
            occupied_rooms=occupied,
            available_rooms=len(rooms) - occupied,
            total_bookings=len(bookings),
            pending_bookings=self._count(bookings, BookingStatus.PENDING),
            confirmed_bookings=self._count(bookings, BookingStatus.CONFIRMED),
            total_guests=sum(
                booking.number_of_guests
                for booking in bookings
                if booking.status != BookingStatus.CANCELLED
            ),
            current_guests=sum(
                booking.number_of_guests for booking in bookings if booking.occupies(today)
            ),
            monthly_revenue=_revenue(bookings, month_start),
            yearly_revenue=_revenue(bookings, year_start),
            currency=self._currency,
            recent_bookings=[
                BookingDTO.from_domain(booking, self._room_for(booking, rooms_by_id))
                for booking in recent
            ],
        )

    def _room_for(self, booking: Booking, rooms_by_id: dict) -> Optional[Room]:
        room = rooms_by_id.get(booking.room_id)
        if room is None:
            room = self._rooms.get_by_id(booking.room_id)
        return room

    @staticmethod
    def _count(bookings: Iterable[Booking], status: BookingStatus) -> int:
        return sum(1 for booking in bookings if booking.status == status)
