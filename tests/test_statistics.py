"""
Тесты для статистики панели управления.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from hotel_inventory.reporting.application import StatsScope


@pytest.fixture
def populated(make_room, make_booking, booking_service, ctx, other_ctx, clock):
    """
    Аккаунт с тремя номерами и четырьмя бронированиями:
    - подтвержденная текущая бронь (создана в июне, 2 гостя)
    - подтвержденная будущая бронь (создана в марте, 3 гостя)
    - ожидающая бронь (1 гость)
    - отмененная бронь (4 гостя)
    """
    first = make_room(price_per_night="2500", capacity=4)
    second = make_room(price_per_night="1000", capacity=4)
    make_room(status="maintenance")

    clock.current = datetime(2024, 3, 15, 9, 0)
    future = make_booking(second.id, date(2024, 8, 1), date(2024, 8, 4), number_of_guests=3)
    booking_service.confirm_booking(ctx, future.id)

    clock.current = datetime(2024, 6, 1, 9, 0)
    current = make_booking(first.id, date(2024, 6, 1), date(2024, 6, 3), number_of_guests=2)
    pending = make_booking(first.id, date(2024, 7, 1), date(2024, 7, 2), number_of_guests=1)
    cancelled = make_booking(second.id, date(2024, 6, 10), date(2024, 6, 12), number_of_guests=4)
    booking_service.cancel_booking(ctx, cancelled.id, "Гость передумал")

    clock.current = datetime(2024, 6, 2, 10, 0)
    booking_service.confirm_booking(ctx, current.id)

    other_room = make_room(context=other_ctx)
    make_booking(other_room.id, date(2024, 6, 1), date(2024, 6, 5), context=other_ctx)

    return {"current": current, "future": future, "pending": pending, "cancelled": cancelled}


def test_room_counters(statistics, ctx, populated):
    stats = statistics.get_dashboard(ctx)

    assert stats.total_rooms == 3
    assert stats.occupied_rooms == 1
    assert stats.available_rooms == 2


def test_booking_counters(statistics, ctx, populated):
    stats = statistics.get_dashboard(ctx)

    assert stats.total_bookings == 4
    assert stats.pending_bookings == 1
    assert stats.confirmed_bookings == 2


def test_guest_counters(statistics, ctx, populated):
    """Тест подсчета гостей: отмененные не учитываются, текущие - только проживающие."""
    stats = statistics.get_dashboard(ctx)

    assert stats.total_guests == 2 + 3 + 1
    assert stats.current_guests == 2


def test_revenue(statistics, ctx, populated):
    """Тест выручки: подтвержденные брони, созданные в текущем месяце и году."""
    stats = statistics.get_dashboard(ctx)

    assert stats.monthly_revenue == Decimal("5000")
    assert stats.yearly_revenue == Decimal("8000")
    assert stats.currency == "INR"


def test_recent_bookings(statistics, ctx, populated):
    stats = statistics.get_dashboard(ctx, recent_limit=2)

    assert len(stats.recent_bookings) == 2
    assert stats.recent_bookings[0].created_at >= stats.recent_bookings[1].created_at
    assert all(b.room is not None for b in stats.recent_bookings)


def test_scope_account_and_global(statistics, ctx, other_ctx, populated):
    """Тест области статистики: аккаунт или все данные."""
    other = statistics.get_dashboard(other_ctx)
    everything = statistics.get_dashboard(ctx, scope=StatsScope.GLOBAL)

    assert other.total_rooms == 1
    assert other.total_bookings == 1
    assert everything.total_rooms == 4
    assert everything.total_bookings == 5
    assert statistics.get_dashboard(ctx, scope="global").total_rooms == 4


def test_empty_account(statistics, ctx):
    stats = statistics.get_dashboard(ctx)

    assert stats.total_rooms == 0
    assert stats.total_bookings == 0
    assert stats.monthly_revenue == Decimal("0")
    assert stats.recent_bookings == []
