"""
Тесты параллельного бронирования одного номера.
"""
import threading
from datetime import date

from hotel_inventory.shared_kernel import ConflictException, InvalidTransitionException

THREADS = 8


def _run_in_parallel(target, count=THREADS):
    barrier = threading.Barrier(count)
    results = []
    results_lock = threading.Lock()

    def worker(index):
        barrier.wait()
        try:
            outcome = ("ok", target(index))
        except Exception as e:
            outcome = ("error", e)
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return results


def test_only_one_of_parallel_overlapping_bookings_succeeds(
    make_room, make_booking, booking_service, ctx
):
    """Тест: из параллельных броней на пересекающиеся даты проходит ровно одна."""
    room = make_room()

    results = _run_in_parallel(
        lambda i: make_booking(
            room.id,
            date(2024, 7, 1 + i % 2),
            date(2024, 7, 4),
            guest_email=f"guest{i}@hotel.com",
        )
    )

    succeeded = [value for status, value in results if status == "ok"]
    failed = [value for status, value in results if status == "error"]
    assert len(succeeded) == 1
    assert len(failed) == THREADS - 1
    assert all(isinstance(e, ConflictException) for e in failed)
    assert len(booking_service.list_bookings(ctx, {"limit": 100})) == 1


def test_parallel_bookings_of_different_rooms_all_succeed(make_room, make_booking):
    rooms = [make_room() for _ in range(THREADS)]

    results = _run_in_parallel(
        lambda i: make_booking(rooms[i].id, date(2024, 7, 1), date(2024, 7, 4))
    )

    assert [status for status, _ in results] == ["ok"] * THREADS


def test_parallel_confirmations_apply_once(
    make_room, make_booking, booking_service, ctx, notifier
):
    """Тест: параллельные подтверждения одной брони выполняются один раз."""
    room = make_room()
    booking = make_booking(room.id, date(2024, 7, 1), date(2024, 7, 4))

    results = _run_in_parallel(lambda i: booking_service.confirm_booking(ctx, booking.id))

    failed = [value for status, value in results if status == "error"]
    assert len(failed) == THREADS - 1
    assert all(isinstance(e, InvalidTransitionException) for e in failed)
    confirmed = [b for b in notifier.confirmations if b.status == "confirmed"]
    assert len(confirmed) == 1
