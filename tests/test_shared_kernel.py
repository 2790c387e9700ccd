"""
Тесты для общего ядра: деньги, периоды проживания, разбор запросов.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import BaseModel, Field

from hotel_inventory.shared_kernel import DateRange, Money, ValidationException, now
from hotel_inventory.shared_kernel.application import parse_request


def test_money_multiplication():
    """Тест умножения цены за ночь на количество ночей."""
    price = Money(amount=Decimal("2500"))
    total = price * 2

    assert total.amount == Decimal("5000")
    assert total.currency == "INR"


def test_money_addition_requires_same_currency():
    """Тест запрета сложения сумм в разных валютах."""
    with pytest.raises(ValueError):
        Money(amount=Decimal("10"), currency="INR") + Money(amount=Decimal("10"), currency="USD")


def test_money_cannot_be_negative():
    with pytest.raises(ValueError):
        Money(amount=Decimal("-1"))


def test_date_range_nights():
    period = DateRange(check_in=date(2024, 6, 1), check_out=date(2024, 6, 3))
    assert period.nights == 2


def test_date_range_drops_time_of_day():
    """Тест отбрасывания времени суток у дат заезда и выезда."""
    period = DateRange(
        check_in=datetime(2024, 6, 1, 23, 59), check_out=datetime(2024, 6, 2, 0, 1)
    )
    assert period.check_in == date(2024, 6, 1)
    assert period.nights == 1


@pytest.mark.parametrize(
    "check_in, check_out",
    [
        (date(2024, 6, 3), date(2024, 6, 1)),
        (date(2024, 6, 1), date(2024, 6, 1)),
    ],
)
def test_date_range_requires_check_out_after_check_in(check_in, check_out):
    with pytest.raises(ValueError):
        DateRange(check_in=check_in, check_out=check_out)


def test_date_range_overlaps_is_half_open():
    """Тест полуоткрытых интервалов: выезд в день заезда не пересечение."""
    first = DateRange(check_in=date(2024, 6, 1), check_out=date(2024, 6, 3))
    back_to_back = DateRange(check_in=date(2024, 6, 3), check_out=date(2024, 6, 5))
    overlapping = DateRange(check_in=date(2024, 6, 2), check_out=date(2024, 6, 4))

    assert not first.overlaps(back_to_back)
    assert not back_to_back.overlaps(first)
    assert first.overlaps(overlapping)
    assert overlapping.overlaps(first)


def test_date_range_covers():
    period = DateRange(check_in=date(2024, 6, 1), check_out=date(2024, 6, 3))

    assert period.covers(date(2024, 6, 1))
    assert period.covers(date(2024, 6, 2))
    assert not period.covers(date(2024, 6, 3))
    assert not period.covers(date(2024, 5, 31))


def test_now_is_local_naive_time():
    """Тест: часы по умолчанию отдают местное время без часового пояса."""
    before = datetime.now()
    current = now()

    assert current.tzinfo is None
    assert before <= current <= datetime.now()


class _Request(BaseModel):
    name: str = Field(..., min_length=1)
    count: int = Field(..., ge=1)


def test_parse_request_accepts_mapping():
    request = parse_request(_Request, {"name": "x", "count": 2})
    assert request.count == 2


def test_parse_request_returns_model_as_is():
    original = _Request(name="x", count=1)
    assert parse_request(_Request, original) is original


def test_parse_request_converts_errors():
    """Тест перевода ошибок pydantic в ValidationException с указанием полей."""
    with pytest.raises(ValidationException) as exc_info:
        parse_request(_Request, {"name": "", "count": 0})

    message = str(exc_info.value)
    assert "name" in message
    assert "count" in message
