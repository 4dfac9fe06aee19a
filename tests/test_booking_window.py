from datetime import date

import pytest

from common.scripts import add_months, get_booking_window, is_within_booking_window


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2026, 1, 15), 3, date(2026, 4, 15)),
        (date(2026, 10, 19), 3, date(2027, 1, 19)),
        (date(2026, 11, 30), 3, date(2027, 3, 2)),
        (date(2027, 11, 30), 3, date(2028, 3, 1)),  # leap year
        (date(2026, 3, 31), 1, date(2026, 5, 1)),
        (date(2026, 12, 31), 0, date(2026, 12, 31)),
    ],
)
def test_add_months_rolls_overflow_into_next_month(start, months, expected):
    assert add_months(start, months) == expected


def test_window_bounds_are_inclusive():
    today = date(2026, 10, 19)
    earliest, latest = get_booking_window(today)

    assert (earliest, latest) == (date(2026, 10, 19), date(2027, 1, 19))
    assert is_within_booking_window(earliest, today)
    assert is_within_booking_window(latest, today)


def test_outside_window_rejected():
    today = date(2026, 10, 19)

    assert not is_within_booking_window(date(2026, 10, 18), today)
    assert not is_within_booking_window(date(2027, 1, 20), today)
