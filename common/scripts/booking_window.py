# common/scripts/booking_window.py
"""
Booking window arithmetic shared by the server and the client views.

The window is ``[today, add_months(today, BOOKING_WINDOW_MONTHS)]``, both
ends inclusive.
"""

import calendar
from datetime import date, timedelta
from typing import Optional

from common.config.appointment_defaults import BOOKING_WINDOW_MONTHS


def add_months(start: date, months: int) -> date:
    """
    Move ``start`` forward by whole calendar months.

    Keeps the day of month. When the target month is shorter, the surplus
    days roll over into the following month, so Nov 30 + 3 months lands on
    Mar 2 (Mar 1 in a leap year) rather than being clamped to Feb 28.

    Example:
        >>> add_months(date(2026, 1, 15), 3)
        datetime.date(2026, 4, 15)
        >>> add_months(date(2026, 11, 30), 3)
        datetime.date(2027, 3, 2)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1

    days_in_month = calendar.monthrange(year, month)[1]
    if start.day <= days_in_month:
        return start.replace(year=year, month=month)
    return date(year, month, days_in_month) + timedelta(days=start.day - days_in_month)


def get_booking_window(
    today: Optional[date] = None,
    months: int = BOOKING_WINDOW_MONTHS,
) -> tuple[date, date]:
    """Return the inclusive (earliest, latest) bookable dates."""
    _today = today or date.today()
    return _today, add_months(_today, months)


def is_within_booking_window(value: date, today: Optional[date] = None) -> bool:
    earliest, latest = get_booking_window(today)
    return earliest <= value <= latest


__all__ = ["add_months", "get_booking_window", "is_within_booking_window"]
