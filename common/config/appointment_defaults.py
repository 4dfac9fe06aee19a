# common/config/appointment_defaults.py
"""
Booking defaults shared by the service layer and the client views.

Both sides must agree on these values: the client pre-validates with the
same window the server enforces.
"""

from typing import Final

DEFAULT_STATUS: Final[str] = "pending"

# Pre-selected time on a fresh booking form
DEFAULT_TIME: Final[str] = "10:00"

# Appointments may be booked from today up to this many months ahead
BOOKING_WINDOW_MONTHS: Final[int] = 3

# Slots offered by the booking form (morning and afternoon, 30 minutes apart)
APPOINTMENT_TIMES: Final[tuple[str, ...]] = (
    "09:00",
    "09:30",
    "10:00",
    "10:30",
    "11:00",
    "11:30",
    "14:00",
    "14:30",
    "15:00",
    "15:30",
    "16:00",
    "16:30",
)

DATE_FORMAT: Final[str] = "%Y-%m-%d"
TIME_FORMAT: Final[str] = "%H:%M"


__all__ = [
    "DEFAULT_STATUS",
    "DEFAULT_TIME",
    "BOOKING_WINDOW_MONTHS",
    "APPOINTMENT_TIMES",
    "DATE_FORMAT",
    "TIME_FORMAT",
]
