# ibotika/client/booking.py
"""
Patient booking form.

Before submitting, the form checks the date window and whether the slot is
already taken in the list it fetched on ``load()``. That slot check is
advisory only: the list can be stale and the server never enforces it.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional

from common.config import BOOKING_WINDOW_MONTHS, DATE_FORMAT, DEFAULT_TIME
from common.logger import get_app_logger
from common.scripts import add_months
from .api_client import ApiClientError, AppointmentApiClient, PrescriptionUpload

logger = get_app_logger(__name__)

PAST_DATE_MESSAGE = "The appointment date cannot be in the past."
OUTSIDE_WINDOW_MESSAGE = (
    f"The appointment date must be within the next {BOOKING_WINDOW_MONTHS} months."
)
SLOT_TAKEN_MESSAGE = "This time slot is already booked. Please select a different time."
SUBMIT_FAILED_MESSAGE = "Error creating appointment. Please try again."
SUBMIT_OK_MESSAGE = "Appointment scheduled successfully!"

Slot = tuple[str, str]


@dataclass
class BookingForm:
    name: str = ""
    phone: str = ""
    date: str = ""
    time: str = DEFAULT_TIME
    reason: str = ""
    prescription: Optional[PrescriptionUpload] = field(default=None, repr=False)


class BookingFlow:
    def __init__(
        self,
        client: AppointmentApiClient,
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self._today = today
        self.form = BookingForm()
        self.booked_slots: set[Slot] = set()
        self.error = ""
        self.success_message = ""
        self.is_submitting = False

    def load(self) -> None:
        """Fetch existing bookings; on failure log and keep an empty set."""
        try:
            appointments = self.client.fetch_appointments()
        except ApiClientError as exc:
            logger.error("Error fetching appointments", error=exc.message)
            self.booked_slots = set()
            return
        self.booked_slots = {(a["date"], a["time"]) for a in appointments}

    def validate_date(self, value: str) -> Optional[str]:
        """
        Error text for a date outside today .. today + 3 months, else None.

        An unparsable date is left for the server to reject.
        """
        try:
            requested = datetime.strptime(value, DATE_FORMAT).date()
        except (TypeError, ValueError):
            return None

        today = self._today()
        if requested < today:
            return PAST_DATE_MESSAGE
        if requested > add_months(today, BOOKING_WINDOW_MONTHS):
            return OUTSIDE_WINDOW_MESSAGE
        return None

    def is_slot_booked(self, appointment_date: str, appointment_time: str) -> bool:
        # Cancelled bookings still occupy their slot here
        return (appointment_date, appointment_time) in self.booked_slots

    def submit(self) -> bool:
        """
        Validate, then send one create request.

        Returns:
            True when the appointment was created; ``error`` holds the
            reason otherwise
        """
        self.is_submitting = True
        self.error = ""
        self.success_message = ""
        try:
            date_error = self.validate_date(self.form.date)
            if date_error:
                self.error = date_error
                return False

            if self.is_slot_booked(self.form.date, self.form.time):
                self.error = SLOT_TAKEN_MESSAGE
                return False

            booked: Slot = (self.form.date, self.form.time)
            try:
                self.client.create_appointment(
                    {
                        "name": self.form.name,
                        "phone": self.form.phone,
                        "date": self.form.date,
                        "time": self.form.time,
                        "reason": self.form.reason,
                    },
                    prescription=self.form.prescription,
                )
            except ApiClientError as exc:
                logger.error("Error submitting appointment", error=exc.message)
                self.error = exc.server_message or SUBMIT_FAILED_MESSAGE
                return False

            self.success_message = SUBMIT_OK_MESSAGE
            self.form = BookingForm()
            self.booked_slots.add(booked)
            return True
        finally:
            self.is_submitting = False


__all__ = [
    "BookingFlow",
    "BookingForm",
    "PAST_DATE_MESSAGE",
    "OUTSIDE_WINDOW_MESSAGE",
    "SLOT_TAKEN_MESSAGE",
    "SUBMIT_FAILED_MESSAGE",
    "SUBMIT_OK_MESSAGE",
]
