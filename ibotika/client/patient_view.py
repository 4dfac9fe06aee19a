# ibotika/client/patient_view.py
from typing import Any

from common.logger import get_app_logger
from .api_client import ApiClientError, AppointmentApiClient

logger = get_app_logger(__name__)


class PatientAppointmentsView:
    """Read-only list of appointments with a cancel action."""

    def __init__(self, client: AppointmentApiClient):
        self.client = client
        self.appointments: list[dict[str, Any]] = []
        self.is_loading = True
        self.error = ""

    def refresh(self) -> None:
        try:
            self.appointments = self.client.fetch_appointments()
            self.error = ""
        except ApiClientError as exc:
            logger.error("Error loading appointments", error=exc.message)
            self.error = exc.message
        finally:
            self.is_loading = False

    def cancel(self, appointment_id: int) -> bool:
        """Cancel, then re-fetch the whole list."""
        try:
            self.client.cancel_appointment(appointment_id)
        except ApiClientError as exc:
            logger.error(
                "Error cancelling appointment",
                appointment_id=appointment_id,
                error=exc.message,
            )
            self.error = exc.message
            return False

        self.refresh()
        return True


__all__ = ["PatientAppointmentsView"]
