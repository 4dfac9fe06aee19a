"""
Client-side view models for the booking UI, talking to the REST API over
``requests``.

They log through the application logger, so structlog has to be configured
first (``initialize_config()`` or ``configure_structlog()``).
"""

from .api_client import ApiClientError, AppointmentApiClient, PrescriptionUpload
from .booking import BookingFlow, BookingForm
from .patient_view import PatientAppointmentsView
from .admin_dashboard import AdminDashboard, DayCounters, MonthlySeries

__all__ = [
    "ApiClientError",
    "AppointmentApiClient",
    "PrescriptionUpload",
    "BookingFlow",
    "BookingForm",
    "PatientAppointmentsView",
    "AdminDashboard",
    "DayCounters",
    "MonthlySeries",
]
