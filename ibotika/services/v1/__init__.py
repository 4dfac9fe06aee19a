from .prescription_storage import Attachment, PrescriptionStorage
from .appointment_service import AppointmentService, parse_appointment_fields

__all__ = [
    "Attachment",
    "PrescriptionStorage",
    "AppointmentService",
    "parse_appointment_fields",
]
