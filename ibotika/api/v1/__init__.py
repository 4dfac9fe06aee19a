from .appointment_router import appointment_router
from .deps import get_appointment_service, get_prescription_storage

__all__ = ["appointment_router", "get_appointment_service", "get_prescription_storage"]
