from .db_base_model import DbBaseModel, utc_now
from .appointment_table import Appointment, AppointmentStatus

__all__ = ["DbBaseModel", "utc_now", "Appointment", "AppointmentStatus"]
