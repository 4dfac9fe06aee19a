from .data_template import APPOINTMENT_DATA_TEMPLATE, DEFAULT_DATA_TEMPLATE
from .seed_db import AppointmentSeed, generate_appointments, seed_db, write_records_to_csv

__all__ = [
    "APPOINTMENT_DATA_TEMPLATE",
    "DEFAULT_DATA_TEMPLATE",
    "AppointmentSeed",
    "generate_appointments",
    "seed_db",
    "write_records_to_csv",
]
