"""
Templates for generated demo appointments.

Each generated record picks values by index, so the same arguments always
produce the same rows.

    Example: Seed 50 appointments with the defaults
        await seed_db(db_manager, APPOINTMENT_DATA_TEMPLATE, records=50)
"""

from typing import Any

from common.config import APPOINTMENT_TIMES

APPOINTMENT_DATA_TEMPLATE: dict[str, Any] = {
    "names": ["Jane Doe", "John Smith", "Amina Otieno", "Carlos Ruiz", "Mei Chen"],
    "phone_prefix": "555-",
    "reasons": [
        "Prescription refill",
        "Blood pressure check",
        "Vaccination",
        None,
        "Medication review",
    ],
    "statuses": ["pending", "confirmed", "completed", "cancelled"],
    "times": list(APPOINTMENT_TIMES),
}

DEFAULT_DATA_TEMPLATE = APPOINTMENT_DATA_TEMPLATE

__all__ = ["APPOINTMENT_DATA_TEMPLATE", "DEFAULT_DATA_TEMPLATE"]
