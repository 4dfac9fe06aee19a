# ibotika/api/v1/deps.py
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ibotika.db import get_db
from ibotika.services.v1 import AppointmentService, PrescriptionStorage


def get_prescription_storage(request: Request) -> PrescriptionStorage:
    storage = getattr(request.app.state, "prescription_storage", None)
    if storage is None:
        raise RuntimeError(
            "PrescriptionStorage not found in app.state. Ensure main.py created it."
        )
    return storage


def get_appointment_service(
    db: AsyncSession = Depends(get_db),
    storage: PrescriptionStorage = Depends(get_prescription_storage),
) -> AppointmentService:
    return AppointmentService(db, storage)


__all__ = ["get_prescription_storage", "get_appointment_service"]
