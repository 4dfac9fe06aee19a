# ibotika/api/v1/appointment_router.py
from typing import Optional, Union
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ibotika.db import get_db
from ibotika.db.schemas import (
    UNSET,
    AppointmentCreatedResponse,
    AppointmentResponse,
    ErrorResponse,
    MessageResponse,
)
from ibotika.db.schemas.appointment_schemas import _Unset
from common.logger.logger_middleware import enable_perf_headers
from ibotika.services.v1 import AppointmentService, Attachment
from .deps import get_appointment_service

appointment_router = APIRouter(
    prefix="/api/appointments",
    tags=["Appointments"],
)

_BAD_REQUEST = {400: {"description": "Missing or invalid fields", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Appointment not found", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Database or storage failure", "model": ErrorResponse}}


async def _read_attachment(upload: Optional[UploadFile]) -> Optional[Attachment]:
    if upload is None:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return Attachment(
        filename=upload.filename or "",
        content=content,
        content_type=upload.content_type,
    )


async def _optional_form_field(request: Request, key: str) -> Union[str, None, _Unset]:
    """
    UNSET when the key was not posted at all, otherwise its text.

    FastAPI collapses "" and "missing" into the parameter default, so
    presence is read from the parsed form directly.
    """
    form = await request.form()
    if key not in form:
        return UNSET
    value = form.get(key)
    return value if isinstance(value, str) else None


@appointment_router.post(
    "",
    response_model=AppointmentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
    description="""
    Multipart form. `name`, `phone`, `date` (YYYY-MM-DD) and `time` (HH:MM)
    are required; `reason`, `status` and a `prescription` file are optional.

    The date must lie between today and three months from today, inclusive.
    No slot-conflict check is made here.
    """,
    responses={**_BAD_REQUEST, **_SERVER_ERROR},
)
async def create_appointment(
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    appointment_date: Optional[str] = Form(None, alias="date"),
    appointment_time: Optional[str] = Form(None, alias="time"),
    reason: Optional[str] = Form(None),
    appointment_status: Optional[str] = Form(None, alias="status"),
    prescription: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentCreatedResponse:
    appointment_id = await service.create_appointment(
        name=name,
        phone=phone,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        reason=reason,
        status=appointment_status,
        attachment=await _read_attachment(prescription),
    )
    await db.commit()
    return AppointmentCreatedResponse(
        message="Appointment created successfully", id=appointment_id
    )


@appointment_router.get(
    "",
    response_model=list[AppointmentResponse],
    summary="List appointments",
    description="Every appointment, ordered by date then time.",
    responses=_SERVER_ERROR,
)
async def list_appointments(
    service: AppointmentService = Depends(get_appointment_service),
):
    return await service.list_appointments()


@appointment_router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    summary="Get one appointment",
    dependencies=[Depends(enable_perf_headers)],
    responses={**_NOT_FOUND, **_SERVER_ERROR},
)
async def get_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    return await service.get_appointment(appointment_id)


@appointment_router.put(
    "/{appointment_id}",
    response_model=MessageResponse,
    summary="Edit an appointment",
    description="""
    Same form as create. Fields left out keep their stored value:

    - no `status` (or a blank one): status unchanged
    - no `reason`: unchanged; a blank `reason` clears it
    - no `prescription` file: stored file kept, unless `clear_prescription=true`

    The booking window is not enforced on edits.
    """,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
)
async def update_appointment(
    request: Request,
    appointment_id: int,
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    appointment_date: Optional[str] = Form(None, alias="date"),
    appointment_time: Optional[str] = Form(None, alias="time"),
    appointment_status: Optional[str] = Form(None, alias="status"),
    clear_prescription: bool = Form(False),
    prescription: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> MessageResponse:
    await service.update_appointment(
        appointment_id,
        name=name,
        phone=phone,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        reason=await _optional_form_field(request, "reason"),
        status=appointment_status if appointment_status is not None else UNSET,
        attachment=await _read_attachment(prescription),
        clear_prescription=clear_prescription,
    )
    await db.commit()
    return MessageResponse(message="Appointment updated successfully")


@appointment_router.put(
    "/{appointment_id}/cancel",
    response_model=MessageResponse,
    summary="Cancel an appointment",
    responses={**_NOT_FOUND, **_SERVER_ERROR},
)
async def cancel_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> MessageResponse:
    await service.cancel_appointment(appointment_id)
    await db.commit()
    return MessageResponse(message="Appointment cancelled successfully")


@appointment_router.delete(
    "/{appointment_id}",
    response_model=MessageResponse,
    summary="Delete an appointment",
    description="Hard delete. The prescription file, if any, stays on disk.",
    responses={**_NOT_FOUND, **_SERVER_ERROR},
)
async def delete_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> MessageResponse:
    await service.delete_appointment(appointment_id)
    await db.commit()
    return MessageResponse(message="Appointment deleted successfully")


__all__ = ["appointment_router"]
