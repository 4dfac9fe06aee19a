# ibotika/services/v1/appointment_service.py
"""
Appointment lifecycle: create, read, update, cancel, delete.

Every operation is a single statement. Nothing here checks for slot
conflicts; the booking form does that against its own fetched list.
"""

from datetime import date, time
from typing import Any, Callable, Optional, Sequence, Union

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from common import DatabaseError, NotFoundError, ValidationError, get_app_logger
from common.config import BOOKING_WINDOW_MONTHS, DEFAULT_STATUS
from common.scripts import is_within_booking_window
from ibotika.db.models import Appointment, AppointmentStatus
from ibotika.db.schemas import UNSET, AppointmentFields, AppointmentPatch
from ibotika.db.schemas.appointment_schemas import _Unset
from .prescription_storage import Attachment, PrescriptionStorage

logger = get_app_logger(__name__)

MISSING_FIELDS_MESSAGE = "Required fields are missing"
DATE_WINDOW_MESSAGE = (
    f"Appointment date must be within the next {BOOKING_WINDOW_MONTHS} months "
    "and cannot be in the past"
)

RawValue = Union[str, date, time, None]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _describe_schema_error(exc: SchemaValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"])
    return f"Invalid {field}: {first['msg']}"


def parse_appointment_fields(
    name: RawValue,
    phone: RawValue,
    appointment_date: RawValue,
    appointment_time: RawValue,
    reason: RawValue = None,
    status: RawValue = None,
) -> AppointmentFields:
    """
    Check the required booking fields and parse them into typed values.

    Blank strings count as missing. A blank status means "not supplied".

    Raises:
        ValidationError: Missing required field, unparsable date/time or
            a status outside AppointmentStatus
    """
    if any(_is_blank(v) for v in (name, phone, appointment_date, appointment_time)):
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    try:
        return AppointmentFields(
            name=name,
            phone=phone,
            date=appointment_date,
            time=appointment_time,
            reason=None if _is_blank(reason) else reason,
            status=None if _is_blank(status) else status,
        )
    except SchemaValidationError as exc:
        raise ValidationError(_describe_schema_error(exc)) from exc


class AppointmentService:
    def __init__(
        self,
        db: AsyncSession,
        storage: Optional[PrescriptionStorage] = None,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.storage = storage
        self._today = today

    def _store_attachment(self, attachment: Optional[Attachment]) -> Optional[str]:
        if attachment is None or attachment.is_empty:
            return None
        if self.storage is None:
            raise RuntimeError("AppointmentService has no PrescriptionStorage configured")
        return self.storage.save(attachment)

    async def _execute(self, statement: Any, failure_message: str, **log_context: Any):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as exc:
            logger.exception(failure_message, error=str(exc), **log_context)
            raise DatabaseError(failure_message) from exc

    async def create_appointment(
        self,
        name: RawValue,
        phone: RawValue,
        appointment_date: RawValue,
        appointment_time: RawValue,
        reason: RawValue = None,
        status: RawValue = None,
        attachment: Optional[Attachment] = None,
    ) -> int:
        """
        Validate and insert one appointment.

        Status defaults to ``pending``. The date must fall inside the booking
        window; the attachment is written only once validation has passed.

        Returns:
            The generated appointment id
        """
        fields = parse_appointment_fields(
            name, phone, appointment_date, appointment_time, reason, status
        )
        if not is_within_booking_window(fields.date, self._today()):
            raise ValidationError(DATE_WINDOW_MESSAGE)

        appointment = Appointment(
            name=fields.name,
            phone=fields.phone,
            date=fields.date,
            time=fields.time,
            reason=fields.reason,
            status=fields.status.value if fields.status else DEFAULT_STATUS,
            prescription_file=self._store_attachment(attachment),
        )

        try:
            self.db.add(appointment)
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception("Error creating appointment", error=str(exc))
            raise DatabaseError("Error creating appointment") from exc

        logger.info(
            "Appointment created",
            appointment_id=appointment.id,
            date=fields.date.isoformat(),
            time=fields.time.isoformat(timespec="minutes"),
            status=appointment.status,
            has_prescription=appointment.prescription_file is not None,
        )
        return appointment.id

    async def list_appointments(self) -> Sequence[Appointment]:
        """All appointments ordered by slot (date, then time)."""
        query = (
            select(Appointment)
            .order_by(Appointment.date, Appointment.time, Appointment.id)
            .execution_options(
                logging_token="AppointmentService.list_appointments",
                populate_existing=True,
            )
        )
        result = await self._execute(query, "Error fetching appointments")
        return result.scalars().all()

    async def get_appointment(self, appointment_id: int) -> Appointment:
        """
        Raises:
            NotFoundError: If no appointment has this id
        """
        query = (
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .execution_options(populate_existing=True)
        )
        result = await self._execute(
            query, "Error fetching appointment", appointment_id=appointment_id
        )
        appointment = result.scalar_one_or_none()
        if appointment is None:
            raise NotFoundError()
        return appointment

    async def update_appointment(
        self,
        appointment_id: int,
        name: RawValue,
        phone: RawValue,
        appointment_date: RawValue,
        appointment_time: RawValue,
        reason: Union[RawValue, _Unset] = UNSET,
        status: Union[RawValue, _Unset] = UNSET,
        attachment: Optional[Attachment] = None,
        clear_prescription: bool = False,
    ) -> None:
        """
        Overwrite the booking fields of an existing appointment.

        The booking window is not re-checked here. Optional fields follow
        patch semantics:

        - reason: UNSET keeps it, blank clears it, a value replaces it
        - status: UNSET or blank keeps it
        - attachment: a new upload replaces the stored file name; without
          one the stored name is kept unless ``clear_prescription`` is set

        Raises:
            ValidationError: Missing or malformed required field
            NotFoundError: If no appointment has this id
        """
        fields = parse_appointment_fields(
            name,
            phone,
            appointment_date,
            appointment_time,
            None if reason is UNSET else reason,
            None if status is UNSET else status,
        )

        new_file = self._store_attachment(attachment)
        if new_file is not None:
            prescription_file: Union[str, None, _Unset] = new_file
        elif clear_prescription:
            prescription_file = None
        else:
            prescription_file = UNSET

        patch = AppointmentPatch(
            name=fields.name,
            phone=fields.phone,
            date=fields.date,
            time=fields.time,
            reason=UNSET if reason is UNSET else fields.reason,
            status=fields.status if fields.status is not None else UNSET,
            prescription_file=prescription_file,
        )

        statement = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .values(**patch.to_values())
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(
            statement, "Error updating appointment", appointment_id=appointment_id
        )
        if result.rowcount == 0:
            raise NotFoundError()

        logger.info(
            "Appointment updated",
            appointment_id=appointment_id,
            fields=sorted(patch.to_values()),
        )

    async def cancel_appointment(self, appointment_id: int) -> None:
        """
        Force status to ``cancelled`` whatever it was before.

        Raises:
            NotFoundError: If no appointment has this id
        """
        statement = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .values(status=AppointmentStatus.CANCELLED.value)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(
            statement, "Error cancelling appointment", appointment_id=appointment_id
        )
        if result.rowcount == 0:
            raise NotFoundError()

        logger.info("Appointment cancelled", appointment_id=appointment_id)

    async def delete_appointment(self, appointment_id: int) -> None:
        """
        Hard delete. Any prescription file stays in the upload directory.

        Raises:
            NotFoundError: If no appointment has this id
        """
        statement = (
            delete(Appointment)
            .where(Appointment.id == appointment_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(
            statement, "Error deleting appointment", appointment_id=appointment_id
        )
        if result.rowcount == 0:
            raise NotFoundError()

        logger.info("Appointment deleted", appointment_id=appointment_id)


__all__ = [
    "AppointmentService",
    "parse_appointment_fields",
    "MISSING_FIELDS_MESSAGE",
    "DATE_WINDOW_MESSAGE",
]
