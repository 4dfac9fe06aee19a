# ibotika/db/schemas/appointment_schemas.py
from dataclasses import dataclass
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from datetime import date, datetime, time
from typing import Any, Optional, Union
from common.config import TIME_FORMAT
from ..models import AppointmentStatus


class _Unset:
    """Marker for a patch field the caller did not send."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


class AppointmentFields(BaseModel):
    """Parsed, typed booking fields shared by create and update."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=30)
    date: date
    time: time
    reason: Optional[str] = None
    status: Optional[AppointmentStatus] = None


@dataclass(frozen=True)
class AppointmentPatch:
    """
    Full description of one update.

    The four booking fields are always written. Each optional field is
    either UNSET (column left as is), None (column cleared) or a value.
    """

    name: str
    phone: str
    date: date
    time: time
    reason: Union[str, None, _Unset] = UNSET
    status: Union[AppointmentStatus, _Unset] = UNSET
    prescription_file: Union[str, None, _Unset] = UNSET

    def to_values(self) -> dict[str, Any]:
        """Column values for the UPDATE statement, UNSET fields omitted."""
        values: dict[str, Any] = {
            "name": self.name,
            "phone": self.phone,
            "date": self.date,
            "time": self.time,
        }
        for column in ("reason", "status", "prescription_file"):
            value = getattr(self, column)
            if value is UNSET:
                continue
            values[column] = value.value if isinstance(value, AppointmentStatus) else value
        return values


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    date: date
    time: time
    reason: Optional[str] = None
    status: str
    prescription_file: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("time")
    def serialize_time(self, value: time) -> str:
        # 24-hour clock without seconds, e.g. "14:30"
        return value.strftime(TIME_FORMAT)


class AppointmentCreatedResponse(BaseModel):
    message: str = Field(..., examples=["Appointment created successfully"])
    id: int


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Machine readable error code")
    message: str = Field(..., description="Human readable description")
    timestamp: datetime


__all__ = [
    "UNSET",
    "AppointmentFields",
    "AppointmentPatch",
    "AppointmentResponse",
    "AppointmentCreatedResponse",
    "MessageResponse",
    "ErrorResponse",
]
