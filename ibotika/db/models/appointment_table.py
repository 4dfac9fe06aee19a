# ibotika/db/models/appointment_table.py
from enum import Enum
from typing import Optional
from sqlalchemy import Date, Index, Integer, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date as date_type, time as time_type
from common.config import DEFAULT_STATUS
from .db_base_model import DbBaseModel


class AppointmentStatus(str, Enum):
    PENDING = "pending"  # Requested by the patient, not yet reviewed
    CONFIRMED = "confirmed"  # Accepted by the pharmacy
    CANCELLED = "cancelled"  # Cancelled by patient or staff, record kept
    COMPLETED = "completed"  # Patient was seen

    def __str__(self) -> str:
        return self.value


class Appointment(DbBaseModel):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_date_time", "date", "time"),
        # ids are never reused after a delete
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)

    # Together date + time form the booking slot; no uniqueness is enforced
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    time: Mapped[time_type] = mapped_column(Time, nullable=False)

    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Plain string column: legal values are checked in the service layer
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_STATUS,
    )

    # Generated filename inside the upload directory
    prescription_file: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"Appointment(id={self.id!r}, date={self.date!r}, "
            f"time={self.time!r}, status={self.status!r})"
        )


__all__ = ["Appointment", "AppointmentStatus"]
