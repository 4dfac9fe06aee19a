# scripts/db/seed_db.py
import csv
from datetime import date, time, timedelta
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from common.scripts import get_booking_window
from ibotika.db import DbManager
from ibotika.db.models import Appointment


class AppointmentSeed(BaseModel):
    """One generated appointment row, validated before insert."""

    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=30)
    date: date
    time: time
    reason: Optional[str] = None
    status: str


def generate_appointments(
    template: dict[str, Any],
    records: int,
    start_index: int = 0,
    today: Optional[date] = None,
) -> list[AppointmentSeed]:
    """
    Spread ``records`` appointments over the booking window.

    Dates cycle from today to the last bookable day; names, reasons,
    statuses and times cycle through the template lists.
    """
    first_day, last_day = get_booking_window(today)
    window_days = (last_day - first_day).days + 1

    seeds = []
    for i in range(start_index, start_index + records):
        seeds.append(
            AppointmentSeed(
                name=template["names"][i % len(template["names"])],
                phone=f"{template['phone_prefix']}{i % 10_000:04d}",
                date=first_day + timedelta(days=i % window_days),
                time=time.fromisoformat(template["times"][i % len(template["times"])]),
                reason=template["reasons"][i % len(template["reasons"])],
                status=template["statuses"][i % len(template["statuses"])],
            )
        )
    return seeds


def write_records_to_csv(filename: str, records: list[BaseModel]) -> None:
    """Write schema records to CSV, dates and times in ISO format."""
    if not records:
        return

    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = list(records[0].model_dump(mode="python").keys())

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for record in records:
            writer.writerow(record.model_dump(mode="json"))


async def seed_db(
    db_manager: DbManager,
    data_template: dict[str, Any],
    records: int,
    start_index: int = 0,
    export_csv: bool = False,
    csv_dir: str = "data/seed",
) -> list[AppointmentSeed]:
    """
    Insert generated appointments in one transaction.

    Args:
        db_manager: Initialized DbManager instance
        data_template: Value pools, see ``APPOINTMENT_DATA_TEMPLATE``
        records: Number of appointments to generate
        start_index: Offset into the value pools
        export_csv: Also write the generated rows to ``<csv_dir>/appointments.csv``
        csv_dir: Directory for the CSV export

    Returns:
        The generated records
    """
    seeds = generate_appointments(data_template, records, start_index)

    if export_csv:
        write_records_to_csv(str(Path(csv_dir) / "appointments.csv"), seeds)

    async with db_manager.session() as session:
        session.add_all(Appointment(**seed.model_dump()) for seed in seeds)
        # Commit happens automatically on context exit

    return seeds


__all__ = ["AppointmentSeed", "generate_appointments", "write_records_to_csv", "seed_db"]
