import csv
from datetime import date

from common.scripts import get_booking_window
from scripts.db import APPOINTMENT_DATA_TEMPLATE, generate_appointments, write_records_to_csv

TODAY = date(2026, 10, 19)


def test_generated_appointments_stay_in_window():
    seeds = generate_appointments(APPOINTMENT_DATA_TEMPLATE, 200, today=TODAY)
    earliest, latest = get_booking_window(TODAY)

    assert len(seeds) == 200
    assert all(earliest <= seed.date <= latest for seed in seeds)
    assert {seed.status for seed in seeds} == {"pending", "confirmed", "completed", "cancelled"}


def test_generation_is_deterministic_per_index():
    first = generate_appointments(APPOINTMENT_DATA_TEMPLATE, 10, start_index=5, today=TODAY)
    second = generate_appointments(APPOINTMENT_DATA_TEMPLATE, 10, start_index=5, today=TODAY)

    assert first == second
    assert first[0].phone == "555-0005"


def test_csv_export(tmp_path):
    seeds = generate_appointments(APPOINTMENT_DATA_TEMPLATE, 3, today=TODAY)
    target = tmp_path / "out" / "appointments.csv"

    write_records_to_csv(str(target), seeds)

    with target.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [row["date"] for row in rows] == ["2026-10-19", "2026-10-20", "2026-10-21"]
    assert rows[0]["time"] == "09:00:00"
