from datetime import date

from ibotika.client import AdminDashboard, AppointmentApiClient, DayCounters

from .fakes import FakeResponse, FakeSession

TODAY = date(2026, 10, 19)

APPOINTMENTS = [
    {"id": 1, "date": "2026-10-18", "time": "09:00", "status": "completed"},
    {"id": 2, "date": "2026-10-19", "time": "09:00", "status": "confirmed"},
    {"id": 3, "date": "2026-10-19", "time": "10:00", "status": "pending"},
    {"id": 4, "date": "2026-10-20", "time": "14:00", "status": None},
    {"id": 5, "date": "2026-10-05", "time": "11:00", "status": "pending"},
    {"id": 6, "date": "2026-11-02", "time": "09:30", "status": "pending"},
]


def _dashboard(*replies):
    session = FakeSession(*replies)
    dashboard = AdminDashboard(AppointmentApiClient(session=session), today=lambda: TODAY)
    return dashboard, session


def test_day_counters():
    dashboard, _ = _dashboard()
    dashboard.appointments = APPOINTMENTS

    assert dashboard.day_counters() == DayCounters(yesterday=1, today=2, tomorrow=1)


def test_monthly_series_covers_current_month_only():
    dashboard, _ = _dashboard()
    dashboard.appointments = APPOINTMENTS

    series = dashboard.monthly_series()

    assert series.labels == ["2026-10-05", "2026-10-18", "2026-10-19", "2026-10-20"]
    assert series.daily_counts == [1, 1, 2, 1]
    assert series.status_counts == {
        "completed": [0, 1, 0, 0],
        "confirmed": [0, 0, 1, 0],
        "pending": [1, 0, 1, 0],
        "Unknown": [0, 0, 0, 1],
    }


def test_monthly_series_empty():
    dashboard, _ = _dashboard()

    series = dashboard.monthly_series()

    assert series.labels == [] and series.status_counts == {}


def test_save_creates_or_updates_then_refreshes():
    dashboard, session = _dashboard(
        FakeResponse(201, {"message": "Appointment created successfully", "id": 7}),
        FakeResponse(200, APPOINTMENTS),
        FakeResponse(200, {"message": "Appointment updated successfully"}),
        FakeResponse(200, APPOINTMENTS),
    )
    form = {"name": "Jane", "phone": "555", "date": "2026-10-26", "time": "10:00", "status": "confirmed"}

    assert dashboard.save(form) is True
    assert dashboard.save(form, appointment_id=7) is True

    assert [(m, url.rsplit("/api", 1)[1]) for m, url, _ in session.calls] == [
        ("POST", "/appointments"),
        ("GET", "/appointments"),
        ("PUT", "/appointments/7"),
        ("GET", "/appointments"),
    ]
    assert dashboard.appointments == APPOINTMENTS


def test_save_failure_sets_error_without_refresh():
    dashboard, session = _dashboard(FakeResponse(400, {"message": "Required fields are missing"}))

    assert dashboard.save({"name": ""}) is False

    assert dashboard.error == "Required fields are missing"
    assert session.methods == ["POST"]


def test_delete_requires_confirmation():
    dashboard, session = _dashboard(
        FakeResponse(200, {"message": "Appointment deleted successfully"}),
        FakeResponse(200, []),
    )

    assert dashboard.delete(3, confirm=lambda: False) is False
    assert session.calls == []

    assert dashboard.delete(3, confirm=lambda: True) is True
    assert session.methods == ["DELETE", "GET"]
    assert dashboard.appointments == []
