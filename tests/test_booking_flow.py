from datetime import date

from ibotika.client import AppointmentApiClient, BookingFlow
from ibotika.client.booking import (
    OUTSIDE_WINDOW_MESSAGE,
    PAST_DATE_MESSAGE,
    SLOT_TAKEN_MESSAGE,
    SUBMIT_FAILED_MESSAGE,
)
from common.config import DEFAULT_TIME

from .fakes import FakeResponse, FakeSession

TODAY = date(2026, 10, 19)

BOOKED = [
    {"id": 1, "date": "2026-10-26", "time": "10:00", "status": "pending"},
    {"id": 2, "date": "2026-10-27", "time": "09:30", "status": "cancelled"},
]


def _flow(*replies):
    session = FakeSession(*replies)
    flow = BookingFlow(AppointmentApiClient(session=session), today=lambda: TODAY)
    return flow, session


def _fill(flow, day="2026-10-28", slot="10:00"):
    flow.form.name = "Jane Doe"
    flow.form.phone = "555-0100"
    flow.form.date = day
    flow.form.time = slot


def test_load_collects_booked_slots():
    flow, _ = _flow(FakeResponse(200, BOOKED))

    flow.load()

    assert flow.booked_slots == {("2026-10-26", "10:00"), ("2026-10-27", "09:30")}


def test_load_failure_leaves_no_slots():
    flow, _ = _flow(FakeResponse(500, {"message": "Error fetching appointments"}))

    flow.load()

    assert flow.booked_slots == set()
    assert flow.error == ""


def test_validate_date_window():
    flow, _ = _flow()

    assert flow.validate_date("2026-10-18") == PAST_DATE_MESSAGE
    assert flow.validate_date("2027-01-20") == OUTSIDE_WINDOW_MESSAGE
    assert flow.validate_date("2026-10-19") is None
    assert flow.validate_date("2027-01-19") is None


def test_booked_slot_blocks_submit_without_post():
    flow, session = _flow(FakeResponse(200, BOOKED))
    flow.load()
    _fill(flow, day="2026-10-26", slot="10:00")

    assert flow.submit() is False
    assert flow.error == SLOT_TAKEN_MESSAGE
    assert session.methods == ["GET"]


def test_cancelled_appointment_still_blocks_its_slot():
    flow, _ = _flow(FakeResponse(200, BOOKED))
    flow.load()

    assert flow.is_slot_booked("2026-10-27", "09:30")


def test_past_date_blocks_submit_without_post():
    flow, session = _flow()
    _fill(flow, day="2026-10-01")

    assert flow.submit() is False
    assert flow.error == PAST_DATE_MESSAGE
    assert session.calls == []


def test_successful_submit_resets_form_and_records_slot():
    flow, session = _flow(FakeResponse(201, {"message": "Appointment created successfully", "id": 9}))
    _fill(flow)
    flow.form.reason = "Refill"

    assert flow.submit() is True

    assert flow.success_message == "Appointment scheduled successfully!"
    assert flow.error == ""
    assert flow.form.name == "" and flow.form.time == DEFAULT_TIME
    assert ("2026-10-28", "10:00") in flow.booked_slots
    assert flow.is_submitting is False
    parts = dict(session.calls[0][2]["files"])
    assert parts["reason"] == (None, "Refill", None)


def test_server_message_is_shown_on_failure():
    flow, _ = _flow(FakeResponse(400, {"error": "VALIDATION_ERROR", "message": "Required fields are missing"}))
    _fill(flow)

    assert flow.submit() is False
    assert flow.error == "Required fields are missing"


def test_fallback_message_when_server_gives_none():
    flow, _ = _flow(FakeResponse(503))
    _fill(flow)

    assert flow.submit() is False
    assert flow.error == SUBMIT_FAILED_MESSAGE
    assert flow.form.name == "Jane Doe"
