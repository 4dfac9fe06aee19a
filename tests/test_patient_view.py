from ibotika.client import AppointmentApiClient, PatientAppointmentsView

from .fakes import FakeResponse, FakeSession


def test_refresh_loads_list():
    session = FakeSession(FakeResponse(200, [{"id": 1, "status": "pending"}]))
    view = PatientAppointmentsView(AppointmentApiClient(session=session))
    assert view.is_loading is True

    view.refresh()

    assert view.is_loading is False
    assert view.appointments == [{"id": 1, "status": "pending"}]


def test_cancel_refetches_list():
    session = FakeSession(
        FakeResponse(200, {"message": "Appointment cancelled successfully"}),
        FakeResponse(200, [{"id": 1, "status": "cancelled"}]),
    )
    view = PatientAppointmentsView(AppointmentApiClient(session=session))

    assert view.cancel(1) is True

    assert session.methods == ["PUT", "GET"]
    assert view.appointments[0]["status"] == "cancelled"


def test_cancel_failure_keeps_list_and_sets_error():
    session = FakeSession(FakeResponse(404, {"message": "Appointment not found"}))
    view = PatientAppointmentsView(AppointmentApiClient(session=session))
    view.appointments = [{"id": 1}]

    assert view.cancel(99) is False

    assert view.error == "Appointment not found"
    assert view.appointments == [{"id": 1}]
    assert session.methods == ["PUT"]


def test_refresh_with_unreadable_body_shows_error():
    view = PatientAppointmentsView(AppointmentApiClient(session=FakeSession(FakeResponse(200, None))))

    view.refresh()

    assert view.error == "Error fetching appointments"
    assert view.appointments == []
    assert view.is_loading is False
