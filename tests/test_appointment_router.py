from datetime import date, timedelta

import pytest

from common.scripts import add_months

API = "/api/appointments"


def _form(**overrides):
    form = {
        "name": "Jane Doe",
        "phone": "555-0100",
        "date": (date.today() + timedelta(days=7)).isoformat(),
        "time": "10:00",
    }
    form.update(overrides)
    return {key: value for key, value in form.items() if value is not None}


def _create(client, files=None, **overrides):
    return client.post(API, data=_form(**overrides), files=files)


def test_booking_lifecycle_end_to_end(client):
    created = _create(client)
    assert created.status_code == 201
    body = created.json()
    assert body["message"] == "Appointment created successfully"
    appointment_id = body["id"]

    fetched = client.get(f"{API}/{appointment_id}")
    assert fetched.status_code == 200
    assert fetched.json()["status"] == "pending"
    assert fetched.json()["time"] == "10:00"

    cancelled = client.put(f"{API}/{appointment_id}/cancel")
    assert cancelled.status_code == 200
    assert cancelled.json() == {"message": "Appointment cancelled successfully"}

    listed = client.get(API).json()
    assert [(a["id"], a["status"]) for a in listed] == [(appointment_id, "cancelled")]


def test_past_date_rejected_without_insert(client):
    response = _create(client, date=(date.today() - timedelta(days=1)).isoformat())

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
    assert client.get(API).json() == []


def test_window_boundaries(client):
    today = date.today()
    assert _create(client, date=today.isoformat()).status_code == 201
    assert _create(client, date=add_months(today, 3).isoformat()).status_code == 201
    too_far = add_months(today, 3) + timedelta(days=1)
    assert _create(client, date=too_far.isoformat()).status_code == 400


@pytest.mark.parametrize("field", ["name", "phone", "date", "time"])
def test_missing_or_empty_fields_rejected(client, field):
    absent = _create(client, **{field: None})
    empty = _create(client, **{field: ""})

    for response in (absent, empty):
        assert response.status_code == 400
        assert response.json()["message"] == "Required fields are missing"


def test_unknown_status_rejected(client):
    response = _create(client, status="archived")

    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid status")


def test_response_shape(client):
    appointment_id = _create(client, reason="Refill", status="confirmed", time="14:30").json()["id"]

    body = client.get(f"{API}/{appointment_id}").json()

    assert body["date"] == (date.today() + timedelta(days=7)).isoformat()
    assert body["time"] == "14:30"
    assert body["reason"] == "Refill"
    assert body["status"] == "confirmed"
    assert body["prescription_file"] is None
    assert {"created_at", "updated_at"} <= body.keys()


def test_list_orders_by_slot(client):
    base = date.today()
    for offset, slot in [(5, "09:00"), (2, "16:30"), (2, "09:30"), (9, "11:00")]:
        assert _create(client, date=(base + timedelta(days=offset)).isoformat(), time=slot).status_code == 201

    slots = [(a["date"], a["time"]) for a in client.get(API).json()]
    assert slots == sorted(slots)


def test_id_of_deleted_appointment_is_not_reused(client):
    first = _create(client).json()["id"]
    second = _create(client).json()["id"]
    assert client.delete(f"{API}/{second}").status_code == 200

    third = _create(client).json()["id"]

    assert third not in (first, second)


def test_get_unknown_and_non_numeric_ids(client):
    missing = client.get(f"{API}/999")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Appointment not found"

    assert client.get(f"{API}/abc").status_code == 400


def test_update_keeps_unsent_status_and_prescription(client, upload_dir):
    appointment_id = _create(
        client,
        status="confirmed",
        reason="Refill",
        files={"prescription": ("rx.pdf", b"%PDF", "application/pdf")},
    ).json()["id"]
    stored = client.get(f"{API}/{appointment_id}").json()["prescription_file"]

    response = client.put(
        f"{API}/{appointment_id}", data=_form(name="Jane Roe", time="15:00")
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Appointment updated successfully"}
    body = client.get(f"{API}/{appointment_id}").json()
    assert body["name"] == "Jane Roe"
    assert body["time"] == "15:00"
    assert body["status"] == "confirmed"
    assert body["reason"] == "Refill"
    assert body["prescription_file"] == stored
    assert (upload_dir / stored).is_file()


def test_update_blank_reason_clears_it(client):
    appointment_id = _create(client, reason="Refill").json()["id"]

    client.put(f"{API}/{appointment_id}", data=_form(reason=""))

    assert client.get(f"{API}/{appointment_id}").json()["reason"] is None


def test_update_clear_prescription_flag(client):
    appointment_id = _create(
        client, files={"prescription": ("rx.png", b"png", "image/png")}
    ).json()["id"]

    response = client.put(
        f"{API}/{appointment_id}", data=_form(clear_prescription="true")
    )

    assert response.status_code == 200
    assert client.get(f"{API}/{appointment_id}").json()["prescription_file"] is None


def test_update_ignores_date_window(client):
    appointment_id = _create(client).json()["id"]
    past = (date.today() - timedelta(days=30)).isoformat()

    assert client.put(f"{API}/{appointment_id}", data=_form(date=past)).status_code == 200
    assert client.get(f"{API}/{appointment_id}").json()["date"] == past


def test_update_errors(client):
    appointment_id = _create(client).json()["id"]

    assert client.put(f"{API}/{appointment_id}", data=_form(phone="")).status_code == 400
    assert client.put(f"{API}/999", data=_form()).status_code == 404


def test_cancel_regardless_of_prior_status(client):
    appointment_id = _create(client, status="completed").json()["id"]

    client.put(f"{API}/{appointment_id}/cancel")

    assert client.get(f"{API}/{appointment_id}").json()["status"] == "cancelled"
    assert client.put(f"{API}/999/cancel").status_code == 404


def test_delete_then_not_found(client):
    keep = _create(client, time="09:00").json()["id"]
    doomed = _create(client, time="09:30").json()["id"]

    deleted = client.delete(f"{API}/{doomed}")
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Appointment deleted successfully"}
    assert client.get(f"{API}/{doomed}").status_code == 404

    again = client.delete(f"{API}/{doomed}")
    assert again.status_code == 404
    assert [a["id"] for a in client.get(API).json()] == [keep]


def test_uploaded_prescription_is_served(client):
    appointment_id = _create(
        client, files={"prescription": ("scan.jpg", b"\xff\xd8jpeg", "image/jpeg")}
    ).json()["id"]
    filename = client.get(f"{API}/{appointment_id}").json()["prescription_file"]

    assert filename.endswith(".jpg")
    served = client.get(f"/uploads/{filename}")
    assert served.status_code == 200
    assert served.content == b"\xff\xd8jpeg"


def test_oversized_prescription_rejected(client):
    response = _create(
        client, files={"prescription": ("big.png", b"x" * 4096, "image/png")}
    )

    assert response.status_code == 400
    assert client.get(API).json() == []


def test_unexpected_failure_returns_generic_500(client, monkeypatch):
    from ibotika.services.v1 import AppointmentService

    async def _boom(self):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(AppointmentService, "list_appointments", _boom)

    response = client.get(API)
    assert response.status_code == 500
    assert response.json()["message"] == "Unexpected server error"
    assert "connection reset" not in response.text


def test_request_id_header_and_health(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["status"] == "Healthy"
    assert response.json()["database"]["healthy"] is True
    assert "Server-Timing" in response.headers


def test_metrics_reports_logging_and_pool(client):
    body = client.get("/metrics").json()

    assert {"logger", "persistence", "backends", "database"} <= body.keys()
    assert body["database"]["url"].startswith("sqlite+aiosqlite:///")


def test_single_appointment_exposes_sql_timing(client):
    appointment_id = _create(client).json()["id"]

    response = client.get(f"{API}/{appointment_id}")

    assert "sql;dur=" in response.headers["Server-Timing"]
