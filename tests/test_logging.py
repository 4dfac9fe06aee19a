import json
from datetime import date

from common.logger.log_backends import FileBackend
from common.logger.log_backends.file_backend import get_week_date_range
from common.logger.logger_middleware import RequestTimer


def test_week_range():
    assert get_week_date_range(date(2026, 10, 21)) == (date(2026, 10, 19), date(2026, 10, 25), 43)


def test_file_backend_appends_json_lines(tmp_path):
    backend = FileBackend(log_dir=str(tmp_path))

    assert backend.write({"date": "2026-10-21", "message": "Appointment created", "appointment_id": 4})
    assert backend.write({"date": "2026-10-22", "message": "Appointment cancelled", "day": date(2026, 10, 22)})

    log_file = tmp_path / "wk43_2026-10-19--2026-10-25.json"
    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [line["message"] for line in lines] == ["Appointment created", "Appointment cancelled"]
    assert lines[1]["day"] == "2026-10-22"
    assert backend.get_metrics()["total_writes"] == 2


def test_request_timer_accumulates_and_formats():
    timer = RequestTimer()
    timer.add("sql", 1.5)
    timer.add("sql", 2.0)
    timer.add("query_count", 1)
    timer.add("query_count", 1)

    assert timer.timings == {"sql": 3.5, "query_count": 2}
    assert timer.format_server_timing() == "sql;dur=3.50"


def test_custom_backend_registration():
    from common.logger.log_backends import LogBackend, register_backend
    from common.logger.log_backends import registry

    class MemoryBackend(LogBackend):
        name = "memory"

        def write(self, log_entry):
            return True

        def get_metrics(self):
            return {}

    register_backend("memory", MemoryBackend)
    try:
        assert registry._BACKEND_REGISTRY["memory"] is MemoryBackend
    finally:
        registry._BACKEND_REGISTRY.pop("memory")
