# ibotika/client/admin_dashboard.py
"""
Admin dashboard: full CRUD over appointments plus the numbers behind the
metric cards and the two monthly line charts.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Optional

from common.logger import get_app_logger
from .api_client import (
    ApiClientError,
    AppointmentApiClient,
    FormValue,
    PrescriptionUpload,
)

logger = get_app_logger(__name__)

UNKNOWN_STATUS = "Unknown"


@dataclass(frozen=True)
class DayCounters:
    yesterday: int
    today: int
    tomorrow: int


@dataclass(frozen=True)
class MonthlySeries:
    """
    Chart data for the current calendar month.

    ``labels`` are the days that have at least one appointment, ascending.
    ``daily_counts`` and every list in ``status_counts`` line up with them.
    """

    labels: list[str] = field(default_factory=list)
    daily_counts: list[int] = field(default_factory=list)
    status_counts: dict[str, list[int]] = field(default_factory=dict)


class AdminDashboard:
    def __init__(
        self,
        client: AppointmentApiClient,
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self._today = today
        self.appointments: list[dict[str, Any]] = []
        self.is_loading = False
        self.error = ""

    def refresh(self) -> None:
        self.is_loading = True
        try:
            self.appointments = self.client.fetch_appointments()
            self.error = ""
        except ApiClientError as exc:
            logger.error("Error fetching appointments", error=exc.message)
            self.error = exc.message
        finally:
            self.is_loading = False

    def save(
        self,
        form: dict[str, FormValue],
        appointment_id: Optional[int] = None,
        prescription: Optional[PrescriptionUpload] = None,
    ) -> bool:
        """Create (no id) or edit (with id), then re-fetch."""
        try:
            if appointment_id is None:
                self.client.create_appointment(form, prescription)
            else:
                self.client.update_appointment(appointment_id, form, prescription)
        except ApiClientError as exc:
            logger.error(
                "Error saving appointment",
                appointment_id=appointment_id,
                error=exc.message,
            )
            self.error = exc.message
            return False

        self.refresh()
        return True

    def delete(self, appointment_id: int, confirm: Callable[[], bool]) -> bool:
        """Delete only when ``confirm()`` agrees, then re-fetch."""
        if not confirm():
            return False
        try:
            self.client.delete_appointment(appointment_id)
        except ApiClientError as exc:
            logger.error(
                "Error deleting appointment",
                appointment_id=appointment_id,
                error=exc.message,
            )
            self.error = exc.message
            return False

        self.refresh()
        return True

    def day_counters(self) -> DayCounters:
        today = self._today()
        per_day = Counter(a["date"] for a in self.appointments)
        return DayCounters(
            yesterday=per_day[(today - timedelta(days=1)).isoformat()],
            today=per_day[today.isoformat()],
            tomorrow=per_day[(today + timedelta(days=1)).isoformat()],
        )

    def monthly_series(self) -> MonthlySeries:
        month_prefix = self._today().strftime("%Y-%m")
        in_month = [a for a in self.appointments if a["date"].startswith(month_prefix)]
        if not in_month:
            return MonthlySeries()

        per_day = Counter(a["date"] for a in in_month)
        per_status: dict[str, Counter] = defaultdict(Counter)
        for appointment in in_month:
            per_status[appointment.get("status") or UNKNOWN_STATUS][appointment["date"]] += 1

        labels = sorted(per_day)
        return MonthlySeries(
            labels=labels,
            daily_counts=[per_day[day] for day in labels],
            status_counts={
                status: [counts[day] for day in labels]
                for status, counts in per_status.items()
            },
        )


__all__ = ["AdminDashboard", "DayCounters", "MonthlySeries", "UNKNOWN_STATUS"]
