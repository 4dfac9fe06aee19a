# ibotika/client/api_client.py
"""
Thin ``requests`` wrapper around the appointments REST API.

Each call raises ApiClientError on failure, carrying the server's
``message`` when there is one and a per-operation fallback otherwise.
Nothing is retried.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

import requests

FormValue = Union[str, int, None]


class ApiClientError(Exception):
    """
    A failed API call.

    Attributes:
        message: Text suitable for showing to the user
        status_code: HTTP status, None when the server was not reached
        server_message: The ``message`` field of the error body, if any
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.server_message = server_message


@dataclass(frozen=True)
class PrescriptionUpload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class AppointmentApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def appointments_url(self) -> str:
        return f"{self.base_url}/api/appointments"

    @staticmethod
    def _server_message(response: requests.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return None

    @staticmethod
    def _multipart(
        fields: dict[str, FormValue], prescription: Optional[PrescriptionUpload]
    ) -> list[tuple[str, tuple[Optional[str], Any, Optional[str]]]]:
        # (None, value) parts are plain form fields; requests still sends multipart
        parts: list[tuple[str, tuple[Optional[str], Any, Optional[str]]]] = [
            (key, (None, str(value), None))
            for key, value in fields.items()
            if value is not None
        ]
        if prescription is not None:
            parts.append(
                (
                    "prescription",
                    (prescription.filename, prescription.content, prescription.content_type),
                )
            )
        return parts

    def _request(self, method: str, url: str, fallback_message: str, **kwargs: Any) -> Any:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ApiClientError(fallback_message) from exc

        if response.status_code >= 400:
            server_message = self._server_message(response)
            raise ApiClientError(
                server_message or fallback_message,
                status_code=response.status_code,
                server_message=server_message,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ApiClientError(fallback_message, status_code=response.status_code) from exc

    def create_appointment(
        self,
        fields: dict[str, FormValue],
        prescription: Optional[PrescriptionUpload] = None,
    ) -> dict[str, Any]:
        """POST the booking form; returns ``{"message", "id"}``."""
        return self._request(
            "POST",
            self.appointments_url,
            "Error creating appointment",
            files=self._multipart(fields, prescription),
        )

    def fetch_appointments(self) -> list[dict[str, Any]]:
        return self._request("GET", self.appointments_url, "Error fetching appointments")

    def get_appointment(self, appointment_id: int) -> dict[str, Any]:
        return self._request(
            "GET",
            f"{self.appointments_url}/{appointment_id}",
            "Error fetching appointment",
        )

    def update_appointment(
        self,
        appointment_id: int,
        fields: dict[str, FormValue],
        prescription: Optional[PrescriptionUpload] = None,
    ) -> dict[str, Any]:
        """
        PUT the edit form. Keys left out of ``fields`` keep their stored
        value on the server.
        """
        return self._request(
            "PUT",
            f"{self.appointments_url}/{appointment_id}",
            "Error updating appointment",
            files=self._multipart(fields, prescription),
        )

    def cancel_appointment(self, appointment_id: int) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"{self.appointments_url}/{appointment_id}/cancel",
            "Error cancelling appointment",
        )

    def delete_appointment(self, appointment_id: int) -> dict[str, Any]:
        return self._request(
            "DELETE",
            f"{self.appointments_url}/{appointment_id}",
            "Error deleting appointment",
        )


__all__ = [
    "ApiClientError",
    "AppointmentApiClient",
    "PrescriptionUpload",
]
