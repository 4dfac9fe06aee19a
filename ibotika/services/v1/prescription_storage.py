# ibotika/services/v1/prescription_storage.py
"""
Flat-directory storage for prescription attachments.

Files are written under generated names and referenced from the
``appointments.prescription_file`` column by name only. Nothing here ever
deletes a file: replaced or deleted appointments leave their upload behind.
"""

import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from common import StorageError, UploadConfig, ValidationError, get_app_logger

logger = get_app_logger(__name__)

_EXTENSION_PATTERN = re.compile(r"^\.[a-z0-9]{1,10}$")


@dataclass(frozen=True)
class Attachment:
    """An uploaded file as received from the client."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        # Browsers post an empty part for an untouched file input
        return not self.filename and not self.content

    @property
    def size(self) -> int:
        return len(self.content)


class PrescriptionStorage:
    def __init__(self, directory: Path, max_bytes: int):
        self.directory = Path(directory)
        self.max_bytes = max_bytes
        self.directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, config: UploadConfig) -> "PrescriptionStorage":
        return cls(directory=config.directory, max_bytes=config.max_bytes)

    @staticmethod
    def generate_filename(original_name: str) -> str:
        """
        ``<epoch-millis>-<8 hex chars><ext>``; the extension is kept only when
        it looks like one (letters/digits, at most 10 chars).
        """
        suffix = Path(original_name or "").suffix.lower()
        if not _EXTENSION_PATTERN.match(suffix):
            suffix = ""
        return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}{suffix}"

    def save(self, attachment: Attachment) -> str:
        """
        Write the attachment and return its generated filename.

        Raises:
            ValidationError: If the file is larger than the configured limit
            StorageError: If the file cannot be written
        """
        if attachment.size > self.max_bytes:
            raise ValidationError(
                f"Prescription file is too large (max {self.max_bytes} bytes)"
            )

        filename = self.generate_filename(attachment.filename)
        try:
            self.path_for(filename).write_bytes(attachment.content)
        except OSError as exc:
            logger.error(
                "Failed to write prescription file",
                filename=filename,
                error=str(exc),
            )
            raise StorageError() from exc

        logger.info(
            "Prescription stored",
            filename=filename,
            original_name=attachment.filename,
            size=attachment.size,
        )
        return filename

    def path_for(self, filename: str) -> Path:
        # Only bare names live in the directory; strip any path the caller sent
        return self.directory / Path(filename).name

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()


__all__ = ["Attachment", "PrescriptionStorage"]
