import re

import pytest

from common.api_error import StorageError, ValidationError
from ibotika.services.v1 import Attachment, PrescriptionStorage


def test_save_writes_file_under_generated_name(storage):
    name = storage.save(Attachment("Scan.PDF", b"%PDF-1.4 data", "application/pdf"))

    assert re.fullmatch(r"\d{13}-[0-9a-f]{8}\.pdf", name)
    assert storage.exists(name)
    assert storage.path_for(name).read_bytes() == b"%PDF-1.4 data"


def test_generated_names_are_unique():
    names = {PrescriptionStorage.generate_filename("rx.png") for _ in range(50)}
    assert len(names) == 50


@pytest.mark.parametrize("original", ["", "noext", "weird.tar gz", "../../etc/passwd"])
def test_odd_extensions_are_dropped(original):
    assert re.fullmatch(r"\d{13}-[0-9a-f]{8}", PrescriptionStorage.generate_filename(original))


def test_oversized_file_rejected_and_not_written(storage):
    with pytest.raises(ValidationError):
        storage.save(Attachment("big.jpg", b"x" * 2048))

    assert list(storage.directory.iterdir()) == []


def test_path_for_strips_directories(storage):
    assert storage.path_for("../outside.txt") == storage.directory / "outside.txt"


def test_write_failure_raises_storage_error(storage, monkeypatch):
    def _fail(self, data):
        raise OSError("disk full")

    monkeypatch.setattr(type(storage.directory), "write_bytes", _fail)

    with pytest.raises(StorageError) as exc_info:
        storage.save(Attachment("rx.png", b"data"))
    assert exc_info.value.status_code == 500


def test_empty_attachment_detection():
    assert Attachment("", b"").is_empty
    assert not Attachment("rx.png", b"").is_empty
