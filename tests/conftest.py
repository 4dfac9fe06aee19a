import os
import tempfile

# Config is read once at import of main, so the environment goes first
_TEST_ROOT = tempfile.mkdtemp(prefix="ibotika-tests-")
os.environ.update(
    {
        "ENVIRONMENT": "development",
        "APP_TITLE": "Ibotika Test",
        "APP_VERSION": "1.0.0",
        "LOG_LEVEL": "WARNING",
        "LOG_BACKENDS": "file",
        "LOG_FOLDER_PATH": os.path.join(_TEST_ROOT, "logs"),
        "UPLOAD_DIR": os.path.join(_TEST_ROOT, "uploads"),
        "UPLOAD_MAX_BYTES": "1024",
    }
)
for _key in ("DB_HOST", "DB_DRIVER", "DB_PORT", "DB_NAME"):
    os.environ.pop(_key, None)

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from main import app
from ibotika.db import DbManager
from ibotika.db.models import DbBaseModel
from ibotika.services.v1 import PrescriptionStorage


def _create_schema(db_path: Path) -> None:
    engine = create_engine(f"sqlite:///{db_path}")
    DbBaseModel.metadata.create_all(engine)
    engine.dispose()


@pytest.fixture
def db_manager(tmp_path):
    db_path = tmp_path / "test.db"
    _create_schema(db_path)
    return DbManager(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)


@pytest.fixture
def client(db_manager):
    """TestClient without lifespan: the fixture supplies the DbManager."""
    app.state.db_manager = db_manager
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        del app.state.db_manager


@pytest.fixture
def upload_dir() -> Path:
    return app.state.prescription_storage.directory


@pytest.fixture
def storage(tmp_path) -> PrescriptionStorage:
    return PrescriptionStorage(tmp_path / "uploads", max_bytes=1024)


@pytest.fixture
async def session(db_manager):
    async with db_manager.session_maker() as session:
        yield session
