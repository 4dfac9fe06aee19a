"""
Alembic environment for the appointments schema.

Reads the database settings through the application's own config layer, so
migrations and the server always target the same database.
"""

import os
import sys
from logging.config import fileConfig
from typing import Any
from sqlalchemy import engine_from_config, pool
from alembic import context
from dotenv import load_dotenv

# Running `alembic` from the repo root does not put it on sys.path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from ibotika.db.models import DbBaseModel
from common.config import DatabaseConfig, get_config, initialize_config
from common.api_error import ConfigurationError

load_dotenv()
try:
    initialize_config()
except ConfigurationError as e:
    print(f"FATAL: Configuration error:\n{e}")
    sys.exit(1)

config = context.config
app_config = get_config()

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = DbBaseModel.metadata

# Async drivers used by the app -> sync drivers Alembic can drive
_SYNC_PREFIXES = {
    "postgresql+asyncpg://": "postgresql://",  # psycopg2
    "postgresql+psycopg://": "postgresql+psycopg://",
    "sqlite+aiosqlite://": "sqlite://",
}


def _database_config() -> DatabaseConfig:
    if not app_config.database:
        raise RuntimeError(
            "Database configuration not found in environment (set DB_HOST or DB_DRIVER=aiosqlite)"
        )
    return app_config.database


def get_sync_url() -> str:
    url = _database_config().get_connection_url(include_password=True)
    for async_prefix, sync_prefix in _SYNC_PREFIXES.items():
        if url.startswith(async_prefix):
            return sync_prefix + url[len(async_prefix):]
    return url


def get_connect_args() -> dict[str, Any]:
    """psycopg2 SSL parameters matching the app's DB_SSL_* settings."""
    db_config = _database_config()
    connect_args: dict[str, Any] = {}

    if db_config.driver.is_sqlite or not db_config.ssl_mode:
        return connect_args

    ssl_mode = db_config.ssl_mode.value
    if ssl_mode == "disable":
        connect_args["sslmode"] = "disable"
    elif ssl_mode in ("require", "verify-ca", "verify-full"):
        connect_args["sslmode"] = ssl_mode
        if db_config.ssl_ca_path:
            connect_args["sslrootcert"] = str(db_config.ssl_ca_path)
        if db_config.ssl_cert_path:
            connect_args["sslcert"] = str(db_config.ssl_cert_path)
        if db_config.ssl_key_path:
            connect_args["sslkey"] = str(db_config.ssl_key_path)

    return connect_args


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of running it."""
    url = get_sync_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    sync_url = get_sync_url()

    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = sync_url

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        connect_args=get_connect_args(),
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            # SQLite cannot ALTER most things in place
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
