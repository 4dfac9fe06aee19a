# common/config/app_config.py
"""
Complete application configuration with validation.
Database configuration with SSL support, plus prescription upload settings.
"""

from typing import Optional, Any
from pydantic import BaseModel, Field, field_validator, model_validator, SecretStr
from .config_types import EnvLogLevel, DbDriver, SslMode, Environment
from .env_config import require_env, get_env, get_int_env
from .logging_config import LoggingConfig
from pathlib import Path

_DEFAULT_UPLOAD_DIR = "uploads"
_DEFAULT_UPLOAD_MAX_BYTES = 5 * 1024 * 1024


class DatabaseConfig(BaseModel):
    """
    Database configuration with SSL/TLS support.

    PostgreSQL drivers need host and port. The aiosqlite driver treats
    ``name`` as the database file path and ignores host/port.
    """

    # Basic connection
    host: Optional[str] = Field(default=None, min_length=1)
    port: Optional[int] = Field(default=None, gt=0, le=65535)
    name: str = Field(..., min_length=1, description="Database name or SQLite file")
    slow_query_threshold: float = Field(
        ..., description="Threshold (ms) for a query to be considered slow"
    )
    # Authentication (keep separate from URL for security)
    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[SecretStr] = Field(default=None)  # Pydantic hides this in logs

    # Connection pooling
    pool_size: int = Field(..., ge=1, le=100)
    max_overflow: int = Field(..., ge=0, le=100)
    pool_timeout: int = Field(..., ge=1, le=300)
    pool_recycle: int = Field(..., ge=300)  # Min 5 minutes

    # SSL/TLS Configuration
    ssl_mode: Optional[SslMode] = Field(default=None)
    ssl_cert_path: Optional[Path] = Field(default=None)
    ssl_key_path: Optional[Path] = Field(default=None)
    ssl_ca_path: Optional[Path] = Field(default=None)

    driver: DbDriver = Field(...)

    model_config = {"frozen": True}

    @field_validator("ssl_cert_path", "ssl_key_path", "ssl_ca_path")
    @classmethod
    def validate_ssl_paths(cls, v: Optional[Path]) -> Optional[Path]:
        """Validate SSL certificate paths exist."""
        if v is not None and not v.exists():
            raise ValueError(f"SSL file not found: {v}")
        return v

    @model_validator(mode="after")
    def validate_server_address(self) -> "DatabaseConfig":
        if not self.driver.is_sqlite and (self.host is None or self.port is None):
            raise ValueError(f"host and port are required for driver {self.driver.value}")
        return self

    def get_connection_url(self, include_password: bool = False) -> str:
        """
        Build SQLAlchemy connection URL.

        Args:
            include_password: If True, include password in URL (use for actual connections)
                            If False, mask it (use for logging)

        Returns:
            Database URL string
        """
        if self.driver.is_sqlite:
            return f"sqlite+aiosqlite:///{self.name}"

        if self.username:
            if include_password and self.password:
                auth = f"{self.username}:{self.password.get_secret_value()}"
            else:
                auth = f"{self.username}:****"
            return f"postgresql+{self.driver.value}://{auth}@{self.host}:{self.port}/{self.name}"

        return f"postgresql+{self.driver.value}://{self.host}:{self.port}/{self.name}"

    def to_dict_safe(self) -> dict[str, Any]:
        """Convert to dict with sensitive data masked (safe for logging)."""
        data = self.model_dump()
        if data.get("password"):
            data["password"] = "****"
        return data


class UploadConfig(BaseModel):
    """Where prescription attachments are written and how large they may be."""

    directory: Path
    max_bytes: int = Field(..., gt=0)

    model_config = {"frozen": True}


class AppConfig(BaseModel):
    """
    Complete application configuration.

    All configuration is loaded from environment variables and validated
    at startup. Invalid configuration will fail fast with clear error messages.
    """

    app_title: str = Field(..., min_length=1)
    app_version: str = Field(..., pattern=r"^\d+\.\d+\.\d+$")  # Semantic versioning
    environment: str = Field(..., pattern="^(development|staging|production)$")

    logging: LoggingConfig
    uploads: UploadConfig
    database: Optional[DatabaseConfig] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_production_settings(self) -> "AppConfig":
        """
        Validate production-specific requirements.
        """
        if self.environment == "production":
            if self.database is None:
                raise ValueError("Database config required in production")
            if self.database.driver.is_sqlite:
                raise ValueError("SQLite is not supported in production")
            if self.logging.log_level == EnvLogLevel.DEBUG:
                raise ValueError("DEBUG log level not allowed in production")
        return self


def load_database_config(environment: Environment) -> Optional[DatabaseConfig]:
    """
    Load database configuration from environment.

    Args:
        environment: Environment enum to determine required vs optional fields

    Environment variables:
    Required:
    - DB_DRIVER: Database driver (asyncpg, psycopg, aiosqlite)
    - DB_NAME: Database name (file path for aiosqlite)
    - DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT, DB_POOL_RECYCLE
    - SLOW_QUERY_THRESHOLD: Milliseconds before a query is logged as slow

    Required for PostgreSQL drivers:
    - DB_HOST, DB_PORT

    Optional (dev) / Required (prod):
    - DB_USER, DB_PASSWORD, DB_SSL_MODE

    Optional:
    - DB_SSL_CERT, DB_SSL_KEY, DB_SSL_CA: certificate paths
    """
    host = get_env("DB_HOST")
    driver_str = get_env("DB_DRIVER")

    # Database not configured at all
    if not host and driver_str != DbDriver.AIOSQLITE.value:
        return None

    driver_str = require_env("DB_DRIVER")
    try:
        driver = DbDriver(driver_str)
    except ValueError:
        valid_drivers = [d.value for d in DbDriver]
        raise ValueError(
            f"Invalid DB_DRIVER: {driver_str}. Must be one of: {valid_drivers}"
        )

    name = require_env("DB_NAME")
    port: Optional[int] = None
    if not driver.is_sqlite:
        port = int(require_env("DB_PORT"))

    username: Optional[str] = None
    password_str: Optional[str] = None
    ssl_mode_str: Optional[str] = None

    if environment.is_production:
        # Production: credentials are REQUIRED
        username = require_env("DB_USER")
        password_str = require_env("DB_PASSWORD")
        ssl_mode_str = require_env("DB_SSL_MODE")
    else:
        username = get_env("DB_USER")
        password_str = get_env("DB_PASSWORD")
        ssl_mode_str = get_env("DB_SSL_MODE")

    ssl_mode: Optional[SslMode] = None
    if ssl_mode_str:
        try:
            ssl_mode = SslMode(ssl_mode_str)
        except ValueError:
            valid_modes = [m.value for m in SslMode]
            raise ValueError(
                f"Invalid DB_SSL_MODE: {ssl_mode_str}. Must be one of: {valid_modes}"
            )

    password = SecretStr(password_str) if password_str else None

    ssl_cert = get_env("DB_SSL_CERT")
    ssl_key = get_env("DB_SSL_KEY")
    ssl_ca = get_env("DB_SSL_CA")

    return DatabaseConfig(
        host=host,
        port=port,
        name=name,
        username=username,
        password=password,
        pool_size=int(require_env("DB_POOL_SIZE")),
        max_overflow=int(require_env("DB_MAX_OVERFLOW")),
        pool_timeout=int(require_env("DB_POOL_TIMEOUT")),
        pool_recycle=int(require_env("DB_POOL_RECYCLE")),
        ssl_mode=ssl_mode,
        ssl_cert_path=Path(ssl_cert) if ssl_cert else None,
        ssl_key_path=Path(ssl_key) if ssl_key else None,
        ssl_ca_path=Path(ssl_ca) if ssl_ca else None,
        driver=driver,
        slow_query_threshold=float(require_env("SLOW_QUERY_THRESHOLD")),
    )


def load_upload_config() -> UploadConfig:
    """
    Load prescription upload settings.

    Environment variables (both optional):
    - UPLOAD_DIR: Directory for uploaded files (default: ./uploads)
    - UPLOAD_MAX_BYTES: Largest accepted attachment (default: 5 MiB)
    """
    return UploadConfig(
        directory=Path(get_env("UPLOAD_DIR") or _DEFAULT_UPLOAD_DIR),
        max_bytes=get_int_env("UPLOAD_MAX_BYTES", _DEFAULT_UPLOAD_MAX_BYTES),
    )


def load_app_config() -> AppConfig:
    """
    Load complete application configuration.

    Returns:
        Validated AppConfig instance

    Raises:
        ValidationError: If configuration is invalid
        ConfigurationError: If required env vars are missing
    """
    from .logging_config import load_logging_config

    env_str = require_env("ENVIRONMENT")

    try:
        environment = Environment(env_str)
    except ValueError:
        valid_envs = [e.value for e in Environment]
        raise ValueError(
            f"Invalid ENVIRONMENT: {env_str}. Must be one of: {valid_envs}"
        )

    return AppConfig(
        app_title=require_env("APP_TITLE"),
        app_version=require_env("APP_VERSION"),
        environment=environment.value,
        logging=load_logging_config(),
        uploads=load_upload_config(),
        database=load_database_config(environment),
    )


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "UploadConfig",
    "load_app_config",
    "load_database_config",
    "load_upload_config",
]
