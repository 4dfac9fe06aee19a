# common/config/initialize_config.py
"""
Configuration initialization module.

Handles the complete application configuration lifecycle.
"""
from typing import Optional, List
from pydantic import ValidationError
from .app_config import AppConfig, load_app_config
from .structlog_config import configure_structlog
from .config_types import Environment
from common.api_error import ConfigurationError


class _ConfigState:
    """
    Process-wide holder for the validated application configuration.
    """

    _instance: Optional["_ConfigState"] = None
    _config: Optional[AppConfig]

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = None
        return cls._instance

    @property
    def config(self) -> AppConfig:
        """Get application configuration."""
        if not self._config:
            raise RuntimeError(
                "Configuration not initialized. Call initialize_config() at startup."
            )
        return self._config

    def set_config(self, config: AppConfig) -> None:
        self._config = config


_state = _ConfigState()


def initialize_config() -> None:
    """
    Initialize and validate all application configuration.

    This MUST be called once at application startup before any other code.
    Configuration is validated using Pydantic and will fail fast with clear
    error messages if invalid.

    Safe to call again in the same process (e.g. uvicorn reload, test
    sessions): the configuration is reloaded and structlog keeps its level.

    Raises:
        ConfigurationError: If configuration is invalid or missing
    """
    try:
        config = load_app_config()
    except ValidationError as e:
        # Convert Pydantic errors to ConfigurationError with better messages
        errors: List[str] = []
        for error in e.errors():
            field = ".".join(str(x) for x in error["loc"])
            errors.append(f"{field}: {error['msg']}")

        raise ConfigurationError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {err}" for err in errors)
        ) from e
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    configure_structlog(
        config.logging.level_int,
        json_logs=config.environment == Environment.PRODUCTION.value,
    )
    _state.set_config(config)


def get_config() -> AppConfig:
    """
    Get validated application configuration.

    Raises:
        RuntimeError: If not initialized
    """
    return _state.config


__all__ = ["initialize_config", "get_config"]
