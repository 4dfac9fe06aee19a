# common/config/logging_config.py
from dataclasses import dataclass
from typing import Optional
from .env_config import require_env, get_env
from .config_types import EnvLogLevel, EnvLogBackends
from common.api_error import ConfigurationError

_default_log_level_env_key = "LOG_LEVEL"
_default_log_backends_env_key = "LOG_BACKENDS"
_default_log_folder_env_key = "LOG_FOLDER_PATH"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    log_level: EnvLogLevel
    log_backends: tuple[EnvLogBackends, ...]
    log_folder: Optional[str] = None

    @property
    def level_value(self) -> str:
        """Get string value of log level."""
        return self.log_level.value

    @property
    def level_int(self) -> int:
        """Get numeric log level."""
        return self.log_level.level


def load_logging_config(
    log_level_env_key: str = _default_log_level_env_key,
    log_backends_env_key: str = _default_log_backends_env_key,
) -> LoggingConfig:
    """
    Load logging configuration from environment.

    LOG_BACKENDS is a comma-separated list (``file`` when unset). The
    persistence registry reads the same variable lazily, so validating it
    here makes a typo fail at startup instead of on the first log write.

    Raises:
        ConfigurationError: If LOG_LEVEL is missing or a value is invalid
    """
    try:
        log_level_val = require_env(log_level_env_key).upper()
        backends_val = get_env(log_backends_env_key) or EnvLogBackends.FILE.value

        return LoggingConfig(
            log_level=EnvLogLevel(log_level_val),
            log_backends=tuple(
                EnvLogBackends(name.strip().lower())
                for name in backends_val.split(",")
                if name.strip()
            ),
            log_folder=get_env(_default_log_folder_env_key),
        )

    except ValueError as exc:
        valid_levels = ", ".join(level.value for level in EnvLogLevel)
        valid_backends = ", ".join(backend.value for backend in EnvLogBackends)

        raise ConfigurationError(
            f"Invalid logging configuration. "
            f"{log_level_env_key} must be one of [{valid_levels}], "
            f"{log_backends_env_key} entries must be in [{valid_backends}]"
        ) from exc


__all__ = [
    "LoggingConfig",
    "load_logging_config",
]
