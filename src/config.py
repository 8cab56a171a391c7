"""Runtime configuration resolved from the process environment.

Values are read case-insensitively from the environment first and from an
optional ``.env`` file second, so a real environment variable always wins over
the file.  Every setting has a default: a missing variable is logged and
defaulted, never treated as a startup failure.
"""

import logging
import math
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.database import DEFAULT_DB_PORT, ConnectionDescriptor

logger = logging.getLogger(__name__)

DEFAULT_LISTEN_PORT = 8080
DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0

# Variables whose absence is reported at startup, keyed by field name.
_REPORTED_DEFAULTS: dict[str, str] = {
    "port": "PORT",
    "db_host": "DB_HOST",
    "db_name": "DB_NAME",
    "db_username": "DB_USERNAME",
    "db_password": "DB_PASSWORD",
    "db_port": "DB_PORT",
}

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})


def _parse_port(value: Any, *, name: str, default: int) -> int:
    """Return *value* as a TCP port, or *default* when it is blank or unparsable."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        port = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r, defaulting to %d", name, value, default)
        return default
    if not 0 < port < 65536:
        logger.warning("%s %d is out of range, defaulting to %d", name, port, default)
        return default
    return port


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # HTTP listener
    port: int = DEFAULT_LISTEN_PORT
    frontend_origin: str = "http://localhost:3000"

    # Database
    db_host: str = "/tmp"
    db_name: str = "testdb"
    db_username: str = "postgres"
    db_password: str = Field(default="postgres", repr=False)
    db_port: int = DEFAULT_DB_PORT
    db_connect_timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS
    # Abort startup instead of serving in degraded mode when the probe fails.
    db_required: bool = False

    # App
    app_name: str = "test-backend"
    version: str = "1.0.0"
    log_level: str = "INFO"

    @field_validator("port", mode="before")
    @classmethod
    def _listen_port(cls, value: Any) -> int:
        return _parse_port(value, name="PORT", default=DEFAULT_LISTEN_PORT)

    @field_validator("db_port", mode="before")
    @classmethod
    def _database_port(cls, value: Any) -> int:
        return _parse_port(value, name="DB_PORT", default=DEFAULT_DB_PORT)

    @field_validator("db_connect_timeout", mode="before")
    @classmethod
    def _probe_timeout(cls, value: Any) -> float:
        try:
            timeout = float(value)
        except (TypeError, ValueError):
            timeout = math.nan
        if not math.isfinite(timeout) or timeout <= 0:
            logger.warning(
                "Invalid DB_CONNECT_TIMEOUT %r, defaulting to %.1f",
                value,
                DEFAULT_PROBE_TIMEOUT_SECONDS,
            )
            return DEFAULT_PROBE_TIMEOUT_SECONDS
        return timeout

    @field_validator("db_required", mode="before")
    @classmethod
    def _strict_startup(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        flag = str(value).strip().lower()
        if flag in _TRUE_VALUES:
            return True
        if flag not in _FALSE_VALUES:
            logger.warning("Invalid DB_REQUIRED %r, defaulting to false", value)
        return False

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: Any) -> str:
        level = str(value).strip().upper()
        if level not in logging.getLevelNamesMapping():
            logger.warning("Unknown LOG_LEVEL %r, defaulting to INFO", value)
            return "INFO"
        return level

    @model_validator(mode="after")
    def _report_defaults(self) -> "Settings":
        for field, variable in _REPORTED_DEFAULTS.items():
            if field not in self.model_fields_set:
                logger.warning("%s not set, using default", variable)
        return self

    def connection_descriptor(self) -> ConnectionDescriptor:
        """Assemble the database connection descriptor from these settings.

        The port is only carried for network hosts; a unix-socket directory
        (any host starting with ``/``) has no meaningful TCP port.
        """
        descriptor = ConnectionDescriptor(
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            username=self.db_username,
            password=self.db_password,
        )
        if descriptor.uses_unix_socket:
            return descriptor.model_copy(update={"port": None})
        return descriptor
