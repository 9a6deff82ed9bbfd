"""Environment-driven settings.

The proxy deployment configures us with a handful of environment variables;
empty values mean "use the default", same as leaving them unset.
"""
from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from . import __version__

__all__ = [
    "ERROR_FILES_PATH_VAR",
    "DEFAULT_FORMAT_VAR",
    "DEBUG_VAR",
    "ConfigurationError",
    "Settings",
    "load_settings",
]

ERROR_FILES_PATH_VAR = "ERROR_FILES_PATH"
DEFAULT_FORMAT_VAR = "DEFAULT_RESPONSE_FORMAT"
DEBUG_VAR = "DEBUG"


class ConfigurationError(RuntimeError):
    """Raised when the service cannot start with the given configuration."""


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    error_files_path: Path = Path("/www")
    default_response_format: str = "text/html"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)
    app_version: str = __version__


def _env(name: str) -> str | None:
    """Return the variable's value, treating empty strings as unset."""
    val = os.getenv(name)
    return val if val else None


def load_settings() -> Settings:
    """Build `Settings` from the process environment.

    Raises:
        ConfigurationError: if a variable is present but cannot be parsed.
    """
    raw = {
        "error_files_path": _env(ERROR_FILES_PATH_VAR),
        "default_response_format": _env(DEFAULT_FORMAT_VAR),
        "log_level": _env("LOG_LEVEL"),
        "host": _env("HOST"),
        "port": _env("PORT"),
        "app_version": _env("APP_VERSION"),
    }
    values = {key: val for key, val in raw.items() if val is not None}
    # Any non-empty DEBUG turns it on, including "0" and "false".
    values["debug"] = _env(DEBUG_VAR) is not None

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e
