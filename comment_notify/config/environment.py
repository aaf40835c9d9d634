"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_LOG_FORMATS = ["json", "key-value"]


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        log_level: Optional[str] = None,
        log_format: Optional[str] = None,
        environment: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ):
        self.log_level = log_level
        self.log_format = log_format
        self.environment = environment or "local"
        self.host = host
        self.port = port


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    All variables are optional; unset ones fall back to the YAML/service defaults:
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_FORMAT: Override log format (json, key-value)
    - ENVIRONMENT: Environment label attached to every log record
    - HOST / PORT: Override the HTTP bind address

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If any variable is set to an invalid value
    """
    errors = []

    log_level = os.getenv("LOG_LEVEL")
    log_format = os.getenv("LOG_FORMAT")
    environment = os.getenv("ENVIRONMENT")
    host = os.getenv("HOST")
    port_str = os.getenv("PORT")

    if log_level:
        if log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        else:
            log_level = log_level.upper()

    if log_format:
        log_format = log_format.strip().lower()
        if log_format not in VALID_LOG_FORMATS:
            errors.append(
                f"Invalid LOG_FORMAT: '{log_format}'. Must be one of: {', '.join(VALID_LOG_FORMATS)}"
            )

    port = None
    if port_str:
        try:
            port = int(port_str)
            if port < 1 or port > 65535:
                errors.append(f"Invalid PORT: {port}. Must be between 1 and 65535.")
        except ValueError:
            errors.append(f"Invalid PORT: '{port_str}'. Must be a valid integer.")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Check the values in your .env file",
                "Unset variables you do not need; every variable is optional",
            ],
            source="environment",
        )

    return EnvironmentConfig(
        log_level=log_level,
        log_format=log_format,
        environment=environment,
        host=host or None,
        port=port,
    )
